"""Wire/display timestamp conversion."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

# RFC3339, with and without fractional seconds; %z accepts "Z" and "+01:00"
WIRE_FORMATS = ("%Y-%m-%dT%H:%M:%S%z", "%Y-%m-%dT%H:%M:%S.%f%z")
# RFC1123 as rendered by the C locale
DISPLAY_FORMAT = "%a, %d %b %Y %H:%M:%S %Z"
DISPLAY_TIMEZONE = "Europe/Berlin"


def parse_wire_time(value: str) -> datetime:
    """Parse an RFC3339 timestamp; raises ``ValueError`` on any other shape."""

    text = value.strip()
    for fmt in WIRE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"timestamp {value!r} is not RFC3339")


def format_display_time(value: str, timezone: str = DISPLAY_TIMEZONE) -> str:
    """Render a wire timestamp as RFC1123 in ``timezone``."""

    moment = parse_wire_time(value).astimezone(ZoneInfo(timezone))
    return moment.strftime(DISPLAY_FORMAT)


__all__ = ["DISPLAY_FORMAT", "DISPLAY_TIMEZONE", "format_display_time", "parse_wire_time"]
