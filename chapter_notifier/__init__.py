"""Watch a manga release page and announce new chapters on Discord."""

__version__ = "0.4.0"
