"""Configuration loading helpers for chapter-notifier."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .models import AppConfig

CONFIG_FILENAME = "config.yaml"
ENV_PREFIX = "CHAPTER_NOTIFIER__"
HOME_ENV = "CHAPTER_NOTIFIER_HOME"

CONFIG_TEMPLATE = """\
# config.yaml

discord:
  # Discord bot token (required)
  token: ""
  # Channel receiving new chapter notifications (required)
  channel_id: ""
  # Channel receiving error/resolved notifications.
  # Optional, defaults to channel_id
  #error_channel_id: ""

# Collected chapters database file (required).
# Relative paths are resolved against this directory.
collected_chapters_db: "collected_chapters.db"

logging:
  # Options: "ERROR", "WARN", "INFO", "DEBUG", "TRACE"
  level: "DEBUG"
  # If not defined, logs to stdout only
  #path: "logs/chapter-notifier.log"
  # Max log size in megabytes
  #max_size: 50
  # Max amount of old log files
  #max_backups: 3

# Default: [ "One Piece", "Jujutsu Kaisen" ]
#watched_mangas:
#  - "One Piece"
#  - "Jujutsu Kaisen"

# Time between checks in minutes
#sleep_timer: 15
"""

# env suffix -> (path into the config mapping, kind)
_ENV_FIELDS: dict[str, tuple[tuple[str, ...], str]] = {
    "DISCORD_TOKEN": (("discord", "token"), "str"),
    "DISCORD_CHANNEL_ID": (("discord", "channel_id"), "str"),
    "DISCORD_ERROR_CHANNEL_ID": (("discord", "error_channel_id"), "str"),
    "COLLECTED_CHAPTERS_DB": (("collected_chapters_db",), "str"),
    "LOG_LEVEL": (("logging", "level"), "str"),
    "LOG_PATH": (("logging", "path"), "str"),
    "LOG_MAX_SIZE": (("logging", "max_size"), "int"),
    "LOG_MAX_BACKUPS": (("logging", "max_backups"), "int"),
    "WATCHED_MANGAS": (("watched_mangas",), "list"),
    "SLEEP_TIMER": (("sleep_timer",), "int"),
}


class ConfigError(RuntimeError):
    """Raised when configuration cannot be read or is incomplete."""


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Could not parse configuration file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {path}")
    return data


def apply_env_overrides(payload: dict, environ: Mapping[str, str]) -> dict:
    """Overlay ``CHAPTER_NOTIFIER__*`` variables onto a raw config mapping."""

    merged = dict(payload)
    for suffix, (keys, kind) in _ENV_FIELDS.items():
        raw = environ.get(ENV_PREFIX + suffix, "")
        if not raw:
            continue
        value: Any
        if kind == "int":
            try:
                value = int(raw)
            except ValueError:
                continue
            if value <= 0:
                continue
        elif kind == "list":
            value = [item.strip() for item in raw.split(",") if item.strip()]
        else:
            value = raw
        target = merged
        for key in keys[:-1]:
            section = target.get(key)
            section = dict(section) if isinstance(section, dict) else {}
            target[key] = section
            target = section
        target[keys[-1]] = value
    return merged


@dataclass(slots=True)
class ConfigLocator:
    """Resolve the configuration directory."""

    config_dir: Path | None = None

    def __post_init__(self) -> None:
        if self.config_dir is not None:
            root = Path(self.config_dir).expanduser()
        else:
            env_root = os.environ.get(HOME_ENV)
            if env_root:
                root = Path(env_root).expanduser()
            else:
                root = Path.home() / ".config" / "chapter-notifier"
        self.config_dir = root.resolve()

    def config_path(self) -> Path:
        return self.config_dir / CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(
        self,
        locator: ConfigLocator | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.locator = locator or ConfigLocator()
        self.environ = os.environ if environ is None else environ

    def ensure_template(self) -> Path:
        """Write the commented template unless a config file already exists."""

        path = self.locator.config_path()
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
        return path

    def load(self, require_complete: bool = True) -> AppConfig:
        path = self.ensure_template()
        payload = apply_env_overrides(_read_file(path), self.environ)
        try:
            config = AppConfig.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc
        if config.collected_chapters_db is not None:
            config.collected_chapters_db = self._resolve(config.collected_chapters_db)
        if config.logging.path is not None:
            config.logging.path = self._resolve(config.logging.path)
        if require_complete:
            missing = config.missing_required()
            if missing:
                raise ConfigError(
                    f"{', '.join(missing)} must be provided in {path} "
                    f"or via {ENV_PREFIX}* environment variables"
                )
        return config

    def _resolve(self, path: Path) -> Path:
        path = path.expanduser()
        if not path.is_absolute():
            return (self.locator.config_dir / path).resolve()
        return path


__all__ = [
    "CONFIG_TEMPLATE",
    "ConfigError",
    "ConfigLocator",
    "ConfigRepository",
    "ENV_PREFIX",
    "apply_env_overrides",
]
