# ABOUTME: Configuration management for kion-cli
# ABOUTME: Loads layered JSON settings, parses durations and writes owner-only files

"""Configuration management for kion-cli."""

import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from kion_cli.errors import ConfigurationError, MissingConfiguration

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"
LOCAL_CONFIG_FILENAME = "kion.json"

_DURATION_UNITS = {
    "h": 3600,
    "m": 60,
    "s": 1,
    "ms": 0.001,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def user_config_dir() -> Path:
    """Directory holding config.json, key.json and the credential cache."""
    override = os.getenv("KION_CONFIG_DIR")
    if override:
        return Path(override)
    return Path.home() / ".config" / "kion"


def parse_duration(value: Any) -> timedelta:
    """Parse a Go-style duration such as "168h", "1h30m" or "45s".

    Plain numbers are taken as seconds.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(seconds=value)
    if not isinstance(value, str):
        raise ValueError(f"invalid duration: {value!r}")

    text = value.strip()
    if re.fullmatch(r"\d+(\.\d+)?", text):
        return timedelta(seconds=float(text))

    parts = _DURATION_PART.findall(text)
    if not parts or "".join(n + u for n, u in parts) != text:
        raise ValueError(f"invalid duration: {value!r}")

    seconds = sum(float(number) * _DURATION_UNITS[unit] for number, unit in parts)
    return timedelta(seconds=seconds)


def format_duration(value: timedelta) -> str:
    """Inverse of parse_duration for whole seconds, e.g. 5400s -> "1h30m"."""
    total = int(value.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)

    text = ""
    if hours:
        text += f"{hours}h"
    if minutes:
        text += f"{minutes}m"
    if seconds or not text:
        text += f"{seconds}s"
    return text


def write_private_json(path: Path, data: dict[str, Any]) -> None:
    """Replace path with data as JSON, readable by the owner only."""
    path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(data, f, indent=2)
        os.chmod(tmp_name, 0o600)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


@dataclass
class Settings:
    """Settings for one invocation, assembled once at process start."""

    host: str | None = None
    idms: int | None = None
    username: str | None = None
    app_api_key_duration: timedelta | None = None
    rotate_app_api_keys: bool = False
    session_duration: timedelta = timedelta(hours=1)
    region: str | None = None
    account_id: str | None = None
    cloud_access_role: str | None = None
    shell: str = "/bin/sh"
    config_dir: Path = field(default_factory=user_config_dir)

    @property
    def config_file(self) -> Path:
        return self.config_dir / CONFIG_FILENAME

    @property
    def key_file(self) -> Path:
        return self.config_dir / "key.json"

    @property
    def cache_file(self) -> Path:
        return self.config_dir / "credential_process_cache.json"

    def require(self, name: str) -> Any:
        """Return a setting by its config-file name, failing when it is unset."""
        value = getattr(self, _attribute_name(name))
        if value is None or (not isinstance(value, bool) and not value):
            raise MissingConfiguration(name)
        return value

    def with_overrides(self, **values: Any) -> "Settings":
        """Copy with command-line values applied; None means "not given"."""
        given = {key: value for key, value in values.items() if value is not None}
        for key in ("app_api_key_duration", "session_duration"):
            if key in given:
                given[key] = parse_duration(given[key])
        return replace(self, **given)

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to the config-file representation."""
        data = {}
        for f in fields(self):
            if f.name == "config_dir":
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, timedelta):
                value = format_duration(value)
            data[f.name.replace("_", "-")] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], config_dir: Path | None = None) -> "Settings":
        """Create settings from config-file keys such as "session-duration"."""
        known = {f.name for f in fields(cls)} - {"config_dir"}
        values: dict[str, Any] = {}

        for key, value in data.items():
            name = _attribute_name(key)
            if name not in known:
                logger.debug("Ignoring unknown config key %s", key)
                continue
            values[name] = value

        try:
            for name in ("app_api_key_duration", "session_duration"):
                if name in values and values[name] is not None:
                    values[name] = parse_duration(values[name])
            if values.get("idms") is not None:
                values["idms"] = int(values["idms"])
        except ValueError as e:
            raise ConfigurationError(f"bad config value: {e}") from e

        if config_dir is not None:
            values["config_dir"] = config_dir
        return cls(**values)

    @classmethod
    def load(cls, config_dir: Path | None = None, local_file: Path | None = None) -> "Settings":
        """Load the user config, then the config in the working directory over it."""
        config_dir = config_dir or user_config_dir()
        local_file = local_file or Path.cwd() / LOCAL_CONFIG_FILENAME

        merged: dict[str, Any] = {}
        for path in (config_dir / CONFIG_FILENAME, local_file):
            if not path.exists():
                continue
            try:
                with open(path) as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"bad config in {path}: {e}", path=str(path)) from e
            if not isinstance(data, dict):
                raise ConfigurationError(f"bad config in {path}: expected an object", path=str(path))

            logger.debug("Loaded config from %s", path)
            merged.update(data)

        return cls.from_dict(merged, config_dir=config_dir)

    def save(self) -> None:
        """Save settings to the user config file."""
        write_private_json(self.config_file, self.to_dict())


def _attribute_name(name: str) -> str:
    return name.replace("-", "_")
