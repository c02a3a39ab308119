"""
Settings for where runtime rules are persisted and how much is logged.

Settings come from an optional TOML file:

    [storage]
    data_dir = "state"            # relative to the settings file
    lock_file = "vpn_rules.lock"
    temp_file = "vpn_rules_temp.json"
    rules_file = "vpn_rules.json"

    [logging]
    level = "INFO"
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigError

ENV_HOME = "TUNNELRULES_HOME"
SETTINGS_FILENAME = "tunnelrules.toml"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def default_data_dir() -> Path:
    env = os.environ.get(ENV_HOME, "").strip()
    if env:
        return Path(env).expanduser()
    return Path.home() / ".tunnelrules"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = field(default_factory=default_data_dir)
    lock_file: str = "vpn_rules.lock"
    temp_file: str = "vpn_rules_temp.json"
    rules_file: str = "vpn_rules.json"
    log_level: str = "WARNING"

    @property
    def lock_path(self) -> Path:
        return self.data_dir / self.lock_file

    @property
    def temp_path(self) -> Path:
        return self.data_dir / self.temp_file

    @property
    def rules_path(self) -> Path:
        return self.data_dir / self.rules_file


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _file_name(storage: dict[str, Any], key: str, default: str) -> str:
    value = storage.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"storage.{key} must be a non-empty string")
    name = value.strip()
    if Path(name).name != name:
        raise ValueError(f"storage.{key} must be a bare file name, got {name!r}")
    return name


def parse_settings(data: dict[str, Any], base_dir: Path | None = None) -> Settings:
    """
    Build Settings from parsed TOML data.

    Raises:
        ValueError: If a value has the wrong type or the file names collide.
    """
    storage = _coerce_dict(data.get("storage"))
    logging_section = _coerce_dict(data.get("logging"))
    defaults = Settings()

    data_dir = defaults.data_dir
    raw_dir = storage.get("data_dir")
    if raw_dir is not None:
        if not isinstance(raw_dir, str) or not raw_dir.strip():
            raise ValueError("storage.data_dir must be a non-empty string")
        data_dir = Path(raw_dir.strip()).expanduser()
        if not data_dir.is_absolute() and base_dir is not None:
            data_dir = base_dir / data_dir

    lock_file = _file_name(storage, "lock_file", defaults.lock_file)
    temp_file = _file_name(storage, "temp_file", defaults.temp_file)
    rules_file = _file_name(storage, "rules_file", defaults.rules_file)
    if len({lock_file, temp_file, rules_file}) != 3:
        raise ValueError("storage.lock_file, storage.temp_file and storage.rules_file must differ")

    level = str(logging_section.get("level", defaults.log_level)).strip().upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"logging.level must be one of {', '.join(sorted(_LOG_LEVELS))}")

    return Settings(
        data_dir=data_dir,
        lock_file=lock_file,
        temp_file=temp_file,
        rules_file=rules_file,
        log_level=level,
    )


def load_settings(path: Path | None = None) -> Settings:
    """
    Load settings from a TOML file, or return defaults if there is none.

    Without an explicit path, `tunnelrules.toml` in the data directory is used
    when it exists.

    Raises:
        ConfigError: If the file cannot be read or holds invalid values.
    """
    import tomllib

    if path is None:
        candidate = default_data_dir() / SETTINGS_FILENAME
        if not candidate.exists():
            return Settings()
        path = candidate

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read settings file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML in {path}: {e}") from e

    try:
        return parse_settings(data, base_dir=path.parent)
    except ValueError as e:
        raise ConfigError(f"{path}: {e}") from e
