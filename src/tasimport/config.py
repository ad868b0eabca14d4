from __future__ import annotations

import os
from pathlib import Path
from typing import Final, Literal

import msgspec
from platformdirs import PlatformDirs

APP_NAME: Final[str] = "tasimport"
CONFIG_FILE_NAME: Final[str] = "config.toml"
CONFIG_ENV_VAR: Final[str] = "TASIMPORT_CONFIG"

ResetStartPolicy = Literal["accept", "reject"]


class ConfigError(ValueError):
    pass


class ImportConfig(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    # Encoding for the line-oriented formats (FM2, MC2).
    text_encoding: str = "utf-8"
    # FCM movies flagged as starting from reset have no host equivalent.
    fcm_reset_start: ResetStartPolicy = "accept"
    notify_advisories: bool = True


DEFAULT_CONFIG: Final[ImportConfig] = ImportConfig()


def default_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    dirs = PlatformDirs(APP_NAME, appauthor=False)
    return Path(dirs.user_config_dir) / CONFIG_FILE_NAME


def loads_config(data: bytes | str) -> ImportConfig:
    try:
        config = msgspec.toml.decode(data, type=ImportConfig)
    except msgspec.ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc
    except msgspec.DecodeError as exc:
        raise ConfigError(f"malformed config TOML: {exc}") from exc
    try:
        "".encode(config.text_encoding)
    except LookupError as exc:
        raise ConfigError(f"unknown text_encoding: {config.text_encoding!r}") from exc
    return config


def load_config(path: Path) -> ImportConfig:
    path = Path(path)
    return loads_config(path.read_bytes())


def load_default_config() -> ImportConfig:
    path = default_config_path()
    if not path.is_file():
        return DEFAULT_CONFIG
    return load_config(path)
