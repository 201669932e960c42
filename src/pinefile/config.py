# src/pinefile/config.py

"""Settings and runner configuration.

Two layers:
- Settings: process defaults read once from PINE_* environment variables.
- Config: the runner configuration a pinefile (or the CLI) installs with
  configure(). It is written before the first task runs and only read after.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .errors import ConfigError

ENV_PREFIX = "PINE"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    file: str
    log_level: str | None
    no_color: bool
    no_dotenv: bool
    runner: str | None
    log_file: Path | None

    @classmethod
    def from_env(cls) -> Settings:
        runner = _env(_k("RUNNER")).strip() or None
        return cls(
            file=_env(_k("FILE")),
            log_level=_env(_k("LOG_LEVEL")).strip().lower() or None,
            # NO_COLOR is the cross-tool convention; honor it as well.
            no_color=_env_bool(_k("NO_COLOR"), _env_bool("NO_COLOR", False)),
            no_dotenv=_env_bool(_k("NO_DOTENV"), False),
            runner=runner,
            log_file=_env_path(_k("LOG_FILE")),
        )


def get_settings() -> Settings:
    return Settings.from_env()


@dataclass(frozen=True, slots=True)
class Config:
    # Directory that relative dotenv files are resolved against.
    path: str = ""
    dotenv: tuple[str, ...] = ()
    env: Mapping[str, Any] = field(default_factory=dict)
    # Callable, object/mapping with `default` (+ optional `task_exists`), or a
    # registry identifier / module path string.
    runner: Any = None
    # Auxiliary options handed to RUNNER-shaped runners.
    options: Mapping[str, Any] = field(default_factory=dict)
    # Extra command line flags: {"name": {"type": ..., "default": ..., "desc": ...}}
    flags: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)


ConfigUpdate = Mapping[str, Any] | Config
ConfigFunction = Callable[[Config], ConfigUpdate | None]

_FIELD_NAMES = frozenset(f.name for f in fields(Config))


def _as_changes(update: ConfigUpdate | None) -> dict[str, Any]:
    if update is None:
        return {}
    if isinstance(update, Config):
        return {name: getattr(update, name) for name in _FIELD_NAMES}
    if not isinstance(update, Mapping):
        return {}

    unknown = set(update) - _FIELD_NAMES
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    changes = dict(update)
    if "dotenv" in changes:
        raw = changes["dotenv"]
        if isinstance(raw, (str, os.PathLike)):
            raw = [raw]
        changes["dotenv"] = tuple(str(p) for p in (raw or ()))
    if "path" in changes:
        changes["path"] = str(changes["path"] or "")
    return changes


def _load_dotenv_files(config: Config) -> Config:
    if not config.dotenv:
        return config

    if not config.path:
        raise ConfigError("Config path shouldn't be empty")

    for file in config.dotenv:
        load_dotenv(Path(config.path) / file, override=False)

    # Each file is loaded once; later configure() calls do not reload it.
    return replace(config, dotenv=())


def _set_environment(config: Config) -> None:
    if not isinstance(config.env, Mapping):
        return

    for key, value in config.env.items():
        name = str(key).upper()
        # same rule as python-dotenv with override=False: existing vars win
        if name not in os.environ:
            os.environ[name] = str(value)


class ConfigStore:
    """Holds the current Config; configure() merges updates into it."""

    def __init__(self, config: Config | None = None) -> None:
        self._config = config if config is not None else Config()

    def get(self) -> Config:
        return self._config

    def configure(self, update: ConfigUpdate | ConfigFunction | None = None, **kwargs: Any) -> Config:
        if callable(update) and not isinstance(update, Config):
            update = update(self._config)

        changes = _as_changes(update)
        changes.update(_as_changes(kwargs))

        config = replace(self._config, **changes)
        config = _load_dotenv_files(config)
        _set_environment(config)

        self._config = config
        return config

    def reset(self) -> Config:
        self._config = Config()
        return self._config


_STORE = ConfigStore()


def default_store() -> ConfigStore:
    return _STORE


def get_config() -> Config:
    return _STORE.get()


def configure(update: ConfigUpdate | ConfigFunction | None = None, **kwargs: Any) -> Config:
    return _STORE.configure(update, **kwargs)
