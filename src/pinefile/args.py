# src/pinefile/args.py

"""
Command line arguments.

Known options are declared as {"name": {"type", "default", "desc"}} and turned
into argparse arguments. Anything else on the command line ("--target=prod",
"--dry") still reaches the task through the argument dict.
"""

from __future__ import annotations

import argparse
import logging
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from .config import get_config

logger = logging.getLogger(__name__)

OptionsType = dict[str, dict[str, Any]]

DEFAULT_OPTIONS: OptionsType = {
    "help": {"type": "boolean", "default": False, "desc": "Print help and available tasks"},
    "file": {"type": "string", "default": "", "desc": "Path to pinefile.py or Pinefile"},
    "no_dotenv": {"type": "boolean", "default": False, "desc": "Disabling auto load of .env"},
    "no_color": {"type": "boolean", "default": False, "desc": "Disabling of color"},
    "log_level": {"type": "string", "default": "info", "desc": "Set log level: info | warn | error | silent."},
    "require": {"type": "array", "default": [], "desc": "Modules to preload before the pinefile is loaded"},
}


def options() -> OptionsType:
    """Default options merged with the flags declared in the configuration."""
    conf = get_config()
    flags = conf.flags if isinstance(conf.flags, Mapping) else {}
    merged = {name: dict(opt) for name, opt in DEFAULT_OPTIONS.items()}
    for name, opt in flags.items():
        merged[str(name).replace("-", "_")] = dict(opt)
    return merged


def find_project_config(start: str | Path | None = None) -> dict[str, Any]:
    """Read [tool.pine] from the nearest pyproject.toml (empty dict if none)."""
    base = Path(start) if start is not None else Path.cwd()
    for directory in (base, *base.parents):
        candidate = directory / "pyproject.toml"
        if not candidate.is_file():
            continue
        try:
            with candidate.open("rb") as fh:
                data = tomllib.load(fh)
        except (OSError, tomllib.TOMLDecodeError):
            logger.warning("Ignoring unreadable %s", candidate)
            return {}
        pine = data.get("tool", {}).get("pine", {})
        return dict(pine) if isinstance(pine, dict) else {}
    return {}


def _coerce(value: str) -> Any:
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            pass
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    return value


def _parse_extra(tokens: Sequence[str]) -> tuple[dict[str, Any], list[str]]:
    """Turn unknown "--key[=value]" tokens into a dict; return leftover positionals."""
    extra: dict[str, Any] = {}
    positionals: list[str] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.startswith("--") and len(token) > 2:
            key, sep, value = token[2:].partition("=")
            key = key.replace("-", "_")
            if sep:
                extra[key] = _coerce(value)
            elif i + 1 < len(tokens) and not tokens[i + 1].startswith("-"):
                extra[key] = _coerce(tokens[i + 1])
                i += 1
            else:
                extra[key] = True
        else:
            positionals.append(token)
        i += 1
    return extra, positionals


def build_parser(opts: Mapping[str, Mapping[str, Any]]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pine", add_help=False, allow_abbrev=False)
    parser.add_argument("_", nargs="*")

    for name, opt in opts.items():
        flag = "--" + name.replace("_", "-")
        kind = opt.get("type", "string")
        default = opt.get("default")
        help_text = opt.get("desc", "")

        if kind == "boolean":
            parser.add_argument(flag, dest=name, action="store_true", default=bool(default), help=help_text)
        elif kind == "array":
            parser.add_argument(flag, dest=name, action="append", default=None, help=help_text)
        elif kind == "number":
            parser.add_argument(flag, dest=name, type=float, default=default, help=help_text)
        else:
            parser.add_argument(flag, dest=name, default=default, help=help_text)

    return parser


def parse(argv: Sequence[str], opts: Mapping[str, Mapping[str, Any]] | None = None, *, project: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """
    Parse argv into the argument dict handed to tasks.

    `project` holds defaults (usually [tool.pine] from pyproject.toml); the
    command line wins over them.
    """
    opts = opts if opts is not None else options()
    project = project if project is not None else find_project_config()

    parser = build_parser(opts)
    namespace, unknown = parser.parse_known_args(list(argv))

    args: dict[str, Any] = {}
    for name, opt in opts.items():
        value = getattr(namespace, name)
        if opt.get("type") == "array":
            configured = project.get(name, opt.get("default") or [])
            if isinstance(configured, str):
                configured = [configured]
            value = list(configured) + list(value or [])
        elif value == opt.get("default") and name in project:
            value = project[name]
        args[name] = value

    extra, positionals = _parse_extra(unknown)
    args.update(extra)
    args["_"] = list(namespace._ or []) + positionals
    return args
