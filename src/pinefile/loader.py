# src/pinefile/loader.py

"""
Pinefile discovery and loading.

A pinefile is a plain Python module. Its public functions and mappings become
the task namespace; callables are normalized to {"_": fn} so that every node
can hold sub tasks next to its own task.
"""

from __future__ import annotations

import importlib
import importlib.machinery
import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import ModuleType
from typing import Any

from .core.namespace import TaggedCallable
from .errors import PinefileError, PinefileNotFoundError

logger = logging.getLogger(__name__)

PINEFILE_NAMES = ("pinefile.py", "Pinefile", "Pinefile.py")
MODULE_NAME = "pinefile_user"


def find_file(path: str | Path = "", cwd: str | Path | None = None) -> Path:
    """
    Locate the pinefile.

    An explicit path (file, or directory holding a pinefile) wins; otherwise the
    working directory and its parents are searched.
    """
    base = Path(cwd) if cwd is not None else Path.cwd()

    if path:
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = base / candidate
        if candidate.is_dir():
            for name in PINEFILE_NAMES:
                if (candidate / name).is_file():
                    return candidate / name
        elif candidate.is_file():
            return candidate
        raise PinefileNotFoundError(f"Pinefile not found: {candidate}")

    for directory in (base, *base.parents):
        for name in PINEFILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate

    raise PinefileNotFoundError(f"Pinefile not found in {base} or any parent directory")


def _import_file(path: Path, module_name: str) -> ModuleType:
    # "Pinefile" has no .py suffix; use an explicit source loader for it.
    loader = importlib.machinery.SourceFileLoader(module_name, str(path))
    spec = importlib.util.spec_from_loader(module_name, loader)
    if spec is None:
        raise PinefileError(f"Cannot import {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise PinefileError(f"Failed to load {path}: {exc}") from exc
    return module


def _defined_in(obj: Any, module: ModuleType) -> bool:
    fn = obj.fn if isinstance(obj, TaggedCallable) else obj
    return getattr(fn, "__module__", None) == module.__name__


def _public_members(module: ModuleType) -> dict[str, Any]:
    names = getattr(module, "__all__", None)
    if names is not None:
        return {name: getattr(module, name) for name in names}

    out: dict[str, Any] = {}
    for name, value in vars(module).items():
        if name.startswith("_") and name != "_":
            continue
        if inspect.ismodule(value) or inspect.isclass(value):
            continue
        if isinstance(value, Mapping):
            out[name] = value
        elif callable(value) and _defined_in(value, module):
            out[name] = value
    return out


def parse_pinefile(obj: ModuleType | Mapping[str, Any]) -> dict[str, Any]:
    """Normalize a module or mapping into a namespace dict."""
    members = _public_members(obj) if inspect.ismodule(obj) else dict(obj)

    parsed: dict[str, Any] = {}
    for key, value in members.items():
        if key == "_":
            parsed[key] = value
        elif isinstance(value, Mapping):
            parsed[key] = parse_pinefile(value)
        elif callable(value):
            parsed[key] = {"_": value}
        else:
            parsed[key] = value
    return parsed


def load_pinefile(path: str | Path) -> dict[str, Any]:
    path = Path(path)
    # Let the pinefile import helpers that live next to it.
    parent = str(path.parent.resolve())
    if parent not in sys.path:
        sys.path.insert(0, parent)

    module = _import_file(path, MODULE_NAME)
    logger.debug("Loaded pinefile %s", path)
    return parse_pinefile(module)


def preload(modules: Iterable[str], cwd: str | Path | None = None) -> list[ModuleType]:
    """Import modules (names or file paths) before the pinefile is loaded."""
    base = Path(cwd) if cwd is not None else Path.cwd()
    loaded: list[ModuleType] = []

    for entry in modules:
        if not entry:
            continue
        candidate = Path(entry).expanduser()
        if not candidate.is_absolute():
            candidate = base / candidate

        if entry.endswith(".py") or candidate.is_file():
            if not candidate.is_file():
                raise PinefileError(f"Cannot find module to preload: {entry}")
            loaded.append(_import_file(candidate, f"pinefile_preload_{candidate.stem}"))
            continue

        try:
            loaded.append(importlib.import_module(entry))
        except ImportError as exc:
            raise PinefileError(f"Cannot find module to preload: {entry}") from exc

    return loaded
