# src/pinefile/core/runners.py

"""
Runner selection.

A runner decides how a task is actually executed. It comes from the
configuration (callable, object with a `default` callable, or a string naming a
registered / importable runner) and otherwise falls back to the resolved task.
"""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..config import Config
from ..errors import InvalidRunnerError, RunnerLoadError
from .completion import doneify, type_name
from .namespace import TaskKind, callback, kind_of

logger = logging.getLogger(__name__)


def _member(obj: Any, key: str) -> Any:
    """Read `key` from a mapping or an attribute-bearing object (module, class...)."""
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


class RunnerRegistry:
    """Named runners that configuration can refer to by identifier."""

    def __init__(self) -> None:
        self._runners: dict[str, Any] = {}

    def register(self, identifier: str, runner: Any) -> None:
        key = identifier.strip()
        if not key:
            raise ValueError("Runner identifier shouldn't be empty")
        self._runners[key] = runner

    def unregister(self, identifier: str) -> None:
        self._runners.pop(identifier.strip(), None)

    def get(self, identifier: str) -> Any:
        return self._runners.get(identifier.strip())

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and identifier.strip() in self._runners


registry = RunnerRegistry()


def _load_module_file(path: Path) -> Any:
    mod_name = f"pinefile_runner_{abs(hash(str(path.resolve())))}"
    # Loaded once per process; hooks and the main task share the same module.
    if mod_name in sys.modules:
        return sys.modules[mod_name]
    spec = importlib.util.spec_from_file_location(mod_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot import {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[mod_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(mod_name, None)
        raise
    return module


def load_runner(identifier: str, reg: RunnerRegistry | None = None) -> Any:
    """
    Load a runner named by a string.

    Lookup order: registry identifier, `.py` file path, `package.module[:attr]`.
    A module without `attr` is used as a runner object (its `default` and
    optional `task_exists`).
    """
    reg = reg if reg is not None else registry
    if identifier in reg:
        return reg.get(identifier)

    obj: Any
    try:
        if identifier.endswith(".py") or Path(identifier).is_file():
            obj = _load_module_file(Path(identifier).expanduser())
        else:
            module_name, _, attr = identifier.partition(":")
            obj = importlib.import_module(module_name)
            for part in filter(None, attr.split(".")):
                obj = getattr(obj, part)
    except Exception as exc:
        raise RunnerLoadError(f"Failed to load runner {identifier!r}: {exc}") from exc

    logger.debug("Loaded runner %s", identifier)
    return obj


def get_runner(config: Config, reg: RunnerRegistry | None = None) -> tuple[Any, Mapping[str, Any]]:
    """Return (runner, options) from the configuration, loading string runners."""
    runner = config.runner
    options = config.options if isinstance(config.options, Mapping) else {}

    if isinstance(runner, str):
        runner = load_runner(runner, reg) if runner.strip() else None

    if runner is not None and not callable(runner):
        default = _member(runner, "default")
        if default is None:
            raise InvalidRunnerError(f"Expected runner to be a function or to have a default function, got {type_name(runner)}")
        if not callable(default):
            raise InvalidRunnerError(f"Expected runner function to be a function, got {type_name(default)}")

    return runner, options


@dataclass(frozen=True, slots=True)
class Selection:
    fn: Any
    kind: TaskKind
    # Name used to derive pre/post hooks ("<name>:default" for namespace defaults).
    name: str
    exists: bool


async def select_runner(
    runner: Any,
    options: Mapping[str, Any],
    pinefile: Mapping[str, Any],
    name: str,
    args: dict[str, Any],
    resolved: Any,
) -> Selection:
    fn: Any = resolved
    fn_name = name
    exists = False
    kind = TaskKind.TASK

    if callable(runner):
        fn = runner
        kind = kind_of(runner, TaskKind.PLUGIN)
        exists = True
    elif runner is not None and callable(_member(runner, "default")):
        fn = _member(runner, "default")
        kind = kind_of(fn, TaskKind.PLUGIN)
        task_exists = _member(runner, "task_exists")
        if callable(task_exists):
            found = task_exists(pinefile, name, args, options)
            if inspect.isawaitable(found):
                found = await found
            exists = bool(found)
        else:
            exists = True
    elif callable(resolved):
        kind = kind_of(resolved)
        exists = True

    # use default function in namespaces.
    if isinstance(fn, Mapping) and fn.get("default") is not None:
        fn = fn["default"]
        fn_name = name if name == "default" else f"{name}:default"
        kind = kind_of(fn)
        exists = callable(fn)

    return Selection(fn=fn, kind=kind, name=fn_name, exists=exists)


def produce_runner(
    selection: Selection,
    pinefile: Mapping[str, Any],
    name: str,
    args: dict[str, Any],
    options: Mapping[str, Any],
) -> Any:
    """
    Invoke the selected function in the shape its kind asks for.

    PLUGIN / RUNNER return a runner (or an awaitable of one). TASK and CALLBACK
    tasks are wrapped into a runner right here.
    """
    fn: Callable[..., Any] = selection.fn

    if selection.kind is TaskKind.RUNNER:
        if options:
            return fn(pinefile, name, args, options)
        return fn(pinefile, name, args)

    if selection.kind is TaskKind.PLUGIN:
        return fn(pinefile, name, args)

    if selection.kind is TaskKind.CALLBACK:
        return callback(lambda done: fn(args, done))

    return doneify(fn, args)
