# src/pinefile/core/namespace.py

"""
Task namespace model and name resolution.

A pinefile is a tree of mappings. Leaves are callables; a mapping may carry its
own task under the "_" key and a default task under "default". Names address
the tree with a separator (":" by default), e.g. "build:css".
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

DEFAULT_SEP = ":"


class TaskKind(StrEnum):
    """
    How a callable is invoked. Chosen by whoever registers the callable.

    TASK      fn(args)
    CALLBACK  fn(args, done) for tasks, runner(done) for produced runners
    PLUGIN    fn(pinefile, name, args) -> runner
    RUNNER    fn(pinefile, name, args[, options]) -> runner
    """

    TASK = "task"
    CALLBACK = "callback"
    PLUGIN = "plugin"
    RUNNER = "runner"


@dataclass(frozen=True, slots=True)
class TaggedCallable:
    fn: Callable[..., Any]
    kind: TaskKind

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.fn(*args, **kwargs)

    @property
    def description(self) -> str:
        return inspect.getdoc(self.fn) or ""


def _tag(kind: TaskKind) -> Callable[[Callable[..., Any]], TaggedCallable]:
    def decorator(fn: Callable[..., Any]) -> TaggedCallable:
        if isinstance(fn, TaggedCallable):
            fn = fn.fn
        if not callable(fn):
            raise TypeError(f"Expected a callable to tag as {kind.value}, got {type(fn).__name__}")
        return TaggedCallable(fn=fn, kind=kind)

    return decorator


task = _tag(TaskKind.TASK)
callback = _tag(TaskKind.CALLBACK)
plugin = _tag(TaskKind.PLUGIN)
runner = _tag(TaskKind.RUNNER)


def kind_of(obj: Any, default: TaskKind = TaskKind.TASK) -> TaskKind:
    if isinstance(obj, TaggedCallable):
        return obj.kind
    return default


def valid_task_value(val: Any) -> bool:
    """A callable, or a non-empty mapping whose "_" entry is absent or callable."""
    if callable(val):
        return True
    return isinstance(val, Mapping) and len(val) > 0 and ("_" not in val or callable(val["_"]))


def _collapsible(val: Any) -> bool:
    return isinstance(val, Mapping) and callable(val.get("_"))


def resolve_task(pinefile: Mapping[str, Any], name: str | Sequence[str] | None, sep: str = DEFAULT_SEP) -> Any:
    """
    Resolve a task value by name.

    Returns the callable, a mapping whose "default" is a callable (or which only
    holds sub tasks), or None when nothing valid lives at that path.
    """
    if not name:
        return None

    segments = name.split(sep) if isinstance(name, str) else list(name)

    node: Any = pinefile
    for segment in segments:
        if not isinstance(node, Mapping):
            return None
        node = node.get(segment)
        if node is None:
            return None

    if not valid_task_value(node):
        return None

    if _collapsible(node):
        return node["_"]

    if isinstance(node, Mapping) and _collapsible(node.get("default")):
        flattened = dict(node)
        flattened["default"] = node["default"]["_"]
        return flattened

    return node


def hook_name(name: str, prefix: str = "", sep: str = DEFAULT_SEP) -> str:
    """Prefix the last segment of a task name: ("build:css", "pre") -> "build:precss"."""
    names = name.split(sep)
    last = names.pop()
    return sep.join([*names, f"{prefix}{last}"])


def iter_tasks(pinefile: Mapping[str, Any], sep: str = DEFAULT_SEP, _prefix: str = ""):
    """Yield (name, callable) for every runnable task path, depth first."""
    for key, value in pinefile.items():
        if key == "_" or not isinstance(key, str):
            continue
        name = f"{_prefix}{sep}{key}" if _prefix else key
        if callable(value):
            yield name, value
        elif isinstance(value, Mapping):
            resolved = resolve_task(pinefile, [key])
            if callable(resolved):
                yield name, resolved
            yield from iter_tasks(value, sep, name)
