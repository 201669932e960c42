"""
Task resolution and execution engine.

- namespace: task kinds, tagging decorators, resolve_task, hook_name
- runners: runner registry, loading and selection
- completion: bridging return values / awaitables / done callbacks
- engine: TaskEngine and the module-level run_task
"""

from pinefile.core.engine import TaskEngine, after, before, default_engine, run_task
from pinefile.core.namespace import (
    TaggedCallable,
    TaskKind,
    callback,
    hook_name,
    plugin,
    resolve_task,
    runner,
    task,
    valid_task_value,
)
from pinefile.core.runners import RunnerRegistry, registry

__all__ = [
    "RunnerRegistry",
    "TaggedCallable",
    "TaskEngine",
    "TaskKind",
    "after",
    "before",
    "callback",
    "default_engine",
    "hook_name",
    "plugin",
    "registry",
    "resolve_task",
    "run_task",
    "runner",
    "task",
    "valid_task_value",
]
