"""
pinefile - run named tasks from a Python pinefile.

This package provides:
- a task namespace model addressed by colon-separated names ("build:css")
- an async execution engine with pre/post hooks and pluggable runners
- pinefile discovery/loading and a `pine` command line
"""

__version__ = "0.1.0"

from .config import configure, get_config
from .core import (
    TaskEngine,
    TaskKind,
    after,
    before,
    callback,
    hook_name,
    plugin,
    registry,
    resolve_task,
    run_task,
    runner,
    task,
)
from .errors import (
    InvalidRunnerError,
    PineError,
    PinefileError,
    PinefileNotFoundError,
    RunnerLoadError,
    ShellError,
)
from .loader import parse_pinefile
from .plugins.shell import shell


def register_runner(identifier: str, runner_obj) -> None:
    """Make a runner available to configure(runner="<identifier>")."""
    registry.register(identifier, runner_obj)


__all__ = [
    "__version__",
    "InvalidRunnerError",
    "PineError",
    "PinefileError",
    "PinefileNotFoundError",
    "RunnerLoadError",
    "ShellError",
    "TaskEngine",
    "TaskKind",
    "after",
    "before",
    "callback",
    "configure",
    "get_config",
    "hook_name",
    "parse_pinefile",
    "plugin",
    "register_runner",
    "resolve_task",
    "run_task",
    "runner",
    "shell",
    "task",
]
