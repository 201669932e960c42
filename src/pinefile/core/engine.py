# src/pinefile/core/engine.py

from __future__ import annotations

"""
Execution engine.

run_task() drives one task through:
  resolve -> before tasks -> pre hook -> task -> post hook -> after tasks

Hooks are found by name ("prebuild"/"postbuild" around "build") and executed by
a recursive call, so hooks can have hooks of their own. Task failures are logged
and never raised out of run_task().
"""

import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any

from ..config import ConfigStore, default_store
from ..logging_setup import color, time_in_secs
from .completion import Completion, ensure_runner, invoke
from .namespace import DEFAULT_SEP, hook_name, resolve_task
from .ports import ConfigSource, TaskArgs, TaskLogger
from .runners import RunnerRegistry, get_runner, produce_runner, registry, select_runner

logger = logging.getLogger(__name__)


def _flatten(items: Iterable[Any]) -> list[str]:
    out: list[str] = []
    for item in items:
        if isinstance(item, (list, tuple, set)):
            out.extend(_flatten(item))
        elif item:
            out.append(str(item))
    return out


def _quoted(name: str) -> str:
    return color.cyan(f"'{name}'")


class TaskEngine:
    """
    Runs tasks from a pinefile namespace.

    The configuration source is read on every execution and is expected to be
    written (configure()) before the first task starts.
    """

    def __init__(
        self,
        config: ConfigSource | None = None,
        *,
        runners: RunnerRegistry | None = None,
        log: TaskLogger | None = None,
        sep: str = DEFAULT_SEP,
    ) -> None:
        self.config = config if config is not None else ConfigStore()
        self.runners = runners if runners is not None else registry
        self.log = log if log is not None else logger
        self.sep = sep
        self._before: dict[str, list[str]] = {}
        self._after: dict[str, list[str]] = {}

    # ---- before/after registration ----

    def before(self, name: str, *tasks: Any) -> None:
        """
        Register tasks that should run before a task.

            before("build", "compile", "write")
            before("build", ["compile", "write"])
        """
        self._before[name] = list(dict.fromkeys(self._before.get(name, []) + _flatten(tasks)))

    def after(self, name: str, *tasks: Any) -> None:
        """Register tasks that should run after a task (same forms as before())."""
        self._after[name] = list(dict.fromkeys(self._after.get(name, []) + _flatten(tasks)))

    def clear(self) -> None:
        self._before.clear()
        self._after.clear()

    # ---- execution ----

    async def _run_hook(self, pinefile: Mapping[str, Any], name: str, prefix: str, args: TaskArgs) -> None:
        hook = hook_name(name, prefix, self.sep)
        if resolve_task(pinefile, hook, self.sep) is not None:
            await self.execute(pinefile, hook, args)

    async def execute(self, pinefile: Mapping[str, Any], name: str, args: TaskArgs) -> None:
        config = self.config.get()
        runner, options = get_runner(config, self.runners)

        resolved = resolve_task(pinefile, name, self.sep)
        selection = await select_runner(runner, options, pinefile, name, args, resolved)

        # fail if no task function can be found
        if not selection.exists:
            self.log.error("Task %s not found", _quoted(name))
            return

        for dep in self._before.get(name, ()):
            await self.execute(pinefile, dep, args)

        await self._run_hook(pinefile, selection.name, "pre", args)

        start = time.monotonic()
        self.log.info("Starting %s", _quoted(name))

        done = Completion()
        try:
            produced = produce_runner(selection, pinefile, name, args, options)
            task_runner = await ensure_runner(produced)
        except Exception as err:
            done(err)
        else:
            await invoke(task_runner, done)

        err = await done.wait()
        if err is not None:
            self.log.error("Task %s failed: %s", _quoted(name), err, exc_info=err)

        elapsed_ms = (time.monotonic() - start) * 1000
        self.log.info("Finished %s after %s", _quoted(name), color.magenta(time_in_secs(elapsed_ms)))

        await self._run_hook(pinefile, selection.name, "post", args)

        for dep in self._after.get(name, ()):
            await self.execute(pinefile, dep, args)

    async def run_task(self, pinefile: Mapping[str, Any], name: str, args: TaskArgs | None = None) -> None:
        """Run a task (with its hooks) by name. Resolves once everything settled."""
        await self.execute(pinefile, name, args if args is not None else {})


_ENGINE = TaskEngine(default_store())


def default_engine() -> TaskEngine:
    return _ENGINE


async def run_task(pinefile: Mapping[str, Any], name: str, args: TaskArgs | None = None) -> None:
    await _ENGINE.run_task(pinefile, name, args)


def before(name: str, *tasks: Any) -> None:
    _ENGINE.before(name, *tasks)


def after(name: str, *tasks: Any) -> None:
    _ENGINE.after(name, *tasks)
