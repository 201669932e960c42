# src/pinefile/core/completion.py

"""
Completion bridge.

Tasks finish in one of three ways: they return, they return an awaitable, or
they call a completion callback. Everything here funnels those into a single
Completion that the engine awaits.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

from ..errors import InvalidRunnerError
from .namespace import TaggedCallable, TaskKind, callback, kind_of

logger = logging.getLogger(__name__)

Done = Callable[..., None]


class Completion:
    """
    The completion callback handed to runners: done() or done(err).

    Only the first call counts. The engine awaits wait() to learn the outcome.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future[BaseException | None] = asyncio.get_running_loop().create_future()

    def __call__(self, err: BaseException | None = None) -> None:
        if not self._future.done():
            self._future.set_result(err)

    @property
    def done(self) -> bool:
        return self._future.done()

    async def wait(self) -> BaseException | None:
        return await self._future


def type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def doneify(fn: Callable[..., Any], *args: Any) -> TaggedCallable:
    """Wrap a callable that knows nothing about done() into a CALLBACK runner."""

    async def _runner(done: Done) -> None:
        try:
            result = fn(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as err:
            done(err)
            return
        done()

    return callback(_runner)


def _failing_runner(value: Any) -> Callable[[], None]:
    got = type_name(value)

    def _fail() -> None:
        raise InvalidRunnerError(f"Expected return value of runner function to be a function, got {got}")

    return _fail


async def ensure_runner(value: Any) -> TaggedCallable:
    """
    Turn whatever a runner-producing function returned into a CALLBACK runner.

    Awaitables are awaited first; non-callables become a runner that fails with
    InvalidRunnerError; runners not tagged as CALLBACK are wrapped with doneify.
    """
    if inspect.isawaitable(value):
        value = await value

    if not callable(value):
        value = _failing_runner(value)

    if kind_of(value) is TaskKind.CALLBACK:
        return value

    return doneify(value)


async def invoke(runner: Callable[[Done], Any], done: Completion) -> None:
    """Call runner(done); anything it raises is delivered through done."""
    try:
        result = runner(done)
        if inspect.isawaitable(result):
            await result
    except Exception as err:
        if done.done:
            logger.warning("Runner failed after signalling completion: %s", err, exc_info=err)
        done(err)
