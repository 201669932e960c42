# src/pinefile/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the execution engine.

The engine depends on Protocols instead of concrete implementations:
a logging.Logger satisfies TaskLogger and ConfigStore satisfies ConfigSource,
but tests (or embedding applications) can hand in anything with the same shape.
"""

from typing import Any, Protocol

from ..config import Config

TaskArgs = dict[str, Any]
# The argument bag every task receives: parsed CLI flags plus "_" positionals.


class TaskLogger(Protocol):
    """Where task lifecycle messages go (not found, start, finish, failures)."""

    def info(self, msg: object, *args: object, **kwargs: Any) -> None: ...

    def error(self, msg: object, *args: object, **kwargs: Any) -> None: ...


class ConfigSource(Protocol):
    def get(self) -> Config: ...
