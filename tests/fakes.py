# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class LogLine:
    level: str
    message: str
    exc_info: Any = None


@dataclass(slots=True)
class RecordingLogger:
    """
    TaskLogger used by engine tests.

    Formats messages like logging does and keeps them in order, so tests can
    assert on "Starting"/"Finished" sequencing without touching logging config.
    """

    lines: list[LogLine] = field(default_factory=list)

    def _add(self, level: str, msg: object, args: tuple[object, ...], kwargs: dict[str, Any]) -> None:
        text = str(msg) % args if args else str(msg)
        self.lines.append(LogLine(level=level, message=text, exc_info=kwargs.get("exc_info")))

    def info(self, msg: object, *args: object, **kwargs: Any) -> None:
        self._add("info", msg, args, kwargs)

    def error(self, msg: object, *args: object, **kwargs: Any) -> None:
        self._add("error", msg, args, kwargs)

    @property
    def messages(self) -> list[str]:
        return [line.message for line in self.lines]

    @property
    def errors(self) -> list[str]:
        return [line.message for line in self.lines if line.level == "error"]

    def lifecycle(self) -> list[str]:
        """Starting/Finished lines with the timing suffix stripped."""
        out: list[str] = []
        for m in self.messages:
            if m.startswith("Starting "):
                out.append(m)
            elif m.startswith("Finished "):
                out.append(m.split(" after ")[0])
        return out


class Calls:
    """Collects (label, args) pairs from task functions in call order."""

    def __init__(self) -> None:
        self.items: list[tuple[str, Any]] = []

    def record(self, label: str):
        def _task(args):
            self.items.append((label, args))

        _task.__name__ = label
        return _task

    @property
    def labels(self) -> list[str]:
        return [label for label, _ in self.items]
