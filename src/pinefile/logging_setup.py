# src/pinefile/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

SILENT = logging.CRITICAL + 10

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "silent": SILENT,
}


def level_from_name(name: str | None, default: int = logging.INFO) -> int:
    if not name:
        return default
    return _LEVELS.get(str(name).strip().lower(), default)


class _Color:
    """ANSI coloring for log message fragments. Off until enabled."""

    _CODES = {
        "red": 31,
        "green": 32,
        "yellow": 33,
        "magenta": 35,
        "cyan": 36,
        "gray": 90,
    }

    def __init__(self) -> None:
        self.enabled = False

    def _wrap(self, code: int, text: object) -> str:
        if not self.enabled:
            return str(text)
        return f"\033[{code}m{text}\033[39m"

    def __getattr__(self, name: str):
        try:
            code = self._CODES[name]
        except KeyError:
            raise AttributeError(name) from None
        return lambda text: self._wrap(code, text)


color = _Color()


def time_in_secs(ms: float) -> str:
    """Format a millisecond duration the way task timings are reported."""
    if ms < 1000:
        return f"{ms:.0f} ms"
    return f"{ms / 1000:.2f} s"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - pinefile logs (and the pinefile's own loggers) pass
    - third-party libraries only at WARNING+
    - Python warnings (captured as 'py.warnings') only at ERROR+
    """

    def __init__(self, allowed_prefixes: tuple[str, ...] = ("pinefile",)) -> None:
        super().__init__()
        self.allowed_prefixes = allowed_prefixes

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        if name == "root" or name.startswith(self.allowed_prefixes):
            return True

        return record.levelno >= logging.WARNING


def setup_logging(
    *,
    level: int | str = logging.INFO,
    no_color: bool = False,
    log_file: str | Path | None = None,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with:
    - Console handler: "[HH:MM:SS] message", filtered for interactive use
    - File handler (optional): full logs for debugging

    Call this ONCE, very early (before the pinefile is loaded).
    """
    console_level = level_from_name(level) if isinstance(level, str) else level

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    stream = sys.stderr
    color.enabled = not no_color and hasattr(stream, "isatty") and stream.isatty()

    ch = logging.StreamHandler(stream)
    ch.setLevel(console_level)
    ch.setFormatter(logging.Formatter(fmt="[%(asctime)s] %(message)s", datefmt="%H:%M:%S"))
    ch.addFilter(_ConsoleNoiseFilter(("pinefile", "pinefile_user")))
    root.addHandler(ch)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
