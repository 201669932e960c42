# src/pinefile/errors.py

from __future__ import annotations


class PineError(Exception):
    """Base class for every error raised by pinefile."""


class ConfigError(PineError):
    pass


class PinefileError(PineError):
    """The pinefile (or a preloaded module) could not be loaded."""


class PinefileNotFoundError(PinefileError):
    pass


class InvalidRunnerError(PineError):
    pass


class RunnerLoadError(PineError):
    pass


class ShellError(PineError):
    def __init__(self, cmd: str, returncode: int, stderr: str = "") -> None:
        msg = f"Command failed with exit code {returncode}: {cmd}"
        if stderr:
            msg = f"{msg}\n{stderr}"
        super().__init__(msg)
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
