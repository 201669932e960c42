# tests/conftest.py

from __future__ import annotations

import pytest

from pinefile.config import ConfigStore, default_store
from pinefile.core.engine import TaskEngine, default_engine
from pinefile.core.runners import RunnerRegistry
from pinefile.logging_setup import color

from .fakes import Calls, RecordingLogger


@pytest.fixture(autouse=True)
def _reset_globals():
    """Module-level config/engine are process wide; start every test clean."""
    default_store().reset()
    default_engine().clear()
    color.enabled = False
    yield
    default_store().reset()
    default_engine().clear()


@pytest.fixture()
def store() -> ConfigStore:
    return ConfigStore()


@pytest.fixture()
def log() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture()
def runners() -> RunnerRegistry:
    return RunnerRegistry()


@pytest.fixture()
def engine(store: ConfigStore, runners: RunnerRegistry, log: RecordingLogger) -> TaskEngine:
    """
    Engine wired with its own config store, runner registry and a recording logger.

    Nothing leaks into (or out of) the module-level defaults.
    """
    return TaskEngine(store, runners=runners, log=log)


@pytest.fixture()
def calls() -> Calls:
    return Calls()
