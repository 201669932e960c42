# src/pinefile/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- locates the pinefile and points the configuration at its directory,
- loads .env next to it (unless disabled),
- preloads required modules, then loads the pinefile itself.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ..config import ConfigStore, Settings, default_store
from ..loader import find_file, load_pinefile, preload

logger = logging.getLogger(__name__)


def configure_for_pinefile(
    pinefile_path: Path,
    *,
    settings: Settings,
    no_dotenv: bool,
    store: ConfigStore | None = None,
) -> None:
    store = store if store is not None else default_store()
    directory = pinefile_path.parent

    update: dict[str, Any] = {"path": str(directory)}
    if not no_dotenv and (directory / ".env").is_file():
        update["dotenv"] = [".env"]
    if settings.runner and store.get().runner is None:
        update["runner"] = settings.runner

    store.configure(update)


def load_project(
    args: dict[str, Any],
    *,
    settings: Settings,
    cwd: Path | None = None,
    store: ConfigStore | None = None,
) -> dict[str, Any]:
    """
    Find, configure and load the pinefile named by args (or settings).

    Raises PinefileError / PinefileNotFoundError when that is not possible.
    """
    cwd = cwd if cwd is not None else Path.cwd()
    path = find_file(args.get("file") or settings.file, cwd=cwd)
    logger.debug("Using pinefile %s", path)

    configure_for_pinefile(
        path,
        settings=settings,
        no_dotenv=bool(args.get("no_dotenv")) or settings.no_dotenv,
        store=store,
    )

    preload(args.get("require") or [], cwd=path.parent)
    return load_pinefile(path)
