# src/pinefile/cli/main.py

"""
CLI entrypoint.

Initializes logging, loads the pinefile, then runs the requested task:

    pine build --target=prod
    pine build:css
    pine --help
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from ..args import find_project_config, options, parse
from ..config import get_settings
from ..core.engine import default_engine
from ..core.namespace import resolve_task
from ..errors import PineError
from ..logging_setup import color, setup_logging
from .bootstrap import load_project
from .help import build_help

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    settings = get_settings()
    argv = list(sys.argv[1:] if argv is None else argv)
    cwd = Path.cwd()

    # command line > PINE_* environment > [tool.pine] in pyproject.toml
    project = find_project_config(cwd)
    if settings.log_level:
        project["log_level"] = settings.log_level
    if settings.file:
        project["file"] = settings.file

    args = parse(argv, options(), project=project)

    setup_logging(
        level=args.get("log_level") or "info",
        no_color=bool(args.get("no_color")) or settings.no_color,
        log_file=settings.log_file,
    )

    try:
        pinefile = load_project(args, settings=settings, cwd=cwd)
        # flags declared by the pinefile through configure(flags=...) are known now.
        args = parse(argv, options(), project=project)
    except PineError as exc:
        if args.get("help"):
            print(build_help(None, options()))
            return 0
        logger.error("%s", exc)
        return 1

    if args.get("help"):
        print(build_help(pinefile, options()))
        return 0

    positionals = args["_"]
    name = positionals.pop(0) if positionals else ""
    if not name:
        if resolve_task(pinefile, "default") is None:
            logger.error("No task provided")
            return 1
        name = "default"

    try:
        asyncio.run(default_engine().run_task(pinefile, name, args))
    except PineError as exc:
        logger.error("Task %s: %s", color.cyan(f"'{name}'"), exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        return 130

    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
