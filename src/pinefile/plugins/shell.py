# src/pinefile/plugins/shell.py

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from ..errors import ShellError
from ..logging_setup import color

logger = logging.getLogger(__name__)


async def shell(
    cmd: str,
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    check: bool = True,
) -> str:
    """
    Run a shell command and return its stripped stdout.

    `env` is layered over the current environment. With check=True a non-zero
    exit raises ShellError carrying stderr.
    """
    exec_env = {**os.environ, **env} if env else None
    logger.info("$ %s", color.gray(cmd))

    proc = await asyncio.create_subprocess_shell(
        cmd,
        cwd=str(cwd) if cwd is not None else None,
        env=exec_env,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    out, err = await proc.communicate()
    stdout = out.decode("utf-8", errors="replace").strip()
    stderr = err.decode("utf-8", errors="replace").strip()

    if proc.returncode != 0:
        if check:
            raise ShellError(cmd, proc.returncode, stderr)
        logger.debug("Command exited with %s: %s", proc.returncode, cmd)

    return stdout
