# src/pinefile/cli/help.py

from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import Any

from ..core.namespace import TaggedCallable, iter_tasks


def _summary(fn: Any) -> str:
    doc = fn.description if isinstance(fn, TaggedCallable) else (inspect.getdoc(fn) or "")
    return doc.strip().splitlines()[0] if doc.strip() else ""


def build_help(pinefile: Mapping[str, Any] | None, opts: Mapping[str, Mapping[str, Any]]) -> str:
    lines = ["Usage: pine <task> [options]", "", "Options:"]
    for name, opt in opts.items():
        flag = "--" + name.replace("_", "-")
        lines.append(f"  {flag:<16} {opt.get('desc', '')}")

    lines.extend(["", "Tasks:"])
    tasks = list(iter_tasks(pinefile)) if pinefile else []
    if not tasks:
        lines.append("  (no tasks found)")
    width = max((len(name) for name, _ in tasks), default=0)
    for name, fn in tasks:
        summary = _summary(fn)
        lines.append(f"  {name:<{width}}  {summary}".rstrip())
    return "\n".join(lines)
