# tests/test_engine.py

from __future__ import annotations

import asyncio

import pytest

from pinefile import callback, parse_pinefile, run_task
from pinefile.core.engine import default_engine


@pytest.mark.asyncio
async def test_pre_main_post_run_in_order_with_same_args(engine, log, calls) -> None:
    ns = {
        "build": calls.record("build"),
        "prebuild": calls.record("prebuild"),
        "postbuild": calls.record("postbuild"),
    }

    await engine.run_task(ns, "build", {"x": 1})

    assert calls.labels == ["prebuild", "build", "postbuild"]
    assert all(args["x"] == 1 for _, args in calls.items)
    assert log.lifecycle() == [
        "Starting 'prebuild'",
        "Finished 'prebuild'",
        "Starting 'build'",
        "Finished 'build'",
        "Starting 'postbuild'",
        "Finished 'postbuild'",
    ]


@pytest.mark.asyncio
async def test_pre_hook_settles_before_main_task_starts(engine) -> None:
    order: list[str] = []

    async def prebuild(args):
        order.append("pre:start")
        await asyncio.sleep(0.01)
        order.append("pre:end")

    def build(args):
        order.append("build")

    await engine.run_task({"build": build, "prebuild": prebuild}, "build", {})

    assert order == ["pre:start", "pre:end", "build"]


@pytest.mark.asyncio
async def test_namespace_underscore_task_runs(engine, calls) -> None:
    await engine.run_task({"deploy": {"_": calls.record("deploy")}}, "deploy", {})
    assert calls.labels == ["deploy"]


@pytest.mark.asyncio
async def test_missing_task_logs_and_returns(engine, log, calls) -> None:
    ns = {"premissing": calls.record("premissing")}

    await engine.run_task(ns, "missing", {})

    assert log.errors == ["Task 'missing' not found"]
    # hooks are not run for a task that does not exist
    assert calls.labels == []


@pytest.mark.asyncio
async def test_namespace_without_task_is_not_found(engine, log) -> None:
    await engine.run_task({"group": {"a": lambda args: None}}, "group", {})
    assert log.errors == ["Task 'group' not found"]


@pytest.mark.asyncio
async def test_nested_names_use_nested_hooks(engine, calls) -> None:
    ns = parse_pinefile(
        {
            "build": {
                "css": calls.record("css"),
                "precss": calls.record("precss"),
                "postcss": calls.record("postcss"),
            },
            # top level hooks must not fire for a nested task
            "precss": calls.record("wrong"),
        }
    )

    await engine.run_task(ns, "build:css", {})

    assert calls.labels == ["precss", "css", "postcss"]


@pytest.mark.asyncio
async def test_hooks_can_have_hooks(engine, calls) -> None:
    ns = {
        "build": calls.record("build"),
        "prebuild": calls.record("prebuild"),
        "preprebuild": calls.record("preprebuild"),
        "postpostbuild": calls.record("postpostbuild"),
        "postbuild": calls.record("postbuild"),
    }

    await engine.run_task(ns, "build", {})

    assert calls.labels == ["preprebuild", "prebuild", "build", "postbuild", "postpostbuild"]


@pytest.mark.asyncio
async def test_namespace_default_task_and_default_hooks(engine, calls) -> None:
    ns = parse_pinefile(
        {
            "pkg": {
                "default": calls.record("default"),
                "predefault": calls.record("predefault"),
            }
        }
    )

    await engine.run_task(ns, "pkg", {})

    assert calls.labels == ["predefault", "default"]


@pytest.mark.asyncio
async def test_async_task_is_awaited(engine) -> None:
    done: list[bool] = []

    async def build(args):
        await asyncio.sleep(0)
        done.append(True)

    await engine.run_task({"build": build}, "build", {})

    assert done == [True]


@pytest.mark.asyncio
async def test_failing_task_is_logged_and_post_hook_still_runs(engine, log, calls) -> None:
    def build(args):
        raise RuntimeError("boom")

    ns = {"build": build, "postbuild": calls.record("postbuild")}

    await engine.run_task(ns, "build", {})

    assert log.errors == ["Task 'build' failed: boom"]
    assert isinstance(log.lines[1].exc_info, RuntimeError)
    assert "Finished 'build'" in log.lifecycle()
    assert calls.labels == ["postbuild"]


@pytest.mark.asyncio
async def test_callback_task_completes_through_done(engine, log) -> None:
    seen: list[int] = []

    @callback
    def build(args, done):
        seen.append(args["n"])
        asyncio.get_running_loop().call_soon(done)

    await engine.run_task({"build": build}, "build", {"n": 7})

    assert seen == [7]
    assert log.errors == []
    assert log.lifecycle()[-1] == "Finished 'build'"


@pytest.mark.asyncio
async def test_callback_task_error_argument_is_logged(engine, log) -> None:
    @callback
    async def build(args, done):
        done(ValueError("bad input"))

    await engine.run_task({"build": build}, "build", {})

    assert log.errors == ["Task 'build' failed: bad input"]


@pytest.mark.asyncio
async def test_callback_task_only_first_done_counts(engine, log) -> None:
    @callback
    def build(args, done):
        done()
        done(RuntimeError("late"))

    await engine.run_task({"build": build}, "build", {})

    assert log.errors == []


@pytest.mark.asyncio
async def test_before_and_after_registrations(engine, calls) -> None:
    ns = {
        "build": calls.record("build"),
        "compile": calls.record("compile"),
        "write": calls.record("write"),
        "publish": calls.record("publish"),
        "prebuild": calls.record("prebuild"),
    }
    engine.before("build", "compile", ["write", "compile"])
    engine.after("build", ["publish"])

    await engine.run_task(ns, "build", {})

    assert calls.labels == ["compile", "write", "prebuild", "build", "publish"]


@pytest.mark.asyncio
async def test_args_default_to_empty_dict(engine) -> None:
    seen: list[dict] = []
    await engine.run_task({"build": seen.append}, "build")
    assert seen == [{}]


@pytest.mark.asyncio
async def test_module_level_run_task_uses_default_engine(caplog, calls) -> None:
    caplog.set_level("INFO", logger="pinefile")

    await run_task({"build": calls.record("build")}, "build", {"x": 1})
    await run_task({}, "missing", {})

    assert calls.labels == ["build"]
    assert "Starting 'build'" in caplog.text
    assert "Task 'missing' not found" in caplog.text
    assert default_engine().log.name == "pinefile.core.engine"
