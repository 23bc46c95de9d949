"""
运行引擎单元测试
"""
import asyncio

import pytest

from netcheck.context import RunContext
from netcheck.integrations import FakeExecutor, FakeResponse
from netcheck.integrations.config_loader import config_from_dict
from netcheck.models.config import Config
from netcheck.models.options import RunOptions
from netcheck.models.results import Status
from netcheck.runner.engine import RunError, run_once

PING_LOSSY = (
    "10 packets transmitted, 5 packets received, 50.0% packet loss\n"
    "round-trip min/avg/max/stddev = 1.000/2.000/3.000/1.000 ms"
)


def run(executor, config=None, options=None, **kwargs):
    async def _run():
        return await run_once(RunContext(), executor, config or Config(), options or RunOptions(), **kwargs)

    return asyncio.run(_run())


class TestRunOnce:
    """单次运行测试"""

    def test_all_tools_missing(self, fake):
        """测试没有任何工具时全部skip，结果按ID排序"""
        result = run(fake)
        report = result.report

        ids = [c.id for c in report.checks]
        assert ids == sorted(ids)
        assert report.summary.total == len(report.checks) == 9
        assert report.summary.skip == 9
        assert report.score == 50
        assert report.schema_version == "v1"
        assert report.config == Config().as_dict()

    def test_fail_fast(self):
        """测试遇到第一个fail即停止"""
        config = config_from_dict({"targets": {"ping": ["1.1.1.1", "8.8.8.8"]}})
        fake = FakeExecutor(
            outputs={"ping -c 10 1.1.1.1": PING_LOSSY, "ping -c 10 8.8.8.8": PING_LOSSY},
            paths={"ping"},
        )

        result = run(fake, config, RunOptions(fail_fast=True, select=["reachability"]))

        assert len(result.report.checks) == 1
        assert result.report.summary.total == 1
        assert result.report.checks[0].status == Status.FAIL
        assert fake.calls == ["ping -c 10 1.1.1.1"]

    def test_select_and_skip(self):
        result = run(FakeExecutor(), options=RunOptions(select=["dns", "http"], skip=["http"]))

        assert {c.group for c in result.report.checks} == {"dns"}

    def test_run_metadata(self):
        options = RunOptions(run_id="r-1", labels={"site": "office"})

        report = run(FakeExecutor(), options=options, version="9.9.9", commit="abc123").report

        assert report.run_id == "r-1"
        assert report.labels == {"site": "office"}
        assert report.version == "9.9.9"
        assert report.git_commit == "abc123"

    def test_progress_events(self):
        """测试每项检查产生start和end两个进度事件"""
        events = []

        result = run(FakeExecutor(), options=RunOptions(select=["dns", "http"]), progress=events.append)

        total = len(result.report.checks)
        assert len(events) == total * 2
        assert [e.phase for e in events[:2]] == ["start", "end"]
        assert events[0].status is None
        assert events[1].status == Status.SKIP
        assert [e.index for e in events if e.phase == "end"] == list(range(1, total + 1))
        assert all(e.total == total for e in events)

    def test_async_progress_callback(self):
        events = []

        async def on_progress(event):
            events.append(event)

        run(FakeExecutor(), options=RunOptions(select=["dns"]), progress=on_progress)

        assert len(events) == 2

    def test_stopped_context_schedules_nothing(self):
        """测试上下文已停止时不再调度检查"""
        fake = FakeExecutor(paths={"ping"})

        async def _run():
            ctx = RunContext()
            ctx.cancel()
            return await run_once(ctx, fake, Config(), RunOptions())

        result = asyncio.run(_run())

        assert result.report.checks == []
        assert result.report.summary.total == 0
        assert fake.calls == []

    def test_deadline_stops_remaining_checks(self):
        """测试到达截止时间后剩余检查不再执行"""
        config = config_from_dict({"targets": {"ping": ["1.1.1.1", "8.8.8.8"]}})
        fake = FakeExecutor(
            outputs={"ping -c 10 1.1.1.1": FakeResponse(delay=5)},
            paths={"ping"},
        )

        async def _run():
            ctx = RunContext().with_timeout(0.1)
            return await run_once(ctx, fake, config, RunOptions(select=["reachability"]))

        report = asyncio.run(_run()).report

        assert [c.id for c in report.checks] == ["reachability.1.1.1.1"]
        assert report.checks[0].status == Status.FAIL

    def test_unexpected_exception_is_run_error(self):
        """测试检查项抛出的异常转换为RunError"""

        class BrokenExecutor(FakeExecutor):
            def look_path(self, name):
                raise RuntimeError("boom")

        with pytest.raises(RunError, match="boom"):
            run(BrokenExecutor(), options=RunOptions(select=["dns"]))
