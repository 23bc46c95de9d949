"""
命令执行器单元测试

ProcessExecutor的用例使用系统自带的 echo / sleep / sh
"""
import asyncio
import shutil

import pytest

from netcheck.context import RunContext
from netcheck.integrations import (
    CommandCancelledError,
    CommandExecutionError,
    CommandResult,
    CommandTimeoutError,
    FakeExecutor,
    FakeResponse,
    ProcessExecutor,
    describe_command,
    is_interrupted,
)

requires_posix_tools = pytest.mark.skipif(
    shutil.which("sleep") is None or shutil.which("sh") is None,
    reason="需要POSIX工具"
)


def collect_logs():
    lines = []

    def sink(group, op, msg):
        lines.append((group, op, msg))

    return lines, sink


@requires_posix_tools
class TestProcessExecutor:
    """本机子进程执行测试"""

    def test_echo(self):
        lines, sink = collect_logs()

        async def _run():
            ctx = RunContext(log_sink=sink).with_check("DNS", "dns.x")
            return await ProcessExecutor().run(ctx, "echo", "hello")

        result = asyncio.run(_run())

        assert result.success
        assert result.exit_code == 0
        assert result.stdout.strip() == "hello"
        assert result.command == "echo hello"
        assert lines[0] == ("DNS", "op", "running command; calling exec with flags: echo hello")
        assert ("DNS", "op", "logs: hello") in lines

    def test_non_zero_exit(self):
        async def _run():
            return await ProcessExecutor().run(RunContext(), "sh", "-c", "echo oops >&2; exit 3")

        result = asyncio.run(_run())

        assert result.exit_code == 3
        assert isinstance(result.error, CommandExecutionError)
        assert str(result.error) == "exit status 3"
        assert result.stderr.strip() == "oops"
        assert not is_interrupted(result.error)

    def test_deadline_kills_process(self):
        """测试超过截止时间时终止子进程"""
        async def _run():
            ctx = RunContext().with_timeout(0.2)
            return await ProcessExecutor().run(ctx, "sleep", "5")

        result = asyncio.run(_run())

        assert isinstance(result.error, CommandTimeoutError)
        assert is_interrupted(result.error)
        assert result.duration < 4

    def test_stop_signal_kills_process(self):
        """测试停止信号终止子进程"""
        async def _run():
            ctx = RunContext()
            asyncio.get_running_loop().call_later(0.1, ctx.cancel)
            return await ProcessExecutor().run(ctx, "sleep", "5")

        result = asyncio.run(_run())

        assert isinstance(result.error, CommandCancelledError)
        assert str(result.error) == "context canceled"

    def test_keeps_partial_output(self):
        async def _run():
            ctx = RunContext().with_timeout(0.5)
            return await ProcessExecutor().run(ctx, "sh", "-c", "echo partial; sleep 5")

        result = asyncio.run(_run())

        assert is_interrupted(result.error)
        assert "partial" in result.stdout

    def test_deadline_kills_grandchild(self):
        """测试截止时间终止整个进程组，孙进程不会拖住管道"""
        async def _run():
            ctx = RunContext().with_timeout(0.5)
            return await ProcessExecutor().run(ctx, "sh", "-c", "sleep 4; echo x")

        result = asyncio.run(_run())

        assert isinstance(result.error, CommandTimeoutError)
        assert result.duration < 2
        assert "x" not in result.stdout

    def test_already_done_context_does_not_spawn(self):
        async def _run():
            ctx = RunContext()
            ctx.cancel()
            return await ProcessExecutor().run(ctx, "sleep", "5")

        result = asyncio.run(_run())

        assert result.exit_code == -1
        assert isinstance(result.error, CommandCancelledError)

    def test_spawn_failure(self):
        """测试可执行文件不存在"""
        async def _run():
            return await ProcessExecutor().run(RunContext(), "netcheck-no-such-tool")

        result = asyncio.run(_run())

        assert result.exit_code == -1
        assert isinstance(result.error, CommandExecutionError)
        assert not is_interrupted(result.error)

    def test_look_path(self):
        executor = ProcessExecutor()

        assert executor.look_path("sh") is not None
        assert executor.look_path("netcheck-no-such-tool") is None


class TestFakeExecutor:
    """脚本化执行器测试"""

    def test_records_calls(self):
        fake = FakeExecutor(outputs={"dig google.com": ";; Query time: 3 msec"}, paths={"dig"})

        result = asyncio.run(fake.run(RunContext(), "dig", "google.com"))

        assert result.stdout == ";; Query time: 3 msec"
        assert fake.calls == ["dig google.com"]
        assert fake.look_path("dig") == "/usr/bin/dig"
        assert fake.look_path("curl") is None

    def test_unconfigured_command(self):
        fake = FakeExecutor()

        result = asyncio.run(fake.run(RunContext(), "curl", "-s", "x"))

        assert result.exit_code == 127
        assert isinstance(result.error, CommandExecutionError)

    def test_string_error_wrapped(self):
        fake = FakeExecutor(outputs={"ping x": FakeResponse(error="exit status 2", exit_code=2)})

        result = asyncio.run(fake.run(RunContext(), "ping", "x"))

        assert isinstance(result.error, CommandExecutionError)
        assert str(result.error) == "exit status 2"

    def test_delay_respects_deadline(self):
        fake = FakeExecutor(outputs={"ping x": FakeResponse(stdout="ok", delay=5)})

        async def _run():
            return await fake.run(RunContext().with_timeout(0.1), "ping", "x")

        result = asyncio.run(_run())

        assert result.stdout == ""
        assert isinstance(result.error, CommandTimeoutError)


class TestHelpers:
    """辅助函数测试"""

    def test_describe_command(self):
        assert describe_command("ping", ["-c", "10", "1.1.1.1"]) == "measuring latency/loss to target"
        assert describe_command("dig", ["x"]) == "performing DNS lookup"
        assert describe_command("unknown", []) == "running command"

    @pytest.mark.parametrize("error,expected", [
        (None, False),
        (CommandTimeoutError(), True),
        (CommandCancelledError(), True),
        (CommandExecutionError("signal: killed"), True),
        (CommandExecutionError("exit status 1"), False),
    ])
    def test_is_interrupted(self, error, expected):
        assert is_interrupted(error) == expected

    def test_command_result_str(self):
        result = CommandResult(command="ping x", exit_code=1, error=CommandExecutionError("exit status 1"))

        assert str(result) == "[FAIL] ping x (exit=1, time=0.00s)"
        assert not result.success
