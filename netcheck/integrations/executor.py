"""
命令执行器

在本机执行外部网络工具，支持截止时间和停止信号，超时/取消时终止子进程
"""
import asyncio
import os
import shutil
import signal
import time
from dataclasses import dataclass
from typing import Optional, Sequence

from ..context import (
    CommandCancelledError,
    CommandInterruptedError,
    CommandTimeoutError,
    RunContext,
)

__all__ = [
    "CommandResult",
    "Executor",
    "ProcessExecutor",
    "ExecutorError",
    "CommandExecutionError",
    "CommandInterruptedError",
    "CommandTimeoutError",
    "CommandCancelledError",
    "describe_command",
    "is_interrupted",
]


class ExecutorError(Exception):
    """执行器错误基类"""
    pass


class CommandExecutionError(ExecutorError):
    """命令无法启动或以非零状态退出"""
    pass


@dataclass(frozen=True)
class CommandResult:
    """
    命令执行结果

    error为None表示正常退出；CommandInterruptedError表示超时/取消/被杀
    """
    command: str                        # 执行的命令
    stdout: str = ""                    # 标准输出
    stderr: str = ""                    # 标准错误输出
    exit_code: int = 0                  # 退出码
    error: Optional[Exception] = None   # 执行错误
    duration: float = 0.0               # 执行耗时（秒）

    @property
    def success(self) -> bool:
        return self.error is None

    def __str__(self) -> str:
        status = "OK" if self.success else "FAIL"
        return f"[{status}] {self.command} (exit={self.exit_code}, time={self.duration:.2f}s)"


KILL_GRACE_SEC = 2.0                    # 终止后等待管道关闭的上限

_COMMAND_PURPOSES = {
    "netstat": "discovering routing/gateway information",
    "ifconfig": "collecting local interface information",
    "dig": "performing DNS lookup",
    "curl": "measuring HTTP/TLS timings",
    "mtr": "collecting path quality and hop loss",
    "traceroute": "collecting route hop path",
    "speedtest-cli": "running internet throughput test",
    "iperf3": "running controlled throughput test",
    "openssl": "reading TLS handshake metadata",
}


def describe_command(name: str, args: Sequence[str]) -> str:
    """命令用途的可读描述，用于执行日志"""
    if name == "ping":
        return "measuring latency/loss to target" if args else "measuring latency/loss"
    return _COMMAND_PURPOSES.get(name, "running command")


def is_interrupted(error: Optional[BaseException]) -> bool:
    """错误是否为超时、取消或进程被杀"""
    if error is None:
        return False
    if isinstance(error, CommandInterruptedError):
        return True
    text = str(error).lower()
    return "deadline exceeded" in text or "context canceled" in text or "killed" in text


def log_output(ctx: RunContext, result: CommandResult) -> None:
    """按行输出stdout/stderr和错误到执行日志"""
    for line in result.stdout.strip().split("\n"):
        if line.strip():
            ctx.log("op", f"logs: {line}")
    for line in result.stderr.strip().split("\n"):
        if line.strip():
            ctx.log("op", f"stderr: {line}")
    if result.error is not None:
        ctx.log("op", f"exec error: {result.error}")


class Executor:
    """
    执行器接口

    检查项只通过 run / look_path 与系统交互，测试中用FakeExecutor替换
    """

    async def run(self, ctx: RunContext, name: str, *args: str) -> CommandResult:
        raise NotImplementedError

    def look_path(self, name: str) -> Optional[str]:
        raise NotImplementedError


class ProcessExecutor(Executor):
    """
    本机子进程执行器

    不做重试；截止时间或停止信号先到时kill子进程并保留已读取的输出
    """

    async def run(self, ctx: RunContext, name: str, *args: str) -> CommandResult:
        """
        执行一条命令

        Args:
            ctx: 运行上下文（截止时间、停止信号、日志）
            name: 可执行文件名
            *args: 参数

        Returns:
            CommandResult，不抛出执行相关异常
        """
        command = " ".join([name, *args])
        start = time.monotonic()
        ctx.log("op", f"{describe_command(name, args)}; calling exec with flags: {command}")

        early = ctx.err()
        if early is not None:
            result = CommandResult(command=command, exit_code=-1, error=early)
            log_output(ctx, result)
            return result

        try:
            proc = await asyncio.create_subprocess_exec(
                name, *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            result = CommandResult(
                command=command,
                exit_code=-1,
                error=CommandExecutionError(str(e)),
                duration=time.monotonic() - start,
            )
            log_output(ctx, result)
            return result

        communicate = asyncio.ensure_future(proc.communicate())
        stopped = asyncio.ensure_future(ctx.stop_event.wait())
        interrupted: Optional[CommandInterruptedError] = None
        try:
            done, _ = await asyncio.wait(
                {communicate, stopped},
                timeout=ctx.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
            if communicate not in done:
                interrupted = ctx.err() or CommandTimeoutError()
                _kill(proc)
                # 终止后管道仍可能被残留进程占用，等待有上限
                await asyncio.wait({communicate}, timeout=KILL_GRACE_SEC)
            if communicate.done():
                stdout_b, stderr_b = communicate.result()
            else:
                communicate.cancel()
                stdout_b, stderr_b = b"", b""
        except asyncio.CancelledError:
            _kill(proc)
            communicate.cancel()
            raise
        finally:
            stopped.cancel()

        code = proc.returncode if proc.returncode is not None else -1
        error: Optional[Exception] = interrupted
        if error is None and code != 0:
            error = _exit_error(code)

        result = CommandResult(
            command=command,
            stdout=stdout_b.decode(errors="replace"),
            stderr=stderr_b.decode(errors="replace"),
            exit_code=code,
            error=error,
            duration=time.monotonic() - start,
        )
        log_output(ctx, result)
        return result

    def look_path(self, name: str) -> Optional[str]:
        return shutil.which(name)


def _kill(proc: asyncio.subprocess.Process) -> None:
    """终止子进程所在的整个进程组，子进程派生的后台进程一并结束"""
    killpg = getattr(os, "killpg", None)
    if killpg is not None:
        try:
            killpg(proc.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
        except PermissionError:
            pass
    if proc.returncode is not None:
        return
    try:
        proc.kill()
    except ProcessLookupError:
        pass


def _exit_error(code: int) -> Exception:
    if code < 0:
        if -code == signal.SIGKILL:
            return CommandInterruptedError("signal: killed")
        try:
            name = signal.Signals(-code).name
        except ValueError:
            name = str(-code)
        return CommandExecutionError(f"signal: {name}")
    return CommandExecutionError(f"exit status {code}")
