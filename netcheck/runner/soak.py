"""
Soak持续运行

按固定间隔重复执行检查，直到达到持续时间、收到停止信号或到达截止时间，
期间输出带序号的事件流
"""
import inspect
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, TextIO, Union

from .. import __version__
from ..context import RunContext
from ..integrations.executor import Executor
from ..models.config import Config
from ..models.events import SoakEvent
from ..models.options import RunOptions
from ..models.report import Report
from .analyzer import EXIT_OK, EXIT_RUNTIME_ERROR, exit_code_for
from .engine import ProgressCallback, RunError, run_once

EventCallback = Callable[[SoakEvent], Union[None, Awaitable[None]]]
IntervalCallback = Callable[[Report], Union[None, Awaitable[None]]]


class SoakEventWriter:
    """
    Soak事件写入器

    负责序号（从1开始严格递增），事件写为JSON行到文本流，
    或交给回调（HTTP服务的SSE队列）
    """

    def __init__(self, stream: Optional[TextIO] = None, callback: Optional[EventCallback] = None):
        """
        Args:
            stream: 文本输出流，每个事件一行
            callback: 事件回调，普通函数或async函数
        """
        self.stream = stream
        self.callback = callback
        self.sequence = 0

    async def emit(self, event_type: str, run_id: str, payload: Optional[Dict[str, Any]] = None) -> SoakEvent:
        """生成并输出一个事件"""
        self.sequence += 1
        event = SoakEvent(
            event_type=event_type,
            run_id=run_id,
            sequence=self.sequence,
            payload=payload or {},
        )
        if self.stream is not None:
            self.stream.write(event.to_json() + "\n")
            self.stream.flush()
        if self.callback is not None:
            result = self.callback(event)
            if inspect.isawaitable(result):
                await result
        return event


class SoakState(str, Enum):
    """Soak状态，DONE为终态"""
    IDLE = "idle"
    RUNNING = "running"
    SLEEPING = "sleeping"
    DONE = "done"


class SoakRunner:
    """
    Soak运行器

    IDLE → RUNNING → (SLEEPING → RUNNING)* → DONE；
    进入DONE时输出唯一一次run_finished
    """

    def __init__(
        self,
        executor: Executor,
        config: Config,
        options: RunOptions,
        writer: SoakEventWriter,
        interval_sec: Optional[int] = None,
        duration_sec: Optional[int] = None,
        version: str = __version__,
        commit: str = "",
        progress: Optional[ProgressCallback] = None,
        on_interval: Optional[IntervalCallback] = None
    ):
        """
        Args:
            executor: 命令执行器
            config: 配置
            options: 运行选项
            writer: 事件写入器
            interval_sec: 间隔（秒），None时使用配置，<=0时按1秒处理
            duration_sec: 持续时间（秒），None时使用配置，<=0表示不限
            version: 工具版本
            commit: git提交
            progress: 进度回调，透传给每次运行
            on_interval: 每轮结束后的报告回调
        """
        self.executor = executor
        self.config = config
        self.options = options
        self.writer = writer
        interval = config.soak.interval_sec if interval_sec is None else interval_sec
        self.interval_sec = interval if interval > 0 else 1
        self.duration_sec = config.soak.duration_sec if duration_sec is None else duration_sec
        self.version = version
        self.commit = commit
        self.progress = progress
        self.on_interval = on_interval
        self.run_id = options.run_id or f"soak-{int(time.time())}"
        self.state = SoakState.IDLE
        self.iterations = 0

    async def run(self, ctx: RunContext) -> int:
        """
        执行soak循环

        Returns:
            最后一轮的退出码；编排错误时返回3
        """
        if self.state != SoakState.IDLE:
            raise RuntimeError(f"soak runner cannot start from state {self.state.value}")

        started = time.monotonic()
        self.state = SoakState.RUNNING
        await self.writer.emit("run_started", self.run_id, {"command": "soak"})

        last_exit = EXIT_OK
        error: Optional[RunError] = None
        while True:
            elapsed = time.monotonic() - started
            if self.duration_sec > 0 and elapsed >= self.duration_sec:
                break
            if ctx.done():
                break

            self.state = SoakState.RUNNING
            # 有持续时间时本轮截止于持续时间结束，超出量与检查项数量无关
            run_ctx = ctx.with_timeout(self.duration_sec - elapsed) if self.duration_sec > 0 else ctx
            try:
                result = await run_once(
                    run_ctx, self.executor, self.config, self.options,
                    version=self.version, commit=self.commit, progress=self.progress,
                )
            except RunError as e:
                error = e
                last_exit = EXIT_RUNTIME_ERROR
                break
            self.iterations += 1
            await self._emit_interval(result.report)
            last_exit = exit_code_for(result.report.checks, self.options.strict_warn)

            sleep_for: float = self.interval_sec
            if self.duration_sec > 0:
                remaining = self.duration_sec - (time.monotonic() - started)
                if remaining <= 0:
                    break
                sleep_for = min(sleep_for, remaining)
            self.state = SoakState.SLEEPING
            if not await ctx.sleep(sleep_for):
                break

        self.state = SoakState.DONE
        if error is not None:
            await self.writer.emit("run_finished", self.run_id, {"error": str(error)})
            return last_exit

        if self.config.soak.emit_final_summary:
            await self.writer.emit("run_summary", self.run_id, {"done": True})
        await self.writer.emit(
            "run_finished", self.run_id, {"duration_sec": int(time.monotonic() - started)}
        )
        return last_exit

    async def _emit_interval(self, report: Report) -> None:
        for check in report.checks:
            await self.writer.emit("check_result", self.run_id, {
                "id": check.id,
                "status": check.status.value,
                "target": check.target,
            })
        await self.writer.emit("interval_summary", self.run_id, {
            "summary": report.summary.to_dict(),
            "score": report.score,
        })
        if self.on_interval is not None:
            result = self.on_interval(report)
            if inspect.isawaitable(result):
                await result
