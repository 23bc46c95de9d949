"""
运行上下文

携带截止时间、停止信号和日志回调，显式传递给执行器、检查项和编排器
"""
import asyncio
import time
from typing import Callable, Optional

# (group, op, msg)，必须是非阻塞的
LogSink = Callable[[str, str, str], None]


class CommandInterruptedError(Exception):
    """命令被中断（超时或取消）的基类"""
    pass


class CommandTimeoutError(CommandInterruptedError):
    """超过截止时间"""

    def __init__(self, message: str = "deadline exceeded"):
        super().__init__(message)


class CommandCancelledError(CommandInterruptedError):
    """收到停止信号"""

    def __init__(self, message: str = "context canceled"):
        super().__init__(message)


class RunContext:
    """
    运行上下文

    子上下文共享同一个停止信号，截止时间取父子中较早的一个。
    必须在事件循环内创建和使用（asyncio.Event绑定到首次等待它的循环）
    """

    def __init__(
        self,
        stop_event: Optional[asyncio.Event] = None,
        deadline: Optional[float] = None,
        log_sink: Optional[LogSink] = None,
        group: str = "SYSTEM",
        check_id: str = ""
    ):
        """
        Args:
            stop_event: 停止信号，set后所有进行中的命令被终止
            deadline: time.monotonic() 时间点，None表示无截止时间
            log_sink: 执行日志回调
            group: 当前检查分组（日志标签）
            check_id: 当前检查ID
        """
        self.stop_event = stop_event or asyncio.Event()
        self.deadline = deadline
        self.log_sink = log_sink
        self.group = group
        self.check_id = check_id

    def _derive(self, **changes) -> "RunContext":
        params = {
            "stop_event": self.stop_event,
            "deadline": self.deadline,
            "log_sink": self.log_sink,
            "group": self.group,
            "check_id": self.check_id,
        }
        params.update(changes)
        return RunContext(**params)

    def with_timeout(self, seconds: float) -> "RunContext":
        """派生带超时的子上下文，较紧的截止时间生效"""
        candidate = time.monotonic() + seconds
        if self.deadline is not None and self.deadline < candidate:
            candidate = self.deadline
        return self._derive(deadline=candidate)

    def with_check(self, group: str, check_id: str) -> "RunContext":
        """派生携带检查元数据的子上下文"""
        return self._derive(group=group, check_id=check_id)

    def remaining(self) -> Optional[float]:
        """距截止时间的秒数，无截止时间返回None"""
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def cancel(self) -> None:
        """发送停止信号"""
        self.stop_event.set()

    @property
    def cancelled(self) -> bool:
        return self.stop_event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def done(self) -> bool:
        return self.cancelled or self.expired

    def err(self) -> Optional[CommandInterruptedError]:
        """上下文结束的原因，未结束返回None"""
        if self.cancelled:
            return CommandCancelledError()
        if self.expired:
            return CommandTimeoutError()
        return None

    async def sleep(self, seconds: float) -> bool:
        """
        可中断的等待

        计时器与停止信号、截止时间竞争，不忙等

        Returns:
            完整睡眠返回True；被停止或到达截止时间返回False
        """
        if self.done():
            return False
        timeout = seconds
        remaining = self.remaining()
        clipped = remaining is not None and remaining < timeout
        if clipped:
            timeout = remaining
        try:
            await asyncio.wait_for(self.stop_event.wait(), timeout=max(timeout, 0))
        except asyncio.TimeoutError:
            # 事件循环的计时器可能略早于截止时间触发
            return not clipped and not self.cancelled
        return False

    def log(self, op: str, msg: str) -> None:
        """写一条执行日志（无回调时忽略）"""
        if self.log_sink is not None:
            self.log_sink(self.group, op, msg)
