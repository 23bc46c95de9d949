"""
执行日志分发器

执行器只把日志放入有界队列，由后台任务投递给观察者，
慢观察者不会阻塞命令执行
"""
import asyncio
import inspect
from typing import Any, Callable, Optional, Tuple

LogLine = Tuple[str, str, str]          # (group, op, msg)


class ExecLogDispatcher:
    """
    执行日志分发器

    emit() 同步且永不阻塞：队列满时丢弃该行并计数
    """

    def __init__(self, sink: Callable[[str, str, str], Any], maxsize: int = 1000):
        """
        Args:
            sink: 日志观察者，可以是普通函数或async函数
            maxsize: 队列容量
        """
        self.sink = sink
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0
        self.delivered = 0
        self._drain_task: Optional[asyncio.Task] = None

    def emit(self, group: str, op: str, msg: str) -> None:
        """放入一行日志"""
        try:
            self.queue.put_nowait((group, op, msg))
        except asyncio.QueueFull:
            self.dropped += 1

    def start(self) -> None:
        """启动后台投递任务"""
        if self._drain_task is None:
            self._drain_task = asyncio.create_task(self._drain_loop())

    async def _drain_loop(self) -> None:
        while True:
            line = await self.queue.get()
            try:
                await self._deliver(line)
            except asyncio.CancelledError:
                self.dropped += 1
                raise
            finally:
                self.queue.task_done()

    async def _deliver(self, line: LogLine) -> None:
        try:
            if inspect.iscoroutinefunction(self.sink):
                result = self.sink(*line)
            else:
                # 同步观察者放到线程里，不占用事件循环
                result = await asyncio.to_thread(self.sink, *line)
            if inspect.isawaitable(result):
                await result
            self.delivered += 1
        except Exception:
            # 观察者异常不能影响执行流程
            self.dropped += 1

    async def aclose(self, timeout: float = 5.0) -> None:
        """
        投递完已排队的日志后停止

        Args:
            timeout: 等待队列排空的最长时间，超时后剩余日志计为丢弃
        """
        if self._drain_task is None:
            while not self.queue.empty():
                await self._deliver(self.queue.get_nowait())
            return
        try:
            await asyncio.wait_for(self.queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            self.dropped += self.queue.qsize()
        self._drain_task.cancel()
        try:
            await self._drain_task
        except asyncio.CancelledError:
            pass
        self._drain_task = None

    async def __aenter__(self) -> "ExecLogDispatcher":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
