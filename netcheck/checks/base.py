"""
检查项基类与公共工具

每个检查项通过执行器调用外部工具，解析输出并分级，只产生一个CheckResult
"""
import time
from typing import Dict, Optional

from ..context import RunContext
from ..integrations.executor import CommandResult, Executor, is_interrupted
from ..models.config import Config
from ..models.results import CheckResult, MetricValue, Status

DEFAULT_CALL_TIMEOUT_SEC = 20


class Check:
    """
    检查项基类

    子类设置group并实现run；run不抛出执行相关异常
    """

    group: str = ""

    @property
    def id(self) -> str:
        raise NotImplementedError

    @property
    def target(self) -> str:
        return ""

    async def run(
        self,
        ctx: RunContext,
        executor: Executor,
        config: Config,
        timeout_sec: int
    ) -> CheckResult:
        """
        执行检查

        Args:
            ctx: 运行上下文
            executor: 命令执行器
            config: 只读配置
            timeout_sec: 单次命令超时（秒），<=0时使用20秒

        Returns:
            CheckResult
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.id!r})"

    def result(
        self,
        status: Status,
        started: Optional[float] = None,
        target: Optional[str] = None,
        metrics: Optional[Dict[str, MetricValue]] = None,
        raw: str = "",
        error: str = ""
    ) -> CheckResult:
        """构造本检查项的结果"""
        return CheckResult(
            id=self.id,
            group=self.group,
            status=status,
            target=self.target if target is None else target,
            metrics=metrics or {},
            raw=raw,
            duration_ms=elapsed_ms(started) if started is not None else 0,
            error=error,
        )

    def skip(self, error: str, target: Optional[str] = None) -> CheckResult:
        """跳过（工具缺失、未启用），不执行任何命令"""
        return self.result(Status.SKIP, target=target, error=error)

    def interrupted_or_failed(
        self,
        res: CommandResult,
        started: float,
        target: Optional[str] = None
    ) -> Optional[CheckResult]:
        """
        公共失败判定

        被中断的调用为fail并保留部分输出；有错误且无输出为fail；否则返回None继续解析
        """
        if is_interrupted(res.error):
            return self.result(Status.FAIL, started, target=target, raw=res.stdout, error=str(res.error))
        if res.error is not None and not res.stdout:
            return self.result(Status.FAIL, started, target=target, error=str(res.error))
        return None


async def run_with_timeout(
    ctx: RunContext,
    executor: Executor,
    timeout_sec: int,
    name: str,
    *args: str
) -> CommandResult:
    """在派生的子上下文中执行命令，父子截止时间取较早者"""
    seconds = timeout_sec if timeout_sec > 0 else DEFAULT_CALL_TIMEOUT_SEC
    return await executor.run(ctx.with_timeout(seconds), name, *args)


def stderr_msg(stderr: str) -> str:
    if not stderr:
        return ""
    return f"stderr: {stderr}"


def elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
