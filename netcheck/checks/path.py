"""
路径质量检查

优先使用mtr统计末跳丢包，mtr不可用或执行失败时回退到traceroute
"""
import time

from ..context import RunContext
from ..integrations.executor import Executor, is_interrupted
from ..models.config import Config
from ..models.results import CheckResult, Status
from ..utils.parsers import parse_mtr_summary, parse_traceroute_summary
from .base import Check, run_with_timeout, stderr_msg

MTR_LOSS_FAIL_PCT = 2.0
MTR_LOSS_WARN_PCT = 0.5


class PathCheck(Check):
    """到目标的路由路径"""

    group = "path"

    def __init__(self, target: str):
        self._target = target

    @property
    def id(self) -> str:
        return f"path.{self._target}"

    @property
    def target(self) -> str:
        return self._target

    async def run(self, ctx: RunContext, executor: Executor, config: Config, timeout_sec: int) -> CheckResult:
        started = time.monotonic()
        if executor.look_path("mtr") is None:
            return await self._run_traceroute(ctx, executor, timeout_sec, started)

        res = await run_with_timeout(ctx, executor, timeout_sec, "mtr", "-rwzc", "10", self._target)
        if is_interrupted(res.error):
            return self.result(Status.FAIL, started, raw=res.stdout, error=str(res.error))
        if res.error is not None:
            # mtr已安装但可能缺少raw socket权限
            return await self._run_traceroute(ctx, executor, timeout_sec, started)

        summary = parse_mtr_summary(res.stdout)
        if summary.near_dest_loss_pct >= MTR_LOSS_FAIL_PCT:
            status = Status.FAIL
        elif summary.near_dest_loss_pct >= MTR_LOSS_WARN_PCT:
            status = Status.WARN
        else:
            status = Status.PASS
        return self.result(
            status,
            started,
            metrics={"hop_count": summary.hop_count, "near_dest_loss_pct": summary.near_dest_loss_pct},
            raw=res.stdout,
            error=stderr_msg(res.stderr),
        )

    async def _run_traceroute(
        self,
        ctx: RunContext,
        executor: Executor,
        timeout_sec: int,
        started: float
    ) -> CheckResult:
        if executor.look_path("traceroute") is None:
            return self.skip("mtr and traceroute not found")

        res = await run_with_timeout(ctx, executor, timeout_sec, "traceroute", "-m", "15", self._target)
        failed = self.interrupted_or_failed(res, started)
        if failed is not None:
            return failed

        summary = parse_traceroute_summary(res.stdout)
        status = Status.WARN if summary.timeout_hops > 0 else Status.PASS
        return self.result(
            status,
            started,
            metrics={"hop_count": summary.hop_count, "timeout_hops": summary.timeout_hops},
            raw=res.stdout,
            error=stderr_msg(res.stderr),
        )
