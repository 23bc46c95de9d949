"""
连通性检查

ping目标10次，依次按丢包、p95延迟、抖动分级
"""
import time

from ..context import RunContext
from ..integrations.executor import Executor
from ..models.config import Config
from ..models.results import CheckResult, Status
from ..runner.analyzer import lower_is_better, worst
from ..utils.parsers import parse_ping
from .base import Check, run_with_timeout, stderr_msg


class ReachabilityCheck(Check):
    """到单个目标的连通性与延迟"""

    group = "reachability"

    def __init__(self, target: str):
        self._target = target

    @property
    def id(self) -> str:
        return f"reachability.{self._target}"

    @property
    def target(self) -> str:
        return self._target

    async def run(self, ctx: RunContext, executor: Executor, config: Config, timeout_sec: int) -> CheckResult:
        started = time.monotonic()
        if executor.look_path("ping") is None:
            return self.skip("ping not found")

        res = await run_with_timeout(ctx, executor, timeout_sec, "ping", "-c", "10", self._target)
        failed = self.interrupted_or_failed(res, started)
        if failed is not None:
            return failed

        stats = parse_ping(res.stdout)
        th = config.thresholds
        # 前一级为pass时才看下一项，取较差者
        status = lower_is_better(stats.loss_pct, th.loss_pass_max, th.loss_warn_max)
        if status == Status.PASS:
            status = worst(status, lower_is_better(stats.p95_ms, th.rtt_p95_pass_max_ms, th.rtt_p95_warn_max_ms))
        if status == Status.PASS:
            status = worst(status, lower_is_better(stats.jitter_ms, th.jitter_pass_max_ms, th.jitter_warn_max_ms))

        metrics = {
            "loss_pct": stats.loss_pct,
            "avg_ms": stats.avg_ms,
            "rtt_p95_ms": stats.p95_ms,
            "jitter_ms": stats.jitter_ms,
        }
        return self.result(status, started, metrics=metrics, raw=res.stdout, error=stderr_msg(res.stderr))
