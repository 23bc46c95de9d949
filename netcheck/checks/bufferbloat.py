"""
缓冲膨胀检查

空闲ping → 施加短时带宽负载 → 负载下ping，按平均延迟增量分级
"""
import time

from ..context import RunContext
from ..integrations.executor import Executor
from ..models.config import Config
from ..models.results import CheckResult, Status
from ..runner.analyzer import lower_is_better
from ..utils.parsers import build_iperf_client_args, parse_ping
from .base import Check, run_with_timeout

LOAD_STREAMS = 2
LOAD_DURATION_SEC = 5


class BufferbloatCheck(Check):
    """负载下的延迟膨胀"""

    group = "bufferbloat"

    def __init__(self, target: str):
        self._target = target

    @property
    def id(self) -> str:
        return f"bufferbloat.{self._target}"

    @property
    def target(self) -> str:
        return self._target

    async def run(self, ctx: RunContext, executor: Executor, config: Config, timeout_sec: int) -> CheckResult:
        started = time.monotonic()
        if executor.look_path("ping") is None:
            return self.skip("ping not found")

        idle = await run_with_timeout(ctx, executor, timeout_sec, "ping", "-c", "10", self._target)
        failed = self.interrupted_or_failed(idle, started)
        if failed is not None:
            return failed
        idle_avg = parse_ping(idle.stdout).avg_ms

        await self._apply_load(ctx, executor, config, timeout_sec)

        loaded = await run_with_timeout(ctx, executor, timeout_sec, "ping", "-c", "10", self._target)
        failed = self.interrupted_or_failed(loaded, started)
        if failed is not None:
            return failed
        loaded_avg = parse_ping(loaded.stdout).avg_ms

        delta = loaded_avg - idle_avg
        th = config.thresholds
        status = lower_is_better(delta, th.loaded_latency_pass_delta_ms, th.loaded_latency_warn_delta_ms)
        return self.result(
            status,
            started,
            metrics={"idle_ms": idle_avg, "loaded_ms": loaded_avg, "delta_ms": delta},
            raw=loaded.stdout,
        )

    async def _apply_load(self, ctx: RunContext, executor: Executor, config: Config, timeout_sec: int) -> None:
        """运行一次带宽命令作为负载，结果丢弃"""
        iperf = config.bandwidth.iperf
        if iperf.enabled and iperf.target:
            args = build_iperf_client_args(iperf.target, LOAD_STREAMS, LOAD_DURATION_SEC, False)
            await run_with_timeout(ctx, executor, timeout_sec, "iperf3", *args)
        elif config.bandwidth.speedtest.enabled:
            await run_with_timeout(ctx, executor, timeout_sec, "speedtest-cli", "--json")
