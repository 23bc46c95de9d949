"""
本地网关检查

从路由表发现默认网关并ping它；ifconfig的接口统计只作为附加指标
"""
import time

from ..context import RunContext
from ..integrations.executor import Executor
from ..models.config import Config
from ..models.results import CheckResult, Status
from ..runner.analyzer import lower_is_better
from ..utils.parsers import parse_default_gateway, parse_interface_activity, parse_ping
from .base import Check, run_with_timeout


class LocalCheck(Check):
    """默认网关可达性"""

    group = "local"

    @property
    def id(self) -> str:
        return "local.gateway"

    async def run(self, ctx: RunContext, executor: Executor, config: Config, timeout_sec: int) -> CheckResult:
        started = time.monotonic()
        if executor.look_path("netstat") is None:
            return self.skip("netstat not found")

        routes = await run_with_timeout(ctx, executor, timeout_sec, "netstat", "-rn")
        if routes.error is not None:
            return self.result(Status.FAIL, started, error=str(routes.error))

        gateway = parse_default_gateway(routes.stdout)
        if not gateway:
            return self.result(Status.WARN, started, error="default gateway not detected")

        ping = await run_with_timeout(ctx, executor, timeout_sec, "ping", "-c", "10", gateway)
        failed = self.interrupted_or_failed(ping, started, target=gateway)
        if failed is not None:
            return failed

        stats = parse_ping(ping.stdout)
        status = lower_is_better(stats.loss_pct, config.thresholds.loss_pass_max, config.thresholds.loss_warn_max)
        metrics = {"loss_pct": stats.loss_pct, "avg_ms": stats.avg_ms, "jitter_ms": stats.jitter_ms}

        if executor.look_path("ifconfig") is not None:
            ifconfig = await run_with_timeout(ctx, executor, timeout_sec, "ifconfig")
            activity = parse_interface_activity(ifconfig.stdout)
            metrics["active_interfaces"] = activity.active_interfaces
            metrics["local_ip_count"] = activity.local_ip_count

        return self.result(status, started, target=gateway, metrics=metrics, raw=ping.stdout)
