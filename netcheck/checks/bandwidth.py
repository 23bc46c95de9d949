"""
带宽检查

speedtest-cli测公网带宽，iperf3测到指定服务端的带宽；配置签约带宽时按百分比分级
"""
import time

from ..context import RunContext
from ..integrations.executor import Executor, is_interrupted
from ..models.config import Config
from ..models.results import CheckResult, Status
from ..runner.analyzer import upper_is_better
from ..utils.parsers import build_iperf_client_args, parse_iperf_mbps, parse_speedtest_json
from .base import Check, run_with_timeout

SPEEDTEST_MIN_TIMEOUT_SEC = 45
IPERF_TIMEOUT_MARGIN_SEC = 10
BELOW_PLAN_ERROR = "throughput below expected plan thresholds"

_UNREACHABLE_MARKERS = (
    "unable to connect",
    "no route to host",
    "connection refused",
    "network is unreachable",
    "timed out",
)


def is_iperf_unreachable(error: str, stderr: str) -> bool:
    """iperf3错误是否表示服务端不可达（目标侧问题，不是测量缺陷）"""
    text = f"{error} {stderr}".lower()
    return any(marker in text for marker in _UNREACHABLE_MARKERS)


class SpeedtestCheck(Check):
    """公网测速"""

    group = "bandwidth"

    @property
    def id(self) -> str:
        return "bandwidth.speedtest"

    async def run(self, ctx: RunContext, executor: Executor, config: Config, timeout_sec: int) -> CheckResult:
        started = time.monotonic()
        speedtest = config.bandwidth.speedtest
        if not speedtest.enabled:
            return self.skip("speedtest disabled")
        if executor.look_path("speedtest-cli") is None:
            return self.skip("speedtest-cli not found")

        args = ["--json"]
        if speedtest.server_id:
            args += ["--server", speedtest.server_id]
        res = await run_with_timeout(
            ctx, executor, max(timeout_sec, SPEEDTEST_MIN_TIMEOUT_SEC), "speedtest-cli", *args
        )
        failed = self.interrupted_or_failed(res, started)
        if failed is not None:
            return failed

        parsed = parse_speedtest_json(res.stdout)
        if parsed is None:
            return self.result(Status.WARN, started, raw=res.stdout, error="unable to parse speedtest json")

        plan = config.expected_plan
        th = config.thresholds
        status = Status.PASS
        metrics = {"download_mbps": parsed.download_mbps, "upload_mbps": parsed.upload_mbps}
        if plan.download_mbps > 0:
            pct = parsed.download_mbps / plan.download_mbps * 100
            metrics["download_pct_of_expected"] = pct
            status = upper_is_better(pct, th.throughput_pass_pct, th.throughput_warn_pct)
        if status == Status.PASS and plan.upload_mbps > 0:
            pct = parsed.upload_mbps / plan.upload_mbps * 100
            metrics["upload_pct_of_expected"] = pct
            status = upper_is_better(pct, th.throughput_pass_pct, th.throughput_warn_pct)

        error = ""
        if status != Status.PASS and (plan.download_mbps > 0 or plan.upload_mbps > 0):
            error = BELOW_PLAN_ERROR
        return self.result(status, started, metrics=metrics, raw=res.stdout, error=error)


class IperfCheck(Check):
    """到iperf3服务端的受控带宽测试"""

    group = "bandwidth"

    @property
    def id(self) -> str:
        return "bandwidth.iperf"

    async def run(self, ctx: RunContext, executor: Executor, config: Config, timeout_sec: int) -> CheckResult:
        started = time.monotonic()
        iperf = config.bandwidth.iperf
        if not iperf.enabled:
            return self.skip("iperf disabled")
        if not iperf.target:
            return self.skip("iperf target not configured")
        if executor.look_path("iperf3") is None:
            return self.skip("iperf3 not found")

        target = iperf.target
        args = build_iperf_client_args(target, iperf.parallel_streams, iperf.duration_sec, True)
        timeout = max(timeout_sec, iperf.duration_sec + IPERF_TIMEOUT_MARGIN_SEC)
        res = await run_with_timeout(ctx, executor, timeout, "iperf3", *args)
        if res.error is not None and not res.stdout and not is_interrupted(res.error):
            if is_iperf_unreachable(str(res.error), res.stderr):
                return self.result(Status.SKIP, started, target=target, error="iperf target unreachable")
        failed = self.interrupted_or_failed(res, started, target=target)
        if failed is not None:
            return failed

        mbps = parse_iperf_mbps(res.stdout)
        plan = config.expected_plan
        status = Status.PASS
        metrics = {"download_mbps": mbps}
        error = ""
        if plan.download_mbps > 0:
            pct = mbps / plan.download_mbps * 100
            metrics["download_pct_of_expected"] = pct
            status = upper_is_better(pct, config.thresholds.throughput_pass_pct, config.thresholds.throughput_warn_pct)
            if status != Status.PASS:
                error = BELOW_PLAN_ERROR
        return self.result(status, started, target=target, metrics=metrics, raw=res.stdout, error=error)
