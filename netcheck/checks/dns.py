"""
DNS检查

dig查询耗时分级，可指定解析服务器
"""
import time

from ..context import RunContext
from ..integrations.executor import Executor
from ..models.config import Config
from ..models.results import CheckResult, Status
from ..runner.analyzer import lower_is_better
from ..utils.parsers import parse_dig_ms
from .base import Check, run_with_timeout, stderr_msg


class DNSCheck(Check):
    """单个域名（可选解析服务器）的查询延迟"""

    group = "dns"

    def __init__(self, domain: str, resolver: str = ""):
        self.domain = domain
        self.resolver = resolver

    @property
    def id(self) -> str:
        if not self.resolver:
            return f"dns.{self.domain}"
        return f"dns.{self.domain}@{self.resolver}"

    @property
    def target(self) -> str:
        if not self.resolver:
            return self.domain
        return f"{self.domain} via {self.resolver}"

    async def run(self, ctx: RunContext, executor: Executor, config: Config, timeout_sec: int) -> CheckResult:
        started = time.monotonic()
        if executor.look_path("dig") is None:
            return self.skip("dig not found", target=self.domain)

        args = [f"@{self.resolver}", self.domain] if self.resolver else [self.domain]
        res = await run_with_timeout(ctx, executor, timeout_sec, "dig", *args)
        failed = self.interrupted_or_failed(res, started)
        if failed is not None:
            return failed

        query_ms = parse_dig_ms(res.stdout)
        status = lower_is_better(query_ms, config.thresholds.dns_pass_max_ms, config.thresholds.dns_warn_max_ms)
        # 没有Query time行（或0ms）无法判断解析是否真实发生
        if query_ms == 0:
            status = Status.WARN
        return self.result(
            status,
            started,
            metrics={"query_ms": query_ms},
            raw=res.stdout,
            error=stderr_msg(res.stderr),
        )
