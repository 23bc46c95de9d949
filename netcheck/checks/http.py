"""
HTTP/TLS检查

curl计时分级；openssl握手信息只作为附加指标
"""
import time
from typing import Optional, Tuple
from urllib.parse import urlsplit

from ..context import RunContext
from ..integrations.executor import Executor
from ..models.config import Config
from ..models.results import CheckResult
from ..runner.analyzer import lower_is_better
from ..utils.parsers import CURL_TIMING_FORMAT, parse_curl_timings, parse_tls_metadata
from .base import Check, run_with_timeout, stderr_msg


class HTTPCheck(Check):
    """单个URL的请求耗时"""

    group = "http"

    def __init__(self, url: str):
        self.url = url

    @property
    def id(self) -> str:
        return f"http.{self.url}"

    @property
    def target(self) -> str:
        return self.url

    async def run(self, ctx: RunContext, executor: Executor, config: Config, timeout_sec: int) -> CheckResult:
        started = time.monotonic()
        if executor.look_path("curl") is None:
            return self.skip("curl not found")

        res = await run_with_timeout(
            ctx, executor, timeout_sec,
            "curl", "-w", CURL_TIMING_FORMAT, "-o", "/dev/null", "-s", self.url,
        )
        failed = self.interrupted_or_failed(res, started)
        if failed is not None:
            return failed

        timings = parse_curl_timings(res.stdout)
        total = timings.get("total", 0.0)
        status = lower_is_better(total, config.thresholds.http_pass_max_ms, config.thresholds.http_warn_max_ms)
        metrics = {
            "dns_ms": timings.get("dns", 0.0),
            "connect_ms": timings.get("connect", 0.0),
            "tls_ms": timings.get("tls", 0.0),
            "ttfb_ms": timings.get("ttfb", 0.0),
            "total_ms": total,
        }

        endpoint = tls_endpoint(self.url)
        if endpoint is not None and executor.look_path("openssl") is not None:
            connect, server_name = endpoint
            meta = await run_with_timeout(
                ctx, executor, timeout_sec,
                "openssl", "s_client", "-connect", connect, "-servername", server_name,
            )
            if meta.stdout:
                metrics.update(parse_tls_metadata(meta.stdout))

        return self.result(status, started, metrics=metrics, raw=res.stdout, error=stderr_msg(res.stderr))


def tls_endpoint(url: str) -> Optional[Tuple[str, str]]:
    """
    URL对应的 (host:port, servername)，未指定端口时使用443

    Examples:
        >>> tls_endpoint("https://example.com")
        ('example.com:443', 'example.com')
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None
    hostname = parts.hostname
    if not hostname:
        return None
    host = f"[{hostname}]" if ":" in hostname else hostname
    return f"{host}:{port or 443}", hostname
