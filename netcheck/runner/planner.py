"""
检查规划器

根据配置展开检查项、按分组过滤，并估算完成一次运行所需的最短时间
"""
from typing import Iterable, List

from ..checks import (
    BufferbloatCheck,
    Check,
    DNSCheck,
    HTTPCheck,
    IperfCheck,
    LocalCheck,
    PathCheck,
    ReachabilityCheck,
    SpeedtestCheck,
)
from ..models.config import Config
from ..models.options import RunOptions

MIN_RUN_TIMEOUT_SEC = 30

# 各分组单项检查的耗时估算（秒）
GROUP_TIME_ESTIMATES = {
    "local": 14,
    "reachability": 12,
    "dns": 3,
    "http": 8,
    "path": 12,
}
UNKNOWN_GROUP_ESTIMATE_SEC = 5


def build_checks(config: Config) -> List[Check]:
    """
    展开配置为检查列表

    顺序固定：local、speedtest、iperf、每个ping目标的连通性、
    每个域名的DNS（及每个解析服务器）、每个URL的HTTP，
    最后是第一个ping目标上的path和bufferbloat

    Args:
        config: 配置

    Returns:
        检查列表（即执行顺序）
    """
    checks: List[Check] = [LocalCheck(), SpeedtestCheck(), IperfCheck()]
    targets = config.targets
    for target in targets.ping:
        checks.append(ReachabilityCheck(target))
    for domain in targets.dns_domains:
        checks.append(DNSCheck(domain))
        for resolver in targets.resolvers:
            checks.append(DNSCheck(domain, resolver))
    for url in targets.http_urls:
        checks.append(HTTPCheck(url))
    if targets.ping:
        checks.append(PathCheck(targets.ping[0]))
        checks.append(BufferbloatCheck(targets.ping[0]))
    return checks


def filter_checks(checks: List[Check], select: Iterable[str], skip: Iterable[str]) -> List[Check]:
    """
    按分组过滤

    select为白名单（非空时只保留其中的分组），skip为黑名单，在select之后应用
    """
    selected = {g.strip() for g in select if g.strip()}
    skipped = {g.strip() for g in skip if g.strip()}
    if not selected and not skipped:
        return checks
    return [
        c for c in checks
        if (not selected or c.group in selected) and c.group not in skipped
    ]


def selected_checks(config: Config, options: RunOptions) -> List[Check]:
    return filter_checks(build_checks(config), options.select, options.skip)


def estimate_run_timeout_sec(config: Config, options: RunOptions) -> int:
    """
    估算一次运行需要的最短全局超时（秒）

    调用方的全局超时小于该值时应提高到该值，避免慢检查被饿死
    """
    iperf = config.bandwidth.iperf
    total = 0
    for check in selected_checks(config, options):
        group = check.group
        if group in GROUP_TIME_ESTIMATES:
            total += GROUP_TIME_ESTIMATES[group]
        elif group == "bufferbloat":
            if iperf.enabled and iperf.target:
                total += 30
            elif config.bandwidth.speedtest.enabled:
                total += 55
            else:
                total += 25
        elif group == "bandwidth":
            if "speedtest" in check.id:
                total += 50
            if "iperf" in check.id:
                duration = iperf.duration_sec if iperf.duration_sec > 0 else 30
                total += duration + 15
        else:
            total += UNKNOWN_GROUP_ESTIMATE_SEC
    return max(total, MIN_RUN_TIMEOUT_SEC)
