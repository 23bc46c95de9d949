"""
Ping结果解析器

解析ping命令输出，提取丢包率、平均延迟、抖动和p95延迟
"""
import math
import re
from typing import List, Sequence

from .base import PingStats

_LOSS_PATTERN = re.compile(r"([0-9.]+)% packet loss")
_RTT_PATTERN = re.compile(
    r"min/avg/max/(?:stddev|mdev) = ([0-9.]+)/([0-9.]+)/([0-9.]+)/([0-9.]+) ms"
)
_SAMPLE_PATTERN = re.compile(r"time=([0-9.]+)\s*ms")


def parse_ping(output: str) -> PingStats:
    """
    解析ping命令输出

    Args:
        output: ping的标准输出

    Returns:
        PingStats: 丢包率、平均RTT、抖动、p95

    示例输入:
        64 bytes from 1.1.1.1: icmp_seq=0 ttl=57 time=5.0 ms
        64 bytes from 1.1.1.1: icmp_seq=1 ttl=57 time=6.0 ms

        --- 1.1.1.1 ping statistics ---
        10 packets transmitted, 10 packets received, 0.0% packet loss
        round-trip min/avg/max/stddev = 5.000/10.000/120.000/1.000 ms
    """
    loss = avg = jitter = 0.0

    loss_match = _LOSS_PATTERN.search(output)
    if loss_match:
        loss = _to_float(loss_match.group(1))

    # Linux为 rtt min/avg/max/mdev，macOS为 round-trip min/avg/max/stddev
    rtt_match = _RTT_PATTERN.search(output)
    if rtt_match:
        avg = _to_float(rtt_match.group(2))
        jitter = _to_float(rtt_match.group(4))

    samples = parse_ping_samples(output)
    p95 = percentile(samples, 95) if samples else avg

    return PingStats(loss_pct=loss, avg_ms=avg, jitter_ms=jitter, p95_ms=p95)


def parse_ping_samples(output: str) -> List[float]:
    """提取每个回包的 time=X ms 样本"""
    samples = []
    for raw in _SAMPLE_PATTERN.findall(output):
        try:
            samples.append(float(raw))
        except ValueError:
            continue
    return samples


def percentile(values: Sequence[float], p: float) -> float:
    """
    最近秩百分位数

    rank = ceil(p/100 * n)，限制在 [1, n]；p<=0 返回最小值，p>=100 返回最大值

    Examples:
        >>> percentile([5, 6, 120], 95)
        120
    """
    if not values:
        return 0.0
    ordered = sorted(values)
    if p <= 0:
        return ordered[0]
    if p >= 100:
        return ordered[-1]
    rank = math.ceil((p / 100) * len(ordered))
    rank = min(max(rank, 1), len(ordered))
    return ordered[rank - 1]


def _to_float(raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        return 0.0
