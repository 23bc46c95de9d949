"""
路径质量解析器

解析mtr报告和traceroute输出，统计跳数、末跳丢包和超时跳点
"""
import re

from .base import MTRSummary, TracerouteSummary

# 格式: 1.|-- 10.0.0.1   0.0%   10   1.2   1.3 ...
_MTR_HOP_PATTERN = re.compile(r"^\s*\d+\.\|--\s+\S+\s+([0-9.]+)%")


def parse_mtr_summary(output: str) -> MTRSummary:
    """
    解析 mtr -rwzc 报告

    Args:
        output: mtr标准输出

    Returns:
        MTRSummary: 跳数和最后一个匹配跳点的丢包率

    示例输入:
        HOST: laptop                     Loss%   Snt   Last   Avg
          1.|-- 192.168.1.1               0.0%    10    1.2   1.1
          2.|-- 10.10.0.1                 5.0%    10    9.8   9.7
    """
    losses = []
    for line in output.split("\n"):
        line = line.strip()
        if not line:
            continue
        match = _MTR_HOP_PATTERN.match(line)
        if not match:
            continue
        try:
            losses.append(float(match.group(1)))
        except ValueError:
            continue

    if not losses:
        return MTRSummary()
    return MTRSummary(hop_count=len(losses), near_dest_loss_pct=losses[-1])


def parse_traceroute_summary(output: str) -> TracerouteSummary:
    """
    解析traceroute输出

    Args:
        output: traceroute标准输出

    Returns:
        TracerouteSummary: 跳数和超时跳数

    示例输入:
        traceroute to 10.0.2.20 (10.0.2.20), 30 hops max, 60 byte packets
         1  10.0.1.1 (10.0.1.1)  0.512 ms  0.389 ms  0.301 ms
         2  * * *

    解析逻辑:
        1. 跳过空行和 "traceroute " 开头的标题行
        2. 首个字段为整数的行计为一跳
        3. 该行包含至少3个 * 则计为超时跳点
    """
    hop_count = 0
    timeout_hops = 0
    for line in output.split("\n"):
        line = line.strip()
        if not line or line.startswith("traceroute "):
            continue
        fields = line.split()
        if not fields or not _is_int(fields[0]):
            continue
        hop_count += 1
        if line.count("*") >= 3:
            timeout_hops += 1
    return TracerouteSummary(hop_count=hop_count, timeout_hops=timeout_hops)


def _is_int(raw: str) -> bool:
    try:
        int(raw)
    except ValueError:
        return False
    return True
