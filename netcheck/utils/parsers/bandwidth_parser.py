"""
带宽测试解析器

解析iperf3 / speedtest-cli的JSON输出，并构建iperf3客户端参数
"""
import json
from typing import Any, List, Optional, Tuple

from .base import SpeedtestResult

_BPS_MARKER = '"bits_per_second":'


def parse_iperf_mbps(output: str) -> float:
    """
    取最后一个 bits_per_second 值并转换为Mbps

    iperf3 -J 的汇总（sum_received）位于输出末尾，因此取最后一次出现
    """
    idx = output.rfind(_BPS_MARKER)
    if idx < 0:
        return 0.0
    rest = output[idx + len(_BPS_MARKER):].strip()
    end = len(rest)
    for delim in (",", "}", "\n"):
        pos = rest.find(delim)
        if 0 <= pos < end:
            end = pos
    try:
        return float(rest[:end].strip()) / 1_000_000
    except ValueError:
        return 0.0


def parse_speedtest_json(output: str) -> Optional[SpeedtestResult]:
    """
    解析 speedtest-cli --json 输出

    Returns:
        SpeedtestResult；输出不是JSON对象时返回None（解析失败不代表链路故障）
    """
    try:
        data = json.loads(output)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    return SpeedtestResult(
        download_mbps=_to_mbps(data.get("download")),
        upload_mbps=_to_mbps(data.get("upload")),
    )


def split_iperf_target(target: str) -> Tuple[str, Optional[str]]:
    """
    拆分iperf目标中的主机和端口

    支持 host、host:port、[v6]:port；裸IPv6地址不拆分

    Examples:
        >>> split_iperf_target("10.0.0.2:5201")
        ('10.0.0.2', '5201')
        >>> split_iperf_target("[2001:db8::1]:5201")
        ('2001:db8::1', '5201')
    """
    target = target.strip()
    if target.startswith("["):
        host, sep, rest = target[1:].partition("]")
        if sep:
            if rest.startswith(":") and rest[1:].isdigit():
                return host, rest[1:]
            if not rest:
                return host, None
        return target, None

    if target.count(":") == 1:
        host, _, port = target.partition(":")
        if port.isdigit() and host:
            return host, port
        return target, None

    # 多个冒号且无方括号：按裸IPv6地址处理
    return target, None


def build_iperf_client_args(
    target: str,
    parallel_streams: int,
    duration_sec: int,
    json_out: bool
) -> List[str]:
    """
    构建iperf3客户端参数

    Examples:
        >>> build_iperf_client_args("10.0.0.2:5201", 4, 30, True)
        ['-c', '10.0.0.2', '-p', '5201', '-P', '4', '-t', '30', '-J']
    """
    host, port = split_iperf_target(target)
    args = ["-c", host]
    if port:
        args += ["-p", port]
    args += ["-P", str(parallel_streams), "-t", str(duration_sec)]
    if json_out:
        args.append("-J")
    return args


def _to_mbps(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value) / 1_000_000
