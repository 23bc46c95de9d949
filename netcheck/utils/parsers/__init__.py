"""
命令输出解析器包

每个外部工具对应一个容错的纯函数解析器
"""
from .bandwidth_parser import (
    build_iperf_client_args,
    parse_iperf_mbps,
    parse_speedtest_json,
    split_iperf_target,
)
from .base import (
    InterfaceActivity,
    MTRSummary,
    PingStats,
    SpeedtestResult,
    TracerouteSummary,
)
from .dns_http_parser import (
    CURL_TIMING_FORMAT,
    parse_curl_timings,
    parse_dig_ms,
    parse_tls_metadata,
)
from .ping_parser import parse_ping, parse_ping_samples, percentile
from .route_parser import parse_default_gateway, parse_interface_activity
from .traceroute_parser import parse_mtr_summary, parse_traceroute_summary

__all__ = [
    # 数据结构
    "PingStats",
    "MTRSummary",
    "TracerouteSummary",
    "InterfaceActivity",
    "SpeedtestResult",
    "CURL_TIMING_FORMAT",
    # 解析器函数
    "parse_ping",
    "parse_ping_samples",
    "percentile",
    "parse_dig_ms",
    "parse_curl_timings",
    "parse_tls_metadata",
    "parse_mtr_summary",
    "parse_traceroute_summary",
    "parse_iperf_mbps",
    "parse_speedtest_json",
    "split_iperf_target",
    "build_iperf_client_args",
    "parse_default_gateway",
    "parse_interface_activity",
]
