"""
检查项包

每类诊断一个检查项，统一实现 id / group / run
"""
from .bandwidth import IperfCheck, SpeedtestCheck, is_iperf_unreachable
from .base import DEFAULT_CALL_TIMEOUT_SEC, Check, run_with_timeout
from .bufferbloat import BufferbloatCheck
from .dns import DNSCheck
from .http import HTTPCheck
from .local import LocalCheck
from .path import PathCheck
from .reachability import ReachabilityCheck

__all__ = [
    "Check",
    "LocalCheck",
    "ReachabilityCheck",
    "DNSCheck",
    "HTTPCheck",
    "PathCheck",
    "BufferbloatCheck",
    "SpeedtestCheck",
    "IperfCheck",
    "DEFAULT_CALL_TIMEOUT_SEC",
    "run_with_timeout",
    "is_iperf_unreachable",
]
