"""
解析器通用数据结构

所有解析器都是纯函数：输入异常时返回零值/默认值，不抛出异常
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class PingStats:
    """Ping命令统计结果"""
    loss_pct: float = 0.0               # 丢包率（%）
    avg_ms: float = 0.0                 # 平均RTT
    jitter_ms: float = 0.0              # 抖动（stddev/mdev）
    p95_ms: float = 0.0                 # 95分位RTT，无单包样本时等于avg


@dataclass(frozen=True)
class MTRSummary:
    """mtr报告摘要"""
    hop_count: int = 0
    near_dest_loss_pct: float = 0.0     # 最后一跳的丢包率


@dataclass(frozen=True)
class TracerouteSummary:
    """traceroute摘要"""
    hop_count: int = 0
    timeout_hops: int = 0               # 至少3个 * 的跳点数


@dataclass(frozen=True)
class InterfaceActivity:
    """ifconfig接口活动统计"""
    active_interfaces: int = 0
    local_ip_count: int = 0             # 非127.0.0.1的inet地址数


@dataclass(frozen=True)
class SpeedtestResult:
    """speedtest-cli --json 结果（Mbps）"""
    download_mbps: float = 0.0
    upload_mbps: float = 0.0
