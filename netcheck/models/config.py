"""
配置数据模型

使用pydantic定义检查目标、带宽、阈值和soak配置，运行期间只读
"""
from typing import Any, Dict, List

from pydantic import BaseModel, Field, model_validator


class Targets(BaseModel):
    """检查目标"""
    ping: List[str] = Field(default_factory=lambda: ["1.1.1.1", "8.8.8.8"], description="ping目标")
    dns_domains: List[str] = Field(default_factory=lambda: ["google.com"], description="DNS查询域名")
    resolvers: List[str] = Field(default_factory=list, description="额外的DNS解析服务器")
    http_urls: List[str] = Field(default_factory=lambda: ["https://example.com"], description="HTTP检查URL")


class SpeedtestConfig(BaseModel):
    enabled: bool = True
    server_id: str = ""


class IperfConfig(BaseModel):
    enabled: bool = True
    target: str = Field(default="", description="iperf3服务端，支持 host:port 和 [v6]:port")
    parallel_streams: int = Field(default=4, ge=1)
    duration_sec: int = Field(default=30, ge=0)


class BandwidthConfig(BaseModel):
    speedtest: SpeedtestConfig = Field(default_factory=SpeedtestConfig)
    iperf: IperfConfig = Field(default_factory=IperfConfig)


class ExpectedPlan(BaseModel):
    """运营商签约带宽，0表示未配置"""
    download_mbps: float = Field(default=0.0, ge=0)
    upload_mbps: float = Field(default=0.0, ge=0)


class Thresholds(BaseModel):
    """各项指标的pass/warn阈值"""
    loss_pass_max: float = 0.5
    loss_warn_max: float = 2
    rtt_p95_pass_max_ms: float = 40
    rtt_p95_warn_max_ms: float = 80
    jitter_pass_max_ms: float = 10
    jitter_warn_max_ms: float = 25
    dns_pass_max_ms: float = 50
    dns_warn_max_ms: float = 120
    http_pass_max_ms: float = 800
    http_warn_max_ms: float = 2000
    loaded_latency_pass_delta_ms: float = 30
    loaded_latency_warn_delta_ms: float = 80
    throughput_pass_pct: float = 80
    throughput_warn_pct: float = 60


class SoakConfig(BaseModel):
    interval_sec: int = 5
    duration_sec: int = 0               # 0表示直到被中断
    emit_final_summary: bool = True


class Config(BaseModel):
    """
    netcheck配置

    默认值即为不提供配置文件时的行为
    """
    targets: Targets = Field(default_factory=Targets)
    bandwidth: BandwidthConfig = Field(default_factory=BandwidthConfig)
    expected_plan: ExpectedPlan = Field(default_factory=ExpectedPlan)
    thresholds: Thresholds = Field(default_factory=Thresholds)
    soak: SoakConfig = Field(default_factory=SoakConfig)
    per_check_timeout_sec: int = 20

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_consistency(self) -> "Config":
        if not self.targets.ping:
            raise ValueError("targets.ping must not be empty")
        iperf = self.bandwidth.iperf
        if iperf.enabled and iperf.target:
            if iperf.target.startswith("127.0.0.1") or iperf.target.startswith("localhost"):
                raise ValueError("bandwidth.iperf.target must be remote; localhost is not allowed")
        if self.thresholds.throughput_warn_pct > self.thresholds.throughput_pass_pct:
            raise ValueError("throughput_warn_pct cannot exceed throughput_pass_pct")
        return self

    def as_dict(self) -> Dict[str, Any]:
        """可序列化的配置快照，嵌入报告中"""
        return self.model_dump(mode="json")
