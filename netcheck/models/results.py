"""
检查结果相关数据模型
定义单项检查结果、状态枚举和汇总计数
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Union


MetricValue = Union[int, float, str]


class Status(str, Enum):
    """检查状态枚举"""
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"
    SKIP = "skip"


@dataclass(frozen=True)
class CheckResult:
    """
    单项检查结果

    每次检查调用只产生一个结果，生成后不可修改
    """
    id: str                             # 检查ID，例如 reachability.1.1.1.1
    group: str                          # 检查分组（local/reachability/dns/...）
    status: Status                      # 检查状态
    target: str = ""                    # 检查目标（可选）
    metrics: Dict[str, MetricValue] = field(default_factory=dict)  # 指标
    raw: str = ""                       # 工具原始输出
    duration_ms: int = 0                # 耗时（毫秒）
    error: str = ""                     # 错误信息（可选）

    def __str__(self) -> str:
        target = f" -> {self.target}" if self.target else ""
        return f"[{self.status.value}] {self.id}{target} ({self.duration_ms}ms)"

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式（空的可选字段不输出）"""
        data: Dict[str, Any] = {
            "id": self.id,
            "group": self.group,
            "status": self.status.value,
            "duration_ms": self.duration_ms,
        }
        if self.target:
            data["target"] = self.target
        if self.metrics:
            data["metrics"] = dict(self.metrics)
        if self.raw:
            data["raw"] = self.raw
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class Summary:
    """
    状态汇总

    每产生一个检查结果调用一次add，total始终等于各状态之和
    """
    pass_count: int = 0
    warn: int = 0
    fail: int = 0
    skip: int = 0
    total: int = 0

    def add(self, status: Status) -> None:
        """按状态累加计数"""
        self.total += 1
        if status == Status.PASS:
            self.pass_count += 1
        elif status == Status.WARN:
            self.warn += 1
        elif status == Status.FAIL:
            self.fail += 1
        elif status == Status.SKIP:
            self.skip += 1

    def __str__(self) -> str:
        return (f"pass={self.pass_count} warn={self.warn} fail={self.fail} "
                f"skip={self.skip} total={self.total}")

    def to_dict(self) -> Dict[str, int]:
        """转换为字典格式"""
        return {
            "pass": self.pass_count,
            "warn": self.warn,
            "fail": self.fail,
            "skip": self.skip,
            "total": self.total,
        }
