"""
事件相关数据模型
定义检查进度事件和soak事件流
"""
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .results import Status


@dataclass(frozen=True)
class ProgressEvent:
    """
    检查进度事件

    每项检查开始和结束时各产生一次，不持久化
    """
    phase: str                          # "start" | "end"
    check: str                          # 检查ID
    group: str                          # 检查分组
    index: int                          # 序号（从1开始）
    total: int                          # 总数
    status: Optional[Status] = None     # 仅end阶段有值


@dataclass(frozen=True)
class SoakEvent:
    """soak模式事件"""
    event_type: str                     # run_started | check_result | interval_summary | run_summary | run_finished
    run_id: str
    sequence: int                       # 从1开始严格递增
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        data: Dict[str, Any] = {
            "event_type": self.event_type,
            "timestamp": self.timestamp.isoformat(),
            "run_id": self.run_id,
            "sequence": self.sequence,
        }
        if self.payload:
            data["payload"] = self.payload
        return data

    def to_json(self) -> str:
        """序列化为单行JSON"""
        return json.dumps(self.to_dict(), ensure_ascii=False)
