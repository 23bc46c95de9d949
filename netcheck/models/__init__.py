"""
数据模型包
提供所有核心数据结构的导入
"""
from .config import Config, Thresholds
from .events import ProgressEvent, SoakEvent
from .options import RunOptions
from .report import SCHEMA_VERSION, Report
from .results import CheckResult, Status, Summary

__all__ = [
    # 枚举类型
    "Status",
    # 结果相关
    "CheckResult",
    "Summary",
    # 报告相关
    "Report",
    "SCHEMA_VERSION",
    # 事件相关
    "ProgressEvent",
    "SoakEvent",
    # 配置和选项
    "Config",
    "Thresholds",
    "RunOptions",
]
