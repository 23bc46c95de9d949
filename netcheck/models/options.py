"""
运行选项数据模型
"""
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class RunOptions:
    """
    单次运行的选项

    由CLI或HTTP请求构造，不属于配置文件
    """
    fail_fast: bool = False             # 遇到第一个fail即停止
    select: List[str] = field(default_factory=list)   # 分组白名单
    skip: List[str] = field(default_factory=list)     # 分组黑名单
    run_id: str = ""
    labels: Dict[str, str] = field(default_factory=dict)
    strict_warn: bool = False           # warn也视为失败
    timeout_sec: int = 180              # 全局超时（秒）
