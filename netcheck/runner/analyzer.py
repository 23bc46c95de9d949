"""
结果分析器

阈值分级、加权健康分和退出码策略
"""
import math
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from ..models.results import CheckResult, Status

# 退出码
EXIT_OK = 0
EXIT_CHECKS_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_RUNTIME_ERROR = 3
EXIT_OUTPUT_ERROR = 4

# 评分类别及权重
CATEGORY_WEIGHTS: Dict[str, float] = {
    "reliability": 35,
    "latency": 25,
    "dns": 10,
    "http": 10,
    "throughput": 20,
}

GROUP_CATEGORIES: Dict[str, str] = {
    "local": "reliability",
    "reachability": "reliability",
    "path": "reliability",
    "bufferbloat": "latency",
    "dns": "dns",
    "http": "http",
    "bandwidth": "throughput",
}

STATUS_POINTS: Dict[Status, float] = {
    Status.PASS: 1.0,
    Status.WARN: 0.6,
    Status.SKIP: 0.5,
    Status.FAIL: 0.0,
}

_SEVERITY = {Status.PASS: 0, Status.SKIP: 0, Status.WARN: 1, Status.FAIL: 2}


def lower_is_better(value: float, pass_max: float, warn_max: float) -> Status:
    """
    数值越小越好的分级（丢包、延迟、抖动）

    value < pass_max 为pass，pass_max <= value <= warn_max 为warn，否则fail；NaN为fail
    """
    if math.isnan(value):
        return Status.FAIL
    if value < pass_max:
        return Status.PASS
    if value <= warn_max:
        return Status.WARN
    return Status.FAIL


def upper_is_better(value: float, pass_min: float, warn_min: float) -> Status:
    """
    数值越大越好的分级（带宽占签约带宽的百分比）

    value >= pass_min 为pass，value >= warn_min 为warn，否则fail；NaN为fail
    """
    if math.isnan(value):
        return Status.FAIL
    if value >= pass_min:
        return Status.PASS
    if value >= warn_min:
        return Status.WARN
    return Status.FAIL


def worst(*statuses: Status) -> Status:
    """取最差的分级：fail > warn > pass"""
    result = Status.PASS
    for status in statuses:
        if _SEVERITY.get(status, 0) > _SEVERITY.get(result, 0):
            result = status
    return result


def category_for_group(group: str) -> Optional[str]:
    """分组对应的评分类别，未映射的分组不参与评分"""
    return GROUP_CATEGORIES.get(group)


def score(checks: Iterable[CheckResult]) -> int:
    """
    计算健康分

    每个类别取其检查得分的平均值，再按类别权重加权平均，乘以100后截断为整数。
    没有检查的类别不计入分子和分母；总权重为0时返回0

    Args:
        checks: 检查结果

    Returns:
        [0, 100] 之间的整数
    """
    buckets: Dict[str, List[float]] = defaultdict(list)
    for check in checks:
        category = category_for_group(check.group)
        if category is None:
            continue
        buckets[category].append(STATUS_POINTS.get(check.status, 0.0))

    weighted = 0.0
    total_weight = 0.0
    for category, points in buckets.items():
        if not points:
            continue
        weight = CATEGORY_WEIGHTS[category]
        weighted += weight * (sum(points) / len(points))
        total_weight += weight

    if total_weight == 0:
        return 0
    value = int((weighted / total_weight) * 100)
    return max(0, min(100, value))


def group_scores(checks: Iterable[CheckResult]) -> Dict[str, int]:
    """各分组的平均得分（0-100，四舍五入），用于表格汇总"""
    buckets: Dict[str, List[float]] = defaultdict(list)
    for check in checks:
        buckets[check.group].append(STATUS_POINTS.get(check.status, 0.0))
    return {
        group: int(sum(points) / len(points) * 100 + 0.5)
        for group, points in sorted(buckets.items())
    }


def exit_code_for(checks: Iterable[CheckResult], strict_warn: bool = False) -> int:
    """
    根据检查结果决定退出码

    存在fail（或strict_warn时存在warn）返回1，否则返回0
    """
    for check in checks:
        if check.status == Status.FAIL:
            return EXIT_CHECKS_FAILED
        if strict_warn and check.status == Status.WARN:
            return EXIT_CHECKS_FAILED
    return EXIT_OK
