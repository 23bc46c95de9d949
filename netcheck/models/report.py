"""
检查报告数据模型
定义一次完整运行输出的报告结构
"""
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .results import CheckResult, Summary

SCHEMA_VERSION = "v1"


@dataclass(frozen=True)
class Report:
    """
    网络健康检查报告

    每次运行生成一份，checks按ID排序
    """
    host: str                           # 主机名
    os: str                             # 操作系统
    version: str                        # 工具版本
    config: Dict[str, Any]              # 配置快照
    checks: List[CheckResult]           # 检查结果（按ID排序）
    summary: Summary                    # 状态汇总
    score: int                          # 健康分 [0,100]
    schema_version: str = SCHEMA_VERSION
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    git_commit: str = ""
    run_id: str = ""
    labels: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return (f"报告[{self.run_id or self.host}] - 健康分 {self.score}\n"
                f"汇总: {self.summary}")

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        data: Dict[str, Any] = {
            "schema_version": self.schema_version,
            "timestamp": self.timestamp.isoformat(),
            "host": self.host,
            "os": self.os,
            "version": self.version,
        }
        if self.git_commit:
            data["git_commit"] = self.git_commit
        if self.run_id:
            data["run_id"] = self.run_id
        if self.labels:
            data["labels"] = dict(self.labels)
        data.update({
            "config": self.config,
            "checks": [c.to_dict() for c in self.checks],
            "summary": self.summary.to_dict(),
            "score": self.score,
        })
        return data

    def to_json(self, indent: Optional[int] = 2) -> str:
        """序列化为JSON字符串"""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def to_markdown(self) -> str:
        """
        生成Markdown格式的报告

        Returns:
            完整的Markdown报告字符串
        """
        md = f"""# 网络健康检查报告

**主机**: {self.host} ({self.os})
**时间**: {self.timestamp.strftime('%Y-%m-%d %H:%M:%S')} UTC
**版本**: {self.version}
**健康分**: {self.score}/100

---

## 汇总

| pass | warn | fail | skip | total |
|------|------|------|------|-------|
| {self.summary.pass_count} | {self.summary.warn} | {self.summary.fail} | {self.summary.skip} | {self.summary.total} |

---

## 检查详情

"""
        if self.run_id:
            md = md.replace("**版本**", f"**运行ID**: {self.run_id}\n**版本**", 1)

        for check in self.checks:
            md += f"### {check.id} [{check.status.value}]\n\n"
            md += f"**分组**: {check.group}\n\n"
            if check.target:
                md += f"**目标**: {check.target}\n\n"
            md += f"**耗时**: {check.duration_ms}ms\n\n"
            if check.metrics:
                md += "**指标**:\n\n"
                for key in sorted(check.metrics):
                    md += f"- {key}: {_format_metric(check.metrics[key])}\n"
                md += "\n"
            if check.error:
                md += f"**错误**: {check.error}\n\n"
            if check.raw:
                md += "**输出**:\n```\n"
                # 限制输出长度，避免报告过长
                output = check.raw[:500]
                if len(check.raw) > 500:
                    output += "\n... (输出已截断)"
                md += output
                md += "\n```\n\n"
            md += "---\n\n"

        return md


def _format_metric(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)
