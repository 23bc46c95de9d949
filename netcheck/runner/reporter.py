"""
报告生成器

按指定格式输出报告到终端或文件
"""
import json
from pathlib import Path
from typing import Optional, Union

from rich.console import Console

from ..models.report import Report
from ..utils.output_formatter import ReportTableFormatter

REPORT_FORMATS = ("table", "json", "jsonl", "both", "markdown")


class OutputError(Exception):
    """报告无法输出（格式无效或写文件失败）"""
    pass


class ReportGenerator:
    """
    报告生成器

    table/both使用rich表格，json为缩进JSON，jsonl为单行JSON，markdown为Markdown文档
    """

    def __init__(self, console: Optional[Console] = None):
        """
        Args:
            console: 终端输出控制台
        """
        self.console = console or Console(emoji=False, legacy_windows=False)

    def emit(
        self,
        report: Report,
        fmt: str = "table",
        out_path: Optional[Union[str, Path]] = None
    ) -> Optional[str]:
        """
        输出报告

        Args:
            report: 报告
            fmt: 输出格式
            out_path: 输出文件路径，为空时输出到终端

        Returns:
            写入的文件路径；输出到终端时返回None

        Raises:
            OutputError: 格式无效或写文件失败
        """
        if fmt not in REPORT_FORMATS:
            raise OutputError(f"invalid format: {fmt}")

        if not out_path:
            self._write(report, fmt, self.console)
            return None

        path = Path(out_path)
        try:
            if path.parent and not path.parent.exists():
                path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                file_console = Console(file=f, no_color=True, width=160, emoji=False)
                self._write(report, fmt, file_console)
        except OSError as e:
            raise OutputError(f"unable to write report to {path}: {e}") from e
        return str(path)

    def render(self, report: Report, fmt: str) -> str:
        """渲染为文本（不支持table）"""
        if fmt == "json":
            return report.to_json()
        if fmt == "jsonl":
            return json.dumps(report.to_dict(), ensure_ascii=False)
        if fmt == "markdown":
            return report.to_markdown()
        raise OutputError(f"format {fmt} cannot be rendered as text")

    def _write(self, report: Report, fmt: str, console: Console) -> None:
        if fmt in ("table", "both"):
            ReportTableFormatter(console).print_report(report)
            if fmt == "table":
                return
            console.print()
            fmt = "json"
        # JSON/Markdown原样输出，不做rich markup解析
        console.out(self.render(report, fmt), highlight=False)

    def generate_summary(self, report: Report) -> str:
        """
        生成简要摘要（用于终端输出）
        """
        s = report.summary
        return (
            f"[RUN] op : summary score={report.score} "
            f"pass={s.pass_count} warn={s.warn} fail={s.fail} skip={s.skip}"
        )
