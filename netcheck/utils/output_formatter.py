"""
终端输出格式化器

用rich渲染报告表格、分组汇总，以及verbose模式下的进度和执行日志
"""
from collections import defaultdict
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models.events import ProgressEvent
from ..models.report import Report
from ..models.results import CheckResult, Status
from ..runner.analyzer import group_scores

STATUS_STYLES = {
    Status.PASS: "green",
    Status.WARN: "yellow",
    Status.FAIL: "red",
    Status.SKIP: "dim",
}

GROUP_STYLES = {
    "local": "deep_sky_blue1",
    "bandwidth": "orange1",
    "dns": "dodger_blue2",
    "http": "steel_blue1",
    "path": "dark_orange",
    "reachability": "turquoise2",
    "bufferbloat": "orchid",
}


class ReportTableFormatter:
    """报告表格格式化器"""

    def __init__(self, console: Optional[Console] = None):
        """
        Args:
            console: 输出控制台，None时输出到标准输出
        """
        self.console = console or Console(emoji=False, legacy_windows=False)

    def print_report(self, report: Report) -> None:
        """打印检查表格、汇总、健康分和分组汇总"""
        table = Table(title=f"netcheck {report.host}", show_lines=False)
        table.add_column("ID", style="bold")
        table.add_column("GROUP")
        table.add_column("STATUS")
        table.add_column("TARGET")
        for check in sorted(report.checks, key=lambda c: c.id):
            table.add_row(
                escape(check.id),
                _styled_group(check.group),
                _styled_status(check.status),
                escape(check.target),
            )
        self.console.print(table)

        s = report.summary
        self.console.print(
            f"\nSummary  pass={s.pass_count} warn={s.warn} fail={s.fail} skip={s.skip} total={s.total}"
        )
        self.console.print(f"Score    [bold]{report.score}[/bold]")

        rows = build_group_rows(report)
        if rows:
            groups = Table(title="Group Summary")
            groups.add_column("GROUP")
            groups.add_column("SCORE", justify="right")
            groups.add_column("MEASURED")
            groups.add_column("EXPECTED")
            for row in rows:
                groups.add_row(
                    _styled_group(row["group"]),
                    str(row["score"]),
                    escape(row["measured"]),
                    escape(row["expected"]),
                )
            self.console.print(groups)


class VerboseConsole:
    """
    进度与执行日志输出

    verbose时逐行打印 "[GROUP] op : msg"；否则只打印每项检查的完成状态
    """

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        self.console = console or Console(stderr=True, emoji=False, legacy_windows=False)
        self.verbose = verbose

    def on_progress(self, event: ProgressEvent) -> None:
        tag = _group_tag(event.group.upper())
        if event.phase == "start":
            if self.verbose:
                self.console.print(f"{tag} op : starting check {escape(event.check)} ({event.index}/{event.total})")
            return
        status = event.status.value if event.status else "-"
        line = f"completed status={status} check={event.check}"
        if self.verbose:
            self.console.print(f"{tag} op : {escape(line)}")
        else:
            style = STATUS_STYLES.get(event.status, "white")
            self.console.print(
                f"[{event.index}/{event.total}] [{style}]{status:<4}[/{style}] {escape(event.check)}"
            )

    def on_exec_log(self, group: str, op: str, msg: str) -> None:
        if self.verbose:
            self.console.print(f"{_group_tag(group.upper())} {escape(op)} : {escape(msg)}")

    def message(self, text: str) -> None:
        """component-tagged行，例如 [RUN] op : ..."""
        self.console.print(escape(text))


def build_group_rows(report: Report) -> List[Dict[str, Any]]:
    """分组汇总行：得分、实测值、期望值"""
    by_group: Dict[str, List[CheckResult]] = defaultdict(list)
    for check in report.checks:
        by_group[check.group].append(check)
    scores = group_scores(report.checks)
    return [
        {
            "group": group,
            "score": scores[group],
            "measured": measured_for_group(group, by_group[group]),
            "expected": expected_for_group(group, report.config),
        }
        for group in sorted(by_group)
    ]


def measured_for_group(group: str, checks: List[CheckResult]) -> str:
    """分组内指标的平均值摘要，无可用指标时为 "-" """
    def avg(key: str) -> Optional[float]:
        values = [
            float(c.metrics[key]) for c in checks
            if isinstance(c.metrics.get(key), (int, float)) and not isinstance(c.metrics.get(key), bool)
        ]
        return sum(values) / len(values) if values else None

    if group == "bandwidth":
        dl, ul = avg("download_mbps"), avg("upload_mbps")
        if dl is not None and ul is not None:
            return f"dl={dl:.1f}Mbps ul={ul:.1f}Mbps"
        if dl is not None:
            return f"dl={dl:.1f}Mbps"
    elif group == "dns":
        q = avg("query_ms")
        if q is not None:
            return f"avg_query={q:.1f}ms"
    elif group == "http":
        t = avg("total_ms")
        if t is not None:
            return f"avg_total={t:.1f}ms"
    elif group == "reachability":
        p95, loss = avg("rtt_p95_ms"), avg("loss_pct")
        if p95 is not None and loss is not None:
            return f"p95={p95:.1f}ms loss={loss:.2f}%"
    elif group == "local":
        loss = avg("loss_pct")
        if loss is not None:
            return f"loss={loss:.2f}%"
    elif group == "path":
        near, hops, timeouts = avg("near_dest_loss_pct"), avg("hop_count"), avg("timeout_hops")
        if near is not None and hops is not None:
            return f"near_loss={near:.2f}% hops={hops:.0f}"
        if hops is not None and timeouts is not None:
            return f"hops={hops:.0f} timeout_hops={timeouts:.0f}"
    elif group == "bufferbloat":
        delta = avg("delta_ms")
        if delta is not None:
            return f"delta={delta:.1f}ms"
    return "-"


def expected_for_group(group: str, config: Dict[str, Any]) -> str:
    """分组的期望阈值描述，取自报告中的配置快照"""
    th = config.get("thresholds", {})
    plan = config.get("expected_plan", {})

    if group == "bandwidth":
        dl = float(plan.get("download_mbps", 0) or 0)
        ul = float(plan.get("upload_mbps", 0) or 0)
        if dl <= 0 and ul <= 0:
            return "no plan target"
        parts = []
        if dl > 0:
            parts.append(f"dl>={dl:.1f}Mbps")
        if ul > 0:
            parts.append(f"ul>={ul:.1f}Mbps")
        pass_pct = float(th.get("throughput_pass_pct", 0) or 0)
        if pass_pct > 0:
            parts.append(f"pass@{pass_pct:.0f}%")
        return " ".join(parts)
    if group == "dns":
        return f"pass<{th.get('dns_pass_max_ms', 0):.0f}ms warn<={th.get('dns_warn_max_ms', 0):.0f}ms"
    if group == "http":
        return f"pass<{th.get('http_pass_max_ms', 0):.0f}ms warn<={th.get('http_warn_max_ms', 0):.0f}ms"
    if group == "reachability":
        return (f"loss<{th.get('loss_pass_max', 0):.1f}% p95<{th.get('rtt_p95_pass_max_ms', 0):.0f}ms "
                f"jitter<{th.get('jitter_pass_max_ms', 0):.0f}ms")
    if group == "local":
        return f"loss<{th.get('loss_pass_max', 0):.1f}%"
    if group == "path":
        return f"near_loss<{th.get('loss_pass_max', 0):.1f}%"
    if group == "bufferbloat":
        return f"delta<{th.get('loaded_latency_pass_delta_ms', 0):.0f}ms"
    return "-"


def _styled_status(status: Status) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status.value}[/{style}]"


def _styled_group(group: str) -> str:
    style = GROUP_STYLES.get(group.lower(), "grey70")
    return f"[{style}]{escape(group)}[/{style}]"


def _group_tag(group: str) -> str:
    style = GROUP_STYLES.get(group.lower(), "grey70")
    return f"[{style}]\\[{escape(group)}][/{style}]"
