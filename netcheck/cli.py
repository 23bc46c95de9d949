"""
CLI命令行入口

使用Typer框架提供 run / soak / version 命令
"""
import asyncio
import os
import signal
import sys
from typing import Dict, List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from . import __version__
from .context import RunContext
from .integrations import ConfigValidationError, ExecLogDispatcher, Executor, ProcessExecutor, load_config
from .models.config import Config
from .models.options import RunOptions
from .models.report import Report
from .runner.analyzer import EXIT_CONFIG_ERROR, EXIT_OUTPUT_ERROR, EXIT_RUNTIME_ERROR, exit_code_for
from .runner.engine import RunError, run_once
from .runner.planner import estimate_run_timeout_sec
from .runner.reporter import REPORT_FORMATS, OutputError, ReportGenerator
from .runner.soak import SoakEventWriter, SoakRunner
from .utils.output_formatter import ReportTableFormatter, VerboseConsole

# 加载环境变量（NETCHECK_CONFIG）
load_dotenv()

app = typer.Typer(
    name="netcheck",
    help="网络健康诊断工具",
    add_completion=False
)
console = Console(stderr=True, emoji=False, legacy_windows=False)
stdout_console = Console(emoji=False, legacy_windows=False)


def split_csv(raw: Optional[str]) -> List[str]:
    """逗号分隔的列表，忽略空项"""
    if not raw or not raw.strip():
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


def parse_labels(raw: Optional[str]) -> Dict[str, str]:
    """
    解析 key=value,key2=value2 标签，无 "=" 的项被忽略

    Examples:
        >>> parse_labels("site=office, isp=acme")
        {'site': 'office', 'isp': 'acme'}
    """
    labels = {}
    for pair in split_csv(raw):
        key, sep, value = pair.partition("=")
        if not sep:
            continue
        labels[key.strip()] = value.strip()
    return labels


def _load_config_or_exit(config_path: Optional[str]) -> Config:
    try:
        return load_config(config_path or os.getenv("NETCHECK_CONFIG"))
    except ConfigValidationError as e:
        console.print(f"[red]config error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_CONFIG_ERROR)


def _install_stop_signals(ctx: RunContext) -> None:
    """SIGINT/SIGTERM转为停止信号，让进行中的命令被终止、事件流正常收尾"""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, ctx.cancel)
        except (NotImplementedError, RuntimeError, ValueError):
            # 非主线程或Windows事件循环不支持
            pass


async def execute_run(
    config: Config,
    options: RunOptions,
    fmt: str = "table",
    out: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
    executor: Optional[Executor] = None
) -> int:
    """
    执行一次检查并输出报告

    Returns:
        退出码
    """
    executor = executor or ProcessExecutor()
    ui = None if quiet else VerboseConsole(console, verbose=verbose)

    timeout = options.timeout_sec
    minimum = estimate_run_timeout_sec(config, options)
    if timeout < minimum:
        if ui is not None and verbose:
            ui.message(
                f"[RUN] op : timeout exemption applied; requested={timeout}s estimated_min={minimum}s"
            )
        timeout = minimum

    dispatcher = ExecLogDispatcher(ui.on_exec_log) if ui is not None else None
    ctx = RunContext(log_sink=dispatcher.emit if dispatcher else None).with_timeout(timeout)
    _install_stop_signals(ctx)
    if dispatcher is not None:
        dispatcher.start()

    reporter = ReportGenerator(stdout_console)
    try:
        result = await run_once(
            ctx, executor, config, options,
            progress=ui.on_progress if ui is not None else None,
        )
    except RunError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return EXIT_RUNTIME_ERROR
    finally:
        if dispatcher is not None:
            await dispatcher.aclose()

    report = result.report
    if ui is not None and verbose:
        ui.message("\n" + reporter.generate_summary(report))

    try:
        path = reporter.emit(report, fmt, out)
    except OutputError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return EXIT_OUTPUT_ERROR
    if path and not quiet:
        console.print(f"[green]OK[/green] 报告已保存: [bold]{path}[/bold]")
    return exit_code_for(report.checks, options.strict_warn)


async def execute_soak(
    config: Config,
    options: RunOptions,
    fmt: str = "jsonl",
    out: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
    interval_sec: Optional[int] = None,
    duration_sec: Optional[int] = None,
    executor: Optional[Executor] = None
) -> int:
    """
    执行soak循环，事件以JSON行写到文件或标准输出

    Returns:
        最后一轮的退出码
    """
    executor = executor or ProcessExecutor()
    ui = None if quiet else VerboseConsole(console, verbose=verbose)

    try:
        stream = open(out, 'w', encoding='utf-8') if out else sys.stdout
    except OSError as e:
        console.print(f"[red]unable to open {escape(out)}: {escape(str(e))}[/red]")
        return EXIT_OUTPUT_ERROR

    dispatcher = ExecLogDispatcher(ui.on_exec_log) if ui is not None else None
    ctx = RunContext(log_sink=dispatcher.emit if dispatcher else None)
    if options.timeout_sec > 0:
        ctx = ctx.with_timeout(options.timeout_sec)
    _install_stop_signals(ctx)
    if dispatcher is not None:
        dispatcher.start()

    table = ReportTableFormatter(stdout_console)

    def on_interval(report: Report) -> None:
        if ui is not None and verbose:
            s = report.summary
            ui.message(
                f"\n[SOAK] op : interval summary score={report.score} "
                f"pass={s.pass_count} warn={s.warn} fail={s.fail} skip={s.skip}"
            )
        if not quiet and fmt == "both":
            table.print_report(report)

    runner = SoakRunner(
        executor, config, options, SoakEventWriter(stream),
        interval_sec=interval_sec,
        duration_sec=duration_sec,
        progress=ui.on_progress if ui is not None else None,
        on_interval=on_interval,
    )
    try:
        return await runner.run(ctx)
    except OSError as e:
        console.print(f"[red]unable to write soak events: {escape(str(e))}[/red]")
        return EXIT_OUTPUT_ERROR
    finally:
        if dispatcher is not None:
            await dispatcher.aclose()
        if out:
            stream.close()


def _build_options(
    fail_fast: bool,
    timeout: int,
    select: Optional[str],
    skip: Optional[str],
    run_id: str,
    labels: Optional[str],
    strict_warn: bool
) -> RunOptions:
    return RunOptions(
        fail_fast=fail_fast,
        select=split_csv(select),
        skip=split_csv(skip),
        run_id=run_id,
        labels=parse_labels(labels),
        strict_warn=strict_warn,
        timeout_sec=timeout,
    )


def _check_format(fmt: str) -> None:
    if fmt not in REPORT_FORMATS:
        console.print(f"[red]invalid format: {fmt}[/red] (可选: {', '.join(REPORT_FORMATS)})")
        raise typer.Exit(EXIT_CONFIG_ERROR)


@app.command("run")
def run(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="配置文件路径（默认读取NETCHECK_CONFIG）"),
    fmt: str = typer.Option("table", "--format", "-f", help="table | json | jsonl | both | markdown"),
    out: Optional[str] = typer.Option(None, "--out", "-o", help="输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="显示每条命令及其输出"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="不显示进度"),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="遇到第一个fail即停止"),
    timeout: int = typer.Option(180, "--timeout", help="全局超时（秒），低于估算值时自动提高"),
    select: Optional[str] = typer.Option(None, "--select", help="只运行这些分组（逗号分隔）"),
    skip: Optional[str] = typer.Option(None, "--skip", help="跳过这些分组（逗号分隔）"),
    run_id: str = typer.Option("", "--id", help="运行ID"),
    labels: Optional[str] = typer.Option(None, "--labels", help="标签 key=value,key2=value2"),
    strict_warn: bool = typer.Option(False, "--strict-warn", help="warn也视为失败"),
):
    """
    执行一次网络健康检查

    示例:
        netcheck run --select reachability,dns --format json
    """
    _check_format(fmt)
    options = _build_options(fail_fast, timeout, select, skip, run_id, labels, strict_warn)
    cfg = _load_config_or_exit(config)
    code = asyncio.run(execute_run(cfg, options, fmt, out, verbose, quiet))
    raise typer.Exit(code)


@app.command("soak")
def soak(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="配置文件路径（默认读取NETCHECK_CONFIG）"),
    fmt: str = typer.Option("jsonl", "--format", "-f", help="jsonl | both"),
    out: Optional[str] = typer.Option(None, "--out", "-o", help="事件输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="显示每条命令及其输出"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="不显示进度"),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="每轮遇到第一个fail即停止"),
    timeout: int = typer.Option(180, "--timeout", help="全局超时（秒），0表示不限"),
    select: Optional[str] = typer.Option(None, "--select", help="只运行这些分组（逗号分隔）"),
    skip: Optional[str] = typer.Option(None, "--skip", help="跳过这些分组（逗号分隔）"),
    run_id: str = typer.Option("", "--id", help="运行ID，默认 soak-<unix时间>"),
    labels: Optional[str] = typer.Option(None, "--labels", help="标签 key=value,key2=value2"),
    strict_warn: bool = typer.Option(False, "--strict-warn", help="warn也视为失败"),
    interval: int = typer.Option(-1, "--interval", help="间隔（秒），默认使用配置"),
    duration: int = typer.Option(-1, "--duration", help="持续时间（秒），0表示直到中断，默认使用配置"),
):
    """
    持续运行检查并输出事件流

    示例:
        netcheck soak --interval 30 --duration 3600 --out soak.jsonl
    """
    _check_format(fmt)
    if fmt == "table":
        fmt = "jsonl"
    options = _build_options(fail_fast, timeout, select, skip, run_id, labels, strict_warn)
    cfg = _load_config_or_exit(config)
    code = asyncio.run(execute_soak(
        cfg, options, fmt, out, verbose, quiet,
        interval_sec=interval if interval >= 0 else None,
        duration_sec=duration if duration >= 0 else None,
    ))
    raise typer.Exit(code)


@app.command("version")
def version():
    """显示版本信息"""
    stdout_console.print(f"[bold cyan]netcheck[/bold cyan] v{__version__}")


def main():
    """主入口函数"""
    app()


if __name__ == "__main__":
    main()
