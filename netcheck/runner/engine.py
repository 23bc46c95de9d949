"""
运行引擎

按构建顺序串行执行检查，报告进度，汇总为一份报告
"""
import inspect
import platform
import socket
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Union

from .. import __version__
from ..context import RunContext
from ..integrations.executor import Executor
from ..models.config import Config
from ..models.events import ProgressEvent
from ..models.options import RunOptions
from ..models.report import Report
from ..models.results import CheckResult, Status, Summary
from . import analyzer
from .planner import selected_checks

ProgressCallback = Callable[[ProgressEvent], Union[None, Awaitable[None]]]


class RunError(Exception):
    """编排层错误（检查项之外的环境或程序错误）"""
    pass


@dataclass(frozen=True)
class RunResult:
    """一次运行的结果"""
    report: Report


async def run_once(
    ctx: RunContext,
    executor: Executor,
    config: Config,
    options: RunOptions,
    version: str = __version__,
    commit: str = "",
    progress: Optional[ProgressCallback] = None
) -> RunResult:
    """
    执行一次完整的检查

    检查严格串行（带宽类检查假定独占链路）；每项前后各报告一次进度。
    上下文结束（超时/停止）后不再调度新的检查

    Args:
        ctx: 运行上下文
        executor: 命令执行器
        config: 配置
        options: 运行选项
        version: 工具版本
        commit: git提交（可选）
        progress: 进度回调，普通函数或async函数

    Returns:
        RunResult

    Raises:
        RunError: 检查项抛出了未预期的异常
    """
    checks = selected_checks(config, options)
    total = len(checks)
    results: List[CheckResult] = []
    summary = Summary()

    for index, check in enumerate(checks, start=1):
        if ctx.done():
            break

        await _report(progress, ProgressEvent(
            phase="start", check=check.id, group=check.group, index=index, total=total,
        ))
        check_ctx = ctx.with_check(check.group.upper(), check.id)
        try:
            result = await check.run(check_ctx, executor, config, config.per_check_timeout_sec)
        except Exception as e:
            raise RunError(f"check {check.id} failed unexpectedly: {e}") from e
        await _report(progress, ProgressEvent(
            phase="end", check=check.id, group=check.group, index=index, total=total, status=result.status,
        ))

        summary.add(result.status)
        results.append(result)
        if options.fail_fast and result.status == Status.FAIL:
            break

    results.sort(key=lambda r: r.id)
    report = Report(
        host=_hostname(),
        os=platform.system().lower(),
        version=version,
        git_commit=commit,
        run_id=options.run_id,
        labels=dict(options.labels),
        config=config.as_dict(),
        checks=results,
        summary=summary,
        score=analyzer.score(results),
    )
    return RunResult(report=report)


async def _report(progress: Optional[ProgressCallback], event: ProgressEvent) -> None:
    if progress is None:
        return
    result: Any = progress(event)
    if inspect.isawaitable(result):
        await result


def _hostname() -> str:
    try:
        return socket.gethostname()
    except OSError:
        return ""
