"""
脚本化执行器

按 "命令 参数..." 键返回预设输出，用于测试和离线演示，不启动任何进程
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

from ..context import CommandTimeoutError, RunContext
from .executor import CommandExecutionError, CommandResult, Executor, describe_command, log_output


@dataclass
class FakeResponse:
    """预设的命令响应"""
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    error: Optional[Union[str, Exception]] = None   # 字符串会包装为CommandExecutionError
    delay: float = 0.0                  # 模拟耗时（秒），受上下文的截止时间和停止信号约束


class FakeExecutor(Executor):
    """
    脚本化执行器

    Examples:
        >>> fake = FakeExecutor(paths={"ping"})
        >>> fake.set_output("ping -c 10 1.1.1.1", "0.0% packet loss")
    """

    def __init__(
        self,
        outputs: Optional[Dict[str, Union[str, FakeResponse]]] = None,
        paths: Optional[Iterable[str]] = None
    ):
        """
        Args:
            outputs: 命令键 -> 标准输出或FakeResponse
            paths: 视为已安装的工具名
        """
        self.outputs: Dict[str, FakeResponse] = {}
        for key, value in (outputs or {}).items():
            self.set_output(key, value)
        self.paths = set(paths or [])
        self.calls: List[str] = []

    def set_output(self, key: str, response: Union[str, FakeResponse]) -> None:
        if isinstance(response, str):
            response = FakeResponse(stdout=response)
        self.outputs[key] = response

    def add_path(self, *names: str) -> None:
        self.paths.update(names)

    async def run(self, ctx: RunContext, name: str, *args: str) -> CommandResult:
        command = " ".join([name, *args])
        self.calls.append(command)
        ctx.log("op", f"{describe_command(name, args)}; calling exec with flags: {command}")

        response = self.outputs.get(command)
        if response is None:
            result = CommandResult(
                command=command,
                exit_code=127,
                error=CommandExecutionError("no fake output configured"),
            )
            log_output(ctx, result)
            return result

        if response.delay > 0 and not await ctx.sleep(response.delay):
            result = CommandResult(
                command=command,
                exit_code=-1,
                error=ctx.err() or CommandTimeoutError(),
                duration=response.delay,
            )
            log_output(ctx, result)
            return result

        error = response.error
        if isinstance(error, str):
            error = CommandExecutionError(error)
        result = CommandResult(
            command=command,
            stdout=response.stdout,
            stderr=response.stderr,
            exit_code=response.exit_code,
            error=error,
            duration=response.delay,
        )
        log_output(ctx, result)
        return result

    def look_path(self, name: str) -> Optional[str]:
        if name in self.paths:
            return f"/usr/bin/{name}"
        return None
