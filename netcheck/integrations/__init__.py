"""
外部集成包

提供命令执行器、执行日志分发器和配置加载器
"""
from .config_loader import ConfigValidationError, load_config
from .exec_log import ExecLogDispatcher
from .executor import (
    CommandCancelledError,
    CommandExecutionError,
    CommandInterruptedError,
    CommandResult,
    CommandTimeoutError,
    Executor,
    ExecutorError,
    ProcessExecutor,
    describe_command,
    is_interrupted,
)
from .fake_executor import FakeExecutor, FakeResponse

__all__ = [
    "Executor",
    "ProcessExecutor",
    "FakeExecutor",
    "FakeResponse",
    "CommandResult",
    "ExecutorError",
    "CommandExecutionError",
    "CommandInterruptedError",
    "CommandTimeoutError",
    "CommandCancelledError",
    "describe_command",
    "is_interrupted",
    "ExecLogDispatcher",
    "ConfigValidationError",
    "load_config",
]
