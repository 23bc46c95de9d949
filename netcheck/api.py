"""
FastAPI HTTP 服务 - 提供网络健康检查接口

启动方式：
    uvicorn netcheck.api:app --host 0.0.0.0 --port 8000

API 文档：
    http://localhost:8000/docs
"""
import asyncio
import json
import os
from datetime import datetime, timezone
from typing import Dict, List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from . import __version__
from .context import RunContext
from .integrations import ConfigValidationError, Executor, ProcessExecutor, load_config
from .integrations.config_loader import config_from_dict
from .models.config import Config
from .models.events import SoakEvent
from .models.options import RunOptions
from .runner.analyzer import exit_code_for
from .runner.engine import RunError, run_once
from .runner.planner import estimate_run_timeout_sec
from .runner.soak import SoakEventWriter, SoakRunner

# 加载环境变量
load_dotenv()

# 健康检查中报告的外部工具
TOOLS = ["ping", "netstat", "ifconfig", "dig", "curl", "openssl", "mtr", "traceroute", "speedtest-cli", "iperf3"]

app = FastAPI(
    title="netcheck API",
    description="网络健康诊断 API",
    version=__version__
)

_executor: Executor = ProcessExecutor()


def get_executor() -> Executor:
    return _executor


def set_executor(executor: Executor) -> None:
    """替换命令执行器（测试中注入FakeExecutor）"""
    global _executor
    _executor = executor


# 请求模型
class RunRequest(BaseModel):
    """单次检查请求"""
    config_path: Optional[str] = Field(None, description="服务端配置文件路径，默认读取NETCHECK_CONFIG")
    config: Optional[Dict] = Field(None, description="内联配置（与默认值合并），优先于config_path")
    select: List[str] = Field(default_factory=list, description="只运行这些分组")
    skip: List[str] = Field(default_factory=list, description="跳过这些分组")
    fail_fast: bool = Field(default=False, description="遇到第一个fail即停止")
    run_id: str = Field(default="", description="运行ID")
    labels: Dict[str, str] = Field(default_factory=dict, description="标签")
    strict_warn: bool = Field(default=False, description="warn也视为失败")
    timeout_sec: int = Field(default=180, ge=0, description="全局超时（秒）")

    model_config = {
        "json_schema_extra": {
            "example": {
                "select": ["reachability", "dns"],
                "labels": {"site": "office"},
                "timeout_sec": 60
            }
        }
    }

    def to_options(self) -> RunOptions:
        return RunOptions(
            fail_fast=self.fail_fast,
            select=self.select,
            skip=self.skip,
            run_id=self.run_id,
            labels=self.labels,
            strict_warn=self.strict_warn,
            timeout_sec=self.timeout_sec,
        )


class SoakRequest(RunRequest):
    """持续检查请求"""
    interval_sec: Optional[int] = Field(None, description="间隔（秒），默认使用配置")
    duration_sec: Optional[int] = Field(None, description="持续时间（秒），0表示直到客户端断开")


def _resolve_config(request: RunRequest) -> Config:
    try:
        if request.config is not None:
            return config_from_dict(request.config)
        return load_config(request.config_path or os.getenv("NETCHECK_CONFIG"))
    except ConfigValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/health")
async def health_check():
    """健康检查：服务状态和本机外部工具可用性"""
    executor = get_executor()
    tools = {name: executor.look_path(name) is not None for name in TOOLS}
    return {
        "status": "healthy",
        "version": __version__,
        "tools": tools,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.post("/api/v1/run")
async def run_checks(request: RunRequest):
    """
    执行一次检查并返回报告

    ### 请求示例：
    ```json
    {"select": ["reachability"], "timeout_sec": 60}
    ```
    """
    config = _resolve_config(request)
    options = request.to_options()
    timeout = options.timeout_sec
    minimum = estimate_run_timeout_sec(config, options)
    if timeout < minimum:
        print(f"[API] timeout exemption applied; requested={timeout}s estimated_min={minimum}s")
        timeout = minimum
    ctx = RunContext().with_timeout(timeout)

    try:
        result = await run_once(ctx, get_executor(), config, options)
    except RunError as e:
        print(f"[API] 运行失败: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    report = result.report
    print(f"[API] 运行完成: score={report.score} {report.summary}")
    return {
        "exit_code": exit_code_for(report.checks, options.strict_warn),
        "report": report.to_dict()
    }


@app.post("/api/v1/soak/stream")
async def soak_stream(request: SoakRequest, http_request: Request):
    """
    流式返回soak事件（SSE）

    ### 响应格式：
    Server-Sent Events，每个事件的data为一个soak事件JSON：
    - run_started / check_result / interval_summary / run_summary / run_finished

    客户端断开时发送停止信号，进行中的命令被终止
    """
    config = _resolve_config(request)
    options = request.to_options()

    async def event_generator():
        event_queue: asyncio.Queue = asyncio.Queue()
        ctx = RunContext()
        if options.timeout_sec > 0:
            ctx = ctx.with_timeout(options.timeout_sec)

        # 发送初始注释（保持连接）
        yield ": SSE stream started\n\n"

        async def callback(event: SoakEvent):
            await event_queue.put(event)
            await asyncio.sleep(0)

        runner = SoakRunner(
            get_executor(), config, options, SoakEventWriter(callback=callback),
            interval_sec=request.interval_sec,
            duration_sec=request.duration_sec,
        )

        async def run_soak():
            try:
                await runner.run(ctx)
            finally:
                await event_queue.put(None)

        soak_task = asyncio.create_task(run_soak())
        heartbeat_counter = 0
        try:
            while True:
                if await http_request.is_disconnected():
                    print(f"[API] 客户端断开，停止soak: {runner.run_id}")
                    ctx.cancel()
                    break
                try:
                    event = await asyncio.wait_for(event_queue.get(), timeout=0.5)
                except asyncio.TimeoutError:
                    heartbeat_counter += 1
                    if heartbeat_counter % 10 == 0:
                        yield f": heartbeat {heartbeat_counter}\n\n"
                    continue
                if event is None:
                    break
                yield f"event: {event.event_type}\ndata: {json.dumps(event.to_dict(), ensure_ascii=False)}\n\n"
        finally:
            ctx.cancel()
            await soak_task

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no"
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
