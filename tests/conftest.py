"""
Pytest配置和全局fixtures
"""
import sys
from pathlib import Path

import pytest

# 添加项目根目录到Python路径，以便导入netcheck包
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from netcheck.integrations.fake_executor import FakeExecutor  # noqa: E402
from netcheck.models.config import Config  # noqa: E402


@pytest.fixture
def config() -> Config:
    """默认配置"""
    return Config()


@pytest.fixture
def fake() -> FakeExecutor:
    """未安装任何工具的脚本化执行器"""
    return FakeExecutor()
