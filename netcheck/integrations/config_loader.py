"""
配置加载器

从YAML/JSON文件加载配置，与默认值深度合并后用pydantic校验
"""
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from ..models.config import Config


class ConfigValidationError(Exception):
    """配置文件不可读、格式错误或校验失败"""
    pass


def load_config(config_path: Optional[Union[str, Path]] = None) -> Config:
    """
    加载配置

    Args:
        config_path: 配置文件路径（.yaml/.yml/.json），为None或空时返回默认配置

    Returns:
        校验后的Config

    Raises:
        ConfigValidationError: 文件不存在、解析失败或校验不通过
    """
    if not config_path:
        return Config()

    path = Path(config_path)
    if not path.exists():
        raise ConfigValidationError(f"配置文件不存在: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except OSError as e:
        raise ConfigValidationError(f"无法读取配置文件 {path}: {e}") from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text) if text.strip() else {}
        else:
            data = yaml.safe_load(text) or {}
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigValidationError(f"配置文件格式错误 {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigValidationError(f"配置文件顶层必须是映射: {path}")

    return config_from_dict(data)


def config_from_dict(data: Dict[str, Any]) -> Config:
    """
    在默认配置上合并部分配置并校验

    Raises:
        ConfigValidationError: 校验不通过
    """
    merged = deep_merge(Config().as_dict(), data)
    try:
        return Config.model_validate(merged)
    except ValidationError as e:
        raise ConfigValidationError(_format_validation_error(e)) from e


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """递归合并字典，override中的值优先；列表整体替换"""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ()))
        msg = item.get("msg", "")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "配置校验失败: " + "; ".join(parts)
