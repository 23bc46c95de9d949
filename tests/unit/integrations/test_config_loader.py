"""
配置加载器单元测试
"""
import json
from pathlib import Path

import pytest

from netcheck.integrations.config_loader import (
    ConfigValidationError,
    config_from_dict,
    deep_merge,
    load_config,
)
from netcheck.models.config import Config


class TestLoadConfig:
    """配置文件加载测试"""

    def test_no_path_returns_defaults(self):
        assert load_config(None) == Config()
        assert load_config("") == Config()

    def test_yaml_merged_with_defaults(self, tmp_path):
        path = tmp_path / "netcheck.yaml"
        path.write_text(
            "targets:\n  ping: [9.9.9.9]\nthresholds:\n  dns_pass_max_ms: 30\n",
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.targets.ping == ["9.9.9.9"]
        assert config.targets.dns_domains == ["google.com"]
        assert config.thresholds.dns_pass_max_ms == 30
        assert config.thresholds.dns_warn_max_ms == 120

    def test_json(self, tmp_path):
        path = tmp_path / "netcheck.json"
        path.write_text(json.dumps({"expected_plan": {"download_mbps": 300}}), encoding="utf-8")

        config = load_config(str(path))

        assert config.expected_plan.download_mbps == 300

    def test_empty_file_is_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == Config()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigValidationError, match="配置文件不存在"):
            load_config(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("targets: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigValidationError, match="格式错误"):
            load_config(path)

    def test_top_level_not_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            load_config(path)


class TestConfigValidation:
    """配置校验测试"""

    def test_empty_ping_rejected(self):
        with pytest.raises(ConfigValidationError, match="targets.ping"):
            config_from_dict({"targets": {"ping": []}})

    @pytest.mark.parametrize("target", ["127.0.0.1", "127.0.0.1:5201", "localhost"])
    def test_local_iperf_target_rejected(self, target):
        with pytest.raises(ConfigValidationError, match="localhost"):
            config_from_dict({"bandwidth": {"iperf": {"target": target}}})

    def test_local_iperf_target_allowed_when_disabled(self):
        config = config_from_dict({"bandwidth": {"iperf": {"enabled": False, "target": "localhost"}}})

        assert config.bandwidth.iperf.target == "localhost"

    def test_throughput_thresholds_order(self):
        with pytest.raises(ConfigValidationError, match="throughput_warn_pct"):
            config_from_dict({"thresholds": {"throughput_pass_pct": 50, "throughput_warn_pct": 70}})

    def test_type_error_message(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            config_from_dict({"per_check_timeout_sec": "soon"})

        assert str(exc_info.value).startswith("配置校验失败: per_check_timeout_sec")

    def test_config_is_frozen(self):
        config = Config()

        with pytest.raises(Exception):
            config.per_check_timeout_sec = 5


class TestDeepMerge:
    """深度合并测试"""

    def test_nested(self):
        merged = deep_merge({"a": {"b": 1, "c": 2}, "d": 3}, {"a": {"c": 20}})

        assert merged == {"a": {"b": 1, "c": 20}, "d": 3}

    def test_lists_replaced(self):
        assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}

    def test_base_not_modified(self):
        base = {"a": {"b": 1}}

        deep_merge(base, {"a": {"b": 2}})

        assert base == {"a": {"b": 1}}


class TestExampleConfig:
    """仓库自带示例配置测试"""

    def test_example_config_is_valid(self):
        path = Path(__file__).resolve().parents[3] / "config" / "netcheck.yaml"

        config = load_config(path)

        assert config.targets.ping
        assert config.per_check_timeout_sec > 0
