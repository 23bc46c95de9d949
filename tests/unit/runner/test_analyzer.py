"""
分析器单元测试：阈值分级、健康分、退出码
"""
import math

import pytest

from netcheck.models.results import CheckResult, Status
from netcheck.runner.analyzer import (
    EXIT_CHECKS_FAILED,
    EXIT_OK,
    category_for_group,
    exit_code_for,
    group_scores,
    lower_is_better,
    score,
    upper_is_better,
    worst,
)


def result(group, status, check_id=None):
    return CheckResult(id=check_id or f"{group}.x", group=group, status=status)


class TestGrading:
    """阈值分级测试"""

    @pytest.mark.parametrize("value,expected", [
        (0.0, Status.PASS),
        (0.49, Status.PASS),
        (0.5, Status.WARN),
        (2.0, Status.WARN),
        (2.01, Status.FAIL),
    ])
    def test_lower_is_better(self, value, expected):
        assert lower_is_better(value, 0.5, 2.0) == expected

    @pytest.mark.parametrize("value,expected", [
        (100.0, Status.PASS),
        (80.0, Status.PASS),
        (79.9, Status.WARN),
        (60.0, Status.WARN),
        (59.9, Status.FAIL),
    ])
    def test_upper_is_better(self, value, expected):
        assert upper_is_better(value, 80, 60) == expected

    def test_nan_is_fail(self):
        assert lower_is_better(math.nan, 10, 20) == Status.FAIL
        assert upper_is_better(math.nan, 80, 60) == Status.FAIL

    def test_worst(self):
        assert worst(Status.PASS, Status.WARN) == Status.WARN
        assert worst(Status.WARN, Status.FAIL, Status.PASS) == Status.FAIL
        assert worst(Status.SKIP, Status.PASS) == Status.PASS
        assert worst() == Status.PASS


class TestScore:
    """健康分测试"""

    def test_all_pass_is_100(self):
        checks = [result(g, Status.PASS) for g in
                  ("local", "reachability", "path", "bufferbloat", "dns", "http", "bandwidth")]
        assert score(checks) == 100

    def test_all_fail_is_0(self):
        checks = [result(g, Status.FAIL) for g in ("reachability", "dns", "bandwidth")]
        assert score(checks) == 0

    def test_empty_is_0(self):
        assert score([]) == 0

    def test_all_skip_is_50(self):
        assert score([result("dns", Status.SKIP), result("http", Status.SKIP)]) == 50

    def test_weighted_categories(self):
        """测试类别加权：reliability(35)全pass，throughput(20)全fail"""
        checks = [result("reachability", Status.PASS), result("bandwidth", Status.FAIL)]
        # 35 / 55 = 0.6363...
        assert score(checks) == 63

    def test_category_average(self):
        """测试同一类别内取平均"""
        checks = [result("reachability", Status.PASS, "a"), result("path", Status.WARN, "b")]
        assert score(checks) == 80

    def test_unmapped_group_ignored(self):
        checks = [result("dns", Status.PASS), result("custom", Status.FAIL)]
        assert score(checks) == 100
        assert category_for_group("custom") is None

    def test_improving_status_never_lowers_score(self):
        """测试单项状态变好时健康分不降低"""
        order = [Status.FAIL, Status.SKIP, Status.WARN, Status.PASS]
        others = [result("dns", Status.WARN), result("bandwidth", Status.FAIL)]
        scores = [score(others + [result("reachability", s)]) for s in order]
        assert scores == sorted(scores)

    def test_group_scores(self):
        checks = [
            result("dns", Status.PASS, "dns.a"),
            result("dns", Status.WARN, "dns.b"),
            result("http", Status.SKIP),
        ]
        assert group_scores(checks) == {"dns": 80, "http": 50}


class TestExitCode:
    """退出码测试"""

    def test_ok(self):
        assert exit_code_for([result("dns", Status.PASS), result("http", Status.SKIP)]) == EXIT_OK

    def test_fail(self):
        assert exit_code_for([result("dns", Status.FAIL)]) == EXIT_CHECKS_FAILED

    def test_warn_only_with_strict(self):
        checks = [result("dns", Status.WARN)]
        assert exit_code_for(checks) == EXIT_OK
        assert exit_code_for(checks, strict_warn=True) == EXIT_CHECKS_FAILED
