"""
Ping解析器单元测试
"""
import pytest

from netcheck.utils.parsers.ping_parser import parse_ping, parse_ping_samples, percentile


MACOS_PING = """PING 1.1.1.1 (1.1.1.1): 56 data bytes
64 bytes from 1.1.1.1: icmp_seq=0 ttl=57 time=10.1 ms
64 bytes from 1.1.1.1: icmp_seq=1 ttl=57 time=11.2 ms
64 bytes from 1.1.1.1: icmp_seq=2 ttl=57 time=29.8 ms
64 bytes from 1.1.1.1: icmp_seq=3 ttl=57 time=30.1 ms

--- 1.1.1.1 ping statistics ---
10 packets transmitted, 10 packets received, 0.0% packet loss
round-trip min/avg/max/stddev = 10.000/20.000/30.000/5.000 ms"""

LINUX_PING = """PING 10.0.2.20 (10.0.2.20) 56(84) bytes of data.
64 bytes from 10.0.2.20: icmp_seq=1 ttl=64 time=0.123 ms
64 bytes from 10.0.2.20: icmp_seq=2 ttl=64 time=0.089 ms

--- 10.0.2.20 ping statistics ---
4 packets transmitted, 3 received, 25% packet loss, time 3001ms
rtt min/avg/max/mdev = 0.089/0.125/0.234/0.052 ms"""


class TestParsePing:
    """Ping输出解析测试"""

    def test_macos_output(self):
        """测试macOS格式（stddev）"""
        stats = parse_ping(MACOS_PING)

        assert stats.loss_pct == 0.0
        assert stats.avg_ms == 20.0
        assert stats.jitter_ms == 5.0
        assert stats.p95_ms == 30.1

    def test_linux_output(self):
        """测试Linux格式（mdev）"""
        stats = parse_ping(LINUX_PING)

        assert stats.loss_pct == 25.0
        assert stats.avg_ms == 0.125
        assert stats.jitter_ms == 0.052
        assert stats.p95_ms == 0.123

    def test_p95_falls_back_to_avg_without_samples(self):
        """测试没有单包样本时p95等于avg"""
        raw = ("10 packets transmitted, 10 packets received, 0.0% packet loss\n"
               "round-trip min/avg/max/stddev = 1.000/7.500/9.000/0.500 ms")

        stats = parse_ping(raw)

        assert stats.p95_ms == 7.5

    def test_total_loss(self):
        """测试100%丢包（没有RTT行）"""
        raw = ("--- 10.0.2.20 ping statistics ---\n"
               "4 packets transmitted, 0 received, 100% packet loss, time 3001ms")

        stats = parse_ping(raw)

        assert stats.loss_pct == 100.0
        assert stats.avg_ms == 0.0
        assert stats.p95_ms == 0.0

    @pytest.mark.parametrize("raw", ["", "garbage", "ping: unknown host foo"])
    def test_malformed_input_returns_zero(self, raw):
        """测试异常输入返回零值"""
        stats = parse_ping(raw)

        assert stats.loss_pct == 0.0
        assert stats.avg_ms == 0.0
        assert stats.jitter_ms == 0.0
        assert stats.p95_ms == 0.0

    def test_samples(self):
        """测试提取单包样本"""
        assert parse_ping_samples(MACOS_PING) == [10.1, 11.2, 29.8, 30.1]


class TestPercentile:
    """最近秩百分位数测试"""

    def test_nearest_rank(self):
        assert percentile([5, 6, 120], 95) == 120

    def test_unsorted_input(self):
        assert percentile([30, 10, 20, 40], 50) == 20

    def test_bounds(self):
        assert percentile([3, 1, 2], 0) == 1
        assert percentile([3, 1, 2], -5) == 1
        assert percentile([3, 1, 2], 100) == 3
        assert percentile([3, 1, 2], 150) == 3

    def test_empty(self):
        assert percentile([], 95) == 0.0

    def test_single_value(self):
        assert percentile([42.0], 95) == 42.0
