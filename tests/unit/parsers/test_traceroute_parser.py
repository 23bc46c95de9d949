"""
路径质量解析器单元测试（mtr / traceroute）
"""
from netcheck.utils.parsers.traceroute_parser import parse_mtr_summary, parse_traceroute_summary


class TestParseMTRSummary:
    """mtr报告解析测试"""

    def test_compact_report(self):
        """测试最后一跳的丢包率"""
        summary = parse_mtr_summary("1.|-- a 0.0%\n2.|-- b 1.5%\n3.|-- c 2.1%")

        assert summary.hop_count == 3
        assert summary.near_dest_loss_pct == 2.1

    def test_full_report(self):
        """测试带标题和对齐空格的完整报告"""
        raw = """Start: 2024-05-01T10:00:00+0800
HOST: laptop                      Loss%   Snt   Last   Avg  Best  Wrst StDev
  1.|-- 192.168.1.1                0.0%    10    1.2   1.1   0.9   1.6   0.2
  2.|-- 10.10.0.1                  0.0%    10    9.8   9.7   9.1  10.4   0.4
  3.|-- one.one.one.one            0.5%    10   12.1  12.0  11.7  12.6   0.3"""

        summary = parse_mtr_summary(raw)

        assert summary.hop_count == 3
        assert summary.near_dest_loss_pct == 0.5

    def test_no_hops(self):
        """测试无匹配行"""
        summary = parse_mtr_summary("mtr: unable to get raw sockets")

        assert summary.hop_count == 0
        assert summary.near_dest_loss_pct == 0.0


class TestParseTracerouteSummary:
    """traceroute输出解析测试"""

    def test_counts_timeout_hops(self):
        """测试统计超时跳点"""
        raw = ("traceroute to 1.1.1.1\n 1  a  1.0 ms 1.1 ms 1.2 ms\n"
               " 2  * * *\n 3  c  5.0 ms 5.1 ms 5.2 ms")

        summary = parse_traceroute_summary(raw)

        assert summary.hop_count == 3
        assert summary.timeout_hops == 1

    def test_linux_output(self):
        """测试Linux traceroute格式"""
        raw = """traceroute to 10.0.2.20 (10.0.2.20), 30 hops max, 60 byte packets
 1  10.0.1.1 (10.0.1.1)  0.512 ms  0.389 ms  0.301 ms
 2  10.0.2.1 (10.0.2.1)  1.234 ms  1.123 ms  1.045 ms
 3  10.0.2.20 (10.0.2.20)  2.345 ms  2.234 ms  2.123 ms"""

        summary = parse_traceroute_summary(raw)

        assert summary.hop_count == 3
        assert summary.timeout_hops == 0

    def test_partial_timeout_not_counted(self):
        """测试只有部分探测超时的跳点不计为超时"""
        summary = parse_traceroute_summary(" 1  a  1.0 ms * 1.2 ms")

        assert summary.hop_count == 1
        assert summary.timeout_hops == 0

    def test_ignores_non_hop_lines(self):
        """测试忽略空行和非跳点行"""
        summary = parse_traceroute_summary("\n\nsome warning text\n")

        assert summary.hop_count == 0
