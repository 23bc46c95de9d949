"""
DNS/HTTP/TLS解析器单元测试
"""
import pytest

from netcheck.utils.parsers.dns_http_parser import parse_curl_timings, parse_dig_ms, parse_tls_metadata


class TestParseDigMs:
    """dig查询耗时解析测试"""

    def test_query_time(self):
        assert parse_dig_ms(";; Query time: 43 msec") == 43

    def test_full_output(self):
        raw = """; <<>> DiG 9.10.6 <<>> google.com
;; ANSWER SECTION:
google.com.		300	IN	A	142.250.72.14

;; Query time: 12 msec
;; SERVER: 1.1.1.1#53(1.1.1.1)"""
        assert parse_dig_ms(raw) == 12

    def test_missing_query_time(self):
        assert parse_dig_ms(";; connection timed out; no servers could be reached") == 0


class TestParseCurlTimings:
    """curl计时解析测试"""

    def test_seconds_to_ms(self):
        timings = parse_curl_timings("dns:0.01 connect:0.02 tls:0.03 ttfb:0.04 total:0.05")

        assert timings["total"] == pytest.approx(50)
        assert timings["dns"] == pytest.approx(10)
        assert timings["tls"] == pytest.approx(30)

    def test_ignores_bad_tokens(self):
        timings = parse_curl_timings("dns:abc total:0.2 stray")

        assert "dns" not in timings
        assert timings["total"] == pytest.approx(200)

    def test_empty(self):
        assert parse_curl_timings("") == {}


class TestParseTLSMetadata:
    """openssl s_client输出解析测试"""

    def test_protocol_and_cipher(self):
        raw = """CONNECTED(00000003)
---
SSL-Session:
    Protocol  : TLSv1.3
    Cipher    : TLS_AES_256_GCM_SHA384
    Session-ID: ABCD"""

        meta = parse_tls_metadata(raw)

        assert meta == {"tls_protocol": "TLSv1.3", "tls_cipher": "TLS_AES_256_GCM_SHA384"}

    def test_no_session(self):
        assert parse_tls_metadata("connect: Connection refused") == {}
