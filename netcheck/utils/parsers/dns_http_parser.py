"""
DNS与HTTP输出解析器

解析dig查询耗时、curl计时和openssl握手信息
"""
import re
from typing import Dict

_DIG_MS_PATTERN = re.compile(r"Query time: ([0-9]+) msec")

# curl -w 使用的输出格式，parse_curl_timings 解析其结果
CURL_TIMING_FORMAT = (
    "dns:%{time_namelookup} connect:%{time_connect} tls:%{time_appconnect} "
    "ttfb:%{time_starttransfer} total:%{time_total}"
)


def parse_dig_ms(output: str) -> float:
    """
    提取dig的查询耗时（毫秒），没有 "Query time" 时返回0

    Examples:
        >>> parse_dig_ms(";; Query time: 43 msec")
        43.0
    """
    match = _DIG_MS_PATTERN.search(output)
    if not match:
        return 0.0
    return float(match.group(1))


def parse_curl_timings(output: str) -> Dict[str, float]:
    """
    解析curl -w输出的 key:value 计时，秒转换为毫秒

    Args:
        output: 例如 "dns:0.01 connect:0.02 tls:0.03 ttfb:0.04 total:0.05"

    Returns:
        {"dns": 10.0, "connect": 20.0, ...}，无法解析的片段被忽略
    """
    timings: Dict[str, float] = {}
    for token in output.strip().split():
        key, sep, value = token.partition(":")
        if not sep:
            continue
        try:
            timings[key] = float(value) * 1000
        except ValueError:
            continue
    return timings


def parse_tls_metadata(output: str) -> Dict[str, str]:
    """
    从 openssl s_client 输出中提取TLS协议和加密套件

    示例输入:
        SSL-Session:
            Protocol  : TLSv1.3
            Cipher    : TLS_AES_256_GCM_SHA384
    """
    meta: Dict[str, str] = {}
    for line in output.split("\n"):
        line = line.strip()
        if line.startswith("Protocol"):
            meta["tls_protocol"] = _value_after_colon(line)
        elif line.startswith("Cipher"):
            meta["tls_cipher"] = _value_after_colon(line)
    return meta


def _value_after_colon(line: str) -> str:
    _, _, value = line.partition(":")
    return value.strip()
