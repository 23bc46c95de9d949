"""
本地网络信息解析器

从路由表中提取默认网关，从ifconfig中统计活动接口
"""
from .base import InterfaceActivity


def parse_default_gateway(output: str) -> str:
    """
    从 netstat -rn 输出中提取默认网关

    取第一条以 "default" 开头的路由的第二个字段，未找到返回空字符串

    示例输入:
        Routing tables
        Destination        Gateway            Flags        Netif Expire
        default            192.168.1.1        UGScg          en0
    """
    for line in output.split("\n"):
        if not line.strip().startswith("default"):
            continue
        fields = line.split()
        if len(fields) > 1:
            return fields[1]
    return ""


def parse_interface_activity(output: str) -> InterfaceActivity:
    """
    统计ifconfig中处于active状态的接口数和非回环IPv4地址数
    """
    active = 0
    ip_count = 0
    for line in output.split("\n"):
        line = line.strip()
        if line.startswith("status: active"):
            active += 1
        if line.startswith("inet ") and "127.0.0.1" not in line:
            ip_count += 1
    return InterfaceActivity(active_interfaces=active, local_ip_count=ip_count)
