"""
netcheck - 网络健康诊断工具

调用系统网络工具（ping、dig、curl、mtr、iperf3等）检查本地网关、连通性、
DNS、HTTP、路径质量、缓冲膨胀和带宽，汇总为健康分
"""
__version__ = "0.1.0"
