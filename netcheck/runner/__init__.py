"""
运行编排包

analyzer: 阈值分级与健康分
planner: 检查项构建、过滤和超时估算
engine: 单次运行
soak: 持续运行与事件流
reporter: 报告文件输出

检查项依赖analyzer，因此这里不预先导入各子模块
"""
