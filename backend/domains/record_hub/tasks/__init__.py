"""
维护任务模块

- seed: 清空图谱并写入示例数据
- check: 三个存储的连接检查
"""

from .check import check_stores, run_check
from .seed import SAMPLE_PROJECTS, SAMPLE_RESEARCHERS, run_seed

__all__ = [
    "check_stores",
    "run_check",
    "run_seed",
    "SAMPLE_RESEARCHERS",
    "SAMPLE_PROJECTS",
]
