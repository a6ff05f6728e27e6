"""
graph_hub 服务层

导出图谱业务服务。
"""

from .graph_service import GraphService

__all__ = [
    "GraphService",
]
