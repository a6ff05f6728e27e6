"""
graph_hub 核心模块

导出图谱相关的数据模型、类型定义和存储层。
"""

from .models import (
    NODE_KEY_FIELDS,
    Collaboration,
    GraphEdge,
    GraphNode,
    NodeType,
    RelationType,
    normalize_relation,
    parse_relation,
)
from .store import MAX_COLLABORATIONS, GraphStore

__all__ = [
    # 类型枚举
    "NodeType",
    "RelationType",
    # 常量映射
    "NODE_KEY_FIELDS",
    "MAX_COLLABORATIONS",
    # 数据模型
    "GraphNode",
    "GraphEdge",
    "Collaboration",
    # 关系解析
    "normalize_relation",
    "parse_relation",
    # 存储层
    "GraphStore",
]
