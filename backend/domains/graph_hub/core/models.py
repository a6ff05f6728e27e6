"""
图谱数据模型

定义 Neo4j 图数据库的节点和边数据结构。

图谱是记录存储的派生镜像：
- 节点按业务键合并（研究员: name+department，项目: title，论文: title+year）
- 边从研究员出发，指向项目 / 论文 / 其他研究员
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from domains.core.exceptions import InvalidRelationError


class NodeType(str, Enum):
    """节点类型枚举（值即 Neo4j 标签）"""

    RESEARCHER = "Researcher"
    PROJECT = "Project"
    PUBLICATION = "Publication"

    @property
    def label(self) -> str:
        """Neo4j 标签名"""
        return self.value

    @property
    def key_fields(self) -> tuple[str, ...]:
        """MERGE 时使用的业务键"""
        return NODE_KEY_FIELDS[self]


NODE_KEY_FIELDS: dict[NodeType, tuple[str, ...]] = {
    NodeType.RESEARCHER: ("name", "department"),
    NodeType.PROJECT: ("title",),
    NodeType.PUBLICATION: ("title", "year"),
}


class RelationType(str, Enum):
    """
    关系类型枚举

    允许的关系类型是封闭集合，用户输入必须先经 parse_relation 校验，
    Cypher 中的关系类型只会来自这里。
    """

    # 系统关系
    AUTHOR_OF = "AUTHOR_OF"  # 研究员 -> 论文
    WORKS_ON = "WORKS_ON"  # 研究员 -> 项目（默认参与关系）
    COLLABORATES_WITH = "COLLABORATES_WITH"  # 研究员 -> 研究员

    # 项目参与关系
    CO_AUTHORSHIP = "CO_AUTHORSHIP"
    SUPERVISION = "SUPERVISION"
    TEAMWORK = "TEAMWORK"

    # 研究员之间的协作关系
    CO_AUTHOR = "CO_AUTHOR"
    SUPERVISOR = "SUPERVISOR"
    TEAMMATE = "TEAMMATE"


def normalize_relation(text: str) -> str:
    """
    规范化关系文本：去空白、大写、连字符和空格替换为下划线

    Examples:
        >>> normalize_relation("co-authorship")
        'CO_AUTHORSHIP'
    """
    return (text or "").strip().upper().replace("-", "_").replace(" ", "_")


def parse_relation(text: str | RelationType) -> RelationType:
    """
    解析用户输入的关系类型

    Args:
        text: 关系文本（如 "co-authorship"）或 RelationType

    Returns:
        RelationType 枚举值

    Raises:
        InvalidRelationError: 不在允许集合内
    """
    if isinstance(text, RelationType):
        return text

    normalized = normalize_relation(text)
    try:
        return RelationType(normalized)
    except ValueError:
        raise InvalidRelationError(text, [r.value for r in RelationType]) from None


@dataclass
class GraphNode:
    """图节点"""

    node_type: NodeType
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return self.node_type.label

    @property
    def key(self) -> dict[str, Any]:
        """业务键属性（缺失的键按 None 处理）"""
        return {k: self.properties.get(k) for k in self.node_type.key_fields}

    @classmethod
    def researcher(cls, name: str, department: str | None = None) -> "GraphNode":
        return cls(NodeType.RESEARCHER, {"name": name, "department": department})

    @classmethod
    def project(cls, title: str) -> "GraphNode":
        return cls(NodeType.PROJECT, {"title": title})

    @classmethod
    def publication(cls, title: str, year: int | None) -> "GraphNode":
        return cls(NodeType.PUBLICATION, {"title": title, "year": year})

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "node_type": self.node_type.value,
            "properties": self.properties,
        }


@dataclass
class GraphEdge:
    """
    图边

    源节点是按姓名匹配的研究员，目标节点按业务键 MERGE。
    """

    source_name: str
    relation: RelationType
    target: GraphNode

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "source_name": self.source_name,
            "relation": self.relation.value,
            "target": self.target.to_dict(),
        }


@dataclass
class Collaboration:
    """一条从研究员出发的关系（查询结果）"""

    researcher: str
    relation: str
    target: str | None

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "researcher": self.researcher,
            "relation": self.relation,
            "target": self.target,
        }


__all__ = [
    "NodeType",
    "NODE_KEY_FIELDS",
    "RelationType",
    "normalize_relation",
    "parse_relation",
    "GraphNode",
    "GraphEdge",
    "Collaboration",
]
