"""
研究记录数据模型定义

Record Hub 是系统的主数据层（System of Record），保存三类记录：
- 研究员（Researcher）
- 项目（Project）
- 论文（Publication）

引用字段只保存对方的 ID，展示时再通过存储层批量填充。
图谱（graph_hub）和画像缓存（profile_hub）都是从这里派生的视图。
"""

import uuid as uuid_lib
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def new_record_id() -> str:
    """生成新的记录 ID（不透明字符串）"""
    return str(uuid_lib.uuid4())


@dataclass
class Researcher:
    """
    研究员

    Attributes:
        id: 记录 ID
        name: 姓名（同时是图谱中的关联键，重名会在图谱中合并）
        department: 所属院系
        interests: 研究兴趣标签
        publications: 已发表论文 ID 列表（反向引用）
        created_at: 创建时间
    """
    id: str = field(default_factory=new_record_id)
    name: str = ""
    department: str = ""
    interests: list[str] = field(default_factory=list)
    publications: list[str] = field(default_factory=list)
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            'id': self.id,
            'name': self.name,
            'department': self.department,
            'interests': list(self.interests),
            'publications': list(self.publications),
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Researcher':
        """从字典创建实例"""
        valid_fields = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**valid_fields)


@dataclass
class Project:
    """
    研究项目

    Attributes:
        id: 记录 ID
        title: 项目标题（图谱中的关联键）
        description: 项目描述
        participants: 参与研究员 ID 列表（有序）
        participant_relations: 研究员 ID -> 参与关系类型（如 SUPERVISION）
        publications: 项目产出论文 ID 列表（有序）
        created_at: 创建时间
    """
    id: str = field(default_factory=new_record_id)
    title: str = ""
    description: str = ""
    participants: list[str] = field(default_factory=list)
    participant_relations: dict[str, str] = field(default_factory=dict)
    publications: list[str] = field(default_factory=list)
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'participants': list(self.participants),
            'participant_relations': dict(self.participant_relations),
            'publications': list(self.publications),
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Project':
        """从字典创建实例"""
        valid_fields = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**valid_fields)


@dataclass
class Publication:
    """
    论文

    Attributes:
        id: 记录 ID
        title: 标题
        year: 发表年份（可为空）
        authors: 作者研究员 ID 列表
        created_at: 创建时间
    """
    id: str = field(default_factory=new_record_id)
    title: str = ""
    year: int | None = None
    authors: list[str] = field(default_factory=list)
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            'id': self.id,
            'title': self.title,
            'year': self.year,
            'authors': list(self.authors),
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Publication':
        """从字典创建实例"""
        valid_fields = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**valid_fields)

    @property
    def summary(self) -> dict[str, Any]:
        """画像中使用的精简表示"""
        return {'title': self.title, 'year': self.year}


@dataclass
class ParticipantSpec:
    """创建项目时的参与者：研究员 ID + 参与关系文本（如 "co-authorship"）"""
    researcher_id: str
    relation: str = "WORKS_ON"


@dataclass
class PublicationDraft:
    """随项目一起创建的论文"""
    title: str = ""
    year: int | None = None
