"""Research record Pydantic schemas.

研究员 / 项目 / 论文的请求和响应模型。除类型外不做额外校验，字段可以为空。
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ==================== 论文 ====================

class PublicationRef(BaseModel):
    """填充后的论文引用"""

    id: str
    title: str = ""
    year: Optional[int] = None


class PublicationCreate(BaseModel):
    """Publication create request."""

    title: str = Field("", description="论文标题")
    year: Optional[int] = Field(None, description="发表年份")
    authors: List[str] = Field(default_factory=list, description="作者研究员 ID 列表")


class Publication(BaseModel):
    """Publication record."""

    id: str = Field(..., description="论文 ID")
    title: str = ""
    year: Optional[int] = None
    authors: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


# ==================== 研究员 ====================

class ResearcherCreate(BaseModel):
    """Researcher create request."""

    name: str = Field("", description="姓名")
    department: str = Field("", description="所属院系")
    interests: List[str] = Field(default_factory=list, description="研究兴趣")


class Researcher(BaseModel):
    """Researcher record, publications as IDs."""

    id: str = Field(..., description="研究员 ID")
    name: str = ""
    department: str = ""
    interests: List[str] = Field(default_factory=list)
    publications: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class ResearcherDetail(BaseModel):
    """Researcher with populated publications."""

    id: str
    name: str = ""
    department: str = ""
    interests: List[str] = Field(default_factory=list)
    publications: List[PublicationRef] = Field(default_factory=list)
    created_at: Optional[datetime] = None


# ==================== 项目 ====================

class ParticipantCreate(BaseModel):
    """项目参与者"""

    researcher_id: str = Field(..., description="研究员 ID")
    relation: str = Field("WORKS_ON", description="参与关系，如 co-authorship / supervision / teamwork")


class ProjectCreate(BaseModel):
    """Project create request."""

    title: str = Field("", description="项目标题")
    description: str = Field("", description="项目描述")
    participants: List[ParticipantCreate] = Field(default_factory=list)
    publications: List[PublicationCreate] = Field(
        default_factory=list,
        description="随项目创建的论文，作者为全部参与者（authors 字段忽略）",
    )


class Project(BaseModel):
    """Project record, references as IDs."""

    id: str = Field(..., description="项目 ID")
    title: str = ""
    description: str = ""
    participants: List[str] = Field(default_factory=list)
    participant_relations: dict[str, str] = Field(default_factory=dict)
    publications: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class ParticipantRef(BaseModel):
    """填充后的参与者"""

    id: str
    name: str = ""
    relation: str


class ProjectDetail(BaseModel):
    """Project with populated participants and publications."""

    id: str
    title: str = ""
    description: str = ""
    participants: List[ParticipantRef] = Field(default_factory=list)
    publications: List[PublicationRef] = Field(default_factory=list)
    created_at: Optional[datetime] = None
