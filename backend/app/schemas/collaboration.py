"""Collaboration Pydantic schemas."""

from pydantic import BaseModel, Field


class CollaborationCreate(BaseModel):
    """研究员之间的协作关系请求"""

    researcher1: str = Field(..., description="源研究员姓名")
    researcher2: str = Field(..., description="目标研究员姓名")
    type: str = Field(..., description="关系类型，如 CO_AUTHOR / supervisor / teammate")


class Collaboration(BaseModel):
    """图谱中的一条出边"""

    researcher: str
    relation: str
    target: str | None = None
