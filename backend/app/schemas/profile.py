"""Researcher profile Pydantic schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field


class PublicationSummary(BaseModel):
    title: str = ""
    year: Optional[int] = None


class ProfileProject(BaseModel):
    id: str
    title: str = ""
    description: str = ""
    publications: List[PublicationSummary] = Field(default_factory=list)


class ProfileCollaboration(BaseModel):
    relation: str
    target: Optional[str] = None


class Profile(BaseModel):
    """研究员画像（缓存 60 秒）"""

    id: str
    name: str = ""
    department: str = ""
    interests: List[str] = Field(default_factory=list)
    projects: List[ProfileProject] = Field(default_factory=list)
    publications: List[PublicationSummary] = Field(default_factory=list)
    collaborations: List[ProfileCollaboration] = Field(default_factory=list)
