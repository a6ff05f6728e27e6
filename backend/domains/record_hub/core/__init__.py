"""
核心层：数据模型和存储

Record Hub 是研究员 / 项目 / 论文的主数据层，
图谱镜像和画像缓存都以这里的数据为准。
"""

from .models import (
    ParticipantSpec,
    Project,
    Publication,
    PublicationDraft,
    Researcher,
    new_record_id,
)
from .store import ProjectStore, PublicationStore, ResearcherStore, ensure_record_schema

__all__ = [
    'Researcher',
    'Project',
    'Publication',
    'ParticipantSpec',
    'PublicationDraft',
    'new_record_id',
    'ResearcherStore',
    'ProjectStore',
    'PublicationStore',
    'ensure_record_schema',
]
