"""Pydantic schemas for API requests and responses."""

from app.schemas.common import ApiResponse, ErrorResponse, model_to_dict
from app.schemas.collaboration import Collaboration, CollaborationCreate
from app.schemas.profile import Profile
from app.schemas.record import (
    Project,
    ProjectCreate,
    ProjectDetail,
    Publication,
    PublicationCreate,
    Researcher,
    ResearcherCreate,
    ResearcherDetail,
)

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "model_to_dict",
    "Researcher",
    "ResearcherCreate",
    "ResearcherDetail",
    "Project",
    "ProjectCreate",
    "ProjectDetail",
    "Publication",
    "PublicationCreate",
    "Collaboration",
    "CollaborationCreate",
    "Profile",
]
