"""Project API routes.

NOTE: 所有同步服务调用都使用 run_sync 包装，避免阻塞 event loop。
"""

from typing import List

from fastapi import APIRouter, Depends

from app.core.async_utils import run_sync
from app.core.deps import get_record_service
from app.schemas.common import ApiResponse, ErrorResponse, model_to_dict
from app.schemas.record import Project, ProjectCreate, ProjectDetail
from domains.core.logging import get_logger
from domains.record_hub.core import ParticipantSpec, PublicationDraft

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[Project],
    responses={400: {"model": ErrorResponse}},
)
async def create_project(
    request: ProjectCreate,
    service=Depends(get_record_service),
):
    """
    创建项目

    每个参与者按其关系类型在图谱中建边（如 co-authorship -> CO_AUTHORSHIP），
    关系类型非法时返回 400，不写入任何数据。
    """
    project = await run_sync(
        service.create_project,
        title=request.title,
        description=request.description,
        participants=[
            ParticipantSpec(p.researcher_id, p.relation) for p in request.participants
        ],
        publications=[
            PublicationDraft(p.title, p.year) for p in request.publications
        ],
    )
    logger.info(
        "project_created",
        project_id=project.id,
        participants=len(project.participants),
        publications=len(project.publications),
    )
    return ApiResponse(data=Project(**model_to_dict(project)), message="项目创建成功")


@router.get("", response_model=ApiResponse[List[ProjectDetail]])
async def list_projects(service=Depends(get_record_service)):
    """获取所有项目（参与者和论文已填充）"""
    projects = await run_sync(service.list_projects)
    return ApiResponse(data=[ProjectDetail(**p) for p in projects])
