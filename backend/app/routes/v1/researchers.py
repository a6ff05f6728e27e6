"""Researcher API routes.

研究员录入、查询和画像接口。

NOTE: 所有同步服务调用都使用 run_sync 包装，避免阻塞 event loop。
"""

from typing import List

from fastapi import APIRouter, Depends, Path

from app.core.async_utils import run_sync
from app.core.deps import get_profile_service, get_record_service
from app.schemas.common import ApiResponse, ErrorResponse, model_to_dict
from app.schemas.profile import Profile
from app.schemas.record import Researcher, ResearcherCreate, ResearcherDetail
from domains.core import ResearcherNotFoundError
from domains.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("", response_model=ApiResponse[Researcher])
async def create_researcher(
    request: ResearcherCreate,
    service=Depends(get_record_service),
):
    """创建研究员"""
    researcher = await run_sync(
        service.create_researcher,
        name=request.name,
        department=request.department,
        interests=request.interests,
    )
    logger.info("researcher_created", researcher_id=researcher.id)
    return ApiResponse(data=Researcher(**model_to_dict(researcher)), message="研究员创建成功")


@router.get("", response_model=ApiResponse[List[ResearcherDetail]])
async def list_researchers(service=Depends(get_record_service)):
    """获取所有研究员（论文已填充）"""
    researchers = await run_sync(service.list_researchers)
    return ApiResponse(data=[ResearcherDetail(**r) for r in researchers])


@router.get(
    "/{researcher_id}",
    response_model=ApiResponse[Researcher],
    responses={404: {"model": ErrorResponse}},
)
async def get_researcher(
    researcher_id: str = Path(..., description="研究员 ID"),
    service=Depends(get_record_service),
):
    """获取研究员记录"""
    researcher = await run_sync(service.get_researcher, researcher_id)
    if researcher is None:
        raise ResearcherNotFoundError(researcher_id)
    return ApiResponse(data=Researcher(**model_to_dict(researcher)))


@router.get(
    "/{researcher_id}/profile",
    response_model=ApiResponse[Profile],
    responses={404: {"model": ErrorResponse}},
)
async def get_profile(
    researcher_id: str = Path(..., description="研究员 ID"),
    service=Depends(get_profile_service),
):
    """
    获取研究员画像

    画像缓存 60 秒，期间新增的论文 / 项目会主动失效缓存。
    """
    profile = await run_sync(service.get_profile, researcher_id)
    return ApiResponse(data=Profile(**profile))
