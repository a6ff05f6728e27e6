"""Publication API routes."""

from typing import List

from fastapi import APIRouter, Depends

from app.core.async_utils import run_sync
from app.core.deps import get_record_service
from app.schemas.common import ApiResponse, model_to_dict
from app.schemas.record import Publication, PublicationCreate
from domains.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("", response_model=ApiResponse[Publication])
async def create_publication(
    request: PublicationCreate,
    service=Depends(get_record_service),
):
    """创建论文，失效所有作者的画像缓存"""
    publication = await run_sync(
        service.create_publication,
        title=request.title,
        year=request.year,
        author_ids=request.authors,
    )
    logger.info("publication_created", publication_id=publication.id, authors=len(publication.authors))
    return ApiResponse(data=Publication(**model_to_dict(publication)), message="论文创建成功")


@router.get("", response_model=ApiResponse[List[Publication]])
async def list_publications(service=Depends(get_record_service)):
    """获取所有论文"""
    publications = await run_sync(service.get_publications)
    return ApiResponse(data=[Publication(**model_to_dict(p)) for p in publications])
