"""Collaboration API routes.

协作关系只存在于图谱中，不写入记录存储。
"""

from typing import List

from fastapi import APIRouter, Depends

from app.core.async_utils import run_sync
from app.core.deps import get_graph_service
from app.schemas.collaboration import Collaboration, CollaborationCreate
from app.schemas.common import ApiResponse, ErrorResponse
from domains.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[Collaboration],
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def create_collaboration(
    request: CollaborationCreate,
    service=Depends(get_graph_service),
):
    """创建研究员之间的协作关系（两端研究员按姓名合并）"""
    data = await run_sync(
        service.create_collaboration,
        request.researcher1,
        request.researcher2,
        request.type,
    )

    logger.info("collaboration_created", **data)
    return ApiResponse(data=Collaboration(**data), message="协作关系创建成功")


@router.get("", response_model=ApiResponse[List[Collaboration]])
async def list_collaborations(service=Depends(get_graph_service)):
    """列出所有协作关系（最多 50 条）"""
    collaborations = await run_sync(service.list_collaborations)
    return ApiResponse(data=[Collaboration(**c) for c in collaborations])
