"""
图谱业务服务

提供协作关系的查询和研究员之间协作边的创建。
"""
import logging
from typing import Any, Dict, List, Optional

from domains.core.exceptions import ExternalServiceError, ValidationError

from ..core import MAX_COLLABORATIONS, GraphStore, parse_relation

logger = logging.getLogger(__name__)


class GraphService:
    """图谱业务服务"""

    def __init__(self, store: GraphStore, record_service: Optional[Any] = None):
        """
        初始化服务

        Args:
            store: 图存储层实例
            record_service: 研究记录服务，用于新建协作边后失效画像缓存
        """
        self._store = store
        self._record_service = record_service

    @property
    def store(self) -> GraphStore:
        return self._store

    # ==================== 协作关系 ====================

    def list_collaborations(self, limit: int = MAX_COLLABORATIONS) -> List[Dict[str, Any]]:
        """
        列出所有研究员的出边

        Returns:
            [{researcher, relation, target}, ...]，最多 50 条
        """
        collaborations = self.store.list_collaborations(limit=limit)
        return [c.to_dict() for c in collaborations]

    def create_collaboration(
        self,
        researcher1: str,
        researcher2: str,
        relation: str,
    ) -> Dict[str, Any]:
        """
        创建研究员之间的协作关系

        两端研究员节点按姓名 MERGE，关系类型必须在允许集合内。
        新边出现在 researcher1 的画像中，写入后失效其画像缓存。

        Args:
            researcher1: 源研究员姓名
            researcher2: 目标研究员姓名
            relation: 关系类型文本（如 "co-author"）

        Returns:
            {researcher, relation, target}

        Raises:
            InvalidRelationError: 关系类型不在允许集合内
            ValidationError: 研究员姓名为空
            ExternalServiceError: 图谱写入失败
        """
        rel_type = parse_relation(relation)
        if not researcher1 or not researcher2:
            raise ValidationError("researcher1 和 researcher2 不能为空", field="researcher")

        if not self.store.merge_collaboration(researcher1, rel_type, researcher2):
            raise ExternalServiceError("Neo4j", "协作关系写入图谱失败")

        if self._record_service is not None:
            self._record_service.invalidate_profiles_by_name([researcher1])

        logger.info(f"协作关系已创建: {researcher1} -[{rel_type.value}]-> {researcher2}")
        return {
            "researcher": researcher1,
            "relation": rel_type.value,
            "target": researcher2,
        }
