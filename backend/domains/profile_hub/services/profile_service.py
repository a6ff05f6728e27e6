"""
研究员画像服务

画像是研究员在三个存储中数据的一次性汇总：
- 记录存储：身份字段、研究兴趣、发表的论文、参与的项目（含项目论文）
- 图谱：从研究员出发的所有关系

采用旁路缓存：先读 Redis，未命中时回源汇总并写回缓存。
"""

import logging
from typing import Any

from domains.core.exceptions import ResearcherNotFoundError
from domains.graph_hub.core import Collaboration, GraphStore
from domains.record_hub.core import (
    Project,
    ProjectStore,
    Publication,
    PublicationStore,
    Researcher,
    ResearcherStore,
)

from ..core.cache import ProfileCache

logger = logging.getLogger(__name__)


class ProfileService:
    """研究员画像服务"""

    def __init__(
        self,
        researcher_store: ResearcherStore,
        project_store: ProjectStore,
        publication_store: PublicationStore,
        graph_store: GraphStore,
        cache: ProfileCache,
    ):
        self.researcher_store = researcher_store
        self.project_store = project_store
        self.publication_store = publication_store
        self.graph_store = graph_store
        self.cache = cache

    def get_profile(self, researcher_id: str) -> dict[str, Any]:
        """
        获取研究员画像

        命中缓存时直接返回，不访问记录存储和图谱。
        未命中时回源汇总，写入缓存（失败不影响返回）。

        Args:
            researcher_id: 研究员 ID

        Returns:
            画像字典

        Raises:
            ResearcherNotFoundError: 研究员记录不存在
        """
        cached = self.cache.get(researcher_id)
        if cached is not None:
            logger.debug(f"画像缓存命中: {researcher_id}")
            return cached

        researcher = self.researcher_store.get(researcher_id)
        if researcher is None:
            raise ResearcherNotFoundError(researcher_id)

        publications = self.publication_store.find_by_author(researcher_id)
        projects = self.project_store.find_by_participant(researcher_id)
        project_publications = self._populate_project_publications(projects)
        collaborations = self.graph_store.get_outgoing(researcher.name)

        profile = self.assemble(
            researcher, publications, projects, project_publications, collaborations
        )

        if not self.cache.set(researcher_id, profile):
            logger.warning(f"画像未写入缓存，下次请求将重新汇总: {researcher_id}")

        return profile

    def _populate_project_publications(
        self, projects: list[Project]
    ) -> dict[str, Publication]:
        """一次查询填充所有项目的论文"""
        ids: list[str] = []
        for project in projects:
            ids.extend(p for p in project.publications if p not in ids)
        return {p.id: p for p in self.publication_store.get_many(ids)}

    @staticmethod
    def assemble(
        researcher: Researcher,
        publications: list[Publication],
        projects: list[Project],
        project_publications: dict[str, Publication],
        collaborations: list[Collaboration],
    ) -> dict[str, Any]:
        """
        汇总画像

        只包含可 JSON 序列化的字段，结果只由输入决定。
        """
        return {
            "id": researcher.id,
            "name": researcher.name,
            "department": researcher.department,
            "interests": list(researcher.interests),
            "projects": [
                {
                    "id": project.id,
                    "title": project.title,
                    "description": project.description,
                    "publications": [
                        project_publications[pid].summary
                        for pid in project.publications
                        if pid in project_publications
                    ],
                }
                for project in projects
            ],
            "publications": [p.summary for p in publications],
            "collaborations": [
                {"relation": c.relation, "target": c.target}
                for c in collaborations
            ],
        }
