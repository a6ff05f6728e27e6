"""
研究记录服务层

录入流程（研究员 / 项目 / 论文相同）：
1. 写入记录存储（PostgreSQL，系统主数据）
2. 在图谱中合并对应节点
3. 项目 / 论文为每个参与者 / 作者合并一条关系边
4. 失效所有受影响研究员的画像缓存

第 2~4 步是派生视图的维护，失败只记录日志，不回滚第 1 步。
图谱写入全部是 MERGE，可通过 resync_graph() 从主数据整体重放。
"""

import logging
from typing import Any, Iterable, Optional, Sequence

from domains.graph_hub.core import (
    GraphEdge,
    GraphNode,
    GraphStore,
    RelationType,
    parse_relation,
)
from domains.profile_hub.core import ProfileCache

from ..core.models import (
    ParticipantSpec,
    Project,
    Publication,
    PublicationDraft,
    Researcher,
)
from ..core.store import ProjectStore, PublicationStore, ResearcherStore

logger = logging.getLogger(__name__)


class RecordService:
    """
    研究记录服务层

    封装三类记录的录入和查询，维护图谱镜像和画像缓存。
    """

    def __init__(
        self,
        researcher_store: ResearcherStore,
        project_store: ProjectStore,
        publication_store: PublicationStore,
        graph_store: GraphStore,
        profile_cache: ProfileCache,
    ):
        self.researcher_store = researcher_store
        self.project_store = project_store
        self.publication_store = publication_store
        self.graph_store = graph_store
        self.profile_cache = profile_cache

    # ==================== 录入 ====================

    def create_researcher(
        self,
        name: str = "",
        department: str = "",
        interests: Optional[Iterable[str]] = None,
    ) -> Researcher:
        """
        创建研究员

        Args:
            name: 姓名
            department: 院系
            interests: 研究兴趣（空白项会被忽略）

        Returns:
            新建的研究员记录
        """
        researcher = Researcher(
            name=name or "",
            department=department or "",
            interests=[i.strip() for i in (interests or []) if i and i.strip()],
        )
        self.researcher_store.add(researcher)

        self._mirror(self.graph_store.merge_node(
            GraphNode.researcher(researcher.name, researcher.department)
        ), f"研究员节点 {researcher.name}")

        return researcher

    def create_publication(
        self,
        title: str = "",
        year: Optional[int] = None,
        author_ids: Sequence[str] = (),
    ) -> Publication:
        """
        创建论文

        不存在的作者 ID 会被忽略。创建后失效所有作者的画像缓存。

        Args:
            title: 标题
            year: 年份
            author_ids: 作者研究员 ID 列表

        Returns:
            新建的论文记录
        """
        authors = self._resolve_researchers(author_ids)
        publication = self._new_publication(title, year, authors)
        self.publication_store.add(publication)
        try:
            self._link_publication(publication, authors)
        finally:
            self._invalidate_profiles(r.id for r in authors)
        return publication

    def create_project(
        self,
        title: str = "",
        description: str = "",
        participants: Sequence[ParticipantSpec] = (),
        publications: Sequence[PublicationDraft] = (),
    ) -> Project:
        """
        创建项目

        参与关系文本在写入任何存储之前校验，非法值直接抛出，不会留下半成品。
        随项目创建的论文以全部参与者为作者。

        Args:
            title: 项目标题
            description: 项目描述
            participants: 参与者（研究员 ID + 参与关系）
            publications: 随项目一起创建的论文

        Returns:
            新建的项目记录

        Raises:
            InvalidRelationError: 参与关系不在允许集合内
        """
        relations = {
            participant.researcher_id: parse_relation(participant.relation or RelationType.WORKS_ON)
            for participant in reversed(participants)
        }
        members = self._resolve_researchers([participant.researcher_id for participant in participants])

        project = Project(
            title=title or "",
            description=description or "",
            participants=[r.id for r in members],
            participant_relations={r.id: relations[r.id].value for r in members},
        )
        self.project_store.add(project)

        # 主记录已提交，后续步骤失败也要失效缓存
        try:
            project_node = GraphNode.project(project.title)
            self._mirror(self.graph_store.merge_node(project_node), f"项目节点 {project.title}")
            for researcher in members:
                self._mirror(self.graph_store.merge_edge(GraphEdge(
                    source_name=researcher.name,
                    relation=relations[researcher.id],
                    target=project_node,
                )), f"{researcher.name} -> 项目 {project.title}")

            for draft in publications:
                publication = self._new_publication(draft.title, draft.year, members)
                self.publication_store.add(publication)
                self._link_publication(publication, members)
                self.project_store.append_publication(project.id, publication.id)
                project.publications.append(publication.id)
        finally:
            self._invalidate_profiles(r.id for r in members)
        return project

    @staticmethod
    def _new_publication(
        title: str,
        year: Optional[int],
        authors: list[Researcher],
    ) -> Publication:
        return Publication(
            title=title or "",
            year=year,
            authors=[r.id for r in authors],
        )

    def _link_publication(self, publication: Publication, authors: list[Researcher]) -> None:
        """维护作者反向引用并镜像到图谱（论文已写入，不含缓存失效）"""
        for researcher in authors:
            self.researcher_store.append_publication(researcher.id, publication.id)

        self._mirror_publication(publication, authors)

    def _mirror_publication(self, publication: Publication, authors: list[Researcher]) -> int:
        """镜像论文节点和 AUTHOR_OF 边，返回失败的写入数"""
        node = GraphNode.publication(publication.title, publication.year)
        failed = 0 if self._mirror(
            self.graph_store.merge_node(node), f"论文节点 {publication.title}"
        ) else 1

        for researcher in authors:
            if not self._mirror(self.graph_store.merge_edge(GraphEdge(
                source_name=researcher.name,
                relation=RelationType.AUTHOR_OF,
                target=node,
            )), f"{researcher.name} -> 论文 {publication.title}"):
                failed += 1
        return failed

    # ==================== 查询 ====================

    def get_researcher(self, researcher_id: str) -> Optional[Researcher]:
        """获取研究员"""
        return self.researcher_store.get(researcher_id)

    def get_researchers(self) -> list[Researcher]:
        """获取所有研究员（按创建时间）"""
        return self.researcher_store.get_all()

    def get_projects(self) -> list[Project]:
        """获取所有项目（按创建时间）"""
        return self.project_store.get_all()

    def get_publications(self) -> list[Publication]:
        """获取所有论文（按创建时间）"""
        return self.publication_store.get_all()

    def list_researchers(self) -> list[dict[str, Any]]:
        """
        获取所有研究员，论文引用填充为 {id, title, year}
        """
        researchers = self.get_researchers()
        pub_ids = [pid for r in researchers for pid in r.publications]
        pubs = {p.id: p for p in self.publication_store.get_many(pub_ids)}

        result = []
        for researcher in researchers:
            item = researcher.to_dict()
            item['publications'] = [
                {'id': pid, **pubs[pid].summary}
                for pid in researcher.publications if pid in pubs
            ]
            result.append(item)
        return result

    def list_projects(self) -> list[dict[str, Any]]:
        """
        获取所有项目，参与者填充为 {id, name, relation}，论文填充为 {id, title, year}
        """
        projects = self.get_projects()
        people = {r.id: r for r in self.researcher_store.get_many(
            [rid for p in projects for rid in p.participants]
        )}
        pubs = {p.id: p for p in self.publication_store.get_many(
            [pid for p in projects for pid in p.publications]
        )}

        result = []
        for project in projects:
            item = project.to_dict()
            item['participants'] = [
                {
                    'id': rid,
                    'name': people[rid].name,
                    'relation': project.participant_relations.get(rid, RelationType.WORKS_ON.value),
                }
                for rid in project.participants if rid in people
            ]
            item['publications'] = [
                {'id': pid, **pubs[pid].summary}
                for pid in project.publications if pid in pubs
            ]
            result.append(item)
        return result

    # ==================== 图谱重放 ====================

    def resync_graph(self) -> dict[str, int]:
        """
        从记录存储重建图谱镜像

        所有写入都是 MERGE，重复执行结果不变，
        用于修复镜像写入失败造成的不一致。

        Returns:
            统计信息 {researchers, projects, publications, edges, failed}
        """
        stats = {"researchers": 0, "projects": 0, "publications": 0, "edges": 0, "failed": 0}

        researchers = {r.id: r for r in self.get_researchers()}
        for researcher in researchers.values():
            ok = self.graph_store.merge_node(
                GraphNode.researcher(researcher.name, researcher.department)
            )
            stats["researchers" if ok else "failed"] += 1

        for publication in self.get_publications():
            authors = [researchers[rid] for rid in publication.authors if rid in researchers]
            failed = self._mirror_publication(publication, authors)
            stats["publications"] += 1
            stats["edges"] += len(authors)
            stats["failed"] += failed

        for project in self.get_projects():
            node = GraphNode.project(project.title)
            if not self.graph_store.merge_node(node):
                stats["failed"] += 1
            stats["projects"] += 1

            for rid in project.participants:
                researcher = researchers.get(rid)
                if researcher is None:
                    continue
                relation = parse_relation(
                    project.participant_relations.get(rid, RelationType.WORKS_ON)
                )
                ok = self.graph_store.merge_edge(GraphEdge(researcher.name, relation, node))
                stats["edges" if ok else "failed"] += 1

        logger.info(f"图谱重放完成: {stats}")
        return stats

    # ==================== 缓存失效 ====================

    def invalidate_profiles_by_name(self, names: Iterable[str]) -> int:
        """
        按姓名失效研究员画像缓存

        图谱中的研究员节点以姓名为键，只改动图谱的操作（如研究员之间的协作边）
        通过这里失效同名研究员的画像。
        """
        researchers = self.researcher_store.find_by_names(list(dict.fromkeys(n for n in names if n)))
        return self._invalidate_profiles(r.id for r in researchers)

    # ==================== 辅助方法 ====================

    def _resolve_researchers(self, researcher_ids: Sequence[str]) -> list[Researcher]:
        """按 ID 解析研究员，去重并跳过不存在的 ID"""
        unique_ids = list(dict.fromkeys(rid for rid in researcher_ids if rid))
        found = self.researcher_store.get_many(unique_ids)

        missing = set(unique_ids) - {r.id for r in found}
        if missing:
            logger.warning(f"忽略不存在的研究员: {sorted(missing)}")
        return found

    def _invalidate_profiles(self, researcher_ids: Iterable[str]) -> int:
        """失效受影响研究员的画像缓存（所有录入操作的唯一失效入口）"""
        ids = list(researcher_ids)
        if not ids:
            return 0
        invalidated = self.profile_cache.invalidate_many(ids)
        if invalidated < len(set(ids)):
            logger.warning(f"部分画像缓存失效失败: {invalidated}/{len(set(ids))}")
        return invalidated

    @staticmethod
    def _mirror(ok: bool, what: str) -> bool:
        """记录镜像写入失败（记录存储已写入，不回滚）"""
        if not ok:
            logger.warning(f"图谱镜像写入失败，可执行 resync 重放: {what}")
        return ok
