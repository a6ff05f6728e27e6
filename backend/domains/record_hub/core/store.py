"""
研究记录存储层 - PostgreSQL 数据源

每类记录一张表，引用字段以 TEXT[] 保存对方 ID：
- researchers.publications -> publications.id
- projects.participants    -> researchers.id
- projects.publications    -> publications.id
- publications.authors     -> researchers.id

写入总是新增记录（新 ID），不做去重。
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from psycopg2.extras import Json

from domains.core.base.store import BaseStore

from .models import Project, Publication, Researcher

logger = logging.getLogger(__name__)


def _as_list(value: Any) -> list:
    """NULL 数组按空列表处理"""
    return list(value) if value else []


class ResearcherStore(BaseStore[Researcher]):
    """研究员存储"""

    table_name = "researchers"

    allowed_columns = {
        'id', 'name', 'department', 'interests', 'publications', 'created_at'
    }

    def _row_to_entity(self, row: Dict[str, Any]) -> Researcher:
        row['interests'] = _as_list(row.get('interests'))
        row['publications'] = _as_list(row.get('publications'))
        return Researcher.from_dict(row)

    def _create_table_sql(self) -> str:
        return """
            CREATE TABLE researchers (
                id TEXT PRIMARY KEY,
                name TEXT,
                department TEXT,
                interests TEXT[] NOT NULL DEFAULT '{}',
                publications TEXT[] NOT NULL DEFAULT '{}',
                created_at TIMESTAMP NOT NULL DEFAULT NOW()
            )
        """

    def add(self, researcher: Researcher) -> str:
        """添加研究员，返回记录 ID"""
        researcher.created_at = datetime.now()

        with self._cursor() as cursor:
            cursor.execute('''
                INSERT INTO researchers (id, name, department, interests, publications, created_at)
                VALUES (%s, %s, %s, %s, %s, %s)
            ''', (
                researcher.id, researcher.name, researcher.department,
                list(researcher.interests), list(researcher.publications),
                researcher.created_at,
            ))

        logger.info(f"研究员已保存: {researcher.name} ({researcher.id})")
        return researcher.id

    def append_publication(self, researcher_id: str, publication_id: str) -> bool:
        """在研究员的论文反向引用中追加一篇论文"""
        with self._cursor() as cursor:
            cursor.execute('''
                UPDATE researchers
                SET publications = array_append(publications, %s)
                WHERE id = %s AND NOT (%s = ANY(publications))
            ''', (publication_id, researcher_id, publication_id))
            return cursor.rowcount > 0

    def find_by_names(self, names: List[str]) -> List[Researcher]:
        """按姓名查询研究员（同名研究员全部返回）"""
        if not names:
            return []
        with self._cursor() as cursor:
            cursor.execute(
                'SELECT * FROM researchers WHERE name = ANY(%s) ORDER BY created_at ASC',
                (list(names),)
            )
            return [self._row_to_entity(dict(row)) for row in cursor.fetchall()]


class PublicationStore(BaseStore[Publication]):
    """论文存储"""

    table_name = "publications"

    allowed_columns = {'id', 'title', 'year', 'authors', 'created_at'}

    def _row_to_entity(self, row: Dict[str, Any]) -> Publication:
        row['authors'] = _as_list(row.get('authors'))
        return Publication.from_dict(row)

    def _create_table_sql(self) -> str:
        return """
            CREATE TABLE publications (
                id TEXT PRIMARY KEY,
                title TEXT,
                year INTEGER,
                authors TEXT[] NOT NULL DEFAULT '{}',
                created_at TIMESTAMP NOT NULL DEFAULT NOW()
            )
        """

    def add(self, publication: Publication) -> str:
        """添加论文，返回记录 ID"""
        publication.created_at = datetime.now()

        with self._cursor() as cursor:
            cursor.execute('''
                INSERT INTO publications (id, title, year, authors, created_at)
                VALUES (%s, %s, %s, %s, %s)
            ''', (
                publication.id, publication.title, publication.year,
                list(publication.authors), publication.created_at,
            ))

        logger.info(f"论文已保存: {publication.title} ({publication.id})")
        return publication.id

    def find_by_author(self, researcher_id: str) -> List[Publication]:
        """查询作者列表包含该研究员的论文"""
        with self._cursor() as cursor:
            cursor.execute(
                'SELECT * FROM publications WHERE %s = ANY(authors) ORDER BY created_at ASC',
                (researcher_id,)
            )
            return [self._row_to_entity(dict(row)) for row in cursor.fetchall()]


class ProjectStore(BaseStore[Project]):
    """项目存储"""

    table_name = "projects"

    allowed_columns = {
        'id', 'title', 'description', 'participants',
        'participant_relations', 'publications', 'created_at'
    }

    def _row_to_entity(self, row: Dict[str, Any]) -> Project:
        row['participants'] = _as_list(row.get('participants'))
        row['publications'] = _as_list(row.get('publications'))
        row['participant_relations'] = row.get('participant_relations') or {}
        return Project.from_dict(row)

    def _create_table_sql(self) -> str:
        return """
            CREATE TABLE projects (
                id TEXT PRIMARY KEY,
                title TEXT,
                description TEXT,
                participants TEXT[] NOT NULL DEFAULT '{}',
                participant_relations JSONB NOT NULL DEFAULT '{}'::jsonb,
                publications TEXT[] NOT NULL DEFAULT '{}',
                created_at TIMESTAMP NOT NULL DEFAULT NOW()
            )
        """

    def add(self, project: Project) -> str:
        """添加项目，返回记录 ID"""
        project.created_at = datetime.now()

        with self._cursor() as cursor:
            cursor.execute('''
                INSERT INTO projects (
                    id, title, description, participants,
                    participant_relations, publications, created_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s)
            ''', (
                project.id, project.title, project.description,
                list(project.participants), Json(project.participant_relations),
                list(project.publications), project.created_at,
            ))

        logger.info(f"项目已保存: {project.title} ({project.id})")
        return project.id

    def append_publication(self, project_id: str, publication_id: str) -> bool:
        """在项目的论文列表末尾追加一篇论文"""
        with self._cursor() as cursor:
            cursor.execute('''
                UPDATE projects
                SET publications = array_append(publications, %s)
                WHERE id = %s
            ''', (publication_id, project_id))
            return cursor.rowcount > 0

    def find_by_participant(self, researcher_id: str) -> List[Project]:
        """查询参与者列表包含该研究员的项目"""
        with self._cursor() as cursor:
            cursor.execute(
                'SELECT * FROM projects WHERE %s = ANY(participants) ORDER BY created_at ASC',
                (researcher_id,)
            )
            return [self._row_to_entity(dict(row)) for row in cursor.fetchall()]


def ensure_record_schema(*stores: Optional[BaseStore]) -> List[str]:
    """
    为给定的存储建表

    Returns:
        本次新建的表名列表
    """
    created = []
    for store in stores:
        if store is not None and store.ensure_schema():
            created.append(store.table_name)
    return created
