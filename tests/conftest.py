"""
Shared pytest fixtures for the research collaboration test suite.

外部存储全部用内存替身代替，不需要真实的 PostgreSQL / Neo4j / Redis。
"""

import copy
from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest

from domains.core import ServiceRegistry, reset_service_registry
from domains.graph_hub.core import Collaboration, GraphEdge, GraphNode, RelationType
from domains.graph_hub.services import GraphService
from domains.profile_hub.core import ProfileCache
from domains.profile_hub.services import ProfileService
from domains.record_hub.services import RecordService


class InMemoryRecordStore:
    """记录存储替身：按值保存，读取返回副本，行为与数据库一致"""

    def __init__(self, table_name: str):
        self.table_name = table_name
        self.records: Dict[str, Any] = {}
        self.closed = False

    def add(self, record) -> str:
        record.created_at = datetime.now()
        self.records[record.id] = copy.deepcopy(record)
        return record.id

    def get(self, record_id: str):
        record = self.records.get(record_id)
        return copy.deepcopy(record) if record else None

    def get_many(self, record_ids) -> list:
        return [copy.deepcopy(self.records[i]) for i in record_ids if i in self.records]

    def get_all(self) -> list:
        return [copy.deepcopy(r) for r in self.records.values()]

    def append_publication(self, owner_id: str, publication_id: str) -> bool:
        record = self.records.get(owner_id)
        if record is None or publication_id in record.publications:
            return False
        record.publications.append(publication_id)
        return True

    def find_by_names(self, names) -> list:
        return [copy.deepcopy(r) for r in self.records.values() if r.name in names]

    def find_by_author(self, researcher_id: str) -> list:
        return [copy.deepcopy(r) for r in self.records.values() if researcher_id in r.authors]

    def find_by_participant(self, researcher_id: str) -> list:
        return [copy.deepcopy(r) for r in self.records.values() if researcher_id in r.participants]

    def ensure_schema(self) -> bool:
        return False

    def health_check(self) -> bool:
        return True

    def close(self) -> None:
        self.closed = True


class InMemoryGraphStore:
    """图存储替身：节点和边用集合保存，模拟 MERGE 去重"""

    def __init__(self):
        self.nodes: Set[Tuple[str, Tuple]] = set()
        self.edges: Set[Tuple[str, str, str, Tuple]] = set()
        self.fail_writes = False
        self.closed = False

    @staticmethod
    def _node_id(node: GraphNode) -> Tuple[str, Tuple]:
        return node.label, tuple(sorted(node.key.items(), key=lambda kv: kv[0]))

    def _has_researcher(self, name: str) -> bool:
        return any(
            label == "Researcher" and dict(key).get("name") == name
            for label, key in self.nodes
        )

    def merge_node(self, node: GraphNode) -> bool:
        if self.fail_writes:
            return False
        self.nodes.add(self._node_id(node))
        return True

    def merge_edge(self, edge: GraphEdge) -> bool:
        if self.fail_writes or not self._has_researcher(edge.source_name):
            return False
        target = self._node_id(edge.target)
        self.nodes.add(target)
        self.edges.add((edge.source_name, edge.relation.value, target[0], target[1]))
        return True

    def merge_collaboration(self, source_name: str, relation: RelationType, target_name: str) -> bool:
        if self.fail_writes:
            return False
        target = ("Researcher", (("name", target_name),))
        self.nodes.add(("Researcher", (("name", source_name),)))
        self.nodes.add(target)
        self.edges.add((source_name, relation.value, target[0], target[1]))
        return True

    def _target_name(self, key: Tuple) -> Optional[str]:
        props = dict(key)
        return props.get("title", props.get("name"))

    def get_outgoing(self, researcher_name: str) -> List[Collaboration]:
        return sorted(
            (
                Collaboration(source, relation, self._target_name(key))
                for source, relation, _, key in self.edges
                if source == researcher_name
            ),
            key=lambda c: (c.relation, c.target or ""),
        )

    def list_collaborations(self, limit: int = 50) -> List[Collaboration]:
        collaborations = [
            Collaboration(source, relation, self._target_name(key))
            for source, relation, _, key in self.edges
        ]
        return collaborations[:min(limit, 50)]

    def edge_types(self, source_name: str) -> Set[str]:
        return {relation for source, relation, _, _ in self.edges if source == source_name}

    def clear(self) -> int:
        deleted = len(self.nodes)
        self.nodes.clear()
        self.edges.clear()
        return deleted

    def health_check(self) -> bool:
        return True

    def close(self) -> None:
        self.closed = True


class FakeRedis:
    """redis.Redis 替身，记录写入的过期时间"""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.expiry: Dict[str, int] = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = value
        self.expiry[key] = ex
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.expiry.pop(key, None)
        return removed

    def ping(self):
        return True

    def close(self):
        pass


@pytest.fixture
def researcher_store():
    return InMemoryRecordStore("researchers")


@pytest.fixture
def project_store():
    return InMemoryRecordStore("projects")


@pytest.fixture
def publication_store():
    return InMemoryRecordStore("publications")


@pytest.fixture
def graph_store():
    return InMemoryGraphStore()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def profile_cache(fake_redis):
    return ProfileCache(redis_url="redis://unused", ttl=60, client=fake_redis)


@pytest.fixture
def record_service(researcher_store, project_store, publication_store, graph_store, profile_cache):
    return RecordService(researcher_store, project_store, publication_store, graph_store, profile_cache)


@pytest.fixture
def profile_service(researcher_store, project_store, publication_store, graph_store, profile_cache):
    return ProfileService(researcher_store, project_store, publication_store, graph_store, profile_cache)


@pytest.fixture
def graph_service(graph_store, record_service):
    return GraphService(graph_store, record_service)


@pytest.fixture
def registry(
    researcher_store, project_store, publication_store, graph_store, profile_cache,
    record_service, profile_service, graph_service,
):
    """装好替身服务的注册表"""
    registry = ServiceRegistry()
    registry.set("researcher_store", researcher_store)
    registry.set("project_store", project_store)
    registry.set("publication_store", publication_store)
    registry.set("graph_store", graph_store)
    registry.set("profile_cache", profile_cache)
    registry.set("record_service", record_service)
    registry.set("profile_service", profile_service)
    registry.set("graph_service", graph_service)
    return registry


@pytest.fixture(autouse=True)
def _reset_global_registry():
    """每个测试使用新的全局注册表"""
    reset_service_registry()
    yield
    reset_service_registry()
