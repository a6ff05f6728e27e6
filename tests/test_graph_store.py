"""
Unit tests for the Neo4j graph store (driver mocked).
"""

from unittest.mock import MagicMock

import pytest
from neo4j.exceptions import ServiceUnavailable

from domains.graph_hub.core import GraphEdge, GraphNode, GraphStore, RelationType
from domains.graph_hub.core.store import MAX_COLLABORATIONS


@pytest.fixture
def driver():
    return MagicMock()


@pytest.fixture
def session(driver):
    return driver.session.return_value


@pytest.fixture
def store(driver):
    return GraphStore(uri="bolt://test:7687", user="neo4j", password="pw", database="collab", driver=driver)


def _cypher(session) -> str:
    return session.run.call_args[0][0]


class TestMergeNode:
    """Test node upserts."""

    def test_researcher_merged_by_name_and_department(self, store, driver, session):
        session.run.return_value.single.return_value = {"merged": 1}

        assert store.merge_node(GraphNode.researcher("A", "CS")) is True

        driver.session.assert_called_with(database="collab")
        assert "MERGE (n:Researcher {name: $name, department: $department})" in _cypher(session)
        assert session.run.call_args[1] == {"name": "A", "department": "CS"}

    def test_null_key_replaced(self, store, session):
        session.run.return_value.single.return_value = {"merged": 1}

        store.merge_node(GraphNode.publication("P1", None))

        assert session.run.call_args[1] == {"title": "P1", "year": ""}

    def test_write_failure_returns_false(self, store, session):
        session.run.side_effect = ServiceUnavailable("down")

        assert store.merge_node(GraphNode.project("X")) is False


class TestMergeEdge:
    """Test typed edge upserts."""

    def test_typed_edge_cypher(self, store, session):
        session.run.return_value.single.return_value = {"linked": 1}
        edge = GraphEdge("A", RelationType.CO_AUTHORSHIP, GraphNode.project("X"))

        assert store.merge_edge(edge) is True

        cypher = _cypher(session)
        assert "MATCH (r:Researcher {name: $source_name})" in cypher
        assert "MERGE (t:Project {title: $t_title})" in cypher
        assert "MERGE (r)-[rel:CO_AUTHORSHIP]->(t)" in cypher
        assert session.run.call_args[1] == {"source_name": "A", "t_title": "X"}

    def test_missing_source_researcher(self, store, session):
        session.run.return_value.single.return_value = {"linked": 0}
        edge = GraphEdge("Nobody", RelationType.WORKS_ON, GraphNode.project("X"))

        assert store.merge_edge(edge) is False

    def test_raw_string_relation_rejected(self, store, session):
        edge = GraphEdge("A", "KNOWS", GraphNode.project("X"))

        with pytest.raises(TypeError):
            store.merge_edge(edge)
        session.run.assert_not_called()

    def test_collaboration_merges_both_researchers(self, store, session):
        session.run.return_value.single.return_value = {"linked": 1}

        assert store.merge_collaboration("A", RelationType.SUPERVISOR, "B") is True

        cypher = _cypher(session)
        assert "MERGE (r1:Researcher {name: $source_name})" in cypher
        assert "MERGE (r2:Researcher {name: $target_name})" in cypher
        assert "MERGE (r1)-[rel:SUPERVISOR]->(r2)" in cypher


class TestQueries:
    """Test read queries."""

    def test_list_collaborations_capped(self, store, session):
        session.run.return_value = [
            {"researcher": f"R{i}", "relation": "WORKS_ON", "target": "X"} for i in range(80)
        ]

        result = store.list_collaborations(limit=500)

        assert len(result) == MAX_COLLABORATIONS == 50
        assert session.run.call_args[1] == {"limit": 50}
        assert "LIMIT $limit" in _cypher(session)

    def test_get_outgoing(self, store, session):
        session.run.return_value = [
            {"researcher": "A", "relation": "AUTHOR_OF", "target": "P1"},
        ]

        result = store.get_outgoing("A")

        assert [c.to_dict() for c in result] == [
            {"researcher": "A", "relation": "AUTHOR_OF", "target": "P1"}
        ]
        assert session.run.call_args[1] == {"name": "A"}

    def test_read_failure_propagates(self, store, session):
        session.run.side_effect = ServiceUnavailable("down")

        with pytest.raises(ServiceUnavailable):
            store.get_outgoing("A")

    def test_health_check_failure(self, store, session):
        session.run.side_effect = ServiceUnavailable("down")

        assert store.health_check() is False

    def test_close_releases_driver(self, store, driver):
        store.close()

        driver.close.assert_called_once()
