"""
Unit tests for collaboration listing and creation.
"""

from unittest.mock import MagicMock

import pytest

from domains.core import ExternalServiceError, InvalidRelationError, ValidationError
from domains.graph_hub.core import Collaboration, GraphStore, RelationType
from domains.graph_hub.services import GraphService


@pytest.fixture
def store():
    store = MagicMock(spec=GraphStore)
    store.merge_collaboration.return_value = True
    return store


@pytest.fixture
def service(store):
    return GraphService(store)


class TestListCollaborations:

    def test_returns_triples(self, service, store):
        store.list_collaborations.return_value = [Collaboration("A", "WORKS_ON", "X")]

        assert service.list_collaborations() == [
            {"researcher": "A", "relation": "WORKS_ON", "target": "X"}
        ]
        store.list_collaborations.assert_called_once_with(limit=50)

    def test_never_more_than_fifty(self, graph_store):
        for i in range(60):
            graph_store.merge_collaboration(f"R{i}", RelationType.TEAMMATE, "Z")

        assert len(GraphService(graph_store).list_collaborations()) == 50


class TestCreateCollaboration:

    def test_success(self, service, store):
        data = service.create_collaboration("A", "B", "co-author")

        assert data == {"researcher": "A", "relation": "CO_AUTHOR", "target": "B"}
        store.merge_collaboration.assert_called_once_with("A", RelationType.CO_AUTHOR, "B")

    def test_invalid_type(self, service, store):
        with pytest.raises(InvalidRelationError):
            service.create_collaboration("A", "B", "rival")
        store.merge_collaboration.assert_not_called()

    def test_missing_name(self, service, store):
        with pytest.raises(ValidationError):
            service.create_collaboration("A", "", "teammate")
        store.merge_collaboration.assert_not_called()

    def test_write_failure(self, service, store):
        store.merge_collaboration.return_value = False

        with pytest.raises(ExternalServiceError) as exc_info:
            service.create_collaboration("A", "B", "supervisor")

        assert exc_info.value.http_status_code == 502

    def test_invalidates_source_profile(self, graph_service, record_service, fake_redis):
        a = record_service.create_researcher(name="A")
        b = record_service.create_researcher(name="B")
        fake_redis.set(f"profile:{a.id}", "{}")
        fake_redis.set(f"profile:{b.id}", "{}")

        graph_service.create_collaboration("A", "B", "co-author")

        assert f"profile:{a.id}" not in fake_redis.data
        assert f"profile:{b.id}" in fake_redis.data

    def test_failed_write_keeps_cache(self, graph_service, graph_store, record_service, fake_redis):
        a = record_service.create_researcher(name="A")
        fake_redis.set(f"profile:{a.id}", "{}")
        graph_store.fail_writes = True

        with pytest.raises(ExternalServiceError):
            graph_service.create_collaboration("A", "B", "co-author")

        assert f"profile:{a.id}" in fake_redis.data
