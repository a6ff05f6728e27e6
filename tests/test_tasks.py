"""
Tests for seeding and connection checks.
"""

from domains.graph_hub.core import RelationType
from domains.record_hub.tasks import SAMPLE_PROJECTS, SAMPLE_RESEARCHERS, run_check, run_seed


class TestSeed:

    def test_loads_sample_data_into_every_store(
        self, registry, researcher_store, project_store, graph_store
    ):
        graph_store.merge_collaboration("Old", RelationType.TEAMMATE, "Data")

        stats = run_seed(registry)

        assert stats["cleared"] == 2
        assert stats["researchers"] == len(SAMPLE_RESEARCHERS) == 3
        assert stats["projects"] == len(SAMPLE_PROJECTS) == 2
        assert stats["collaborations"] == 1
        assert len(researcher_store.records) == 3
        assert len(project_store.records) == 2
        assert graph_store.edge_types("Ayat Sider") == {"WORKS_ON", "COLLABORATES_WITH"}
        assert graph_store.edge_types("Omar Khalil") == {"WORKS_ON"}
        assert graph_store.edge_types("Old") == set()


class TestCheck:

    def test_all_healthy(self, registry):
        assert run_check(registry) == {"postgres": True, "neo4j": True, "redis": True}

    def test_reports_failure(self, registry, fake_redis):
        fake_redis.ping = lambda: False

        assert run_check(registry)["redis"] is False
