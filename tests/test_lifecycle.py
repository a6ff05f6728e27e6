"""
Unit tests for the service registry.
"""

from unittest.mock import MagicMock

import pytest

from domains.core import ServiceRegistry, register_core_services


class TestServiceRegistry:

    def test_lazy_init_with_dependencies(self):
        registry = ServiceRegistry()
        calls = []
        registry.register("a", lambda: calls.append("a") or "A")
        registry.register("b", lambda: calls.append("b") or "B", dependencies=["a"])

        assert calls == []
        assert registry.get("b") == "B"
        assert calls == ["a", "b"]
        assert registry.get("b") == "B"
        assert calls == ["a", "b"]

    def test_unknown_service(self):
        with pytest.raises(KeyError):
            ServiceRegistry().get("missing")

    def test_close_all_reverse_order(self):
        registry = ServiceRegistry()
        closed = []
        first, second = MagicMock(), MagicMock()
        first.close.side_effect = lambda: closed.append("first")
        second.close.side_effect = lambda: closed.append("second")
        registry.register("first", lambda: first)
        registry.register("second", lambda: second, dependencies=["first"])
        registry.get("second")

        registry.close_all()

        assert closed == ["second", "first"]
        assert registry.initialized_services == []

    def test_cleanup_error_does_not_stop_shutdown(self):
        registry = ServiceRegistry()
        broken, healthy = MagicMock(), MagicMock()
        broken.close.side_effect = RuntimeError("boom")
        registry.set("healthy", healthy)
        registry.set("broken", broken)

        registry.close_all()

        healthy.close.assert_called_once()


class TestRegisterCoreServices:

    def test_registers_all_services(self):
        registry = register_core_services(ServiceRegistry())

        assert set(registry.registered_services) == {
            "researcher_store", "project_store", "publication_store",
            "graph_store", "profile_cache",
            "record_service", "profile_service", "graph_service",
        }
        assert registry.initialized_services == []

    def test_keeps_injected_instances(self, registry, record_service):
        register_core_services(registry)

        assert registry.get("record_service") is record_service

    def test_services_share_store_handles(self, registry):
        fresh = ServiceRegistry()
        for name in ("researcher_store", "project_store", "publication_store", "graph_store", "profile_cache"):
            fresh.set(name, registry.get(name))
        register_core_services(fresh)

        record_service = fresh.get("record_service")
        profile_service = fresh.get("profile_service")

        assert record_service.graph_store is profile_service.graph_store
        assert record_service.profile_cache is profile_service.cache
