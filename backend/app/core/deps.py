"""Dependency injection for FastAPI routes.

使用 ServiceRegistry 统一管理服务生命周期，测试时可通过 registry.set() 替换服务。
"""

from typing import TYPE_CHECKING

from domains.core import get_service_registry, register_core_services

if TYPE_CHECKING:
    from domains.graph_hub.services import GraphService
    from domains.profile_hub.services import ProfileService
    from domains.record_hub.services import RecordService


# ============================================================================
# 初始化服务注册表
# ============================================================================

def get_registry():
    """获取服务注册表，确保核心服务已注册（延迟初始化）"""
    registry = get_service_registry()
    if "record_service" not in registry:
        register_core_services(registry)
    return registry


# ============================================================================
# Service getters - 使用 ServiceRegistry
# ============================================================================

def get_record_service() -> "RecordService":
    """Get RecordService singleton instance."""
    registry = get_registry()
    return registry.get("record_service")


def get_profile_service() -> "ProfileService":
    """Get ProfileService singleton instance."""
    registry = get_registry()
    return registry.get("profile_service")


def get_graph_service() -> "GraphService":
    """Get GraphService singleton instance."""
    registry = get_registry()
    return registry.get("graph_service")
