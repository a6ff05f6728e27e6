"""
服务生命周期管理

集中持有三个外部存储的连接句柄和依赖它们的服务：
- 延迟初始化（首次访问时创建）
- 依赖注入（按顺序创建依赖）
- 统一关闭（逆序释放连接）

HTTP 服务在 lifespan 中调用 shutdown()，CLI 退出时调用 close_all()。

使用示例:
    registry = register_core_services()
    record_service = registry.get("record_service")
    ...
    registry.close_all()
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ServiceDefinition:
    """服务定义"""
    name: str
    factory: Callable[[], Any]
    instance: Any | None = None
    dependencies: list[str] = field(default_factory=list)
    cleanup: Callable[[Any], None] | None = None
    initialized: bool = False


class ServiceRegistry:
    """
    服务注册表

    测试时可通过 set() 直接注入替身实例。
    """

    def __init__(self):
        self._services: dict[str, ServiceDefinition] = {}
        self._init_order: list[str] = []

    def register(
        self,
        name: str,
        factory: Callable[[], T],
        dependencies: list[str] | None = None,
        cleanup: Callable[[T], None] | None = None,
    ) -> "ServiceRegistry":
        """
        注册服务

        Args:
            name: 服务名称（唯一标识）
            factory: 服务工厂函数（无参数，返回服务实例）
            dependencies: 依赖的其他服务名称
            cleanup: 清理函数（接收服务实例），默认调用实例的 close()

        Returns:
            self，支持链式调用
        """
        if name in self._services:
            logger.warning(f"服务 {name} 已注册，将被覆盖")

        self._services[name] = ServiceDefinition(
            name=name,
            factory=factory,
            dependencies=dependencies or [],
            cleanup=cleanup,
        )
        return self

    def get(self, name: str) -> Any:
        """
        获取服务实例

        首次访问时创建实例，会先初始化依赖的服务。

        Raises:
            KeyError: 服务未注册
        """
        if name not in self._services:
            raise KeyError(f"服务未注册: {name}")

        definition = self._services[name]

        if definition.initialized and definition.instance is not None:
            return definition.instance

        for dep_name in definition.dependencies:
            self.get(dep_name)

        try:
            definition.instance = definition.factory()
            definition.initialized = True
            self._init_order.append(name)
            logger.debug(f"服务 {name} 已初始化")
        except Exception as e:
            logger.error(f"服务 {name} 初始化失败: {e}")
            raise

        return definition.instance

    def set(self, name: str, instance: Any) -> None:
        """
        直接设置服务实例（用于测试或外部注入）
        """
        if name not in self._services:
            self._services[name] = ServiceDefinition(
                name=name,
                factory=lambda: instance,
            )

        self._services[name].instance = instance
        self._services[name].initialized = True

        if name not in self._init_order:
            self._init_order.append(name)

    def close_all(self) -> None:
        """按初始化的逆序关闭所有服务（同步）"""
        for name in reversed(self._init_order.copy()):
            definition = self._services.get(name)
            if definition and definition.initialized:
                self._cleanup_service(definition)
                definition.instance = None
                definition.initialized = False
                logger.debug(f"服务 {name} 已关闭")
        self._init_order.clear()

    async def shutdown(self) -> None:
        """
        关闭所有服务（异步入口）

        清理函数都是同步的阻塞调用，放到线程池中执行。
        """
        logger.info("开始关闭所有服务...")
        await asyncio.to_thread(self.close_all)
        logger.info("所有服务已关闭")

    def _cleanup_service(self, definition: ServiceDefinition) -> None:
        """清理单个服务"""
        if definition.instance is None:
            return

        if definition.cleanup:
            try:
                definition.cleanup(definition.instance)
            except Exception as e:
                logger.warning(f"服务 {definition.name} 清理失败: {e}")
            return

        if hasattr(definition.instance, "close"):
            try:
                definition.instance.close()
            except Exception as e:
                logger.warning(f"服务 {definition.name} close() 失败: {e}")

    @property
    def registered_services(self) -> list[str]:
        """获取所有已注册的服务名称"""
        return list(self._services.keys())

    @property
    def initialized_services(self) -> list[str]:
        """获取所有已初始化的服务名称"""
        return self._init_order.copy()

    def __contains__(self, name: str) -> bool:
        return name in self._services


# ==================== 全局注册表 ====================

_registry: ServiceRegistry | None = None


def get_service_registry() -> ServiceRegistry:
    """获取全局服务注册表"""
    global _registry
    if _registry is None:
        _registry = ServiceRegistry()
    return _registry


def reset_service_registry() -> None:
    """重置全局服务注册表（用于测试）"""
    global _registry
    if _registry is not None:
        _registry.close_all()
    _registry = ServiceRegistry()


# ==================== 服务注册辅助函数 ====================

def register_core_services(registry: ServiceRegistry | None = None) -> ServiceRegistry:
    """
    注册核心服务

    使用延迟导入避免循环依赖；已注册的服务不会被覆盖（测试可预先 set 替身）。
    """
    registry = registry or get_service_registry()

    def _register(name, factory, dependencies=None):
        if name not in registry:
            registry.register(name, factory, dependencies=dependencies)

    # ============ Store 层 ============
    def _create_researcher_store():
        from domains.record_hub.core import ResearcherStore
        return ResearcherStore()

    def _create_project_store():
        from domains.record_hub.core import ProjectStore
        return ProjectStore()

    def _create_publication_store():
        from domains.record_hub.core import PublicationStore
        return PublicationStore()

    def _create_graph_store():
        from domains.graph_hub.core import GraphStore
        return GraphStore()

    def _create_profile_cache():
        from domains.profile_hub.core import ProfileCache
        return ProfileCache()

    _register("researcher_store", _create_researcher_store)
    _register("project_store", _create_project_store)
    _register("publication_store", _create_publication_store)
    _register("graph_store", _create_graph_store)
    _register("profile_cache", _create_profile_cache)

    store_names = [
        "researcher_store", "project_store", "publication_store",
        "graph_store", "profile_cache",
    ]

    # ============ Service 层 ============
    def _create_record_service():
        from domains.record_hub.services import RecordService
        return RecordService(*(registry.get(n) for n in store_names))

    def _create_profile_service():
        from domains.profile_hub.services import ProfileService
        return ProfileService(*(registry.get(n) for n in store_names))

    def _create_graph_service():
        from domains.graph_hub.services import GraphService
        return GraphService(registry.get("graph_store"), registry.get("record_service"))

    _register("record_service", _create_record_service, dependencies=store_names)
    _register("profile_service", _create_profile_service, dependencies=store_names)
    _register("graph_service", _create_graph_service, dependencies=["graph_store", "record_service"])

    logger.info(f"已注册 {len(registry.registered_services)} 个服务")
    return registry


# ==================== 导出 ====================

__all__ = [
    "ServiceRegistry",
    "ServiceDefinition",
    "get_service_registry",
    "reset_service_registry",
    "register_core_services",
]
