"""
Core - 通用应用基础设施

提供与具体存储无关的基础设施组件:
- 统一异常体系
- 服务生命周期管理
- 存储连接配置
"""

from .exceptions import (
    ApplicationError,
    ErrorCategory,
    ExternalServiceError,
    InvalidRelationError,
    NotFoundError,
    ResearcherNotFoundError,
    ValidationError,
)
from .lifecycle import (
    ServiceDefinition,
    ServiceRegistry,
    get_service_registry,
    register_core_services,
    reset_service_registry,
)
from .settings import StoreSettings, get_store_settings

__all__ = [
    # Exceptions
    "ErrorCategory",
    "ApplicationError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "ResearcherNotFoundError",
    "InvalidRelationError",
    # Lifecycle
    "ServiceRegistry",
    "ServiceDefinition",
    "get_service_registry",
    "reset_service_registry",
    "register_core_services",
    # Settings
    "StoreSettings",
    "get_store_settings",
]
