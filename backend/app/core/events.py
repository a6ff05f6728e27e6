"""Application lifecycle event handlers.

使用 ServiceRegistry 统一管理三个存储连接的生命周期。
"""

from typing import Callable

import psycopg2

from app.core.async_utils import run_sync
from domains.core import get_service_registry, register_core_services
from domains.core.logging import get_logger
from domains.record_hub.core import ensure_record_schema
from domains.record_hub.tasks import check_stores

logger = get_logger(__name__)


def _prepare_stores() -> dict[str, bool]:
    """注册服务、建表并检查各存储连接（同步）"""
    registry = register_core_services()
    service = registry.get("record_service")

    try:
        created = ensure_record_schema(
            service.researcher_store, service.project_store, service.publication_store
        )
        if created:
            logger.info("record_tables_created", component="record_store", tables=created)
    except psycopg2.Error as e:
        logger.warning("record_schema_skipped", component="record_store", error=str(e))

    return check_stores(registry)


def create_start_handler() -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info("api_starting", component="api")

        # 存储不可用时继续启动，请求时返回 500
        try:
            status = await run_sync(_prepare_stores)
            for store, ok in status.items():
                if ok:
                    logger.info("store_connected", component=store)
                else:
                    logger.warning("store_unavailable", component=store)

            logger.info(
                "services_initialized",
                component="registry",
                services=get_service_registry().initialized_services,
            )
        except Exception as e:
            logger.error("service_initialization_error", component="registry", error=str(e))

        logger.info("api_started", component="api", status="success")

    return start_app


def create_stop_handler() -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("api_stopping", component="api")

        try:
            registry = get_service_registry()
            await registry.shutdown()
        except Exception as e:
            logger.warning("service_registry_stop_error", component="registry", error=str(e))

        logger.info("api_stopped", component="api", status="success")

    return stop_app
