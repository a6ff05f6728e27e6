"""
存储连接检查

依次检查 PostgreSQL、Neo4j、Redis 是否可用，
HTTP 服务的 /health 和 CLI 的 check 子命令共用。
"""

import logging
from typing import Dict, Optional

from domains.core.lifecycle import ServiceRegistry, register_core_services

logger = logging.getLogger(__name__)

# 存储名称 -> 注册表中的服务名
STORE_SERVICES = {
    "postgres": "researcher_store",
    "neo4j": "graph_store",
    "redis": "profile_cache",
}


def check_stores(registry: ServiceRegistry) -> Dict[str, bool]:
    """
    检查三个存储的连接状态

    各存储的 health_check() 自身不抛异常，连接失败返回 False。

    Returns:
        {"postgres": bool, "neo4j": bool, "redis": bool}
    """
    return {
        name: bool(registry.get(service).health_check())
        for name, service in STORE_SERVICES.items()
    }


def run_check(registry: Optional[ServiceRegistry] = None) -> Dict[str, bool]:
    """运行连接检查并记录结果"""
    registry = register_core_services(registry)
    status = check_stores(registry)

    for name, ok in status.items():
        if ok:
            logger.info(f"{name} 连接正常")
        else:
            logger.error(f"{name} 连接失败")
    return status
