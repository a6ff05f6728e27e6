"""
异步工具函数

提供在异步上下文中安全执行同步代码的工具。
"""

import asyncio
from typing import Callable, TypeVar

T = TypeVar("T")


async def run_sync(func: Callable[..., T], *args, **kwargs) -> T:
    """
    在线程池中执行同步函数，避免阻塞 event loop。

    psycopg2、neo4j 同步驱动和 redis-py 都是阻塞调用，路由中统一经此包装。

    Example:
        profile = await run_sync(service.get_profile, researcher_id)
    """
    return await asyncio.to_thread(func, *args, **kwargs)
