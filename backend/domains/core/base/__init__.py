"""存储层基础设施"""

from .store import BaseStore, ThreadSafeConnectionMixin, get_database_url

__all__ = ["BaseStore", "ThreadSafeConnectionMixin", "get_database_url"]
