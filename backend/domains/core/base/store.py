"""
存储层基类

提供 PostgreSQL 存储层的通用功能：
- 连接管理（每线程独立连接）
- 游标上下文管理器
- 按 ID / ID 列表查询（引用字段的填充）
- 排序字段白名单校验
"""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Generic, List, Optional, Sequence, Set, TypeVar

import psycopg2
from psycopg2.extras import RealDictCursor

from domains.core.settings import get_store_settings

logger = logging.getLogger(__name__)

T = TypeVar('T')


def get_database_url() -> str:
    """获取数据库连接 URL"""
    return get_store_settings().DATABASE_URL


class ThreadSafeConnectionMixin:
    """
    线程安全的数据库连接管理 Mixin

    使用 threading.local() 让每个线程拥有独立的数据库连接，
    避免 asyncio.to_thread() 多线程环境下的连接竞争。
    所有打开过的连接都登记在 _connections 中，close() 时统一关闭。

    使用方法：
        class MyStore(ThreadSafeConnectionMixin):
            def __init__(self, database_url=None):
                self._init_connection(database_url)
    """

    def _init_connection(self, database_url: Optional[str] = None):
        """初始化连接管理"""
        self.database_url = database_url or get_database_url()
        self._local = threading.local()
        self._connections: List[psycopg2.extensions.connection] = []
        self._connections_lock = threading.Lock()

    def _get_connection(self) -> psycopg2.extensions.connection:
        """获取当前线程的数据库连接"""
        if not hasattr(self._local, 'conn') or self._local.conn is None or self._local.conn.closed:
            conn = psycopg2.connect(self.database_url)
            conn.autocommit = False
            with self._connections_lock:
                self._connections.append(conn)
            self._local.conn = conn
        return self._local.conn

    @contextmanager
    def _cursor(self):
        """获取游标的上下文管理器"""
        conn = self._get_connection()
        cursor = conn.cursor(cursor_factory=RealDictCursor)
        try:
            yield cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()

    def close(self):
        """关闭所有线程打开的数据库连接"""
        with self._connections_lock:
            connections, self._connections = self._connections, []
        for conn in connections:
            try:
                conn.close()
            except psycopg2.Error as e:
                logger.warning(f"关闭数据库连接失败: {e}")
        self._local = threading.local()


class BaseStore(ThreadSafeConnectionMixin, ABC, Generic[T]):
    """
    存储层基类

    子类需要实现：
    - table_name: 表名
    - allowed_columns: 允许的列名白名单
    - _row_to_entity: 行数据转实体的方法
    - _create_table_sql: 建表语句

    使用示例:
        class PublicationStore(BaseStore[Publication]):
            table_name = "publications"
            allowed_columns = {"id", "title", "year", ...}

            def _row_to_entity(self, row: Dict) -> Publication:
                return Publication(**row)
    """

    # 子类必须定义
    table_name: str = ""
    allowed_columns: Set[str] = set()

    def __init__(self, database_url: Optional[str] = None):
        """
        初始化存储层

        Args:
            database_url: PostgreSQL 连接 URL，默认从配置读取
        """
        self._init_connection(database_url)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ==================== 抽象方法 ====================

    @abstractmethod
    def _row_to_entity(self, row: Dict[str, Any]) -> T:
        """
        将数据库行转换为实体对象

        Args:
            row: 数据库行（字典格式）

        Returns:
            实体对象
        """
        pass

    @abstractmethod
    def _create_table_sql(self) -> str:
        """返回建表语句"""
        pass

    # ==================== 表结构 ====================

    def ensure_schema(self) -> bool:
        """
        确保表存在

        先查询 information_schema，避免并发 CREATE TABLE IF NOT EXISTS 的竞态。

        Returns:
            本次是否新建了表
        """
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT EXISTS (
                    SELECT FROM information_schema.tables
                    WHERE table_schema = 'public'
                    AND table_name = %s
                )
            """, (self.table_name,))
            if cursor.fetchone()['exists']:
                logger.debug(f"表 {self.table_name} 已存在，跳过创建")
                return False

            cursor.execute(self._create_table_sql())
            logger.info(f"已创建表: {self.table_name}")
            return True

    # ==================== 通用查询 ====================

    def get(self, record_id: str) -> Optional[T]:
        """
        通过 ID 获取单个实体

        Args:
            record_id: 记录 ID

        Returns:
            实体对象或 None
        """
        with self._cursor() as cursor:
            cursor.execute(
                f'SELECT * FROM {self.table_name} WHERE id = %s',
                (record_id,)
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_entity(dict(row))
        return None

    def get_many(self, record_ids: Sequence[str]) -> List[T]:
        """
        按 ID 列表批量获取实体（引用字段填充）

        结果顺序与 record_ids 一致，不存在的 ID 被跳过。

        Args:
            record_ids: 记录 ID 列表

        Returns:
            实体列表
        """
        ids = [i for i in record_ids if i]
        if not ids:
            return []

        with self._cursor() as cursor:
            cursor.execute(
                f'SELECT * FROM {self.table_name} WHERE id = ANY(%s)',
                (ids,)
            )
            by_id = {row['id']: self._row_to_entity(dict(row)) for row in cursor.fetchall()}

        return [by_id[i] for i in ids if i in by_id]

    def get_all(
        self,
        order_by: Optional[str] = "created_at ASC",
        limit: Optional[int] = None,
    ) -> List[T]:
        """
        获取所有实体

        Args:
            order_by: 排序字段
            limit: 限制数量

        Returns:
            实体列表
        """
        sql = f'SELECT * FROM {self.table_name}'

        if order_by:
            safe_order = self._validate_order_by(order_by)
            if safe_order:
                sql += f' ORDER BY {safe_order}'

        params = []
        if limit is not None:
            sql += ' LIMIT %s'
            params.append(limit)

        with self._cursor() as cursor:
            cursor.execute(sql, params)
            return [self._row_to_entity(dict(row)) for row in cursor.fetchall()]

    def health_check(self) -> bool:
        """
        健康检查

        Returns:
            True 表示连接正常
        """
        try:
            with self._cursor() as cursor:
                cursor.execute('SELECT 1 AS n')
                return cursor.fetchone()['n'] == 1
        except psycopg2.Error as e:
            logger.error(f"PostgreSQL 健康检查失败: {e}")
            return False

    # ==================== 安全验证 ====================

    def _validate_order_by(self, order_by: str) -> Optional[str]:
        """
        验证并返回安全的 ORDER BY 子句

        Args:
            order_by: 排序参数，格式 "column_name [ASC|DESC]"

        Returns:
            安全的排序子句，无效时返回 None
        """
        order_parts = order_by.strip().split()
        if not order_parts:
            return None

        column = order_parts[0].lower()
        direction = order_parts[1].upper() if len(order_parts) > 1 else 'ASC'

        if column not in self.allowed_columns:
            logger.warning(f"Invalid order column: {column}")
            return None

        if direction not in ('ASC', 'DESC'):
            logger.warning(f"Invalid order direction: {direction}")
            return None

        return f'{column} {direction}'
