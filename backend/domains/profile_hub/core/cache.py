"""
研究员画像缓存 - Redis

键格式: profile:<researcher_id>
值: 画像 JSON
过期: PROFILE_CACHE_TTL 秒（默认 60）

缓存只是加速层，任何 Redis 故障都不影响主流程：
读失败按未命中处理，写 / 删失败只记录日志。
"""

import json
import logging
from typing import Any, Iterable

import redis

from domains.core.settings import get_store_settings

logger = logging.getLogger(__name__)

PROFILE_KEY_PREFIX = "profile:"


def profile_cache_key(researcher_id: str) -> str:
    """画像缓存键"""
    return f"{PROFILE_KEY_PREFIX}{researcher_id}"


class ProfileCache:
    """
    研究员画像缓存

    使用示例:
        cache = ProfileCache()
        cache.set("6f1c...", {"name": "A", ...})
        profile = cache.get("6f1c...")
        cache.invalidate("6f1c...")
    """

    def __init__(
        self,
        redis_url: str | None = None,
        ttl: int | None = None,
        client: redis.Redis | None = None,
    ):
        """
        初始化画像缓存

        Args:
            redis_url: Redis 连接 URL，默认从配置读取
            ttl: 过期时间（秒），默认从配置读取；0 表示不写缓存
            client: 已创建的 Redis 客户端（测试时注入）
        """
        settings = get_store_settings()
        self.redis_url = redis_url or settings.REDIS_URL
        self.ttl = ttl if ttl is not None else settings.PROFILE_CACHE_TTL
        self._client = client

    @property
    def client(self) -> redis.Redis:
        """获取 Redis 客户端（懒加载）"""
        if self._client is None:
            self._client = redis.Redis.from_url(self.redis_url, decode_responses=True)
            logger.info(f"画像缓存已连接: {self.redis_url.split('@')[-1]}")
        return self._client

    def get(self, researcher_id: str) -> dict[str, Any] | None:
        """
        读取画像

        Returns:
            画像字典，未命中或读取失败返回 None
        """
        key = profile_cache_key(researcher_id)
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            logger.warning(f"读取画像缓存失败，按未命中处理: {key}: {e}")
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"画像缓存内容无法解析，按未命中处理: {key}: {e}")
            return None

    def set(self, researcher_id: str, profile: dict[str, Any]) -> bool:
        """
        写入画像（带过期时间）

        Returns:
            是否写入成功
        """
        key = profile_cache_key(researcher_id)
        if self.ttl <= 0:
            return False
        try:
            self.client.set(
                key,
                json.dumps(profile, ensure_ascii=False, default=str),
                ex=self.ttl,
            )
            return True
        except redis.RedisError as e:
            logger.warning(f"写入画像缓存失败: {key}: {e}")
            return False

    def invalidate(self, researcher_id: str) -> bool:
        """
        删除画像缓存

        Returns:
            删除命令是否执行成功（键不存在也算成功）
        """
        key = profile_cache_key(researcher_id)
        try:
            self.client.delete(key)
            logger.debug(f"画像缓存已失效: {key}")
            return True
        except redis.RedisError as e:
            logger.warning(f"画像缓存失效失败，将在 {self.ttl}s 后自然过期: {key}: {e}")
            return False

    def invalidate_many(self, researcher_ids: Iterable[str]) -> int:
        """
        逐个失效多个研究员的画像

        Returns:
            成功失效的数量
        """
        seen: set[str] = set()
        invalidated = 0
        for researcher_id in researcher_ids:
            if not researcher_id or researcher_id in seen:
                continue
            seen.add(researcher_id)
            if self.invalidate(researcher_id):
                invalidated += 1
        return invalidated

    def health_check(self) -> bool:
        """健康检查"""
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            logger.error(f"Redis 健康检查失败: {e}")
            return False

    def close(self) -> None:
        """关闭 Redis 连接"""
        if self._client is not None:
            try:
                self._client.close()
                logger.info("Redis 连接已关闭")
            except redis.RedisError as e:
                logger.warning(f"关闭 Redis 连接时出错: {e}")
            finally:
                self._client = None
