"""核心层：画像缓存"""

from .cache import PROFILE_KEY_PREFIX, ProfileCache, profile_cache_key

__all__ = ["ProfileCache", "profile_cache_key", "PROFILE_KEY_PREFIX"]
