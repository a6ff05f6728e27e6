"""profile_hub 服务层"""

from .profile_service import ProfileService

__all__ = ["ProfileService"]
