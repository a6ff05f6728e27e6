"""record_hub 服务层"""

from .record_service import RecordService

__all__ = ["RecordService"]
