"""Services for CQC synchronization and supporting integrations."""

from zeyra.services.cqc_client import CQCClient
from zeyra.services.cqc_sync import CQCSyncService
from zeyra.services.throttle import RequestThrottle
from zeyra.services.transform import transform_location
from zeyra.services.unit_repository import MaternityUnitRepository
from zeyra.services.watermark import SyncWatermarkStore

__all__ = [
    "CQCClient",
    "CQCSyncService",
    "MaternityUnitRepository",
    "RequestThrottle",
    "SyncWatermarkStore",
    "transform_location",
]
