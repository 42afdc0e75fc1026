"""
Synchronized store abstraction layer.
Supports multiple store backends through a common interface.
"""
from .base import CloudFileGateway, StoreDiagnosis, StoreStatus
from .factory import CloudGatewayFactory
from .s3_storage import S3MirrorGateway
from .synced_folder_storage import SyncedFolderGateway

__all__ = [
    "CloudFileGateway",
    "StoreDiagnosis",
    "StoreStatus",
    "CloudGatewayFactory",
    "S3MirrorGateway",
    "SyncedFolderGateway"
]
