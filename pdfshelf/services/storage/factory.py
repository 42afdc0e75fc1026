"""
Cloud Gateway Factory for creating synchronized store gateways.
Implements Factory Pattern for plug-and-play store support.
"""
import shlex
from pathlib import Path
from typing import Optional

from .base import CloudFileGateway
from .s3_storage import S3MirrorGateway
from .synced_folder_storage import SyncedFolderGateway
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class CloudGatewayFactory:
    """
    Factory for creating store gateways.
    Supports a mounted sync drive, S3, or no store at all.
    """

    @staticmethod
    def create(storage_type: Optional[str] = None, **kwargs) -> Optional[CloudFileGateway]:
        """
        Create a gateway instance.

        Args:
            storage_type: 'synced_folder', 's3', 'none', or None for configuration
            **kwargs: Overrides for the gateway constructor

        Returns:
            CloudFileGateway instance, or None when no store is configured

        Examples:
            gateway = CloudGatewayFactory.create('synced_folder', sync_root=Path('~/iCloud'))
            gateway = CloudGatewayFactory.create('s3', bucket_name='my-library')
        """
        from ...core import config

        if storage_type is None:
            storage_type = config.STORAGE_TYPE
        storage_type = storage_type.lower()

        container_identifier = kwargs.get("container_identifier", config.CONTAINER_IDENTIFIER)
        subpath = kwargs.get("subpath", config.STORE_SUBPATH)

        if storage_type == "synced_folder":
            return SyncedFolderGateway(
                sync_root=Path(kwargs.get("sync_root", config.SYNC_ROOT)),
                container_identifier=container_identifier,
                subpath=subpath,
                download_command=kwargs.get("download_command", shlex.split(config.DOWNLOAD_COMMAND))
            )
        elif storage_type == "s3":
            return S3MirrorGateway(
                bucket_name=kwargs.get("bucket_name", config.S3_BUCKET_NAME),
                mirror_dir=Path(kwargs.get("mirror_dir", config.S3_MIRROR_DIR)),
                container_identifier=container_identifier,
                subpath=subpath,
                aws_access_key_id=kwargs.get("aws_access_key_id", config.AWS_ACCESS_KEY_ID),
                aws_secret_access_key=kwargs.get("aws_secret_access_key", config.AWS_SECRET_ACCESS_KEY),
                region_name=kwargs.get("region_name", config.AWS_REGION),
                endpoint_url=kwargs.get("endpoint_url", config.S3_ENDPOINT_URL),
                s3_client=kwargs.get("s3_client")
            )
        elif storage_type == "none":
            logger.info("No synchronized store configured, documents stay local")
            return None
        else:
            raise ValueError(
                f"Unsupported storage type: {storage_type}. "
                f"Supported types: 'synced_folder', 's3', 'none'"
            )
