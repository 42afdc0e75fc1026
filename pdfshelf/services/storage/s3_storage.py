"""
AWS S3 gateway implementing CloudFileGateway.
Uploads files to an S3 bucket and keeps a local mirror for reading.
"""
import asyncio
import shutil
from pathlib import Path
from typing import Optional, Union

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .base import CloudFileGateway, StoreDiagnosis, StoreStatus
from ...core.logging_config import get_logger
from ...domain.entities import Locator
from ...domain.exceptions import (
    CloudStorageError,
    ContainerNotFound,
    CopyFailed,
    DownloadFailed,
    StoreUnavailable,
)

logger = get_logger(__name__)

MISSING_CODES = ("404", "NoSuchKey", "NoSuchBucket", "NotFound")


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3MirrorGateway(CloudFileGateway):
    """
    Store backed by an S3 bucket.

    Objects live under "<container>/<subpath>/<name>". The mirror directory
    holds the copies available on this device; a missing mirror copy is
    downloaded in the background by ensure_local.
    """

    def __init__(
        self,
        bucket_name: Optional[str],
        mirror_dir: Union[str, Path],
        container_identifier: str,
        subpath: str = "Documents/PDFs",
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        region_name: str = "us-east-1",
        endpoint_url: Optional[str] = None,  # For S3-compatible services (MinIO, etc.)
        s3_client=None
    ):
        """
        Initialize S3 gateway.

        Args:
            bucket_name: S3 bucket name (None means not configured)
            mirror_dir: Local directory for mirrored copies
            container_identifier: Fixed namespace used as key prefix
            subpath: Conventional subpath inside the container
            aws_access_key_id: AWS access key (or use IAM role)
            aws_secret_access_key: AWS secret key (or use IAM role)
            region_name: AWS region
            endpoint_url: Optional custom endpoint
            s3_client: Preconfigured boto3 client
        """
        super().__init__(container_identifier, subpath)
        self.bucket_name = bucket_name
        self.mirror_dir = Path(mirror_dir)
        self.key_prefix = f"{container_identifier}/{self.subpath}".strip("/")

        if s3_client is None:
            config = Config(
                signature_version='s3v4',
                retries={'max_attempts': 3}
            )
            s3_client = boto3.client(
                's3',
                aws_access_key_id=aws_access_key_id,
                aws_secret_access_key=aws_secret_access_key,
                region_name=region_name,
                endpoint_url=endpoint_url,
                config=config
            )
        self.s3_client = s3_client

    @property
    def store_directory(self) -> Path:
        return self.mirror_dir / self.container_identifier / self.subpath

    def _key(self, name: str) -> str:
        return f"{self.key_prefix}/{name}"

    def _head_bucket(self):
        self.s3_client.head_bucket(Bucket=self.bucket_name)

    def _object_exists(self, name: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=self._key(name))
            return True
        except ClientError as e:
            if _error_code(e) in MISSING_CODES:
                return False
            raise

    async def is_available(self) -> bool:
        if not self.bucket_name:
            return False
        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, self._head_bucket)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.debug(f"S3 bucket {self.bucket_name} not reachable: {e}")
            return False

    async def resolve_directory(self) -> Path:
        if not self.bucket_name:
            raise StoreUnavailable("S3 bucket not configured")

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, self._head_bucket)
        except ClientError as e:
            if _error_code(e) in MISSING_CODES:
                raise ContainerNotFound(f"S3 bucket '{self.bucket_name}' does not exist") from e
            raise StoreUnavailable(f"Error accessing S3 bucket: {e}") from e
        except BotoCoreError as e:
            raise StoreUnavailable(f"Error accessing S3 bucket: {e}") from e

        self.store_directory.mkdir(parents=True, exist_ok=True)
        return self.store_directory

    async def copy_in(self, source_path: Union[str, Path]) -> Locator:
        source = Path(source_path)
        try:
            directory = await self.resolve_directory()
        except CloudStorageError as e:
            raise CopyFailed(e) from e

        def _upload() -> str:
            name = self.unique_name(directory, source.name, taken=self._object_exists)
            destination = directory / name
            shutil.copy2(source, destination)
            try:
                self.s3_client.upload_file(
                    str(destination),
                    self.bucket_name,
                    self._key(name),
                    ExtraArgs={'ContentType': 'application/pdf'}
                )
            except Exception:
                destination.unlink(missing_ok=True)
                raise
            return name

        loop = asyncio.get_event_loop()
        try:
            name = await loop.run_in_executor(None, _upload)
        except (OSError, ClientError, BotoCoreError) as e:
            raise CopyFailed(e) from e

        logger.debug(f"Uploaded {source.name} to s3://{self.bucket_name}/{self._key(name)}")
        return Locator.remote(name)

    async def remove(self, locator: Locator) -> None:
        if not locator.is_remote or not self.belongs_to_store(locator):
            return
        path = self.resolve_path(locator)

        def _delete():
            # delete_object succeeds for keys that are already gone
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=self._key(locator.path))
            path.unlink(missing_ok=True)

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, _delete)
        except (OSError, ClientError, BotoCoreError) as e:
            logger.warning(f"Could not remove {locator.path} from store: {e}")

    async def ensure_local(self, locator: Locator) -> None:
        path = self.resolve_path(locator)
        if path.exists():
            return
        if not locator.is_remote:
            raise DownloadFailed(FileNotFoundError(f"Local file missing: {path}"))

        loop = asyncio.get_event_loop()
        try:
            exists = await loop.run_in_executor(None, self._object_exists, locator.path)
        except (ClientError, BotoCoreError) as e:
            raise DownloadFailed(e) from e
        if not exists:
            raise DownloadFailed(FileNotFoundError(f"Object missing: {self._key(locator.path)}"))

        logger.debug(f"Download requested for {locator.path}")
        self._spawn_background(self._download(locator.path, path))

    async def _download(self, name: str, path: Path):
        def _fetch():
            path.parent.mkdir(parents=True, exist_ok=True)
            partial = path.with_name(f".{path.name}.part")
            self.s3_client.download_file(self.bucket_name, self._key(name), str(partial))
            partial.replace(path)

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, _fetch)
        except (OSError, ClientError, BotoCoreError) as e:
            logger.warning(f"Background download of {name} failed: {e}")

    async def diagnose(self) -> StoreDiagnosis:
        if not self.bucket_name:
            return StoreDiagnosis(StoreStatus.UNAVAILABLE)
        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, self._head_bucket)
        except ClientError as e:
            if _error_code(e) in MISSING_CODES:
                return StoreDiagnosis(StoreStatus.CONTAINER_NOT_FOUND)
            return StoreDiagnosis(StoreStatus.UNAVAILABLE)
        except BotoCoreError:
            return StoreDiagnosis(StoreStatus.UNAVAILABLE)
        if not self.store_directory.is_dir():
            return StoreDiagnosis(StoreStatus.NO_DIRECTORY)
        return StoreDiagnosis(StoreStatus.READY, self.store_directory)
