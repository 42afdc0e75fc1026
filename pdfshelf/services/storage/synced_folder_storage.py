"""
Synced folder gateway implementing CloudFileGateway.
Mirrors files into a locally mounted sync drive (iCloud Drive, Dropbox, ...).
The sync client uploads whatever lands in the container directory.
"""
import asyncio
import shlex
import shutil
from pathlib import Path
from typing import List, Optional, Union

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


def placeholder_path(path: Path) -> Path:
    """Where the sync client keeps the stub of a file that is not downloaded."""
    return path.parent / f".{path.name}.icloud"


class SyncedFolderGateway(CloudFileGateway):
    """
    Store backed by a sync drive mounted at sync_root.

    A file that only exists remotely is represented by a placeholder stub;
    ensure_local asks the sync client to materialize it.
    """

    def __init__(
        self,
        sync_root: Union[str, Path],
        container_identifier: str,
        subpath: str = "Documents/PDFs",
        download_command: Optional[List[str]] = None
    ):
        """
        Initialize synced folder gateway.

        Args:
            sync_root: Mount point of the sync drive
            container_identifier: Fixed container name below sync_root
            subpath: Conventional subpath inside the container
            download_command: Command (argv list) that triggers a download;
                the file path is appended
        """
        super().__init__(container_identifier, subpath)
        self.sync_root = Path(sync_root).expanduser()
        self.container_dir = self.sync_root / container_identifier
        self.download_command = download_command or shlex.split("brctl download")

    @property
    def store_directory(self) -> Path:
        return self.container_dir / self.subpath

    async def is_available(self) -> bool:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self.sync_root.is_dir)

    async def resolve_directory(self) -> Path:
        if not await self.is_available():
            raise StoreUnavailable(f"Sync drive not mounted at {self.sync_root}")

        def _resolve() -> Path:
            if not self.container_dir.is_dir():
                raise ContainerNotFound(f"Container {self.container_identifier} not found in {self.sync_root}")
            self.store_directory.mkdir(parents=True, exist_ok=True)
            return self.store_directory

        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, _resolve)

    async def copy_in(self, source_path: Union[str, Path]) -> Locator:
        source = Path(source_path)
        try:
            directory = await self.resolve_directory()
        except CloudStorageError as e:
            raise CopyFailed(e) from e

        def _copy() -> str:
            while True:
                name = self.unique_name(directory, source.name)
                destination = directory / name
                try:
                    # Exclusive create: a file appearing concurrently is never overwritten
                    with open(source, "rb") as src, open(destination, "xb") as dst:
                        shutil.copyfileobj(src, dst)
                except FileExistsError:
                    continue
                except OSError:
                    destination.unlink(missing_ok=True)
                    raise
                shutil.copystat(source, destination)
                return name

        loop = asyncio.get_event_loop()
        try:
            name = await loop.run_in_executor(None, _copy)
        except OSError as e:
            raise CopyFailed(e) from e

        if name != source.name:
            logger.debug(f"Name collision for {source.name}, stored as {name}")
        return Locator.remote(name)

    async def remove(self, locator: Locator) -> None:
        if not locator.is_remote or not self.belongs_to_store(locator):
            return
        path = self.resolve_path(locator)

        def _delete():
            path.unlink(missing_ok=True)
            placeholder_path(path).unlink(missing_ok=True)

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, _delete)
        except OSError as e:
            logger.warning(f"Could not remove {path} from store: {e}")

    async def ensure_local(self, locator: Locator) -> None:
        path = self.resolve_path(locator)
        if path.exists():
            return
        if not locator.is_remote or not placeholder_path(path).exists():
            raise DownloadFailed(FileNotFoundError(f"No file or placeholder for {path}"))

        try:
            process = await asyncio.create_subprocess_exec(
                *self.download_command,
                str(path),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise DownloadFailed(e) from e

        logger.debug(f"Download requested for {path.name}")
        self._spawn_background(self._watch_download(process, path))

    async def _watch_download(self, process: asyncio.subprocess.Process, path: Path):
        _, stderr = await process.communicate()
        if process.returncode != 0:
            detail = stderr.decode(errors="replace").strip() if stderr else ""
            logger.warning(f"Download of {path.name} exited with {process.returncode}: {detail}")

    async def diagnose(self) -> StoreDiagnosis:
        def _diagnose() -> StoreDiagnosis:
            if not self.sync_root.is_dir():
                return StoreDiagnosis(StoreStatus.UNAVAILABLE)
            if not self.container_dir.is_dir():
                return StoreDiagnosis(StoreStatus.CONTAINER_NOT_FOUND)
            if not self.store_directory.is_dir():
                return StoreDiagnosis(StoreStatus.NO_DIRECTORY)
            return StoreDiagnosis(StoreStatus.READY, self.store_directory)

        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, _diagnose)
