"""
Abstract base class for synchronized store gateways.
All store implementations must inherit from this class.
"""
import asyncio
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Coroutine, Optional, Set, Union

from ...core.logging_config import get_logger
from ...domain.entities import Locator

logger = get_logger(__name__)


class StoreStatus(Enum):
    """Provisioning state of the synchronized store."""
    UNAVAILABLE = "unavailable"
    CONTAINER_NOT_FOUND = "container_not_found"
    NO_DIRECTORY = "no_directory"
    READY = "ready"

    @property
    def description(self) -> str:
        return {
            StoreStatus.UNAVAILABLE: "Synchronized store is not reachable or not configured on this device",
            StoreStatus.CONTAINER_NOT_FOUND: "Store container has not been provisioned",
            StoreStatus.NO_DIRECTORY: "Container found, document directory not created yet",
            StoreStatus.READY: "Synchronized store is ready",
        }[self]


@dataclass(frozen=True)
class StoreDiagnosis:
    status: StoreStatus
    directory: Optional[Path] = None

    @property
    def is_ready(self) -> bool:
        return self.status is StoreStatus.READY

    @property
    def description(self) -> str:
        if self.directory is not None:
            return f"{self.status.description} ({self.directory})"
        return self.status.description


class CloudFileGateway(ABC):
    """
    Abstract interface for the synchronized remote store.

    Files are mirrored under <container>/<subpath>. A remote Locator holds
    the file name relative to that directory. Every operation may fail
    independently; callers decide whether to retry.
    """

    def __init__(self, container_identifier: str, subpath: str):
        self.container_identifier = container_identifier
        self.subpath = subpath.strip("/")
        self._background: Set[asyncio.Task] = set()

    @property
    @abstractmethod
    def store_directory(self) -> Path:
        """Local directory that mirrors the store (pure path, no I/O)."""
        pass

    @abstractmethod
    async def is_available(self) -> bool:
        """Whether the store is reachable and configured on this device."""
        pass

    @abstractmethod
    async def resolve_directory(self) -> Path:
        """
        Return the mirror directory, creating it if absent.

        Raises:
            StoreUnavailable: Store not reachable or not configured
            ContainerNotFound: Container not provisioned
        """
        pass

    @abstractmethod
    async def copy_in(self, source_path: Union[str, Path]) -> Locator:
        """
        Copy a local file into the store. Never overwrites: a name collision
        gets a fresh unique prefix.

        Raises:
            CopyFailed: On any failure
        """
        pass

    @abstractmethod
    async def remove(self, locator: Locator) -> None:
        """Best-effort delete. A missing target is not an error."""
        pass

    @abstractmethod
    async def ensure_local(self, locator: Locator) -> None:
        """
        Trigger a download if the file is not on this device yet.
        Does not wait for the download to finish.

        Raises:
            DownloadFailed: If the provider rejects the request
        """
        pass

    @abstractmethod
    async def diagnose(self) -> StoreDiagnosis:
        """Report the provisioning state of the store."""
        pass

    def resolve_path(self, locator: Locator) -> Path:
        """Filesystem path a locator points at."""
        if locator.is_remote:
            return self.store_directory / locator.path
        return Path(locator.path)

    def belongs_to_store(self, locator: Locator) -> bool:
        """True iff the locator's path falls under the store directory."""
        directory = Path(os.path.normpath(self.store_directory))
        candidate = Path(os.path.normpath(self.resolve_path(locator)))
        if candidate == directory:
            return False
        try:
            candidate.relative_to(directory)
        except ValueError:
            return False
        return True

    async def log_diagnostics(self) -> StoreDiagnosis:
        """Log the store state and how many files it holds."""
        diagnosis = await self.diagnose()
        logger.info(f"Synchronized store ({self.container_identifier}): {diagnosis.description}")
        if diagnosis.is_ready:
            loop = asyncio.get_event_loop()
            count = await loop.run_in_executor(
                None, lambda: sum(1 for p in diagnosis.directory.iterdir() if p.is_file())
            )
            logger.info(f"  → Files in store: {count}")
        else:
            logger.warning("  → Store not ready, imports keep local file references")
        return diagnosis

    @staticmethod
    def unique_name(directory: Path, file_name: str, taken=None) -> str:
        """
        Pick a destination name that does not collide with an existing file.

        Args:
            directory: Destination directory
            file_name: Original file name
            taken: Optional extra predicate reporting names already in use

        Returns:
            file_name, or "<uuid>_<file_name>" on collision
        """
        def in_use(name: str) -> bool:
            return (directory / name).exists() or (taken is not None and taken(name))

        name = file_name
        while in_use(name):
            name = f"{uuid.uuid4()}_{file_name}"
        return name

    def _spawn_background(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def wait_for_background(self):
        """Wait for triggered downloads to settle (shutdown and tests)."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    async def close(self):
        await self.wait_for_background()
