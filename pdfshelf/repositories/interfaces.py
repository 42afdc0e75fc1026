"""
Repository interfaces - Abstract data access contracts.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Set

from ..domain.entities import Document, Folder


class IFolderRepository(ABC):
    """Interface for folder data access."""

    @abstractmethod
    async def create(self, folder: Folder) -> Folder:
        pass

    @abstractmethod
    async def get(self, folder_id: str) -> Optional[Folder]:
        pass

    @abstractmethod
    async def get_children(self, parent_id: Optional[str]) -> List[Folder]:
        pass

    @abstractmethod
    async def get_all(self) -> List[Folder]:
        pass

    @abstractmethod
    async def update(self, folder: Folder) -> Optional[Folder]:
        pass

    @abstractmethod
    async def delete(self, folder_id: str) -> int:
        pass


class IDocumentRepository(ABC):
    """Interface for document data access."""

    @abstractmethod
    async def create(self, document: Document) -> Document:
        pass

    @abstractmethod
    async def get(self, doc_id: str) -> Optional[Document]:
        pass

    @abstractmethod
    async def get_all(self) -> List[Document]:
        pass

    @abstractmethod
    async def get_by_folder(self, folder_id: Optional[str]) -> List[Document]:
        pass

    @abstractmethod
    async def update(self, document: Document) -> Optional[Document]:
        pass

    @abstractmethod
    async def delete(self, doc_id: str) -> bool:
        pass

    @abstractmethod
    async def get_all_checksums(self) -> Set[str]:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass
