"""
Value Objects - Immutable objects that represent domain concepts.
These have no identity and are compared by value.
"""
from typing import NewType

ContentHash = NewType("ContentHash", str)
FolderId = NewType("FolderId", str)
DocumentId = NewType("DocumentId", str)

# Reserved identity of the synthetic "All Documents" folder
ALL_DOCUMENTS_ID = FolderId("00000000-0000-0000-0000-000000000000")
ALL_DOCUMENTS_NAME = "All Documents"
ALL_DOCUMENTS_ICON = "tray.full.fill"

DEFAULT_FOLDER_ICON = "folder.fill"
