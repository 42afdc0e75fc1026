import json
import os

import pytest

from pdfshelf.domain.entities import Document, new_id
from pdfshelf.services.database import JSONAdapter
from pdfshelf.services.library_tree import LibraryTree
from pdfshelf.services.sync_reconciler import SyncReconciler


async def stored_document(tree, name, folder=None):
    doc = await tree.add_document(
        Document(id=new_id(), file_name=name, content_hash=f"h-{name}", folder_id=folder.id if folder else None)
    )
    await tree.save()
    return doc


@pytest.fixture
def reconciler(tree, db):
    reconciler = SyncReconciler(tree, db)
    reconciler.start()
    return reconciler


@pytest.mark.asyncio
async def test_local_commit_refreshes_root_folders(tree, reconciler):
    await tree.create_folder("Reports")
    await reconciler.wait_for_refresh()

    assert [f.name for f in reconciler.root_folders] == ["All Documents", "Reports"]
    assert reconciler.refresh_count >= 1


@pytest.mark.asyncio
async def test_deleted_folder_selection_falls_back_to_virtual(tree, reconciler):
    folder = await tree.create_folder("Temp")
    doc = await stored_document(tree, "a.pdf", folder)
    await reconciler.select_folder(folder.id)
    await reconciler.select_document(doc.id)

    await tree.delete_folder(folder)
    await reconciler.wait_for_refresh()

    assert tree.selection.folder.is_virtual
    assert tree.selection.document is None


@pytest.mark.asyncio
async def test_deleted_document_selection_is_cleared(tree, reconciler):
    doc = await stored_document(tree, "a.pdf")
    await reconciler.select_folder(tree.all_documents_folder.id)
    await reconciler.select_document(doc.id)

    await tree.delete_document(doc)
    await reconciler.wait_for_refresh()

    assert tree.selection.folder.is_virtual
    assert tree.selection.document is None


@pytest.mark.asyncio
async def test_select_validates_ids(tree, reconciler):
    folder = await tree.create_folder("Real")
    doc = await stored_document(tree, "loose.pdf")
    await reconciler.select_document(doc.id)

    assert await reconciler.select_folder("missing") is None
    assert await reconciler.select_document("missing") is None
    assert tree.selection.document.id == doc.id

    await reconciler.select_folder(folder.id)
    assert tree.selection.folder.id == folder.id
    assert tree.selection.document is None

    await reconciler.select_folder(None)
    assert tree.selection.folder is None


@pytest.mark.asyncio
async def test_burst_of_commits_is_coalesced(tree, reconciler):
    for name in ("a", "b", "c", "d"):
        await tree.create_folder(name)
    await reconciler.wait_for_refresh()

    assert reconciler.refresh_count <= 2
    assert len(reconciler.root_folders) == 5


@pytest.mark.asyncio
async def test_external_write_refreshes_and_revalidates(tmp_path):
    db = JSONAdapter(data_dir=tmp_path)
    await db.initialize()
    tree = LibraryTree(db)
    reconciler = SyncReconciler(tree, db)
    reconciler.start()
    seen = []
    reconciler.add_listener(seen.append)

    folder = await tree.create_folder("Shared")
    await reconciler.wait_for_refresh()
    await reconciler.select_folder(folder.id)

    # Another device removes the folder; the sync client rewrites the file
    db.store_file.write_text(json.dumps({"folders": {}, "documents": {}}))
    stat = db.store_file.stat()
    os.utime(db.store_file, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

    assert await db.check_for_external_changes() is True
    await reconciler.wait_for_refresh()

    assert tree.selection.folder.is_virtual
    assert [f.name for f in seen[-1]] == ["All Documents"]
    await reconciler.stop()


@pytest.mark.asyncio
async def test_stop_unsubscribes(tree, reconciler):
    await reconciler.stop()
    await tree.create_folder("after stop")
    await reconciler.wait_for_refresh()
    assert reconciler.refresh_count == 0
