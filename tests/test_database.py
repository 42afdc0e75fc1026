import json
import os

import pytest

from pdfshelf.services.database import DatabaseFactory, JSONAdapter, MemoryAdapter


def folder(folder_id, parent_id=None, name=None):
    return {"id": folder_id, "name": name or folder_id, "parent_id": parent_id}


def document(doc_id, checksum, folder_id=None):
    return {"id": doc_id, "file_name": f"{doc_id}.pdf", "checksum": checksum, "folder_id": folder_id}


@pytest.mark.asyncio
async def test_delete_folder_cascades_and_unfiles_documents():
    db = MemoryAdapter()
    await db.create_folder(folder("f1"))
    await db.create_folder(folder("f2", parent_id="f1"))
    await db.create_folder(folder("other"))
    await db.create_document(document("d1", "h1", "f1"))
    await db.create_document(document("d2", "h2", "f2"))

    assert await db.delete_folder("f1") == 2

    assert await db.get_folder("f2") is None
    assert await db.get_folder("other") is not None
    unfiled = await db.get_documents_by_folder(None)
    assert {d["id"] for d in unfiled} == {"d1", "d2"}
    assert await db.count_documents() == 2


@pytest.mark.asyncio
async def test_checksum_is_unique():
    db = MemoryAdapter()
    await db.create_document(document("d1", "same"))
    with pytest.raises(ValueError):
        await db.create_document(document("d2", "same"))
    assert await db.get_all_checksums() == {"same"}
    assert (await db.find_document_by_checksum("same"))["id"] == "d1"


@pytest.mark.asyncio
async def test_unknown_parent_is_rejected():
    db = MemoryAdapter()
    with pytest.raises(ValueError):
        await db.create_folder(folder("child", parent_id="nope"))
    with pytest.raises(ValueError):
        await db.create_document(document("d1", "h1", folder_id="nope"))


@pytest.mark.asyncio
async def test_save_notifies_subscribers():
    db = MemoryAdapter()
    events = []
    unsubscribe = db.subscribe(events.append)
    await db.save()
    unsubscribe()
    await db.save()
    assert [e.source for e in events] == ["local"]


@pytest.mark.asyncio
async def test_json_adapter_persists_between_instances(tmp_path):
    db = await DatabaseFactory.create_and_initialize("json", data_dir=tmp_path)
    await db.create_folder(folder("f1", name="Papers"))
    await db.create_document(document("d1", "h1", "f1"))
    await db.save()

    reopened = JSONAdapter(data_dir=tmp_path)
    await reopened.initialize()
    assert (await reopened.get_folder("f1"))["name"] == "Papers"
    assert await reopened.get_all_checksums() == {"h1"}


@pytest.mark.asyncio
async def test_json_adapter_picks_up_external_writes(tmp_path):
    db = JSONAdapter(data_dir=tmp_path)
    await db.initialize()
    await db.create_document(document("d1", "h1"))
    await db.save()
    events = []
    db.subscribe(events.append)

    assert await db.check_for_external_changes() is False

    payload = json.loads(db.store_file.read_text())
    payload["documents"]["d2"] = document("d2", "h2")
    db.store_file.write_text(json.dumps(payload))
    stat = db.store_file.stat()
    os.utime(db.store_file, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

    assert await db.check_for_external_changes() is True
    assert await db.count_documents() == 2
    assert [e.source for e in events] == ["external"]


@pytest.mark.asyncio
async def test_json_adapter_defers_reload_with_pending_mutations(tmp_path):
    db = JSONAdapter(data_dir=tmp_path)
    await db.initialize()
    await db.save()
    await db.create_document(document("local", "h-local"))

    db.store_file.write_text(json.dumps({"folders": {}, "documents": {"ext": document("ext", "h-ext")}}))
    stat = db.store_file.stat()
    os.utime(db.store_file, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

    assert await db.check_for_external_changes() is False
    assert await db.get_document("local") is not None


def test_factory_rejects_unknown_type():
    with pytest.raises(ValueError):
        DatabaseFactory.create("postgres")
