import pytest

from pdfshelf.domain.entities import Document, Locator, RemoteMetadata, new_id
from pdfshelf.domain.value_objects import ALL_DOCUMENTS_ID, ALL_DOCUMENTS_NAME


async def add(tree, name, folder=None, remote=False, title=None):
    locator = Locator.remote(f"{name}.pdf") if remote else Locator.local(f"/tmp/{name}.pdf")
    document = Document(
        id=new_id(),
        file_name=f"{name}.pdf",
        content_hash=f"hash-{name}",
        locator=locator,
        folder_id=folder.id if folder else None,
        title=title,
    )
    document = await tree.add_document(document)
    await tree.save()
    return document


@pytest.mark.asyncio
async def test_root_folders_virtual_first_then_by_name(tree):
    await tree.create_folder("zebra")
    await tree.create_folder("Apple")
    parent = await tree.create_folder("mango")
    await tree.create_folder("child", parent)

    roots = await tree.root_folders()

    assert roots[0].id == ALL_DOCUMENTS_ID
    assert roots[0].name == ALL_DOCUMENTS_NAME
    assert roots[0].is_virtual
    assert [f.name for f in roots[1:]] == ["Apple", "mango", "zebra"]
    assert [f.name for f in await tree.subfolders(parent)] == ["child"]
    assert await tree.subfolders(roots[0]) == []


@pytest.mark.asyncio
async def test_create_folder_blank_name_is_noop(tree):
    assert await tree.create_folder("   ") is None
    assert await tree.create_folder("") is None
    assert await tree.create_folder("inside", tree.all_documents_folder) is None
    assert len(await tree.root_folders()) == 1


@pytest.mark.asyncio
async def test_create_folder_trims_name(tree):
    folder = await tree.create_folder("  Papers  ")
    assert folder.name == "Papers"
    assert folder.icon == "folder.fill"


@pytest.mark.asyncio
async def test_virtual_folder_shows_union_of_all_documents(tree):
    a = await tree.create_folder("A")
    b = await tree.create_folder("B")
    nested = await tree.create_folder("nested", a)
    await add(tree, "one", a, title="Zeta")
    await add(tree, "two", b, title="alpha")
    await add(tree, "three", nested)
    await add(tree, "four")

    shown = await tree.documents_in(tree.all_documents_folder)

    union = []
    for folder in (a, b, nested):
        union.extend(await tree.documents_in(folder))
    union.extend(await tree.unfiled_documents())
    assert {d.id for d in shown} == {d.id for d in union}
    assert len(shown) == 4
    assert [d.display_title for d in shown] == ["alpha", "four.pdf", "three.pdf", "Zeta"]


@pytest.mark.asyncio
async def test_delete_folder_unfiles_documents_and_cascades(tree):
    parent = await tree.create_folder("parent")
    child = await tree.create_folder("child", parent)
    doc_a = await add(tree, "a", parent)
    doc_b = await add(tree, "b", child)

    assert await tree.delete_folder(parent) == 2

    assert await tree.get_folder(child.id) is None
    for doc in (doc_a, doc_b):
        stored = await tree.get_document(doc.id)
        assert stored is not None
        assert stored.is_unfiled()
    assert await tree.delete_folder(tree.all_documents_folder) == 0


@pytest.mark.asyncio
async def test_move_folder_rejects_cycles(tree):
    top = await tree.create_folder("top")
    middle = await tree.create_folder("middle", top)
    bottom = await tree.create_folder("bottom", middle)

    with pytest.raises(ValueError):
        await tree.move_folder(top, bottom)
    with pytest.raises(ValueError):
        await tree.move_folder(top, top)
    with pytest.raises(ValueError):
        await tree.move_folder(top, tree.all_documents_folder)

    moved = await tree.move_folder(bottom, None)
    assert moved.parent_id is None


@pytest.mark.asyncio
async def test_move_document_into_virtual_unfiles(tree):
    folder = await tree.create_folder("F")
    doc = await add(tree, "a")

    doc = await tree.move_document(doc, folder)
    assert doc.folder_id == folder.id

    doc = await tree.move_document(doc, tree.all_documents_folder)
    assert doc.folder_id is None


@pytest.mark.asyncio
async def test_delete_remote_document_releases_file(tree, gateway):
    doc = await add(tree, "remote", remote=True)

    assert await tree.delete_document(doc) is True

    assert gateway.removed == [doc.locator]
    assert await tree.get_document(doc.id) is None


@pytest.mark.asyncio
async def test_delete_local_document_makes_no_remote_call(tree, gateway):
    doc = await add(tree, "local")

    await tree.delete_document(doc)

    assert gateway.removed == []
    assert await tree.count_documents() == 0


@pytest.mark.asyncio
async def test_record_removed_even_if_release_fails(tree, gateway):
    from pdfshelf.domain.exceptions import StoreUnavailable

    async def failing_remove(locator):
        raise StoreUnavailable("offline")

    gateway.remove = failing_remove
    doc = await add(tree, "remote", remote=True)

    assert await tree.delete_document(doc) is True
    assert await tree.get_document(doc.id) is None


@pytest.mark.asyncio
async def test_delete_all_releases_remote_files_and_clears_selection(tree, gateway):
    folder = await tree.create_folder("F")
    remote = await add(tree, "remote", folder, remote=True)
    await add(tree, "local")
    tree.selection.folder = folder
    tree.selection.document = remote

    await tree.delete_all()

    assert gateway.removed == [remote.locator]
    assert await tree.count_documents() == 0
    assert await tree.root_folders() == [tree.all_documents_folder]
    assert tree.selection.folder is None
    assert tree.selection.document is None


@pytest.mark.asyncio
async def test_merge_remote_metadata_is_additive(tree):
    doc = await add(tree, "paper", title="Local Title")

    merged = await tree.merge_remote_metadata(
        doc.id, RemoteMetadata(title="AI Title", author="AI Author", summary="Short", keywords=["k"])
    )

    stored = await tree.get_document(doc.id)
    assert merged is True
    assert stored.title == "Local Title"
    assert stored.ai_title == "AI Title"
    assert stored.author == "AI Author"
    assert stored.ai_summary == "Short"

    await tree.merge_remote_metadata(doc.id, RemoteMetadata())
    stored = await tree.get_document(doc.id)
    assert stored.ai_title == "AI Title"
    assert stored.ai_keywords == ["k"]


@pytest.mark.asyncio
async def test_merge_into_deleted_document_is_noop(tree):
    doc = await add(tree, "gone")
    await tree.delete_document(doc)

    assert await tree.merge_remote_metadata(doc.id, RemoteMetadata(title="late")) is False
    assert await tree.count_documents() == 0


def new_document(name, content_hash=None):
    return Document(id=new_id(), file_name=f"{name}.pdf", content_hash=content_hash or f"hash-{name}")


@pytest.mark.asyncio
async def test_commit_documents_inserts_batch_with_one_commit(tree, db):
    await add(tree, "existing")
    events = []
    db.subscribe(events.append)

    inserted, rejected = await tree.commit_documents(
        [new_document("a"), new_document("copy", "hash-existing"), new_document("b")]
    )

    assert [d.file_name for d in inserted] == ["a.pdf", "b.pdf"]
    assert [d.file_name for d in rejected] == ["copy.pdf"]
    assert len(events) == 1
    assert await tree.count_documents() == 3


@pytest.mark.asyncio
async def test_commit_documents_rolls_back_on_failed_commit(tree, db, monkeypatch):
    async def failing_save():
        raise OSError("disk full")

    monkeypatch.setattr(db, "save", failing_save)

    with pytest.raises(OSError):
        await tree.commit_documents([new_document("a"), new_document("b")])

    assert await tree.count_documents() == 0
    assert await tree.fingerprints() == set()
