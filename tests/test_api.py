import pytest
from fastapi.testclient import TestClient

from pdfshelf.core import config
from pdfshelf.domain.value_objects import ALL_DOCUMENTS_ID
from pdfshelf.main import app
from pdfshelf.routers import dependencies


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(config, "DATABASE_TYPE", "memory")
    monkeypatch.setattr(config, "STORAGE_TYPE", "none")
    monkeypatch.setattr(config, "AI_PROVIDER", "mock")
    monkeypatch.setattr(config, "AI_EXTRACTION_ENABLED", False)
    monkeypatch.setattr(config, "SYNC_POLL_INTERVAL", 0)
    monkeypatch.setattr(dependencies, "working_model", None)
    with TestClient(app) as client:
        yield client


def import_pdfs(client, paths, folder_id=None):
    response = client.post("/imports", json={"sources": [str(p) for p in paths], "folder_id": folder_id})
    assert response.status_code == 200
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["documents"] == 0
    assert body["store"] is None


def test_root_folders_start_with_all_documents(client):
    client.post("/folders", data={"name": "Zeta"})
    client.post("/folders", data={"name": "alpha"})

    names = [f["name"] for f in client.get("/folders").json()]
    assert names == ["All Documents", "alpha", "Zeta"]


def test_create_folder_rejects_blank_name(client):
    response = client.post("/folders", data={"name": "   "})
    assert response.status_code == 400


def test_create_subfolder(client):
    parent = client.post("/folders", data={"name": "Work"}).json()
    child = client.post("/folders", data={"name": "Taxes", "parent_id": parent["id"]})
    assert child.status_code == 201

    subfolders = client.get(f"/folders/{parent['id']}/subfolders").json()
    assert [f["name"] for f in subfolders] == ["Taxes"]


def test_import_and_list(client, make_pdf):
    folder = client.post("/folders", data={"name": "Papers"}).json()
    a = make_pdf("a.pdf", "first paper", title="Alpha")
    b = make_pdf("b.pdf", "second paper")
    a_again = a.with_name("a_copy.pdf")
    a_again.write_bytes(a.read_bytes())

    report = import_pdfs(client, [a, b, a_again], folder["id"])

    assert report["total_files"] == 3
    assert report["imported"] == 2
    assert report["duplicates"] == 1
    assert report["local_fallbacks"] == 2
    assert report["enrichment_queued"] == 0

    in_folder = client.get(f"/folders/{folder['id']}/documents").json()
    assert [d["display_title"] for d in in_folder] == ["Alpha", "b.pdf"]
    assert all(not d["is_remote"] for d in in_folder)

    everything = client.get(f"/folders/{ALL_DOCUMENTS_ID}/documents").json()
    assert len(everything) == 2


def test_import_into_unknown_folder(client, make_pdf):
    response = client.post("/imports", json={"sources": [str(make_pdf("a.pdf"))], "folder_id": "missing"})
    assert response.status_code == 404


def test_unreadable_source_is_reported(client, tmp_path):
    report = import_pdfs(client, [tmp_path / "nope.pdf"])
    assert report["failed"] == 1
    assert report["errors"][0]["source"].endswith("nope.pdf")


def test_document_thumbnail(client, make_pdf):
    report = import_pdfs(client, [make_pdf("a.pdf")])
    doc_id = report["document_ids"][0]

    document = client.get(f"/documents/{doc_id}").json()
    assert document["has_thumbnail"] is True

    response = client.get(f"/documents/{doc_id}/thumbnail")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"


def test_unknown_document(client):
    assert client.get("/documents/missing").status_code == 404
    assert client.delete("/documents/missing").status_code == 404


def test_delete_folder_unfiles_documents(client, make_pdf):
    folder = client.post("/folders", data={"name": "Temp"}).json()
    report = import_pdfs(client, [make_pdf("a.pdf")], folder["id"])

    response = client.delete(f"/folders/{folder['id']}")
    assert response.status_code == 200
    assert response.json()["folders_deleted"] == 1

    document = client.get(f"/documents/{report['document_ids'][0]}").json()
    assert document["folder_id"] is None


def test_all_documents_cannot_be_deleted(client):
    assert client.delete(f"/folders/{ALL_DOCUMENTS_ID}").status_code == 400


def test_selection(client, make_pdf):
    folder = client.post("/folders", data={"name": "Reading"}).json()
    report = import_pdfs(client, [make_pdf("a.pdf")], folder["id"])
    doc_id = report["document_ids"][0]

    response = client.put("/selection", json={"folder_id": folder["id"], "document_id": doc_id})
    assert response.status_code == 200
    assert response.json()["folder"]["id"] == folder["id"]
    assert response.json()["document"]["id"] == doc_id

    client.delete(f"/folders/{folder['id']}")
    selection = client.get("/selection").json()
    assert selection["folder"]["id"] == ALL_DOCUMENTS_ID
    assert selection["document"] is None

    assert client.put("/selection", json={"folder_id": "missing"}).status_code == 404


def test_storage_status_without_store(client):
    body = client.get("/status/storage").json()
    assert body["status"] == "disabled"
    assert body["is_ready"] is False


def test_ai_connection_with_mock_provider(client):
    body = client.post("/status/ai/test").json()
    assert body["ok"] is True
    assert body["model"] == config.CLAUDE_CANDIDATE_MODELS[0]
    assert dependencies.working_model == body["model"]


def test_clear_library(client, make_pdf):
    import_pdfs(client, [make_pdf("a.pdf"), make_pdf("b.pdf", "other")])

    response = client.delete("/documents")
    assert response.status_code == 200
    assert response.json()["records_removed"] == 2
    assert client.get("/health").json()["documents"] == 0
