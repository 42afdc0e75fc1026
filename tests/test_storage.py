from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from pdfshelf.domain.entities import Locator
from pdfshelf.domain.exceptions import ContainerNotFound, CopyFailed, DownloadFailed
from pdfshelf.services.storage import (
    CloudGatewayFactory,
    S3MirrorGateway,
    StoreStatus,
    SyncedFolderGateway,
)
from pdfshelf.services.storage.synced_folder_storage import placeholder_path

CONTAINER = "iCloud.com.pdfshelf.library"


def client_error(code, operation="HeadObject"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def sync_root(tmp_path):
    root = tmp_path / "Mobile Documents"
    (root / CONTAINER).mkdir(parents=True)
    return root


@pytest.fixture
def synced(sync_root):
    return SyncedFolderGateway(sync_root, CONTAINER, "Documents/PDFs", download_command=["true"])


@pytest.mark.asyncio
async def test_copy_in_returns_remote_locator(synced, tmp_path):
    source = tmp_path / "paper.pdf"
    source.write_bytes(b"%PDF-1.4 one")

    locator = await synced.copy_in(source)

    assert locator == Locator.remote("paper.pdf")
    assert synced.resolve_path(locator).read_bytes() == b"%PDF-1.4 one"
    assert synced.belongs_to_store(locator)


@pytest.mark.asyncio
async def test_copy_in_never_overwrites(synced, tmp_path):
    first = tmp_path / "a" / "paper.pdf"
    second = tmp_path / "b" / "paper.pdf"
    for path, content in ((first, b"first"), (second, b"second")):
        path.parent.mkdir()
        path.write_bytes(content)

    one = await synced.copy_in(first)
    two = await synced.copy_in(second)

    assert one.path == "paper.pdf"
    assert two.path != "paper.pdf"
    assert two.path.endswith("_paper.pdf")
    assert synced.resolve_path(one).read_bytes() == b"first"
    assert synced.resolve_path(two).read_bytes() == b"second"


@pytest.mark.asyncio
async def test_copy_in_without_container_fails(tmp_path):
    root = tmp_path / "drive"
    root.mkdir()
    gateway = SyncedFolderGateway(root, CONTAINER)
    source = tmp_path / "paper.pdf"
    source.write_bytes(b"data")

    assert await gateway.is_available() is True
    with pytest.raises(CopyFailed) as excinfo:
        await gateway.copy_in(source)
    assert isinstance(excinfo.value.cause, ContainerNotFound)


@pytest.mark.asyncio
async def test_remove_is_idempotent(synced, tmp_path):
    source = tmp_path / "paper.pdf"
    source.write_bytes(b"data")
    locator = await synced.copy_in(source)

    await synced.remove(locator)
    await synced.remove(locator)

    assert not synced.resolve_path(locator).exists()


@pytest.mark.asyncio
async def test_remove_ignores_local_locators(synced, tmp_path):
    source = tmp_path / "keep.pdf"
    source.write_bytes(b"data")

    await synced.remove(Locator.local(str(source)))

    assert source.exists()


def test_belongs_to_store(synced, tmp_path):
    assert synced.belongs_to_store(Locator.remote("x.pdf"))
    assert not synced.belongs_to_store(Locator.remote("../escape.pdf"))
    assert not synced.belongs_to_store(Locator.local(str(tmp_path / "x.pdf")))


@pytest.mark.asyncio
async def test_ensure_local(synced):
    directory = await synced.resolve_directory()
    (directory / "here.pdf").write_bytes(b"data")
    await synced.ensure_local(Locator.remote("here.pdf"))

    with pytest.raises(DownloadFailed):
        await synced.ensure_local(Locator.remote("nowhere.pdf"))

    placeholder_path(directory / "cloud.pdf").write_bytes(b"stub")
    await synced.ensure_local(Locator.remote("cloud.pdf"))
    await synced.wait_for_background()


@pytest.mark.asyncio
async def test_diagnose_states(tmp_path, sync_root):
    missing = SyncedFolderGateway(tmp_path / "absent", CONTAINER)
    assert (await missing.diagnose()).status is StoreStatus.UNAVAILABLE
    assert await missing.is_available() is False

    no_container = SyncedFolderGateway(sync_root, "iCloud.other")
    assert (await no_container.diagnose()).status is StoreStatus.CONTAINER_NOT_FOUND

    gateway = SyncedFolderGateway(sync_root, CONTAINER)
    assert (await gateway.diagnose()).status is StoreStatus.NO_DIRECTORY
    await gateway.resolve_directory()
    diagnosis = await gateway.log_diagnostics()
    assert diagnosis.is_ready
    assert diagnosis.directory == gateway.store_directory


@pytest.fixture
def s3_client():
    client = MagicMock()
    client.head_object.side_effect = client_error("404")
    return client


@pytest.fixture
def s3_gateway(tmp_path, s3_client):
    return S3MirrorGateway("library-bucket", tmp_path / "mirror", CONTAINER, s3_client=s3_client)


@pytest.mark.asyncio
async def test_s3_copy_in_uploads_under_prefix(s3_gateway, s3_client, tmp_path):
    source = tmp_path / "paper.pdf"
    source.write_bytes(b"data")

    locator = await s3_gateway.copy_in(source)

    assert locator == Locator.remote("paper.pdf")
    s3_client.upload_file.assert_called_once()
    args, kwargs = s3_client.upload_file.call_args
    assert args[1] == "library-bucket"
    assert args[2] == f"{CONTAINER}/Documents/PDFs/paper.pdf"
    assert kwargs["ExtraArgs"] == {"ContentType": "application/pdf"}
    assert s3_gateway.resolve_path(locator).exists()


@pytest.mark.asyncio
async def test_s3_upload_failure_cleans_mirror(s3_gateway, s3_client, tmp_path):
    s3_client.upload_file.side_effect = client_error("500", "PutObject")
    source = tmp_path / "paper.pdf"
    source.write_bytes(b"data")

    with pytest.raises(CopyFailed):
        await s3_gateway.copy_in(source)

    assert not (s3_gateway.store_directory / "paper.pdf").exists()


@pytest.mark.asyncio
async def test_s3_missing_bucket(s3_gateway, s3_client):
    s3_client.head_bucket.side_effect = client_error("404", "HeadBucket")

    assert await s3_gateway.is_available() is False
    with pytest.raises(ContainerNotFound):
        await s3_gateway.resolve_directory()
    assert (await s3_gateway.diagnose()).status is StoreStatus.CONTAINER_NOT_FOUND


@pytest.mark.asyncio
async def test_s3_remove_deletes_object(s3_gateway, s3_client):
    await s3_gateway.remove(Locator.remote("paper.pdf"))
    s3_client.delete_object.assert_called_once_with(
        Bucket="library-bucket", Key=f"{CONTAINER}/Documents/PDFs/paper.pdf"
    )


@pytest.mark.asyncio
async def test_s3_ensure_local_missing_object(s3_gateway):
    with pytest.raises(DownloadFailed):
        await s3_gateway.ensure_local(Locator.remote("gone.pdf"))


def test_factory_none_and_unknown():
    assert CloudGatewayFactory.create("none") is None
    with pytest.raises(ValueError):
        CloudGatewayFactory.create("ftp")
