"""Tests for the local and S3-compatible model repositories."""
from uuid import uuid4

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from mlops.entities import ArtifactReference
from mlops.errors import NotFound, StorageError
from mlops.storage.local_repository import LocalFileModelRepository
from mlops.storage.s3_repository import S3ModelRepository


class FakePaginator:
    def __init__(self, objects, page_size=2) -> None:
        self.objects = objects
        self.page_size = page_size

    def paginate(self, Bucket, Prefix):
        keys = sorted(k for b, k in self.objects if b == Bucket and k.startswith(Prefix))
        for start in range(0, len(keys), self.page_size):
            yield {"Contents": [{"Key": k} for k in keys[start:start + self.page_size]]}
        if not keys:
            yield {"KeyCount": 0}


class FakeS3Client:
    """Lightweight stub to emulate the boto3 S3 client's managed transfers."""

    def __init__(self, put_exception=None) -> None:
        self.objects = {}
        self.put_calls = []
        self.put_exception = put_exception

    def upload_fileobj(self, Fileobj, Bucket, Key, ExtraArgs=None):
        self.put_calls.append({"Bucket": Bucket, "Key": Key, **(ExtraArgs or {})})
        if self.put_exception:
            raise self.put_exception
        self.objects[(Bucket, Key)] = Fileobj.read()

    def download_file(self, Bucket, Key, Filename):
        try:
            payload = self.objects[(Bucket, Key)]
        except KeyError:
            # boto3 probes with HeadObject first, which reports a bare 404
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject")
        with open(Filename, "wb") as f:
            f.write(payload)

    def get_paginator(self, operation_name):
        assert operation_name == "list_objects_v2"
        return FakePaginator(self.objects)


@pytest.fixture
def model_file(tmp_path):
    path = tmp_path / "model.zip"
    path.write_bytes(b"model-bytes-v1")
    return path


# ----- local filesystem -----

def test_local_upload_then_download_roundtrip(tmp_path, model_file):
    repo = LocalFileModelRepository(tmp_path / "models")
    run_id = uuid4()

    reference = repo.upload_model(run_id, model_file)
    downloaded = repo.download_model(reference)

    assert reference.key.startswith(f"{run_id}/")
    assert reference.key.endswith("/model.zip")
    assert downloaded.read_bytes() == b"model-bytes-v1"


def test_local_upload_twice_keeps_both_versions(tmp_path, model_file):
    repo = LocalFileModelRepository(tmp_path / "models")
    run_id = uuid4()

    first = repo.upload_model(run_id, model_file)
    model_file.write_bytes(b"model-bytes-v2")
    second = repo.upload_model(run_id, model_file)

    assert first.key != second.key
    assert first.version != second.version
    assert repo.download_model(first).read_bytes() == b"model-bytes-v1"
    assert repo.download_model(second).read_bytes() == b"model-bytes-v2"


def test_local_upload_missing_file_raises_storage_error(tmp_path):
    repo = LocalFileModelRepository(tmp_path / "models")

    with pytest.raises(StorageError):
        repo.upload_model(uuid4(), tmp_path / "missing.zip")

    assert not (tmp_path / "models").exists()


def test_local_failed_copy_leaves_no_version_directory(tmp_path, model_file, monkeypatch):
    repo = LocalFileModelRepository(tmp_path / "models")
    run_id = uuid4()
    kept = repo.upload_model(run_id, model_file)

    def disk_full(src, dst, *args, **kwargs):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr("mlops.storage.local_repository.shutil.copyfileobj", disk_full)
    with pytest.raises(StorageError):
        repo.upload_model(run_id, model_file)

    assert [p.name for p in (tmp_path / "models" / str(run_id)).iterdir()] == [kept.version]
    assert repo.list_models(run_id) == [kept]


def test_local_list_models_in_upload_order(tmp_path, model_file):
    repo = LocalFileModelRepository(tmp_path / "models")
    run_id = uuid4()

    first = repo.upload_model(run_id, model_file)
    second = repo.upload_model(run_id, model_file)
    repo.upload_model(uuid4(), model_file)

    assert repo.list_models(run_id) == sorted([first, second], key=lambda r: r.key)
    assert repo.list_models(uuid4()) == []


def test_local_download_unknown_key_raises_not_found(tmp_path):
    repo = LocalFileModelRepository(tmp_path / "models")
    reference = ArtifactReference(run_id=uuid4(), key="nope/v1/model.zip", version="v1")

    with pytest.raises(NotFound):
        repo.download_model(reference)


def test_local_rejects_keys_escaping_root(tmp_path):
    repo = LocalFileModelRepository(tmp_path / "models")
    reference = ArtifactReference(run_id=uuid4(), key="../../etc/passwd", version="v1")

    with pytest.raises(StorageError):
        repo.download_model(reference)


# ----- S3 / R2 -----

def test_s3_upload_writes_object_under_prefixed_key(model_file):
    client = FakeS3Client()
    repo = S3ModelRepository(client, "bucket-name", prefix="models")
    run_id = uuid4()

    reference = repo.upload_model(run_id, model_file)

    call = client.put_calls[0]
    assert call["Bucket"] == "bucket-name"
    assert call["Key"] == f"models/{reference.key}"
    assert call["ContentType"] == "application/zip"
    assert call["Metadata"] == {"run_id": str(run_id), "version": reference.version}


def test_s3_upload_then_download_roundtrip(tmp_path, model_file):
    repo = S3ModelRepository(FakeS3Client(), "bucket-name")

    reference = repo.upload_model(uuid4(), model_file)
    downloaded = repo.download_model(reference, tmp_path / "restored.zip")

    assert downloaded == tmp_path / "restored.zip"
    assert downloaded.read_bytes() == b"model-bytes-v1"


def test_s3_upload_twice_produces_two_references(model_file):
    client = FakeS3Client()
    repo = S3ModelRepository(client, "bucket-name")
    run_id = uuid4()

    first = repo.upload_model(run_id, model_file)
    second = repo.upload_model(run_id, model_file)

    assert first != second
    assert len(client.objects) == 2


def test_s3_client_error_raises_storage_error(model_file):
    denied = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
    repo = S3ModelRepository(FakeS3Client(put_exception=denied), "bucket-name")

    with pytest.raises(StorageError) as err:
        repo.upload_model(uuid4(), model_file)

    assert err.value.__cause__ is denied


def test_s3_connection_error_raises_storage_error(model_file):
    offline = EndpointConnectionError(endpoint_url="https://example.invalid")
    repo = S3ModelRepository(FakeS3Client(put_exception=offline), "bucket-name")

    with pytest.raises(StorageError):
        repo.upload_model(uuid4(), model_file)


def test_s3_download_missing_object_raises_not_found():
    repo = S3ModelRepository(FakeS3Client(), "bucket-name")
    reference = ArtifactReference(run_id=uuid4(), key="x/v1/model.zip", version="v1")

    with pytest.raises(NotFound):
        repo.download_model(reference)


def test_s3_requires_bucket_name():
    with pytest.raises(ValueError):
        S3ModelRepository(FakeS3Client(), "")


def test_r2_requires_credentials():
    with pytest.raises(ValueError) as err:
        S3ModelRepository.for_r2("", "key", "", "bucket")

    assert "R2_ACCOUNT_ID" in str(err.value)
    assert "R2_SECRET_ACCESS_KEY" in str(err.value)


def test_s3_list_models_reads_all_pages_under_run_prefix(model_file):
    client = FakeS3Client()
    repo = S3ModelRepository(client, "bucket-name", prefix="models")
    run_id = uuid4()

    uploaded = [repo.upload_model(run_id, model_file) for _ in range(3)]
    repo.upload_model(uuid4(), model_file)

    assert repo.list_models(run_id) == sorted(uploaded, key=lambda r: r.key)
    assert repo.list_models(uuid4()) == []


def test_s3_list_models_without_prefix(model_file):
    repo = S3ModelRepository(FakeS3Client(), "bucket-name", prefix="")
    run_id = uuid4()

    reference = repo.upload_model(run_id, model_file)

    assert repo.list_models(run_id) == [reference]
