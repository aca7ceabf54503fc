import io
import os
import zipfile
from typing import Dict, List, Tuple

import pytest

from cfn_packager import config
from cfn_packager.services.s3 import ObjectStorageService, UploadResult, parse_s3_url

TEST_AWS_ACCESS_KEY_ID = "test"
TEST_AWS_SECRET_ACCESS_KEY = "test"
TEST_AWS_REGION_NAME = "us-east-1"


@pytest.fixture(autouse=True)
def set_boto_test_credentials_and_region(monkeypatch):
    """
    Automatically sets the default credentials and region for all unit tests.
    """
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", TEST_AWS_ACCESS_KEY_ID)
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", TEST_AWS_SECRET_ACCESS_KEY)
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_AWS_REGION_NAME)


@pytest.fixture(autouse=True)
def tmp_folder(tmp_path, monkeypatch) -> str:
    """Redirects all scratch files and folders into a per-test folder, so leftovers can be detected."""
    folder = str(tmp_path / "scratch")
    monkeypatch.setattr(config, "TMP_FOLDER", folder)
    return folder


class InMemoryStorageService(ObjectStorageService):
    """Object storage that keeps uploaded objects in memory and records each upload."""

    def __init__(self, version_id: str = "v1"):
        self.version_id = version_id
        self.objects: Dict[Tuple[str, str], bytes] = {}
        self.uploads: List[Tuple[str, str]] = []

    def put_object(self, local_path: str, destination_url: str) -> UploadResult:
        bucket, key = parse_s3_url(destination_url)
        with open(local_path, "rb") as f:
            self.objects[(bucket, key)] = f.read()
        self.uploads.append((local_path, destination_url))
        return UploadResult(bucket=bucket, key=key, version_id=self.version_id)

    def put_object_content(self, content: str, bucket: str, key: str) -> UploadResult:
        self.objects[(bucket, key)] = content.encode("utf-8")
        self.uploads.append(("<content>", f"s3://{bucket}/{key}"))
        return UploadResult(bucket=bucket, key=key, version_id=self.version_id)

    def get_object(self, url: str) -> bytes:
        return self.objects[parse_s3_url(url)]

    def get_zip_entries(self, url: str) -> List[str]:
        with zipfile.ZipFile(io.BytesIO(self.get_object(url))) as zip_ref:
            return sorted(zip_ref.namelist())


class FailingStorageService(InMemoryStorageService):
    def put_object(self, local_path: str, destination_url: str) -> UploadResult:
        self.uploads.append((local_path, destination_url))
        raise ConnectionError("upload failed")


@pytest.fixture
def storage() -> InMemoryStorageService:
    return InMemoryStorageService()


@pytest.fixture
def failing_storage() -> FailingStorageService:
    return FailingStorageService()


@pytest.fixture
def assert_no_scratch_leftovers(tmp_folder):
    def _assert():
        leftovers = os.listdir(tmp_folder) if os.path.isdir(tmp_folder) else []
        assert leftovers == []

    return _assert
