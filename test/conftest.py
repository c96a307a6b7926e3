from collections.abc import Generator
from pathlib import Path
import tempfile
from typing import Any, Mapping
from unittest.mock import MagicMock

import pytest
import structlog

from s3_filesystem.storage.cloud_storage import ObjectStoreClient, StorageConfig
from s3_filesystem.storage.s3_storage import S3Storage
from s3_filesystem.utils.env_config import AppSettings

TEST_KEY = "BKIAJCQJZKAWSTNVBHUJ"
TEST_SECRET = "TRDMBTZ1Ju1KUG4zKLbL1k8cJgh92UJQzrK4l1M"


class RecordingObjectStoreClient(ObjectStoreClient):
    """Object store double logging every call as ``{"method", "params"}``.

    Only ``existing_buckets`` exist, and within them only ``existing_objects``.
    """

    def __init__(
        self,
        existing_buckets: tuple[str, ...] = ("li3_aws",),
        existing_objects: tuple[str, ...] = ("test_existing_file",),
    ):
        self.existing_buckets = existing_buckets
        self.existing_objects = existing_objects
        self.calls: list[dict[str, Any]] = []

    def _record(self, method: str, *params: Any) -> dict[str, Any]:
        call = {"method": method, "params": list(params)}
        self.calls.append(call)
        return call

    def bucket_exists(self, bucket: str) -> bool:
        self._record("bucket_exists", bucket)
        return bucket in self.existing_buckets

    def create_bucket(self, bucket: str, region: str) -> Any:
        return self._record("create_bucket", bucket, region)

    def object_exists(self, bucket: str, key: str) -> bool:
        self._record("object_exists", bucket, key)
        return bucket in self.existing_buckets and key in self.existing_objects

    def create_object(self, bucket: str, key: str, options: Mapping[str, Any]) -> Any:
        return self._record("create_object", bucket, key, dict(options))

    def get_object(self, bucket: str, key: str, options: Mapping[str, Any]) -> Any:
        return self._record("get_object", bucket, key, dict(options))

    def delete_object(self, bucket: str, key: str, options: Mapping[str, Any]) -> Any:
        return self._record("delete_object", bucket, key, dict(options))


@pytest.fixture
def temp_dir() -> Generator[Path]:
    with tempfile.TemporaryDirectory() as tmpdirname:
        yield Path(tmpdirname)


@pytest.fixture
def storage_config() -> StorageConfig:
    return StorageConfig(
        protocol="http",
        bucket="li3_aws",
        key=TEST_KEY,
        secret=TEST_SECRET,
        region="us-east-1",
        timeout="+15 minutes",
        cloudfront_domain="li3_aws.cloudfront.net",
        use_cdn=False,
    )


@pytest.fixture
def recording_client() -> RecordingObjectStoreClient:
    return RecordingObjectStoreClient()


@pytest.fixture
def adapter(storage_config: StorageConfig, recording_client: RecordingObjectStoreClient) -> S3Storage:
    return S3Storage(storage_config, client=recording_client)


@pytest.fixture(autouse=True)
def mock_logger(mocker: Any) -> MagicMock:
    return mocker.patch.object(structlog, "get_logger", return_value=MagicMock())


@pytest.fixture
def mock_settings() -> MagicMock:
    settings = MagicMock(spec=AppSettings)
    settings.get_storage_config.return_value = {
        "protocol": "https",
        "bucket": "test-bucket",
        "key": None,
        "secret": None,
        "region": "us-east-1",
        "timeout": "+15 minutes",
        "cloudfront_domain": None,
        "use_cdn": False,
        "endpoint_url": None,
        "max_pool_connections": 10,
    }
    settings.get_logging_config.return_value = {"level": "INFO", "format_json": True}
    return settings
