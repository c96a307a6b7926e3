"""
Deferred storage actions.

``write``, ``read`` and ``delete`` do not touch the object store directly.
They return one of these actions, which a host filesystem layer invokes as
``action(adapter, params)`` at the end of its filter chain.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional

import structlog

from .cloud_storage import (
    DEFAULT_REGION,
    BucketNotFoundError,
    ObjectAlreadyExistsError,
    ObjectStoreClient,
    StorageConfigError,
)

if TYPE_CHECKING:
    from .s3_storage import S3Storage

logger = structlog.get_logger(__name__)


def _frozen(options: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(options or {}))


@dataclass(frozen=True)
class DeferredAction(ABC):
    """
    An operation captured with its parameters, run when invoked.

    ``params`` given at invocation may carry ``filename`` (and ``data`` for
    writes), which take precedence over the values captured at creation.
    """

    filename: str
    bucket: Optional[str]
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", _frozen(self.options))

    def __call__(self, adapter: "S3Storage", params: Optional[Mapping[str, Any]] = None) -> Any:
        params = params or {}
        filename = params.get("filename", self.filename)
        if not self.bucket:
            raise StorageConfigError(f"No S3 bucket configured to {self.operation} `{filename}`.")
        return self.run(adapter.client, self.bucket, filename, params)

    @property
    @abstractmethod
    def operation(self) -> str:
        pass

    @abstractmethod
    def run(self, client: ObjectStoreClient, bucket: str, filename: str, params: Mapping[str, Any]) -> Any:
        pass


@dataclass(frozen=True)
class WriteAction(DeferredAction):
    """Upload ``data`` (or the file at ``source_path``), creating the bucket when allowed."""

    data: Any = ""
    region: str = DEFAULT_REGION
    auto_create_bucket: bool = True
    overwrite: bool = True

    @property
    def operation(self) -> str:
        return "write"

    def run(self, client: ObjectStoreClient, bucket: str, filename: str, params: Mapping[str, Any]) -> Any:
        body = params.get("data", self.data)

        if not client.bucket_exists(bucket):
            if not self.auto_create_bucket:
                raise BucketNotFoundError(bucket)
            logger.info("Creating missing S3 bucket", bucket=bucket, region=self.region)
            client.create_bucket(bucket, self.region)

        if client.object_exists(bucket, filename) and not self.overwrite:
            logger.warning("Refusing to overwrite existing object", bucket=bucket, filename=filename)
            raise ObjectAlreadyExistsError(bucket, filename)

        # the uploaded content always comes from data, never from a body option
        return client.create_object(bucket, filename, {**self.options, "body": body})


@dataclass(frozen=True)
class ReadAction(DeferredAction):
    """Fetch an object, passing options through to the client."""

    @property
    def operation(self) -> str:
        return "read"

    def run(self, client: ObjectStoreClient, bucket: str, filename: str, params: Mapping[str, Any]) -> Any:
        return client.get_object(bucket, filename, dict(self.options))


@dataclass(frozen=True)
class DeleteAction(DeferredAction):
    """Delete an object, passing options through to the client."""

    @property
    def operation(self) -> str:
        return "delete"

    def run(self, client: ObjectStoreClient, bucket: str, filename: str, params: Mapping[str, Any]) -> Any:
        return client.delete_object(bucket, filename, dict(self.options))
