"""
Abstract storage interfaces for the S3 filesystem adapter.

This module defines the configuration and per-call option models, the
storage error taxonomy, the object store client capability consumed by the
adapter, and the contract the adapter exposes to a host filesystem layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from .actions import DeferredAction


DEFAULT_REGION = "us-east-1"
DEFAULT_TIMEOUT = "+15 minutes"
S3_DEFAULT_HOST = "s3.amazonaws.com"

# Accepted forms for signed url expiry: offset in seconds, offset,
# absolute instant or textual expression.
Timeout = Union[int, float, timedelta, datetime, str]


class StoragePermission(str, Enum):
    """Canned ACLs for new objects. Other ACL strings are sent to S3 as given."""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"
    BUCKET_OWNER_READ = "bucket-owner-read"
    BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"
    AWS_EXEC_READ = "aws-exec-read"


class StorageConfig(BaseModel):
    """Adapter-level configuration.

    Bucket and credentials are optional here: they are only required by the
    operations that use them, so a misconfigured adapter fails at use.
    """

    model_config = ConfigDict(frozen=True)

    protocol: str = "https"
    bucket: Optional[str] = None
    key: Optional[str] = None
    secret: Optional[str] = None
    region: str = DEFAULT_REGION
    timeout: Timeout = DEFAULT_TIMEOUT
    cloudfront_domain: Optional[str] = None
    use_cdn: bool = False

    # Only consumed when the adapter builds its own boto3 client
    endpoint_url: Optional[str] = None
    max_pool_connections: int = Field(default=10, ge=1, le=50)

    def merged(self, options: Optional["UrlOptions"] = None) -> "StorageConfig":
        """Return a copy with the explicitly set call options applied over it."""
        if options is None:
            return self
        return self.model_copy(update=options.overrides())


class UrlOptions(BaseModel):
    """Per-call overrides for url generation.

    A field overrides the configuration only when the caller passed it, so an
    explicit ``None`` clears the configured value for that call.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    protocol: Optional[str] = None
    bucket: Optional[str] = None
    key: Optional[str] = None
    secret: Optional[str] = None
    region: Optional[str] = None
    timeout: Timeout = DEFAULT_TIMEOUT
    cloudfront_domain: Optional[str] = None
    use_cdn: Optional[bool] = None

    def overrides(self) -> dict[str, Any]:
        return self.model_dump(include=set(UrlOptions.model_fields), exclude_unset=True)


class SignOptions(UrlOptions):
    """Per-call overrides for signed url generation."""

    signature_only: bool = False


class WriteOptions(BaseModel):
    """Options for ``write``.

    ``auto_create_bucket`` and ``overwrite`` are consumed by the adapter;
    everything else, unknown keywords included, goes to the client verbatim.
    """

    model_config = ConfigDict(frozen=True, extra="allow", use_enum_values=True)

    source_path: Optional[str] = None
    auto_create_bucket: bool = True
    overwrite: bool = True
    acl: Union[StoragePermission, str] = Field(default=StoragePermission.PUBLIC_READ, validate_default=True)

    def passthrough(self) -> dict[str, Any]:
        """Options forwarded to ``create_object``."""
        return self.model_dump(exclude={"auto_create_bucket", "overwrite"})


class StorageError(Exception):
    """Base exception for storage operations."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}


class StorageConfigError(StorageError):
    """A setting required by the operation is missing."""

    pass


class BucketNotFoundError(StorageError):
    """Bucket is missing and automatic creation is disabled."""

    def __init__(self, bucket: str):
        super().__init__(f"S3 bucket `{bucket}` does not exist.", error_code="NoSuchBucket")
        self.bucket = bucket


class ObjectAlreadyExistsError(StorageError):
    """Object is already stored and overwriting is disabled."""

    def __init__(self, bucket: str, filename: str):
        super().__init__(
            f"File `{filename}` already exists in S3 bucket `{bucket}`.",
            error_code="ObjectAlreadyExists",
        )
        self.bucket = bucket
        self.filename = filename


class MissingCdnDomainError(StorageError):
    """A CDN url was requested without a configured CDN domain."""

    def __init__(self) -> None:
        super().__init__("CDN urls need a valid domain address for the `cloudfront_domain` option.")


class StorageFileNotFoundError(StorageError):
    """File not found in storage."""

    pass


class StoragePermissionError(StorageError):
    """Permission denied for storage operation."""

    pass


class QuotaExceededError(StorageError):
    """Storage quota exceeded."""

    pass


class NetworkError(StorageError):
    """Network-related storage error."""

    pass


class ObjectStoreClient(ABC):
    """
    Object store capability consumed by the adapter.

    One method per bucket/object operation the adapter needs. Implementations
    own transport, authentication and retries.
    """

    @abstractmethod
    def bucket_exists(self, bucket: str) -> bool:
        """Return True if the bucket exists."""
        pass

    @abstractmethod
    def create_bucket(self, bucket: str, region: str) -> Any:
        """Create a bucket in the given region."""
        pass

    @abstractmethod
    def object_exists(self, bucket: str, key: str) -> bool:
        """Return True if an object is stored under ``key``."""
        pass

    @abstractmethod
    def create_object(self, bucket: str, key: str, options: Mapping[str, Any]) -> Any:
        """
        Store an object.

        Args:
            bucket: Bucket name
            key: Object key
            options: ``body`` or ``source_path`` for the content, ``acl``, and
                any SDK-specific parameters

        Returns:
            The SDK response
        """
        pass

    @abstractmethod
    def get_object(self, bucket: str, key: str, options: Mapping[str, Any]) -> Any:
        """Fetch an object. ``options`` are SDK parameters such as ``Range``."""
        pass

    @abstractmethod
    def delete_object(self, bucket: str, key: str, options: Mapping[str, Any]) -> Any:
        """Delete an object."""
        pass


class StorageAdapter(ABC):
    """
    Contract exposed to a host filesystem abstraction.

    ``write``, ``read`` and ``delete`` return deferred actions invoked later as
    ``action(adapter, params)``, so the host can wrap them in its filter chain.
    ``url`` and ``sign_url`` are computed immediately.
    """

    def __init__(self, config: StorageConfig):
        self.config = config

    @abstractmethod
    def write(self, filename: str, data: Any = "", **options: Any) -> "DeferredAction":
        pass

    @abstractmethod
    def read(self, filename: str, **options: Any) -> "DeferredAction":
        pass

    @abstractmethod
    def delete(self, filename: str, **options: Any) -> "DeferredAction":
        pass

    @abstractmethod
    def url(self, path: str, **options: Any) -> str:
        pass

    @abstractmethod
    def sign_url(self, path: str, **options: Any) -> str:
        pass


__all__ = [
    "DEFAULT_REGION",
    "DEFAULT_TIMEOUT",
    "S3_DEFAULT_HOST",
    "Timeout",
    "StoragePermission",
    "StorageConfig",
    "UrlOptions",
    "SignOptions",
    "WriteOptions",
    "StorageError",
    "StorageConfigError",
    "BucketNotFoundError",
    "ObjectAlreadyExistsError",
    "MissingCdnDomainError",
    "StorageFileNotFoundError",
    "StoragePermissionError",
    "QuotaExceededError",
    "NetworkError",
    "ObjectStoreClient",
    "StorageAdapter",
]
