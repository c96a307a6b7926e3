"""
Amazon S3 filesystem adapter.

``S3Storage`` maps the uniform ``(filename, data, options)`` calls of a host
filesystem layer onto an ``ObjectStoreClient``. Object operations are
returned as deferred actions; public and signed urls are built locally
without talking to S3.

Example:
    storage = S3Storage(bucket="assets", key="AKIA...", secret="...")
    storage.write("logo.png", data)(storage, {"filename": "logo.png", "data": data})
    storage.sign_url("logo.png", timeout="+1 hour")
"""

from typing import Any, Optional

import structlog

from .actions import DeleteAction, ReadAction, WriteAction
from .boto_client import BotoObjectStoreClient
from .cloud_storage import (
    S3_DEFAULT_HOST,
    MissingCdnDomainError,
    ObjectStoreClient,
    SignOptions,
    StorageAdapter,
    StorageConfig,
    StorageConfigError,
    UrlOptions,
    WriteOptions,
)
from .signing import build_query_string, resolve_expiry

logger = structlog.get_logger(__name__)


class S3Storage(StorageAdapter):
    """
    S3 implementation of the storage adapter contract.

    Configuration is given either as a ``StorageConfig`` or as keyword
    arguments. When no client is injected a ``BotoObjectStoreClient`` is
    built from the configuration; it only connects on first use.
    """

    def __init__(
        self,
        config: Optional[StorageConfig] = None,
        client: Optional[ObjectStoreClient] = None,
        **config_kwargs: Any,
    ):
        """
        Initialize the adapter.

        Args:
            config: Adapter configuration
            client: Object store client, defaults to a boto3 backed client
            **config_kwargs: ``StorageConfig`` fields, used when ``config`` is not given
        """
        if config is None:
            config = StorageConfig(**config_kwargs)
        elif config_kwargs:
            config = StorageConfig(**{**config.model_dump(), **config_kwargs})
        super().__init__(config)
        self._client = client if client is not None else BotoObjectStoreClient(config)

    @property
    def client(self) -> ObjectStoreClient:
        """The object store client all deferred actions run against."""
        return self._client

    def write(self, filename: str, data: Any = "", **options: Any) -> WriteAction:
        """
        Prepare an upload.

        Args:
            filename: Object key in the bucket
            data: Content to upload, ignored by the client when ``source_path`` is set
            **options: ``source_path``, ``auto_create_bucket`` (default True),
                ``overwrite`` (default True), ``acl`` (default ``public-read``);
                any other option is passed to ``create_object`` untouched

        Returns:
            A ``WriteAction`` to invoke as ``action(adapter, params)``
        """
        write_options = WriteOptions(**options)
        return WriteAction(
            filename=filename,
            bucket=self.config.bucket,
            options=write_options.passthrough(),
            data=data,
            region=self.config.region,
            auto_create_bucket=write_options.auto_create_bucket,
            overwrite=write_options.overwrite,
        )

    def read(self, filename: str, **options: Any) -> ReadAction:
        """Prepare a download. Options are passed to ``get_object`` untouched."""
        return ReadAction(filename=filename, bucket=self.config.bucket, options=options)

    def delete(self, filename: str, **options: Any) -> DeleteAction:
        """Prepare a deletion. Options are passed to ``delete_object`` untouched."""
        return DeleteAction(filename=filename, bucket=self.config.bucket, options=options)

    def url(self, path: str, **options: Any) -> str:
        """
        Build the public url of an object.

        Args:
            path: Object key in the bucket
            **options: ``protocol``, ``bucket``, ``cloudfront_domain`` and
                ``use_cdn`` overrides for this call

        Returns:
            ``<protocol>://<host>/<path>``, protocol-relative when the protocol is empty

        Raises:
            MissingCdnDomainError: If the CDN is requested without a domain
        """
        config = self.config.merged(UrlOptions(**options))
        return self._url(path, config)

    def sign_url(self, path: str, **options: Any) -> str:
        """
        Build a time-limited url for an object.

        Args:
            path: Object key in the bucket
            **options: ``timeout`` and any ``url`` override, plus
                ``signature_only`` to get the query string alone

        Returns:
            The signed url, or only its query string when ``signature_only`` is set
        """
        sign_options = SignOptions(**options)
        config = self.config.merged(sign_options)

        if not config.key or not config.secret:
            raise StorageConfigError("Signed urls need both `key` and `secret` to be configured.")
        if not config.bucket:
            raise StorageConfigError(f"No S3 bucket configured to sign `{path}`.")

        expires = resolve_expiry(config.timeout)
        query = build_query_string(config.key, config.secret, config.bucket, path, expires)
        logger.debug("Signed S3 url", bucket=config.bucket, path=path, expires=expires)

        if sign_options.signature_only:
            return query
        # Url overrides of this call apply to the url part too, not only to the signature
        return f"{self._url(path, config)}?{query}"

    def _url(self, path: str, config: StorageConfig) -> str:
        protocol = f"{config.protocol}:" if config.protocol else ""

        if config.use_cdn:
            if not config.cloudfront_domain:
                raise MissingCdnDomainError()
            domain = config.cloudfront_domain
        elif config.bucket:
            domain = f"{config.bucket}.{S3_DEFAULT_HOST}"
        else:
            raise StorageConfigError(f"No S3 bucket configured to build the url of `{path}`.")

        return f"{protocol}//{domain}/{path}"
