"""
boto3 backed object store client.

Implements the ``ObjectStoreClient`` capability on top of the boto3 S3
client, translating botocore errors into the storage error taxonomy.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, NoCredentialsError
import structlog

from .cloud_storage import (
    DEFAULT_REGION,
    NetworkError,
    ObjectStoreClient,
    QuotaExceededError,
    StorageConfig,
    StorageError,
    StorageFileNotFoundError,
    StoragePermissionError,
)

logger = structlog.get_logger(__name__)

NOT_FOUND_CODES = ("404", "NoSuchKey", "NoSuchBucket", "NotFound")


class BotoObjectStoreClient(ObjectStoreClient):
    """
    Object store client using boto3.

    The boto3 client is created on first use, so building an adapter with an
    incomplete configuration never fails; the first request does.
    """

    def __init__(self, config: StorageConfig, s3_client: Any = None):
        """Initialize with adapter configuration, or with a ready boto3 client."""
        self.config = config
        self._s3_client = s3_client

    @property
    def s3_client(self) -> Any:
        if self._s3_client is None:
            self._s3_client = self._connect()
        return self._s3_client

    def _connect(self) -> Any:
        session = boto3.Session(
            aws_access_key_id=self.config.key,
            aws_secret_access_key=self.config.secret,
            region_name=self.config.region,
        )

        client_kwargs: Dict[str, Any] = {
            "config": Config(max_pool_connections=self.config.max_pool_connections),
            "region_name": self.config.region,
        }
        if self.config.endpoint_url:
            client_kwargs["endpoint_url"] = self.config.endpoint_url

        logger.info("Creating S3 client", region=self.config.region, endpoint_url=self.config.endpoint_url)
        return session.client("s3", **client_kwargs)

    def bucket_exists(self, bucket: str) -> bool:
        try:
            self.s3_client.head_bucket(Bucket=bucket)
            return True
        except ClientError as e:
            if self._error_code(e) in NOT_FOUND_CODES:
                return False
            self._handle_client_error(e, f"check existence of bucket {bucket}")
        except NoCredentialsError as e:
            self._handle_no_credentials(e)

    def create_bucket(self, bucket: str, region: str) -> Any:
        kwargs: Dict[str, Any] = {"Bucket": bucket}
        # us-east-1 is the default location and rejects an explicit constraint
        if region and region != DEFAULT_REGION:
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}

        try:
            return self.s3_client.create_bucket(**kwargs)
        except ClientError as e:
            self._handle_client_error(e, f"create bucket {bucket}")
        except NoCredentialsError as e:
            self._handle_no_credentials(e)

    def object_exists(self, bucket: str, key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=bucket, Key=key)
            return True
        except ClientError as e:
            if self._error_code(e) in NOT_FOUND_CODES:
                return False
            self._handle_client_error(e, f"check existence of file {key}")
        except NoCredentialsError as e:
            self._handle_no_credentials(e)

    def create_object(self, bucket: str, key: str, options: Mapping[str, Any]) -> Any:
        upload_args = dict(options)
        body = upload_args.pop("body", None)
        source_path: Optional[str] = upload_args.pop("source_path", None)
        acl = upload_args.pop("acl", None)
        if acl:
            upload_args["ACL"] = acl

        try:
            if source_path:
                with open(Path(source_path), "rb") as f:
                    return self.s3_client.put_object(Bucket=bucket, Key=key, Body=f, **upload_args)
            return self.s3_client.put_object(Bucket=bucket, Key=key, Body=body if body is not None else b"", **upload_args)
        except ClientError as e:
            self._handle_client_error(e, f"upload file {key}")
        except NoCredentialsError as e:
            self._handle_no_credentials(e)

    def get_object(self, bucket: str, key: str, options: Mapping[str, Any]) -> Any:
        try:
            return self.s3_client.get_object(Bucket=bucket, Key=key, **options)
        except ClientError as e:
            self._handle_client_error(e, f"download file {key}")
        except NoCredentialsError as e:
            self._handle_no_credentials(e)

    def delete_object(self, bucket: str, key: str, options: Mapping[str, Any]) -> Any:
        try:
            return self.s3_client.delete_object(Bucket=bucket, Key=key, **options)
        except ClientError as e:
            self._handle_client_error(e, f"delete file {key}")
        except NoCredentialsError as e:
            self._handle_no_credentials(e)

    # Private helper methods

    @staticmethod
    def _error_code(error: ClientError) -> str:
        return str(error.response.get("Error", {}).get("Code", "UNKNOWN"))

    def _handle_no_credentials(self, error: NoCredentialsError) -> None:
        raise StoragePermissionError(
            "AWS credentials not found",
            error_code="NO_CREDENTIALS",
            details={"error": str(error)},
        ) from error

    def _handle_client_error(self, error: ClientError, operation: str) -> None:
        """Convert S3 client errors to storage exceptions."""
        error_code = self._error_code(error)
        status_code = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        message = error.response.get("Error", {}).get("Message", str(error))

        logger.error("S3 request failed", operation=operation, error_code=error_code, status_code=status_code)

        if error_code in NOT_FOUND_CODES:
            raise StorageFileNotFoundError(
                f"File not found during {operation}",
                error_code=error_code,
                status_code=status_code,
            ) from error
        elif error_code in ["AccessDenied", "Forbidden", "403"]:
            raise StoragePermissionError(
                f"Access denied during {operation}",
                error_code=error_code,
                status_code=status_code,
            ) from error
        elif error_code in ["QuotaExceeded", "RequestLimitExceeded"]:
            raise QuotaExceededError(
                f"Quota exceeded during {operation}",
                error_code=error_code,
                status_code=status_code,
            ) from error
        elif error_code in ["RequestTimeout", "ServiceUnavailable"]:
            raise NetworkError(
                f"Network error during {operation}: {message}",
                error_code=error_code,
                status_code=status_code,
            ) from error
        else:
            raise StorageError(
                f"S3 error during {operation}: {message}",
                error_code=error_code,
                status_code=status_code,
            ) from error
