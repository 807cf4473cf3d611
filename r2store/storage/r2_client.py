"""
Cloudflare R2 / S3-compatible storage client.

Uses boto3 with the S3-compatible API to sign requests and manage buckets
and objects. Uploads go through a presigned PUT URL sent with httpx, so
the byte transfer bypasses the SDK's own request signer.

Every public operation returns a result model (see results.py) instead of
raising. The only exception is generate_signed_url, which raises
SigningError so callers handing out URLs can tell "no URL" apart from
a bad one.
"""
import copy
import logging
import time
from typing import Optional, TypeVar, Union

import boto3
import httpx
from botocore.config import Config

from r2store.config import Settings, settings as default_settings
from r2store.storage.config import DEFAULT_URL_TTL, R2Config
from r2store.storage.errors import (
    NotFoundError,
    ProtocolError,
    SigningError,
    StorageError,
    TransferError,
    is_sdk_error,
    protocol_error,
)
from r2store.storage.results import (
    BucketListResult,
    DeleteResult,
    ObjectListResult,
    ObjectReference,
    PingResult,
    StorageResult,
    UploadResult,
)
from r2store.utils.logging import configure_logging, log_storage_failure, log_storage_request
from r2store.utils.metrics import record_storage_error, record_storage_request

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

R = TypeVar("R", bound=StorageResult)

# Signed URL purpose -> S3 client method
SIGNED_OPERATIONS = {
    "upload": "put_object",
    "download": "get_object",
}


class R2Client:
    """
    S3-compatible client for Cloudflare R2.

    Wraps a boto3 S3 client (signing, listing, deleting) and an httpx
    client (raw uploads to presigned URLs). Both can be injected.
    """

    def __init__(
        self,
        account_id: str,
        access_key: str,
        secret_key: str,
        region: str = "auto",
        public_domain: Optional[str] = None,
        s3_client=None,
        http_client: Optional[httpx.Client] = None,
        default_ttl: int = DEFAULT_URL_TTL
    ):
        """
        Initialize R2 client.

        Args:
            account_id: Cloudflare account ID, used to derive the endpoint
            access_key: R2 access key ID
            secret_key: R2 secret access key
            region: Region name (R2 uses "auto")
            public_domain: Optional domain serving the bucket publicly
            s3_client: Pre-built boto3 S3 client (built from credentials if None)
            http_client: httpx client used for uploads (created if None)
            default_ttl: Presigned URL lifetime in seconds when a call gives none

        Credentials are not validated here; the SDK rejects them on first use.
        """
        self._config = R2Config(
            account_id=account_id,
            access_key=access_key,
            secret_key=secret_key,
            region=region,
            public_domain=public_domain,
            default_ttl=default_ttl,
        )

        if s3_client is None:
            # Use signature_version='s3v4' for R2 compatibility
            s3_client = boto3.client(
                's3',
                endpoint_url=self._config.endpoint,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
                config=Config(
                    signature_version='s3v4',
                    s3={'addressing_style': 'path'}  # R2 uses path-style
                )
            )
        self._client = s3_client

        # No timeout layer of our own: a hung transfer hangs the call
        self._owns_http = http_client is None
        self._http = http_client if http_client is not None else httpx.Client(timeout=None)

        logger.info(f"R2 client initialized for endpoint: {self._config.endpoint}")

    @classmethod
    def from_settings(cls, settings: Settings = default_settings) -> "R2Client":
        """Build a client from application settings."""
        if not settings.r2_configured:
            raise ValueError(
                "R2 storage not configured. "
                "Set R2_ACCOUNT_ID, R2_ACCESS_KEY, and R2_SECRET_KEY."
            )
        return cls(
            account_id=settings.r2_account_id,
            access_key=settings.r2_access_key,
            secret_key=settings.r2_secret_key,
            region=settings.r2_region,
            public_domain=settings.r2_public_domain,
            default_ttl=settings.r2_presign_expiration,
        )

    @property
    def config(self) -> R2Config:
        return self._config

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    @property
    def public_domain(self) -> Optional[str]:
        return self._config.public_domain

    def set_public_domain(self, domain: Optional[str]) -> None:
        """
        Set the domain used for permanent URLs. No format validation.

        The config is replaced as a whole, so a call already in flight
        keeps the value it started with.
        """
        self._config = self._config.with_public_domain(domain)
        logger.debug(f"R2 public domain set to {domain}")

    def with_public_domain(self, domain: Optional[str]) -> "R2Client":
        """
        Return a new client with `domain` configured, sharing connections.

        The clone never closes the shared HTTP client; closing the original
        (or leaving its `with` block) also ends uploads through the clone.
        """
        clone = copy.copy(self)
        clone._config = self._config.with_public_domain(domain)
        clone._owns_http = False
        return clone

    def close(self) -> None:
        """Close the upload HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "R2Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def _sign(self, kind: str, bucket: str, key: str, ttl: int) -> str:
        """Ask the SDK to presign `kind` (upload|download) on bucket/key."""
        try:
            return self._client.generate_presigned_url(
                ClientMethod=SIGNED_OPERATIONS[kind],
                Params={
                    'Bucket': bucket,
                    'Key': key,
                },
                ExpiresIn=ttl
            )
        except Exception as e:
            raise SigningError(f"Failed to sign {kind} URL for {bucket}/{key}", error=str(e)) from e

    def generate_signed_url(self, bucket: str, key: str, ttl: Optional[int] = None) -> str:
        """
        Generate a presigned PUT URL for bucket/key.

        Args:
            bucket: Bucket name
            key: Object key
            ttl: URL lifetime in seconds (default: config.default_ttl, 7 days)

        Returns:
            Presigned URL string

        Raises:
            SigningError: If the SDK cannot sign the request. The SDK
                exception is kept as __cause__.
        """
        if ttl is None:
            ttl = self._config.default_ttl
        url = self._sign("upload", bucket, key, ttl)
        logger.debug(f"Generated presigned upload URL for {bucket}/{key} (expires in {ttl}s)")
        return url

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    def _transfer(self, url: str, payload: Union[bytes, str], content_type: str) -> int:
        """PUT payload to a presigned URL; only HTTP 200 counts as stored."""
        try:
            response = self._http.put(url, content=payload, headers={'Content-Type': content_type})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransferError("Object upload failed", error=str(e)) from e

        if response.status_code != 200:
            raise TransferError(
                "Object upload failed",
                error=f"Upload returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code
            )
        return response.status_code

    def put(
        self,
        bucket: str,
        key: str,
        payload: Union[bytes, str],
        content_type: str = DEFAULT_CONTENT_TYPE
    ) -> UploadResult:
        """
        Upload an object through a presigned URL.

        Flow:
        1. Presign a PUT URL for bucket/key
        2. PUT the payload to it with the given Content-Type
        3. On HTTP 200, resolve download URLs for the same key

        If step 3 fails the bytes are already stored: the result has
        success=False but uploaded=True.

        Args:
            bucket: Bucket name
            key: Object key
            payload: Object body
            content_type: MIME type sent with the upload

        Returns:
            UploadResult; `data` holds the ObjectReference on success
        """
        started = time.perf_counter()
        config = self._config

        try:
            signed_url = self.generate_signed_url(bucket, key, config.default_ttl)
            status_code = self._transfer(signed_url, payload, content_type)
        except Exception as e:
            error = self._storage_error(e, "Object upload failed")
            result = error.to_result(
                UploadResult,
                message="Object upload failed",
                status_code=getattr(error, "status_code", None)
            )
            return self._finish("put", result, started, bucket, key, error=error)

        reference = self._resolve(config, bucket, key, config.default_ttl)
        if reference.success:
            result = UploadResult(
                success=True,
                status_code=status_code,
                uploaded=True,
                data=reference,
                message="Object has been uploaded successfully"
            )
        else:
            result = UploadResult.failure(
                "Object uploaded but failed to generate URL",
                error=reference.error,
                status_code=status_code,
                uploaded=True
            )
        return self._finish("put", result, started, bucket, key)

    def _resolve(self, config: R2Config, bucket: str, key: str, ttl: int) -> ObjectReference:
        try:
            url = self._sign("download", bucket, key, ttl)
        except SigningError as e:
            logger.error(f"Error generating object URL for {bucket}/{key}: {e.error}")
            record_storage_error(e.error_type)
            return e.to_result(ObjectReference, message="Failed to generate signed URL for object")

        return ObjectReference(
            success=True,
            status_code=200,
            expire=ttl,
            bucket=bucket,
            key=key,
            url=url,
            permanent_url=config.permanent_url(key),
            message="Generated signed URL for object"
        )

    def get_object_url(self, bucket: str, key: str, ttl: Optional[int] = None) -> ObjectReference:
        """
        Resolve access URLs for an object.

        Returns a presigned GET URL and, if a public domain is configured,
        the permanent URL `domain/key`. The object's existence is not checked.
        """
        started = time.perf_counter()
        config = self._config
        result = self._resolve(config, bucket, key, config.default_ttl if ttl is None else ttl)
        return self._finish("get_object_url", result, started, bucket, key, log_failure=False)

    def _probe(self, bucket: str, key: str) -> None:
        """Existence probe; raises NotFoundError if the object is absent."""
        try:
            self._client.head_object(Bucket=bucket, Key=key)
        except Exception as e:
            raise self._storage_error(e, "Object existence check failed") from e

    def delete_object(self, bucket: str, key: str) -> DeleteResult:
        """
        Delete an object after checking that it exists.

        An object removed by someone else between the probe and the delete
        is not detected; S3 deletes are idempotent and still answer 204.

        Returns:
            DeleteResult; success only when the delete answers HTTP 204
        """
        started = time.perf_counter()

        try:
            self._probe(bucket, key)
        except NotFoundError:
            logger.info(f"Object {bucket}/{key} does not exist, nothing to delete")
            result = DeleteResult.failure("Object does not exist")
            return self._finish("delete_object", result, started, bucket, key, log_failure=False)
        except StorageError as e:
            result = e.to_result(DeleteResult)
            return self._finish("delete_object", result, started, bucket, key, error=e)

        try:
            response = self._client.delete_object(Bucket=bucket, Key=key)
        except Exception as e:
            error = self._storage_error(e, "Object delete failed")
            result = error.to_result(DeleteResult)
            return self._finish("delete_object", result, started, bucket, key, error=error)

        metadata = response.get('ResponseMetadata', {})
        headers = metadata.get('HTTPHeaders', {})
        status_code = metadata.get('HTTPStatusCode')
        success = status_code == 204

        result = DeleteResult(
            success=success,
            message="Object has been deleted" if success else "Object delete failed",
            error=None if success else f"Delete returned HTTP {status_code}",
            status_code=status_code,
            attempts=metadata.get('RetryAttempts', 0) + 1,
            total_retry_delay=None,  # botocore does not report it
            request_id=metadata.get('RequestId'),
            extended_request_id=metadata.get('HostId'),
            cf_id=headers.get('cf-ray')
        )
        return self._finish("delete_object", result, started, bucket, key)

    # ------------------------------------------------------------------
    # Listing / health
    # ------------------------------------------------------------------

    def list_buckets(self) -> BucketListResult:
        """List all buckets in the account, as returned by the SDK."""
        started = time.perf_counter()
        try:
            response = self._client.list_buckets()
        except Exception as e:
            error = self._storage_error(e, "Failed to list buckets")
            result = error.to_result(BucketListResult, message="Failed to list buckets")
            return self._finish("list_buckets", result, started, error=error)

        result = BucketListResult(success=True, buckets=response.get('Buckets', []))
        return self._finish("list_buckets", result, started)

    def list_objects(self, bucket: str) -> ObjectListResult:
        """
        List objects in a bucket.

        Single page only (at most 1000 keys). `is_truncated` tells whether
        the SDK reported more pages; they are not fetched.
        """
        started = time.perf_counter()
        try:
            response = self._client.list_objects_v2(Bucket=bucket)
        except Exception as e:
            error = self._storage_error(e, "Failed to list objects")
            result = error.to_result(ObjectListResult, message="Failed to list objects", bucket=bucket)
            return self._finish("list_objects", result, started, bucket, error=error)

        result = ObjectListResult(
            success=True,
            bucket=bucket,
            objects=response.get('Contents', []),
            is_truncated=response.get('IsTruncated', False)
        )
        return self._finish("list_objects", result, started, bucket)

    def ping(self) -> PingResult:
        """Health check: time one list_buckets round trip."""
        started = time.perf_counter()
        try:
            self._client.list_buckets()
        except Exception as e:
            latency = (time.perf_counter() - started) * 1000
            error = self._storage_error(e, "Ping failed")
            result = error.to_result(PingResult, message="Ping failed", latency=latency)
            return self._finish("ping", result, started, error=error)

        latency = (time.perf_counter() - started) * 1000
        result = PingResult(success=True, latency=latency, message="Ping successful")
        return self._finish("ping", result, started)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _storage_error(exc: Exception, message: str) -> StorageError:
        """Normalize any exception raised by a collaborator."""
        if isinstance(exc, StorageError):
            return exc
        if is_sdk_error(exc):
            return protocol_error(exc, message)
        logger.exception(f"Unexpected storage error: {exc}")
        return ProtocolError(message, error=str(exc))

    def _finish(
        self,
        operation: str,
        result: R,
        started: float,
        bucket: Optional[str] = None,
        key: Optional[str] = None,
        error: Optional[StorageError] = None,
        log_failure: bool = True
    ) -> R:
        """Record metrics and log the outcome, then hand the result back."""
        duration = time.perf_counter() - started
        record_storage_request(operation, result.success, duration)

        if error is not None:
            record_storage_error(error.error_type)

        if result.success:
            log_storage_request(logger, operation, bucket=bucket, key=key, duration_ms=duration * 1000)
        elif log_failure:
            log_storage_failure(
                logger,
                operation,
                error=result.error or result.message,
                bucket=bucket,
                key=key,
                duration_ms=duration * 1000
            )
        return result


# Singleton instance
_r2_client: Optional[R2Client] = None


def get_r2_client() -> Optional[R2Client]:
    """
    Get the singleton R2 client built from settings.

    The first call also installs JSON logging for SERVICE_NAME at LOG_LEVEL.

    Returns:
        R2Client instance or None if R2 is not configured
    """
    global _r2_client

    if not default_settings.r2_configured:
        logger.warning(
            "R2 storage not configured. "
            "Set R2_ACCOUNT_ID, R2_ACCESS_KEY, and R2_SECRET_KEY."
        )
        return None

    if _r2_client is None:
        configure_logging(default_settings.service_name, default_settings.log_level)
        _r2_client = R2Client.from_settings(default_settings)
    return _r2_client


def reset_r2_client() -> None:
    """Drop the singleton, closing its HTTP client."""
    global _r2_client
    if _r2_client is not None:
        _r2_client.close()
    _r2_client = None
