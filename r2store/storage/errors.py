"""
Storage error taxonomy.

Errors are raised internally by R2Client helpers and converted into
result objects at the operation boundary. Only SigningError escapes,
from generate_signed_url.
"""
from typing import Optional, Type, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from r2store.storage.results import StorageResult

R = TypeVar("R", bound=StorageResult)

NOT_FOUND_CODES = {"404", "NotFound", "NoSuchKey"}


class StorageError(Exception):
    """Base class for storage failures."""

    error_type = "storage"

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error

    def to_result(self, result_cls: Type[R], message: Optional[str] = None, **fields) -> R:
        """Build a failure result of `result_cls` from this error."""
        return result_cls.failure(
            message or self.message,
            error=self.error or self.message,
            **fields
        )


class SigningError(StorageError):
    """Presigned URL generation failed."""
    error_type = "signing"


class TransferError(StorageError):
    """Raw PUT to a presigned URL failed or returned a non-200 status."""
    error_type = "transfer"

    def __init__(self, message: str, error: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, error)
        self.status_code = status_code


class ProtocolError(StorageError):
    """Any other error reported by the S3 SDK."""
    error_type = "protocol"

    def __init__(self, message: str, error: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message, error)
        self.code = code


class NotFoundError(ProtocolError):
    """Object is absent on the existence probe."""
    error_type = "not_found"


def error_code(exc: Exception) -> Optional[str]:
    """Extract the S3 error code from a botocore ClientError."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


def protocol_error(exc: Exception, message: str) -> ProtocolError:
    """Map an SDK exception to NotFoundError or ProtocolError."""
    code = error_code(exc)
    if code in NOT_FOUND_CODES:
        return NotFoundError("Object does not exist", error=str(exc), code=code)
    return ProtocolError(message, error=str(exc), code=code)


def is_sdk_error(exc: Exception) -> bool:
    return isinstance(exc, (ClientError, BotoCoreError))
