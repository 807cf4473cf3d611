"""
Storage module for Cloudflare R2 (S3-compatible object storage).

Uploads go through presigned URLs; every operation returns a result
object with a success flag instead of raising.
"""
from r2store.storage.config import R2Config
from r2store.storage.errors import (
    NotFoundError,
    ProtocolError,
    SigningError,
    StorageError,
    TransferError,
)
from r2store.storage.r2_client import R2Client, get_r2_client, reset_r2_client
from r2store.storage.results import (
    BucketListResult,
    DeleteResult,
    ObjectListResult,
    ObjectReference,
    PingResult,
    StorageResult,
    UploadResult,
)

__all__ = [
    "R2Client",
    "R2Config",
    "get_r2_client",
    "reset_r2_client",
    "StorageError",
    "SigningError",
    "TransferError",
    "NotFoundError",
    "ProtocolError",
    "StorageResult",
    "ObjectReference",
    "UploadResult",
    "DeleteResult",
    "PingResult",
    "BucketListResult",
    "ObjectListResult",
]
