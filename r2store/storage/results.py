"""
Result models returned by R2Client operations.

Every operation returns a StorageResult subclass with a success flag.
Failures carry a human-readable message and the underlying error text.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class StorageResult(BaseModel):
    """Uniform result shape shared by all operations."""
    success: bool = Field(..., description="Whether the operation succeeded")
    message: Optional[str] = Field(None, description="Human-readable outcome")
    error: Optional[str] = Field(None, description="Underlying error text on failure")

    @classmethod
    def failure(cls, message: str, error: Optional[str] = None, **fields):
        """Build a failed result."""
        return cls(success=False, message=message, error=error, **fields)


class ObjectReference(StorageResult):
    """Transient and permanent access URLs for one object."""
    status_code: Optional[int] = None
    bucket: Optional[str] = None
    key: Optional[str] = None
    url: Optional[str] = Field(None, description="Presigned GET URL")
    permanent_url: Optional[str] = Field(None, description="Public domain URL, if configured")
    expire: Optional[int] = Field(None, description="Presigned URL lifetime in seconds")


class UploadResult(StorageResult):
    """
    Outcome of put().

    `uploaded` reports the transfer alone. An upload can succeed while URL
    resolution fails, in which case success is False but uploaded is True.
    """
    status_code: Optional[int] = None
    uploaded: bool = False
    data: Optional[ObjectReference] = None


class DeleteResult(StorageResult):
    """Outcome of delete_object() with protocol diagnostics."""
    status_code: Optional[int] = None
    attempts: Optional[int] = None
    total_retry_delay: Optional[int] = None
    request_id: Optional[str] = None
    extended_request_id: Optional[str] = None
    cf_id: Optional[str] = None


class PingResult(StorageResult):
    """Health check outcome; latency in milliseconds."""
    latency: Optional[float] = None


class BucketListResult(StorageResult):
    buckets: List[Dict[str, Any]] = Field(default_factory=list)


class ObjectListResult(StorageResult):
    """Single page of objects; is_truncated is True when more pages exist."""
    bucket: Optional[str] = None
    objects: List[Dict[str, Any]] = Field(default_factory=list)
    is_truncated: bool = False
