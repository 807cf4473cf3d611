"""
Structured JSON logging for storage operations.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- bucket
- key
- duration_ms

Usage:
    from r2store.utils.logging import configure_logging, log_storage_request

    configure_logging('r2store', 'INFO')
    log_storage_request(logger, operation='put', bucket='media', key='a.txt', duration_ms=45.2)
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""

    _service_name = None
    _configured = False

    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging.

        Args:
            service_name: Service identifier attached to every record
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured

        cls._service_name = service_name

        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []

        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True

        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    bucket: Optional[str] = None,
    key: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.

    Args:
        event: Event name (mandatory)
        bucket: Optional bucket name
        key: Optional object key
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields

    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }

    if bucket:
        extra["bucket"] = bucket
    if key:
        extra["key"] = key
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    return extra


def log_storage_request(
    logger: logging.Logger,
    operation: str,
    bucket: Optional[str] = None,
    key: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """
    Log a completed storage request.

    Args:
        logger: Logger instance
        operation: Operation name (put, delete_object, ping, etc.) (required)
        bucket: Optional bucket name
        key: Optional object key
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="storage_request",
        bucket=bucket,
        key=key,
        duration_ms=duration_ms,
        operation=operation,
        **kwargs
    )

    target = f"{bucket}/{key}" if key else (bucket or "-")
    logger.info(f"Storage request: {operation} {target}", extra=extra)


def log_storage_failure(
    logger: logging.Logger,
    operation: str,
    error: str,
    bucket: Optional[str] = None,
    key: Optional[str] = None,
    duration_ms: Optional[float] = None,
    include_traceback: bool = False,
    **kwargs
):
    """
    Log a failed storage request.

    Args:
        logger: Logger instance
        operation: Operation name (required)
        error: Error message (required)
        bucket: Optional bucket name
        key: Optional object key
        duration_ms: Optional duration in milliseconds
        include_traceback: Whether to include stack trace (default: False)
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="storage_failure",
        bucket=bucket,
        key=key,
        duration_ms=duration_ms,
        operation=operation,
        error=str(error),
        **kwargs
    )

    message = f"Storage failure: {operation} - {error}"

    if include_traceback:
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            logger.error(message, extra=extra, exc_info=exc_info)
        else:
            logger.error(message, extra=extra)
    else:
        logger.error(message, extra=extra)


def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
