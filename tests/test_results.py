"""
Tests for result models and the error taxonomy.
"""
import pytest
from botocore.exceptions import NoCredentialsError

from r2store.storage.errors import (
    NotFoundError,
    ProtocolError,
    SigningError,
    TransferError,
    error_code,
    is_sdk_error,
    protocol_error,
)
from r2store.storage.results import DeleteResult, PingResult, UploadResult

from tests.conftest import client_error


class TestResults:
    """Tests for the uniform result shape."""

    def test_failure_constructor(self):
        """Test failure() fills the common fields."""
        result = PingResult.failure("Ping failed", error="timeout", latency=3.5)

        assert result.success is False
        assert result.message == "Ping failed"
        assert result.error == "timeout"
        assert result.latency == 3.5

    def test_upload_result_defaults(self):
        """Test an upload result is not uploaded unless stated."""
        result = UploadResult.failure("Object upload failed")

        assert result.uploaded is False
        assert result.data is None

    def test_serializes_to_dict(self):
        """Test results dump to plain dicts for callers."""
        result = DeleteResult(success=True, message="Object has been deleted", status_code=204)
        data = result.model_dump()

        assert data["success"] is True
        assert data["status_code"] == 204
        assert data["error"] is None


class TestErrors:
    """Tests for SDK error mapping."""

    @pytest.mark.parametrize("code", ["404", "NotFound", "NoSuchKey"])
    def test_not_found_codes(self, code):
        """Test not-found codes map to NotFoundError."""
        error = protocol_error(client_error(code), "Object delete failed")

        assert isinstance(error, NotFoundError)
        assert error.message == "Object does not exist"
        assert error.code == code

    def test_other_codes(self):
        """Test other codes map to ProtocolError with the given message."""
        error = protocol_error(client_error("SlowDown", message="Reduce your request rate"), "Failed to list objects")

        assert type(error) is ProtocolError
        assert error.message == "Failed to list objects"
        assert error.code == "SlowDown"
        assert "Reduce your request rate" in error.error

    def test_botocore_error_has_no_code(self):
        """Test non-ClientError SDK errors carry no code."""
        exc = NoCredentialsError()

        assert error_code(exc) is None
        assert is_sdk_error(exc) is True
        assert is_sdk_error(ValueError("x")) is False

    def test_to_result_uses_error_text(self):
        """Test to_result keeps the underlying error text."""
        error = TransferError("Object upload failed", error="HTTP 500", status_code=500)
        result = error.to_result(UploadResult, status_code=error.status_code)

        assert result.success is False
        assert result.message == "Object upload failed"
        assert result.error == "HTTP 500"
        assert result.status_code == 500

    def test_to_result_falls_back_to_message(self):
        """Test the message doubles as error text when none was given."""
        result = SigningError("Failed to sign").to_result(PingResult, message="Ping failed")

        assert result.message == "Ping failed"
        assert result.error == "Failed to sign"

    def test_error_types(self):
        """Test each error kind reports its metric label."""
        assert SigningError("x").error_type == "signing"
        assert TransferError("x").error_type == "transfer"
        assert ProtocolError("x").error_type == "protocol"
        assert NotFoundError("x").error_type == "not_found"
