"""
Test configuration and fixtures.

The boto3 S3 client is replaced by a MagicMock and uploads go through an
httpx.MockTransport, so no test touches the network unless it is marked
as an integration test.
"""
import os

# Keep a developer's .env / shell from leaking into tests
for _name in ("R2_ACCOUNT_ID", "R2_ACCESS_KEY", "R2_SECRET_KEY", "R2_PUBLIC_DOMAIN"):
    os.environ.pop(_name, None)

import httpx
import pytest
from unittest.mock import MagicMock
from botocore.exceptions import ClientError

from r2store.storage import R2Client


ACCOUNT_ID = "test-account"
ENDPOINT = f"https://{ACCOUNT_ID}.r2.cloudflarestorage.com"


def fake_presign(ClientMethod, Params, ExpiresIn):
    """Deterministic stand-in for boto3's generate_presigned_url."""
    return (
        f"{ENDPOINT}/{Params['Bucket']}/{Params['Key']}"
        f"?op={ClientMethod}&X-Amz-Expires={ExpiresIn}"
    )


def client_error(code: str, operation: str = "HeadObject", message: str = "error") -> ClientError:
    """Build a botocore ClientError with the given S3 error code."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def delete_response(status_code: int = 204, retry_attempts: int = 0) -> dict:
    return {
        "ResponseMetadata": {
            "RequestId": "req-123",
            "HostId": "host-456",
            "HTTPStatusCode": status_code,
            "HTTPHeaders": {"cf-ray": "ray-789"},
            "RetryAttempts": retry_attempts,
        }
    }


class UploadRecorder:
    """httpx handler recording every upload and answering with a fixed status."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests = []
        self.error = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.error is not None:
            raise self.error
        self.requests.append(request)
        return httpx.Response(self.status_code, text="" if self.status_code == 200 else "<Error/>")


@pytest.fixture
def mock_s3():
    """MagicMock standing in for a boto3 S3 client."""
    s3 = MagicMock()
    s3.generate_presigned_url.side_effect = fake_presign
    s3.list_buckets.return_value = {"Buckets": [{"Name": "bucket-a"}, {"Name": "bucket-b"}]}
    s3.list_objects_v2.return_value = {
        "Contents": [{"Key": "a.txt", "Size": 1}, {"Key": "b.txt", "Size": 2}],
        "IsTruncated": False,
    }
    s3.head_object.return_value = {"ContentLength": 5}
    s3.delete_object.return_value = delete_response()
    return s3


@pytest.fixture
def uploads():
    return UploadRecorder()


@pytest.fixture
def r2_client(mock_s3, uploads):
    """R2Client wired to the mocked SDK and transport."""
    http_client = httpx.Client(transport=httpx.MockTransport(uploads))
    client = R2Client(
        ACCOUNT_ID,
        "access-key",
        "secret-key",
        s3_client=mock_s3,
        http_client=http_client,
    )
    yield client
    http_client.close()
