"""
End-to-end tests against a real R2 bucket.

Skipped unless R2_TEST_ACCOUNT_ID, R2_TEST_ACCESS_KEY, R2_TEST_SECRET_KEY
and R2_TEST_BUCKET are set.
"""
import os
import uuid

import httpx
import pytest

from r2store.storage import R2Client

REQUIRED = ("R2_TEST_ACCOUNT_ID", "R2_TEST_ACCESS_KEY", "R2_TEST_SECRET_KEY", "R2_TEST_BUCKET")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not all(os.environ.get(name) for name in REQUIRED),
        reason="R2 test credentials not configured"
    ),
]


@pytest.fixture
def live_client():
    with R2Client(
        os.environ["R2_TEST_ACCOUNT_ID"],
        os.environ["R2_TEST_ACCESS_KEY"],
        os.environ["R2_TEST_SECRET_KEY"],
    ) as client:
        yield client


@pytest.fixture
def bucket():
    return os.environ["R2_TEST_BUCKET"]


def test_ping(live_client: R2Client):
    """Test the account answers."""
    result = live_client.ping()

    assert result.success is True
    assert result.latency >= 0


def test_upload_download_delete(live_client: R2Client, bucket: str):
    """Test bytes and content type survive a round trip, then delete."""
    key = f"r2store-tests/{uuid.uuid4()}.txt"
    payload = b"round trip payload"

    uploaded = live_client.put(bucket, key, payload, "text/plain")
    assert uploaded.success is True, uploaded.error

    response = httpx.get(uploaded.data.url)
    assert response.status_code == 200
    assert response.content == payload
    assert response.headers["content-type"].startswith("text/plain")

    listed = live_client.list_objects(bucket)
    assert listed.success is True

    deleted = live_client.delete_object(bucket, key)
    assert deleted.success is True
    assert deleted.status_code == 204

    again = live_client.delete_object(bucket, key)
    assert again.success is False
    assert again.message == "Object does not exist"
