"""
r2store - application-facing client for Cloudflare R2 object storage.
"""
from r2store.storage import R2Client, get_r2_client

__all__ = ["R2Client", "get_r2_client"]
