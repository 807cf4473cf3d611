"""
Immutable client configuration.

The public domain is the only value callers change after construction.
Changing it produces a new R2Config instead of mutating the current one,
so a request that already read the config keeps a consistent view.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

R2_ENDPOINT_TEMPLATE = "https://{account_id}.r2.cloudflarestorage.com"

# 7 days, the longest expiry SigV4 accepts
DEFAULT_URL_TTL = 604800


def build_endpoint(account_id: str) -> str:
    """Derive the R2 S3 API endpoint from an account identifier."""
    return R2_ENDPOINT_TEMPLATE.format(account_id=account_id)


class R2Config(BaseModel):
    """Connection settings for one R2 account."""
    model_config = ConfigDict(frozen=True)

    account_id: str
    access_key: str = Field(..., repr=False)
    secret_key: str = Field(..., repr=False)
    region: str = "auto"
    public_domain: Optional[str] = None
    default_ttl: int = DEFAULT_URL_TTL  # lifetime of presigned URLs, seconds

    @property
    def endpoint(self) -> str:
        return build_endpoint(self.account_id)

    def with_public_domain(self, domain: Optional[str]) -> "R2Config":
        """Return a copy with `domain` as the public domain (not validated)."""
        return self.model_copy(update={"public_domain": domain})

    def permanent_url(self, key: str) -> Optional[str]:
        """Public URL for `key`, or None if no public domain is configured."""
        if not self.public_domain:
            return None
        return f"{self.public_domain}/{key}"
