"""
Configuration using Pydantic Settings.
R2 credentials and logging options are loaded here with sensible defaults.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    # Logging
    service_name: str = "r2store"
    log_level: str = "INFO"

    # Cloudflare R2
    # Endpoint is derived: https://<account_id>.r2.cloudflarestorage.com
    r2_account_id: Optional[str] = None
    r2_access_key: Optional[str] = None  # R2 access key ID
    r2_secret_key: Optional[str] = None  # R2 secret access key
    r2_region: str = "auto"  # R2 uses "auto" for region
    r2_public_domain: Optional[str] = None  # e.g., https://media.example.com
    r2_presign_expiration: int = 604800  # 7 days, SigV4 maximum

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def r2_configured(self) -> bool:
        """Whether all R2 credentials are present."""
        return all([self.r2_account_id, self.r2_access_key, self.r2_secret_key])


# Global settings instance
settings = Settings()
