"""S3-compatible object storage configuration settings.

Environment variables use STORAGE_ prefix.
Example: STORAGE_ENDPOINT="http://localhost:9000"
         STORAGE_BUCKET="uploads"

Supports:
- AWS S3 (leave endpoint empty)
- MinIO, Cloud.ru, Huawei OBS and other S3-compatible services (set endpoint)
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Presigned URLs handed out by the client are valid for 15 minutes unless configured.
DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS = 15 * 60


class StorageSettings(BaseSettings):
    """S3-compatible object storage settings.

    Environment variables use STORAGE_ prefix.
    Example: STORAGE_ACCESS_KEY=minioadmin

    The five connection fields (endpoint, access key, secret key, bucket,
    region) are everything the client needs; the remaining fields tune the
    botocore client and the batch presign behaviour.
    """

    # ──────────────────────────────────────────────────────────────
    # S3 Connection Configuration
    # ──────────────────────────────────────────────────────────────

    endpoint: str = Field(
        default="",
        description="S3-compatible endpoint URL. Empty for AWS S3.",
    )

    access_key: SecretStr = Field(
        default=SecretStr(""),
        description="S3 access key ID",
    )

    secret_key: SecretStr = Field(
        default=SecretStr(""),
        description="S3 secret access key",
    )

    bucket: str = Field(
        default="",
        description="Bucket every operation targets",
    )

    region: str = Field(
        default="us-east-1",
        description="Region used for request signing",
    )

    # ──────────────────────────────────────────────────────────────
    # Client Tuning
    # ──────────────────────────────────────────────────────────────

    force_path_style: bool = Field(
        default=True,
        description="Use path-style addressing (bucket in path), required by most non-AWS endpoints",
    )

    signature_version: str = Field(
        default="s3v4",
        description="botocore signature version used for requests and presigned URLs",
    )

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum retry attempts handed to botocore",
    )

    retry_mode: str = Field(
        default="standard",
        description="botocore retry mode: standard, adaptive, or legacy",
    )

    timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Connect and read timeout in seconds",
    )

    max_pool_connections: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Maximum number of connections in the botocore connection pool",
    )

    # ──────────────────────────────────────────────────────────────
    # Presigned URLs and Listing
    # ──────────────────────────────────────────────────────────────

    presigned_url_expiry_seconds: int = Field(
        default=DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS,
        ge=1,
        le=604800,  # 7 days, the SigV4 maximum
        description="Presigned URL expiration in seconds (default 15 minutes)",
    )

    list_all_pages: bool = Field(
        default=True,
        description="Follow continuation tokens when listing a prefix. False lists the first page only.",
    )

    presign_max_concurrency: int | None = Field(
        default=None,
        ge=1,
        description="Cap on concurrent presign tasks in batch listing. None launches one task per object.",
    )

    # ──────────────────────────────────────────────────────────────
    # Validators
    # ──────────────────────────────────────────────────────────────

    @field_validator("retry_mode")
    @classmethod
    def _validate_retry_mode(cls, value: str) -> str:
        """Validate retry_mode is one of the allowed values."""
        allowed_modes = {"standard", "adaptive", "legacy"}
        if value not in allowed_modes:
            raise ValueError(f"retry_mode must be one of {allowed_modes}, got {value}")
        return value

    @field_validator("endpoint", "bucket", "region", mode="before")
    @classmethod
    def _strip_whitespace(cls, value: Any) -> Any:
        """Strip surrounding whitespace picked up from env files."""
        if isinstance(value, str):
            return value.strip()
        return value

    # ──────────────────────────────────────────────────────────────
    # Computed Properties
    # ──────────────────────────────────────────────────────────────

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_configured(self) -> bool:
        """Check that both static credentials are present and non-empty."""
        return bool(
            self.access_key.get_secret_value() and self.secret_key.get_secret_value()
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_custom_endpoint(self) -> bool:
        """Check if configured for an S3-compatible service (custom endpoint)."""
        return bool(self.endpoint)

    # ──────────────────────────────────────────────────────────────
    # Helper Methods
    # ──────────────────────────────────────────────────────────────

    def get_boto3_config(self) -> dict[str, Any]:
        """Get keyword arguments for creating the aioboto3 S3 client.

        Static credentials always take precedence over the botocore
        credential chain; no session token is sent.

        Returns:
            Dictionary with credentials, region and (optionally) endpoint_url.
        """
        config: dict[str, Any] = {
            "region_name": self.region,
            "aws_access_key_id": self.access_key.get_secret_value(),
            "aws_secret_access_key": self.secret_key.get_secret_value(),
            "aws_session_token": None,
        }

        if self.endpoint:
            config["endpoint_url"] = self.endpoint

        return config

    def get_s3_addressing_config(self) -> dict[str, str]:
        """Get the ``s3`` section for botocore's Config."""
        return {"addressing_style": "path" if self.force_path_style else "auto"}

    # ──────────────────────────────────────────────────────────────
    # Model Configuration
    # ──────────────────────────────────────────────────────────────

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )
