"""Storage manager configuration using pydantic-settings.

Configuration hierarchy:
- RetryConfig: Retry budget for asynchronously provisioned backends
- AzureConfig: Storage account defaults for the azure provider
- S3Config: Bucket and IAM settings for the s3 provider
- LocalConfig: Root directory for the local provider
- AuthConfig: Bearer token verification and role names
- LoggingConfig: Logging behavior
- ServerConfig: HTTP server settings
- ManagerConfig: Main config aggregating all sub-configs

Environment variable prefix: STORAGEMANAGER_
Example: STORAGEMANAGER_PROVIDER=s3
"""

import tempfile
from enum import StrEnum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderType(StrEnum):
    """Supported storage backends."""

    AZURE = "azure"
    S3 = "s3"
    LOCAL = "local"


class RetryConfig(BaseSettings):
    """Retry configuration for backends with asynchronous provisioning.

    A container creation may block the caller for up to
    max_retries * delay seconds (or deadline, if set).
    """

    model_config = SettingsConfigDict(env_prefix="STORAGEMANAGER_RETRY_")

    max_retries: int = Field(default=5, ge=0, description="Maximum number of attempts")
    delay: float = Field(default=10.0, ge=0.0, description="Delay between attempts (seconds)")
    deadline: float | None = Field(
        default=None,
        gt=0.0,
        description="Overall time budget for one retry loop (seconds)",
    )


class AzureConfig(BaseSettings):
    """Azure storage account configuration.

    Every organization gets its own storage account inside the configured
    resource group. The *_days settings drive the lifecycle rule applied to
    old blob versions.
    """

    model_config = SettingsConfigDict(env_prefix="STORAGEMANAGER_AZURE_")

    subscription_id: str = Field(default="", description="Azure subscription ID")
    resource_group: str = Field(default="", description="Resource group for storage accounts")
    region: str = Field(default="westeurope", description="Region for new storage accounts")

    # CORS
    cors_origins: list[str] = Field(default=[], description="Allowed CORS origins")
    cors_max_age: int = Field(default=3600, description="CORS preflight max age (seconds)")

    # Account defaults
    versioning_blobs_enabled: bool = Field(default=True)
    soft_delete_blobs_enabled: bool = Field(default=True)
    soft_delete_containers_enabled: bool = Field(default=True)
    retention_days_deleted_blobs: int = Field(default=14)
    retention_days_deleted_containers: int = Field(default=14)

    # Lifecycle rule for old blob versions
    blob_versions_until_cool_tier_days: float = Field(default=1)
    blob_versions_until_archive_tier_days: float = Field(default=2)
    blob_versions_until_delete_days: float = Field(default=14)


class S3Config(BaseSettings):
    """S3/MinIO storage configuration.

    Organizations and spaces live as key prefixes inside one bucket.
    Example: STORAGEMANAGER_S3_ENDPOINT=http://minio:9000
    """

    model_config = SettingsConfigDict(env_prefix="STORAGEMANAGER_S3_")

    endpoint: str = Field(default="http://minio:9000", description="S3 endpoint URL")
    iam_endpoint: str = Field(
        default="",
        description="IAM endpoint URL (defaults to the S3 endpoint)",
    )
    bucket: str = Field(default="storagemanager", description="S3 bucket name")
    region: str = Field(default="us-east-1", description="S3 region")

    # Credentials - empty defaults force explicit configuration
    access_key: str = Field(default="", description="S3 access key (required)")
    secret_key: str = Field(default="", description="S3 secret key (required)")


class LocalConfig(BaseSettings):
    """Local filesystem storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGEMANAGER_LOCAL_")

    root: str = Field(
        default_factory=tempfile.gettempdir,
        description="Directory holding organization directories",
    )


class AuthConfig(BaseSettings):
    """Bearer token configuration.

    Roles are read from the realm_access.roles claim.
    """

    model_config = SettingsConfigDict(env_prefix="STORAGEMANAGER_AUTH_")

    jwt_key: str = Field(default="", description="Key used to verify bearer tokens")
    algorithms: list[str] = Field(default=["RS256"])
    audience: list[str] = Field(default=[])
    superuser_role: str = Field(default="SDK_ADMIN")
    org_create_role: str = Field(default="org_create_permission")


class LoggingConfig(BaseSettings):
    """Logging configuration.

    Supports both text and JSON formats for different environments:
    - text: Human-readable for local development
    - json: Structured logging for production (log aggregation)
    """

    model_config = SettingsConfigDict(env_prefix="STORAGEMANAGER_LOGGING_")

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="text", description="Log format (text, json)")
    service_name: str = Field(default="storagemanager", description="Service identifier in logs")
    rate_limit_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="Window for dropping repeated non-error records (0 disables)",
    )


class ServerConfig(BaseSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGEMANAGER_SERVER_")

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )


class ManagerConfig(BaseSettings):
    """Main configuration aggregating all sub-configs.

    Environment variable prefix: STORAGEMANAGER_
    Sub-configs use their own prefixes (STORAGEMANAGER_S3_, etc.)
    """

    model_config = SettingsConfigDict(
        env_prefix="STORAGEMANAGER_",
        env_nested_delimiter="__",
    )

    provider: ProviderType = Field(default=ProviderType.LOCAL, description="Storage backend")

    # Sub-configurations
    retry: RetryConfig = Field(default_factory=RetryConfig)
    azure: AzureConfig = Field(default_factory=AzureConfig)
    s3: S3Config = Field(default_factory=S3Config)
    local: LocalConfig = Field(default_factory=LocalConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


@lru_cache
def get_config() -> ManagerConfig:
    """Get cached configuration singleton."""
    return ManagerConfig()
