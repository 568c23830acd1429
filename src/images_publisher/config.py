"""
Application configuration using Pydantic Settings
"""

from typing import Optional

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core import ConfigurationError, PublicUrlConfig, PublisherConfig, StoreConfig
from .core.models import AddressingStyle, UrlFormat


class Settings(BaseSettings):
    """User preferences with environment variable support.

    Every field maps to ``IMAGES_PUBLISHER_<FIELD>`` and may also be set in
    a local ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="IMAGES_PUBLISHER_",
        env_file=".env",
        extra="ignore",
    )

    # Object store
    s3_endpoint: str = ""
    s3_region: str = "us-east-1"
    s3_bucket: str = ""
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_key_prefix: str = ""
    s3_path_style: AddressingStyle = "path"

    # Public URL
    use_custom_public_url: bool = False
    public_url_base: Optional[str] = None
    url_format: UrlFormat = "raw"

    # Compression service
    tinypng_api_key: Optional[str] = None

    # Seconds; unset keeps the HTTP transport defaults
    request_timeout: Optional[float] = None

    # Unset falls back to LOG_LEVEL, then INFO
    log_level: Optional[str] = None

    @field_validator("s3_path_style", "url_format", mode="before")
    @classmethod
    def lowercase_choice(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def store_config(self) -> StoreConfig:
        """Build the object store settings, checking required values."""
        missing = [
            name
            for name in (
                "s3_endpoint",
                "s3_bucket",
                "s3_access_key_id",
                "s3_secret_access_key",
            )
            if not getattr(self, name)
        ]
        if missing:
            env_names = ", ".join(f"IMAGES_PUBLISHER_{name.upper()}" for name in missing)
            raise ConfigurationError(f"Missing object store settings: {env_names}")

        return StoreConfig(
            endpoint=self.s3_endpoint,
            region=self.s3_region,
            bucket=self.s3_bucket,
            access_key_id=self.s3_access_key_id,
            secret_access_key=self.s3_secret_access_key,
            addressing_style=self.s3_path_style,
            key_prefix=self.s3_key_prefix,
        )

    def to_publisher_config(
        self, compress: bool = True, url_format: Optional[str] = None
    ) -> PublisherConfig:
        """Freeze the settings into the configuration passed to the pipeline."""
        store = self.store_config()
        try:
            return PublisherConfig(
                store=store,
                public_url=PublicUrlConfig.from_store(
                    store,
                    use_custom_base=self.use_custom_public_url,
                    custom_base=self.public_url_base,
                ),
                url_format=url_format or self.url_format,
                compression_api_key=self.tinypng_api_key,
                compress=compress,
                request_timeout=self.request_timeout,
            )
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc


def load_settings(**overrides) -> Settings:
    """Load settings from the environment, wrapping validation errors."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
