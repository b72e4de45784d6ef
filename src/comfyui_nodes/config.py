"""
Configuration for the ComfyUI media nodes.

Runtime settings are loaded from environment variables (prefix COMFYUI_) and an
optional .env file. Credentials are supplied by the host per execution and
validated with their own models.
"""

from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import CredentialsError


class ComfyUISettings(BaseSettings):
    """Runtime settings for ComfyUI access, polling and downloads."""

    # Default server, used by the CLI when no credentials are passed
    api_url: Optional[str] = Field(None, description="Base URL of the ComfyUI server")
    api_key: Optional[str] = Field(None, description="Bearer token for the ComfyUI server")

    # Polling
    poll_interval_seconds: float = Field(10.0, gt=0)
    # None leaves the per-node default in place
    initial_poll_delay_seconds: Optional[float] = Field(None, ge=0)
    default_timeout_minutes: float = Field(30.0, gt=0)

    # HTTP
    request_timeout_seconds: float = Field(60.0, gt=0)
    download_timeout_seconds: float = Field(300.0, gt=0)
    download_attempts: int = Field(3, ge=1)
    download_retry_delay_seconds: float = Field(2.0, ge=0)

    # Logging
    log_level: str = Field("INFO")
    log_file: Optional[str] = Field(None)

    model_config = SettingsConfigDict(
        env_prefix="COMFYUI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return level


@lru_cache()
def get_settings() -> ComfyUISettings:
    """Return the cached settings instance."""
    return ComfyUISettings()


class ComfyUICredentials(BaseModel):
    """Credential bundle for the comfyUIApi credential type."""

    api_url: str = Field(alias="apiUrl", min_length=1)
    api_key: Optional[str] = Field(None, alias="apiKey")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def auth_headers(self) -> Dict[str, str]:
        """Headers to send with every ComfyUI request."""
        if self.api_key:
            return {"Authorization": f"Bearer {self.api_key}"}
        return {}


class XCredentials(BaseModel):
    """Credential bundle for the twitterOAuth2Api credential type."""

    access_token: str = Field(alias="accessToken", min_length=1)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def load_comfyui_credentials(raw: Optional[Dict[str, Any]]) -> ComfyUICredentials:
    """
    Validate a raw ComfyUI credential mapping.

    Args:
        raw: Mapping with apiUrl and optional apiKey

    Returns:
        Validated credentials

    Raises:
        CredentialsError: If the mapping is missing or invalid
    """
    if not raw:
        raise CredentialsError("ComfyUI credentials are required")
    try:
        return ComfyUICredentials.model_validate(raw)
    except ValidationError as e:
        raise CredentialsError("Invalid ComfyUI credentials", cause=e) from e


def load_x_credentials(raw: Optional[Dict[str, Any]]) -> XCredentials:
    """Validate a raw X OAuth2 credential mapping."""
    if not raw:
        raise CredentialsError("X OAuth2 credentials are required")
    try:
        return XCredentials.model_validate(raw)
    except ValidationError as e:
        raise CredentialsError("Invalid X OAuth2 credentials", cause=e) from e
