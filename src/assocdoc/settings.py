"""Configuration management using Pydantic Settings."""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class NormalizerSettings(BaseSettings):
    """Normalizer settings loaded from environment variables (ASSOCDOC_*)."""

    model_config = SettingsConfigDict(
        env_prefix="ASSOCDOC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Correlation id is "<message_namespace>.<command-id>.<instance-id>"
    message_namespace: str = "aws.ssm"

    # Reject legacy parameters that match no step instead of ignoring them
    strict_parameters: bool = False

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "console"


# Global settings instance
_settings: Optional[NormalizerSettings] = None


def get_settings() -> NormalizerSettings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = NormalizerSettings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
