"""Configuration management for the photo editing service."""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union
import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from dotenv import load_dotenv

from .errors import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)

# Load environment variables
load_dotenv()

DEFAULT_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_SETTINGS_PATH = Path("config/settings.yaml")


class Config(BaseModel):
    """Main application configuration."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # API Keys
    api_key: str = Field(..., validation_alias=AliasChoices("API_KEY", "GEMINI_API_KEY", "api_key"))

    # Model
    gemini_model: str = Field(default=DEFAULT_MODEL, alias="GEMINI_MODEL")
    gemini_base_url: str = Field(default=DEFAULT_BASE_URL, alias="GEMINI_BASE_URL")

    # Timeout Settings
    timeout_gemini_seconds: float = Field(default=120.0, alias="TIMEOUT_GEMINI_SECONDS", gt=0)

    # Application Settings
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    port: int = Field(default=8000, alias="PORT")

    @field_validator("api_key")
    @classmethod
    def _api_key_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("API_KEY environment variable is not set")
        return value.strip()


# Global config instance
_config: Optional[Config] = None


def _load_settings_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.debug(f"No settings file at {path}, using defaults")
        return {}

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(
    settings_path: Union[str, Path, None] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Config:
    """
    Load configuration from the YAML settings file and environment.

    Environment variables win over the settings file. The API credential
    is mandatory: without it the application must not start.

    Args:
        settings_path: YAML file with non-secret settings
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Config instance

    Raises:
        ConfigurationError: If configuration is invalid or the credential is missing
    """
    global _config

    environ = os.environ if environ is None else environ
    path = Path(settings_path) if settings_path else DEFAULT_SETTINGS_PATH

    if not any(environ.get(key, "").strip() for key in ("API_KEY", "GEMINI_API_KEY")):
        raise ConfigurationError("API_KEY environment variable is not set")

    try:
        config_data = {
            **_load_settings_file(path),
            **environ,
        }
        _config = Config(**config_data)

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Failed to load configuration: {e}") from e

    logger.info(
        "Configuration loaded successfully",
        extra={
            "model": _config.gemini_model,
            "environment": _config.app_env,
            "timeout_seconds": _config.timeout_gemini_seconds,
        }
    )

    return _config


def get_config() -> Config:
    """
    Get the current configuration instance.

    Raises:
        ConfigurationError: If config not loaded
    """
    if _config is None:
        raise ConfigurationError("Configuration not loaded. Call load_config() first.")
    return _config
