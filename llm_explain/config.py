"""
Configuration settings using pydantic-settings.

Settings are loaded from (in order of priority):
1. Environment variables (LLM_EXPLAIN_*, plus OPENAI_API_KEY / OPENAI_ENGINE)
2. Config file (~/.config/llm-explain/config, KEY=VALUE lines)
3. Default values

The config file is what `llm-explain setup` writes. It only ever holds the
credential and the model identifier; everything else is tuned through the
environment.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import dotenv_values, set_key
from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError, ErrorCode
from .xdg import get_config_file, get_session_log_path

logger = logging.getLogger(__name__)

# Keys stored in the config file
API_KEY = "OPENAI_API_KEY"
ENGINE_KEY = "OPENAI_ENGINE"

# Engines offered by `setup` and `change-engine`
ENGINES = ("gpt-3.5-turbo", "gpt-4")
DEFAULT_ENGINE = ENGINES[0]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ExplainSettings(BaseSettings):
    """llm-explain configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_EXPLAIN_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Credentials (shared names with the config file)
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("LLM_EXPLAIN_API_KEY", API_KEY),
        description="API key for the completion provider",
    )
    engine: str = Field(
        default=DEFAULT_ENGINE,
        validation_alias=AliasChoices("LLM_EXPLAIN_ENGINE", ENGINE_KEY),
        description="Model identifier passed to llm.get_model()",
    )

    # Completion options
    max_tokens: int = Field(
        default=100,
        ge=1,
        description="Maximum tokens in a response",
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    top_p: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Nucleus sampling probability mass",
    )

    # Session recording
    session_log: Path = Field(
        default_factory=get_session_log_path,
        description="Transcript written by script(1)",
    )
    prompt_style: str = Field(
        default="simple",
        description="Prompt heuristic used by explain: simple, regex",
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Logging level",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the level name; reject names logging does not know."""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {v!r}")
        return level


def load_settings(config_file: Optional[Union[str, Path]] = None) -> ExplainSettings:
    """Build settings from the environment and the config file.

    Args:
        config_file: Override for the config file location
    """
    path = Path(config_file) if config_file else get_config_file()
    logger.debug(f"Loading settings from {path}")
    try:
        return ExplainSettings(_env_file=path)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}", code=ErrorCode.CONFIG_INVALID) from e


def read_config(path: Optional[Union[str, Path]] = None) -> Optional[Dict[str, str]]:
    """Read the KEY=VALUE config file.

    Returns:
        Dict of stored values, or None if setup has never been run
    """
    path = Path(path) if path else get_config_file()
    if not path.is_file():
        return None
    return {key: value for key, value in dotenv_values(path).items() if value is not None}


def write_config(values: Dict[str, str], path: Optional[Union[str, Path]] = None) -> Path:
    """Merge values into the config file, creating it if needed.

    Returns:
        Path of the written config file
    """
    path = Path(path) if path else get_config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(mode=0o600, exist_ok=True)
    for key, value in values.items():
        set_key(str(path), key, value, quote_mode="never")
    logger.debug(f"Wrote {', '.join(values)} to {path}")
    return path


def require_credentials(settings: ExplainSettings) -> None:
    """Ensure an API key and engine are configured.

    Raises:
        ConfigurationError: if either is missing
    """
    if not settings.api_key or not settings.engine:
        raise ConfigurationError()
