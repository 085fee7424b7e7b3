"""
Application settings and configuration management.

Uses Pydantic Settings for validation and environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_INSTRUCTION = (
    "Du är en hjälpsam svensk assistent om elpriser. När du behöver exakta siffror "
    "ska du kalla funktionen get_el_price. Redovisa i SEK/kWh och skriv datum/område."
)


class LLMSettings(BaseSettings):
    """Language model configuration."""

    model: str = Field(
        default="gemini/gemini-1.5-flash",
        description="Primary LiteLLM model string. The provider prefix tells LiteLLM "
                    "which API to route the request to.",
    )
    fallback_model: str = Field(
        default="gemini/gemini-1.5-flash-8b",
        description="Model used for a full second attempt when the primary model "
                    "is exhausted or fails.",
    )
    api_key: str = Field(default="", description="API key for the model's provider")
    max_tokens: int = Field(default=1024, description="Maximum tokens in response")
    temperature: float = Field(default=0.2, description="Sampling temperature")
    system_instruction: str = Field(
        default=DEFAULT_SYSTEM_INSTRUCTION,
        description="System instruction sent with every model call",
    )
    backoff_ms: list[int] = Field(
        default_factory=lambda: [500, 1000, 2000, 4000],
        description="Delays between retries of a transient model failure. "
                    "Set via LLM_BACKOFF_MS='[500,1000]'. Attempts = len + 1.",
    )

    model_config = SettingsConfigDict(env_prefix="LLM_")


class ToolSettings(BaseSettings):
    """External price tool configuration."""

    mcp_url: str = Field(
        default="http://localhost:3000/mcp",
        description="Streamable HTTP endpoint of the MCP price server",
    )
    mcp_tool_name: str = Field(
        default="elpris.getPrices",
        description="Name the MCP server registers the price tool under",
    )

    model_config = SettingsConfigDict(env_prefix="TOOL_")


class ServerSettings(BaseSettings):
    """HTTP server configuration."""

    host: str = Field(default="127.0.0.1", description="Interface to bind")
    port: int = Field(default=8787, description="Port to listen on")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the chat endpoint from a browser",
    )

    model_config = SettingsConfigDict(env_prefix="SERVER_")


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    environment: Literal["development", "production"] = Field(
        default="development", description="Deployment environment"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_file: Path | None = Field(default=None, description="Log file path")

    # Sub-configurations
    llm: LLMSettings = Field(default_factory=LLMSettings)
    tools: ToolSettings = Field(default_factory=ToolSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Load settings from file and environment.

    Args:
        env_file: Path to .env file (optional)

    Returns:
        Loaded settings instance
    """
    global _settings
    if env_file:
        _settings = Settings(_env_file=env_file)
    else:
        _settings = Settings()
    return _settings
