"""Converter configuration loaded from environment variables.

Uses pydantic-settings so every field can be overridden via env vars;
the wrapping transport sets the envelope boundary and metadata template
per conversion run.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class LoggingConfig(BaseSettings):
    """Log output settings."""

    model_config = {"env_prefix": "LOG_"}

    json_output: bool = Field(default=True, description="Emit JSON lines instead of console output")
    level: str = Field(default="INFO", description="Root log level name")


class ConverterConfig(BaseSettings):
    """Root configuration for one conversion run."""

    model_config = {"env_prefix": "PST_STREAM_"}

    boundary: str = Field(description="Boundary token of the outer multipart envelope")
    json_template: str = Field(
        description="JSON metadata template containing the FILENAME placeholder",
    )
    input_path: str = Field(
        default="input.json",
        description="Path of the pre-decoded archive document",
    )
    seed: int | None = Field(
        default=None,
        description="Seed for boundary/filename randomness (None = seeded from the clock)",
    )
    max_embedding_depth: int = Field(
        default=16,
        ge=0,
        description="Maximum nesting of embedded messages inside one email",
    )
    max_folder_depth: int = Field(
        default=256,
        ge=1,
        description="Maximum folder nesting that is walked",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
