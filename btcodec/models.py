"""Pydantic models for btcodec.

Provides validated configuration models for the codec, the interchange
conversion and logging.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator

# Each container level costs two interpreter frames while decoding, so the
# ceiling stays well under the default recursion limit of 1000.
DEFAULT_MAX_DEPTH = 256
MAX_DEPTH_LIMIT = 400

DEFAULT_INT_BITS = 64


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DuplicateKeyPolicy(str, Enum):
    """How the decoder treats a dictionary key that appears more than once."""

    LAST = "last"
    FIRST = "first"
    REJECT = "reject"


class CodecConfig(BaseModel):
    """Decoder configuration."""

    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        ge=1,
        le=MAX_DEPTH_LIMIT,
        description="Maximum nesting depth of lists and dictionaries",
    )
    duplicate_keys: DuplicateKeyPolicy = Field(
        default=DuplicateKeyPolicy.LAST,
        description="Duplicate dictionary key policy (last, first, reject)",
    )


class InterchangeConfig(BaseModel):
    """Interchange (JSON-like) conversion configuration."""

    int_bits: int = Field(
        default=DEFAULT_INT_BITS,
        ge=8,
        le=64,
        description="Signed integer width allowed in interchange output",
    )
    indent: int | None = Field(
        default=None,
        ge=0,
        le=8,
        description="JSON indentation (None for compact output)",
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Log level")
    log_file: str | None = Field(None, description="Log file path")
    structured_logging: bool = Field(
        default=False,
        description="Use structured (JSON) logging",
    )
    log_correlation_id: bool = Field(
        default=True,
        description="Include correlation IDs",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.upper()
        return v


class Config(BaseModel):
    """Main configuration model."""

    codec: CodecConfig = Field(
        default_factory=CodecConfig,
        description="Codec configuration",
    )
    interchange: InterchangeConfig = Field(
        default_factory=InterchangeConfig,
        description="Interchange conversion configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )
