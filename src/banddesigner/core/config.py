"""
Application configuration management using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Application Settings
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    app_name: str = Field(default="BandDesigner", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    api_v1_prefix: str = Field(default="/api/v1", description="API v1 prefix")
    host: str = Field(default="0.0.0.0", description="Bind address for banddesigner-server")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port for banddesigner-server")

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==========================================================================
    # Designer Geometry
    # ==========================================================================
    band_spacing: float = Field(default=20, ge=0, description="Gap between stacked bands")
    default_band_height: float = Field(
        default=100, ge=0, description="Fallback detail row height when a detail band has no usable height"
    )
    min_object_size: float = Field(
        default=20, ge=1, description="Minimum width/height of boxed controls"
    )
    min_z_index: int = Field(default=1, ge=1, description="Lowest z-index a control can have")
    display_padding: float = Field(
        default=2, ge=0, description="Padding added around a control's display box"
    )
    paste_offset: float = Field(default=5, description="Offset applied to pasted controls")
    nudge_step: float = Field(default=1, gt=0, description="Arrow-key move step")
    nudge_step_large: float = Field(default=10, gt=0, description="Shift+arrow move step")

    # ==========================================================================
    # Formula Engine
    # ==========================================================================
    formula_cache_size: int = Field(
        default=256, ge=0, description="Parsed formulas kept in the LRU cache"
    )
    currency_symbol: str = Field(default="¥", description="Symbol used by currency formatting")

    # ==========================================================================
    # Page Defaults (A4 at 96 dpi)
    # ==========================================================================
    page_width: float = Field(default=794, gt=0, description="Page width in px")
    page_height: float = Field(default=1123, gt=0, description="Page height in px")
    page_margin: float = Field(default=40, ge=0, description="Uniform page margin in px")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lower-case level names from the environment."""
        return str(v).upper()


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Global settings instance
settings = get_settings()
