"""Configuration management for SheetNest."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SHEETNEST_",
        extra="ignore",
    )

    # Sheet defaults (same length unit as the part polygons)
    sheet_width: float = Field(default=3000.0, description="Default sheet width")
    sheet_height: float = Field(default=1500.0, description="Default sheet height")
    spacing: float = Field(default=2.0, description="Default gap between parts")

    # Search defaults
    rotation_steps: int = Field(default=4, description="Evenly spaced rotations to try per part")
    iterations: int = Field(default=50, description="Search attempts per nesting run")
    population_size: int = Field(default=10, description="Reserved, has no effect on the search")
    mutation_rate: float = Field(default=0.1, description="Swap probability per position per attempt")
    grid_step: float = Field(default=10.0, description="Anchor scan step in length units")
    seed: Optional[int] = Field(default=None, description="Random seed for reproducible runs")

    # Behaviour
    strict_compat: bool = Field(
        default=False,
        description="Drop unplaceable parts silently without reporting a count",
    )
    log_level: str = Field(default="INFO", description="Logging level for the CLI")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure(settings: Optional[Settings]) -> None:
    """Override global settings. Passing None resets to environment defaults."""
    global _settings
    _settings = settings
