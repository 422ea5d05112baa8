"""Application configuration."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from scuba_log_server.interchange.units import UnitSystem


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SCUBA_LOG_",
        case_sensitive=False,
        extra="ignore",  # Allow extra env vars without error
    )

    # API
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_prefix: str = Field(default="/api/v1", description="API prefix")

    # Database
    database_url: str = Field(
        default=f"sqlite+aiosqlite:///{Path.home() / '.scuba-log' / 'dives.db'}",
        description="SQLAlchemy async database URL",
    )

    # Interchange
    default_unit_system: UnitSystem = Field(
        default=UnitSystem.METRIC,
        description="Unit system for exports when none is requested",
    )
    export_directory: Path = Field(
        default=Path.home() / ".scuba-log" / "exports",
        description="Directory the CLI writes export files to",
    )
    max_import_bytes: int = Field(
        default=20 * 1024 * 1024,
        description="Largest import file accepted (bytes)",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )

    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite."""
        return self.database_url.startswith("sqlite")


# Global settings instance
settings = Settings()
