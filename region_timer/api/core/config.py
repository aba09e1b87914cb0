"""Application configuration using Pydantic Settings"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(..., description="PostgreSQL database URL")
    database_ssl: str = Field(default="prefer", description="asyncpg ssl mode")
    db_min_size: int = Field(default=1, description="Minimum pool size")
    db_max_size: int = Field(default=5, description="Maximum pool size")
    run_migrations: bool = Field(default=True, description="Apply pending migrations on startup")

    # Environment
    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    # Server Configuration
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=3000, description="Server port")
    frontend_url: str = Field(default="http://localhost:5173", description="Frontend URL for CORS")
    static_dir: Path = Field(default=Path("./static"), description="Built frontend directory")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @field_validator("database_ssl")
    @classmethod
    def validate_database_ssl(cls, v: str) -> str:
        valid_modes = ["disable", "allow", "prefer", "require", "verify-ca", "verify-full"]
        v_lower = v.lower()
        if v_lower not in valid_modes:
            raise ValueError(f"database_ssl must be one of {', '.join(valid_modes)}")
        return v_lower

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS allowed origins"""
        return [self.frontend_url]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()  # type: ignore[call-arg]
