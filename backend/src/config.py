"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development.

    Environment Variables:
        DATABASE_URL: SQLAlchemy connection string
        DEBUG: Enable debug mode (default False)
        LOG_LEVEL: Logging level (default INFO)
        LOG_JSON: Emit JSON log lines (default True)
        ENVIRONMENT: development | staging | production
        CORS_ORIGINS: Comma-separated list of allowed origins
        MAINTENANCE_MODE: Close the portal to everyone but ADMIN users
        AUDIT_BUSINESS_FAILURES: Audit refused operations as FAILURE records
        AUDIT_QUERY_MAX_PAGE_SIZE: Upper bound for audit log page size
    """

    # Database
    DATABASE_URL: str = "sqlite:///./qcompliance.db"

    # Application
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"

    # Workflow
    MAINTENANCE_MODE: bool = False
    AUDIT_BUSINESS_FAILURES: bool = True
    AUDIT_QUERY_MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for singleton behavior.
    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()


# Module-level settings instance
settings = get_settings()
