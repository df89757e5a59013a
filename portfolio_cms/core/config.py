"""Pydantic-settings configuration for the Portfolio CMS.

Loads all service connection parameters from .env file with sensible
defaults for local development. Computed fields produce fully-formed
connection URLs for MySQL and Redis.
"""

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Project
    project_name: str = "Portfolio CMS"
    debug: bool = False
    environment: str = "development"

    # MySQL
    mysql_host: str = "localhost"
    mysql_port: int = 3306
    mysql_db: str = "portfolio_cms"
    mysql_user: str = "portfolio_user"
    mysql_password: str = ""

    # Full SQLAlchemy URL override (e.g. sqlite+aiosqlite:///./dev.db)
    database_url: str = ""

    # SQLAlchemy pool settings
    db_pool_size: int = 10
    db_max_overflow: int = 10
    db_pool_pre_ping: bool = True

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: str = ""
    redis_max_connections: int = 50
    cache_enabled: bool = True

    # JWT Authentication
    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = 60
    jwt_refresh_expiry_days: int = 7

    # Cookies
    cookie_secure: bool = False

    # CORS
    allowed_origins: str = ""  # Comma-separated extra CORS origins

    # Uploads
    upload_dir: str = "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_default: str = "100/minute"
    rate_limit_auth: str = "10/minute"
    rate_limit_engagement: str = "30/minute"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @computed_field
    @property
    def async_database_url(self) -> str:
        """Async connection string for aiomysql."""
        if self.database_url:
            return self.database_url
        return (
            f"mysql+aiomysql://{self.mysql_user}:{self.mysql_password}"
            f"@{self.mysql_host}:{self.mysql_port}/{self.mysql_db}?charset=utf8mb4"
        )

    @computed_field
    @property
    def sync_database_url(self) -> str:
        """Sync connection string for pymysql (used by Alembic and scripts)."""
        if self.database_url:
            return self.database_url.replace("+aiosqlite", "").replace(
                "+aiomysql", "+pymysql"
            )
        return (
            f"mysql+pymysql://{self.mysql_user}:{self.mysql_password}"
            f"@{self.mysql_host}:{self.mysql_port}/{self.mysql_db}?charset=utf8mb4"
        )

    @computed_field
    @property
    def redis_url(self) -> str:
        """Redis connection URL."""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def cors_origins(self) -> list[str]:
        """Default local origins plus any configured extras."""
        origins = ["http://localhost:3000", "http://localhost:3001"]
        if self.allowed_origins:
            origins.extend(
                o.strip() for o in self.allowed_origins.split(",") if o.strip()
            )
        return origins


# Singleton instance
settings = Settings()
