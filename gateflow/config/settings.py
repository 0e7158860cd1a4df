"""
Environment-aware configuration settings for the gated workflow engine.

Supports dev, test, and prod environments with appropriate defaults.
"""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Supported deployment environments."""

    DEV = "dev"
    TEST = "test"
    PROD = "prod"


class RedisSettings(BaseSettings):
    """Redis connection settings."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    enabled: bool = Field(default=True, description="Use Redis as a read-through workflow cache")
    host: str = Field(default="localhost", description="Redis server hostname")
    port: int = Field(default=6379, description="Redis server port")
    db: int = Field(default=0, description="Redis database number")
    password: Optional[str] = Field(default=None, description="Redis password")
    max_connections: int = Field(default=50, description="Maximum connection pool size")
    socket_timeout: float = Field(default=5.0, description="Socket timeout")
    socket_connect_timeout: float = Field(default=5.0, description="Connection timeout")
    workflow_ttl: int = Field(default=3600, ge=1, description="Cached workflow TTL (seconds)")

    @property
    def url(self) -> str:
        """Generate Redis connection URL."""
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


class PostgresSettings(BaseSettings):
    """PostgreSQL connection settings."""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="PostgreSQL server hostname")
    port: int = Field(default=5432, description="PostgreSQL server port")
    database: str = Field(default="gateflow", description="Database name")
    user: str = Field(default="postgres", description="Database user")
    password: str = Field(default="postgres", description="Database password")
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Max overflow connections")
    pool_timeout: float = Field(default=10.0, description="Pool timeout in seconds (fail fast)")

    @property
    def url(self) -> str:
        """Generate PostgreSQL connection URL."""
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    @property
    def sync_url(self) -> str:
        """Generate synchronous PostgreSQL connection URL for migrations."""
        return (
            f"postgresql://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )


class DispatchSettings(BaseSettings):
    """Limits applied to event dispatch."""

    model_config = SettingsConfigDict(env_prefix="DISPATCH_")

    max_cascade_depth: int = Field(
        default=10_000,
        ge=1,
        description="Maximum depth of a same-event activation cascade",
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        case_sensitive=False,  # REDIS_HOST and redis_host both work
        extra="ignore",        # Ignore unknown environment variables
    )

    # Application
    app_name: str = Field(default="Gated Workflow Engine")
    environment: Environment = Field(default=Environment.DEV)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Sub-settings
    redis: RedisSettings = Field(default_factory=RedisSettings)
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    dispatch: DispatchSettings = Field(default_factory=DispatchSettings)

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str | Environment) -> Environment:
        """Validate and convert environment string to enum."""
        if isinstance(v, Environment):
            return v
        return Environment(v.lower())

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEV

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TEST

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PROD


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
