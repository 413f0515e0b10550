"""
Settings module for the allocation engine.

Environment-based configuration with sensible defaults.
All settings can be overridden via environment variables.
"""

import os
from functools import lru_cache
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    All settings have sensible defaults for development.
    """

    # Environment
    environment: str = Field(
        default="development",
        description="Environment name (development, staging, production)"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Agent Ensemble
    min_agents: int = Field(
        default=4,
        ge=1,
        description="Minimum number of selection agents per role"
    )
    max_agents: int = Field(
        default=20,
        ge=1,
        description="Maximum number of selection agents per role"
    )
    certificate_agent_count: int = Field(
        default=10,
        ge=1,
        description="Number of path agents in the certificate ensemble"
    )
    consensus_threshold: int = Field(
        default=3,
        ge=1,
        description="Minimum agents that must place a certificate"
    )
    min_ranking_score: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Rankings below this score are never placed in a level"
    )
    weight_jitter: float = Field(
        default=0.1,
        ge=0.0,
        lt=1.0,
        description="Uniform per-factor weight jitter for path agents (0.1 = +/-10%)"
    )
    agent_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single agent evaluation"
    )
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for reproducible runs (random when unset)"
    )

    # Learning Paths
    default_num_levels: int = Field(
        default=5,
        ge=2,
        le=10,
        description="Default number of learning levels"
    )
    default_max_per_level: int = Field(
        default=4,
        ge=1,
        description="Default certificate cap per level"
    )
    default_certificate_duration: float = Field(
        default=40.0,
        ge=0,
        description="Hours assumed for certificates without a duration"
    )
    default_certificate_cost: float = Field(
        default=500.0,
        ge=0,
        description="Cost assumed for certificates without a cost"
    )

    # Data Provider
    provider_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Maximum attempts for a data provider call"
    )
    provider_retry_interval_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Initial interval between data provider retries"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )
    datadog_api_key: Optional[str] = Field(
        default=None,
        description="Datadog API key (log forwarding disabled when unset)"
    )
    datadog_service: str = Field(
        default="talent-allocation",
        description="Service name reported to Datadog"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are cached for performance. To reload, use:
        get_settings.cache_clear()

    Returns:
        Settings instance
    """
    return Settings()


# Convenience function to load settings from env file
def load_settings_from_env(env_file: str = ".env") -> Settings:
    """Load settings from a specific env file."""
    if os.path.exists(env_file):
        from dotenv import load_dotenv
        load_dotenv(env_file)

    get_settings.cache_clear()
    return get_settings()
