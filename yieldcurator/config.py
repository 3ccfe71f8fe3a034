"""Environment configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # DefiLlama yields API settings
    yields_api_base_url: str = "https://yields.llama.fi"
    http_timeout: float = 30.0

    # Pool snapshot cache
    pool_cache_path: str = "yieldcurator.db"
    pool_cache_ttl_seconds: int = 300

    # Logging
    log_file: str = "yieldcurator.log"
    log_level: str = "DEBUG"

    # Curation settings
    min_amount: float = 100.0
    max_backtest_pools: int = 5
    default_initial_amount: float = 10000.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "YIELDCURATOR_",
    }


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
