"""
Configuration settings - edit values directly here
"""

from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings - configure values below"""

    # ===================
    # Kupo Configuration
    # ===================
    kupo_url: str = "http://localhost:1442"
    kupo_timeout: float = 300.0  # seconds per HTTP request

    # ===================
    # Retries & Concurrency
    # ===================
    retry_attempts: int = 11  # first try + 10 retries
    retry_base_delay: float = 1.0  # doubles on every retry
    retry_max_delay: float = 30.0
    concurrency: int = 5  # datum lookups in flight per query

    # ===================
    # VyFinance
    # ===================
    vyfi_api_url: str = "https://api.vyfi.io/lp?networkId=1&v2=true"
    metadata_cache_path: str = "vyfi_pools.json"


# Global settings instance - import this
settings = Settings()
