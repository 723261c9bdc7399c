"""Configuration for the crowdfund engine."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings

from .ranking import DEFAULT_TOP_DONOR_CAPACITY


class CrowdfundSettings(BaseSettings):
    """Settings for campaigns created by the registry and the CLI.

    Every field can be overridden with a ``CROWDFUND_``-prefixed
    environment variable or a ``.env`` file.
    """

    # Ranking
    top_donor_capacity: int = DEFAULT_TOP_DONOR_CAPACITY

    # Logging
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    model_config = {
        "env_prefix": "CROWDFUND_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("top_donor_capacity")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> CrowdfundSettings:
    """Get cached settings instance."""
    return CrowdfundSettings()
