"""
config.py
=========
Engine defaults, overridable through environment variables prefixed
with KUNDLI_ (e.g. KUNDLI_DEFAULT_AYANAMSA=3) or a local .env file.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class KundliSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="KUNDLI_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    default_ayanamsa: int = Field(1, ge=1, le=4)
    default_timezone: str = "Asia/Kolkata"
    # 1 cycle = 9 mahadashas = 120 years
    dasha_cycles: int = Field(1, ge=1, le=3)
    # Classical "balance of dasha" at birth; off until product sign-off
    apply_dasha_balance: bool = False
    log_level: str = "INFO"


@lru_cache
def get_settings() -> KundliSettings:
    return KundliSettings()
