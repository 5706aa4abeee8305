"""Configuration management for the car-wash POS engine."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

# Preset tender buttons shown next to the amount field
QUICK_TENDER_AMOUNTS: tuple[Decimal, ...] = tuple(
    Decimal(v) for v in ("100", "200", "300", "500", "1000")
)


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    host: str
    port: int
    debug: bool
    log_level: str
    loyalty_points_per_visit: Decimal
    currency_symbol: str
    timezone: str

    @property
    def tzinfo(self) -> ZoneInfo:
        """Business-local zone; history dates are whole days in this zone."""
        return ZoneInfo(self.timezone)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv(
                "DATABASE_URL",
                "sqlite+aiosqlite:///./carwash.db",
            ),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            loyalty_points_per_visit=Decimal(
                os.getenv("LOYALTY_POINTS_PER_VISIT", "0.25")
            ),
            currency_symbol=os.getenv("CURRENCY_SYMBOL", "₱"),
            timezone=os.getenv("TIMEZONE", "Asia/Manila"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for a process entry point."""
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
