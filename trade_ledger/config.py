"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.

Business policy constants live here as well, so the rules that
gate eligibility and reporting are defined in exactly one place.
"""

import os
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


# --- Policy constants ---

# An invoice stays open for inter-bank transfers until this percentage
# of its value has reached the settlement country.
TRANSFER_COMPLETION_THRESHOLD = Decimal("70")

# Due date offset applied when an invoice is created without one.
DEFAULT_PAYMENT_TERMS_DAYS = 30

# Currencies every financial summary reports, even when idle.
SUPPORTED_CURRENCIES: tuple[str, ...] = ("USD", "PKR", "EUR", "AED")

# Fiscal years run July to June and are labeled by their start year.
FISCAL_YEAR_START_MONTH = 7


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Trade Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/trade_ledger"
    )
    # Every request runs as one transaction at this isolation level.
    # Payment recording relies on it to keep invoice totals consistent.
    DATABASE_ISOLATION_LEVEL: str = os.getenv(
        "DATABASE_ISOLATION_LEVEL", "SERIALIZABLE"
    )

    # Finance
    SETTLEMENT_COUNTRY: str = os.getenv("SETTLEMENT_COUNTRY", "Pakistan")

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
