"""Runtime configuration, read from the environment (and a ``.env`` file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal

from dotenv import load_dotenv

from mart.domain.model.value_objects import parse_rate

load_dotenv()


@dataclass(frozen=True)
class Settings:
    api_url: str
    tax_rate: Decimal
    request_timeout: float
    quote_validity_days: int
    currency: str
    log_level: str
    access_token: str | None
    user_id: str | None


def load_settings() -> Settings:
    return Settings(
        api_url=os.getenv("MART_API_URL", "http://localhost:8080").rstrip("/"),
        # Single source of truth for quote tax
        tax_rate=parse_rate(os.getenv("MART_TAX_RATE", "0.15")),
        request_timeout=float(os.getenv("MART_REQUEST_TIMEOUT", "10")),
        quote_validity_days=int(os.getenv("MART_QUOTE_VALIDITY_DAYS", "30")),
        currency=os.getenv("MART_CURRENCY", "USD"),
        log_level=os.getenv("MART_LOG_LEVEL", "INFO").upper(),
        access_token=os.getenv("MART_ACCESS_TOKEN") or None,
        user_id=os.getenv("MART_USER_ID") or None,
    )
