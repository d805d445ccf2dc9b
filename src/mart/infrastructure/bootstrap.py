"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import logging

from mart.domain.model.context import CallerContext
from mart.infrastructure.http.api_client import ApiClient
from mart.infrastructure.http.http_product_repository import HttpProductRepository
from mart.infrastructure.http.http_quote_repository import HttpQuoteRepository
from mart.infrastructure.settings import Settings, load_settings


def settings() -> Settings:
    return load_settings()


def configure_logging(config: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def caller_context(config: Settings) -> CallerContext:
    """The identity the external session layer handed us via the environment."""
    return CallerContext(user_id=config.user_id, access_token=config.access_token)


def api_client(config: Settings) -> ApiClient:
    return ApiClient(config.api_url, timeout=config.request_timeout)


def product_repository(client: ApiClient, config: Settings) -> HttpProductRepository:
    return HttpProductRepository(client, currency=config.currency)


def quote_repository(client: ApiClient) -> HttpQuoteRepository:
    return HttpQuoteRepository(client)
