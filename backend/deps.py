"""
Shared FastAPI dependencies.

Services are built once in main.lifespan() and kept on app.state; routers
reach them through these functions so tests can swap them with
app.dependency_overrides.
"""

from __future__ import annotations

from fastapi import Request

from services.order_store import OrderStore
from services.price_catalog import PriceCatalog
from services.token_service import TokenIssuer
from services.webhook_service import WebhookProcessor


def _state(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise RuntimeError(f"{name} not initialized (lifespan not run?)")
    return service


def get_catalog(request: Request) -> PriceCatalog:
    return _state(request, "catalog")


def get_order_store(request: Request) -> OrderStore:
    return _state(request, "order_store")


def get_token_issuer(request: Request) -> TokenIssuer:
    return _state(request, "token_issuer")


def get_webhook_processor(request: Request) -> WebhookProcessor:
    return _state(request, "webhook_processor")
