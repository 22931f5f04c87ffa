"""
Payment Routes — Snap checkout and notifications

Endpoints:
    GET  /api/config              — Client key + snap.js URL for the page
    GET  /api/packages            — Public price catalog
    POST /api/token               — Issue a Snap token for a package
    POST /api/webhook             — Midtrans HTTP notification
    GET  /api/order/{order_id}    — Check order status

The original /api/midtrans-token and /api/midtrans-webhook paths are kept
as hidden aliases for pages that still post there.
"""
import logging

from fastapi import APIRouter, Depends, Request

from config import settings
from deps import get_catalog, get_order_store, get_token_issuer, get_webhook_processor
from domain.errors import MalformedPayloadError, OrderNotFoundError
from middleware.rate_limit import rate_limit
from models import (
    ClientConfigResponse,
    OrderResponse,
    PackageListResponse,
    TokenRequest,
    TokenResponse,
    WebhookAck,
)
from services.order_store import OrderStore
from services.price_catalog import PriceCatalog
from services.token_service import TokenIssuer
from services.webhook_service import WebhookProcessor
from utils.validators import validated_order_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["payments"])

_token_rate_limit = rate_limit(
    max_requests=settings.token_rate_limit,
    window_seconds=settings.token_rate_window_seconds,
    scope="token",
)


# ════════════════════════════════════════════════════════════════════
# Page Configuration
# ════════════════════════════════════════════════════════════════════


@router.get("/config", response_model=ClientConfigResponse)
async def get_client_config():
    """Public gateway settings (the server key is never exposed)."""
    return ClientConfigResponse(
        client_key=settings.midtrans_client_key,
        is_production=settings.midtrans_is_production,
        snap_js_url=settings.snap_js_url,
    )


@router.get("/packages", response_model=PackageListResponse)
async def list_packages(catalog: PriceCatalog = Depends(get_catalog)):
    """Packages with their authoritative prices."""
    return PackageListResponse(packages=catalog.packages())


# ════════════════════════════════════════════════════════════════════
# Token
# ════════════════════════════════════════════════════════════════════


@router.post("/token", response_model=TokenResponse)
@router.post("/midtrans-token", response_model=TokenResponse, include_in_schema=False)
async def request_token(
    req: TokenRequest,
    issuer: TokenIssuer = Depends(get_token_issuer),
    _rate=Depends(_token_rate_limit),
):
    """Create an order and return its Snap token."""
    result = await issuer.request_token(
        customer_name=req.customer_name,
        customer_contact=req.customer_contact,
        package_id=req.package_id,
    )
    return TokenResponse(
        token=result.token,
        order_id=result.order_id,
        redirect_url=result.redirect_url,
    )


# ════════════════════════════════════════════════════════════════════
# Webhook
# ════════════════════════════════════════════════════════════════════


@router.post("/webhook", response_model=WebhookAck)
@router.post("/midtrans-webhook", response_model=WebhookAck, include_in_schema=False)
async def payment_webhook(
    request: Request,
    processor: WebhookProcessor = Depends(get_webhook_processor),
):
    """
    Midtrans HTTP notification.

    Every verified notification is acknowledged with 200, including ones
    mapped to UNKNOWN, so the gateway stops retrying.
    """
    try:
        notification = await request.json()
    except ValueError:
        raise MalformedPayloadError("Invalid JSON payload")

    await processor.handle(notification)
    return WebhookAck()


# ════════════════════════════════════════════════════════════════════
# Order Status
# ════════════════════════════════════════════════════════════════════


@router.get("/order/{order_id}", response_model=OrderResponse)
async def get_order_status(
    order_id: str = Depends(validated_order_id),
    store: OrderStore = Depends(get_order_store),
):
    """Get current status of an order."""
    order = await store.get(order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    return OrderResponse.from_order(order)
