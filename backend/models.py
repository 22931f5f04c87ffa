"""
Pydantic models for orders and request/response validation.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from domain.enums import OrderStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Order ───────────────────────────────────────────────────────────

class Order(BaseModel):
    """
    One checkout attempt.

    Frozen: changes go through OrderStore.update(), which hands the mutator
    the current order and stores the copy it returns.
    """
    model_config = ConfigDict(frozen=True)

    order_id: str
    customer_name: str
    customer_contact: str
    package_id: str
    amount: int
    status: OrderStatus = OrderStatus.CREATED
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    raw_notification: Optional[Dict[str, Any]] = None
    # True when the order was first seen through a gateway notification
    is_placeholder: bool = False

    @classmethod
    def placeholder(cls, order_id: str) -> "Order":
        """Minimal order for a notification whose order is not in the store."""
        return cls(
            order_id=order_id,
            customer_name="",
            customer_contact="",
            package_id="",
            amount=0,
            status=OrderStatus.UNKNOWN,
            is_placeholder=True,
        )

    def with_status(self, status: OrderStatus, notification: Optional[Dict[str, Any]] = None) -> "Order":
        """Copy with a new status, a fresh updated_at and the audited notification."""
        return self.model_copy(
            update={
                "status": status,
                "updated_at": utcnow(),
                "raw_notification": notification,
            },
            deep=True,
        )


# ── Token Models ────────────────────────────────────────────────────

class TokenRequest(BaseModel):
    """
    Checkout form submission.

    Fields are optional here so that missing values reach the token issuer
    and come back as a 400 ValidationError. The original form names
    (nama / wa / paket) are accepted too. Any client-side amount is ignored.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    customer_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("customer_name", "nama"),
    )
    customer_contact: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("customer_contact", "wa"),
    )
    package_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("package_id", "paket"),
    )


class TokenResponse(BaseModel):
    """Snap token handed to the checkout page."""
    token: str
    order_id: str
    redirect_url: Optional[str] = None


class TokenResult(BaseModel):
    """What the token issuer returns on success."""
    token: str
    order_id: str
    redirect_url: Optional[str] = None
    amount: int


# ── Webhook Models ──────────────────────────────────────────────────

class WebhookAck(BaseModel):
    """Acknowledgment the gateway expects for every verified notification."""
    received: bool = True


class WebhookOutcome(BaseModel):
    """Result of applying one verified notification."""
    order_id: str
    status: OrderStatus
    changed: bool
    placeholder_created: bool = False


# ── Order / Catalog Responses ───────────────────────────────────────

class OrderResponse(BaseModel):
    """Public view of an order for the status endpoint."""
    order_id: str
    customer_name: str
    customer_contact: str
    package_id: str
    amount: int
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    raw_notification: Optional[Dict[str, Any]] = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(**order.model_dump(exclude={"is_placeholder"}))


class PackageInfo(BaseModel):
    package_id: str
    amount: int
    payable: bool


class PackageListResponse(BaseModel):
    packages: List[PackageInfo]
    currency: str = "IDR"


class ClientConfigResponse(BaseModel):
    """Public settings the checkout page needs to load snap.js."""
    client_key: str
    is_production: bool
    snap_js_url: str
