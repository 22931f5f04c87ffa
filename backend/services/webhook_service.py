"""
Webhook Service — Midtrans HTTP notifications.

Handles:
    1. Payload shape checks
    2. Signature verification (before any store access)
    3. transaction_status / fraud_status → OrderStatus mapping
    4. Atomic, idempotent order update with the raw payload kept for audit

Delivery is at-least-once and may be out of order. Identical re-deliveries
are no-ops; otherwise the latest notification wins unless terminal states
are enforced (ENFORCE_TERMINAL_STATES).
"""
import logging
from typing import Any, Dict, Mapping, Optional

from domain.constants import REQUIRED_NOTIFICATION_FIELDS
from domain.enums import OrderStatus
from domain.errors import MalformedPayloadError, ServerConfigurationError, UnauthorizedError
from models import Order, WebhookOutcome
from services.order_store import OrderStore
from services.signature_service import SignatureVerifier

logger = logging.getLogger(__name__)

_SIMPLE_STATUSES = {
    "pending": OrderStatus.PENDING,
    "deny": OrderStatus.DENIED,
    "expire": OrderStatus.EXPIRED,
    "cancel": OrderStatus.CANCELED,
}


def map_transaction_status(transaction_status: Optional[str], fraud_status: Optional[str]) -> OrderStatus:
    """Order status for a (transaction_status, fraud_status) pair."""
    if transaction_status in ("settlement", "capture"):
        if fraud_status == "challenge":
            return OrderStatus.CHALLENGE
        return OrderStatus.PAID
    return _SIMPLE_STATUSES.get(transaction_status, OrderStatus.UNKNOWN)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class WebhookProcessor:
    """Verifies notifications and applies them to the order store."""

    def __init__(
        self,
        verifier: SignatureVerifier,
        store: OrderStore,
        enforce_terminal_states: bool = False,
    ):
        self.verifier = verifier
        self.store = store
        self.enforce_terminal_states = enforce_terminal_states

    def _check_shape(self, notification: Any) -> Dict[str, Any]:
        if not isinstance(notification, Mapping):
            raise MalformedPayloadError("Webhook payload must be a JSON object")
        missing = [f for f in REQUIRED_NOTIFICATION_FIELDS if _is_blank(notification.get(f))]
        if missing:
            raise MalformedPayloadError(details={"missing": missing})
        return dict(notification)

    async def handle(self, notification: Any) -> WebhookOutcome:
        """
        Apply one gateway notification.

        Raises:
            ServerConfigurationError: no server key to verify with
            MalformedPayloadError: not an object or a required field is missing
            UnauthorizedError: signature_key does not match
        """
        if not self.verifier.configured:
            raise ServerConfigurationError("MIDTRANS_SERVER_KEY is not configured")

        payload = self._check_shape(notification)
        order_id = str(payload["order_id"])

        if not self.verifier.verify(
            payload["order_id"],
            payload["status_code"],
            payload["gross_amount"],
            payload["signature_key"],
        ):
            logger.warning(
                f"  🚫 Rejected notification with invalid signature: order={order_id} "
                f"status={payload.get('transaction_status')}"
            )
            raise UnauthorizedError("Invalid signature")

        target = map_transaction_status(
            payload.get("transaction_status"),
            payload.get("fraud_status"),
        )

        seen = {"placeholder": False, "changed": False}

        def placeholder() -> Order:
            seen["placeholder"] = True
            return Order.placeholder(order_id)

        def apply(current: Order) -> Order:
            if current.status == target and current.raw_notification == payload:
                return current
            if (
                self.enforce_terminal_states
                and current.status.is_terminal
                and current.status != target
            ):
                logger.warning(
                    f"  ⚠️ Ignoring {target.value} for terminal order "
                    f"{order_id} ({current.status.value})"
                )
                return current
            seen["changed"] = True
            return current.with_status(target, payload)

        order = await self.store.update(order_id, apply, default=placeholder)

        if seen["placeholder"]:
            logger.warning(f"  Notification for unknown order {order_id}; placeholder created")
        if seen["changed"]:
            logger.info(
                f"  📩 Order {order_id} → {order.status.value} "
                f"(transaction_status={payload.get('transaction_status')}, "
                f"fraud_status={payload.get('fraud_status')})"
            )
        else:
            logger.debug(f"  Duplicate notification for {order_id} ignored")

        return WebhookOutcome(
            order_id=order_id,
            status=order.status,
            changed=seen["changed"],
            placeholder_created=seen["placeholder"],
        )
