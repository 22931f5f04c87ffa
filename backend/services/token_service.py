"""
Token Service — checkout → Snap payment token.

Handles:
    1. Checkout field validation
    2. Server-side price resolution (client amounts are never read)
    3. Order id generation
    4. Snap token creation
    5. Order persistence, only after the gateway said yes

A gateway failure or timeout leaves no order behind; the customer simply
submits again and gets a fresh order id.
"""
import logging
from typing import Any, Dict, Set

from domain.enums import OrderStatus
from domain.errors import (
    CatalogConfigurationError,
    NonPayableOfferingError,
    ServerConfigurationError,
)
from models import Order, TokenResult
from services.gateway_service import PaymentGateway
from services.order_ids import OrderIdGenerator
from services.order_store import OrderStore
from services.price_catalog import PriceCatalog, is_free_amount, is_positive_amount
from utils.validators import require_text

logger = logging.getLogger(__name__)

# Attempts at drawing an order id the store has not seen yet
MAX_ORDER_ID_ATTEMPTS = 5


def build_transaction_parameter(
    order_id: str,
    amount: int,
    customer_name: str,
    customer_contact: str,
    package_id: str,
) -> Dict[str, Any]:
    """Snap transaction request for a single-item order."""
    return {
        "transaction_details": {
            "order_id": order_id,
            "gross_amount": amount,
        },
        "customer_details": {
            "first_name": customer_name,
            "phone": customer_contact,
        },
        "item_details": [
            {
                "id": package_id,
                "price": amount,
                "quantity": 1,
                "name": package_id,
            },
        ],
    }


class TokenIssuer:
    """Orchestrates catalog lookup, order creation and the gateway call."""

    def __init__(
        self,
        catalog: PriceCatalog,
        store: OrderStore,
        gateway: PaymentGateway,
        new_order_id: OrderIdGenerator,
        gateway_configured: bool = True,
    ):
        self.catalog = catalog
        self.store = store
        self.gateway = gateway
        self.new_order_id = new_order_id
        self.gateway_configured = gateway_configured
        # Ids drawn by requests still waiting on the gateway
        self._reserved: Set[str] = set()

    def resolve_amount(self, package_id: str) -> int:
        """Authoritative, payable amount for package_id."""
        amount = self.catalog.lookup(package_id)
        if is_free_amount(amount):
            raise NonPayableOfferingError(package_id)
        if not is_positive_amount(amount):
            logger.error(
                f"❌ Catalog misconfiguration: {package_id!r} is priced {amount!r}"
            )
            raise CatalogConfigurationError(package_id, amount)
        return amount

    async def _reserve_order_id(self) -> str:
        """Draw an id that is neither stored nor held by an in-flight request."""
        for _ in range(MAX_ORDER_ID_ATTEMPTS):
            order_id = self.new_order_id()
            if order_id in self._reserved:
                logger.warning(f"Order id {order_id} is in flight, drawing another")
                continue
            # Claimed before the first await so a concurrent draw sees it
            self._reserved.add(order_id)
            if not await self.store.exists(order_id):
                return order_id
            self._reserved.discard(order_id)
            logger.warning(f"Order id collision on {order_id}, drawing another")
        raise ServerConfigurationError("Could not allocate a unique order id")

    async def request_token(
        self,
        customer_name: object,
        customer_contact: object,
        package_id: object,
    ) -> TokenResult:
        """
        Issue a Snap token for one package.

        Raises:
            ValidationError: a required field is missing or blank
            UnknownPackageError: package_id is not in the catalog
            NonPayableOfferingError: the package is free
            CatalogConfigurationError: the catalog price is not a positive integer
            GatewayError: Snap failed or timed out (no order is stored)
        """
        if not self.gateway_configured:
            raise ServerConfigurationError("MIDTRANS_SERVER_KEY is not configured")

        name = require_text(customer_name, "customer_name")
        contact = require_text(customer_contact, "customer_contact")
        package = require_text(package_id, "package_id")

        amount = self.resolve_amount(package)
        order_id = await self._reserve_order_id()
        try:
            parameter = build_transaction_parameter(order_id, amount, name, contact, package)
            gateway_token = await self.gateway.create_transaction_token(parameter)

            await self.store.create(
                Order(
                    order_id=order_id,
                    customer_name=name,
                    customer_contact=contact,
                    package_id=package,
                    amount=amount,
                    status=OrderStatus.CREATED,
                )
            )
        finally:
            self._reserved.discard(order_id)

        logger.info(f"  💳 Snap token issued: {order_id} ({package}, {amount} IDR)")

        return TokenResult(
            token=gateway_token.token,
            order_id=order_id,
            redirect_url=gateway_token.redirect_url,
            amount=amount,
        )
