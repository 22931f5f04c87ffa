"""
Pytest configuration and shared fixtures for the checkout backend tests.

Provides the in-memory order store, a mocked Snap gateway, signed
notification builders and an HTTP client wired to the FastAPI app through
dependency overrides.
"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator, Callable
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient

from domain.constants import DEFAULT_PACKAGE_PRICES
from services.gateway_service import GatewayToken, PaymentGateway
from services.order_store import InMemoryOrderStore
from services.price_catalog import PriceCatalog
from services.signature_service import SignatureVerifier
from services.token_service import TokenIssuer
from services.webhook_service import WebhookProcessor

# ── Test Configuration ───────────────────────────────────────────────

TEST_SERVER_KEY = "SB-Mid-server-test-key-for-pytest-only"
PAID_PACKAGE = "Muqarrar Termin 1"
BUNDLE_PACKAGE = "Bundle Termin 1–2"
FREE_PACKAGE = "Free Trial"


class SequentialOrderIds:
    """Deterministic order id generator for tests."""

    def __init__(self, prefix: str = "ORDER-TEST"):
        self.prefix = prefix
        self.issued = 0

    def __call__(self) -> str:
        self.issued += 1
        return f"{self.prefix}-{self.issued}"


# ── Service Fixtures ─────────────────────────────────────────────────


@pytest.fixture
def catalog() -> PriceCatalog:
    return PriceCatalog(DEFAULT_PACKAGE_PRICES)


@pytest.fixture
def order_store() -> InMemoryOrderStore:
    return InMemoryOrderStore()


@pytest.fixture
def mock_gateway():
    """Mock Snap gateway that always issues the same token."""
    gateway = AsyncMock(spec=PaymentGateway)
    gateway.create_transaction_token.return_value = GatewayToken(
        token="snap-token-123",
        redirect_url="https://app.sandbox.midtrans.com/snap/v2/vtweb/snap-token-123",
    )
    return gateway


@pytest.fixture
def order_ids() -> SequentialOrderIds:
    return SequentialOrderIds()


@pytest.fixture
def verifier() -> SignatureVerifier:
    return SignatureVerifier(TEST_SERVER_KEY)


@pytest.fixture
def token_issuer(catalog, order_store, mock_gateway, order_ids) -> TokenIssuer:
    return TokenIssuer(
        catalog=catalog,
        store=order_store,
        gateway=mock_gateway,
        new_order_id=order_ids,
    )


@pytest.fixture
def webhook_processor(verifier, order_store) -> WebhookProcessor:
    return WebhookProcessor(verifier=verifier, store=order_store)


# ── Notification Builders ────────────────────────────────────────────


@pytest.fixture
def make_notification(verifier) -> Callable[..., dict]:
    """Build a correctly signed Midtrans notification."""
    def _make(
        order_id: str,
        transaction_status: str = "settlement",
        fraud_status: str = "accept",
        status_code: str = "200",
        gross_amount: str = "90000.00",
        **extra,
    ) -> dict:
        notification = {
            "order_id": order_id,
            "status_code": status_code,
            "gross_amount": gross_amount,
            "signature_key": verifier.sign(order_id, status_code, gross_amount),
            "transaction_status": transaction_status,
            "fraud_status": fraud_status,
            "payment_type": "bank_transfer",
        }
        notification.update(extra)
        return notification

    return _make


@pytest_asyncio.fixture
async def created_order(token_issuer):
    """An order issued through the token flow (Scenario A inputs)."""
    result = await token_issuer.request_token("Ana", "08111234567", PAID_PACKAGE)
    return result.order_id


# ── HTTP Client ──────────────────────────────────────────────────────


@pytest_asyncio.fixture(scope="function")
async def test_client(catalog, order_store, token_issuer, webhook_processor) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client against the FastAPI app.

    The lifespan is not run; services come from dependency overrides so
    each test gets a fresh store and a mocked gateway.
    """
    from deps import get_catalog, get_order_store, get_token_issuer, get_webhook_processor
    from main import app
    from middleware.rate_limit import _limiter

    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_order_store] = lambda: order_store
    app.dependency_overrides[get_token_issuer] = lambda: token_issuer
    app.dependency_overrides[get_webhook_processor] = lambda: webhook_processor
    _limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    _limiter.reset()
