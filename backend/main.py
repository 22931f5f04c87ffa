"""
Checkout Payment Backend — FastAPI Application

Server-priced packages, Midtrans Snap token issuance, verified payment
notifications and order status polling.
"""
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from routes import health, payments

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: build catalog, store, gateway client and services. Shutdown: close HTTP client."""
    settings.validate_production_settings()

    from services.gateway_service import SnapGateway
    from services.order_ids import make_order_id_generator
    from services.order_store import InMemoryOrderStore
    from services.price_catalog import PriceCatalog
    from services.signature_service import SignatureVerifier
    from services.token_service import TokenIssuer
    from services.webhook_service import WebhookProcessor

    http = httpx.AsyncClient(
        timeout=settings.gateway_timeout_seconds,
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )
    catalog = PriceCatalog(settings.package_prices)
    store = InMemoryOrderStore()

    app.state.http = http
    app.state.catalog = catalog
    app.state.order_store = store
    app.state.token_issuer = TokenIssuer(
        catalog=catalog,
        store=store,
        gateway=SnapGateway(http, settings.snap_base_url, settings.midtrans_server_key),
        new_order_id=make_order_id_generator(settings.order_id_strategy),
        gateway_configured=bool(settings.midtrans_server_key),
    )
    app.state.webhook_processor = WebhookProcessor(
        verifier=SignatureVerifier(settings.midtrans_server_key),
        store=store,
        enforce_terminal_states=settings.enforce_terminal_states,
    )
    logger.info(
        f"✅ Checkout backend ready (production={settings.midtrans_is_production}, "
        f"packages={len(catalog)}, order_ids={settings.order_id_strategy})"
    )

    yield  # app runs here

    await http.aclose()
    logger.info("Shutting down")


# ── App Factory ─────────────────────────────────────────────────────

app = FastAPI(
    title="Checkout Payment API",
    description="Server-priced checkout with Midtrans Snap tokens and verified payment notifications",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS, only when the page is served from another origin
if settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

# ── Routes ──────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(payments.router)


# ── Exception Handlers ──────────────────────────────────────────────


def _error_response(status_code: int, code: str, message: str, details=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {
                "code": code,
                "message": message,
                "details": details,
            },
        },
        headers=headers,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Catch-all for unhandled exceptions.

    Never return raw exception details to clients.
    The full traceback is logged server-side for debugging.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return _error_response(500, "internal_server_error", "Internal server error")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc: RequestValidationError):
    """Malformed request bodies are client errors (400), not 422."""
    logger.info(f"Rejected malformed request on {request.url.path}: {exc.errors()}")
    return _error_response(
        400,
        "validation",
        "Malformed request body",
        details={"errors": [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()
        ]},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """
    Standardize HTTPException responses for frontend consumers.

    Keeps the original HTTP status code, but wraps the payload.
    """
    # DomainError carries structured error info
    if hasattr(exc, "message") and hasattr(exc, "details"):
        error_code = exc.__class__.__name__.replace("Error", "").lower()
        gateway_payload = getattr(exc, "gateway_payload", None)
        if exc.status_code >= 500:
            logger.error(
                f"{exc.__class__.__name__} on {request.url.path}: {exc.message}"
                + (f" (gateway payload: {gateway_payload!r})" if gateway_payload is not None else "")
            )
        return _error_response(
            exc.status_code,
            error_code,
            exc.message,
            details=exc.details or None,
            headers=getattr(exc, "headers", None),
        )

    # Regular HTTPException
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    return _error_response(
        exc.status_code,
        "http_error",
        message,
        details=detail if not isinstance(detail, str) else None,
        headers=getattr(exc, "headers", None),
    )


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level="info")
