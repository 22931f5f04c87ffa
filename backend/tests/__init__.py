"""
Pytest suite for the checkout payment backend.

Test categories:
- Unit tests: catalog, signatures, order store, token and webhook services
- API tests: FastAPI routes over an in-process ASGI transport
- Edge case tests: idempotent re-delivery, concurrency, gateway failures
"""
