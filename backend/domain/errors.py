"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the exception handlers
in main.py. Every failure the token issuer or webhook processor can report
is one of these, so no raw exception crosses the HTTP boundary.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class NotFoundError(DomainError):
    """Resource not found (404)."""
    def __init__(self, resource_type: str, identifier: str, details: dict | None = None):
        message = f"{resource_type} not found: {identifier}"
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class OrderNotFoundError(NotFoundError):
    """No order stored under the given id (404)."""
    def __init__(self, order_id: str):
        super().__init__("Order", order_id)
        self.order_id = order_id


class ValidationError(DomainError):
    """Missing or empty required field (400)."""
    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        if field:
            message = f"Validation error on {field}: {message}"
            details = {"field": field, **(details or {})}
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class UnknownPackageError(DomainError):
    """Package id is not in the price catalog (400)."""
    def __init__(self, package_id: str):
        super().__init__(
            "Unknown or unregistered package",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"package_id": package_id},
        )
        self.package_id = package_id


class NonPayableOfferingError(DomainError):
    """Package is free and must not go through the payment gateway (400)."""
    def __init__(self, package_id: str):
        super().__init__(
            "This package is free and does not require payment",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"package_id": package_id},
        )
        self.package_id = package_id


class MalformedPayloadError(DomainError):
    """Webhook payload is not usable (400)."""
    def __init__(self, message: str = "Incomplete webhook payload", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class UnauthorizedError(DomainError):
    """Unauthorized access (401)."""
    def __init__(self, message: str = "Unauthorized", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED, details=details)


class OrderConflictError(DomainError):
    """Order id already taken (409)."""
    def __init__(self, order_id: str):
        super().__init__(
            f"Order already exists: {order_id}",
            status_code=status.HTTP_409_CONFLICT,
            details={"order_id": order_id},
        )
        self.order_id = order_id


class RateLimitError(DomainError):
    """Rate limit exceeded (429)."""
    def __init__(self, message: str = "Rate limit exceeded", details: dict | None = None, headers: dict | None = None):
        super().__init__(message, status_code=status.HTTP_429_TOO_MANY_REQUESTS, details=details)
        self.headers = headers


class ServerConfigurationError(DomainError):
    """Operator-fixable misconfiguration (500)."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)


class CatalogConfigurationError(ServerConfigurationError):
    """Catalog holds a price that is not a positive integer (500)."""
    def __init__(self, package_id: str, amount: object):
        super().__init__(
            "Server price configuration is invalid",
            details={"package_id": package_id},
        )
        self.package_id = package_id
        self.amount = amount


class GatewayError(DomainError):
    """Payment gateway call failed (400 / 502 / 504 depending on the gateway outcome)."""
    def __init__(
        self,
        message: str = "Failed to create payment token",
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        details: dict | None = None,
        gateway_status: int | None = None,
        gateway_payload: object = None,
    ):
        super().__init__(message, status_code=status_code, details=details)
        self.gateway_status = gateway_status
        self.gateway_payload = gateway_payload
