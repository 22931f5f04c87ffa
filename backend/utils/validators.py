"""
Input validation utilities for the checkout backend.

Provides reusable validators for checkout form fields and order ids.
"""
from typing import Optional

from fastapi import Path

from domain.errors import ValidationError

MAX_FIELD_LENGTH = 200
MAX_ORDER_ID_LENGTH = 64


def require_text(value: Optional[object], field: str, max_length: int = MAX_FIELD_LENGTH) -> str:
    """
    Validate a required text field.

    Args:
        value: Raw value from the request body
        field: Field name used in the error message

    Returns:
        The value with surrounding whitespace removed

    Raises:
        ValidationError(400) if the value is missing, not a string, blank
        after trimming, or longer than max_length
    """
    if value is None:
        raise ValidationError("field is required", field=field)

    if not isinstance(value, str):
        raise ValidationError("must be a string", field=field)

    text = value.strip()
    if not text:
        raise ValidationError("must not be empty", field=field)

    if len(text) > max_length:
        raise ValidationError(f"must be at most {max_length} characters", field=field)

    return text


def validated_order_id(order_id: str = Path(..., description="Server-generated order id")) -> str:
    """FastAPI dependency for validating order id path parameters."""
    return require_text(order_id, "order_id", max_length=MAX_ORDER_ID_LENGTH)
