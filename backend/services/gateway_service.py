"""
Payment Gateway — Midtrans Snap token creation.

Snap exposes one call we need: POST /snap/v1/transactions with the
transaction parameter, authenticated with the server key as the HTTP basic
username. It answers 201 {"token", "redirect_url"} or an error body with
"error_messages".

The adapter is a plain awaitable request/response call: it returns a
GatewayToken or raises GatewayError. It never retries; the customer
re-submits the checkout form instead.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from fastapi import status
from pydantic import BaseModel

from domain.constants import SNAP_TRANSACTIONS_PATH
from domain.errors import GatewayError

logger = logging.getLogger(__name__)


class GatewayToken(BaseModel):
    token: str
    redirect_url: Optional[str] = None


# ----------------------------
# Payment Gateway Interface
# ----------------------------
class PaymentGateway(ABC):

    @abstractmethod
    async def create_transaction_token(self, parameter: Dict[str, Any]) -> GatewayToken:
        """Mint a payment token for `parameter`; GatewayError on any failure."""


# ----------------------------
# Midtrans Snap implementation
# ----------------------------
class SnapGateway(PaymentGateway):

    def __init__(self, http: httpx.AsyncClient, base_url: str, server_key: str):
        self._http = http
        self._url = base_url.rstrip("/") + SNAP_TRANSACTIONS_PATH
        self._server_key = server_key

    async def create_transaction_token(self, parameter: Dict[str, Any]) -> GatewayToken:
        order_id = parameter.get("transaction_details", {}).get("order_id")
        try:
            response = await self._http.post(
                self._url,
                json=parameter,
                auth=(self._server_key, ""),
                headers={"Accept": "application/json"},
            )
        except httpx.TimeoutException as e:
            logger.error(f"  ⏱️ Snap token request timed out for {order_id}: {e!r}")
            raise GatewayError(
                "Payment gateway timed out, please try again",
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            )
        except httpx.HTTPError as e:
            logger.error(f"  ❌ Snap token request failed for {order_id}: {e!r}")
            raise GatewayError("Payment gateway unreachable, please try again")

        payload = _json_or_text(response)

        if response.status_code in (status.HTTP_200_OK, status.HTTP_201_CREATED):
            token = payload.get("token") if isinstance(payload, dict) else None
            if not token:
                logger.error(f"  ❌ Snap returned no token for {order_id}: {payload!r}")
                raise GatewayError(
                    "Payment gateway returned an empty token",
                    gateway_status=response.status_code,
                    gateway_payload=payload,
                )
            return GatewayToken(token=token, redirect_url=payload.get("redirect_url"))

        raise _classify_failure(order_id, response.status_code, payload)


def _json_or_text(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _classify_failure(order_id: Optional[str], gateway_status: int, payload: Any) -> GatewayError:
    """
    Map a Snap error response to a GatewayError.

    4xx validation errors go back to the client as 400 with the gateway's
    messages. Auth failures mean our server key is wrong, so they are
    reported as a 502 like any 5xx.
    """
    messages = []
    if isinstance(payload, dict):
        messages = [str(m) for m in payload.get("error_messages") or []]

    # Full payload stays in the server log only
    logger.error(
        f"  ❌ Snap token error for {order_id}: HTTP {gateway_status} {payload!r}"
    )

    if gateway_status in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        return GatewayError(
            "Payment gateway rejected server credentials",
            gateway_status=gateway_status,
            gateway_payload=payload,
        )
    if 400 <= gateway_status < 500:
        return GatewayError(
            "Payment gateway rejected the transaction",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"gateway_messages": messages} if messages else None,
            gateway_status=gateway_status,
            gateway_payload=payload,
        )
    return GatewayError(
        "Failed to create payment token",
        gateway_status=gateway_status,
        gateway_payload=payload,
    )
