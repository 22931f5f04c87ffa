"""
Webhook Signature Verification

Midtrans signs every HTTP notification with
    SHA512(order_id + status_code + gross_amount + server_key)
hex-encoded in the `signature_key` field. Verification FAILS CLOSED: a
missing secret, a missing field or any hashing problem counts as an
invalid signature.
"""
import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)


def _canonical(value: object) -> str:
    """String form used in the signed concatenation (no separators)."""
    if value is None or isinstance(value, (dict, list, bool)):
        raise ValueError(f"unsignable value: {value!r}")
    # JSON numbers: 90000.0 is signed as "90000", like JavaScript's String()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class SignatureVerifier:
    """Binds a notification to the server key shared with the gateway."""

    def __init__(self, server_key: str):
        self._server_key = server_key or ""

    @property
    def configured(self) -> bool:
        return bool(self._server_key)

    def sign(self, order_id: object, status_code: object, gross_amount: object) -> str:
        """Hex SHA-512 digest the gateway is expected to send for these fields."""
        message = (
            _canonical(order_id)
            + _canonical(status_code)
            + _canonical(gross_amount)
            + self._server_key
        )
        return hashlib.sha512(message.encode("utf-8")).hexdigest()

    def verify(
        self,
        order_id: object,
        status_code: object,
        gross_amount: object,
        provided_signature: object,
    ) -> bool:
        """Constant-time check of provided_signature. Never raises."""
        if not self._server_key:
            logger.error("MIDTRANS_SERVER_KEY not configured — rejecting notification")
            return False
        if not isinstance(provided_signature, str) or not provided_signature:
            return False
        try:
            expected = self.sign(order_id, status_code, gross_amount)
            return hmac.compare_digest(expected, provided_signature)
        except (ValueError, TypeError, UnicodeError) as e:
            logger.warning(f"Signature check failed on malformed input: {e}")
            return False
