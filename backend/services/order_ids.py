"""
Order id generation strategies.

Global uniqueness is the only hard requirement. The timestamp strategy
keeps the familiar ORDER-<ms>-<n> shape but is guessable; use "secure"
when order ids must not be enumerable.
"""
import secrets
import time
from typing import Callable, Protocol

from domain.constants import ORDER_ID_PREFIX


class OrderIdGenerator(Protocol):
    def __call__(self) -> str: ...


class TimestampOrderIdGenerator:
    """ORDER-<epoch ms>-<random 0..999999>."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    def __call__(self) -> str:
        millis = int(self._clock() * 1000)
        return f"{ORDER_ID_PREFIX}-{millis}-{secrets.randbelow(1_000_000)}"


class SecureOrderIdGenerator:
    """ORDER-<128-bit url-safe random token>."""

    def __call__(self) -> str:
        return f"{ORDER_ID_PREFIX}-{secrets.token_urlsafe(16)}"


_STRATEGIES = {
    "timestamp": TimestampOrderIdGenerator,
    "secure": SecureOrderIdGenerator,
}


def make_order_id_generator(strategy: str) -> OrderIdGenerator:
    """Build the generator named by ORDER_ID_STRATEGY."""
    try:
        return _STRATEGIES[strategy.strip().lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown ORDER_ID_STRATEGY {strategy!r} "
            f"(expected one of: {', '.join(sorted(_STRATEGIES))})"
        )
