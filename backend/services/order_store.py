"""
Order Store — keyed order state with atomic per-order updates.

The token issuer and webhook processor depend only on the OrderStore
interface. InMemoryOrderStore is the process-local implementation; a
durable store must keep the same guarantees:

    - create() never overwrites an existing order_id
    - update() is linearizable per order_id
    - order_id, amount, package_id and created_at never change after create()
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from domain.errors import OrderConflictError, OrderNotFoundError
from models import Order

logger = logging.getLogger(__name__)

Mutator = Callable[[Order], Order]
OrderFactory = Callable[[], Order]

IMMUTABLE_FIELDS = ("order_id", "package_id", "amount", "created_at")


def check_immutable_fields(before: Order, after: Order) -> None:
    """Raise ValueError if a mutator touched an identity field."""
    for field in IMMUTABLE_FIELDS:
        if getattr(before, field) != getattr(after, field):
            raise ValueError(
                f"Order {before.order_id}: field '{field}' is immutable "
                f"({getattr(before, field)!r} -> {getattr(after, field)!r})"
            )


# ----------------------------
# Store Interface
# ----------------------------
class OrderStore(ABC):

    @abstractmethod
    async def create(self, order: Order) -> Order:
        """Persist a new order; OrderConflictError if the id exists."""

    @abstractmethod
    async def get(self, order_id: str) -> Optional[Order]: ...

    @abstractmethod
    async def exists(self, order_id: str) -> bool: ...

    @abstractmethod
    async def update(
        self,
        order_id: str,
        mutator: Mutator,
        default: Optional[OrderFactory] = None,
    ) -> Order:
        """
        Atomically replace an order with mutator(current).

        If the order is missing, `default()` seeds it inside the same
        critical section; without a default OrderNotFoundError is raised.
        """


# ----------------------------
# In-memory implementation
# ----------------------------
class InMemoryOrderStore(OrderStore):
    """
    Dict-backed store with one asyncio.Lock per order_id.

    Reads and writes hand out deep copies so nothing outside the store can
    alter stored state. Orders are never deleted.
    """

    def __init__(self):
        self._orders: Dict[str, Order] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, order_id: str) -> asyncio.Lock:
        # setdefault has no await point, so two tasks always share one lock
        return self._locks.setdefault(order_id, asyncio.Lock())

    def __len__(self) -> int:
        return len(self._orders)

    async def create(self, order: Order) -> Order:
        async with self._lock_for(order.order_id):
            if order.order_id in self._orders:
                raise OrderConflictError(order.order_id)
            self._orders[order.order_id] = order.model_copy(deep=True)
        logger.info(
            f"  🧾 Order created: {order.order_id} "
            f"({order.package_id}, {order.amount} IDR, {order.status.value})"
        )
        return order.model_copy(deep=True)

    async def get(self, order_id: str) -> Optional[Order]:
        order = self._orders.get(order_id)
        return order.model_copy(deep=True) if order is not None else None

    async def exists(self, order_id: str) -> bool:
        return order_id in self._orders

    async def update(
        self,
        order_id: str,
        mutator: Mutator,
        default: Optional[OrderFactory] = None,
    ) -> Order:
        async with self._lock_for(order_id):
            current = self._orders.get(order_id)
            if current is None:
                if default is None:
                    raise OrderNotFoundError(order_id)
                current = default()
                if current.order_id != order_id:
                    raise ValueError(
                        f"default() built order {current.order_id!r} for key {order_id!r}"
                    )
            updated = mutator(current.model_copy(deep=True))
            check_immutable_fields(current, updated)
            self._orders[order_id] = updated.model_copy(deep=True)
        return updated
