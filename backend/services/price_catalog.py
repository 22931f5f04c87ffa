"""
Price Catalog — server-side price authority.

Maps package ids to authoritative IDR amounts. Client-submitted prices are
never consulted; every token request resolves its amount here.
"""
import logging
from types import MappingProxyType
from typing import List, Mapping

from domain.errors import UnknownPackageError
from models import PackageInfo

logger = logging.getLogger(__name__)


def is_positive_amount(amount: object) -> bool:
    """True for a real int above zero (bools are rejected)."""
    return isinstance(amount, int) and not isinstance(amount, bool) and amount > 0


def is_free_amount(amount: object) -> bool:
    return not isinstance(amount, bool) and amount == 0


class PriceCatalog:
    """Read-only package_id -> amount mapping, loaded once at startup."""

    def __init__(self, prices: Mapping[str, object]):
        self._prices = MappingProxyType(dict(prices))
        for package_id, amount in self._prices.items():
            if not (is_free_amount(amount) or is_positive_amount(amount)):
                # Kept so the token path reports CatalogConfigurationError
                logger.error(
                    f"❌ Invalid catalog price for {package_id!r}: {amount!r} "
                    f"(expected a non-negative integer)"
                )

    def __contains__(self, package_id: object) -> bool:
        return package_id in self._prices

    def __len__(self) -> int:
        return len(self._prices)

    def lookup(self, package_id: str) -> object:
        """Return the catalog amount for package_id or raise UnknownPackageError."""
        try:
            return self._prices[package_id]
        except (KeyError, TypeError):
            raise UnknownPackageError(str(package_id))

    def packages(self) -> List[PackageInfo]:
        """Entries with a valid price, in catalog order."""
        return [
            PackageInfo(package_id=package_id, amount=amount, payable=amount > 0)
            for package_id, amount in self._prices.items()
            if is_free_amount(amount) or is_positive_amount(amount)
        ]
