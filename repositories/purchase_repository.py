"""
Purchase repository (in-memory working set).

This module provides *only* storage operations for the Purchase aggregate. It
does not enforce business rules (status order, payment limits); those live in
`domain/purchase.py`. Purchases are immutable, so storing one stores a
snapshot: a rejected transition never reaches `save_purchase`.

The store is an explicit object owned by whoever builds the services (an
application or a test), never a module-level global.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from domain.errors import PurchaseNotFoundError, PurchaseValidationError
from domain.purchase import Purchase


class InMemoryPurchaseRepository:
    """Insertion-ordered map of purchase_id -> Purchase."""

    def __init__(self) -> None:
        self._purchases: Dict[str, Purchase] = {}

    def __len__(self) -> int:
        return len(self._purchases)

    def add_purchase(self, purchase: Purchase) -> Purchase:
        """
        Store a new purchase.

        Raises:
            PurchaseValidationError: If a purchase with the same id already exists.
        """

        if purchase.purchase_id in self._purchases:
            raise PurchaseValidationError(f"Purchase already exists: {purchase.purchase_id}")
        self._purchases[purchase.purchase_id] = purchase
        return purchase

    def get_purchase_by_id(self, purchase_id: str) -> Optional[Purchase]:
        """Return the stored purchase, or None when the id is unknown."""

        return self._purchases.get(purchase_id)

    def save_purchase(self, purchase: Purchase) -> Purchase:
        """
        Replace the stored snapshot of an existing purchase.

        Raises:
            PurchaseNotFoundError: If the purchase was never added.
        """

        if purchase.purchase_id not in self._purchases:
            raise PurchaseNotFoundError(purchase.purchase_id)
        self._purchases[purchase.purchase_id] = purchase
        return purchase

    def list_purchases(self) -> List[Purchase]:
        return list(self._purchases.values())


__all__ = ["InMemoryPurchaseRepository"]
