"""
Domain: Coarse purchase status.

A Purchase moves through six ordered statuses:

    payment_pending(1) -> processing(2) -> documents_pending(3)
        -> shipping(4) -> delivered(5) -> completed(6)

Rules implemented here:
- Status only moves forward through the fixed order.
- The single exception is documents_pending -> processing, which is applied
  when documents are received (see Purchase.add_documents).
- completed is terminal: nothing moves a purchase out of it.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .errors import InvariantViolationError


class PurchaseStatus(str, Enum):
    PAYMENT_PENDING = "payment_pending"
    PROCESSING = "processing"
    DOCUMENTS_PENDING = "documents_pending"
    SHIPPING = "shipping"
    DELIVERED = "delivered"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        """1-based position in the lifecycle order."""

        return _ORDER.index(self) + 1

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return self is PurchaseStatus.COMPLETED

    @property
    def next_status(self) -> Optional["PurchaseStatus"]:
        """The next status in the fixed order, or None when terminal."""

        if self.is_terminal:
            return None
        return _ORDER[self.rank]


_ORDER = (
    PurchaseStatus.PAYMENT_PENDING,
    PurchaseStatus.PROCESSING,
    PurchaseStatus.DOCUMENTS_PENDING,
    PurchaseStatus.SHIPPING,
    PurchaseStatus.DELIVERED,
    PurchaseStatus.COMPLETED,
)

_LABELS = {
    PurchaseStatus.PAYMENT_PENDING: "Payment Pending",
    PurchaseStatus.PROCESSING: "Processing",
    PurchaseStatus.DOCUMENTS_PENDING: "Documents Pending",
    PurchaseStatus.SHIPPING: "Shipping",
    PurchaseStatus.DELIVERED: "Delivered",
    PurchaseStatus.COMPLETED: "Completed",
}


def require_forward_transition(current: PurchaseStatus, target: PurchaseStatus) -> None:
    """
    Validate a status change requested by a caller.

    Allowed:
    - Same status (no-op; the caller decides whether to skip work).
    - Any move to a higher-ranked status.

    Rejected:
    - Any move out of completed.
    - Any move to a lower-ranked status.

    Raises:
        InvariantViolationError: If the move breaks the forward-only rule.
    """

    if current == target:
        return
    if current.is_terminal:
        raise InvariantViolationError(
            f"Cannot change status of a completed purchase (requested '{target.value}')"
        )
    if target.rank < current.rank:
        raise InvariantViolationError(
            f"Cannot move status backward from '{current.value}' to '{target.value}'"
        )


__all__ = [
    "PurchaseStatus",
    "require_forward_transition",
]
