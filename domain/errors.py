"""
Domain errors for the purchase workflow.

Three kinds of rejected mutation are modeled:
- Validation errors: bad or missing input, payment above the outstanding balance.
- Not-found errors: a purchase id that is not in the working set.
- Invariant violations: moving status backward, leaving a terminal state,
  editing a finalized workflow.

A rejected mutation never changes stored state; the caller gets the exception
with a human-readable reason.
"""

from __future__ import annotations


class PurchaseError(Exception):
    """Base class for all purchase workflow errors."""
    pass


class PurchaseValidationError(PurchaseError, ValueError):
    """Raised when input fails validation (amounts, required fields, identity)."""
    pass


class PurchaseNotFoundError(PurchaseError, LookupError):
    """Raised when a purchase id does not exist in the repository."""

    def __init__(self, purchase_id: str) -> None:
        super().__init__(f"Purchase not found: {purchase_id}")
        self.purchase_id = purchase_id


class InvariantViolationError(PurchaseError, ValueError):
    """
    Raised when a transition would break a lifecycle rule.

    This is a domain error, not a technical error: the requested move
    (e.g. shipping -> processing) is never allowed for this purchase.
    """
    pass


__all__ = [
    "PurchaseError",
    "PurchaseValidationError",
    "PurchaseNotFoundError",
    "InvariantViolationError",
]
