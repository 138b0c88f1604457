"""
Domain: Payments and financial aggregation.

Contract implemented here:
- total = winning_bid + shipping_cost + insurance_fee, computed once at creation.
- outstanding = max(0, total - paid).
- payment progress = round(100 * paid / total), 0 when total is 0.
- payment status is a pure function of (paid, total):
  pending when paid == 0, completed when paid >= total, partial otherwise.

Payments are an append-only audit trail: a Payment is never edited or removed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Optional

from .errors import PurchaseValidationError
from .time import require_utc_timestamp

ZERO = Decimal("0")


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"

    @staticmethod
    def for_amounts(paid: Decimal, total: Decimal) -> "PaymentStatus":
        """Resolve the payment status for a paid amount against a total."""

        if paid == ZERO:
            return PaymentStatus.PENDING
        if paid >= total:
            return PaymentStatus.COMPLETED
        return PaymentStatus.PARTIAL


class PaymentMethod(str, Enum):
    CARD = "card"
    WIRE_TRANSFER = "wire_transfer"
    BANK_CHECK = "bank_check"
    PAYPAL = "paypal"

    @property
    def label(self) -> str:
        return {
            PaymentMethod.CARD: "Credit/Debit Card",
            PaymentMethod.WIRE_TRANSFER: "Wire Transfer",
            PaymentMethod.BANK_CHECK: "Bank Check",
            PaymentMethod.PAYPAL: "PayPal",
        }[self]


@dataclass(frozen=True, slots=True)
class Payment:
    """
    Immutable record of one payment received for a purchase.

    paid_at is when the buyer paid; recorded_at is when the admin entered it.
    """

    payment_id: str
    purchase_id: str
    amount: Decimal
    method: PaymentMethod
    paid_at: datetime
    reference_number: str
    recorded_by: str
    recorded_at: datetime
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("paid_at", self.paid_at)
        require_utc_timestamp("recorded_at", self.recorded_at)
        if self.amount <= ZERO:
            raise PurchaseValidationError("Payment amount must be greater than 0")


def purchase_total(winning_bid: Decimal, shipping_cost: Decimal, insurance_fee: Decimal) -> Decimal:
    """Sum of the three cost components. Each component must be non-negative."""

    for name, value in (
        ("winning_bid", winning_bid),
        ("shipping_cost", shipping_cost),
        ("insurance_fee", insurance_fee),
    ):
        if value < ZERO:
            raise PurchaseValidationError(f"{name} must be >= 0")
    return winning_bid + shipping_cost + insurance_fee


def paid_total(payments: Iterable[Payment]) -> Decimal:
    return sum((p.amount for p in payments), ZERO)


def outstanding_balance(total: Decimal, paid: Decimal) -> Decimal:
    return max(ZERO, total - paid)


def payment_progress_percent(total: Decimal, paid: Decimal) -> int:
    """
    Percentage of the total that has been paid, rounded half-up.

    A zero total yields 0 rather than a division error.
    """

    if total <= ZERO:
        return 0
    ratio = Decimal(100) * paid / total
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def require_payable(amount: Decimal, total: Decimal, paid: Decimal) -> None:
    """
    Validate a payment amount against the current outstanding balance.

    Raises:
        PurchaseValidationError: If amount is not positive or exceeds the
            outstanding balance. The amount is never clamped.
    """

    if amount <= ZERO:
        raise PurchaseValidationError("Payment amount must be greater than 0")
    outstanding = outstanding_balance(total, paid)
    if amount > outstanding:
        raise PurchaseValidationError(
            f"Amount cannot exceed outstanding balance of {outstanding:,}"
        )


__all__ = [
    "PaymentStatus",
    "PaymentMethod",
    "Payment",
    "purchase_total",
    "paid_total",
    "outstanding_balance",
    "payment_progress_percent",
    "require_payable",
]
