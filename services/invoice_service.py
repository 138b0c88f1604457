"""
Invoice service for purchases.

Builds an itemized invoice for a purchase: vehicle price, optional shipping
and insurance lines, additional fees and discounts. Fees and discounts exist
only on the invoice; the purchase's total_amount is never changed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Sequence

from domain.errors import PurchaseValidationError
from domain.financials import ZERO
from domain.purchase import Purchase
from domain.time import require_utc_timestamp, utc_now

PAYMENT_TERMS_DAYS = 14


class InvoiceLineKind(str, Enum):
    VEHICLE = "vehicle"
    SHIPPING = "shipping"
    INSURANCE = "insurance"
    FEE = "fee"
    DISCOUNT = "discount"


@dataclass(frozen=True, slots=True)
class InvoiceAdjustment:
    """An extra fee or discount entered for one invoice."""
    description: str
    amount: Decimal  # always positive; the list it is passed in decides the sign


@dataclass(frozen=True, slots=True)
class InvoiceLine:
    kind: InvoiceLineKind
    description: str
    amount: Decimal  # discounts are negative


@dataclass(frozen=True, slots=True)
class Invoice:
    """
    Itemized invoice for one purchase.

    Includes:
    - Charge lines (vehicle, shipping, insurance, fees) and discount lines
    - subtotal (charges only), total (charges minus discounts)
    - amount_paid and balance_due (never negative)
    """
    invoice_number: str
    purchase_id: str
    bill_to: str
    currency: str
    issued_at: datetime
    due_at: datetime
    lines: List[InvoiceLine]
    subtotal: Decimal
    discount_total: Decimal
    total: Decimal
    amount_paid: Decimal
    balance_due: Decimal

    @property
    def is_paid(self) -> bool:
        return self.balance_due == ZERO


def invoice_number_for(auction_id: str) -> str:
    """INV- followed by the auction id without its AUC- prefix."""

    suffix = auction_id[len("AUC-"):] if auction_id.startswith("AUC-") else auction_id
    return f"INV-{suffix}"


def _require_adjustments(kind: str, adjustments: Sequence[InvoiceAdjustment]) -> None:
    for adjustment in adjustments:
        if adjustment.amount < ZERO:
            raise PurchaseValidationError(f"{kind} amount must be >= 0: {adjustment.description}")
        if not adjustment.description:
            raise PurchaseValidationError(f"{kind} description is required")


def build_invoice(
    purchase: Purchase,
    *,
    additional_fees: Sequence[InvoiceAdjustment] = (),
    discounts: Sequence[InvoiceAdjustment] = (),
    include_shipping: bool = True,
    include_insurance: bool = True,
    issued_at: Optional[datetime] = None,
) -> Invoice:
    """
    Build the invoice for a purchase.

    Args:
        purchase: The purchase being billed (not modified)
        additional_fees: Extra charges for this invoice only
        discounts: Reductions for this invoice only
        include_shipping: Add the shipping cost line
        include_insurance: Add the insurance fee line
        issued_at: Invoice date (default: now, UTC); due 14 days later

    Raises:
        PurchaseValidationError: If a fee or discount is negative or unnamed.

    Example:
        invoice = build_invoice(purchase, additional_fees=[InvoiceAdjustment("Customs", Decimal("15000"))])
        print(f"{invoice.invoice_number}: balance due {invoice.balance_due}")
    """
    _require_adjustments("Fee", additional_fees)
    _require_adjustments("Discount", discounts)

    issued = issued_at if issued_at is not None else utc_now()
    require_utc_timestamp("issued_at", issued)

    lines: List[InvoiceLine] = [
        InvoiceLine(InvoiceLineKind.VEHICLE, purchase.vehicle.title, purchase.winning_bid),
    ]
    if include_shipping:
        lines.append(
            InvoiceLine(InvoiceLineKind.SHIPPING, f"Shipping to {purchase.destination_port}", purchase.shipping_cost)
        )
    if include_insurance:
        lines.append(InvoiceLine(InvoiceLineKind.INSURANCE, "Insurance", purchase.insurance_fee))
    for fee in additional_fees:
        lines.append(InvoiceLine(InvoiceLineKind.FEE, fee.description, fee.amount))

    subtotal = sum((line.amount for line in lines), ZERO)

    for discount in discounts:
        lines.append(InvoiceLine(InvoiceLineKind.DISCOUNT, discount.description, -discount.amount))
    discount_total = sum((d.amount for d in discounts), ZERO)

    total = max(ZERO, subtotal - discount_total)
    paid = purchase.paid_amount

    return Invoice(
        invoice_number=invoice_number_for(purchase.auction_id),
        purchase_id=purchase.purchase_id,
        bill_to=purchase.buyer.name,
        currency=purchase.currency,
        issued_at=issued,
        due_at=issued + timedelta(days=PAYMENT_TERMS_DAYS),
        lines=lines,
        subtotal=subtotal,
        discount_total=discount_total,
        total=total,
        amount_paid=paid,
        balance_due=max(ZERO, total - paid),
    )


__all__ = [
    "PAYMENT_TERMS_DAYS",
    "InvoiceLineKind",
    "InvoiceAdjustment",
    "InvoiceLine",
    "Invoice",
    "invoice_number_for",
    "build_invoice",
]
