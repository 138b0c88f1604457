"""
Purchase listing queries.

Read-only views over a list of purchases for the purchases dashboard:
- Tabs: all, pending_payment, pending_documents, in_shipping, completed
- Filters: text search, VIN search, status, payment status, auction end date
  range, total value range, destination ports
- Sorting: date-newest (default), date-oldest, value-high, value-low,
  payment-progress
- Pagination with page sizes 20/40/60/100
- Statistics and the unique destination ports used by the port filter

Nothing here mutates a purchase.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from config.settings import PAGE_SIZE_OPTIONS
from domain.errors import PurchaseValidationError
from domain.financials import ZERO, PaymentStatus
from domain.purchase import Purchase
from domain.status import PurchaseStatus


class PurchaseTab(str, Enum):
    ALL = "all"
    PENDING_PAYMENT = "pending_payment"
    PENDING_DOCUMENTS = "pending_documents"
    IN_SHIPPING = "in_shipping"
    COMPLETED = "completed"


class SortOption(str, Enum):
    DATE_NEWEST = "date-newest"
    DATE_OLDEST = "date-oldest"
    VALUE_HIGH = "value-high"
    VALUE_LOW = "value-low"
    PAYMENT_PROGRESS = "payment-progress"


@dataclass(frozen=True, slots=True)
class PurchaseFilters:
    """Filter criteria for purchase listings. Unset criteria match everything."""
    search: str = ""  # make, model, buyer name, auction id
    vin_search: str = ""
    status: Optional[PurchaseStatus] = None
    payment_status: Optional[PaymentStatus] = None
    date_from: Optional[datetime] = None  # inclusive, compared to auction_end_date
    date_to: Optional[datetime] = None
    value_min: Optional[Decimal] = None  # inclusive, compared to total_amount
    value_max: Optional[Decimal] = None
    destination_ports: Sequence[str] = field(default_factory=tuple)

    @property
    def is_active(self) -> bool:
        return bool(
            self.search
            or self.vin_search
            or self.status is not None
            or self.payment_status is not None
            or self.date_from is not None
            or self.date_to is not None
            or self.value_min is not None
            or self.value_max is not None
            or self.destination_ports
        )


@dataclass(frozen=True, slots=True)
class PurchasePage:
    items: List[Purchase]
    page: int
    per_page: int
    total_items: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.per_page)


@dataclass(frozen=True, slots=True)
class PurchaseStats:
    total_purchases: int
    pending_payment: int
    in_shipping: int
    total_value: Decimal  # sum of winning bids


def in_tab(purchase: Purchase, tab: PurchaseTab) -> bool:
    if tab is PurchaseTab.PENDING_PAYMENT:
        return purchase.payment_status is not PaymentStatus.COMPLETED
    if tab is PurchaseTab.PENDING_DOCUMENTS:
        return purchase.status is PurchaseStatus.DOCUMENTS_PENDING
    if tab is PurchaseTab.IN_SHIPPING:
        return purchase.status is PurchaseStatus.SHIPPING
    if tab is PurchaseTab.COMPLETED:
        return purchase.status is PurchaseStatus.COMPLETED
    return True


def matches_filters(purchase: Purchase, filters: PurchaseFilters) -> bool:
    if filters.search:
        needle = filters.search.lower()
        haystack = (
            purchase.vehicle.make,
            purchase.vehicle.model,
            purchase.buyer.name,
            purchase.auction_id,
        )
        if not any(needle in value.lower() for value in haystack):
            return False
    if filters.vin_search and filters.vin_search.lower() not in purchase.vehicle.vin.lower():
        return False
    if filters.status is not None and purchase.status is not filters.status:
        return False
    if filters.payment_status is not None and purchase.payment_status is not filters.payment_status:
        return False
    if filters.date_from is not None and purchase.auction_end_date < filters.date_from:
        return False
    if filters.date_to is not None and purchase.auction_end_date > filters.date_to:
        return False
    if filters.value_min is not None and purchase.total_amount < filters.value_min:
        return False
    if filters.value_max is not None and purchase.total_amount > filters.value_max:
        return False
    if filters.destination_ports and purchase.destination_port not in filters.destination_ports:
        return False
    return True


def _paid_ratio(purchase: Purchase) -> Decimal:
    if purchase.total_amount <= ZERO:
        return ZERO
    return purchase.paid_amount / purchase.total_amount


def sort_purchases(purchases: Iterable[Purchase], sort_by: SortOption = SortOption.DATE_NEWEST) -> List[Purchase]:
    """Stable sort; ties keep their input order."""

    items = list(purchases)
    if sort_by is SortOption.DATE_NEWEST:
        return sorted(items, key=lambda p: p.auction_end_date, reverse=True)
    if sort_by is SortOption.DATE_OLDEST:
        return sorted(items, key=lambda p: p.auction_end_date)
    if sort_by is SortOption.VALUE_HIGH:
        return sorted(items, key=lambda p: p.total_amount, reverse=True)
    if sort_by is SortOption.VALUE_LOW:
        return sorted(items, key=lambda p: p.total_amount)
    if sort_by is SortOption.PAYMENT_PROGRESS:
        return sorted(items, key=_paid_ratio, reverse=True)
    return items


def paginate(purchases: Sequence[Purchase], *, page: int = 1, per_page: int = 20) -> PurchasePage:
    """
    Slice one 1-based page.

    Raises:
        PurchaseValidationError: If page < 1 or per_page is not an allowed size.
    """

    if page < 1:
        raise PurchaseValidationError("page must be >= 1")
    if per_page not in PAGE_SIZE_OPTIONS:
        raise PurchaseValidationError(
            f"per_page must be one of {', '.join(str(n) for n in PAGE_SIZE_OPTIONS)}"
        )
    start = (page - 1) * per_page
    return PurchasePage(
        items=list(purchases[start:start + per_page]),
        page=page,
        per_page=per_page,
        total_items=len(purchases),
    )


def query_purchases(
    purchases: Iterable[Purchase],
    *,
    tab: PurchaseTab = PurchaseTab.ALL,
    filters: Optional[PurchaseFilters] = None,
    sort_by: SortOption = SortOption.DATE_NEWEST,
    page: int = 1,
    per_page: int = 20,
) -> PurchasePage:
    """Tab, then filters, then sort, then paginate."""

    criteria = filters if filters is not None else PurchaseFilters()
    selected = [p for p in purchases if in_tab(p, tab) and matches_filters(p, criteria)]
    return paginate(sort_purchases(selected, sort_by), page=page, per_page=per_page)


def purchase_stats(purchases: Iterable[Purchase]) -> PurchaseStats:
    items = list(purchases)
    return PurchaseStats(
        total_purchases=len(items),
        pending_payment=sum(1 for p in items if p.payment_status is not PaymentStatus.COMPLETED),
        in_shipping=sum(1 for p in items if p.status is PurchaseStatus.SHIPPING),
        total_value=sum((p.winning_bid for p in items), ZERO),
    )


def unique_destination_ports(purchases: Iterable[Purchase]) -> List[str]:
    """Distinct non-empty destination ports in first-seen order."""

    seen: List[str] = []
    for purchase in purchases:
        if purchase.destination_port and purchase.destination_port not in seen:
            seen.append(purchase.destination_port)
    return seen


__all__ = [
    "PurchaseTab",
    "SortOption",
    "PurchaseFilters",
    "PurchasePage",
    "PurchaseStats",
    "in_tab",
    "matches_filters",
    "sort_purchases",
    "paginate",
    "query_purchases",
    "purchase_stats",
    "unique_destination_ports",
]
