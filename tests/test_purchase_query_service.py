"""
Tests for `services/purchase_query_service.py`.

Covers listing behavior:
- Tabs select by payment status or status.
- Filters combine (search, VIN, status, payment, dates, values, ports).
- Sort options order purchases; ties keep input order.
- Pagination uses 1-based pages and allowed page sizes only.
- Statistics and unique destination ports.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

import pytest

from domain.errors import PurchaseValidationError
from domain.financials import PaymentMethod, PaymentStatus
from domain.status import PurchaseStatus
from services.purchase_query_service import (
    PurchaseFilters,
    PurchaseTab,
    SortOption,
    paginate,
    purchase_stats,
    query_purchases,
    sort_purchases,
    unique_destination_ports,
)

from builders import ADMIN, T0, make_purchase


def _paid(purchase, amount: str):
    updated, _ = purchase.record_payment(
        payment_id=f"{purchase.purchase_id}-pay",
        amount=Decimal(amount),
        method=PaymentMethod.CARD,
        paid_at=T0,
        reference_number="R",
        recorded_by=ADMIN,
        recorded_at=T0,
    )
    return updated


@pytest.fixture
def purchases():
    return [
        _paid(
            make_purchase(
                purchase_id="a",
                auction_id="AUC-001",
                winning_bid=Decimal("500"),
                shipping_cost=Decimal("0"),
                insurance_fee=Decimal("0"),
                auction_end_date=T0 - timedelta(days=3),
                destination_port="Mombasa",
            ),
            "500",
        ),
        make_purchase(
            purchase_id="b",
            auction_id="AUC-002",
            make="Nissan",
            model="Patrol",
            vin="NISSANVIN0001",
            buyer_name="Omar Ali",
            winning_bid=Decimal("2000"),
            shipping_cost=Decimal("0"),
            insurance_fee=Decimal("0"),
            status=PurchaseStatus.SHIPPING,
            auction_end_date=T0 - timedelta(days=1),
            destination_port="Dar es Salaam",
        ),
        _paid(
            make_purchase(
                purchase_id="c",
                auction_id="AUC-003",
                make="Honda",
                model="Fit",
                vin="HONDAVIN0001",
                winning_bid=Decimal("1000"),
                shipping_cost=Decimal("0"),
                insurance_fee=Decimal("0"),
                status=PurchaseStatus.DOCUMENTS_PENDING,
                auction_end_date=T0 - timedelta(days=2),
                destination_port="Mombasa",
            ),
            "250",
        ),
    ]


def _ids(page) -> list:
    return [p.purchase_id for p in page.items]


@pytest.mark.parametrize(
    "tab, expected",
    [
        (PurchaseTab.ALL, ["b", "c", "a"]),
        (PurchaseTab.PENDING_PAYMENT, ["b", "c"]),
        (PurchaseTab.PENDING_DOCUMENTS, ["c"]),
        (PurchaseTab.IN_SHIPPING, ["b"]),
        (PurchaseTab.COMPLETED, []),
    ],
)
def test_tabs(purchases, tab: PurchaseTab, expected: list) -> None:
    assert _ids(query_purchases(purchases, tab=tab)) == expected


def test_search_matches_make_model_buyer_and_auction_id(purchases) -> None:
    assert _ids(query_purchases(purchases, filters=PurchaseFilters(search="patrol"))) == ["b"]
    assert _ids(query_purchases(purchases, filters=PurchaseFilters(search="omar"))) == ["b"]
    assert _ids(query_purchases(purchases, filters=PurchaseFilters(search="auc-003"))) == ["c"]


def test_vin_status_and_payment_filters(purchases) -> None:
    assert _ids(query_purchases(purchases, filters=PurchaseFilters(vin_search="hondavin"))) == ["c"]
    assert _ids(query_purchases(purchases, filters=PurchaseFilters(status=PurchaseStatus.SHIPPING))) == ["b"]
    assert _ids(
        query_purchases(purchases, filters=PurchaseFilters(payment_status=PaymentStatus.COMPLETED))
    ) == ["a"]


def test_date_and_value_ranges_are_inclusive(purchases) -> None:
    by_date = PurchaseFilters(date_from=T0 - timedelta(days=2), date_to=T0 - timedelta(days=1))
    by_value = PurchaseFilters(value_min=Decimal("1000"), value_max=Decimal("2000"))

    assert _ids(query_purchases(purchases, filters=by_date)) == ["b", "c"]
    assert _ids(query_purchases(purchases, filters=by_value)) == ["b", "c"]


def test_destination_port_filter(purchases) -> None:
    filters = PurchaseFilters(destination_ports=("Mombasa",))
    assert _ids(query_purchases(purchases, filters=filters)) == ["c", "a"]
    assert filters.is_active is True
    assert PurchaseFilters().is_active is False


@pytest.mark.parametrize(
    "sort_by, expected",
    [
        (SortOption.DATE_NEWEST, ["b", "c", "a"]),
        (SortOption.DATE_OLDEST, ["a", "c", "b"]),
        (SortOption.VALUE_HIGH, ["b", "c", "a"]),
        (SortOption.VALUE_LOW, ["a", "c", "b"]),
        (SortOption.PAYMENT_PROGRESS, ["a", "c", "b"]),
    ],
)
def test_sort_options(purchases, sort_by: SortOption, expected: list) -> None:
    assert [p.purchase_id for p in sort_purchases(purchases, sort_by)] == expected


def test_payment_progress_sort_treats_zero_total_as_zero(purchases) -> None:
    free = make_purchase(
        purchase_id="z", winning_bid=Decimal("0"), shipping_cost=Decimal("0"), insurance_fee=Decimal("0")
    )
    ordered = sort_purchases([free] + purchases, SortOption.PAYMENT_PROGRESS)
    assert [p.purchase_id for p in ordered] == ["a", "c", "z", "b"]


def test_pagination(purchases) -> None:
    many = [replace(purchases[0], purchase_id=f"p{i}") for i in range(45)]

    page = paginate(many, page=3, per_page=20)

    assert len(page.items) == 5
    assert page.total_items == 45
    assert page.total_pages == 3
    assert paginate(many, page=4, per_page=20).items == []


@pytest.mark.parametrize("page, per_page", [(0, 20), (1, 25)])
def test_pagination_rejects_bad_arguments(purchases, page: int, per_page: int) -> None:
    with pytest.raises(PurchaseValidationError):
        paginate(purchases, page=page, per_page=per_page)


def test_stats_and_unique_ports(purchases) -> None:
    stats = purchase_stats(purchases)

    assert stats.total_purchases == 3
    assert stats.pending_payment == 2
    assert stats.in_shipping == 1
    assert stats.total_value == Decimal("3500")
    assert unique_destination_ports(purchases) == ["Mombasa", "Dar es Salaam"]
