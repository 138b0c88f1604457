"""
Tests for `domain/purchase.py`.

Covers contract rules:
- total_amount is fixed at creation; paid_amount only grows through record_payment.
- Uploading any document while documents_pending moves status to processing.
- update_shipping moves status to shipping; shipment identity is immutable.
- mark_delivered / mark_completed are idempotent; timeline keys are write-once.
- Workflow: payments are mirrored, current_stage cannot be set, locked stages
  cannot be edited, finalized workflows reject updates.
- No side effects: transitions return new instances; prior purchases are unchanged.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

import pytest

from domain.documents import ChecklistKey, DocumentType
from domain.errors import InvariantViolationError, PurchaseValidationError
from domain.financials import PaymentMethod, PaymentStatus
from domain.purchase import Purchase, Timeline
from domain.shipment import ShipmentStatus
from domain.status import PurchaseStatus

from builders import ADMIN, T0, complete_through, make_document, make_purchase, make_shipment


def _pay(purchase: Purchase, amount: str, payment_id: str = "pay-1", at=T0) -> Purchase:
    updated, _ = purchase.record_payment(
        payment_id=payment_id,
        amount=Decimal(amount),
        method=PaymentMethod.WIRE_TRANSFER,
        paid_at=at,
        reference_number="WT-1",
        recorded_by=ADMIN,
        recorded_at=at,
    )
    return updated


def test_create_computes_total_and_starts_empty() -> None:
    purchase = make_purchase()

    assert purchase.total_amount == Decimal("1000000")
    assert purchase.status is PurchaseStatus.PAYMENT_PENDING
    assert purchase.paid_amount == Decimal("0")
    assert purchase.payment_status is PaymentStatus.PENDING
    assert purchase.payments == () and purchase.documents == ()
    assert purchase.shipment is None
    assert purchase.timeline == Timeline()


def test_payment_scenario_partial_rejected_then_completed() -> None:
    """Pay 600k of 1M, try 500k (rejected), then pay the remaining 400k."""

    purchase = make_purchase()

    partial = _pay(purchase, "600000")
    assert partial.payment_status is PaymentStatus.PARTIAL
    assert partial.outstanding_balance == Decimal("400000")
    assert partial.payment_progress_percent == 60

    with pytest.raises(PurchaseValidationError):
        _pay(partial, "500000", payment_id="pay-2")
    assert partial.paid_amount == Decimal("600000")
    assert len(partial.payments) == 1

    paid = _pay(partial, "400000", payment_id="pay-3")
    assert paid.payment_status is PaymentStatus.COMPLETED
    assert paid.outstanding_balance == Decimal("0")
    assert paid.payment_progress_percent == 100
    assert paid.status is PurchaseStatus.PAYMENT_PENDING
    assert purchase.paid_amount == Decimal("0")


def test_payment_received_timestamp_is_write_once() -> None:
    first = _pay(make_purchase(), "100", at=T0)
    second = _pay(first, "100", payment_id="pay-2", at=T0 + timedelta(days=1))

    assert second.timeline.payment_received == T0
    assert second.updated_at == T0 + timedelta(days=1)


def test_total_is_not_recomputed_when_components_change() -> None:
    purchase = replace(make_purchase(), shipping_cost=Decimal("999999"))
    assert purchase.total_amount == Decimal("1000000")


def test_upload_at_documents_pending_moves_to_processing() -> None:
    """Scenario: documents_pending with no documents; upload one invoice."""

    purchase = make_purchase(status=PurchaseStatus.DOCUMENTS_PENDING)

    updated = purchase.add_documents([make_document("d1", DocumentType.INVOICE)], received_by=ADMIN, at=T0)

    assert updated.status is PurchaseStatus.PROCESSING
    completion = updated.document_completion()
    assert (completion.completed, completion.total) == (1, 3)
    assert updated.timeline.documents_uploaded == T0


@pytest.mark.parametrize(
    "status",
    [PurchaseStatus.PAYMENT_PENDING, PurchaseStatus.PROCESSING, PurchaseStatus.SHIPPING],
)
def test_upload_outside_documents_pending_keeps_status(status: PurchaseStatus) -> None:
    purchase = make_purchase(status=status)
    updated = purchase.add_documents([make_document("d1", DocumentType.OTHER)], received_by=ADMIN, at=T0)
    assert updated.status is status


def test_upload_rejects_empty_batch_and_duplicate_ids() -> None:
    purchase = make_purchase().add_documents([make_document("d1")], received_by=ADMIN, at=T0)

    with pytest.raises(PurchaseValidationError):
        purchase.add_documents([], received_by=ADMIN, at=T0)
    with pytest.raises(PurchaseValidationError, match="d1"):
        purchase.add_documents([make_document("d1")], received_by=ADMIN, at=T0)


def test_upload_marks_mapped_checklist_keys_when_workflow_in_use() -> None:
    purchase = make_purchase(with_workflow=True)

    updated = purchase.add_documents(
        [
            make_document("d1", DocumentType.EXPORT_CERTIFICATE),
            make_document("d2", DocumentType.EXPORT_CERTIFICATE),
            make_document("d3", DocumentType.OTHER),
        ],
        received_by=ADMIN,
        at=T0,
    )
    checklist = updated.workflow.stages.documents_received.checklist

    assert checklist[ChecklistKey.EXPORT_CERTIFICATE].received is True
    assert checklist[ChecklistKey.EXPORT_CERTIFICATE].document_id == "d1"
    assert checklist[ChecklistKey.EXPORT_CERTIFICATE].received_by == ADMIN
    assert checklist[ChecklistKey.INVOICE].received is False


def test_explicit_checklist_key_uses_first_uploaded_document() -> None:
    purchase = make_purchase(with_workflow=True)

    updated = purchase.add_documents(
        [make_document("d1", DocumentType.OTHER), make_document("d2", DocumentType.OTHER)],
        received_by=ADMIN,
        at=T0,
        checklist_key=ChecklistKey.NUMBER_PLATES,
    )

    item = updated.workflow.stages.documents_received.checklist[ChecklistKey.NUMBER_PLATES]
    assert item.received is True
    assert item.document_id == "d1"


def test_remove_document_requires_known_id() -> None:
    purchase = make_purchase().add_documents(
        [make_document("d1"), make_document("d2")], received_by=ADMIN, at=T0
    )

    updated = purchase.remove_document("d1", at=T0)

    assert [d.document_id for d in updated.documents] == ["d2"]
    with pytest.raises(PurchaseValidationError):
        updated.remove_document("d1", at=T0)


def test_update_shipping_moves_to_shipping_and_stamps_once() -> None:
    """Scenario: processing without shipment; update_shipping twice."""

    purchase = make_purchase(status=PurchaseStatus.PROCESSING)

    shipped = purchase.update_shipping(make_shipment(), at=T0)
    moved = shipped.update_shipping(
        make_shipment(status=ShipmentStatus.AT_PORT, location="Mombasa"), at=T0 + timedelta(days=20)
    )

    assert shipped.status is PurchaseStatus.SHIPPING
    assert shipped.shipment is not None
    assert shipped.timeline.shipping_started == T0
    assert moved.timeline.shipping_started == T0
    assert moved.shipment.status is ShipmentStatus.AT_PORT


def test_update_shipping_rejects_identity_change() -> None:
    shipped = make_purchase().update_shipping(make_shipment(), at=T0)

    with pytest.raises(PurchaseValidationError):
        shipped.update_shipping(make_shipment(tracking_number="OTHER"), at=T0)


@pytest.mark.parametrize("status", [PurchaseStatus.DELIVERED, PurchaseStatus.COMPLETED])
def test_update_shipping_rejected_after_delivery(status: PurchaseStatus) -> None:
    with pytest.raises(InvariantViolationError):
        make_purchase(status=status).update_shipping(make_shipment(), at=T0)


def test_mark_delivered_closes_shipment_and_is_idempotent() -> None:
    shipped = make_purchase().update_shipping(make_shipment(), at=T0)
    later = T0 + timedelta(days=30)

    delivered = shipped.mark_delivered(at=later)
    again = delivered.mark_delivered(at=later + timedelta(days=1))

    assert delivered.status is PurchaseStatus.DELIVERED
    assert delivered.shipment.status is ShipmentStatus.DELIVERED
    assert delivered.shipment.events[-1].location == "Mombasa"
    assert delivered.timeline.delivered == later
    assert again is delivered


def test_mark_delivered_rejected_when_completed() -> None:
    with pytest.raises(InvariantViolationError):
        make_purchase(status=PurchaseStatus.COMPLETED).mark_delivered(at=T0)


def test_mark_completed_twice_leaves_state_unchanged() -> None:
    completed = make_purchase().mark_completed(at=T0)
    again = completed.mark_completed(at=T0 + timedelta(days=1))

    assert again is completed
    assert again.timeline.completed == T0
    assert again.can_advance is False


def test_advance_status_forward_only() -> None:
    processing = make_purchase().advance_status(PurchaseStatus.PROCESSING, at=T0)

    assert processing.status is PurchaseStatus.PROCESSING
    assert processing.advance_status(PurchaseStatus.PROCESSING, at=T0) is processing
    with pytest.raises(InvariantViolationError):
        processing.advance_status(PurchaseStatus.PAYMENT_PENDING, at=T0)
    with pytest.raises(InvariantViolationError):
        processing.mark_completed(at=T0).advance_status(PurchaseStatus.SHIPPING, at=T0)


def test_can_advance_requires_completed_payment_at_payment_pending() -> None:
    purchase = make_purchase()

    assert purchase.can_advance is False
    assert _pay(purchase, "1000000").can_advance is True
    assert make_purchase(status=PurchaseStatus.PROCESSING).can_advance is True


def test_current_stage_label_prefers_workflow() -> None:
    assert make_purchase().current_stage_label == "Payment Pending"
    assert make_purchase(with_workflow=True).current_stage_label == "After Purchase"


def test_start_workflow_is_noop_when_already_started() -> None:
    purchase = make_purchase(with_workflow=True)
    assert purchase.start_workflow(at=T0 + timedelta(days=1)) is purchase


def test_payments_are_mirrored_into_workflow() -> None:
    purchase = _pay(make_purchase(with_workflow=True), "1000")

    assert [p.payment_id for p in purchase.workflow.stages.payment_processing.payments] == ["pay-1"]
    assert purchase.workflow.stages.payment_processing.total_received == Decimal("1000")


def test_update_workflow_auto_advances_one_stage() -> None:
    purchase = make_purchase(with_workflow=True)
    submitted = complete_through(purchase.workflow, 1)

    updated = purchase.update_workflow(submitted, at=T0)

    assert updated.workflow.current_stage == 2
    assert updated.current_stage_label == "Transport"


def test_update_workflow_rejects_locked_stage_edits() -> None:
    """Stage 2 content cannot be submitted while stage 1 is incomplete."""

    purchase = make_purchase(with_workflow=True)
    stage_two_only = complete_through(purchase.workflow, 2)
    stage_two_only = replace(
        stage_two_only,
        stages=replace(stage_two_only.stages, after_purchase=purchase.workflow.stages.after_purchase),
    )

    with pytest.raises(PurchaseValidationError, match="Stage 2"):
        purchase.update_workflow(stage_two_only, at=T0)


def test_update_workflow_rejects_setting_current_stage_or_payments() -> None:
    purchase = make_purchase(with_workflow=True)

    with pytest.raises(PurchaseValidationError):
        purchase.update_workflow(replace(purchase.workflow, current_stage=5), at=T0)
    with pytest.raises(PurchaseValidationError):
        purchase.update_workflow(replace(purchase.workflow, finalized=True), at=T0)
    with pytest.raises(PurchaseValidationError):
        purchase.update_workflow(complete_through(purchase.workflow, 3), at=T0)


def test_update_workflow_requires_started_workflow() -> None:
    purchase = make_purchase(with_workflow=True)
    with pytest.raises(PurchaseValidationError):
        make_purchase().update_workflow(purchase.workflow, at=T0)


def test_finalized_workflow_rejects_updates() -> None:
    purchase = make_purchase(with_workflow=True).finalize_workflow(finalized_by=ADMIN, at=T0)

    assert purchase.workflow.finalized is True
    assert purchase.finalize_workflow(finalized_by=ADMIN, at=T0 + timedelta(days=1)) is purchase
    with pytest.raises(InvariantViolationError):
        purchase.update_workflow(complete_through(purchase.workflow, 1), at=T0)


def test_paid_amount_never_exceeds_total() -> None:
    purchase = make_purchase(winning_bid=Decimal("100"), shipping_cost=Decimal("0"), insurance_fee=Decimal("0"))

    for index, amount in enumerate(["30", "50", "40", "20", "1"]):
        try:
            purchase = _pay(purchase, amount, payment_id=f"pay-{index}")
        except PurchaseValidationError:
            pass
        assert purchase.paid_amount <= purchase.total_amount

    assert purchase.paid_amount == Decimal("100")


def test_purchase_with_workflow_is_hashable() -> None:
    purchase = make_purchase(with_workflow=True)

    assert hash(purchase) == hash(make_purchase(with_workflow=True))
