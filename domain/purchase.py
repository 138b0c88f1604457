"""
Domain: Purchase aggregate.

A Purchase is one won-auction (or stock) vehicle acquisition and its
fulfillment lifecycle. It owns both the coarse status and the optional
8-stage workflow, and is the only place either of them changes.

Contract excerpts implemented here:
- total_amount is computed once at creation and never recomputed.
- paid_amount is the sum of recorded payments; record_payment is the only way
  it increases, and it never exceeds total_amount.
- Uploading any document while documents_pending moves status to processing.
- update_shipping moves status to shipping and stamps shipping_started.
- Timeline milestones are write-once: repeating an action never rewrites the
  first timestamp.
- The workflow's payment processing stage mirrors the purchase's payments and
  its current_stage only moves through auto-advancement.

This module contains only pure domain entities: no I/O, no logging.
Every transition returns a new Purchase; a rejected transition raises and
leaves the original untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from .documents import (
    ChecklistKey,
    Document,
    DocumentCompletion,
    RequiredDocumentStatus,
    document_completion,
    required_documents_status,
)
from .errors import PurchaseValidationError
from .financials import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    outstanding_balance as balance_after_payments,
    paid_total,
    payment_progress_percent as progress_percent,
    purchase_total,
    require_payable,
)
from .shipment import Shipment
from .status import PurchaseStatus, require_forward_transition
from .time import require_utc_timestamp
from .vehicle import BuyerInfo, PurchaseSource, VehicleInfo
from .workflow import (
    PurchaseWorkflow,
    advance_if_complete,
    can_access_stage,
    changed_stages,
    create_default_workflow,
    finalize,
    mark_checklist_received,
    require_not_finalized,
    stage_label,
    with_payments,
)


@dataclass(frozen=True, slots=True)
class Timeline:
    """Sparse milestone timestamps. Each key is written at most once."""

    payment_received: Optional[datetime] = None
    documents_uploaded: Optional[datetime] = None
    shipping_started: Optional[datetime] = None
    delivered: Optional[datetime] = None
    completed: Optional[datetime] = None

    def stamp(self, milestone: str, at: datetime) -> "Timeline":
        """Return a timeline with `milestone` set to `at` unless it is already set."""

        require_utc_timestamp(milestone, at)
        if getattr(self, milestone) is not None:
            return self
        return replace(self, **{milestone: at})


@dataclass(frozen=True, slots=True)
class Purchase:
    purchase_id: str
    auction_id: str
    source: PurchaseSource
    vehicle: VehicleInfo
    buyer: BuyerInfo
    winning_bid: Decimal
    shipping_cost: Decimal
    insurance_fee: Decimal
    total_amount: Decimal
    currency: str
    destination_port: str
    auction_end_date: datetime
    created_at: datetime
    updated_at: datetime
    status: PurchaseStatus = PurchaseStatus.PAYMENT_PENDING
    payments: Tuple[Payment, ...] = ()
    documents: Tuple[Document, ...] = ()
    shipment: Optional[Shipment] = None
    timeline: Timeline = field(default_factory=Timeline)
    workflow: Optional[PurchaseWorkflow] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("auction_end_date", self.auction_end_date)
        require_utc_timestamp("created_at", self.created_at)
        require_utc_timestamp("updated_at", self.updated_at)
        if not self.purchase_id:
            raise PurchaseValidationError("purchase_id is required")
        if not self.auction_id:
            raise PurchaseValidationError("auction_id is required")

    @staticmethod
    def create(
        *,
        purchase_id: str,
        auction_id: str,
        source: PurchaseSource,
        vehicle: VehicleInfo,
        buyer: BuyerInfo,
        winning_bid: Decimal,
        shipping_cost: Decimal,
        insurance_fee: Decimal,
        currency: str,
        destination_port: str,
        auction_end_date: datetime,
        created_at: datetime,
        notes: Optional[str] = None,
    ) -> "Purchase":
        """New purchase in payment_pending with no payments, documents or shipment."""

        return Purchase(
            purchase_id=purchase_id,
            auction_id=auction_id,
            source=source,
            vehicle=vehicle,
            buyer=buyer,
            winning_bid=winning_bid,
            shipping_cost=shipping_cost,
            insurance_fee=insurance_fee,
            total_amount=purchase_total(winning_bid, shipping_cost, insurance_fee),
            currency=currency,
            destination_port=destination_port,
            auction_end_date=auction_end_date,
            created_at=created_at,
            updated_at=created_at,
            notes=notes,
        )

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def paid_amount(self) -> Decimal:
        return paid_total(self.payments)

    @property
    def payment_status(self) -> PaymentStatus:
        return PaymentStatus.for_amounts(self.paid_amount, self.total_amount)

    @property
    def outstanding_balance(self) -> Decimal:
        return balance_after_payments(self.total_amount, self.paid_amount)

    @property
    def payment_progress_percent(self) -> int:
        return progress_percent(self.total_amount, self.paid_amount)

    @property
    def current_stage_label(self) -> str:
        """Workflow stage label when the workflow is in use, otherwise the status label."""

        if self.workflow is not None:
            return stage_label(self.workflow.current_stage)
        return self.status.label

    @property
    def can_advance(self) -> bool:
        if self.status.is_terminal:
            return False
        if self.status is PurchaseStatus.PAYMENT_PENDING:
            return self.payment_status is PaymentStatus.COMPLETED
        return True

    def required_documents_status(self) -> List[RequiredDocumentStatus]:
        return required_documents_status(self.status, self.documents)

    def document_completion(self) -> DocumentCompletion:
        return document_completion(self.status, self.documents)

    def find_document(self, document_id: str) -> Optional[Document]:
        for document in self.documents:
            if document.document_id == document_id:
                return document
        return None

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def record_payment(
        self,
        *,
        payment_id: str,
        amount: Decimal,
        method: PaymentMethod,
        paid_at: datetime,
        reference_number: str,
        recorded_by: str,
        recorded_at: datetime,
        notes: Optional[str] = None,
    ) -> tuple["Purchase", Payment]:
        """
        Append a payment to the ledger.

        Status is never changed here; leaving payment_pending is a caller
        decision (see advance_status).

        Raises:
            PurchaseValidationError: If the amount is not positive or exceeds
                the outstanding balance.
        """

        require_payable(amount, self.total_amount, self.paid_amount)
        payment = Payment(
            payment_id=payment_id,
            purchase_id=self.purchase_id,
            amount=amount,
            method=method,
            paid_at=paid_at,
            reference_number=reference_number,
            recorded_by=recorded_by,
            recorded_at=recorded_at,
            notes=notes,
        )
        updated = replace(
            self,
            payments=self.payments + (payment,),
            timeline=self.timeline.stamp("payment_received", recorded_at),
            updated_at=recorded_at,
        )
        return updated._synced_workflow(recorded_at), payment

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def add_documents(
        self,
        documents: Sequence[Document],
        *,
        received_by: str,
        at: datetime,
        checklist_key: Optional[ChecklistKey] = None,
    ) -> "Purchase":
        """
        Attach uploaded documents.

        Any upload while documents_pending moves status to processing,
        whatever the document types. When the workflow is in use, each
        uploaded type that maps to a checklist key marks that key (first
        document of the type wins), and an explicit checklist_key is marked
        with the first uploaded document.
        """

        if not documents:
            raise PurchaseValidationError("At least one document is required")
        known_ids = {d.document_id for d in self.documents}
        for document in documents:
            if document.document_id in known_ids:
                raise PurchaseValidationError(f"Duplicate document id: {document.document_id}")
            known_ids.add(document.document_id)

        status = self.status
        if status is PurchaseStatus.DOCUMENTS_PENDING:
            status = PurchaseStatus.PROCESSING

        updated = replace(
            self,
            documents=self.documents + tuple(documents),
            status=status,
            timeline=self.timeline.stamp("documents_uploaded", at),
            updated_at=at,
        )

        workflow = updated.workflow
        if workflow is None or workflow.finalized:
            return updated

        checklist = workflow.stages.documents_received.checklist
        marked = set()
        for document in documents:
            key = document.type.checklist_key
            if key is None or key in marked:
                continue
            existing = checklist.get(key)
            if existing is not None and existing.received:
                continue
            workflow = mark_checklist_received(
                workflow, key, document_id=document.document_id, received_by=received_by, received_at=at
            )
            marked.add(key)
        if checklist_key is not None:
            workflow = mark_checklist_received(
                workflow,
                checklist_key,
                document_id=documents[0].document_id,
                received_by=received_by,
                received_at=at,
            )
        return replace(updated, workflow=workflow)._synced_workflow(at)

    def remove_document(self, document_id: str, *, at: datetime) -> "Purchase":
        """Explicit admin delete. Status and checklist entries are left as they are."""

        if self.find_document(document_id) is None:
            raise PurchaseValidationError(f"Document not found: {document_id}")
        remaining = tuple(d for d in self.documents if d.document_id != document_id)
        return replace(self, documents=remaining, updated_at=at)

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def update_shipping(self, shipment: Shipment, *, at: datetime) -> "Purchase":
        """
        Attach or update the shipment and move status to shipping.

        Payment and document completeness are not checked.

        Raises:
            InvariantViolationError: If the purchase is delivered or completed.
            PurchaseValidationError: If carrier or tracking number would change.
        """

        require_forward_transition(self.status, PurchaseStatus.SHIPPING)
        if self.shipment is not None and not self.shipment.same_identity(shipment):
            raise PurchaseValidationError("Shipment carrier and tracking number cannot be changed")
        return replace(
            self,
            shipment=shipment,
            status=PurchaseStatus.SHIPPING,
            timeline=self.timeline.stamp("shipping_started", at),
            updated_at=at,
        )

    def mark_delivered(self, *, at: datetime, location: Optional[str] = None) -> "Purchase":
        if self.status is PurchaseStatus.DELIVERED:
            return self
        require_forward_transition(self.status, PurchaseStatus.DELIVERED)
        shipment = self.shipment
        if shipment is not None:
            shipment = shipment.delivered(at=at, location=location or self.destination_port)
        return replace(
            self,
            shipment=shipment,
            status=PurchaseStatus.DELIVERED,
            timeline=self.timeline.stamp("delivered", at),
            updated_at=at,
        )

    def mark_completed(self, *, at: datetime) -> "Purchase":
        if self.status is PurchaseStatus.COMPLETED:
            return self
        return replace(
            self,
            status=PurchaseStatus.COMPLETED,
            timeline=self.timeline.stamp("completed", at),
            updated_at=at,
        )

    def advance_status(self, target: PurchaseStatus, *, at: datetime) -> "Purchase":
        """
        Caller-driven forward move to `target`.

        Raises:
            InvariantViolationError: If `target` ranks lower than the current
                status or the purchase is completed.
        """

        if target is self.status:
            return self
        require_forward_transition(self.status, target)
        if target is PurchaseStatus.DELIVERED:
            return self.mark_delivered(at=at)
        if target is PurchaseStatus.COMPLETED:
            return self.mark_completed(at=at)
        timeline = self.timeline
        if target is PurchaseStatus.SHIPPING:
            timeline = timeline.stamp("shipping_started", at)
        return replace(self, status=target, timeline=timeline, updated_at=at)

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    def start_workflow(self, *, at: datetime) -> "Purchase":
        """Attach a default workflow. A purchase that already has one is returned unchanged."""

        if self.workflow is not None:
            return self
        workflow = create_default_workflow(created_at=at)
        return replace(self, workflow=workflow, updated_at=at)._synced_workflow(at)

    def update_workflow(self, submitted: PurchaseWorkflow, *, at: datetime) -> "Purchase":
        """
        Accept edited stage content from a caller.

        Only stage content is taken from `submitted`. current_stage and
        finalized stay owned by the aggregate, payment processing stays a
        mirror of the payment ledger, and only stages that are accessible in
        the stored workflow may change.

        Raises:
            PurchaseValidationError: If no workflow is started, the submission
                tries to set current_stage/finalized or rewrite payments, or an
                inaccessible stage was edited.
            InvariantViolationError: If the workflow is finalized.
        """

        current = self.workflow
        if current is None:
            raise PurchaseValidationError("Workflow has not been started for this purchase")
        require_not_finalized(current)
        if submitted.current_stage != current.current_stage:
            raise PurchaseValidationError("current_stage advances automatically and cannot be set directly")
        if submitted.finalized:
            raise PurchaseValidationError("Use finalize_workflow to finalize a workflow")
        if submitted.stages.payment_processing != current.stages.payment_processing:
            raise PurchaseValidationError("Payment processing is derived from recorded payments")

        candidate = replace(current, stages=submitted.stages, updated_at=at)
        for stage_number in changed_stages(current, candidate):
            if not can_access_stage(current, stage_number):
                raise PurchaseValidationError(
                    f"Stage {stage_number} ({stage_label(stage_number)}) is not accessible yet"
                )
        return replace(self, workflow=candidate, updated_at=at)._synced_workflow(at)

    def finalize_workflow(self, *, finalized_by: str, at: datetime) -> "Purchase":
        if self.workflow is None:
            raise PurchaseValidationError("Workflow has not been started for this purchase")
        workflow = finalize(self.workflow, finalized_by=finalized_by, at=at)
        if workflow is self.workflow:
            return self
        return replace(self, workflow=workflow, updated_at=at)

    def _synced_workflow(self, at: datetime) -> "Purchase":
        """Mirror payments into the workflow and advance one stage if the current one is complete."""

        if self.workflow is None or self.workflow.finalized:
            return self
        workflow = with_payments(self.workflow, self.payments, at=at)
        workflow, _ = advance_if_complete(workflow, at=at)
        if workflow is self.workflow:
            return self
        return replace(self, workflow=workflow)


__all__ = ["Timeline", "Purchase"]
