"""
Purchase service: entry points for every purchase workflow action.

Each call:
1. Validates input (pydantic models in services/purchase_schemas.py)
2. Loads the Purchase from the repository
3. Applies exactly one domain transition (a new Purchase, or an exception)
4. Saves the new snapshot, logs it and sends notifications

A rejected call is logged at WARNING and re-raised; the stored purchase is
left untouched because the aggregate is immutable and nothing is saved.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Type, TypeVar, Union
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from config.settings import Settings, load_settings
from domain.documents import ChecklistKey, Document
from domain.errors import PurchaseError, PurchaseNotFoundError, PurchaseValidationError
from domain.financials import Payment, PaymentMethod
from domain.purchase import Purchase
from domain.shipment import Shipment, ShipmentEvent
from domain.status import PurchaseStatus
from domain.time import Clock, utc_now
from domain.vehicle import BuyerInfo, PurchaseSource, SourceKind, VehicleInfo
from domain.workflow import PurchaseWorkflow, StageAdvance
from repositories.purchase_repository import InMemoryPurchaseRepository
from services.notification_service import LoggingNotifier, Notification, NotificationKind, Notifier
from services.purchase_query_service import (
    PurchaseFilters,
    PurchasePage,
    PurchaseTab,
    SortOption,
    query_purchases,
)
from services.purchase_schemas import (
    DocumentUpload,
    NewPurchaseRequest,
    PaymentRequest,
    ShipmentUpdate,
    as_utc,
    validation_message,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate(model: Type[ModelT], data: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    """Validate raw input against a schema, translating pydantic errors."""

    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise PurchaseValidationError(validation_message(exc)) from exc


def _coerce_enum(enum_type, value, field_name: str):
    try:
        return enum_type(value)
    except ValueError as exc:
        raise PurchaseValidationError(f"Invalid {field_name}: {value!r}") from exc


class PurchaseService:
    """
    Application service over an injected purchase repository.

    Args:
        repository: Working set of purchases.
        notifier: Receives success notifications (defaults to logging them).
        settings: Runtime settings (defaults to load_settings()).
        clock: Source of "now" for recorded_at / uploaded_at / timeline stamps.
        id_factory: Generates purchase, payment and document ids.
    """

    def __init__(
        self,
        repository: InMemoryPurchaseRepository,
        *,
        notifier: Optional[Notifier] = None,
        settings: Optional[Settings] = None,
        clock: Clock = utc_now,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._repository = repository
        self._notifier = notifier if notifier is not None else LoggingNotifier()
        self._settings = settings if settings is not None else load_settings()
        self._clock = clock
        self._new_id = id_factory if id_factory is not None else (lambda: str(uuid4()))

    @property
    def current_user(self) -> str:
        return self._settings.current_user

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_purchase(self, purchase_id: str) -> Purchase:
        """
        Raises:
            PurchaseNotFoundError: If the id is unknown.
        """

        purchase = self._repository.get_purchase_by_id(purchase_id)
        if purchase is None:
            raise PurchaseNotFoundError(purchase_id)
        return purchase

    def list_purchases(self) -> List[Purchase]:
        return self._repository.list_purchases()

    def query_purchases(
        self,
        *,
        tab: PurchaseTab = PurchaseTab.ALL,
        filters: Optional[PurchaseFilters] = None,
        sort_by: SortOption = SortOption.DATE_NEWEST,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> PurchasePage:
        """One page of the stored purchases; per_page defaults to the configured page size."""

        return query_purchases(
            self._repository.list_purchases(),
            tab=tab,
            filters=filters,
            sort_by=sort_by,
            page=page,
            per_page=per_page if per_page is not None else self._settings.items_per_page,
        )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_purchase(self, request: Union[NewPurchaseRequest, Mapping[str, Any]]) -> Purchase:
        try:
            data = _validate(NewPurchaseRequest, request)
            if data.source_kind is SourceKind.AUCTION:
                source = PurchaseSource.auction(lot_number=data.lot_number, auction_house=data.auction_house)
            else:
                source = PurchaseSource.stock(stock_id=data.stock_id)
            now = self._clock()
            purchase = Purchase.create(
                purchase_id=self._new_id(),
                auction_id=data.auction_id,
                source=source,
                vehicle=VehicleInfo(
                    make=data.make,
                    model=data.model,
                    year=data.year,
                    vin=data.vin,
                    mileage=data.mileage,
                    color=data.color,
                    images=tuple(data.images),
                ),
                buyer=BuyerInfo(
                    buyer_id=data.buyer_id,
                    name=data.buyer_name,
                    email=data.buyer_email,
                    phone=data.buyer_phone,
                    address=data.buyer_address,
                ),
                winning_bid=data.winning_bid,
                shipping_cost=data.shipping_cost,
                insurance_fee=data.insurance_fee,
                currency=(data.currency or self._settings.default_currency).upper(),
                destination_port=data.destination_port,
                auction_end_date=as_utc(data.auction_end_date),
                created_at=now,
                notes=data.notes,
            )
            self._repository.add_purchase(purchase)
        except PurchaseError as exc:
            self._log_rejection("create_purchase", None, exc)
            raise

        logger.info(
            "Purchase created",
            extra={
                "purchase_id": purchase.purchase_id,
                "auction_id": purchase.auction_id,
                "total_amount": str(purchase.total_amount),
            },
        )
        self._notify(purchase, NotificationKind.PURCHASE_CREATED, f"Purchase {purchase.auction_id} created")
        return purchase

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def record_payment(
        self,
        purchase_id: str,
        amount: Union[Decimal, int, str],
        method: Union[PaymentMethod, str],
        paid_at: datetime,
        reference_number: str,
        notes: Optional[str] = None,
    ) -> Payment:
        """
        Record a payment against a purchase and return the stored Payment.

        Raises:
            PurchaseNotFoundError: If the purchase does not exist.
            PurchaseValidationError: If the input is invalid or the amount
                exceeds the outstanding balance.
        """

        try:
            data = _validate(
                PaymentRequest,
                {
                    "amount": amount,
                    "method": method,
                    "paid_at": paid_at,
                    "reference_number": reference_number,
                    "notes": notes,
                },
            )
            purchase = self.get_purchase(purchase_id)
            updated, payment = purchase.record_payment(
                payment_id=self._new_id(),
                amount=data.amount,
                method=data.method,
                paid_at=as_utc(data.paid_at),
                reference_number=data.reference_number,
                recorded_by=self.current_user,
                recorded_at=self._clock(),
                notes=data.notes,
            )
        except PurchaseError as exc:
            self._log_rejection("record_payment", purchase_id, exc)
            raise

        self._commit(
            purchase,
            updated,
            NotificationKind.PAYMENT_RECORDED,
            "Payment recorded successfully",
            {
                "payment_id": payment.payment_id,
                "amount": str(payment.amount),
                "payment_status": updated.payment_status.value,
            },
        )
        return payment

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def upload_documents(
        self,
        purchase_id: str,
        documents: Sequence[Union[DocumentUpload, Mapping[str, Any]]],
        checklist_key: Optional[Union[ChecklistKey, str]] = None,
    ) -> Purchase:
        """
        Attach uploaded documents, optionally marking an explicit checklist key.

        Raises:
            PurchaseNotFoundError: If the purchase does not exist.
            PurchaseValidationError: If no documents are given or one is invalid.
        """

        try:
            uploads = [_validate(DocumentUpload, d) for d in documents]
            key = _coerce_enum(ChecklistKey, checklist_key, "checklist_key") if checklist_key is not None else None
            purchase = self.get_purchase(purchase_id)
            now = self._clock()
            records = [
                Document(
                    document_id=self._new_id(),
                    name=upload.name,
                    type=upload.type,
                    uploaded_at=now,
                    uploaded_by=self.current_user,
                    size=upload.size,
                    url=upload.url,
                )
                for upload in uploads
            ]
            updated = purchase.add_documents(records, received_by=self.current_user, at=now, checklist_key=key)
        except PurchaseError as exc:
            self._log_rejection("upload_documents", purchase_id, exc)
            raise

        if purchase.status is PurchaseStatus.DOCUMENTS_PENDING and updated.status is PurchaseStatus.PROCESSING:
            logger.info(
                "Documents received while documents_pending; status moved to processing",
                extra={"purchase_id": purchase_id, "document_count": len(records)},
            )

        if key is not None and purchase.workflow is not None:
            message = "Document uploaded & workflow updated"
        else:
            message = f"{len(records)} document(s) uploaded"
        self._commit(
            purchase,
            updated,
            NotificationKind.DOCUMENTS_UPLOADED,
            message,
            {"document_ids": ",".join(r.document_id for r in records)},
        )
        return updated

    def delete_document(self, purchase_id: str, document_id: str) -> Purchase:
        try:
            purchase = self.get_purchase(purchase_id)
            updated = purchase.remove_document(document_id, at=self._clock())
        except PurchaseError as exc:
            self._log_rejection("delete_document", purchase_id, exc)
            raise

        return self._commit(
            purchase, updated, NotificationKind.DOCUMENT_DELETED, "Document deleted", {"document_id": document_id}
        )

    # ------------------------------------------------------------------
    # Shipping and status
    # ------------------------------------------------------------------

    def update_shipping(self, purchase_id: str, shipment: Union[ShipmentUpdate, Mapping[str, Any]]) -> Purchase:
        """
        Attach or update shipment tracking; status becomes shipping.

        Raises:
            PurchaseNotFoundError: If the purchase does not exist.
            PurchaseValidationError: If the shipment is invalid or its identity changes.
            InvariantViolationError: If the purchase is already delivered or completed.
        """

        try:
            data = _validate(ShipmentUpdate, shipment)
            purchase = self.get_purchase(purchase_id)
            now = self._clock()
            record = Shipment(
                carrier=data.carrier,
                tracking_number=data.tracking_number,
                status=data.status,
                current_location=data.current_location,
                last_update=now,
                estimated_delivery=as_utc(data.estimated_delivery) if data.estimated_delivery else None,
                events=tuple(
                    ShipmentEvent(
                        date=as_utc(event.date),
                        location=event.location,
                        status=event.status,
                        description=event.description,
                    )
                    for event in data.events
                ),
            )
            updated = purchase.update_shipping(record, at=now)
        except PurchaseError as exc:
            self._log_rejection("update_shipping", purchase_id, exc)
            raise

        return self._commit(
            purchase,
            updated,
            NotificationKind.SHIPPING_UPDATED,
            "Shipping updated",
            {"carrier": record.carrier, "tracking_number": record.tracking_number},
        )

    def mark_delivered(self, purchase_id: str) -> Purchase:
        try:
            purchase = self.get_purchase(purchase_id)
            updated = purchase.mark_delivered(at=self._clock())
        except PurchaseError as exc:
            self._log_rejection("mark_delivered", purchase_id, exc)
            raise

        return self._commit(purchase, updated, NotificationKind.STATUS_CHANGED, "Purchase marked as delivered")

    def mark_completed(self, purchase_id: str) -> Purchase:
        try:
            purchase = self.get_purchase(purchase_id)
            updated = purchase.mark_completed(at=self._clock())
        except PurchaseError as exc:
            self._log_rejection("mark_completed", purchase_id, exc)
            raise

        return self._commit(purchase, updated, NotificationKind.STATUS_CHANGED, "Purchase marked as completed")

    def advance_status(self, purchase_id: str, target: Union[PurchaseStatus, str]) -> Purchase:
        """
        Move a purchase forward to `target` (e.g. payment_pending -> processing).

        Raises:
            PurchaseNotFoundError: If the purchase does not exist.
            PurchaseValidationError: If `target` is not a known status.
            InvariantViolationError: If the move goes backward or leaves completed.
        """

        try:
            status = _coerce_enum(PurchaseStatus, target, "status")
            purchase = self.get_purchase(purchase_id)
            updated = purchase.advance_status(status, at=self._clock())
        except PurchaseError as exc:
            self._log_rejection("advance_status", purchase_id, exc)
            raise

        return self._commit(
            purchase,
            updated,
            NotificationKind.STATUS_CHANGED,
            f"Status changed to {status.label}",
            {"from_status": purchase.status.value, "to_status": status.value},
        )

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    def start_workflow(self, purchase_id: str) -> Purchase:
        try:
            purchase = self.get_purchase(purchase_id)
            updated = purchase.start_workflow(at=self._clock())
        except PurchaseError as exc:
            self._log_rejection("start_workflow", purchase_id, exc)
            raise

        return self._commit(purchase, updated, NotificationKind.WORKFLOW_UPDATED, "Workflow started")

    def update_workflow(self, purchase_id: str, workflow: PurchaseWorkflow) -> Purchase:
        """
        Submit edited workflow stage content.

        Raises:
            PurchaseNotFoundError: If the purchase does not exist.
            PurchaseValidationError: If the submission edits a locked stage or
                tries to set derived fields.
            InvariantViolationError: If the workflow is finalized.
        """

        try:
            purchase = self.get_purchase(purchase_id)
            updated = purchase.update_workflow(workflow, at=self._clock())
        except PurchaseError as exc:
            self._log_rejection("update_workflow", purchase_id, exc)
            raise

        return self._commit(purchase, updated, NotificationKind.WORKFLOW_UPDATED, "Workflow updated")

    def finalize_workflow(self, purchase_id: str) -> Purchase:
        try:
            purchase = self.get_purchase(purchase_id)
            updated = purchase.finalize_workflow(finalized_by=self.current_user, at=self._clock())
        except PurchaseError as exc:
            self._log_rejection("finalize_workflow", purchase_id, exc)
            raise

        return self._commit(purchase, updated, NotificationKind.WORKFLOW_FINALIZED, "Workflow finalized")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _commit(
        self,
        before: Purchase,
        after: Purchase,
        kind: NotificationKind,
        message: str,
        details: Optional[Dict[str, str]] = None,
    ) -> Purchase:
        """Save `after` and notify, unless the transition was a no-op."""

        if after is before:
            logger.info(f"{kind.value}: no change", extra={"purchase_id": before.purchase_id})
            return before

        self._repository.save_purchase(after)
        logger.info(
            message,
            extra={
                "purchase_id": after.purchase_id,
                "status": after.status.value,
                **(details or {}),
            },
        )
        self._notify(after, kind, message, details)

        advance = _stage_advance(before, after)
        if advance is not None:
            self._notify(
                after,
                NotificationKind.STAGE_ADVANCED,
                advance.message,
                {"from_stage": str(advance.from_stage), "to_stage": str(advance.to_stage)},
            )
        return after

    def _notify(
        self,
        purchase: Purchase,
        kind: NotificationKind,
        message: str,
        details: Optional[Dict[str, str]] = None,
    ) -> None:
        self._notifier.notify(
            Notification(
                kind=kind,
                purchase_id=purchase.purchase_id,
                message=message,
                created_at=self._clock(),
                details=dict(details or {}),
            )
        )

    def _log_rejection(self, operation: str, purchase_id: Optional[str], exc: PurchaseError) -> None:
        logger.warning(
            f"{operation} rejected: {exc}",
            extra={
                "operation": operation,
                "purchase_id": purchase_id,
                "error_type": type(exc).__name__,
            },
        )


def _stage_advance(before: Purchase, after: Purchase) -> Optional[StageAdvance]:
    if before.workflow is None or after.workflow is None:
        return None
    if after.workflow.current_stage <= before.workflow.current_stage:
        return None
    return StageAdvance(from_stage=before.workflow.current_stage, to_stage=after.workflow.current_stage)


__all__ = ["PurchaseService"]
