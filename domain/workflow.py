"""
Domain: Eight-stage purchase workflow.

The workflow is the fine-grained view of a purchase's fulfillment:

    1 After Purchase -> 2 Transport -> 3 Payment Processing -> 4 Repair/Stored
    -> 5 Documents Received -> 6 Booking -> 7 Shipped -> 8 DHL Documents

Rules implemented here:
- A stage is accessible only when every earlier stage is complete; stage 1 is
  always accessible.
- Completing the current stage advances current_stage by exactly one (never
  past 8). Advancing is done by `advance_if_complete`, never by callers
  setting current_stage directly.
- finalized is a terminal flag, independent of current_stage reaching 8.

All types are immutable; every update returns a new PurchaseWorkflow.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from .documents import ChecklistKey
from .errors import InvariantViolationError, PurchaseValidationError
from .financials import ZERO, Payment
from .time import require_utc_timestamp

STAGE_COUNT = 8


class StageStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


# ============================================================================
# Tasks and checklist items
# ============================================================================

@dataclass(frozen=True, slots=True)
class TaskCompletion:
    """Audit trail for a completed task."""

    completed_by: str
    completed_at: datetime
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("completed_at", self.completed_at)


@dataclass(frozen=True, slots=True)
class WorkflowTask:
    completed: bool = False
    completion: Optional[TaskCompletion] = None

    @staticmethod
    def done(completed_by: str, completed_at: datetime, notes: Optional[str] = None) -> "WorkflowTask":
        return WorkflowTask(
            completed=True,
            completion=TaskCompletion(completed_by=completed_by, completed_at=completed_at, notes=notes),
        )


@dataclass(frozen=True, slots=True)
class ChecklistItem:
    received: bool = False
    received_at: Optional[datetime] = None
    document_id: Optional[str] = None
    received_by: Optional[str] = None


@dataclass(frozen=True, slots=True)
class UploadSlot:
    """A single required upload inside a stage (B/L copy, export declaration)."""

    uploaded: bool = False
    document_id: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class Checklist(Mapping[ChecklistKey, ChecklistItem]):
    """
    Read-only document checklist.

    Every ChecklistKey is always present; keys missing from the source mapping
    start as not received. The source mapping is copied, so later edits to it
    are not seen here.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Optional[Mapping[ChecklistKey, ChecklistItem]] = None) -> None:
        source = dict(items) if items is not None else {}
        entries: Dict[ChecklistKey, ChecklistItem] = {key: ChecklistItem() for key in ChecklistKey}
        for raw_key, item in source.items():
            try:
                key = ChecklistKey(raw_key)
            except ValueError as exc:
                raise PurchaseValidationError(f"Unknown checklist key: {raw_key!r}") from exc
            if not isinstance(item, ChecklistItem):
                raise PurchaseValidationError(f"Checklist entry for '{key.value}' must be a ChecklistItem")
            entries[key] = item
        self._items = entries

    def __getitem__(self, key: ChecklistKey) -> ChecklistItem:
        return self._items[key]

    def __iter__(self) -> Iterator[ChecklistKey]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __hash__(self) -> int:
        return hash(tuple(self._items.items()))

    def __repr__(self) -> str:
        return f"Checklist({self._items!r})"

    def with_item(self, key: ChecklistKey, item: ChecklistItem) -> "Checklist":
        """New checklist with one slot replaced."""

        entries = dict(self._items)
        entries[key] = item
        return Checklist(entries)


def empty_checklist() -> Checklist:
    return Checklist()


# ============================================================================
# Stages
# ============================================================================

@dataclass(frozen=True, slots=True)
class AfterPurchaseStage:
    payment_to_auction_house: WorkflowTask = field(default_factory=WorkflowTask)
    payment_amount: Optional[Decimal] = None
    payment_currency: Optional[str] = None


@dataclass(frozen=True, slots=True)
class TransportStage:
    yard_id: Optional[str] = None
    yard_name: Optional[str] = None
    transport_arranged: WorkflowTask = field(default_factory=WorkflowTask)
    yard_notified: WorkflowTask = field(default_factory=WorkflowTask)
    photos_requested: WorkflowTask = field(default_factory=WorkflowTask)


@dataclass(frozen=True, slots=True)
class PaymentProcessingStage:
    """Mirror of the purchase's payment ledger; written only by the aggregate."""

    payments: Tuple[Payment, ...] = ()

    @property
    def total_received(self) -> Decimal:
        return sum((p.amount for p in self.payments), ZERO)


class RepairUpdateType(str, Enum):
    COMMENT = "comment"
    PHOTO = "photo"
    INVOICE = "invoice"


@dataclass(frozen=True, slots=True)
class RepairUpdate:
    update_id: str
    type: RepairUpdateType
    content: str
    created_by: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class RepairStoredStage:
    updates: Tuple[RepairUpdate, ...] = ()
    marked_complete: WorkflowTask = field(default_factory=WorkflowTask)
    skipped: bool = False
    skipped_by: Optional[str] = None
    skipped_at: Optional[datetime] = None
    skip_reason: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RegisteredVehicleTasks:
    received_number_plates: WorkflowTask = field(default_factory=WorkflowTask)
    deregistered: WorkflowTask = field(default_factory=WorkflowTask)
    export_certificate_created: WorkflowTask = field(default_factory=WorkflowTask)
    sent_deregistration_copy: WorkflowTask = field(default_factory=WorkflowTask)
    insurance_refund_received: WorkflowTask = field(default_factory=WorkflowTask)


@dataclass(frozen=True, slots=True)
class UnregisteredVehicleTasks:
    export_certificate_created: WorkflowTask = field(default_factory=WorkflowTask)


@dataclass(frozen=True, slots=True)
class DocumentsReceivedStage:
    is_registered: Optional[bool] = None  # None = not yet determined
    checklist: Mapping[ChecklistKey, ChecklistItem] = field(default_factory=empty_checklist)
    registered_tasks: Optional[RegisteredVehicleTasks] = None
    unregistered_tasks: Optional[UnregisteredVehicleTasks] = None

    def __post_init__(self) -> None:
        if not isinstance(self.checklist, Checklist):
            object.__setattr__(self, "checklist", Checklist(self.checklist))


class ShippingMethod(str, Enum):
    RORO = "roro"
    CONTAINER = "container"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class BookingDetails:
    booking_number: Optional[str] = None
    vessel_name: Optional[str] = None
    voyage_number: Optional[str] = None
    port_of_loading: Optional[str] = None
    port_of_discharge: Optional[str] = None
    etd: Optional[datetime] = None  # estimated time of departure
    eta: Optional[datetime] = None  # estimated time of arrival
    container_number: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True, slots=True)
class BookingStage:
    booking_requested: WorkflowTask = field(default_factory=WorkflowTask)
    shipping_method: Optional[ShippingMethod] = None
    shipping_agent_id: Optional[str] = None
    shipping_agent_name: Optional[str] = None
    booking_details: BookingDetails = field(default_factory=BookingDetails)
    booking_status: BookingStatus = BookingStatus.PENDING
    sent_si_and_ec: WorkflowTask = field(default_factory=WorkflowTask)  # shipping instructions + export certificate
    received_so: WorkflowTask = field(default_factory=WorkflowTask)  # shipping order


class BlDeliveryMethod(str, Enum):
    RELEASED = "released"
    ORIGINAL_DHL = "original_dhl"


@dataclass(frozen=True, slots=True)
class ShippedStage:
    bl_copy: UploadSlot = field(default_factory=UploadSlot)
    bl_paid: WorkflowTask = field(default_factory=WorkflowTask)
    bl_delivery_method: Optional[BlDeliveryMethod] = None
    export_declaration: UploadSlot = field(default_factory=UploadSlot)
    recycle_applied: WorkflowTask = field(default_factory=WorkflowTask)


@dataclass(frozen=True, slots=True)
class DhlDocumentsStage:
    documents_sent: WorkflowTask = field(default_factory=WorkflowTask)
    tracking_number: Optional[str] = None
    sent_at: Optional[datetime] = None
    documents_included: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class WorkflowStages:
    after_purchase: AfterPurchaseStage = field(default_factory=AfterPurchaseStage)
    transport: TransportStage = field(default_factory=TransportStage)
    payment_processing: PaymentProcessingStage = field(default_factory=PaymentProcessingStage)
    repair_stored: RepairStoredStage = field(default_factory=RepairStoredStage)
    documents_received: DocumentsReceivedStage = field(default_factory=DocumentsReceivedStage)
    booking: BookingStage = field(default_factory=BookingStage)
    shipped: ShippedStage = field(default_factory=ShippedStage)
    dhl_documents: DhlDocumentsStage = field(default_factory=DhlDocumentsStage)

    def get(self, stage_number: int):
        return getattr(self, stage_definition(stage_number).attribute)


@dataclass(frozen=True, slots=True)
class PurchaseWorkflow:
    created_at: datetime
    updated_at: datetime
    current_stage: int = 1
    stages: WorkflowStages = field(default_factory=WorkflowStages)
    finalized: bool = False
    finalized_at: Optional[datetime] = None
    finalized_by: Optional[str] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)
        require_utc_timestamp("updated_at", self.updated_at)
        if not 1 <= self.current_stage <= STAGE_COUNT:
            raise PurchaseValidationError(f"current_stage must be between 1 and {STAGE_COUNT}")


# ============================================================================
# Stage configuration
# ============================================================================

@dataclass(frozen=True, slots=True)
class StageDefinition:
    number: int
    key: str
    attribute: str
    label: str
    short_label: str


WORKFLOW_STAGES: Tuple[StageDefinition, ...] = (
    StageDefinition(1, "afterPurchase", "after_purchase", "After Purchase", "Purchase"),
    StageDefinition(2, "transport", "transport", "Transport", "Transport"),
    StageDefinition(3, "paymentProcessing", "payment_processing", "Payment Processing", "Payment"),
    StageDefinition(4, "repairStored", "repair_stored", "Repair/Stored", "Repair"),
    StageDefinition(5, "documentsReceived", "documents_received", "Documents Received", "Docs"),
    StageDefinition(6, "booking", "booking", "Booking", "Booking"),
    StageDefinition(7, "shipped", "shipped", "Shipped", "Shipped"),
    StageDefinition(8, "dhlDocuments", "dhl_documents", "DHL Documents", "DHL"),
)

# Customer-facing stages. Admin stages 2 and 3 swap places for the buyer.
CUSTOMER_STAGES: Tuple[Tuple[int, str], ...] = (
    (1, "Won"),
    (2, "Payment"),
    (3, "Transport"),
    (4, "Inspection"),
    (5, "Documents"),
    (6, "Shipping"),
    (7, "In Transit"),
    (8, "Delivered"),
)
_CUSTOMER_STAGE_BY_ADMIN_STAGE = {1: 1, 2: 3, 3: 2, 4: 4, 5: 5, 6: 6, 7: 7, 8: 8}


def stage_definition(stage_number: int) -> StageDefinition:
    if not 1 <= stage_number <= STAGE_COUNT:
        raise ValueError(f"stage_number must be between 1 and {STAGE_COUNT}")
    return WORKFLOW_STAGES[stage_number - 1]


def stage_label(stage_number: int) -> str:
    return stage_definition(stage_number).label


def stage_number_for_key(key: str) -> int:
    for definition in WORKFLOW_STAGES:
        if definition.key == key:
            return definition.number
    raise ValueError(f"Unknown workflow stage key: {key}")


def create_default_workflow(*, created_at: datetime) -> PurchaseWorkflow:
    """Fresh workflow with every stage in its default (incomplete) state."""

    return PurchaseWorkflow(created_at=created_at, updated_at=created_at)


# ============================================================================
# Stage completion
# ============================================================================

def _after_purchase_complete(stage: AfterPurchaseStage) -> bool:
    return stage.payment_to_auction_house.completed


def _transport_complete(stage: TransportStage) -> bool:
    return (
        stage.yard_id is not None
        and stage.transport_arranged.completed
        and stage.yard_notified.completed
        and stage.photos_requested.completed
    )


def _payment_processing_complete(stage: PaymentProcessingStage) -> bool:
    # Complete once at least one payment is recorded, not once fully paid.
    return len(stage.payments) > 0


def _repair_stored_complete(stage: RepairStoredStage) -> bool:
    return stage.marked_complete.completed or stage.skipped


def _registered_tasks(tasks: RegisteredVehicleTasks) -> Tuple[Tuple[WorkflowTask, str], ...]:
    return (
        (tasks.received_number_plates, "Number plates not received"),
        (tasks.deregistered, "Vehicle not deregistered"),
        (tasks.export_certificate_created, "Export certificate not created"),
        (tasks.sent_deregistration_copy, "Deregistration copy not sent"),
        (tasks.insurance_refund_received, "Insurance refund not received"),
    )


def _documents_received_complete(stage: DocumentsReceivedStage) -> bool:
    if stage.is_registered is None:
        return False
    if stage.is_registered and stage.registered_tasks is not None:
        return all(task.completed for task, _ in _registered_tasks(stage.registered_tasks))
    if not stage.is_registered and stage.unregistered_tasks is not None:
        return stage.unregistered_tasks.export_certificate_created.completed
    return False


def _booking_checks(stage: BookingStage) -> Tuple[Tuple[bool, str], ...]:
    return (
        (stage.booking_requested.completed, "Booking not requested"),
        (stage.shipping_method is not None, "Shipping method not selected"),
        (stage.booking_status is BookingStatus.CONFIRMED, "Booking not confirmed"),
        (stage.sent_si_and_ec.completed, "SI and EC not sent"),
        (stage.received_so.completed, "SO not received"),
    )


def _shipped_checks(stage: ShippedStage) -> Tuple[Tuple[bool, str], ...]:
    return (
        (stage.bl_copy.uploaded, "B/L copy not uploaded"),
        (stage.bl_paid.completed, "B/L not paid"),
        (stage.bl_delivery_method is not None, "B/L delivery method not selected"),
        (stage.export_declaration.uploaded, "Export declaration not uploaded"),
        (stage.recycle_applied.completed, "Recycle not applied"),
    )


def _transport_checks(stage: TransportStage) -> Tuple[Tuple[bool, str], ...]:
    return (
        (stage.yard_id is not None, "Yard not selected"),
        (stage.transport_arranged.completed, "Transport not arranged"),
        (stage.yard_notified.completed, "Yard not notified"),
        (stage.photos_requested.completed, "Photos not requested"),
    )


_COMPLETION_CHECKS: Dict[int, Callable[[WorkflowStages], bool]] = {
    1: lambda s: _after_purchase_complete(s.after_purchase),
    2: lambda s: _transport_complete(s.transport),
    3: lambda s: _payment_processing_complete(s.payment_processing),
    4: lambda s: _repair_stored_complete(s.repair_stored),
    5: lambda s: _documents_received_complete(s.documents_received),
    6: lambda s: all(ok for ok, _ in _booking_checks(s.booking)),
    7: lambda s: all(ok for ok, _ in _shipped_checks(s.shipped)),
    8: lambda s: s.dhl_documents.documents_sent.completed,
}


def is_stage_complete(workflow: PurchaseWorkflow, stage_number: int) -> bool:
    check = _COMPLETION_CHECKS.get(stage_number)
    if check is None:
        return False
    return check(workflow.stages)


def can_access_stage(workflow: PurchaseWorkflow, stage_number: int) -> bool:
    """A stage is accessible iff every earlier stage is complete. Stage 1 always is."""

    if stage_number == 1:
        return True
    return all(is_stage_complete(workflow, n) for n in range(1, stage_number))


def max_accessible_stage(workflow: PurchaseWorkflow) -> int:
    for n in range(1, STAGE_COUNT + 1):
        if not can_access_stage(workflow, n):
            return n - 1
    return STAGE_COUNT


def all_stages_complete(workflow: PurchaseWorkflow) -> bool:
    return all(is_stage_complete(workflow, n) for n in range(1, STAGE_COUNT + 1))


def stage_status(workflow: PurchaseWorkflow, stage_number: int) -> StageStatus:
    if is_stage_complete(workflow, stage_number):
        return StageStatus.COMPLETED
    if workflow.current_stage == stage_number or can_access_stage(workflow, stage_number):
        return StageStatus.IN_PROGRESS
    return StageStatus.PENDING


def can_proceed_to_next_stage(workflow: PurchaseWorkflow) -> bool:
    if workflow.current_stage >= STAGE_COUNT:
        return False
    return is_stage_complete(workflow, workflow.current_stage)


def customer_stage(workflow: PurchaseWorkflow) -> int:
    """Customer-facing stage number for the workflow's current admin stage."""

    return _CUSTOMER_STAGE_BY_ADMIN_STAGE.get(workflow.current_stage, 1)


def customer_stage_label(workflow: PurchaseWorkflow) -> str:
    return dict(CUSTOMER_STAGES)[customer_stage(workflow)]


# ============================================================================
# Progress
# ============================================================================

@dataclass(frozen=True, slots=True)
class StageProgress:
    completed: int
    total: int


def workflow_progress(workflow: PurchaseWorkflow) -> int:
    """Overall progress (0-100) as the share of completed stages."""

    completed = sum(1 for n in range(1, STAGE_COUNT + 1) if is_stage_complete(workflow, n))
    return round(completed / STAGE_COUNT * 100)


def stage_progress(workflow: PurchaseWorkflow, stage_number: int) -> StageProgress:
    """Completed vs total sub-items within one stage."""

    stages = workflow.stages
    if stage_number == 1:
        return StageProgress(int(stages.after_purchase.payment_to_auction_house.completed), 1)
    if stage_number == 2:
        checks = _transport_checks(stages.transport)
        return StageProgress(sum(1 for ok, _ in checks if ok), len(checks))
    if stage_number == 3:
        return StageProgress(int(_payment_processing_complete(stages.payment_processing)), 1)
    if stage_number == 4:
        return StageProgress(int(_repair_stored_complete(stages.repair_stored)), 1)
    if stage_number == 5:
        docs = stages.documents_received
        if docs.is_registered and docs.registered_tasks is not None:
            tasks = _registered_tasks(docs.registered_tasks)
            return StageProgress(sum(1 for task, _ in tasks if task.completed), len(tasks))
        if docs.is_registered is False and docs.unregistered_tasks is not None:
            return StageProgress(int(docs.unregistered_tasks.export_certificate_created.completed), 1)
        return StageProgress(0, 1)
    if stage_number == 6:
        checks = _booking_checks(stages.booking)
        return StageProgress(sum(1 for ok, _ in checks if ok), len(checks))
    if stage_number == 7:
        checks = _shipped_checks(stages.shipped)
        return StageProgress(sum(1 for ok, _ in checks if ok), len(checks))
    if stage_number == 8:
        return StageProgress(int(stages.dhl_documents.documents_sent.completed), 1)
    return StageProgress(0, 0)


def stage_validation_errors(workflow: PurchaseWorkflow, stage_number: int) -> List[str]:
    """Human-readable list of what is still missing before a stage is complete."""

    stages = workflow.stages
    errors: List[str] = []

    if stage_number == 1:
        if not stages.after_purchase.payment_to_auction_house.completed:
            errors.append("Payment to auction house not confirmed")
    elif stage_number == 2:
        errors.extend(message for ok, message in _transport_checks(stages.transport) if not ok)
    elif stage_number == 3:
        if not stages.payment_processing.payments:
            errors.append("No payment recorded")
    elif stage_number == 4:
        # A skipped repair stage counts as complete, so it reports nothing missing.
        if not _repair_stored_complete(stages.repair_stored):
            errors.append("Stage not marked as complete")
    elif stage_number == 5:
        docs = stages.documents_received
        if docs.is_registered is None:
            errors.append("Vehicle registration status not set")
        elif docs.is_registered and docs.registered_tasks is not None:
            errors.extend(m for task, m in _registered_tasks(docs.registered_tasks) if not task.completed)
        elif not docs.is_registered and docs.unregistered_tasks is not None:
            if not docs.unregistered_tasks.export_certificate_created.completed:
                errors.append("Export certificate not created")
    elif stage_number == 6:
        errors.extend(message for ok, message in _booking_checks(stages.booking) if not ok)
    elif stage_number == 7:
        errors.extend(message for ok, message in _shipped_checks(stages.shipped) if not ok)
    elif stage_number == 8:
        if not stages.dhl_documents.documents_sent.completed:
            errors.append("Documents not sent via DHL")

    return errors


# ============================================================================
# Transitions
# ============================================================================

@dataclass(frozen=True, slots=True)
class StageAdvance:
    from_stage: int
    to_stage: int

    @property
    def message(self) -> str:
        return f"Stage {self.from_stage} completed! Moving to Stage {self.to_stage}."


def require_not_finalized(workflow: PurchaseWorkflow) -> None:
    if workflow.finalized:
        raise InvariantViolationError("Workflow is finalized and can no longer be changed")


def changed_stages(before: PurchaseWorkflow, after: PurchaseWorkflow) -> List[int]:
    """Stage numbers whose content differs between two workflows."""

    return [
        n for n in range(1, STAGE_COUNT + 1)
        if before.stages.get(n) != after.stages.get(n)
    ]


def advance_if_complete(workflow: PurchaseWorkflow, *, at: datetime) -> Tuple[PurchaseWorkflow, Optional[StageAdvance]]:
    """
    Move current_stage forward by exactly one when the current stage is complete.

    Returns the (possibly unchanged) workflow and the advance that happened, if any.
    """

    if not can_proceed_to_next_stage(workflow):
        return workflow, None
    advance = StageAdvance(from_stage=workflow.current_stage, to_stage=workflow.current_stage + 1)
    return replace(workflow, current_stage=advance.to_stage, updated_at=at), advance


def with_payments(workflow: PurchaseWorkflow, payments: Tuple[Payment, ...], *, at: datetime) -> PurchaseWorkflow:
    """Mirror the purchase's payment ledger into the payment processing stage."""

    if workflow.stages.payment_processing.payments == payments:
        return workflow
    stages = replace(workflow.stages, payment_processing=PaymentProcessingStage(payments=payments))
    return replace(workflow, stages=stages, updated_at=at)


def mark_checklist_received(
    workflow: PurchaseWorkflow,
    key: ChecklistKey,
    *,
    document_id: Optional[str],
    received_by: str,
    received_at: datetime,
) -> PurchaseWorkflow:
    """Mark one checklist slot received, recording who, when and from which document."""

    require_utc_timestamp("received_at", received_at)
    documents = workflow.stages.documents_received
    checklist = documents.checklist.with_item(
        key,
        ChecklistItem(
            received=True,
            received_at=received_at,
            document_id=document_id,
            received_by=received_by,
        ),
    )
    stages = replace(workflow.stages, documents_received=replace(documents, checklist=checklist))
    return replace(workflow, stages=stages, updated_at=received_at)


def finalize(workflow: PurchaseWorkflow, *, finalized_by: str, at: datetime) -> PurchaseWorkflow:
    """Set the terminal finalized flag. Finalizing twice returns the workflow unchanged."""

    if workflow.finalized:
        return workflow
    return replace(workflow, finalized=True, finalized_at=at, finalized_by=finalized_by, updated_at=at)


__all__ = [
    "STAGE_COUNT",
    "StageStatus",
    "TaskCompletion",
    "WorkflowTask",
    "ChecklistItem",
    "UploadSlot",
    "AfterPurchaseStage",
    "TransportStage",
    "PaymentProcessingStage",
    "RepairUpdateType",
    "RepairUpdate",
    "RepairStoredStage",
    "RegisteredVehicleTasks",
    "UnregisteredVehicleTasks",
    "DocumentsReceivedStage",
    "ShippingMethod",
    "BookingStatus",
    "BookingDetails",
    "BookingStage",
    "BlDeliveryMethod",
    "ShippedStage",
    "DhlDocumentsStage",
    "WorkflowStages",
    "PurchaseWorkflow",
    "StageDefinition",
    "WORKFLOW_STAGES",
    "CUSTOMER_STAGES",
    "StageProgress",
    "StageAdvance",
    "Checklist",
    "empty_checklist",
    "stage_definition",
    "stage_label",
    "stage_number_for_key",
    "create_default_workflow",
    "is_stage_complete",
    "can_access_stage",
    "max_accessible_stage",
    "all_stages_complete",
    "stage_status",
    "can_proceed_to_next_stage",
    "customer_stage",
    "customer_stage_label",
    "workflow_progress",
    "stage_progress",
    "stage_validation_errors",
    "require_not_finalized",
    "changed_stages",
    "advance_if_complete",
    "with_payments",
    "mark_checklist_received",
    "finalize",
]
