"""
Domain: Purchase documents and the required-document checklist.

Contract implemented here:
- The required document types depend only on the purchase status (cumulative):
  - payment_pending:                 invoice
  - processing / documents_pending:  + export_certificate, inspection
  - shipping / delivered / completed: + bill_of_lading, insurance
- A required type is satisfied when at least one document of that type exists.
  Duplicates of the same type do not change satisfaction.
- A document type maps to at most one workflow checklist key (fixed table).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import PurchaseValidationError
from .status import PurchaseStatus
from .time import require_utc_timestamp


class DocumentType(str, Enum):
    INVOICE = "invoice"
    EXPORT_CERTIFICATE = "export_certificate"
    BILL_OF_LADING = "bill_of_lading"
    INSURANCE = "insurance"
    INSPECTION = "inspection"
    OTHER = "other"

    @property
    def label(self) -> str:
        return DOCUMENT_TYPE_LABELS[self]

    @property
    def checklist_key(self) -> Optional["ChecklistKey"]:
        """Workflow checklist slot this document type satisfies, if any."""

        return CHECKLIST_KEY_BY_TYPE.get(self)


class ChecklistKey(str, Enum):
    """Named slots in the workflow's document checklist (camelCase values are part of the contract)."""

    INVOICE = "invoice"
    EXPORT_CERTIFICATE = "exportCertificate"
    BILL_OF_LADING = "billOfLading"
    INSURANCE = "insurance"
    INSPECTION_REPORT = "inspectionReport"
    DEREGISTRATION_CERTIFICATE = "deregistrationCertificate"
    NUMBER_PLATES = "numberPlates"


DOCUMENT_TYPE_LABELS = {
    DocumentType.INVOICE: "Invoice",
    DocumentType.EXPORT_CERTIFICATE: "Export Certificate",
    DocumentType.BILL_OF_LADING: "Bill of Lading",
    DocumentType.INSURANCE: "Insurance Certificate",
    DocumentType.INSPECTION: "Inspection Report",
    DocumentType.OTHER: "Other Documents",
}

CHECKLIST_KEY_BY_TYPE = {
    DocumentType.INVOICE: ChecklistKey.INVOICE,
    DocumentType.EXPORT_CERTIFICATE: ChecklistKey.EXPORT_CERTIFICATE,
    DocumentType.BILL_OF_LADING: ChecklistKey.BILL_OF_LADING,
    DocumentType.INSURANCE: ChecklistKey.INSURANCE,
    DocumentType.INSPECTION: ChecklistKey.INSPECTION_REPORT,
}

_BASE_DOCUMENTS: Tuple[DocumentType, ...] = (DocumentType.INVOICE,)
_PROCESSING_DOCUMENTS = _BASE_DOCUMENTS + (DocumentType.EXPORT_CERTIFICATE, DocumentType.INSPECTION)
_SHIPPING_DOCUMENTS = _PROCESSING_DOCUMENTS + (DocumentType.BILL_OF_LADING, DocumentType.INSURANCE)

REQUIRED_DOCUMENTS_BY_STATUS = {
    PurchaseStatus.PAYMENT_PENDING: _BASE_DOCUMENTS,
    PurchaseStatus.PROCESSING: _PROCESSING_DOCUMENTS,
    PurchaseStatus.DOCUMENTS_PENDING: _PROCESSING_DOCUMENTS,
    PurchaseStatus.SHIPPING: _SHIPPING_DOCUMENTS,
    PurchaseStatus.DELIVERED: _SHIPPING_DOCUMENTS,
    PurchaseStatus.COMPLETED: _SHIPPING_DOCUMENTS,
}


@dataclass(frozen=True, slots=True)
class Document:
    """Immutable record of an uploaded purchase document."""

    document_id: str
    name: str
    type: DocumentType
    uploaded_at: datetime
    uploaded_by: str
    size: int = 0
    url: str = "#"

    def __post_init__(self) -> None:
        require_utc_timestamp("uploaded_at", self.uploaded_at)
        if not self.name:
            raise PurchaseValidationError("Document name is required")
        if self.size < 0:
            raise PurchaseValidationError("Document size must be >= 0")


@dataclass(frozen=True, slots=True)
class RequiredDocumentStatus:
    """One row of the required-documents checklist shown for a purchase."""

    type: DocumentType
    label: str
    present: bool
    document_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class DocumentCompletion:
    completed: int
    total: int

    @property
    def is_complete(self) -> bool:
        return self.completed == self.total

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        return round(100 * self.completed / self.total)


def required_document_types(status: PurchaseStatus) -> Tuple[DocumentType, ...]:
    """Ordered required document types for a purchase status."""

    return REQUIRED_DOCUMENTS_BY_STATUS[status]


def required_documents_status(
    status: PurchaseStatus, documents: Sequence[Document]
) -> List[RequiredDocumentStatus]:
    """
    Build the checklist rows for a status.

    Each row references the first uploaded document of the required type.
    """

    first_by_type = {}
    for document in documents:
        first_by_type.setdefault(document.type, document)

    rows: List[RequiredDocumentStatus] = []
    for doc_type in required_document_types(status):
        match = first_by_type.get(doc_type)
        rows.append(
            RequiredDocumentStatus(
                type=doc_type,
                label=doc_type.label,
                present=match is not None,
                document_id=match.document_id if match is not None else None,
            )
        )
    return rows


def document_completion(status: PurchaseStatus, documents: Iterable[Document]) -> DocumentCompletion:
    """Count of required types present in documents against the number required."""

    required = required_document_types(status)
    present_types = {d.type for d in documents}
    completed = sum(1 for doc_type in required if doc_type in present_types)
    return DocumentCompletion(completed=completed, total=len(required))


__all__ = [
    "DocumentType",
    "ChecklistKey",
    "DOCUMENT_TYPE_LABELS",
    "CHECKLIST_KEY_BY_TYPE",
    "REQUIRED_DOCUMENTS_BY_STATUS",
    "Document",
    "RequiredDocumentStatus",
    "DocumentCompletion",
    "required_document_types",
    "required_documents_status",
    "document_completion",
]
