"""
Tests for `domain/documents.py`.

Covers contract rules:
- Required document types are cumulative by status.
- Satisfaction is by type match only; duplicates and unrequired types do not
  change the completion count.
- Document types map to checklist keys through a fixed table.
"""

from __future__ import annotations

import pytest

from domain.documents import (
    ChecklistKey,
    Document,
    DocumentType,
    document_completion,
    required_document_types,
    required_documents_status,
)
from domain.errors import PurchaseValidationError
from domain.status import PurchaseStatus

from builders import T0, make_document


@pytest.mark.parametrize(
    "status, expected",
    [
        (PurchaseStatus.PAYMENT_PENDING, (DocumentType.INVOICE,)),
        (
            PurchaseStatus.PROCESSING,
            (DocumentType.INVOICE, DocumentType.EXPORT_CERTIFICATE, DocumentType.INSPECTION),
        ),
        (
            PurchaseStatus.DOCUMENTS_PENDING,
            (DocumentType.INVOICE, DocumentType.EXPORT_CERTIFICATE, DocumentType.INSPECTION),
        ),
        (
            PurchaseStatus.SHIPPING,
            (
                DocumentType.INVOICE,
                DocumentType.EXPORT_CERTIFICATE,
                DocumentType.INSPECTION,
                DocumentType.BILL_OF_LADING,
                DocumentType.INSURANCE,
            ),
        ),
    ],
)
def test_required_document_types_by_status(status: PurchaseStatus, expected: tuple) -> None:
    assert required_document_types(status) == expected


def test_delivered_and_completed_require_the_shipping_set() -> None:
    shipping = required_document_types(PurchaseStatus.SHIPPING)
    assert required_document_types(PurchaseStatus.DELIVERED) == shipping
    assert required_document_types(PurchaseStatus.COMPLETED) == shipping


@pytest.mark.parametrize(
    "doc_type, key",
    [
        (DocumentType.INVOICE, ChecklistKey.INVOICE),
        (DocumentType.EXPORT_CERTIFICATE, ChecklistKey.EXPORT_CERTIFICATE),
        (DocumentType.BILL_OF_LADING, ChecklistKey.BILL_OF_LADING),
        (DocumentType.INSURANCE, ChecklistKey.INSURANCE),
        (DocumentType.INSPECTION, ChecklistKey.INSPECTION_REPORT),
        (DocumentType.OTHER, None),
    ],
)
def test_document_type_checklist_key_table(doc_type: DocumentType, key) -> None:
    assert doc_type.checklist_key is key


def test_checklist_key_values_are_camel_case() -> None:
    assert ChecklistKey.EXPORT_CERTIFICATE.value == "exportCertificate"
    assert ChecklistKey.DEREGISTRATION_CERTIFICATE.value == "deregistrationCertificate"
    assert ChecklistKey.NUMBER_PLATES.value == "numberPlates"


def test_completion_counts_required_types_present() -> None:
    docs = [make_document("d1", DocumentType.INVOICE)]
    completion = document_completion(PurchaseStatus.PROCESSING, docs)

    assert (completion.completed, completion.total) == (1, 3)
    assert completion.is_complete is False
    assert completion.percent == 33


def test_duplicates_and_unrequired_types_do_not_change_completion() -> None:
    """Verify only distinct required types count."""

    base = [make_document("d1", DocumentType.INVOICE)]
    extra = base + [
        make_document("d2", DocumentType.INVOICE),
        make_document("d3", DocumentType.OTHER),
        make_document("d4", DocumentType.BILL_OF_LADING),  # not required at processing
    ]

    assert document_completion(PurchaseStatus.PROCESSING, extra) == document_completion(
        PurchaseStatus.PROCESSING, base
    )


def test_required_documents_status_references_first_matching_document() -> None:
    docs = [
        make_document("d1", DocumentType.EXPORT_CERTIFICATE),
        make_document("d2", DocumentType.EXPORT_CERTIFICATE),
    ]
    rows = required_documents_status(PurchaseStatus.PROCESSING, docs)

    assert [row.type for row in rows] == [
        DocumentType.INVOICE,
        DocumentType.EXPORT_CERTIFICATE,
        DocumentType.INSPECTION,
    ]
    assert rows[0].present is False and rows[0].document_id is None
    assert rows[1].present is True and rows[1].document_id == "d1"
    assert rows[1].label == "Export Certificate"


def test_document_requires_name_and_non_negative_size() -> None:
    with pytest.raises(PurchaseValidationError):
        Document(document_id="d1", name="", type=DocumentType.INVOICE, uploaded_at=T0, uploaded_by="admin")

    with pytest.raises(PurchaseValidationError):
        Document(
            document_id="d1",
            name="invoice.pdf",
            type=DocumentType.INVOICE,
            uploaded_at=T0,
            uploaded_by="admin",
            size=-1,
        )
