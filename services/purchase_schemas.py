"""
Purchase input models.

Pydantic models validating the data an admin submits for payments, document
uploads, shipment updates and new purchases. Services convert validated input
into domain objects; a pydantic ValidationError never escapes a service (it is
re-raised as PurchaseValidationError).
"""

from datetime import timezone
from decimal import Decimal
from typing import List, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, ValidationError, model_validator

from domain.documents import DocumentType
from domain.financials import PaymentMethod
from domain.shipment import ShipmentStatus
from domain.vehicle import SourceKind


def as_utc(value: AwareDatetime):
    return value.astimezone(timezone.utc)


def validation_message(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one human-readable line."""

    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


# ============================================================================
# Payment Models
# ============================================================================

class PaymentRequest(BaseModel):
    """Payment received from the buyer, as entered by an admin."""
    amount: Decimal = Field(..., gt=0, description="Amount received, in the purchase currency")
    method: PaymentMethod
    paid_at: AwareDatetime
    reference_number: str = Field(..., min_length=1, description="Bank or processor reference")
    notes: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "amount": "600000",
                "method": "wire_transfer",
                "paid_at": "2025-01-10T09:00:00Z",
                "reference_number": "WT-2025-0110",
                "notes": "First installment"
            }
        }
    )


# ============================================================================
# Document Models
# ============================================================================

class DocumentUpload(BaseModel):
    """Metadata for one uploaded document."""
    name: str = Field(..., min_length=1)
    type: DocumentType
    size: int = Field(0, ge=0, description="File size in bytes")
    url: str = "#"

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "invoice-AUC-2025-001.pdf",
                "type": "invoice",
                "size": 245760,
                "url": "#"
            }
        }
    )


# ============================================================================
# Shipment Models
# ============================================================================

class ShipmentEventInput(BaseModel):
    date: AwareDatetime
    location: str = Field(..., min_length=1)
    status: str = Field(..., min_length=1)
    description: str = ""


class ShipmentUpdate(BaseModel):
    """Shipment details; carrier and tracking number identify the shipment."""
    carrier: str = Field(..., min_length=1)
    tracking_number: str = Field(..., min_length=1)
    status: ShipmentStatus = ShipmentStatus.PREPARING
    current_location: str = Field(..., min_length=1)
    estimated_delivery: Optional[AwareDatetime] = None
    events: List[ShipmentEventInput] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "carrier": "NYK Line",
                "tracking_number": "NYK123456789",
                "status": "in_transit",
                "current_location": "Port of Yokohama",
                "estimated_delivery": "2025-02-20T00:00:00Z",
                "events": []
            }
        }
    )


# ============================================================================
# Purchase Models
# ============================================================================

class NewPurchaseRequest(BaseModel):
    """A won auction (or stock sale) to start tracking."""
    auction_id: str = Field(..., min_length=1)
    source_kind: SourceKind = SourceKind.AUCTION
    lot_number: Optional[str] = None
    auction_house: Optional[str] = None
    stock_id: Optional[str] = None

    make: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    year: int = Field(..., ge=1900, le=2100)
    vin: str = Field(..., min_length=1)
    mileage: int = Field(0, ge=0)
    color: str = "N/A"
    images: List[str] = Field(default_factory=list)

    buyer_id: str = Field(..., min_length=1)
    buyer_name: str = Field(..., min_length=1)
    buyer_email: str = Field(..., min_length=3)
    buyer_phone: str = ""
    buyer_address: Optional[str] = None

    winning_bid: Decimal = Field(..., ge=0)
    shipping_cost: Decimal = Field(Decimal("0"), ge=0)
    insurance_fee: Decimal = Field(Decimal("0"), ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    destination_port: str = Field(..., min_length=1)
    auction_end_date: AwareDatetime
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_source_fields(self) -> "NewPurchaseRequest":
        if self.source_kind is SourceKind.AUCTION and self.stock_id is not None:
            raise ValueError("auction purchases cannot carry a stock_id")
        if self.source_kind is SourceKind.STOCK and (self.lot_number or self.auction_house):
            raise ValueError("stock purchases cannot carry auction lot details")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "auction_id": "AUC-2025-001",
                "source_kind": "auction",
                "lot_number": "12345",
                "auction_house": "USS Tokyo",
                "make": "Toyota",
                "model": "Land Cruiser",
                "year": 2018,
                "vin": "JTMHV05J804123456",
                "mileage": 45000,
                "buyer_id": "cust-001",
                "buyer_name": "Jane Doe",
                "buyer_email": "jane@example.com",
                "winning_bid": "900000",
                "shipping_cost": "80000",
                "insurance_fee": "20000",
                "destination_port": "Mombasa",
                "auction_end_date": "2025-01-05T06:00:00Z"
            }
        }
    )


__all__ = [
    "as_utc",
    "validation_message",
    "PaymentRequest",
    "DocumentUpload",
    "ShipmentEventInput",
    "ShipmentUpdate",
    "NewPurchaseRequest",
]
