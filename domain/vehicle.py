"""
Domain: Vehicle snapshot, purchase source and buyer.

These are immutable value objects captured when a purchase is created. The
vehicle snapshot is not updated if the stock listing changes later.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .errors import PurchaseValidationError


class SourceKind(str, Enum):
    AUCTION = "auction"
    STOCK = "stock"


@dataclass(frozen=True, slots=True)
class PurchaseSource:
    """
    Where the vehicle came from.

    Auction purchases may carry a lot number and auction house; stock
    purchases carry a stock id. The two field sets are mutually exclusive.
    """

    kind: SourceKind
    lot_number: Optional[str] = None
    auction_house: Optional[str] = None
    stock_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is SourceKind.AUCTION and self.stock_id is not None:
            raise PurchaseValidationError("Auction purchases cannot carry a stock_id")
        if self.kind is SourceKind.STOCK and (self.lot_number is not None or self.auction_house is not None):
            raise PurchaseValidationError("Stock purchases cannot carry auction lot details")

    @staticmethod
    def auction(lot_number: Optional[str] = None, auction_house: Optional[str] = None) -> "PurchaseSource":
        return PurchaseSource(kind=SourceKind.AUCTION, lot_number=lot_number, auction_house=auction_house)

    @staticmethod
    def stock(stock_id: Optional[str] = None) -> "PurchaseSource":
        return PurchaseSource(kind=SourceKind.STOCK, stock_id=stock_id)


@dataclass(frozen=True, slots=True)
class VehicleInfo:
    make: str
    model: str
    year: int
    vin: str
    mileage: int = 0
    color: str = "N/A"
    images: Tuple[str, ...] = ()

    @property
    def title(self) -> str:
        return f"{self.year} {self.make} {self.model}"


@dataclass(frozen=True, slots=True)
class BuyerInfo:
    buyer_id: str
    name: str
    email: str
    phone: str = ""
    address: Optional[str] = None


__all__ = ["SourceKind", "PurchaseSource", "VehicleInfo", "BuyerInfo"]
