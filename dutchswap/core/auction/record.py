"""
Auction records - the only persistent entity of the engine.

A record is created ACTIVE and leaves that state exactly once, either
SETTLED (a buyer paid the quoted price) or CANCELLED (the seller took the
asset back). Terminal records are kept for audit and never deleted.
"""

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, Dict, Optional


class AuctionStatus(IntEnum):
    """Lifecycle state of an auction record."""
    ACTIVE = 0      # Open for settlement or cancellation
    SETTLED = 1     # Asset swapped for payment
    CANCELLED = 2   # Asset returned to seller


TERMINAL_STATUSES = frozenset({AuctionStatus.SETTLED, AuctionStatus.CANCELLED})


@dataclass
class AuctionRecord:
    """
    A single reverse Dutch auction listing.

    Attributes:
        auction_id: Sequential identifier assigned at creation
        seller: Account that created the listing
        asset: Asset being sold
        amount: Quantity of asset held in escrow
        start_price: Price at start_time (payment units)
        end_price: Floor price reached at start_time + duration
        start_time: Creation timestamp (seconds)
        duration: Seconds until expiry
        active: True while the record can be settled or cancelled
        finalized: True once settled or cancelled
        status: Lifecycle state
        buyer: Account that settled the auction, if any
        settled_price: Price paid on settlement, if any
        closed_at: Timestamp of the terminal transition
    """
    auction_id: int
    seller: str
    asset: str
    amount: int
    start_price: int
    end_price: int
    start_time: int
    duration: int
    active: bool = True
    finalized: bool = False
    status: AuctionStatus = AuctionStatus.ACTIVE
    buyer: Optional[str] = None
    settled_price: Optional[int] = None
    closed_at: Optional[int] = None

    @property
    def end_time(self) -> int:
        """Timestamp at which the price reaches end_price and the listing expires."""
        return self.start_time + self.duration

    def is_expired(self, now: int) -> bool:
        return now >= self.end_time

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    # =========================================================================
    # Transitions (callers hold the record lock)
    # =========================================================================

    def mark_settled(self, buyer: str, price: int, now: int) -> None:
        self.active = False
        self.finalized = True
        self.status = AuctionStatus.SETTLED
        self.buyer = buyer
        self.settled_price = price
        self.closed_at = now

    def mark_cancelled(self, now: int) -> None:
        self.active = False
        self.finalized = True
        self.status = AuctionStatus.CANCELLED
        self.closed_at = now

    def reopen(self) -> None:
        """Undo a terminal transition whose transfers were rolled back."""
        self.active = True
        self.finalized = False
        self.status = AuctionStatus.ACTIVE
        self.buyer = None
        self.settled_price = None
        self.closed_at = None

    # =========================================================================
    # Serialization
    # =========================================================================

    def copy(self) -> "AuctionRecord":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "auction_id": self.auction_id,
            "seller": self.seller,
            "asset": self.asset,
            "amount": self.amount,
            "start_price": self.start_price,
            "end_price": self.end_price,
            "start_time": self.start_time,
            "duration": self.duration,
            "active": self.active,
            "finalized": self.finalized,
            "status": self.status.name,
            "buyer": self.buyer,
            "settled_price": self.settled_price,
            "closed_at": self.closed_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuctionRecord":
        settled_price = data.get("settled_price")
        closed_at = data.get("closed_at")
        return cls(
            auction_id=int(data["auction_id"]),
            seller=data["seller"],
            asset=data["asset"],
            amount=int(data["amount"]),
            start_price=int(data["start_price"]),
            end_price=int(data["end_price"]),
            start_time=int(data["start_time"]),
            duration=int(data["duration"]),
            active=bool(data["active"]),
            finalized=bool(data["finalized"]),
            status=AuctionStatus[data["status"]],
            buyer=data.get("buyer"),
            settled_price=int(settled_price) if settled_price is not None else None,
            closed_at=int(closed_at) if closed_at is not None else None,
        )

    def __repr__(self) -> str:
        return (
            f"AuctionRecord(id={self.auction_id}, seller={self.seller}, "
            f"amount={self.amount}, status={self.status.name})"
        )
