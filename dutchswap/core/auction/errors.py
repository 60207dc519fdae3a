"""
Auction errors.

Every failure is raised synchronously to the caller and leaves no partial
state behind. ``code`` is a stable machine-readable name, printed by the
CLI and included in logs.
"""

from typing import Optional


class AuctionError(Exception):
    """Base class for all auction engine errors."""

    code = "AUCTION_ERROR"

    def __init__(self, message: str = "", auction_id: Optional[int] = None):
        self.auction_id = auction_id
        super().__init__(message or self.code)


# Creation-time validation (caller fixable)


class InvalidAmount(AuctionError):
    code = "AMOUNT_MUST_BE_HIGHER_THAN_ZERO"


class InvalidPriceRange(AuctionError):
    code = "INVALID_PRICE_RANGE"


class InvalidDuration(AuctionError):
    code = "INVALID_DURATION"


class EscrowNotFunded(AuctionError):
    """Custody does not hold enough uncommitted asset for the listing."""

    code = "ESCROW_NOT_FUNDED"


# Lookup and authorization


class AuctionNotFound(AuctionError):
    code = "AUCTION_NOT_FOUND"


class Unauthorized(AuctionError):
    code = "NOT_SELLER"


# Lifecycle


class InactiveAuction(AuctionError):
    """Record already settled or cancelled. The two are not distinguished."""

    code = "INACTIVE_AUCTION"


class AuctionExpired(AuctionError):
    code = "AUCTION_HAS_ENDED"


class InsufficientPayment(AuctionError):
    code = "INSUFFICIENT_PAYMENT"

    def __init__(self, tendered: int, price: int, auction_id: Optional[int] = None):
        self.tendered = tendered
        self.price = price
        super().__init__(f"Tendered {tendered} below current price {price}", auction_id)


class TransferFailed(AuctionError):
    """The ledger refused a transfer; the whole operation was rolled back."""

    code = "TRANSFER_FAILED"


__all__ = [
    "AuctionError",
    "InvalidAmount",
    "InvalidPriceRange",
    "InvalidDuration",
    "EscrowNotFunded",
    "AuctionNotFound",
    "Unauthorized",
    "InactiveAuction",
    "AuctionExpired",
    "InsufficientPayment",
    "TransferFailed",
]
