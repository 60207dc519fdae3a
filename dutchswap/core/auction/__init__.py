"""
Reverse Dutch auction engine.

This module provides:
- Linear price decay (pricing)
- Auction records and lifecycle events
- Registry: creation, lookup, cancellation
- Settlement: atomic asset-for-payment swap
"""

from dutchswap.core.auction.errors import (
    AuctionError,
    InvalidAmount,
    InvalidPriceRange,
    InvalidDuration,
    EscrowNotFunded,
    AuctionNotFound,
    Unauthorized,
    InactiveAuction,
    AuctionExpired,
    InsufficientPayment,
    TransferFailed,
)
from dutchswap.core.auction.record import AuctionRecord, AuctionStatus
from dutchswap.core.auction.pricing import (
    PricingEngine,
    compute_price,
    current_price,
    price_schedule,
)
from dutchswap.core.auction.events import (
    AuctionEvent,
    AuctionCreated,
    AuctionCancelled,
    AuctionFinalized,
    EventLog,
)
from dutchswap.core.auction.registry import AuctionRegistry, DEFAULT_ESCROW_ACCOUNT
from dutchswap.core.auction.settlement import SettlementCoordinator, SettlementReceipt
from dutchswap.core.auction.house import AuctionHouse

__all__ = [
    # Errors
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
    # Records
    "AuctionRecord",
    "AuctionStatus",
    # Pricing
    "PricingEngine",
    "compute_price",
    "current_price",
    "price_schedule",
    # Events
    "AuctionEvent",
    "AuctionCreated",
    "AuctionCancelled",
    "AuctionFinalized",
    "EventLog",
    # Engine
    "AuctionRegistry",
    "DEFAULT_ESCROW_ACCOUNT",
    "SettlementCoordinator",
    "SettlementReceipt",
    "AuctionHouse",
]
