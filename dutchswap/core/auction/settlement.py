"""
Settlement - Atomic asset-for-payment swap at the quoted price.

Settling an auction:
1. Lock the record and require it to be ACTIVE and unexpired
2. Re-price at the current time (the caller's earlier quote is not trusted)
3. Require tendered payment >= price
4. Mark the record SETTLED before any ledger call
5. Move the asset from custody to the buyer
6. Move `price` of the payment asset from the buyer to the seller
7. Persist and publish AuctionFinalized

If any of steps 5-7 fails, applied transfers are reversed and the record
returns to ACTIVE; the caller sees TransferFailed (or the storage error).
Only `price` is ever taken from the buyer, so a tender above the price
acts as a slippage cap and the surplus never leaves the buyer's account.
"""

import threading
from dataclasses import dataclass
from typing import Optional

from dutchswap.core.auction.errors import (
    AuctionExpired,
    InactiveAuction,
    InsufficientPayment,
)
from dutchswap.core.auction.events import AuctionFinalized
from dutchswap.core.auction.pricing import PricingEngine
from dutchswap.core.auction.registry import AuctionRegistry
from dutchswap.core.auction.unit_of_work import TransferBatch
from dutchswap.utils.logger import get_logger
from dutchswap.utils.validation import validate_account, validate_integer

logger = get_logger("settlement")

DEFAULT_PAYMENT_ASSET = "native"


@dataclass(frozen=True)
class SettlementReceipt:
    """Outcome of a successful settlement."""
    auction_id: int
    buyer: str
    seller: str
    asset: str
    amount: int
    price: int
    tendered: int
    settled_at: int

    @property
    def refunded(self) -> int:
        """Part of the tender that was not charged."""
        return self.tendered - self.price


class SettlementCoordinator:
    """
    Executes settlements against records owned by an AuctionRegistry.

    Shares the registry's ledger, clock, custody accounts and record locks,
    so a settlement and a cancellation of the same record serialize.
    """

    def __init__(
        self,
        registry: AuctionRegistry,
        payment_asset: str = DEFAULT_PAYMENT_ASSET,
        pricing: Optional[PricingEngine] = None,
    ):
        valid, err = validate_account(payment_asset, "payment_asset")
        if not valid:
            raise ValueError(err)

        self.registry = registry
        self.payment_asset = payment_asset
        self.pricing = pricing or registry.pricing

        self.settled_count = 0
        self.volume = 0
        self._stats_lock = threading.Lock()

    def settle(self, auction_id: int, caller: str, tendered_payment: int) -> SettlementReceipt:
        """
        Buy an auction's full amount at the current price.

        Args:
            auction_id: Auction to settle
            caller: Buyer identity; pays and receives the asset
            tendered_payment: Most the buyer is willing to pay

        Returns:
            SettlementReceipt

        Raises:
            AuctionNotFound, InactiveAuction, AuctionExpired,
            InsufficientPayment, TransferFailed
        """
        valid, err = validate_account(caller, "caller")
        if not valid:
            raise ValueError(err)
        valid, err = validate_integer(tendered_payment, "tendered_payment", -(2**256), 2**256 - 1)
        if not valid:
            raise ValueError(err)

        registry = self.registry

        with registry.locked_record(auction_id) as record:
            if not record.active:
                logger.debug(f"Auction {auction_id}: settle by {caller} on {record.status.name} record")
                raise InactiveAuction(f"Auction {auction_id} is {record.status.name}", auction_id)

            now = registry.clock()
            if record.is_expired(now):
                raise AuctionExpired(f"Auction {auction_id} ended at {record.end_time}", auction_id)

            price = self.pricing.current_price(record, now)
            if tendered_payment < price:
                logger.debug(f"Auction {auction_id}: tender {tendered_payment} < price {price}")
                raise InsufficientPayment(tendered_payment, price, auction_id)

            # Terminal before any ledger call: re-entrant settles see INACTIVE
            record.mark_settled(caller, price, now)

            batch = TransferBatch(registry.ledger, auction_id)
            try:
                batch.transfer(record.asset, registry.custody_account(record.seller), caller, record.amount)
                if price > 0:
                    batch.transfer(self.payment_asset, caller, record.seller, price)
                event = AuctionFinalized(auction_id=auction_id, buyer=caller, price=price, timestamp=now)
                registry.commit_transition(record, event)
            except Exception:
                batch.rollback()
                record.reopen()
                logger.error(f"Auction {auction_id}: settlement by {caller} rolled back")
                raise

            receipt = SettlementReceipt(
                auction_id=auction_id,
                buyer=caller,
                seller=record.seller,
                asset=record.asset,
                amount=record.amount,
                price=price,
                tendered=tendered_payment,
                settled_at=now,
            )
            with self._stats_lock:
                self.settled_count += 1
                self.volume += price

        logger.info(f"Auction {auction_id} settled: {caller} bought {receipt.amount} {receipt.asset} for {price}")
        registry.events.publish(event)
        return receipt

    def stats(self) -> dict:
        """Get settlement statistics."""
        return {
            "settled": self.settled_count,
            "volume": self.volume,
            "payment_asset": self.payment_asset,
        }
