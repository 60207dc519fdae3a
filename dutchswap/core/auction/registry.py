"""
Auction Registry - Owner of all auction records.

This module provides:
- Listing creation against pre-funded escrow
- Lookup and price quotes by auction id
- Seller cancellation with asset refund
- Per-record locking shared with the settlement coordinator

Records live in an arena keyed by sequential id. Callers only ever receive
copies; every mutation goes through the registry (or the coordinator via
`locked_record`) so lifecycle invariants are enforced in one place.

Custody:
-------
Each seller deposits into its own custody sub-account,
`custody_account(seller)` = "<escrow_account>:<seller>". A listing is
backed only by its seller's sub-account, and commitments are tracked per
(seller, asset), so one party's deposit can never back or be released to
another party's listing.
"""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional, Tuple

from dutchswap.core.auction.errors import (
    AuctionExpired,
    AuctionNotFound,
    EscrowNotFunded,
    InactiveAuction,
    InvalidAmount,
    InvalidDuration,
    InvalidPriceRange,
    Unauthorized,
)
from dutchswap.core.auction.events import (
    AuctionCancelled,
    AuctionCreated,
    AuctionEvent,
    EventLog,
)
from dutchswap.core.auction.pricing import PricingEngine
from dutchswap.core.auction.record import AuctionRecord, AuctionStatus
from dutchswap.core.auction.unit_of_work import TransferBatch
from dutchswap.core.state.ledger import AssetLedger
from dutchswap.utils.logger import get_logger
from dutchswap.utils.validation import (
    validate_account,
    validate_amount,
    validate_duration,
    validate_price,
)

if TYPE_CHECKING:
    from dutchswap.core.storage.storage_manager import StorageManager

logger = get_logger("registry")


# =============================================================================
# Constants
# =============================================================================

DEFAULT_ESCROW_ACCOUNT = "dutchswap:escrow"


def system_clock() -> int:
    """Current UNIX time in whole seconds."""
    return int(time.time())


# =============================================================================
# Auction Registry
# =============================================================================


class AuctionRegistry:
    """
    Registry of reverse Dutch auctions.

    Holds every record ever created, the escrow committed to active
    listings, and one re-entrant lock per record. A terminal transition
    checks and clears `active` under that lock before touching the ledger,
    so a second caller (or a re-entrant ledger callback) always observes
    the record as inactive.
    """

    def __init__(
        self,
        ledger: AssetLedger,
        escrow_account: str = DEFAULT_ESCROW_ACCOUNT,
        clock: Optional[Callable[[], int]] = None,
        pricing: Optional[PricingEngine] = None,
        event_log: Optional[EventLog] = None,
        storage_manager: Optional["StorageManager"] = None,
    ):
        """
        Initialize the registry.

        Args:
            ledger: Asset ledger holding escrow and moving custody
            escrow_account: Root of the per-seller custody sub-accounts
            clock: Returns the current timestamp. Defaults to wall time.
            pricing: Price curve. Defaults to linear decay.
            event_log: Event sink. A private log is created if None.
            storage_manager: Persistence manager. None = in-memory only.
        """
        valid, err = validate_account(escrow_account, "escrow_account")
        if not valid:
            raise ValueError(err)

        self.ledger = ledger
        self.escrow_account = escrow_account
        self.clock = clock or system_clock
        self.pricing = pricing or PricingEngine()
        self.events = event_log or EventLog()
        self.storage_manager = storage_manager

        # auction_id -> record / lock
        self._records: Dict[int, AuctionRecord] = {}
        self._locks: Dict[int, threading.RLock] = {}

        # (seller, asset) -> amount escrowed for ACTIVE listings
        self._committed: Dict[Tuple[str, str], int] = defaultdict(int)

        self._next_id = 0
        self._lock = threading.Lock()

        if storage_manager:
            self._load_from_storage()

        logger.info(f"AuctionRegistry initialized, custody={escrow_account}, auctions={len(self._records)}")

    # =========================================================================
    # Custody
    # =========================================================================

    def custody_account(self, seller: str) -> str:
        """Ledger account holding a seller's deposits for its listings."""
        return f"{self.escrow_account}:{seller}"

    # =========================================================================
    # Creation
    # =========================================================================

    def create(
        self,
        seller: str,
        asset: str,
        amount: int,
        start_price: int,
        end_price: int,
        duration: int,
    ) -> int:
        """
        Open a new auction over escrow the seller has already deposited.

        Args:
            seller: Listing owner (explicit caller identity)
            asset: Asset being sold
            amount: Quantity, must be > 0 and already deposited into
                custody_account(seller)
            start_price: Opening price
            end_price: Floor price, <= start_price
            duration: Decay period in seconds, > 0

        Returns:
            The new auction id

        Raises:
            InvalidAmount, InvalidPriceRange, InvalidDuration, EscrowNotFunded
        """
        for value, name in ((seller, "seller"), (asset, "asset")):
            valid, err = validate_account(value, name)
            if not valid:
                raise ValueError(err)

        valid, err = validate_amount(amount)
        if not valid:
            raise InvalidAmount(err)
        if amount == 0:
            raise InvalidAmount("amount must be higher than zero")

        for value, name in ((start_price, "start_price"), (end_price, "end_price")):
            valid, err = validate_price(value, name)
            if not valid:
                raise InvalidPriceRange(err)
        if start_price < end_price:
            raise InvalidPriceRange(f"start_price {start_price} below end_price {end_price}")

        valid, err = validate_duration(duration)
        if not valid:
            raise InvalidDuration(err)
        if duration == 0:
            raise InvalidDuration("duration must be higher than zero")

        custody = self.custody_account(seller)
        with self._lock:
            # Escrow already promised to the seller's other active listings is not reusable
            escrowed = self.ledger.escrow_balance_of(custody, asset)
            available = escrowed - self._committed[(seller, asset)]
            if available < amount:
                raise EscrowNotFunded(
                    f"{custody} holds {available} uncommitted {asset}, listing needs {amount}"
                )

            auction_id = self._next_id
            record = AuctionRecord(
                auction_id=auction_id,
                seller=seller,
                asset=asset,
                amount=amount,
                start_price=start_price,
                end_price=end_price,
                start_time=self.clock(),
                duration=duration,
            )
            event = AuctionCreated(
                auction_id=auction_id,
                seller=seller,
                asset=asset,
                amount=amount,
                start_price=start_price,
                end_price=end_price,
                duration=duration,
                start_time=record.start_time,
            )

            if self.storage_manager:
                self.storage_manager.persist_transition(record, event, next_id=auction_id + 1)

            self._records[auction_id] = record
            self._locks[auction_id] = threading.RLock()
            self._committed[(seller, asset)] += amount
            self._next_id = auction_id + 1
            self.events.record(event)

        logger.info(
            f"Auction {auction_id} created: seller={seller}, {amount} {asset}, "
            f"price {start_price} -> {end_price} over {duration}s"
        )
        self.events.publish(event)
        return auction_id

    # =========================================================================
    # Lookup
    # =========================================================================

    def _lookup(self, auction_id: int) -> Tuple[AuctionRecord, threading.RLock]:
        with self._lock:
            record = self._records.get(auction_id)
            if record is None:
                raise AuctionNotFound(f"Auction {auction_id} not found", auction_id)
            return record, self._locks[auction_id]

    def get(self, auction_id: int) -> AuctionRecord:
        """
        Get a snapshot of an auction record.

        Raises:
            AuctionNotFound: If the id was never assigned
        """
        record, lock = self._lookup(auction_id)
        with lock:
            return record.copy()

    def current_price(self, auction_id: int) -> int:
        """Quote the price an auction would settle at right now."""
        record = self.get(auction_id)
        return self.pricing.current_price(record, self.clock())

    def exists(self, auction_id: int) -> bool:
        with self._lock:
            return auction_id in self._records

    def ids(self) -> List[int]:
        """All auction ids in creation order."""
        with self._lock:
            return sorted(self._records)

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def committed_escrow(self, asset: str, seller: Optional[str] = None) -> int:
        """Amount of an asset held in custody for active listings, of one seller or all."""
        with self._lock:
            if seller is not None:
                return self._committed.get((seller, asset), 0)
            return sum(amount for (_, a), amount in self._committed.items() if a == asset)

    # =========================================================================
    # Cancellation
    # =========================================================================

    def cancel(self, auction_id: int, caller: str) -> None:
        """
        Cancel an active, unexpired auction and return the asset to its seller.

        Args:
            auction_id: Auction to cancel
            caller: Identity requesting cancellation

        Raises:
            AuctionNotFound, Unauthorized, InactiveAuction, AuctionExpired,
            TransferFailed
        """
        with self.locked_record(auction_id) as record:
            if caller != record.seller:
                logger.warning(f"Auction {auction_id}: cancel by non-seller {caller} rejected")
                raise Unauthorized(f"{caller} is not the seller of auction {auction_id}", auction_id)

            if not record.active:
                raise InactiveAuction(f"Auction {auction_id} is {record.status.name}", auction_id)

            now = self.clock()
            if record.is_expired(now):
                raise AuctionExpired(f"Auction {auction_id} ended at {record.end_time}", auction_id)

            record.mark_cancelled(now)
            batch = TransferBatch(self.ledger, auction_id)
            try:
                batch.transfer(record.asset, self.custody_account(record.seller), record.seller, record.amount)
                event = AuctionCancelled(auction_id=auction_id, timestamp=now)
                self.commit_transition(record, event)
            except Exception:
                batch.rollback()
                record.reopen()
                logger.error(f"Auction {auction_id}: cancellation rolled back")
                raise

        logger.info(f"Auction {auction_id} cancelled, {record.amount} {record.asset} returned to {record.seller}")
        self.events.publish(event)

    # =========================================================================
    # Shared with SettlementCoordinator
    # =========================================================================

    @contextmanager
    def locked_record(self, auction_id: int) -> Iterator[AuctionRecord]:
        """
        Hold an auction's lock and yield the live record.

        Only the registry and the settlement coordinator use this; the
        record must be left either unchanged or in a committed terminal
        state when the block exits.
        """
        record, lock = self._lookup(auction_id)
        with lock:
            yield record

    def commit_transition(self, record: AuctionRecord, event: AuctionEvent) -> None:
        """
        Persist a terminal transition, release its escrow commitment and
        append its event to the log.

        Called under the record lock after all transfers succeeded. If
        persistence raises, nothing in memory has changed yet. The caller
        publishes the event to subscribers once it has released the lock.
        """
        with self._lock:
            if self.storage_manager:
                self.storage_manager.persist_transition(record, event)
            self._committed[(record.seller, record.asset)] -= record.amount
            self.events.record(event)

    # =========================================================================
    # Persistence
    # =========================================================================

    def _load_from_storage(self) -> None:
        """Rebuild the arena, id counter and commitments from storage."""
        records = self.storage_manager.load_auctions()

        for record in records:
            self._records[record.auction_id] = record
            self._locks[record.auction_id] = threading.RLock()
            if record.active:
                self._committed[(record.seller, record.asset)] += record.amount

        highest = max(self._records) + 1 if self._records else 0
        self._next_id = max(self.storage_manager.get_next_id(), highest)

        self.events.load(self.storage_manager.load_events())

        logger.info(f"Loaded registry: {len(records)} auctions, next id={self._next_id}")

    # =========================================================================
    # Utility
    # =========================================================================

    def __repr__(self) -> str:
        return f"AuctionRegistry(auctions={self.count()}, next_id={self._next_id})"

    def stats(self) -> dict:
        """Get registry statistics."""
        with self._lock:
            records = list(self._records.values())
            committed: Dict[str, int] = defaultdict(int)
            for (_, asset), amount in self._committed.items():
                if amount:
                    committed[asset] += amount
        return {
            "total_auctions": len(records),
            "active": sum(1 for r in records if r.status == AuctionStatus.ACTIVE),
            "settled": sum(1 for r in records if r.status == AuctionStatus.SETTLED),
            "cancelled": sum(1 for r in records if r.status == AuctionStatus.CANCELLED),
            "committed_escrow": dict(committed),
        }
