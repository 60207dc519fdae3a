"""
Auction House - Caller-facing surface of the engine.

Bundles one AuctionRegistry and its SettlementCoordinator behind the five
operations external callers use (create, cancel, settle, get,
current_price). Every operation takes the caller identity explicitly.
"""

from typing import Callable, List, Optional, Tuple

from dutchswap.core.auction.events import AuctionEvent, EventCallback, EventLog
from dutchswap.core.auction.pricing import PricingEngine
from dutchswap.core.auction.record import AuctionRecord
from dutchswap.core.auction.registry import AuctionRegistry
from dutchswap.core.auction.settlement import SettlementCoordinator, SettlementReceipt
from dutchswap.core.config import EngineConfig
from dutchswap.core.state.ledger import AssetLedger


class AuctionHouse:
    """
    Facade over registry + coordinator sharing one ledger and clock.
    """

    def __init__(
        self,
        ledger: AssetLedger,
        escrow_account: str = "dutchswap:escrow",
        payment_asset: str = "native",
        clock: Optional[Callable[[], int]] = None,
        pricing: Optional[PricingEngine] = None,
        storage_manager=None,
    ):
        self.ledger = ledger
        self.registry = AuctionRegistry(
            ledger,
            escrow_account=escrow_account,
            clock=clock,
            pricing=pricing,
            event_log=EventLog(),
            storage_manager=storage_manager,
        )
        self.coordinator = SettlementCoordinator(self.registry, payment_asset=payment_asset)

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        ledger: AssetLedger,
        clock: Optional[Callable[[], int]] = None,
    ) -> "AuctionHouse":
        """Build a house from configuration, opening storage if enabled."""
        storage_manager = None
        if config.persistence_enabled:
            from dutchswap.core.storage.storage_manager import StorageManager
            storage_manager = StorageManager(config.data_dir, db_name=config.db_name)

        return cls(
            ledger,
            escrow_account=config.escrow_account,
            payment_asset=config.payment_asset,
            clock=clock,
            storage_manager=storage_manager,
        )

    @property
    def escrow_account(self) -> str:
        return self.registry.escrow_account

    def custody_account(self, seller: str) -> str:
        return self.registry.custody_account(seller)

    @property
    def payment_asset(self) -> str:
        return self.coordinator.payment_asset

    # =========================================================================
    # Operations
    # =========================================================================

    def create(
        self,
        caller: str,
        asset: str,
        amount: int,
        start_price: int,
        end_price: int,
        duration: int,
    ) -> int:
        return self.registry.create(caller, asset, amount, start_price, end_price, duration)

    def cancel(self, auction_id: int, caller: str) -> None:
        self.registry.cancel(auction_id, caller)

    def settle(self, auction_id: int, caller: str, payment: int) -> SettlementReceipt:
        return self.coordinator.settle(auction_id, caller, payment)

    def get(self, auction_id: int) -> AuctionRecord:
        return self.registry.get(auction_id)

    def current_price(self, auction_id: int) -> int:
        return self.registry.current_price(auction_id)

    def price_schedule(self, auction_id: int, points: int = 5) -> List[Tuple[int, int]]:
        return self.registry.pricing.price_schedule(self.registry.get(auction_id), points)

    # =========================================================================
    # Events
    # =========================================================================

    def subscribe(self, callback: EventCallback) -> None:
        self.registry.events.subscribe(callback)

    def events(self, auction_id: Optional[int] = None) -> List[AuctionEvent]:
        return self.registry.events.events(auction_id)

    def stats(self) -> dict:
        return {
            "registry": self.registry.stats(),
            "settlement": self.coordinator.stats(),
        }
