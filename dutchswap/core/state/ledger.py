"""
Ledger - Asset custody collaborator for the auction engine.

Conceptual Background:
---------------------
The engine never moves value itself. It asks a ledger to:

1. **Report escrow**: how much of an asset a holder (the engine's custody
   account) currently owns, to verify a listing is pre-funded.
2. **Transfer**: move an amount of an asset between two accounts, reporting
   success or failure. A failed transfer must leave balances untouched.

`AssetLedger` is the capability interface the registry and coordinator are
constructed with. `InMemoryLedger` is the in-process implementation used by
the CLI and the test suite; a chain-backed ledger would implement the same
two methods.

Snapshot:
--------
`snapshot()` captures supply and account counts for audit and for tests
asserting that value is conserved across a sequence of operations.
"""

import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Protocol, Tuple, runtime_checkable

from dutchswap.utils.logger import get_logger

logger = get_logger("ledger")


# =============================================================================
# Interface
# =============================================================================


@runtime_checkable
class AssetLedger(Protocol):
    """Capability interface consumed by the auction engine."""

    def escrow_balance_of(self, holder: str, asset: str) -> int:
        ...

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> bool:
        ...


# =============================================================================
# Ledger State
# =============================================================================


@dataclass(frozen=True)
class TransferRecord:
    """One successful transfer, kept in order for audit."""
    asset: str
    sender: str
    recipient: str
    amount: int


@dataclass
class LedgerSnapshot:
    """
    Snapshot of ledger totals.

    Used for conservation checks: transfers never change supply.
    """
    supply: Dict[str, int]
    account_count: int
    transfer_count: int


class InMemoryLedger:
    """
    Thread-safe account-balance ledger.

    Balances are keyed by (asset, account). Transfers are all-or-nothing:
    an overdraft or a non-positive amount is refused and nothing changes.

    Attributes:
        balances: (asset, account) -> amount
        history: Successful transfers in application order
    """

    def __init__(self):
        self.balances: Dict[Tuple[str, str], int] = defaultdict(int)
        self.history: List[TransferRecord] = []
        self._supply: Dict[str, int] = defaultdict(int)
        self._lock = threading.Lock()

    # =========================================================================
    # State Access
    # =========================================================================

    def balance_of(self, account: str, asset: str) -> int:
        """Get an account's balance of an asset."""
        with self._lock:
            return self.balances.get((asset, account), 0)

    def escrow_balance_of(self, holder: str, asset: str) -> int:
        """Balance held by a custody account."""
        return self.balance_of(holder, asset)

    def total_supply(self, asset: str) -> int:
        with self._lock:
            return self._supply.get(asset, 0)

    # =========================================================================
    # Mutation
    # =========================================================================

    def mint(self, asset: str, to: str, amount: int) -> None:
        """
        Create new units of an asset. Setup only (genesis allocations, tests).

        Raises:
            ValueError: If amount is not positive
        """
        if amount <= 0:
            raise ValueError(f"Mint amount must be positive, got {amount}")

        with self._lock:
            self.balances[(asset, to)] += amount
            self._supply[asset] += amount

        logger.debug(f"Minted {amount} {asset} to {to}")

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> bool:
        """
        Move `amount` of `asset` from sender to recipient.

        Returns:
            True if applied, False if refused (nothing changed)
        """
        if amount <= 0:
            logger.debug(f"Refused transfer of non-positive amount {amount} {asset}")
            return False

        with self._lock:
            available = self.balances.get((asset, sender), 0)
            if available < amount:
                logger.debug(
                    f"Refused transfer {amount} {asset} {sender} -> {recipient}: "
                    f"balance {available}"
                )
                return False

            self.balances[(asset, sender)] = available - amount
            self.balances[(asset, recipient)] += amount
            self.history.append(TransferRecord(asset, sender, recipient, amount))

        logger.debug(f"Transferred {amount} {asset} {sender} -> {recipient}")
        return True

    # =========================================================================
    # Utility
    # =========================================================================

    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            return LedgerSnapshot(
                supply=dict(self._supply),
                account_count=len({account for (_, account), v in self.balances.items() if v > 0}),
                transfer_count=len(self.history),
            )

    def __repr__(self) -> str:
        return f"InMemoryLedger(assets={len(self._supply)}, transfers={len(self.history)})"

    def stats(self) -> dict:
        """Get ledger statistics."""
        snap = self.snapshot()
        return {
            "assets": len(snap.supply),
            "accounts": snap.account_count,
            "transfers": snap.transfer_count,
            "supply": snap.supply,
        }
