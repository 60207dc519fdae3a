"""Asset ledger interface and in-memory implementation"""
from dutchswap.core.state.ledger import (
    AssetLedger,
    InMemoryLedger,
    LedgerSnapshot,
    TransferRecord,
)

__all__ = [
    "AssetLedger",
    "InMemoryLedger",
    "LedgerSnapshot",
    "TransferRecord",
]
