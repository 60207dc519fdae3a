"""
Transfer batches - all-or-nothing groups of ledger transfers.

The ledger only offers single transfers. A terminal transition needs one
(cancel) or two (settle) of them to take effect together with the record
change, so applied transfers are remembered and reversed in reverse order
if a later step fails.
"""

from typing import List

from dutchswap.core.auction.errors import TransferFailed
from dutchswap.core.state.ledger import AssetLedger, TransferRecord
from dutchswap.utils.logger import get_logger

logger = get_logger("unit_of_work")


class TransferBatch:
    """
    Transfers applied on behalf of one auction transition.

    Usage:
        batch = TransferBatch(ledger, auction_id)
        try:
            batch.transfer(...)
            batch.transfer(...)
        except Exception:
            batch.rollback()
            raise
    """

    def __init__(self, ledger: AssetLedger, auction_id: int):
        self.ledger = ledger
        self.auction_id = auction_id
        self.applied: List[TransferRecord] = []

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        """
        Apply one transfer.

        Raises:
            TransferFailed: If the ledger refuses it
        """
        if not self.ledger.transfer(asset, sender, recipient, amount):
            raise TransferFailed(
                f"Ledger refused {amount} {asset} {sender} -> {recipient}",
                self.auction_id,
            )
        self.applied.append(TransferRecord(asset, sender, recipient, amount))

    def rollback(self) -> List[TransferRecord]:
        """
        Reverse applied transfers, newest first.

        Returns:
            Transfers whose reversal the ledger refused (empty on full rollback)
        """
        stranded = []
        while self.applied:
            t = self.applied.pop()
            if not self.ledger.transfer(t.asset, t.recipient, t.sender, t.amount):
                stranded.append(t)

        if stranded:
            logger.critical(
                f"Auction {self.auction_id}: rollback incomplete, "
                f"{len(stranded)} transfer(s) could not be reversed: {stranded}"
            )
        return stranded
