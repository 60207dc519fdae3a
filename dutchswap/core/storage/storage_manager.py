import json
from pathlib import Path
from typing import List, Optional

from dutchswap.core.auction.events import AuctionEvent, event_from_dict
from dutchswap.core.auction.record import AuctionRecord
from dutchswap.core.storage.sqlite_adapter import SQLiteAdapter
from dutchswap.utils.logger import get_logger

logger = get_logger("storage.manager")


class StorageManager:
    """
    Manages persistent storage for the auction registry.

    Coordinates data persistence using SQLite adapter.
    Handles:
    - Auction records (durable, queryable by id)
    - Event log (audit trail for indexers)
    - Metadata (next auction id)
    """

    def __init__(self, data_dir: Path, db_name: str = "auctions.db"):
        self.data_dir = Path(data_dir)
        self.db_path = self.data_dir / db_name
        self.adapter = SQLiteAdapter(self.db_path)

        logger.info(f"StorageManager initialized at {self.db_path}")

    # =========================================================================
    # Metadata
    # =========================================================================

    def get_next_id(self) -> int:
        value = self.adapter.get_meta("next_auction_id")
        return int(value) if value is not None else 0

    # =========================================================================
    # Records
    # =========================================================================

    def load_auctions(self) -> List[AuctionRecord]:
        """Load all records ordered by id."""
        return [AuctionRecord.from_dict(row) for row in self.adapter.get_all_auctions()]

    # =========================================================================
    # Transitions & Events
    # =========================================================================

    def persist_transition(
        self,
        record: AuctionRecord,
        event: AuctionEvent,
        next_id: Optional[int] = None,
    ):
        """Atomically persist a record state change together with its event."""
        self.adapter.persist_transition(
            record.to_dict(),
            event.event_id,
            event.kind,
            self._encode_event(event),
            next_id=next_id,
        )

    def load_events(self) -> List[AuctionEvent]:
        """Load the full event log in commit order."""
        events = []
        for _, _, kind, payload in self.adapter.get_all_events():
            data = {k: self._decode_value(v) for k, v in json.loads(payload).items()}
            events.append(event_from_dict(kind, data))
        return events

    @staticmethod
    def _encode_event(event: AuctionEvent) -> str:
        # ints as tagged strings: prices exceed JSON-safe integer range for most readers
        return json.dumps({k: {"int": str(v)} if isinstance(v, int) else v for k, v in event.to_dict().items()})

    @staticmethod
    def _decode_value(value):
        if isinstance(value, dict) and "int" in value:
            return int(value["int"])
        return value

    def close(self):
        self.adapter.close()
