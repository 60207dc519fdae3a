import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dutchswap.utils.logger import get_logger

logger = get_logger("storage.sqlite")

AUCTION_COLUMNS = (
    "auction_id",
    "seller",
    "asset",
    "amount",
    "start_price",
    "end_price",
    "start_time",
    "duration",
    "active",
    "finalized",
    "status",
    "buyer",
    "settled_price",
    "closed_at",
)


class SQLiteAdapter:
    """
    SQLite backend for persistent storage.

    Provides:
    1. Auction table keyed by auction_id (the record arena).
    2. Append-only event log.
    3. Registry metadata (next auction id).

    Amounts and prices can exceed SQLite's 64-bit INTEGER, so they are
    stored as decimal TEXT and converted by the caller.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn_local = threading.local()

        if not db_path.parent.exists():
            db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if not hasattr(self._conn_local, "conn"):
            self._conn_local.conn = sqlite3.connect(
                self.db_path,
                timeout=30.0,
                check_same_thread=False
            )
            self._conn_local.conn.row_factory = sqlite3.Row
            # Enable WAL mode for better concurrency
            self._conn_local.conn.execute("PRAGMA journal_mode=WAL;")
            self._conn_local.conn.execute("PRAGMA synchronous=NORMAL;")
        return self._conn_local.conn

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_conn()
        with conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS auctions (
                    auction_id INTEGER PRIMARY KEY,
                    seller TEXT NOT NULL,
                    asset TEXT NOT NULL,
                    amount TEXT NOT NULL,
                    start_price TEXT NOT NULL,
                    end_price TEXT NOT NULL,
                    start_time INTEGER NOT NULL,
                    duration INTEGER NOT NULL,
                    active INTEGER NOT NULL,
                    finalized INTEGER NOT NULL,
                    status TEXT NOT NULL,
                    buyer TEXT,
                    settled_price TEXT,
                    closed_at INTEGER
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_auction_status ON auctions(status);")

            conn.execute("""
                CREATE TABLE IF NOT EXISTS events (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    event_id TEXT NOT NULL UNIQUE,
                    auction_id INTEGER NOT NULL,
                    kind TEXT NOT NULL,
                    payload TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_event_auction ON events(auction_id);")

            conn.execute("""
                CREATE TABLE IF NOT EXISTS registry_meta (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)

    # =========================================================================
    # Metadata
    # =========================================================================

    def get_meta(self, key: str) -> Optional[str]:
        conn = self._get_conn()
        cursor = conn.execute("SELECT value FROM registry_meta WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row['value'] if row else None

    # =========================================================================
    # Auctions
    # =========================================================================

    @staticmethod
    def _auction_params(row: Dict[str, Any]) -> Tuple:
        return (
            row["auction_id"],
            row["seller"],
            row["asset"],
            str(row["amount"]),
            str(row["start_price"]),
            str(row["end_price"]),
            row["start_time"],
            row["duration"],
            int(row["active"]),
            int(row["finalized"]),
            row["status"],
            row["buyer"],
            str(row["settled_price"]) if row["settled_price"] is not None else None,
            row["closed_at"],
        )

    def _upsert_auction(self, conn: sqlite3.Connection, row: Dict[str, Any]):
        placeholders = ", ".join("?" for _ in AUCTION_COLUMNS)
        conn.execute(
            f"INSERT OR REPLACE INTO auctions ({', '.join(AUCTION_COLUMNS)}) VALUES ({placeholders})",
            self._auction_params(row),
        )

    def _insert_event(self, conn: sqlite3.Connection, event_id: str, auction_id: int, kind: str, payload: str):
        conn.execute(
            "INSERT INTO events (event_id, auction_id, kind, payload) VALUES (?, ?, ?, ?)",
            (event_id, auction_id, kind, payload),
        )

    def get_all_auctions(self) -> List[Dict[str, Any]]:
        """Get all auction rows ordered by id."""
        conn = self._get_conn()
        cursor = conn.execute("SELECT * FROM auctions ORDER BY auction_id ASC")
        return [dict(row) for row in cursor]

    # =========================================================================
    # Events
    # =========================================================================

    def get_all_events(self) -> List[Tuple[str, int, str, str]]:
        """Get all (event_id, auction_id, kind, payload) in insertion order."""
        conn = self._get_conn()
        cursor = conn.execute("SELECT event_id, auction_id, kind, payload FROM events ORDER BY seq ASC")
        return [(row['event_id'], row['auction_id'], row['kind'], row['payload']) for row in cursor]

    # =========================================================================
    # Transitions
    # =========================================================================

    def persist_transition(
        self,
        row: Dict[str, Any],
        event_id: str,
        kind: str,
        payload: str,
        next_id: Optional[int] = None,
    ):
        """
        Atomically write an auction row, its event and (on creation) the next id.

        Args:
            row: Auction row as produced by AuctionRecord.to_dict()
            event_id: Deterministic event id
            kind: Event kind
            payload: JSON-encoded event fields
            next_id: New value for the id counter, if it changed
        """
        conn = self._get_conn()
        with conn:
            self._upsert_auction(conn, row)
            self._insert_event(conn, event_id, row["auction_id"], kind, payload)
            if next_id is not None:
                conn.execute(
                    "INSERT OR REPLACE INTO registry_meta (key, value) VALUES (?, ?)",
                    ("next_auction_id", str(next_id)),
                )

    def close(self):
        """Close this thread's connection."""
        conn = getattr(self._conn_local, "conn", None)
        if conn is not None:
            conn.close()
            del self._conn_local.conn
