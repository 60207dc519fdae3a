"""
Auction events - Observable record of every lifecycle transition.

Events are published for external indexers and auditors; the engine never
reads them back to make decisions. Each event has a deterministic id,
keccak256 over its canonical JSON encoding, so an indexer can de-duplicate
events replayed from storage.
"""

import json
import threading
from dataclasses import asdict, dataclass
from typing import Callable, ClassVar, Dict, List, Optional, Type

from dutchswap.crypto import bytes_to_hex, keccak256
from dutchswap.utils.logger import get_logger

logger = get_logger("events")


# =============================================================================
# Event Types
# =============================================================================


@dataclass(frozen=True)
class AuctionEvent:
    """Base class for auction events."""

    kind: ClassVar[str] = "AuctionEvent"

    def to_dict(self) -> dict:
        return asdict(self)

    def encode(self) -> bytes:
        """Canonical encoding: kind plus sorted fields, integers as strings."""
        payload = {k: str(v) if isinstance(v, int) else v for k, v in self.to_dict().items()}
        return json.dumps({"kind": self.kind, "data": payload}, sort_keys=True).encode("utf-8")

    @property
    def event_id(self) -> str:
        return bytes_to_hex(keccak256(self.encode()))


@dataclass(frozen=True)
class AuctionCreated(AuctionEvent):
    kind: ClassVar[str] = "AuctionCreated"

    auction_id: int
    seller: str
    asset: str
    amount: int
    start_price: int
    end_price: int
    duration: int
    start_time: int


@dataclass(frozen=True)
class AuctionCancelled(AuctionEvent):
    kind: ClassVar[str] = "AuctionCancelled"

    auction_id: int
    timestamp: int


@dataclass(frozen=True)
class AuctionFinalized(AuctionEvent):
    kind: ClassVar[str] = "AuctionFinalized"

    auction_id: int
    buyer: str
    price: int
    timestamp: int


EVENT_TYPES: Dict[str, Type[AuctionEvent]] = {
    cls.kind: cls for cls in (AuctionCreated, AuctionCancelled, AuctionFinalized)
}


def event_from_dict(kind: str, data: dict) -> AuctionEvent:
    """Rebuild an event loaded from storage."""
    cls = EVENT_TYPES.get(kind)
    if cls is None:
        raise ValueError(f"Unknown event kind: {kind}")
    return cls(**data)


# =============================================================================
# Event Log
# =============================================================================


EventCallback = Callable[[AuctionEvent], None]


class EventLog:
    """
    Append-only, in-order log of auction events with subscriber callbacks.

    The registry appends an event with `record` while it still holds the
    lock that orders commits, so the log matches the persisted sequence.
    Subscribers are called later by `publish`, outside every engine lock.
    A failing subscriber is logged and skipped; it cannot undo the transition.
    """

    def __init__(self):
        self._events: List[AuctionEvent] = []
        self._subscribers: List[EventCallback] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: EventCallback) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: EventCallback) -> None:
        with self._lock:
            self._subscribers.remove(callback)

    def load(self, events: List[AuctionEvent]) -> None:
        """Seed the log with previously persisted events, without notifying."""
        with self._lock:
            self._events.extend(events)

    def record(self, event: AuctionEvent) -> None:
        """Append a committed event without notifying subscribers."""
        with self._lock:
            self._events.append(event)
        logger.debug(f"{event.kind} auction={event.auction_id} id={event.event_id[:10]}...")

    def publish(self, event: AuctionEvent) -> None:
        """Deliver a recorded event to every subscriber."""
        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(f"Event subscriber failed on {event.kind} for auction {event.auction_id}")

    def emit(self, event: AuctionEvent) -> None:
        self.record(event)
        self.publish(event)

    def events(self, auction_id: Optional[int] = None) -> List[AuctionEvent]:
        """All events, or only those of one auction, in commit order."""
        with self._lock:
            if auction_id is None:
                return list(self._events)
            return [e for e in self._events if e.auction_id == auction_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
