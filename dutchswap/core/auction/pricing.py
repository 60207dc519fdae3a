"""
Pricing - Linear price decay for reverse Dutch auctions.

The quoted price starts at start_price, falls linearly with elapsed time,
and reaches end_price at start_time + duration, after which it stays there.

All computations use integer arithmetic:
- the decrement (start - end) * elapsed is computed before dividing by
  duration, so no precision is lost to an intermediate division;
- the division floors the decrement, which rounds the quoted price up to
  the next integer. A buyer never pays less than the continuous curve.

Python integers do not overflow; the registry's validation bounds inputs
to uint256 so quotes stay representable by on-chain payment assets.
"""

from typing import List, Tuple

from dutchswap.core.auction.record import AuctionRecord


def compute_price(
    start_price: int,
    end_price: int,
    start_time: int,
    duration: int,
    now: int,
) -> int:
    """
    Compute the price valid at `now`.

    Args:
        start_price: Price at start_time
        end_price: Floor price, start_price >= end_price >= 0
        start_time: Auction start timestamp
        duration: Decay period in seconds, > 0
        now: Timestamp to price at

    Returns:
        Quoted price in payment units
    """
    if now <= start_time:
        return start_price
    elapsed = now - start_time
    if elapsed >= duration:
        return end_price
    return start_price - (start_price - end_price) * elapsed // duration


def current_price(record: AuctionRecord, now: int) -> int:
    """Price of an auction record at `now`."""
    return compute_price(
        record.start_price,
        record.end_price,
        record.start_time,
        record.duration,
        now,
    )


def price_schedule(record: AuctionRecord, points: int = 5) -> List[Tuple[int, int]]:
    """
    Sample the price curve evenly from start_time to end_time.

    Args:
        record: Auction to sample
        points: Number of samples (>= 2), both ends included

    Returns:
        List of (timestamp, price)
    """
    if points < 2:
        raise ValueError(f"points must be >= 2, got {points}")

    schedule = []
    for i in range(points):
        ts = record.start_time + record.duration * i // (points - 1)
        schedule.append((ts, current_price(record, ts)))
    return schedule


class PricingEngine:
    """
    Stateless price oracle shared by clients and the settlement path.

    Wraps the module functions so a different curve can be injected into
    the registry and coordinator without touching them.
    """

    def current_price(self, record: AuctionRecord, now: int) -> int:
        return current_price(record, now)

    def price_schedule(self, record: AuctionRecord, points: int = 5) -> List[Tuple[int, int]]:
        return price_schedule(record, points)
