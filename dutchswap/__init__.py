"""
dutchswap - Reverse Dutch auction settlement engine

A seller escrows a fixed amount of an asset and lists it at a price that
decays linearly to a floor over a fixed duration:
- Linear, integer-exact price decay
- Exactly-once settlement or cancellation per listing
- All-or-nothing asset/payment swaps against an injected ledger
- Optional SQLite persistence of records and events
"""

__version__ = "0.1.0"
