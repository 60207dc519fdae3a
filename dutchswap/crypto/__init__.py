"""
Hashing helpers for dutchswap.

Keccak-256 derives Ethereum-style addresses for demo accounts and gives
every emitted event a stable id (the log topic).
"""

from Crypto.Hash import keccak


# =============================================================================
# Hashing
# =============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for: address derivation, event ids.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


# =============================================================================
# Encoding
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to 0x-prefixed hex string."""
    return "0x" + data.hex()


def address_from_label(label: str) -> str:
    """
    Derive a deterministic address from a human label.

    address = 0x || last 20 bytes of keccak256(label)

    Used for demo and test accounts (seller, buyer, escrow custody).
    """
    return bytes_to_hex(keccak256(label.encode("utf-8"))[-20:])


__all__ = [
    "keccak256",
    "bytes_to_hex",
    "address_from_label",
]
