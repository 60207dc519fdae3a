"""
Input Validation - Bounds and type checks for auction inputs.

Every operation on the engine is invoked by untrusted callers, so numeric
inputs are checked against the uint256 range of on-chain settlement
assets, and identities are checked for shape before they reach the registry.
"""

import re
from typing import Any, Optional, Tuple

# =============================================================================
# Constants
# =============================================================================

MAX_UINT256 = 2**256 - 1
MAX_UINT64 = 2**64 - 1

MIN_AMOUNT = 0
MAX_AMOUNT = MAX_UINT256
MIN_PRICE = 0
MAX_PRICE = MAX_UINT256
MIN_DURATION = 0
MAX_DURATION = MAX_UINT64

MAX_ACCOUNT_LENGTH = 128
ACCOUNT_PATTERN = r"^[A-Za-z0-9_.:\-]+$"


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int = MIN_AMOUNT,
    max_val: int = MAX_AMOUNT,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    # bool is an int subclass; True is not a quantity
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_amount(amount: Any) -> Tuple[bool, str]:
    """Validate an asset quantity."""
    return validate_integer(amount, "amount", MIN_AMOUNT, MAX_AMOUNT)


def validate_price(price: Any, name: str = "price") -> Tuple[bool, str]:
    """Validate a price expressed in the payment unit."""
    return validate_integer(price, name, MIN_PRICE, MAX_PRICE)


def validate_duration(duration: Any) -> Tuple[bool, str]:
    """Validate an auction duration in seconds."""
    return validate_integer(duration, "duration", MIN_DURATION, MAX_DURATION)


def validate_string(
    value: Any,
    name: str,
    max_length: int = MAX_ACCOUNT_LENGTH,
    pattern: Optional[str] = None,
) -> Tuple[bool, str]:
    """
    Validate string input.

    Args:
        value: Value to validate
        name: Field name for errors
        max_length: Maximum string length
        pattern: Optional regex pattern

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    if not value:
        return False, f"{name} must not be empty"

    if len(value) > max_length:
        return False, f"{name} exceeds max length {max_length}"

    if pattern and not re.match(pattern, value):
        return False, f"{name} does not match required pattern"

    return True, ""


def validate_account(account: Any, name: str = "account") -> Tuple[bool, str]:
    """Validate an account or asset identifier."""
    return validate_string(account, name, MAX_ACCOUNT_LENGTH, ACCOUNT_PATTERN)


__all__ = [
    "validate_integer",
    "validate_amount",
    "validate_price",
    "validate_duration",
    "validate_string",
    "validate_account",
    "MAX_UINT256",
    "MAX_UINT64",
    "MAX_AMOUNT",
    "MAX_PRICE",
    "MAX_DURATION",
]
