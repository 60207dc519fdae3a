"""
Tests for input validation helpers.
"""

import pytest

from dutchswap.utils.validation import (
    MAX_UINT256,
    MAX_UINT64,
    validate_account,
    validate_amount,
    validate_duration,
    validate_integer,
    validate_price,
)


class TestIntegers:
    """Tests for numeric validators."""

    @pytest.mark.parametrize("value", [0, 1, MAX_UINT256])
    def test_amount_in_range(self, value):
        assert validate_amount(value) == (True, "")

    @pytest.mark.parametrize("value", [-1, MAX_UINT256 + 1])
    def test_amount_out_of_range(self, value):
        valid, err = validate_amount(value)
        assert not valid
        assert "amount" in err

    @pytest.mark.parametrize("value", [1.0, "10", None, True])
    def test_non_int_rejected(self, value):
        valid, err = validate_integer(value, "x")
        assert not valid
        assert "must be int" in err

    def test_price_error_names_field(self):
        valid, err = validate_price(-1, "end_price")
        assert not valid
        assert err.startswith("end_price")

    def test_duration_bounds(self):
        assert validate_duration(MAX_UINT64)[0]
        assert not validate_duration(MAX_UINT64 + 1)[0]


class TestAccounts:
    """Tests for identity validation."""

    @pytest.mark.parametrize(
        "account",
        ["seller", "0x" + "ab" * 20, "dutchswap:escrow", "user.name-1_a"],
    )
    def test_valid_accounts(self, account):
        assert validate_account(account) == (True, "")

    @pytest.mark.parametrize("account", ["", "has space", "semi;colon", "x" * 129, 42, None])
    def test_invalid_accounts(self, account):
        valid, _ = validate_account(account)
        assert not valid


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
