"""
End-to-end tests for the dutchswap command line.
"""

import json

import click
import pytest
from click.testing import CliRunner

from dutchswap.cli.main import cli, format_units, parse_units
from dutchswap.utils import logger


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def fresh_logging():
    # The CLI binds console logging to the runner's captured stdout
    yield
    logger.reset_logging()


class TestUnits:
    """Tests for decimal unit conversion."""

    @pytest.mark.parametrize(
        "text,expected",
        [("1", 10**18), ("0.1", 10**17), ("0.000000000000000001", 1), ("0", 0)],
    )
    def test_parse_units(self, text, expected):
        assert parse_units(text) == expected

    @pytest.mark.parametrize("text", ["abc", "0.0000000000000000001"])
    def test_parse_units_rejects(self, text):
        with pytest.raises(click.BadParameter):
            parse_units(text)

    @pytest.mark.parametrize(
        "value,expected",
        [(55 * 10**16, "0.55"), (10**18, "1"), (100 * 10**18, "100"), (0, "0")],
    )
    def test_format_units(self, value, expected):
        assert format_units(value) == expected


class TestQuote:
    """Tests for `dutchswap quote`."""

    def test_mid_decay_quote(self, runner):
        result = runner.invoke(
            cli,
            ["quote", "--start-price", "1", "--end-price", "0.1", "--duration", "3600", "--elapsed", "1800"],
        )
        assert result.exit_code == 0, result.output
        assert "Price after 1800s: 0.55 (550000000000000000 base units)" in result.output

    def test_quote_after_expiry_is_floor(self, runner):
        result = runner.invoke(
            cli,
            ["quote", "--start-price", "1", "--end-price", "0.1", "--duration", "3600", "--elapsed", "9999"],
        )
        assert result.exit_code == 0
        assert "Price after 9999s: 0.1 " in result.output

    def test_inverted_prices_rejected(self, runner):
        result = runner.invoke(
            cli,
            ["quote", "--start-price", "0.1", "--end-price", "1", "--duration", "3600", "--elapsed", "0"],
        )
        assert result.exit_code == 2
        assert "start price must be >= end price" in result.output


class TestSchedule:
    """Tests for `dutchswap schedule`."""

    def test_schedule_points(self, runner):
        result = runner.invoke(
            cli,
            ["schedule", "--start-price", "1", "--end-price", "0.1", "--duration", "3600", "--points", "5"],
        )
        assert result.exit_code == 0, result.output
        assert "0s  1" in result.output
        assert "1800s  0.55" in result.output
        assert "3600s  0.1" in result.output

    def test_schedule_needs_two_points(self, runner):
        result = runner.invoke(
            cli,
            ["schedule", "--start-price", "1", "--end-price", "0.1", "--duration", "3600", "--points", "1"],
        )
        assert result.exit_code == 2


class TestDemo:
    """Tests for `dutchswap demo`."""

    def test_demo_settles(self, runner):
        result = runner.invoke(cli, ["demo", "--elapsed", "1800"])
        assert result.exit_code == 0, result.output
        assert "Price after 1800s: 0.55 native" in result.output
        assert "Buyer TOKEN balance: 100" in result.output
        assert "SETTLED" in result.output
        assert "AuctionFinalized" in result.output
        assert "Demo complete!" in result.output

    def test_demo_cancel(self, runner):
        result = runner.invoke(cli, ["demo", "--cancel"])
        assert result.exit_code == 0, result.output
        assert "Seller TOKEN balance: 100" in result.output
        assert "CANCELLED" in result.output
        assert "AuctionCancelled" in result.output

    def test_demo_after_expiry_fails(self, runner):
        result = runner.invoke(cli, ["demo", "--elapsed", "3600"])
        assert result.exit_code == 1
        assert "AUCTION_HAS_ENDED" in result.output

    def test_demo_uses_config_file(self, runner, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"payment_asset": "USDC"}), encoding="utf-8")

        result = runner.invoke(cli, ["--config", str(config_path), "demo"])

        assert result.exit_code == 0, result.output
        assert "USDC" in result.output

    def test_demo_with_persistence(self, runner, tmp_path):
        env = {
            "DUTCHSWAP_PERSISTENCE_ENABLED": "true",
            "DUTCHSWAP_DATA_DIR": str(tmp_path / "data"),
        }
        result = runner.invoke(cli, ["demo"], env=env)

        assert result.exit_code == 0, result.output
        assert (tmp_path / "data" / "auctions.db").exists()


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
