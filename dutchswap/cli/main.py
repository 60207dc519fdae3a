"""
dutchswap CLI - Command line interface for the reverse Dutch auction engine

Main entry point for all CLI commands.
"""

import logging
from decimal import Decimal, InvalidOperation

import click

from dutchswap import __version__
from dutchswap.utils.logger import configure_logging, reset_logging

DEFAULT_DECIMALS = 18


def parse_units(value: str, decimals: int = DEFAULT_DECIMALS) -> int:
    """
    Convert a decimal string to integer base units ("0.1", 18 -> 10**17).

    Raises:
        click.BadParameter: On malformed values or excess precision
    """
    try:
        scaled = Decimal(value) * (Decimal(10) ** decimals)
    except InvalidOperation:
        raise click.BadParameter(f"not a number: {value}")
    if scaled != scaled.to_integral_value():
        raise click.BadParameter(f"{value} has more than {decimals} decimals")
    return int(scaled)


def format_units(value: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """Render integer base units as a decimal string."""
    text = format(Decimal(value) / (Decimal(10) ** decimals), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False), help="JSON config file")
@click.option("--env-file", default=None, type=click.Path(exists=True, dir_okay=False), help=".env file with DUTCHSWAP_* settings")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, debug, config_path, env_file):
    """Reverse Dutch auction settlement engine"""
    from dutchswap.core.config import load_config

    config = load_config(config_path, env_file=env_file)
    level = logging.DEBUG if debug else getattr(logging, config.log_level)
    # Module loggers may already have triggered default setup on import
    reset_logging()
    configure_logging(level=level, log_dir=config.log_dir if config.log_to_file else None)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# =============================================================================
# Pricing Commands
# =============================================================================


@cli.command("quote")
@click.option("--start-price", required=True, help="Opening price (decimal units)")
@click.option("--end-price", required=True, help="Floor price (decimal units)")
@click.option("--duration", required=True, type=int, help="Decay period in seconds")
@click.option("--elapsed", required=True, type=int, help="Seconds since the auction started")
@click.option("--decimals", default=DEFAULT_DECIMALS, show_default=True, type=int, help="Payment asset decimals")
def quote(start_price, end_price, duration, elapsed, decimals):
    """Price of an auction after ELAPSED seconds"""
    from dutchswap.core.auction.pricing import compute_price

    start = parse_units(start_price, decimals)
    end = parse_units(end_price, decimals)
    if start < end:
        raise click.BadParameter("start price must be >= end price", param_hint="--start-price")
    if duration <= 0:
        raise click.BadParameter("duration must be positive", param_hint="--duration")

    price = compute_price(start, end, 0, duration, elapsed)
    click.echo(f"Price after {elapsed}s: {format_units(price, decimals)} ({price} base units)")


@cli.command("schedule")
@click.option("--start-price", required=True, help="Opening price (decimal units)")
@click.option("--end-price", required=True, help="Floor price (decimal units)")
@click.option("--duration", required=True, type=int, help="Decay period in seconds")
@click.option("--points", default=5, show_default=True, type=click.IntRange(min=2), help="Number of samples")
@click.option("--decimals", default=DEFAULT_DECIMALS, show_default=True, type=int, help="Payment asset decimals")
def schedule(start_price, end_price, duration, points, decimals):
    """Sampled price curve from start to expiry"""
    from dutchswap.core.auction.pricing import price_schedule
    from dutchswap.core.auction.record import AuctionRecord

    start = parse_units(start_price, decimals)
    end = parse_units(end_price, decimals)
    if start < end:
        raise click.BadParameter("start price must be >= end price", param_hint="--start-price")
    if duration <= 0:
        raise click.BadParameter("duration must be positive", param_hint="--duration")

    record = AuctionRecord(
        auction_id=0,
        seller="preview",
        asset="preview",
        amount=1,
        start_price=start,
        end_price=end,
        start_time=0,
        duration=duration,
    )
    click.echo(f"{'elapsed':>10}  price")
    for ts, price in price_schedule(record, points):
        click.echo(f"{ts:>9}s  {format_units(price, decimals)}")


# =============================================================================
# Demo Command
# =============================================================================


@cli.command("demo")
@click.option("--elapsed", default=1200, show_default=True, type=int, help="Seconds to wait before buying")
@click.option("--cancel", "cancel_instead", is_flag=True, help="Seller cancels instead of a buyer settling")
@click.pass_context
def demo(ctx, elapsed, cancel_instead):
    """Run a full auction against an in-memory ledger"""
    from dutchswap.core.auction import AuctionError, AuctionHouse
    from dutchswap.core.state import InMemoryLedger
    from dutchswap.crypto import address_from_label
    from dutchswap.utils.clock import ManualClock

    config = ctx.obj["config"]
    token = "TOKEN"
    supply = parse_units("1000000")
    amount = parse_units("100")
    start_price = parse_units("1")
    end_price = parse_units("0.1")
    duration = 3600

    deployer = address_from_label("deployer")
    seller = address_from_label("seller")
    buyer = address_from_label("buyer")

    click.echo("=" * 60)
    click.echo("  REVERSE DUTCH AUCTION - DEMO")
    click.echo("=" * 60)
    click.echo()

    ledger = InMemoryLedger()
    clock = ManualClock()
    house = AuctionHouse.from_config(config, ledger, clock=clock)

    click.echo("📦 Funding accounts...")
    ledger.mint(token, deployer, supply)
    ledger.transfer(token, deployer, seller, amount)
    ledger.mint(house.payment_asset, buyer, parse_units("10"))
    click.echo(f"  ✓ Seller {seller[:12]}... holds {format_units(ledger.balance_of(seller, token))} {token}")
    click.echo(f"  ✓ Buyer  {buyer[:12]}... holds {format_units(ledger.balance_of(buyer, house.payment_asset))} {house.payment_asset}")
    click.echo()

    try:
        click.echo("🏷️  Seller escrows and lists...")
        ledger.transfer(token, seller, house.custody_account(seller), amount)
        auction_id = house.create(seller, token, amount, start_price, end_price, duration)
        click.echo(f"  ✓ Auction {auction_id}: {format_units(amount)} {token}, "
                   f"{format_units(start_price)} -> {format_units(end_price)} over {duration}s")
        click.echo()

        clock.advance(elapsed)
        price = house.current_price(auction_id)
        click.echo(f"⏱️  Price after {elapsed}s: {format_units(price)} {house.payment_asset}")
        click.echo()

        if cancel_instead:
            click.echo("↩️  Seller cancels...")
            house.cancel(auction_id, seller)
            click.echo(f"  ✓ Seller {token} balance: {format_units(ledger.balance_of(seller, token))}")
        else:
            click.echo("💸 Buyer settles at the quoted price...")
            receipt = house.settle(auction_id, buyer, price)
            click.echo(f"  ✓ Paid {format_units(receipt.price)} {house.payment_asset}")
            click.echo(f"  ✓ Buyer {token} balance: {format_units(ledger.balance_of(buyer, token))}")
            click.echo(f"  ✓ Seller {house.payment_asset} balance: "
                       f"{format_units(ledger.balance_of(seller, house.payment_asset))}")
    except AuctionError as e:
        click.echo(f"❌ {e.code}: {e}")
        ctx.exit(1)

    click.echo()
    record = house.get(auction_id)
    click.echo(f"📊 Auction {auction_id}: {record.status.name} "
               f"(active={record.active}, finalized={record.finalized})")
    for event in house.events(auction_id):
        click.echo(f"  {event.kind} {event.event_id[:18]}...")
    click.echo()
    click.echo("✅ Demo complete!")


if __name__ == "__main__":
    cli()
