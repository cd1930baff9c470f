"""Click CLI entrypoint with Rich terminal output."""

import asyncio

import click
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from daily_trader.domain.models import (
    Balance,
    Instrument,
    MessageKind,
    PortfolioSnapshot,
    TradeRecord,
    TradeResult,
    TradingLimits,
)
from daily_trader.logging import console


@click.group()
@click.option("--log-level", default=None, help="Override log level (DEBUG, INFO, WARNING, ERROR)")
def cli(log_level: str | None) -> None:
    """Daily Trader - simulated one-buy-a-day trading session."""
    from daily_trader.config import get_settings
    from daily_trader.logging import setup_logging

    setup_logging(get_settings(), cli_log_level=log_level)


@cli.command()
@click.option("--email", default="demo@example.com", show_default=True, help="Login email")
@click.option("--password", default="demo", show_default=True, help="Login password")
@click.option("--ticks", default=3, show_default=True, help="Broadcast ticks to run (0 = forever)")
@click.option(
    "--buy",
    "buy_order",
    type=(str, int),
    default=None,
    metavar="ID QTY",
    help="Place a BUY before broadcasting",
)
@click.option(
    "--sell",
    "sell_order",
    type=(str, int),
    default=None,
    metavar="ID QTY",
    help="Place a SELL before broadcasting",
)
def start(
    email: str,
    password: str,
    ticks: int,
    buy_order: tuple[str, int] | None,
    sell_order: tuple[str, int] | None,
) -> None:
    """Log in, execute optional orders, and stream snapshots."""
    from daily_trader.session.scheduler import TradingSession

    console.print(
        Panel(
            "[bold green]Daily Trader[/bold green]\n"
            "Simulated trading session\n"
            "[dim]Mock prices - simulated funds[/dim]",
            title="Starting",
            border_style="green",
        )
    )
    _print_config()

    async def _run() -> None:
        session = TradingSession()
        await session.initialize()
        try:
            await session.login(email, password)

            if buy_order:
                _print_result("BUY", await session.buy(*buy_order))
            if sell_order:
                _print_result("SELL", await session.sell(*sell_order))

            session.subscribe(MessageKind.STOCK_UPDATE, lambda m: _print_market(m.data))
            session.subscribe(MessageKind.PORTFOLIO_UPDATE, lambda m: _print_portfolio(m.data))
            session.subscribe(MessageKind.BALANCE_UPDATE, lambda m: _print_balance(m.data))
            session.subscribe(MessageKind.TRADING_LIMITS_UPDATE, lambda m: _print_limits(m.data))

            console.print(
                f"[green]Broadcasting every {session.settings.broadcast_interval_seconds:.1f}s"
                " (Ctrl+C to stop)...[/green]"
            )
            session.start_broadcast(max_ticks=ticks or None)
            await session.wait_broadcast()

            history = await session.get_trade_history()
            _print_trades(history.trades)
        finally:
            await session.logout()
            await session.shutdown()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")


@cli.command()
@click.option(
    "--market",
    type=click.Choice(["domestic", "international", "crypto"]),
    default=None,
    help="Only show one market",
)
def market(market: str | None) -> None:
    """Show the instrument catalog."""
    from daily_trader.market.catalog import default_catalog, group_by_market

    grouped = group_by_market(default_catalog())
    if market:
        grouped = {market: grouped[market]}
    _print_market(grouped)


@cli.command()
def config() -> None:
    """Show current configuration."""
    _print_config()


# ── Display helpers ─────────────────────────────────────────────


def _print_config() -> None:
    from daily_trader.config import get_settings

    settings = get_settings()

    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("Starting KRW", f"₩{settings.starting_krw_balance:,.0f}")
    table.add_row("Starting USD", f"${settings.starting_usd_balance:,.2f}")
    table.add_row("Max Instrument Types", str(settings.max_stock_types))
    table.add_row("Limit Reset", settings.limit_reset_policy.value)
    table.add_row("USD/KRW Rate", f"{settings.usd_krw_rate:,.2f}")
    table.add_row("Broadcast Interval", f"{settings.broadcast_interval_seconds:.1f}s")
    table.add_row("Trade Delay", f"{settings.trade_delay_seconds:.1f}s")
    seed = "random" if settings.price_seed is None else str(settings.price_seed)
    table.add_row("Price Seed", seed)
    table.add_row("Ledger", str(settings.db_path) if settings.db_path else "in-memory")

    console.print(table)


def _print_result(side: str, result: TradeResult) -> None:
    style = "green" if result.success else "red"
    console.print(
        Panel(Text(result.reason, style=style), title=f"{side} result", border_style=style)
    )


def _fmt_price(price: float, market: str) -> str:
    if market == "domestic":
        return f"₩{price:,.0f}"
    return f"${price:,.4f}" if price < 1 else f"${price:,.2f}"


def _print_market(grouped: dict[str, list[Instrument]]) -> None:
    table = Table(title="Market", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Market")
    table.add_column("Code")
    table.add_column("Name")
    table.add_column("Price", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Change %", justify="right")

    for market_name, instruments in grouped.items():
        for i in instruments:
            style = "green" if i.change >= 0 else "red"
            table.add_row(
                i.id,
                market_name,
                i.code,
                i.name,
                _fmt_price(i.price, market_name),
                Text(f"{i.change:+,.2f}", style=style),
                Text(f"{i.change_percent:+.2f}%", style=style),
            )

    console.print(table)


def _print_portfolio(portfolio: PortfolioSnapshot) -> None:
    if not portfolio.holdings:
        console.print("[dim]No holdings.[/dim]")
        return

    table = Table(title="Portfolio", show_header=True, header_style="bold cyan")
    table.add_column("Code")
    table.add_column("Qty", justify="right")
    table.add_column("Avg", justify="right")
    table.add_column("Current", justify="right")

    for h in portfolio.holdings:
        market_name = h.instrument.market.value
        table.add_row(
            h.instrument.code,
            str(h.quantity),
            _fmt_price(h.avg_price, market_name),
            _fmt_price(h.instrument.price, market_name),
        )

    console.print(table)
    style = "green" if portfolio.total_return >= 0 else "red"
    console.print(
        Text(
            f"Value ₩{portfolio.total_value:,.0f}  Cost ₩{portfolio.total_cost:,.0f}  "
            f"Return ₩{portfolio.total_return:+,.0f} ({portfolio.total_return_percent:+.2f}%)",
            style=style,
        )
    )


def _print_balance(balance: Balance) -> None:
    console.print(f"Balance: ₩{balance.krw:,.0f}  ${balance.usd:,.2f}")


def _print_limits(limits: TradingLimits) -> None:
    if limits.can_buy_today:
        status_text = "[bold green]AVAILABLE[/bold green]"
    else:
        status_text = "[bold red]USED[/bold red]"
    console.print(
        f"Daily purchase: {status_text}  "
        f"Types: {limits.current_stock_types}/{limits.max_stock_types}"
    )


def _print_trades(trades: list[TradeRecord]) -> None:
    if not trades:
        console.print("[dim]No trades recorded yet.[/dim]")
        return

    table = Table(title="Recent Trades", show_header=True, header_style="bold cyan")
    table.add_column("Time", style="dim")
    table.add_column("Type")
    table.add_column("Code")
    table.add_column("Qty", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Total", justify="right")

    for t in trades:
        side_style = "green" if t.trade_type.value == "BUY" else "red"
        table.add_row(
            t.timestamp.isoformat()[:19],
            Text(t.trade_type.value, style=side_style),
            t.instrument_code,
            str(t.quantity),
            _fmt_price(t.price, t.market.value),
            _fmt_price(t.total_amount, t.market.value),
        )

    console.print(table)
