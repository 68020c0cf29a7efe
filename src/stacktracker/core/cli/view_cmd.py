"""Read-only views: dashboard summary, holdings list, and spot prices."""

from __future__ import annotations

import asyncio

import click

from stacktracker.portfolio import Holding, Metal, SpotQuote, TrackerSession, holding_melt_value
from stacktracker.portfolio.display import (
    format_change,
    format_currency,
    format_decimal,
    format_ounces,
    format_percent,
)

offline_option = click.option("--offline", is_flag=True, help="Skip the spot price fetch (prices show as $0.00).")


def _quote_lines(quote: SpotQuote) -> list[str]:
    lines = []
    for metal in (Metal.GOLD, Metal.SILVER):
        line = f"{metal.value.title()} spot: {format_currency(quote.price(metal))}"
        change = format_change(quote.change(metal))
        if change:
            line += f"  {change}"
        lines.append(line)
    footer = f"Last updated: {quote.timestamp or 'N/A'}"
    if quote.source:
        footer += f" | Source: {quote.source}"
    lines.append(footer)
    return lines


def _holding_line(holding: Holding) -> str:
    return (
        f"{holding.product}: {holding.quantity} x {format_decimal(holding.ozt_per_unit)} oz {holding.metal.value}"
        f"  {format_currency(holding.cost)}  {holding.date.isoformat()}"
    )


def render_summary(session: TrackerSession) -> str:
    summary = session.valuation()
    lines = _quote_lines(session.quote)
    lines.append("")
    lines.append("Portfolio value")
    for metal in Metal:
        lines.append(
            f"  {metal.value.title()}: {format_ounces(summary.total_ozt[metal], metal)}"
            f"  {format_currency(summary.melt_value[metal])}"
        )
    lines.append(f"  Total value: {format_currency(summary.total_melt_value)}")
    lines.append(f"  Total cost: {format_currency(summary.total_cost)}")
    lines.append(
        f"  Profit/Loss: {format_currency(summary.profit_loss)} ({format_percent(summary.profit_loss_percent)})"
    )
    lines.append("")
    lines.append("Recent holdings")
    recent = session.recent()
    if not recent:
        lines.append("  No holdings yet. Run 'stacktracker add' to get started.")
    lines.extend(f"  {_holding_line(h)}" for h in recent)
    return "\n".join(lines)


def render_holdings(session: TrackerSession) -> str:
    portfolio = session.portfolio
    if portfolio.is_empty():
        return "No holdings yet."

    lines: list[str] = []
    for metal in Metal:
        collection = portfolio.holdings(metal)
        if not collection:
            continue
        lines.append(f"{metal.value.title()} holdings")
        for holding in collection:
            detail = (
                f"{holding.quantity} x {format_decimal(holding.ozt_per_unit)} oz"
                f" = {format_ounces(holding.total_ozt, metal)} total"
            )
            if holding.dealer:
                detail = f"{holding.dealer} | {detail}"
            lines.append(f"  [{holding.id}] {holding.product}")
            lines.append(f"    {detail}")
            lines.append(
                f"    Cost {format_currency(holding.cost)}  {holding.date.isoformat()}"
                f"  Melt {format_currency(holding_melt_value(holding, session.quote))}"
            )
            if holding.notes:
                lines.append(f"    {holding.notes}")
        lines.append("")
    return "\n".join(lines).rstrip()


@click.command()
@offline_option
@click.pass_obj
def summary(config, offline: bool) -> None:
    """Show spot prices, portfolio totals, and recent holdings."""
    from .common import start_session

    session = asyncio.run(start_session(config, fetch_prices=not offline))
    click.echo(render_summary(session))


@click.command()
@offline_option
@click.pass_obj
def holdings(config, offline: bool) -> None:
    """List all holdings grouped by metal, with melt value at spot."""
    from .common import start_session

    session = asyncio.run(start_session(config, fetch_prices=not offline))
    click.echo(render_holdings(session))


@click.command()
@click.pass_obj
def prices(config) -> None:
    """Fetch and show the current spot prices."""
    from .common import start_session

    session = asyncio.run(start_session(config))
    if session.quote.is_default:
        raise click.ClickException("Spot prices are unavailable right now.")
    click.echo("\n".join(_quote_lines(session.quote)))
