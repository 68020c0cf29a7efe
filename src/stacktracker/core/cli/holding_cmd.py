"""Holding form commands: add, edit, delete."""

from __future__ import annotations

import asyncio

import click

from stacktracker.core.exceptions import FormError
from stacktracker.portfolio import CommitResult, Metal

from .common import METAL_CHOICE, echo_warnings, start_session

# Numeric inputs stay as text so the form applies its own defaults.
_FIELD_OPTIONS = [
    click.option("--product", default=None, help="Product name, e.g. 'American Silver Eagle'."),
    click.option("--ozt", "ozt_per_unit", default=None, help="Troy ounces per unit."),
    click.option("--quantity", default=None, help="Number of units."),
    click.option("--unit-price", default=None, help="Price paid per unit."),
    click.option("--dealer", default=None, help="Dealer or source."),
    click.option("--date", "purchase_date", default=None, help="Purchase date (YYYY-MM-DD)."),
    click.option("--notes", default=None, help="Free-text notes."),
]


def _field_options(func):
    for option in reversed(_FIELD_OPTIONS):
        func = option(func)
    return func


def _report(result: CommitResult, verb: str) -> None:
    if not result.ok:
        raise click.ClickException("; ".join(result.errors))
    holding = result.holding
    click.echo(f"{verb} {holding.metal.value} holding {holding.id}: {holding.product}")
    echo_warnings(result.warnings)


def _apply_fields(form, fields: dict) -> None:
    for name, value in fields.items():
        if value is not None:
            form.update_field(name, value)


@click.command()
@click.option("--metal", type=METAL_CHOICE, default=Metal.SILVER.value, show_default=True, help="Metal type.")
@_field_options
@click.pass_obj
def add(config, metal: str, **fields) -> None:
    """Add a holding."""

    async def _add() -> CommitResult:
        session = await start_session(config, fetch_prices=False)
        form = session.form
        form.open_create()
        form.update_field("metal", metal)
        _apply_fields(form, _form_fields(fields))
        return await form.commit()

    _report(asyncio.run(_add()), "Added")


@click.command()
@click.argument("holding_id")
@_field_options
@click.pass_obj
def edit(config, holding_id: str, **fields) -> None:
    """Edit a holding. Its metal cannot be changed."""

    async def _edit() -> CommitResult:
        session = await start_session(config, fetch_prices=False)
        holding = session.portfolio.get(holding_id)
        if holding is None:
            raise click.ClickException(f"No holding with id {holding_id}")
        form = session.form
        form.open_edit(holding)
        try:
            _apply_fields(form, _form_fields(fields))
        except FormError as e:
            form.cancel()
            raise click.ClickException(str(e)) from e
        return await form.commit()

    _report(asyncio.run(_edit()), "Updated")


@click.command()
@click.argument("holding_id")
@click.argument("metal", type=METAL_CHOICE)
@click.pass_obj
def delete(config, holding_id: str, metal: str) -> None:
    """Delete a holding."""

    async def _delete():
        session = await start_session(config, fetch_prices=False)
        return await session.form.delete(holding_id, Metal.parse(metal))

    result = asyncio.run(_delete())
    if result.changed:
        click.echo(f"Deleted {metal} holding {holding_id}")
    else:
        click.echo(f"No {metal} holding {holding_id}; nothing to delete")
    echo_warnings(result.warnings)


def _form_fields(fields: dict) -> dict:
    """Map CLI option names onto FormDraft field names."""
    mapped = dict(fields)
    mapped["date"] = mapped.pop("purchase_date", None)
    return mapped
