"""Shared setup logic for CLI commands."""

from __future__ import annotations

import os

import click

from stacktracker.core.config import Config
from stacktracker.core.exceptions import ConfigurationError
from stacktracker.core.utils.logging import setup_logging
from stacktracker.portfolio import Metal, TrackerSession
from stacktracker.portfolio.store import PersistenceWarning

METAL_CHOICE = click.Choice([m.value for m in Metal], case_sensitive=False)


def load_config(config_file: str | None = None, data_dir: str | None = None) -> Config:
    """Load config from an explicit file, or ~/.stacktracker/config.yaml when present."""
    if config_file is None:
        default_path = os.path.expanduser("~/.stacktracker/config.yaml")
        config_file = default_path if os.path.exists(default_path) else None
    return Config(config_file=config_file, data_dir=data_dir)


def setup_cli_logging(config: Config, verbose: bool) -> None:
    level = "DEBUG" if verbose else config.get("logging.level", "WARNING")
    setup_logging(level=level, log_file=config.log_file())


async def start_session(config: Config, fetch_prices: bool = True) -> TrackerSession:
    try:
        session = TrackerSession.from_config(config)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    await session.start(fetch_prices=fetch_prices)
    if fetch_prices and session.tracker.last_error:
        click.echo(f"Warning: spot prices unavailable ({session.tracker.last_error})", err=True)
    return session


def echo_warnings(warnings: list[PersistenceWarning]) -> None:
    for warning in warnings:
        click.echo(f"Warning: {warning.metal.value} holdings were not saved ({warning.message})", err=True)
