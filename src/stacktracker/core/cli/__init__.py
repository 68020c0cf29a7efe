"""Stack Tracker CLI: entry point for the dashboard, holdings list, and holding form."""

import click

from stacktracker import __version__
from stacktracker.core.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, package_name="stacktracker")
@click.option("--config", "config_file", default=None, help="Path to a YAML or JSON config file.")
@click.option("--data-dir", default=None, help="Directory for stored holdings (default ~/.stacktracker-data).")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, config_file: str | None, data_dir: str | None, verbose: bool) -> None:
    """Stack Tracker: private precious metals portfolio tracker."""
    from .common import load_config, setup_cli_logging

    try:
        config = load_config(config_file, data_dir)
        setup_cli_logging(config, verbose)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    ctx.obj = config


from .holding_cmd import add, delete, edit
from .view_cmd import holdings, prices, summary

main.add_command(summary)
main.add_command(holdings)
main.add_command(prices)
main.add_command(add)
main.add_command(edit)
main.add_command(delete)
