"""Command-line interface for the content console.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any, Optional

import click

from ..config import Config
from ..utils.logging_config import configure_third_party_loggers, setup_logging
from .commands import buttons, products, settings


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level (defaults to CONTENT_CONSOLE_LOG_LEVEL or INFO)",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.pass_context
def cli(ctx: Any, log_level: Optional[str], log_file: Optional[str]) -> None:
    """Content Console.

    Edit the marketing content of the public site stored in Sanity.
    """
    config = Config()

    # Set up logging
    setup_logging(
        log_level=log_level or config.log_level,
        log_file=Path(log_file) if log_file else None,
    )
    configure_third_party_loggers()

    ctx.obj = config


# Register command groups
cli.add_command(settings)
cli.add_command(buttons)
cli.add_command(products)


if __name__ == "__main__":
    cli()
