"""Settings commands for the home and about page singletons."""

import logging
from typing import Optional, Tuple

import click
from rich.console import Console

from ...config import Config
from ...core.sync import SaveResult, SyncOrchestrator, WriteCapability
from ...documents.catalog import SETTINGS
from ...documents.schema import DocumentSpec
from ..display import display_document
from .common import apply_edits, fail, get_config, open_store, report_save, run_async

console = Console()
logger = logging.getLogger(__name__)

PAGE_CHOICE = click.Choice(sorted(SETTINGS))


async def load_settings(orchestrator: SyncOrchestrator) -> None:
    """Load a settings document, raising the load error if it fails."""
    if not await orchestrator.load():
        raise orchestrator.last_error or RuntimeError("Loading failed")


async def show_settings(config: Config, spec: DocumentSpec) -> None:
    """Fetch and display one settings document."""
    capability = WriteCapability.from_environment()
    async with open_store(config, capability) as store:
        orchestrator = SyncOrchestrator(spec, store, capability)
        with console.status(f"[bold green]Loading {spec.label}..."):
            await load_settings(orchestrator)
        display_document(orchestrator.form, orchestrator.preview_urls())


async def edit_settings(
    config: Config,
    spec: DocumentSpec,
    sets: Tuple[str, ...],
    paragraphs: Tuple[str, ...],
    images: Tuple[str, ...],
    clears: Tuple[str, ...],
) -> Optional[SaveResult]:
    """Load a settings document, apply edits and save it.

    Returns:
        The save result, or None when there was nothing to change
    """
    capability = WriteCapability.from_environment()
    async with open_store(config, capability) as store:
        orchestrator = SyncOrchestrator(spec, store, capability)
        with console.status(f"[bold green]Loading {spec.label}..."):
            await load_settings(orchestrator)

        changes = apply_edits(
            orchestrator.form,
            sets=sets,
            paragraphs=paragraphs,
            images=images,
            clears=clears,
        )
        if changes == 0:
            return None

        with console.status(f"[bold green]Saving {spec.label}..."):
            result = await orchestrator.save()
        logger.debug("Save summary: %s", result.get_summary())
        return result


@click.group("settings")
def settings() -> None:
    """View and edit the home and about page settings."""
    pass


@settings.command("show")
@click.argument("page", type=PAGE_CHOICE)
@click.pass_context
def show_command(ctx: click.Context, page: str) -> None:
    """Show the current settings of PAGE."""
    try:
        run_async(show_settings(get_config(ctx), SETTINGS[page]))
    except (click.ClickException, click.Abort):
        raise
    except Exception as e:
        fail(f"Failed to load {page} settings", e)


@settings.command("edit")
@click.argument("page", type=PAGE_CHOICE)
@click.option(
    "--set",
    "sets",
    multiple=True,
    metavar="FIELD=VALUE",
    help="Set a text field (repeatable)",
)
@click.option(
    "--paragraph",
    "paragraphs",
    multiple=True,
    metavar="N=TEXT",
    help="Replace paragraph N of the intro text (about page)",
)
@click.option(
    "--image",
    "images",
    multiple=True,
    metavar="SLOT=PATH",
    help="Upload an image into a slot, e.g. instagramImages[2]=photo.jpg",
)
@click.option(
    "--clear",
    "clears",
    multiple=True,
    metavar="SLOT",
    help="Remove the image from a slot",
)
@click.pass_context
def edit_command(
    ctx: click.Context,
    page: str,
    sets: Tuple[str, ...],
    paragraphs: Tuple[str, ...],
    images: Tuple[str, ...],
    clears: Tuple[str, ...],
) -> None:
    """Edit the settings of PAGE and save them.

    Images that are not touched are kept exactly as stored.
    """
    spec = SETTINGS[page]
    try:
        result = run_async(
            edit_settings(get_config(ctx), spec, sets, paragraphs, images, clears)
        )
    except (click.ClickException, click.Abort):
        raise
    except Exception as e:
        fail(f"Failed to save {page} settings", e)
        return

    if result is None:
        console.print("[yellow]Nothing to change[/yellow]")
        return
    report_save(result)
