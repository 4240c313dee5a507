"""WhatsApp button commands."""

import logging
from typing import Any, Dict, List, Optional

import click
from rich.console import Console

from ...config import Config
from ...core.sync import SaveResult, WriteCapability
from ...documents.catalog import BUTTON_IDS
from ...models import WhatsappButton
from ...services import ButtonsService
from ..display import display_buttons
from .common import apply_edits, fail, get_config, open_store, report_save, run_async

console = Console()
logger = logging.getLogger(__name__)


async def list_buttons(config: Config) -> List[WhatsappButton]:
    """Fetch all buttons in placement order."""
    capability = WriteCapability.from_environment()
    async with open_store(config, capability) as store:
        return await ButtonsService(store, capability).list_buttons()


async def edit_button(
    config: Config, button_id: str, values: Dict[str, Any]
) -> Optional[SaveResult]:
    """Load one button, apply ``values`` and save it."""
    capability = WriteCapability.from_environment()
    async with open_store(config, capability) as store:
        orchestrator = ButtonsService(store, capability).editor(button_id)
        if not await orchestrator.load():
            raise orchestrator.last_error or RuntimeError("Loading failed")

        if apply_edits(orchestrator.form, values=values) == 0:
            return None
        return await orchestrator.save()


@click.group("buttons")
def buttons() -> None:
    """Manage the WhatsApp call-to-action buttons."""
    pass


@buttons.command("list")
@click.pass_context
def list_command(ctx: click.Context) -> None:
    """List every button with its placement and preview link."""
    try:
        with console.status("[bold green]Loading buttons..."):
            result = run_async(list_buttons(get_config(ctx)))
    except (click.ClickException, click.Abort):
        raise
    except Exception as e:
        fail("Failed to load buttons", e)
        return
    display_buttons(result)


@buttons.command("edit")
@click.argument("button_id", type=click.Choice(BUTTON_IDS))
@click.option("--text", help="Button label")
@click.option("--phone", help="WhatsApp phone number, e.g. +2348012345678")
@click.option("--message", help="Message prefilled in the chat")
@click.option("--active/--inactive", default=None, help="Show or hide the button")
@click.pass_context
def edit_command(
    ctx: click.Context,
    button_id: str,
    text: Optional[str],
    phone: Optional[str],
    message: Optional[str],
    active: Optional[bool],
) -> None:
    """Edit one button and save it."""
    values = {
        "text": text,
        "phoneNumber": phone,
        "preMessage": message,
        "isActive": active,
    }
    try:
        result = run_async(edit_button(get_config(ctx), button_id, values))
    except (click.ClickException, click.Abort):
        raise
    except Exception as e:
        fail(f"Failed to save button {button_id}", e)
        return

    if result is None:
        console.print("[yellow]Nothing to change[/yellow]")
        return
    report_save(result)
