"""Display formatters and UI helpers for CLI."""

import logging
from typing import Any, Dict, List

from rich.console import Console
from rich.table import Table

from ...core.sync import FormStateController, SaveResult, SlotAction, UploadFailed
from ...documents.catalog import BUTTON_PLACEMENTS
from ...documents.schema import SlotRef
from ...models import Product, WhatsappButton

console = Console()
logger = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "[green]yes[/green]" if value else "[red]no[/red]"
    if isinstance(value, list):
        return "\n".join(str(item) for item in value) if value else "[dim]-[/dim]"
    if value in (None, ""):
        return "[dim]-[/dim]"
    return str(value)


def display_document(form: FormStateController, previews: Dict[SlotRef, str]) -> None:
    """Display the fields and image slots of a loaded document.

    Args:
        form: Form holding the current values
        previews: CDN URL per stored image slot
    """
    spec = form.spec
    console.print(f"\n[bold blue]{spec.label}[/bold blue]\n")

    fields_table = Table(show_header=True, header_style="bold magenta")
    fields_table.add_column("Field", style="cyan")
    fields_table.add_column("Value", style="green")
    for scalar_field in spec.fields:
        fields_table.add_row(scalar_field.name, _format_value(form.get(scalar_field.name)))
    console.print(fields_table)

    if not spec.images:
        return

    images_table = Table(show_header=True, header_style="bold magenta")
    images_table.add_column("Slot", style="cyan")
    images_table.add_column("Image", style="green")
    for slot in spec.slot_refs():
        images_table.add_row(str(slot), previews.get(slot, "[dim]empty[/dim]"))
    # Stored entries beyond the slot capacity are still carried on save
    for slot in sorted(set(previews) - set(spec.slot_refs())):
        images_table.add_row(f"{slot} [yellow](extra)[/yellow]", previews[slot])
    console.print(images_table)
    console.print()


def display_save_result(result: SaveResult) -> None:
    """Display the outcome of a save.

    Args:
        result: Result returned by the orchestrator
    """
    if result.skipped:
        console.print(f"[yellow]⚠️  {result.message}[/yellow]")
        return

    if not result.success:
        console.print(f"[red]❌ {result.message}[/red]")
        if isinstance(result.error, UploadFailed):
            for slot, error in sorted(result.error.failures.items()):
                console.print(f"  • {slot}: {error}")
        return

    console.print(f"\n[bold green]✓ {result.message}[/bold green] ({result.document_id})\n")

    if result.patch is not None and result.patch.decisions:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Slot", style="cyan")
        table.add_column("Action")
        table.add_column("Asset", style="green")
        for decision in result.patch.decisions:
            action = decision.action
            if action == SlotAction.USE_UPLOAD:
                label = "[green]uploaded[/green]"
            elif action == SlotAction.CARRY_FORWARD:
                label = "kept"
            else:
                label = "[dim]empty[/dim]"
            table.add_row(str(decision.slot), label, decision.asset_ref or "")
        console.print(table)

    for warning in result.warnings:
        console.print(f"[yellow]⚠️  {warning}[/yellow]")


def display_buttons(buttons: List[WhatsappButton]) -> None:
    """Display the WhatsApp buttons with their placement and preview link."""
    labels = {p.button_id: p.label for p in BUTTON_PLACEMENTS}

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Button", style="cyan")
    table.add_column("Placement")
    table.add_column("Text", style="green")
    table.add_column("Active", justify="center")
    table.add_column("Preview link", style="blue")

    for button in buttons:
        table.add_row(
            button.id,
            labels.get(button.id, ""),
            button.text or "[dim]-[/dim]",
            _format_value(button.is_active),
            button.preview_link,
        )

    console.print(table)


def display_products(products: List[Product], image_urls: Dict[str, str]) -> None:
    """Display the product catalog.

    Args:
        products: Products to list
        image_urls: Main image URL per product id
    """
    if not products:
        console.print("[yellow]No products yet[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Tags")
    table.add_column("Image", style="blue")

    for product in products:
        table.add_row(
            product.id or "",
            product.name,
            product.category,
            ", ".join(product.tags),
            image_urls.get(product.id or "", ""),
        )

    console.print(table)
    console.print(f"\n[bold]Total:[/bold] {len(products)} product(s)")
