"""Shared helpers for CLI commands.

Commands are synchronous click callbacks; the store is async, so every
command body is an ``async`` function run through ``run_async``.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Dict, Iterable, Optional, Tuple, TypeVar

import click
from rich.console import Console

from ...config import Config
from ...core.sync import (
    ContentSyncError,
    FormStateController,
    FormValidationError,
    PendingUpload,
    SaveResult,
    WriteCapability,
)
from ...documents.schema import SlotRef
from ...store import SanityClient
from ..display import display_save_result

console = Console()
logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_async(coro: Awaitable[T]) -> T:
    """Run a coroutine to completion from a click command."""
    return asyncio.run(coro)  # type: ignore[arg-type]


def get_config(ctx: click.Context) -> Config:
    """Configuration stored on the click context by the root group."""
    config = ctx.find_object(Config)
    return config if config is not None else Config()


def open_store(config: Config, capability: WriteCapability) -> SanityClient:
    """Sanity client authenticating with the capability's current token."""
    return SanityClient(config, token_provider=capability.current_token)


def split_assignment(text: str, option: str) -> Tuple[str, str]:
    """Split ``NAME=VALUE`` as given to a repeatable option.

    Raises:
        click.BadParameter: If there is no ``=``
    """
    name, sep, value = text.partition("=")
    if not sep or not name.strip():
        raise click.BadParameter(f"expected NAME=VALUE, got {text!r}", param_hint=option)
    return name.strip(), value


def apply_edits(
    form: FormStateController,
    sets: Iterable[str] = (),
    paragraphs: Iterable[str] = (),
    images: Iterable[str] = (),
    clears: Iterable[str] = (),
    values: Optional[Dict[str, Any]] = None,
) -> int:
    """Apply command-line edits to a form.

    Args:
        form: Form to edit
        sets: ``FIELD=VALUE`` assignments
        paragraphs: ``N=TEXT`` assignments, 1-based, for the first paragraphs field
        images: ``SLOT=PATH`` image selections
        clears: Slots to empty
        values: Field values set directly (``None`` entries are skipped)

    Returns:
        Number of edits applied

    Raises:
        click.BadParameter: If an edit is rejected
    """
    count = 0
    try:
        for name, value in (values or {}).items():
            if value is not None:
                form.set_field(name, value)
                count += 1

        for text in sets:
            name, value = split_assignment(text, "--set")
            form.set_field(name, value)
            count += 1

        for text in paragraphs:
            number, value = split_assignment(text, "--paragraph")
            if not number.isdigit() or int(number) < 1:
                raise click.BadParameter(
                    f"paragraph number must be 1 or more, got {number!r}",
                    param_hint="--paragraph",
                )
            form.set_paragraph(_paragraphs_field(form), int(number) - 1, value)
            count += 1

        for text in images:
            slot_text, path = split_assignment(text, "--image")
            image_path = Path(path).expanduser()
            if not image_path.is_file():
                raise click.BadParameter(f"no such file: {path}", param_hint="--image")
            form.attach_image(_parse_slot(slot_text), PendingUpload.from_path(image_path))
            count += 1

        for slot_text in clears:
            form.clear_image(_parse_slot(slot_text))
            count += 1
    except FormValidationError as e:
        raise click.BadParameter(e.user_message) from e

    return count


def report_save(result: SaveResult) -> None:
    """Display a save result and abort the command if it failed."""
    display_save_result(result)
    if not result.success and not result.skipped:
        raise click.Abort()


def fail(message: str, error: Exception) -> None:
    """Log an unexpected failure, tell the operator, and abort."""
    if isinstance(error, ContentSyncError):
        logger.error("%s: %s", message, error)
        console.print(f"[red]❌ {error.user_message}[/red]")
    else:
        logger.exception(message)
        console.print(f"[red]❌ {message}: {error}[/red]")
    raise click.Abort()


def _paragraphs_field(form: FormStateController) -> str:
    for scalar_field in form.spec.fields:
        if hasattr(scalar_field, "max_blocks"):
            return scalar_field.name
    raise FormValidationError(f"{form.spec.label} has no paragraphs")


def _parse_slot(text: str) -> SlotRef:
    try:
        return SlotRef.parse(text)
    except ValueError as e:
        raise FormValidationError(str(e)) from e
