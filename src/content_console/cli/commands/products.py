"""Product catalog commands."""

import logging
from typing import Any, Dict, List, Optional, Tuple

import click
from rich.console import Console

from ...config import Config
from ...core.sync import SaveResult, WriteCapability
from ...documents.catalog import MAX_PRODUCT_IMAGE_BYTES
from ...models import Product
from ...services import ProductService
from ..display import display_products
from .common import apply_edits, fail, get_config, open_store, report_save, run_async

console = Console()
logger = logging.getLogger(__name__)


def product_options(func: Any) -> Any:
    """Options shared by ``products add`` and ``products update``."""
    options = [
        click.option("--name", help="Product name"),
        click.option("--short-description", help="One-line summary"),
        click.option("--description", help="Full description"),
        click.option("--category", help="Category"),
        click.option("--tags", help="Comma separated tags"),
        click.option(
            "--image",
            type=click.Path(exists=True, dir_okay=False),
            help=f"Main image (max {MAX_PRODUCT_IMAGE_BYTES // (1024 * 1024)}MB)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def product_values(
    name: Optional[str],
    short_description: Optional[str],
    description: Optional[str],
    category: Optional[str],
    tags: Optional[str],
) -> Dict[str, Any]:
    """Map command options to product fields."""
    return {
        "name": name,
        "shortDescription": short_description,
        "description": description,
        "category": category,
        "tags": tags,
    }


async def list_products(config: Config) -> Tuple[List[Product], Dict[str, str]]:
    """Fetch the catalog and the main image URL of each product."""
    capability = WriteCapability.from_environment()
    async with open_store(config, capability) as store:
        products = await ProductService(store, capability).list_products()
        urls = {
            product.id: store.image_url(product.main_image.asset_ref)
            for product in products
            if product.id and product.main_image is not None
        }
        return products, urls


async def save_product(
    config: Config,
    product_id: Optional[str],
    values: Dict[str, Any],
    image: Optional[str],
) -> Optional[SaveResult]:
    """Create a product (no id) or update an existing one."""
    capability = WriteCapability.from_environment()
    async with open_store(config, capability) as store:
        orchestrator = ProductService(store, capability).editor(product_id)
        if not await orchestrator.load():
            raise orchestrator.last_error or RuntimeError("Loading failed")

        images = (f"mainImage={image}",) if image else ()
        changes = apply_edits(orchestrator.form, values=values, images=images)
        if changes == 0 and product_id is not None:
            return None
        return await orchestrator.save()


@click.group("products")
def products() -> None:
    """Manage the product catalog."""
    pass


@products.command("list")
@click.pass_context
def list_command(ctx: click.Context) -> None:
    """List all products, newest first."""
    try:
        with console.status("[bold green]Loading products..."):
            catalog, urls = run_async(list_products(get_config(ctx)))
    except (click.ClickException, click.Abort):
        raise
    except Exception as e:
        fail("Failed to load products", e)
        return
    display_products(catalog, urls)


@products.command("add")
@product_options
@click.pass_context
def add_command(
    ctx: click.Context,
    name: Optional[str],
    short_description: Optional[str],
    description: Optional[str],
    category: Optional[str],
    tags: Optional[str],
    image: Optional[str],
) -> None:
    """Create a new product."""
    if not name or not name.strip():
        raise click.BadParameter("a product needs a name", param_hint="--name")

    values = product_values(name, short_description, description, category, tags)
    try:
        result = run_async(save_product(get_config(ctx), None, values, image))
    except (click.ClickException, click.Abort):
        raise
    except Exception as e:
        fail("Failed to create product", e)
        return
    if result is not None:
        report_save(result)


@products.command("update")
@click.argument("product_id")
@product_options
@click.pass_context
def update_command(
    ctx: click.Context,
    product_id: str,
    name: Optional[str],
    short_description: Optional[str],
    description: Optional[str],
    category: Optional[str],
    tags: Optional[str],
    image: Optional[str],
) -> None:
    """Update PRODUCT_ID; options left out keep their stored value."""
    values = product_values(name, short_description, description, category, tags)
    try:
        result = run_async(save_product(get_config(ctx), product_id, values, image))
    except (click.ClickException, click.Abort):
        raise
    except Exception as e:
        fail(f"Failed to update product {product_id}", e)
        return

    if result is None:
        console.print("[yellow]Nothing to change[/yellow]")
        return
    report_save(result)
