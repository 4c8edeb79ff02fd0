"""Command-line interface for the storefront build and cart tools."""

import argparse
import logging
import sys
from typing import Dict, List, Optional

__all__ = ["main", "parse_args", "run_build", "show_stats", "list_attributes", "validate_cart"]

from storefront.build import (
    ALL_ITEMS_SCOPE,
    ListingBuild,
    build_category_listings,
    build_listing,
    write_build_output,
)
from storefront.cart import CartStore
from storefront.catalog import load_catalog, sort_by_order_then_title
from storefront.config import (
    CATALOG_PATH,
    DEFAULT_BASE_URL,
    OUTPUT_DIR,
    SITE_CONFIG_PATH,
    ConfigError,
    load_site_config,
)
from storefront.logging_config import get_logger, setup_logging
from storefront.models import Item
from storefront.notify import Notifier
from storefront.products_cache import ProductsCache, validate_cart_with_cache
from storefront.reverse_index import IndexCache, build_reverse_index
from storefront.slugs import MissingContentError
from storefront.storage import JSONFileStorage

logger = get_logger("cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Static filter pages, redirects and cart checks for the storefront",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Build filter pages and redirects for the whole catalog
  python -m storefront.cli --catalog data/catalog.json --output dist

  # Also build per-category listings and every sort order
  python -m storefront.cli --by-category --sort-variants

  # Show catalog and index statistics
  python -m storefront.cli --stats

  # List filter attribute keys and values
  python -m storefront.cli --list-attributes

  # Reconcile a saved cart against the product API
  python -m storefront.cli --validate-cart storage.json --config data/site.json
        """,
    )

    parser.add_argument(
        "--catalog",
        default=CATALOG_PATH,
        help=f"Catalog JSON path (default: {CATALOG_PATH})",
    )
    parser.add_argument(
        "--output",
        default=OUTPUT_DIR,
        help=f"Output directory for build files (default: {OUTPUT_DIR})",
    )
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Listing URL of the full catalog (default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument(
        "--by-category",
        action="store_true",
        help="Also build a filtered listing for each category",
    )
    parser.add_argument(
        "--sort-variants",
        action="store_true",
        help="Emit a page per sort order as well as per filter combination",
    )
    parser.add_argument(
        "--config",
        default=SITE_CONFIG_PATH,
        help=f"Site config JSON path (default: {SITE_CONFIG_PATH})",
    )

    # Cart
    parser.add_argument(
        "--validate-cart",
        metavar="STORAGE_JSON",
        help="Run one cart reconciliation pass against a JSON storage file",
    )

    # Info commands
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Show catalog and index statistics and exit",
    )
    parser.add_argument(
        "--list-attributes",
        action="store_true",
        help="List filter attribute keys and values and exit",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Console log level (default: INFO)",
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Don't write the JSONL build log",
    )

    return parser.parse_args(argv)


def show_stats(items: List[Item]) -> None:
    """Print catalog and index statistics."""
    index = build_reverse_index(items)
    categories: Dict[str, int] = {}
    for item in items:
        for category in item.categories:
            categories[category] = categories.get(category, 0) + 1

    print(f"\n{'='*50}")
    print(f"Items: {len(items)}")
    print(f"{'='*50}")
    print(f"\nAttribute keys: {len(index.attributes)}")
    print(f"Filter paths: {len(index.by_filter_path)}")

    print("\nItems by category:")
    if categories:
        for category, count in categories.items():
            print(f"  {category}: {count}")
    else:
        print("  No categories")
    print()


def list_attributes(items: List[Item]) -> None:
    index = build_reverse_index(items)
    if not index.has_filters:
        print("No filter attributes")
        return
    print("Filter attributes:")
    for key, values in index.attributes.items():
        label = index.display_lookup.get(key, key)
        print(f"  {key} ({label}): {', '.join(values)}")


def run_build(
    items: List[Item],
    output_dir: str,
    base_url: str = DEFAULT_BASE_URL,
    by_category: bool = False,
    sort_variants: bool = False,
) -> Dict[str, ListingBuild]:
    """Build all listings and write them to ``output_dir``."""
    cache = IndexCache()
    ordered = sort_by_order_then_title(items)

    builds: Dict[str, ListingBuild] = {
        ALL_ITEMS_SCOPE: build_listing(ordered, base_url, cache=cache, sort_variants=sort_variants)
    }
    if by_category:
        builds.update(build_category_listings(items, cache=cache, sort_variants=sort_variants))

    written = write_build_output(builds, output_dir)
    for name, path in written.items():
        print(f"  {name}: {path}")
    return builds


def validate_cart(storage_path: str, config_path: str) -> bool:
    """One reconciliation pass over the cart saved in ``storage_path``."""
    config = load_site_config(config_path)
    storage = JSONFileStorage(storage_path)
    notifier = Notifier()
    cart_store = CartStore(storage, notifier)

    modified = validate_cart_with_cache(
        cart_store, ProductsCache(storage), config, wait_for_diagnostics=True
    )
    for message in notifier.messages:
        print(message)
    print(f"Cart {'updated' if modified else 'unchanged'}: {cart_store.item_count()} items")
    return modified


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    args = parse_args(argv)
    setup_logging(
        level=getattr(logging, args.log_level),
        log_to_file=not args.no_log_file,
    )

    try:
        if args.validate_cart:
            validate_cart(args.validate_cart, args.config)
            return 0

        items = load_catalog(args.catalog)

        if args.stats:
            show_stats(items)
            return 0

        if args.list_attributes:
            list_attributes(items)
            return 0

        # Fail before writing anything if the deployment is misconfigured
        load_site_config(args.config)
        run_build(
            items,
            args.output,
            base_url=args.base_url.rstrip("/"),
            by_category=args.by_category,
            sort_variants=args.sort_variants,
        )
    except (ConfigError, MissingContentError, FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
