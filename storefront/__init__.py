"""Storefront filter indexing and cart reconciliation package."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from storefront.build import build_category_listings, build_listing, write_build_output
from storefront.cart import CartStore
from storefront.catalog import DuplicateItemError, load_catalog
from storefront.config import ConfigError, SiteConfig, load_site_config
from storefront.filter_ui import build_filter_ui_data
from storefront.models import CartItem, FilterPage, Item
from storefront.pages import generate_filter_pages
from storefront.products_cache import ProductsCache, validate_cart_with_cache
from storefront.reverse_index import IndexCache, ReverseIndex, build_reverse_index
from storefront.slugs import MissingContentError

__all__ = [
    # Version
    "__version__",
    # Config
    "ConfigError",
    "SiteConfig",
    "load_site_config",
    # Models
    "Item",
    "FilterPage",
    "CartItem",
    # Indexing and pages
    "IndexCache",
    "ReverseIndex",
    "build_reverse_index",
    "build_filter_ui_data",
    "generate_filter_pages",
    "build_listing",
    "build_category_listings",
    "write_build_output",
    # Catalog
    "load_catalog",
    "DuplicateItemError",
    "MissingContentError",
    # Cart
    "CartStore",
    "ProductsCache",
    "validate_cart_with_cache",
]
