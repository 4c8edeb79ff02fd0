"""Configuration and constants for the storefront build and cart."""

import json
import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from storefront.url_validation import (
    URLValidationError,
    validate_api_host,
    validate_endpoint_url,
    validate_site_url,
)

__all__ = [
    "CART_STORAGE_KEY",
    "PRODUCTS_CACHE_KEY",
    "CACHE_TTL_MS",
    "REQUEST_TIMEOUT",
    "HEADERS",
    "PRODUCTS_API_PATH",
    "VALID_CART_MODES",
    "VALID_PRODUCT_MODES",
    "SORT_OPTIONS",
    "SORT_KEYS",
    "DEFAULT_SORT_KEY",
    "DEFAULT_BASE_URL",
    "CATALOG_PATH",
    "SITE_CONFIG_PATH",
    "OUTPUT_DIR",
    "ConfigError",
    "SiteConfig",
    "load_site_config",
    "validate_site_config",
]

# Browser storage keys
CART_STORAGE_KEY = "shopping_cart"
PRODUCTS_CACHE_KEY = "products_cache"

# Product list cache lifetime (1 hour)
CACHE_TTL_MS = 60 * 60 * 1000

# HTTP settings for the product API and diagnostics
REQUEST_TIMEOUT = 15
HEADERS = {
    "Accept": "application/json",
    "User-Agent": "storefront-build",
}
PRODUCTS_API_PATH = "/api/products"

VALID_CART_MODES = ("paypal", "stripe", "quote")
VALID_PRODUCT_MODES = ("buy", "hire")

# Listing sort options, in display order. "default" keeps collection order.
SORT_OPTIONS: List[Dict[str, str]] = [
    {"key": "default", "label": "Default"},
    {"key": "price-asc", "label": "Price: Low to High"},
    {"key": "price-desc", "label": "Price: High to Low"},
    {"key": "name-asc", "label": "Name: A-Z"},
    {"key": "name-desc", "label": "Name: Z-A"},
]
SORT_KEYS = frozenset(option["key"] for option in SORT_OPTIONS)
DEFAULT_SORT_KEY = "default"

# Paths
DEFAULT_BASE_URL = "/products"
CATALOG_PATH = "data/catalog.json"
SITE_CONFIG_PATH = "data/site.json"
OUTPUT_DIR = "dist"

CURRENCY_CODE_RE = re.compile(r"^[A-Z]{3}$")

# Environment variables that override values from the config file
ENV_OVERRIDES = {
    "ecommerce_api_host": "ECOMMERCE_API_HOST",
    "checkout_api_url": "CHECKOUT_API_URL",
    "ntfy_url": "NTFY_URL",
}


class ConfigError(Exception):
    """Raised when the site configuration is invalid.

    Always fatal: a misconfigured deployment must not build.
    """
    pass


@dataclass
class SiteConfig:
    """Site-wide settings consumed by the build and the cart."""

    url: Optional[str] = None
    currency: str = "GBP"
    currency_symbol: str = "£"
    cart_mode: Optional[str] = None
    product_mode: Optional[str] = None
    checkout_api_url: Optional[str] = None
    ecommerce_api_host: Optional[str] = None
    ntfy_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SiteConfig":
        """Build a config from a parsed JSON object, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def load_site_config(
    path: Optional[str] = SITE_CONFIG_PATH,
    env: Optional[Dict[str, str]] = None,
    validate: bool = True,
) -> SiteConfig:
    """Load site configuration from JSON with environment overrides.

    Args:
        path: JSON config file; a missing file yields defaults
        env: Environment mapping (default: os.environ after loading .env)
        validate: Whether to run validate_site_config

    Raises:
        ConfigError: If the file is not valid JSON or the config is invalid
    """
    data: Dict[str, Any] = {}
    if path and Path(path).exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"{path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a JSON object")

    if env is None:
        load_dotenv()
        env = dict(os.environ)

    for field_name, env_name in ENV_OVERRIDES.items():
        if env.get(env_name):
            data[field_name] = env[env_name]

    config = SiteConfig.from_dict(data)
    if validate:
        validate_site_config(config)
    return config


def validate_site_config(config: SiteConfig, require_url: bool = True) -> SiteConfig:
    """Check a SiteConfig, raising ConfigError with a descriptive message."""
    if require_url or config.url:
        try:
            validate_site_url(config.url)
        except URLValidationError as e:
            raise ConfigError(str(e)) from e

    if config.currency and not CURRENCY_CODE_RE.match(config.currency):
        raise ConfigError(
            f'Invalid currency: "{config.currency}". Must be a valid ISO 4217 '
            f'currency code (e.g. "GBP", "USD", "EUR").'
        )

    if config.product_mode and config.product_mode not in VALID_PRODUCT_MODES:
        raise ConfigError(
            f'Invalid product_mode: "{config.product_mode}". Must be one of: '
            f"{', '.join(VALID_PRODUCT_MODES)}, or null/omitted for default (buy)."
        )

    if config.cart_mode and config.cart_mode not in VALID_CART_MODES:
        raise ConfigError(
            f'Invalid cart_mode: "{config.cart_mode}". Must be one of: '
            f"{', '.join(VALID_CART_MODES)}, or null/omitted for no cart."
        )

    if config.cart_mode in ("stripe", "paypal") and not config.checkout_api_url:
        raise ConfigError(
            f'cart_mode is "{config.cart_mode}" but checkout_api_url is not set'
        )

    if config.ecommerce_api_host:
        try:
            config.ecommerce_api_host = validate_api_host(config.ecommerce_api_host)
        except URLValidationError as e:
            raise ConfigError(str(e)) from e

    if config.ntfy_url:
        try:
            validate_endpoint_url(config.ntfy_url)
        except URLValidationError as e:
            raise ConfigError(f"ntfy_url: {e}") from e

    return config
