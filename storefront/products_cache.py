"""Product availability checks for buy-mode cart items.

The product list comes from the ecommerce API and is cached in browser
storage for an hour. Each validation pass removes cart lines whose SKU is
gone or out of stock and refreshes prices from the API, which reports
prices in pence.
"""

import json
import time
from typing import Any, Callable, Dict, List, Optional

import requests  # type: ignore[import-untyped]

from storefront.cart import CartStore
from storefront.config import (
    CACHE_TTL_MS,
    HEADERS,
    PRODUCTS_API_PATH,
    PRODUCTS_CACHE_KEY,
    REQUEST_TIMEOUT,
    SiteConfig,
)
from storefront.logging_config import get_logger, log_build_event
from storefront.notify import send_ntfy_notification

__all__ = [
    "ProductsCache",
    "fetch_products",
    "validate_buy_items",
    "validate_cart_with_cache",
    "refresh_cache_if_needed",
    "now_ms",
]

logger = get_logger("products_cache")

Product = Dict[str, Any]

UNREACHABLE_MESSAGE = (
    "Unable to reach the store to verify product availability. "
    "Please check your connection and try again."
)


def now_ms() -> int:
    return int(time.time() * 1000)


class ProductsCache:
    """TTL cache of the product list, stored as ``{data, cached_at}``."""

    def __init__(
        self,
        storage,
        ttl_ms: int = CACHE_TTL_MS,
        clock: Callable[[], int] = now_ms,
        key: str = PRODUCTS_CACHE_KEY,
    ):
        self.storage = storage
        self.ttl_ms = ttl_ms
        self.clock = clock
        self.key = key

    def get(self) -> Optional[List[Product]]:
        """Cached products if younger than the TTL, else None."""
        raw = self.storage.get_item(self.key)
        if not raw:
            return None
        try:
            cache = json.loads(raw)
            cached_at = int(cache["cached_at"])
            data = cache["data"]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring corrupt products cache: {e}")
            return None
        if not isinstance(data, list):
            logger.warning(f"Ignoring corrupt products cache: data is {type(data).__name__}, expected a list")
            return None
        if self.clock() - cached_at < self.ttl_ms:
            return data
        return None

    def put(self, products: List[Product]) -> None:
        self.storage.set_item(
            self.key, json.dumps({"data": products, "cached_at": self.clock()})
        )


def fetch_products(host: str, session: Optional[requests.Session] = None) -> Optional[List[Product]]:
    """GET ``https://{host}/api/products``.

    One attempt, no retry. Any non-200 status, network error or malformed
    body counts as unreachable and returns None.
    """
    url = f"https://{host}{PRODUCTS_API_PATH}"
    sess = session or requests.Session()
    try:
        resp = sess.get(url, headers=HEADERS, timeout=REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.warning(f"Product API request failed for {url}: {e}")
        return None

    if resp.status_code != 200:
        logger.warning(f"Product API returned {resp.status_code} for {url}")
        return None

    try:
        products = resp.json()
    except ValueError as e:
        logger.warning(f"Product API returned invalid JSON for {url}: {e}")
        return None

    if not isinstance(products, list):
        logger.warning(f"Product API returned {type(products).__name__}, expected a list")
        return None
    return products


def validate_buy_items(cart_store: CartStore, cart: List[Dict[str, Any]], products: List[Product]) -> bool:
    """Reconcile buy-mode cart lines against the product list.

    Lines whose SKU is missing or out of stock are removed and the user is
    told about each one. Remaining buy lines take the API price (pence to
    pounds). Other product modes are left alone, as are lines whose product
    reports no usable price.

    Returns:
        True if the cart was rewritten (removals or price changes)
    """
    product_by_sku = {
        p["sku"]: p
        for p in products
        if isinstance(p, dict) and isinstance(p.get("sku"), (str, int)) and p["sku"] != ""
    }

    valid: List[Dict[str, Any]] = []
    removed: List[str] = []
    prices_changed = False

    for line in cart:
        if line.get("product_mode") != "buy":
            valid.append(line)
            continue

        product = product_by_sku.get(line.get("sku"))
        if not product or not product.get("in_stock"):
            removed.append(line.get("item_name", line.get("sku", "An item")))
            continue

        pence = product.get("unit_price")
        if isinstance(pence, bool) or not isinstance(pence, (int, float)):
            # Keep the line as it is rather than guess a price
            logger.warning(f"Product {product['sku']} has invalid unit_price {pence!r}, skipping")
            valid.append(line)
            continue

        unit_price = pence / 100
        if unit_price != line.get("unit_price"):
            prices_changed = True
        valid.append({**line, "unit_price": unit_price})

    if removed:
        cart_store.save_cart(valid)
        for name in removed:
            cart_store.notifier.show(
                f"{name} was removed from your cart because it is no longer available"
            )
        return True

    if prices_changed:
        cart_store.save_cart(valid)
        return True

    return False


def validate_cart_with_cache(
    cart_store: CartStore,
    cache: ProductsCache,
    config: SiteConfig,
    session: Optional[requests.Session] = None,
    fetch: Callable[..., Optional[List[Product]]] = fetch_products,
    wait_for_diagnostics: bool = False,
) -> bool:
    """Run one validation pass over the cart.

    Does nothing without buy-mode lines or without an API host. Uses the
    cached product list when fresh, otherwise fetches and caches it. If the
    API cannot be reached the cart is left as it is, a diagnostic is sent and
    the user is told.

    Pass ``wait_for_diagnostics=True`` from short-lived processes so the
    diagnostic POST finishes before exit.

    Returns:
        True if the cart was modified
    """
    cart = cart_store.get_cart()
    if not any(line.get("product_mode") == "buy" for line in cart):
        return False
    if not config.ecommerce_api_host:
        return False

    products = cache.get()
    fetched = products is None
    if fetched:
        products = fetch(config.ecommerce_api_host, session=session)

    if products is None:
        send_ntfy_notification(
            config.ntfy_url,
            f"Ecommerce API unreachable: {config.ecommerce_api_host}",
            session=session,
            wait=wait_for_diagnostics,
        )
        cart_store.notifier.show(UNREACHABLE_MESSAGE)
        log_build_event(
            "cart_validation_failed",
            {"message": "Product API unreachable", "host": config.ecommerce_api_host},
            level=30,
            logger_name="products_cache",
        )
        return False

    if fetched:
        cache.put(products)

    modified = validate_buy_items(cart_store, cart, products)
    log_build_event(
        "cart_validated",
        {
            "message": f"Cart validated ({'modified' if modified else 'unchanged'})",
            "from_cache": not fetched,
            "modified": modified,
            "lines": len(cart),
        },
        logger_name="products_cache",
    )
    return modified


def refresh_cache_if_needed(
    cart_store: CartStore,
    cache: ProductsCache,
    config: SiteConfig,
    session: Optional[requests.Session] = None,
) -> bool:
    """Validate only when a pass could do anything; used after adding to cart."""
    if not config.ecommerce_api_host or not cart_store.has_buy_items():
        return False
    return validate_cart_with_cache(cart_store, cache, config, session=session)
