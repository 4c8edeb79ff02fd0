"""Tests for product availability checks against the ecommerce API."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from storefront.cart import CartStore
from storefront.config import CACHE_TTL_MS, SiteConfig
from storefront.products_cache import (
    UNREACHABLE_MESSAGE,
    ProductsCache,
    fetch_products,
    refresh_cache_if_needed,
    validate_buy_items,
    validate_cart_with_cache,
)

PRODUCTS = [
    {"sku": "W1", "unit_price": 1000, "in_stock": True},
    {"sku": "G1", "unit_price": 550, "in_stock": False},
]


class FakeClock:
    def __init__(self, now=1_000_000):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def cart_store(storage, notifier):
    return CartStore(storage, notifier)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(storage, clock):
    return ProductsCache(storage, clock=clock)


def buy_line(name, sku, price, quantity=1):
    return {"item_name": name, "sku": sku, "unit_price": price, "quantity": quantity, "product_mode": "buy"}


def mock_response(status_code=200, payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


class TestProductsCache:
    """Tests for ProductsCache TTL handling."""

    def test_empty(self, cache):
        assert cache.get() is None

    def test_fresh_entry(self, cache, clock):
        cache.put(PRODUCTS)
        clock.now += CACHE_TTL_MS - 1
        assert cache.get() == PRODUCTS

    def test_stale_entry(self, cache, clock):
        cache.put(PRODUCTS)
        clock.now += CACHE_TTL_MS
        assert cache.get() is None

    def test_stored_shape(self, cache, storage, clock):
        cache.put(PRODUCTS)
        assert json.loads(storage.get_item("products_cache")) == {
            "data": PRODUCTS,
            "cached_at": clock.now,
        }

    def test_corrupt_entry(self, cache, storage):
        storage.set_item("products_cache", "{nope")
        assert cache.get() is None
        storage.set_item("products_cache", json.dumps({"data": []}))
        assert cache.get() is None

    def test_non_list_data_is_a_miss(self, cache, storage, clock):
        storage.set_item(
            "products_cache",
            json.dumps({"data": {"W1": {"in_stock": True}}, "cached_at": clock.now}),
        )
        assert cache.get() is None


class TestFetchProducts:
    """Tests for fetch_products."""

    def test_success(self):
        session = MagicMock()
        session.get.return_value = mock_response(payload=PRODUCTS)
        assert fetch_products("api.example.com", session=session) == PRODUCTS
        assert session.get.call_args[0][0] == "https://api.example.com/api/products"

    def test_non_200(self):
        session = MagicMock()
        session.get.return_value = mock_response(status_code=503)
        assert fetch_products("api.example.com", session=session) is None

    def test_network_error(self):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.ConnectionError("down")
        assert fetch_products("api.example.com", session=session) is None
        assert session.get.call_count == 1

    def test_invalid_json(self):
        session = MagicMock()
        resp = mock_response()
        resp.json.side_effect = ValueError("no json")
        session.get.return_value = resp
        assert fetch_products("api.example.com", session=session) is None

    def test_non_list_body(self):
        session = MagicMock()
        session.get.return_value = mock_response(payload={"error": "x"})
        assert fetch_products("api.example.com", session=session) is None


class TestValidateBuyItems:
    """Tests for validate_buy_items."""

    def test_removes_unavailable_and_updates_prices(self, cart_store, storage, notifier):
        cart = [
            buy_line("Widget", "W1", 9.0),
            buy_line("Gadget", "G1", 5.5),
            buy_line("Gizmo", "X9", 3.0),
            {"item_name": "Van", "unit_price": 50, "quantity": 1, "product_mode": "hire"},
        ]
        storage.set_item("shopping_cart", json.dumps(cart))

        assert validate_buy_items(cart_store, cart, PRODUCTS)

        saved = cart_store.get_cart()
        assert [line["item_name"] for line in saved] == ["Widget", "Van"]
        assert saved[0]["unit_price"] == 10.0
        assert notifier.messages == [
            "Gadget was removed from your cart because it is no longer available",
            "Gizmo was removed from your cart because it is no longer available",
        ]

    def test_price_change_only_is_silent(self, cart_store, notifier):
        cart = [buy_line("Widget", "W1", 9.0)]
        assert validate_buy_items(cart_store, cart, PRODUCTS)
        assert cart_store.get_cart()[0]["unit_price"] == 10.0
        assert notifier.messages == []

    def test_unchanged_cart_not_written(self, notifier):
        storage = MagicMock()
        store = CartStore(storage, notifier)
        assert not validate_buy_items(store, [buy_line("Widget", "W1", 10.0)], PRODUCTS)
        storage.set_item.assert_not_called()

    @pytest.mark.parametrize("product", [
        {"sku": "W1", "in_stock": True},
        {"sku": "W1", "in_stock": True, "unit_price": None},
        {"sku": "W1", "in_stock": True, "unit_price": "10.00"},
    ])
    def test_product_without_usable_price_keeps_line(self, cart_store, notifier, product):
        cart = [buy_line("Widget", "W1", 9.0)]
        assert not validate_buy_items(cart_store, cart, [product])
        assert notifier.messages == []

    def test_records_without_sku_ignored(self, cart_store):
        products = ["junk", {"unit_price": 100, "in_stock": True}, {"sku": ["W1"]}] + PRODUCTS
        cart = [buy_line("Widget", "W1", 9.0)]
        assert validate_buy_items(cart_store, cart, products)
        assert cart_store.get_cart()[0]["unit_price"] == 10.0


class TestValidateCartWithCache:
    """Tests for validate_cart_with_cache."""

    def test_no_buy_items_skips(self, cart_store, cache, site_config, storage):
        storage.set_item("shopping_cart", json.dumps([{"item_name": "Van", "product_mode": "hire"}]))
        fetch = MagicMock()
        assert not validate_cart_with_cache(cart_store, cache, site_config, fetch=fetch)
        fetch.assert_not_called()

    def test_no_api_host_skips(self, cart_store, cache, storage):
        storage.set_item("shopping_cart", json.dumps([buy_line("Widget", "W1", 10.0)]))
        fetch = MagicMock()
        assert not validate_cart_with_cache(cart_store, cache, SiteConfig(), fetch=fetch)
        fetch.assert_not_called()

    def test_fresh_cache_used(self, cart_store, cache, site_config, storage):
        storage.set_item("shopping_cart", json.dumps([buy_line("Widget", "W1", 9.0)]))
        cache.put(PRODUCTS)
        fetch = MagicMock()
        assert validate_cart_with_cache(cart_store, cache, site_config, fetch=fetch)
        fetch.assert_not_called()

    def test_fetch_populates_cache(self, cart_store, cache, site_config, storage):
        storage.set_item("shopping_cart", json.dumps([buy_line("Widget", "W1", 10.0)]))
        fetch = MagicMock(return_value=PRODUCTS)
        assert not validate_cart_with_cache(cart_store, cache, site_config, fetch=fetch)
        fetch.assert_called_once_with("api.example.com", session=None)
        assert cache.get() == PRODUCTS

    def test_stale_cache_refetched(self, cart_store, cache, clock, site_config, storage):
        storage.set_item("shopping_cart", json.dumps([buy_line("Widget", "W1", 10.0)]))
        cache.put([])
        clock.now += 3_700_000
        fetch = MagicMock(return_value=PRODUCTS)
        validate_cart_with_cache(cart_store, cache, site_config, fetch=fetch)
        fetch.assert_called_once()

    def test_unreachable_api(self, cart_store, cache, site_config, storage, notifier):
        cart = [buy_line("Widget", "W1", 10.0)]
        storage.set_item("shopping_cart", json.dumps(cart))
        fetch = MagicMock(return_value=None)

        with patch("storefront.products_cache.send_ntfy_notification") as ntfy:
            assert not validate_cart_with_cache(cart_store, cache, site_config, fetch=fetch)

        ntfy.assert_called_once_with(
            "https://ntfy.sh/storefront-alerts",
            "Ecommerce API unreachable: api.example.com",
            session=None,
            wait=False,
        )
        assert notifier.messages == [UNREACHABLE_MESSAGE]
        assert cart_store.get_cart() == cart
        assert cache.get() is None

    def test_corrupt_cache_refetched_not_emptying_cart(self, cart_store, cache, clock, site_config, storage, notifier):
        cart = [buy_line("Widget", "W1", 10.0)]
        storage.set_item("shopping_cart", json.dumps(cart))
        storage.set_item("products_cache", json.dumps({"data": {"W1": {}}, "cached_at": clock.now}))
        fetch = MagicMock(return_value=PRODUCTS)

        assert not validate_cart_with_cache(cart_store, cache, site_config, fetch=fetch)

        fetch.assert_called_once()
        assert cart_store.get_cart() == cart
        assert notifier.messages == []

    def test_missing_price_does_not_raise(self, cart_store, cache, site_config, storage):
        cart = [buy_line("Widget", "W1", 9.0)]
        storage.set_item("shopping_cart", json.dumps(cart))
        fetch = MagicMock(return_value=[{"sku": "W1", "in_stock": True}])
        assert not validate_cart_with_cache(cart_store, cache, site_config, fetch=fetch)
        assert cart_store.get_cart() == cart

    def test_refresh_gate(self, cart_store, cache, storage):
        storage.set_item("shopping_cart", json.dumps([buy_line("Widget", "W1", 10.0)]))
        assert not refresh_cache_if_needed(cart_store, cache, SiteConfig())
