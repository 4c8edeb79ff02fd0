"""Shared test fixtures for the storefront test suite."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pytest

from storefront.catalog import item_from_record
from storefront.config import SiteConfig
from storefront.models import Item
from storefront.notify import Notifier
from storefront.storage import MemoryStorage


SAMPLE_RECORDS: List[Dict[str, Any]] = [
    {
        "title": "Compact Widget",
        "price": 10,
        "categories": ["widgets"],
        "filter_attributes": [
            {"name": "Size", "value": "Compact"},
            {"name": "Colour", "value": "Red"},
        ],
    },
    {
        "title": "Large Widget",
        "price": 25,
        "categories": ["widgets"],
        "filter_attributes": [
            {"name": "Size", "value": "Large"},
            {"name": "Colour", "value": "Red"},
        ],
    },
    {
        "title": "Blue Gadget",
        "categories": ["content/categories/gadgets.md"],
        "filter_attributes": [
            {"name": "Size", "value": "Compact"},
            {"name": "Colour", "value": "Blue"},
        ],
    },
]


@pytest.fixture(autouse=True)
def reset_storefront_logger():
    """Drop handlers installed by setup_logging so tests don't leak streams."""
    yield
    logger = logging.getLogger("storefront")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def sample_records() -> List[Dict[str, Any]]:
    return json.loads(json.dumps(SAMPLE_RECORDS))


@pytest.fixture
def sample_items(sample_records) -> List[Item]:
    """Compact Widget (red, 10), Large Widget (red, 25), Blue Gadget (no price)."""
    return [item_from_record(r) for r in sample_records]


@pytest.fixture
def catalog_file(tmp_path, sample_records) -> Path:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(sample_records), encoding="utf-8")
    return path


@pytest.fixture
def site_config_file(tmp_path) -> Path:
    path = tmp_path / "site.json"
    path.write_text(json.dumps({"url": "https://shop.example.com", "cart_mode": "quote"}))
    return path


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def site_config() -> SiteConfig:
    return SiteConfig(
        url="https://shop.example.com",
        cart_mode="stripe",
        checkout_api_url="https://checkout.example.com",
        ecommerce_api_host="api.example.com",
        ntfy_url="https://ntfy.sh/storefront-alerts",
    )
