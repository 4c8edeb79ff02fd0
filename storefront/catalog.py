"""Catalog loading.

The catalog is a JSON array of product records::

    [
      {
        "id": "blue-widget",
        "title": "Blue Widget",
        "price": 12.5,
        "categories": ["widgets"],
        "order": 1,
        "filter_attributes": [{"name": "Colour", "value": "Blue"}]
      }
    ]

``id`` defaults to the slugified title; category references may be paths or
filenames and are reduced to slugs.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from storefront.attributes import parse_filter_attributes
from storefront.config import CATALOG_PATH
from storefront.logging_config import get_logger
from storefront.models import FilterAttribute, Item
from storefront.slugs import build_permalink, normalise_slug, slugify

__all__ = [
    "DuplicateItemError",
    "load_catalog",
    "item_from_record",
    "sort_by_order_then_title",
    "get_items_by_category",
]

logger = get_logger("catalog")


class DuplicateItemError(ValueError):
    """Raised when two catalog records share an id."""
    pass


def _parse_price(value: Any) -> Optional[float]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric price {value!r}")
        return None


def item_from_record(record: Dict[str, Any], directory: str = "products") -> Item:
    """Build an Item from one catalog record.

    Raises:
        ValueError: If the record has neither id nor title
    """
    title = str(record.get("title") or "").strip()
    item_id = normalise_slug(str(record["id"])) if record.get("id") else slugify(title)
    if not item_id:
        raise ValueError(f"Catalog record has no id or title: {record!r}")

    raw_attributes = record.get("filter_attributes") or []
    filter_attributes = [
        FilterAttribute.from_raw(raw) for raw in raw_attributes if isinstance(raw, (dict, FilterAttribute))
    ]

    order = record.get("order")
    return Item(
        id=item_id,
        title=title or item_id,
        attributes=parse_filter_attributes(filter_attributes),
        price=_parse_price(record.get("price")),
        categories=[normalise_slug(str(c)) for c in record.get("categories") or [] if c],
        order=int(order) if order is not None else None,
        url=build_permalink(record.get("permalink") or record.get("url"), directory, item_id),
        filter_attributes=filter_attributes,
    )


def load_catalog(path: Union[str, Path] = CATALOG_PATH) -> List[Item]:
    """Load catalog records from a JSON file, keeping file order.

    Raises:
        FileNotFoundError: If the catalog file does not exist
        DuplicateItemError: If two records resolve to the same id
        ValueError: If the file is not a JSON array or a record is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        records = json.load(f)

    if not isinstance(records, list):
        raise ValueError(f"Catalog {path} must contain a JSON array of records")

    items: List[Item] = []
    seen: Dict[str, int] = {}
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValueError(f"Catalog record {i} in {path} is not an object")
        item = item_from_record(record)
        if item.id in seen:
            raise DuplicateItemError(
                f"Duplicate item id '{item.id}' in {path} (records {seen[item.id]} and {i})"
            )
        seen[item.id] = i
        items.append(item)

    logger.info(f"Loaded {len(items)} items from {path}")
    return items


def sort_by_order_then_title(items: Iterable[Item]) -> List[Item]:
    """Explicit ``order`` first (missing counts as 0), then title."""
    return sorted(items, key=lambda item: (item.order or 0, item.title.casefold()))


def get_items_by_category(items: Iterable[Item], category_slug: str) -> List[Item]:
    return sort_by_order_then_title(item for item in items if category_slug in item.categories)
