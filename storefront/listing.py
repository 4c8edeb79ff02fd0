"""Client-side filtering and sorting of a rendered listing.

The build writes each listing entry as ``<li data-filter-item='{...}'>``
with a JSON payload of its title, price and filter attributes. These helpers
read that markup back (as BeautifulSoup tags) and apply a filter/sort state
to it: non-matching entries are hidden with ``display:none`` and matching
ones are re-appended to the list container in sort order.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from bs4 import BeautifulSoup, Tag

from storefront.logging_config import get_logger
from storefront.models import Item
from storefront.sorting import sort_entries

__all__ = [
    "ListingItem",
    "item_matches_filters",
    "is_hidden",
    "apply_filters_and_sort",
    "is_option_visible",
    "read_listing_items",
    "listing_item_payload",
    "render_listing",
]

logger = get_logger("listing")

HIDDEN_STYLE = "display:none"
DISPLAY_RE = re.compile(r"\s*display\s*:\s*[^;]*;?", re.IGNORECASE)


@dataclass
class ListingItem:
    """A rendered listing entry and its filter payload."""

    element: Tag
    data: Dict[str, Any] = field(default_factory=dict)
    original_index: int = 0

    @property
    def filters(self) -> Dict[str, str]:
        return self.data.get("filters") or {}


def item_matches_filters(item: ListingItem, filters: Optional[Mapping[str, str]]) -> bool:
    """True when the item carries every active key with the same value."""
    if not filters:
        return True
    attrs = item.filters
    return all(attrs.get(key) == value for key, value in filters.items())


def _set_hidden(element: Tag, hidden: bool) -> None:
    style = DISPLAY_RE.sub("", element.get("style", "")).strip().strip(";")
    if hidden:
        style = f"{style};{HIDDEN_STYLE}" if style else HIDDEN_STYLE
    if style:
        element["style"] = style
    elif element.has_attr("style"):
        del element["style"]


def is_hidden(element: Tag) -> bool:
    return HIDDEN_STYLE in element.get("style", "").replace(" ", "")


def apply_filters_and_sort(
    items: List[ListingItem],
    container: Optional[Tag],
    filters: Optional[Mapping[str, str]],
    sort_key: Optional[str],
) -> int:
    """Show matching entries in sort order and hide the rest.

    Args:
        items: All entries of the listing
        container: List element to re-append matches into; order is left
            alone when None
        filters: Active key -> value selection; empty shows everything
        sort_key: One of the sort option keys; unknown keys sort by default

    Returns:
        Number of matching entries
    """
    matched = [item for item in items if item_matches_filters(item, filters)]
    matched_ids = {id(item) for item in matched}

    for item in items:
        _set_hidden(item.element, id(item) not in matched_ids)

    ordered = sort_entries(
        matched,
        sort_key,
        title=lambda item: item.data.get("title"),
        price=lambda item: item.data.get("price"),
        position=lambda item: item.original_index,
    )

    if container is not None:
        for item in ordered:
            container.append(item.element)

    return len(ordered)


def is_option_visible(
    items: List[ListingItem],
    filters: Mapping[str, str],
    key: str,
    value: str,
    current_count: int,
) -> bool:
    """Whether a filter option is worth showing for the current selection.

    Active options are always shown. Other options are shown when selecting
    them leaves at least one match and either swaps a value in a group that
    is already filtered or changes the number of results.
    """
    if filters.get(key) == value:
        return True
    hypothetical = {**filters, key: value}
    count = sum(1 for item in items if item_matches_filters(item, hypothetical))
    return count > 0 and (key in filters or count != current_count)


def read_listing_items(container: Tag) -> List[ListingItem]:
    """Collect ``li[data-filter-item]`` entries under ``container``.

    Entries whose payload is not valid JSON are skipped with a warning.
    """
    items: List[ListingItem] = []
    for element in container.select("li[data-filter-item]"):
        try:
            data = json.loads(element["data-filter-item"])
        except json.JSONDecodeError as e:
            logger.warning(f"Skipping listing entry with invalid payload: {e}")
            continue
        items.append(ListingItem(element=element, data=data, original_index=len(items)))
    return items


def listing_item_payload(item: Item) -> str:
    """JSON payload written to an entry's ``data-filter-item`` attribute."""
    return json.dumps(
        {"title": item.title, "price": item.price, "filters": item.attributes},
        ensure_ascii=False,
        sort_keys=True,
    )


def render_listing(items: List[Item]) -> BeautifulSoup:
    """Render a minimal ``<ul class="items">`` listing for the given items."""
    soup = BeautifulSoup('<ul class="items"></ul>', "html.parser")
    ul = soup.find("ul")
    for item in items:
        li = soup.new_tag("li")
        li["data-filter-item"] = listing_item_payload(item)
        if item.url:
            link = soup.new_tag("a", href=item.url)
            link.string = item.title
            li.append(link)
        else:
            li.string = item.title
        ul.append(li)
    return soup
