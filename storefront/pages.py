"""Static filter-permutation pages.

One virtual page is emitted per filter path present in the reverse index,
in discovery order, so a combination with no matching items never gets a
page. Optional sort variants multiply each page by the sort options.
"""

from dataclasses import replace
from typing import List, Optional

from storefront.config import DEFAULT_SORT_KEY, SORT_OPTIONS
from storefront.filter_paths import listing_url, path_to_filter, to_sorted_path
from storefront.filter_ui import build_filter_description, build_filter_ui_data
from storefront.logging_config import log_build_event
from storefront.models import FilterPage, Item
from storefront.reverse_index import ReverseIndex
from storefront.sorting import sort_entries

__all__ = [
    "generate_filter_pages",
    "expand_with_sort_variants",
    "generate_sort_only_pages",
    "attach_filter_ui",
    "sort_items",
]


def sort_items(items: List[Item], sort_key: str) -> List[Item]:
    """Sort items for a listing; ``default`` keeps collection order."""
    positions = {id(item): i for i, item in enumerate(items)}
    return sort_entries(
        items,
        sort_key,
        title=lambda item: item.title,
        price=lambda item: item.price,
        position=lambda item: positions[id(item)],
    )


def generate_filter_pages(
    index: ReverseIndex, base_url: str, scope: Optional[str] = None
) -> List[FilterPage]:
    """One page per indexed filter path.

    Args:
        index: Reverse index of the collection
        base_url: Listing URL, e.g. "/products" or "/categories/widgets"
        scope: Optional label carried on each page (e.g. category slug)
    """
    pages: List[FilterPage] = []
    for path, items in index.by_filter_path.items():
        filters = path_to_filter(path)
        pages.append(
            FilterPage(
                path=path,
                url=listing_url(base_url, filters),
                active_filters=filters,
                items=list(items),
                count=len(items),
                filter_description=build_filter_description(filters, index.display_lookup),
                scope=scope,
            )
        )

    log_build_event(
        "pages_generated",
        {
            "message": f"Generated {len(pages)} filter pages for {base_url}",
            "base_url": base_url,
            "pages": len(pages),
        },
        logger_name="pages",
    )
    return pages


def expand_with_sort_variants(pages: List[FilterPage], base_url: str) -> List[FilterPage]:
    """Copy each page once per sort option.

    The default variant keeps the page's path; others append the sort key
    and carry their items in that order.
    """
    expanded: List[FilterPage] = []
    for page in pages:
        for option in SORT_OPTIONS:
            key = option["key"]
            expanded.append(
                replace(
                    page,
                    sort_key=key,
                    path=to_sorted_path(page.active_filters, key),
                    url=listing_url(base_url, page.active_filters, key),
                    items=sort_items(page.items, key),
                )
            )
    return expanded


def generate_sort_only_pages(
    index: ReverseIndex, base_url: str, scope: Optional[str] = None
) -> List[FilterPage]:
    """Unfiltered listing pages for each non-default sort order."""
    return [
        FilterPage(
            path=option["key"],
            url=listing_url(base_url, None, option["key"]),
            active_filters={},
            items=sort_items(list(index.items), option["key"]),
            count=len(index.items),
            sort_key=option["key"],
            scope=scope,
        )
        for option in SORT_OPTIONS
        if option["key"] != DEFAULT_SORT_KEY
    ]


def attach_filter_ui(pages: List[FilterPage], index: ReverseIndex, base_url: str) -> List[FilterPage]:
    """Return new pages with their filter UI view-model filled in."""
    return [
        replace(
            page,
            filter_ui=build_filter_ui_data(index, page.active_filters, base_url, page.sort_key),
        )
        for page in pages
    ]
