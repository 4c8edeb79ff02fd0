"""Filter UI view-models for listing templates.

Everything a template needs to render the filter sidebar is computed here:
groups of options with counts and toggle URLs, removable pills for the
active filters, and the sort dropdown.
"""

from typing import Dict, List, Mapping, Optional

from storefront.config import DEFAULT_SORT_KEY, SORT_OPTIONS
from storefront.filter_paths import listing_url
from storefront.models import (
    ActiveFilter,
    FilterUIData,
    FilterUIGroup,
    FilterUIOption,
    SortOption,
)
from storefront.reverse_index import ReverseIndex
from storefront.sorting import resolve_sort_key

__all__ = [
    "build_filter_description",
    "build_filter_ui_data",
    "build_sort_options",
]


def _label(display_lookup: Mapping[str, str], slug: str) -> str:
    return display_lookup.get(slug, slug)


def build_filter_description(
    filters: Mapping[str, str], display_lookup: Mapping[str, str]
) -> List[Dict[str, str]]:
    """{"size": "compact"} -> [{"key": "Size", "value": "Compact"}]"""
    return [
        {"key": _label(display_lookup, key), "value": _label(display_lookup, value)}
        for key, value in filters.items()
    ]


def build_sort_options(
    filters: Mapping[str, str], sort_key: str, base_url: str
) -> List[SortOption]:
    return [
        SortOption(
            sort_key=option["key"],
            label=option["label"],
            active=option["key"] == sort_key,
            url=listing_url(base_url, filters, option["key"]),
        )
        for option in SORT_OPTIONS
    ]


def build_filter_ui_data(
    index: ReverseIndex,
    current_filters: Optional[Mapping[str, str]],
    base_url: str,
    sort_key: str = DEFAULT_SORT_KEY,
) -> FilterUIData:
    """Build the filter UI for one listing page.

    Args:
        index: Reverse index of the listing's collection
        current_filters: Active key -> value selection (may be empty or None)
        base_url: Listing URL without trailing slash, e.g. "/products"
        sort_key: Active sort key

    Returns:
        FilterUIData; ``has_filters`` is False when no item has attributes
    """
    filters: Dict[str, str] = dict(current_filters or {})
    sort_key = resolve_sort_key(sort_key)
    display = index.display_lookup

    if not index.has_filters:
        return FilterUIData(has_filters=False, result_count=index.count(filters))

    groups: List[FilterUIGroup] = []
    for key, values in index.attributes.items():
        options: List[FilterUIOption] = []
        for value in values:
            active = filters.get(key) == value
            selected = {**filters, key: value}
            if active:
                toggled = {k: v for k, v in filters.items() if k != key}
            else:
                toggled = selected
            options.append(
                FilterUIOption(
                    filter_value=value,
                    filter_value_label=_label(display, value),
                    count=index.count(selected),
                    active=active,
                    url=listing_url(base_url, toggled, sort_key),
                )
            )
        groups.append(FilterUIGroup(name=key, label=_label(display, key), options=options))

    active_filters = [
        ActiveFilter(
            key=key,
            value=value,
            label=_label(display, key),
            value_label=_label(display, value),
            remove_filter_key=key,
            remove_url=listing_url(
                base_url, {k: v for k, v in filters.items() if k != key}, sort_key
            ),
        )
        for key, value in filters.items()
    ]

    return FilterUIData(
        has_filters=True,
        has_active_filters=bool(filters),
        groups=groups,
        active_filters=active_filters,
        sort_options=build_sort_options(filters, sort_key, base_url),
        clear_all_url=listing_url(base_url),
        result_count=index.count(filters),
    )
