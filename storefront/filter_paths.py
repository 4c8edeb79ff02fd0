"""Conversions between filter mappings and URL paths.

A filter path joins sorted ``key/value`` segments::

    {"size": "small", "capacity": "3"} -> "capacity/3/size/small"

so the same filter set always yields the same path, whatever order the
mapping was built in. Listing URLs put filter paths under ``/search/`` with
an optional trailing sort key: ``/products/search/colour/red/price-asc/``.
"""

from typing import Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote, unquote

from storefront.config import DEFAULT_SORT_KEY, SORT_KEYS

__all__ = [
    "filter_to_path",
    "path_to_filter",
    "to_sorted_path",
    "search_url",
    "listing_url",
    "build_filter_url",
    "parse_filters_from_path",
]


def filter_to_path(filters: Optional[Mapping[str, str]]) -> str:
    """Convert a filter mapping to its canonical path (keys sorted)."""
    if not filters:
        return ""
    segments: List[str] = []
    for key in sorted(filters):
        segments.append(quote(key, safe=""))
        segments.append(quote(filters[key], safe=""))
    return "/".join(segments)


def path_to_filter(path: Optional[str]) -> Dict[str, str]:
    """Parse a filter path back into a mapping.

    "capacity/3/size/small" -> {"capacity": "3", "size": "small"}. A dangling
    key without a value and pairs with an empty side are dropped.
    """
    if not path:
        return {}
    segments = [s for s in path.split("/") if s]
    filters: Dict[str, str] = {}
    for i in range(0, len(segments) - 1, 2):
        key, value = unquote(segments[i]), unquote(segments[i + 1])
        if key and value:
            filters[key] = value
    return filters


def to_sorted_path(filters: Optional[Mapping[str, str]], sort_key: str = DEFAULT_SORT_KEY) -> str:
    """Filter path with the sort key appended (omitted for the default sort)."""
    parts = [filter_to_path(filters)]
    if sort_key and sort_key != DEFAULT_SORT_KEY:
        parts.append(sort_key)
    return "/".join(p for p in parts if p)


def search_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/search"


def listing_url(base_url: str, filters: Optional[Mapping[str, str]] = None,
                sort_key: str = DEFAULT_SORT_KEY) -> str:
    """URL of a listing page for the given filters and sort order."""
    path = to_sorted_path(filters, sort_key)
    if not path:
        return f"{base_url.rstrip('/')}/"
    return f"{search_url(base_url)}/{path}/"


def build_filter_url(pathname: str, filters: Mapping[str, str], sort_key: str) -> str:
    """Build a listing URL from the current pathname, filters and sort key.

    Anything from ``/search/`` onwards in ``pathname`` is replaced.
    """
    base = pathname.split("/search/")[0].rstrip("/")
    return listing_url(base, filters, sort_key)


def parse_filters_from_path(pathname: str) -> Tuple[Dict[str, str], str]:
    """Read filters and sort key back out of a listing URL path."""
    if "/search/" not in pathname:
        return {}, DEFAULT_SORT_KEY

    search_part = pathname.split("/search/", 1)[1]
    parts = [p for p in search_part.split("/") if p]
    sort_key = DEFAULT_SORT_KEY
    if parts and parts[-1] in SORT_KEYS and len(parts) % 2 == 1:
        sort_key = parts.pop()
    return path_to_filter("/".join(parts)), sort_key
