"""Listing sort orders shared by the build and the client-side listing."""

from typing import Callable, List, Optional, Sequence, TypeVar

from storefront.config import DEFAULT_SORT_KEY, SORT_KEYS

__all__ = ["sort_entries", "resolve_sort_key"]

T = TypeVar("T")


def resolve_sort_key(sort_key: Optional[str]) -> str:
    """Unknown or empty sort keys fall back to the default order."""
    return sort_key if sort_key in SORT_KEYS else DEFAULT_SORT_KEY


def sort_entries(
    entries: Sequence[T],
    sort_key: Optional[str],
    title: Callable[[T], Optional[str]],
    price: Callable[[T], Optional[float]],
    position: Callable[[T], int],
) -> List[T]:
    """Sort listing entries with one of the fixed comparators.

    ``default`` restores original position. Entries without a price go last
    in both price orders. Name orders compare case-insensitively. Ties keep
    original position.
    """
    sort_key = resolve_sort_key(sort_key)
    by_position = sorted(entries, key=position)

    if sort_key == "price-asc":
        return sorted(by_position, key=lambda e: (price(e) is None, price(e) or 0))
    if sort_key == "price-desc":
        return sorted(by_position, key=lambda e: (price(e) is None, -(price(e) or 0)))
    if sort_key == "name-asc":
        return sorted(by_position, key=lambda e: (title(e) or "").casefold())
    if sort_key == "name-desc":
        return sorted(by_position, key=lambda e: (title(e) or "").casefold(), reverse=True)
    return by_position
