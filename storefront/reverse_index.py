"""Reverse index from filter paths to matching items.

Every filter path reachable by a non-empty subset of an item's own
attributes is indexed. For an item with ``{colour: red, size: large}`` that
is ``colour/red``, ``size/large`` and ``colour/red/size/large``. Paths are
generated from item data only, so a path in the index always has at least
one item and the count for any filter combination is a dictionary lookup.

Buckets keep collection order. Path keys keep the order in which they were
first discovered while walking the collection.
"""

from dataclasses import dataclass
from itertools import combinations
from types import MappingProxyType
from typing import Callable, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Tuple

from storefront.attributes import build_display_lookup, get_all_filter_attributes
from storefront.filter_paths import filter_to_path
from storefront.logging_config import log_build_event
from storefront.models import Item

__all__ = [
    "ReverseIndex",
    "IndexCache",
    "build_reverse_index",
    "build_scoped_indices",
    "item_filter_paths",
]


@dataclass(frozen=True)
class ReverseIndex:
    """Immutable filter index for one collection (or one scope of it)."""

    items: Tuple[Item, ...]
    attributes: Mapping[str, Tuple[str, ...]]
    display_lookup: Mapping[str, str]
    by_filter_path: Mapping[str, Tuple[Item, ...]]

    def filter_paths(self) -> List[str]:
        """All indexed paths in discovery order."""
        return list(self.by_filter_path)

    def items_for(self, filters: Optional[Mapping[str, str]]) -> Tuple[Item, ...]:
        """Items matching every pair in ``filters``; all items when empty."""
        if not filters:
            return self.items
        return self.by_filter_path.get(filter_to_path(filters), ())

    def count(self, filters: Optional[Mapping[str, str]]) -> int:
        return len(self.items_for(filters))

    @property
    def has_filters(self) -> bool:
        return bool(self.attributes)


def item_filter_paths(item: Item) -> List[str]:
    """Paths for every non-empty subset of an item's attributes.

    Smaller subsets first, keys in sorted order within each size.
    """
    entries = sorted((k, v) for k, v in item.attributes.items() if v)
    paths: List[str] = []
    for size in range(1, len(entries) + 1):
        for subset in combinations(entries, size):
            paths.append(filter_to_path(dict(subset)))
    return paths


def _build(items: Sequence[Item]) -> ReverseIndex:
    buckets: Dict[str, List[Item]] = {}
    for item in items:
        for path in item_filter_paths(item):
            buckets.setdefault(path, []).append(item)

    return ReverseIndex(
        items=tuple(items),
        attributes=MappingProxyType(get_all_filter_attributes(items)),
        display_lookup=MappingProxyType(build_display_lookup(items)),
        by_filter_path=MappingProxyType({path: tuple(bucket) for path, bucket in buckets.items()}),
    )


class IndexCache:
    """Memo of built indices, owned by whoever runs the build.

    Keyed by the content of the item sequence (ids and attributes) plus an
    optional scope, so an unchanged collection is indexed once per build and
    separate builds (or tests) never share state unless they share a cache.
    """

    def __init__(self) -> None:
        self._indices: Dict[Hashable, ReverseIndex] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key_for(items: Sequence[Item], scope: Optional[str] = None) -> Hashable:
        return (
            scope,
            tuple(
                (item.id, item.title, item.price, tuple(sorted(item.attributes.items())))
                for item in items
            ),
        )

    def get_or_build(self, items: Sequence[Item], scope: Optional[str] = None) -> ReverseIndex:
        key = self.key_for(items, scope)
        index = self._indices.get(key)
        if index is None:
            self.misses += 1
            index = _build(items)
            self._indices[key] = index
        else:
            self.hits += 1
        return index

    def clear(self) -> None:
        self._indices.clear()

    def __len__(self) -> int:
        return len(self._indices)


def build_reverse_index(
    items: Iterable[Item],
    cache: Optional[IndexCache] = None,
    scope: Optional[str] = None,
) -> ReverseIndex:
    """Build the reverse index for a collection.

    Args:
        items: Items in collection order
        cache: Optional cache to reuse indices within one build
        scope: Label for logging and cache keys (e.g. a category slug)
    """
    items = list(items)
    index = cache.get_or_build(items, scope) if cache is not None else _build(items)

    log_build_event(
        "index_built",
        {
            "message": f"Indexed {len(items)} items into {len(index.by_filter_path)} filter paths"
            + (f" ({scope})" if scope else ""),
            "scope": scope,
            "items": len(items),
            "filter_paths": len(index.by_filter_path),
            "attribute_keys": len(index.attributes),
        },
        logger_name="reverse_index",
    )
    return index


def build_scoped_indices(
    items: Iterable[Item],
    scope_keys: Callable[[Item], Iterable[str]],
    cache: Optional[IndexCache] = None,
) -> Dict[str, ReverseIndex]:
    """Build one index per scope.

    ``scope_keys`` returns the scopes an item belongs to (an item may sit in
    several categories). Scopes appear in first-seen order and each scope's
    items keep collection order.
    """
    grouped: Dict[str, List[Item]] = {}
    seen: Dict[str, set] = {}
    for item in items:
        for scope in scope_keys(item):
            if item.id in seen.setdefault(scope, set()):
                continue
            seen[scope].add(item.id)
            grouped.setdefault(scope, []).append(item)

    return {
        scope: build_reverse_index(members, cache=cache, scope=scope)
        for scope, members in grouped.items()
    }
