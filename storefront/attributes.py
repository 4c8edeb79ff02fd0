"""Filter attribute parsing.

Content authors write attributes as a list of ``{name, value}`` pairs in any
case or spacing::

    [{"name": "Size", "value": "Large"}, {"name": "Colour", "value": "Red"}]

which parse to ``{"size": "large", "colour": "red"}``.
"""

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from storefront.models import FilterAttribute, Item
from storefront.slugs import slugify

__all__ = [
    "parse_filter_attributes",
    "get_all_filter_attributes",
    "build_display_lookup",
]


def parse_filter_attributes(pairs: Optional[Iterable[Any]]) -> Dict[str, str]:
    """Parse raw attribute pairs into a slug -> slug mapping.

    Later pairs overwrite earlier ones whose name slugifies the same. A
    missing value is treated as an empty string. Pairs whose name slugifies
    to nothing are skipped. Never raises for malformed pairs.
    """
    if not pairs:
        return {}

    parsed: Dict[str, str] = {}
    for raw in pairs:
        attr = FilterAttribute.from_raw(raw)
        key = slugify(attr.name.strip())
        if not key:
            continue
        parsed[key] = slugify(attr.value.strip())
    return parsed


def get_all_filter_attributes(items: Iterable[Item]) -> Dict[str, Tuple[str, ...]]:
    """Map every attribute key to its distinct values, both sorted.

    Empty values are not filterable and are left out.
    """
    values_by_key: Dict[str, Set[str]] = defaultdict(set)
    for item in items:
        for key, value in item.attributes.items():
            if value:
                values_by_key[key].add(value)

    return {key: tuple(sorted(values_by_key[key])) for key in sorted(values_by_key)}


def build_display_lookup(items: Iterable[Item]) -> Dict[str, str]:
    """Map slugs back to the text authors wrote; first occurrence wins.

    {"size": "Size", "large": "Large"}
    """
    lookup: Dict[str, str] = {}
    for item in items:
        for attr in item.filter_attributes:
            pairs: List[Tuple[str, str]] = [
                (slugify(attr.name.strip()), attr.name.strip()),
                (slugify(attr.value.strip()), attr.value.strip()),
            ]
            for slug, original in pairs:
                if slug and slug not in lookup:
                    lookup[slug] = original
    return lookup
