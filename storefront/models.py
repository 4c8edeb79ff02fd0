"""Data models for catalog items, filter pages and the cart."""

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

__all__ = [
    "SLUG_RE",
    "FilterAttribute",
    "Item",
    "FilterUIOption",
    "FilterUIGroup",
    "ActiveFilter",
    "SortOption",
    "FilterUIData",
    "FilterPage",
    "Redirect",
    "CartItem",
]

# Slugified attribute keys/values: lowercase alphanumerics and hyphens
SLUG_RE = re.compile(r"^[a-z0-9-]*$")


@dataclass(frozen=True)
class FilterAttribute:
    """A raw attribute pair as authored in content, e.g. Size: Large."""

    name: str
    value: str = ""

    @classmethod
    def from_raw(cls, raw: Any) -> "FilterAttribute":
        """Accept a FilterAttribute or a {name, value} mapping."""
        if isinstance(raw, FilterAttribute):
            return raw
        name = raw.get("name") if isinstance(raw, dict) else None
        value = raw.get("value") if isinstance(raw, dict) else None
        return cls(name="" if name is None else str(name), value="" if value is None else str(value))


@dataclass
class Item:
    """A catalog item (product, property, ...) with parsed filter attributes.

    ``attributes`` maps slugified keys to slugified values. The raw
    ``filter_attributes`` are kept for display labels.
    """

    id: str
    title: str
    attributes: Dict[str, str] = field(default_factory=dict)
    price: Optional[float] = None
    categories: List[str] = field(default_factory=list)
    order: Optional[int] = None
    url: Optional[str] = None
    filter_attributes: List[FilterAttribute] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Item id must not be empty")
        for key, value in self.attributes.items():
            if not key or not SLUG_RE.match(key):
                raise ValueError(f"Item {self.id}: attribute key {key!r} is not a slug")
            if not SLUG_RE.match(value):
                raise ValueError(
                    f"Item {self.id}: attribute value {value!r} for {key!r} is not a slug"
                )


@dataclass
class FilterUIOption:
    filter_value: str
    filter_value_label: str
    count: int
    active: bool
    url: str


@dataclass
class FilterUIGroup:
    name: str
    label: str
    options: List[FilterUIOption] = field(default_factory=list)


@dataclass
class ActiveFilter:
    """A currently selected filter, rendered as a removable pill."""

    key: str
    value: str
    label: str
    value_label: str
    remove_filter_key: str
    remove_url: str


@dataclass
class SortOption:
    sort_key: str
    label: str
    active: bool
    url: str


@dataclass
class FilterUIData:
    """Pre-computed filter UI for one listing page."""

    has_filters: bool
    has_active_filters: bool = False
    groups: List[FilterUIGroup] = field(default_factory=list)
    active_filters: List[ActiveFilter] = field(default_factory=list)
    sort_options: List[SortOption] = field(default_factory=list)
    clear_all_url: str = ""
    result_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FilterPage:
    """A virtual page for one filter combination (and sort order)."""

    path: str
    url: str
    active_filters: Dict[str, str]
    items: List[Item]
    count: int
    filter_description: List[Dict[str, str]] = field(default_factory=list)
    sort_key: str = "default"
    scope: Optional[str] = None
    filter_ui: Optional[FilterUIData] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serializable summary; items are referenced by id."""
        return {
            "path": self.path,
            "url": self.url,
            "scope": self.scope,
            "sort_key": self.sort_key,
            "active_filters": dict(self.active_filters),
            "count": self.count,
            "item_ids": [item.id for item in self.items],
            "filter_description": list(self.filter_description),
            "filter_ui": self.filter_ui.to_dict() if self.filter_ui else None,
        }


@dataclass(frozen=True)
class Redirect:
    from_url: str
    to_url: str


@dataclass
class CartItem:
    """A cart line as stored in browser storage."""

    item_name: str
    unit_price: float
    quantity: int = 1
    sku: Optional[str] = None
    max_quantity: Optional[int] = None
    product_mode: Optional[str] = "buy"
    specs: Optional[List[Dict[str, Any]]] = None
    hire_prices: Optional[Dict[str, Any]] = None
    subtitle: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Storage form; unset optional fields are omitted."""
        return {k: v for k, v in asdict(self).items() if v is not None}
