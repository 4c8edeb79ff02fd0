"""Build workflow: index a catalog and write the static filter outputs.

A build produces, per listing (the full catalog and optionally each
category):

- the filter pages (one per indexed filter path, optionally per sort order)
- dangling-key redirects
- the filter UI for the unfiltered listing

``write_build_output`` serializes all listings into ``output_dir``.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from storefront.catalog import sort_by_order_then_title
from storefront.config import DEFAULT_BASE_URL
from storefront.filter_ui import build_filter_ui_data
from storefront.logging_config import get_logger, log_build_event
from storefront.models import FilterPage, FilterUIData, Item, Redirect
from storefront.pages import (
    attach_filter_ui,
    expand_with_sort_variants,
    generate_filter_pages,
    generate_sort_only_pages,
)
from storefront.redirects import format_redirects, generate_filter_redirects
from storefront.reverse_index import IndexCache, ReverseIndex, build_reverse_index, build_scoped_indices

__all__ = [
    "ALL_ITEMS_SCOPE",
    "ListingBuild",
    "build_listing",
    "build_category_listings",
    "write_build_output",
    "category_base_url",
]

logger = get_logger("build")

ALL_ITEMS_SCOPE = "all"


@dataclass
class ListingBuild:
    """Everything generated for one listing."""

    base_url: str
    index: ReverseIndex
    pages: List[FilterPage] = field(default_factory=list)
    redirects: List[Redirect] = field(default_factory=list)
    filter_ui: Optional[FilterUIData] = None
    scope: Optional[str] = None


def category_base_url(category_slug: str) -> str:
    return f"/categories/{category_slug}"


def _listing_from_index(
    index: ReverseIndex, base_url: str, scope: Optional[str], sort_variants: bool
) -> ListingBuild:
    pages = generate_filter_pages(index, base_url, scope=scope)
    if sort_variants:
        pages = expand_with_sort_variants(pages, base_url)
        pages.extend(generate_sort_only_pages(index, base_url, scope=scope))

    return ListingBuild(
        base_url=base_url,
        index=index,
        pages=attach_filter_ui(pages, index, base_url),
        redirects=generate_filter_redirects(index, base_url),
        filter_ui=build_filter_ui_data(index, {}, base_url),
        scope=scope,
    )


def build_listing(
    items: Iterable[Item],
    base_url: str = DEFAULT_BASE_URL,
    cache: Optional[IndexCache] = None,
    sort_variants: bool = False,
    scope: Optional[str] = None,
) -> ListingBuild:
    """Build pages, redirects and filter UI for one listing.

    Items are indexed in the order given.
    """
    index = build_reverse_index(items, cache=cache, scope=scope)
    return _listing_from_index(index, base_url, scope, sort_variants)


def build_category_listings(
    items: Iterable[Item],
    cache: Optional[IndexCache] = None,
    sort_variants: bool = False,
) -> Dict[str, ListingBuild]:
    """One listing per category, at ``/categories/{slug}``.

    Items within a category are ordered by ``order`` then title. Categories
    with no items never appear.
    """
    ordered = sort_by_order_then_title(items)
    indices = build_scoped_indices(ordered, lambda item: item.categories, cache=cache)
    logger.info(f"Building {len(indices)} category listings")
    return {
        slug: _listing_from_index(index, category_base_url(slug), slug, sort_variants)
        for slug, index in indices.items()
    }


def _write_json(path: Path, data) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def write_build_output(
    builds: Dict[str, ListingBuild], output_dir: Union[str, Path]
) -> Dict[str, Path]:
    """Write all listings' outputs.

    Files:
        pages.json: every filter page, listings in build order
        redirects.json: redirect objects
        _redirects: the same redirects in hosting-provider format
        filter_attributes.json: per listing, attributes and display labels

    Returns:
        Mapping of file name to written path
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    pages = [page.to_dict() for build in builds.values() for page in build.pages]
    redirects = [r for build in builds.values() for r in build.redirects]
    attributes = {
        name: {
            "base_url": build.base_url,
            "attributes": {k: list(v) for k, v in build.index.attributes.items()},
            "display_lookup": dict(build.index.display_lookup),
        }
        for name, build in builds.items()
        if build.index.has_filters
    }

    written = {
        "pages.json": out / "pages.json",
        "redirects.json": out / "redirects.json",
        "_redirects": out / "_redirects",
        "filter_attributes.json": out / "filter_attributes.json",
    }
    _write_json(written["pages.json"], pages)
    _write_json(
        written["redirects.json"],
        [{"from": r.from_url, "to": r.to_url} for r in redirects],
    )
    written["_redirects"].write_text(format_redirects(redirects), encoding="utf-8")
    _write_json(written["filter_attributes.json"], attributes)

    log_build_event(
        "build_written",
        {
            "message": f"Wrote {len(pages)} pages and {len(redirects)} redirects to {out}",
            "output_dir": str(out),
            "listings": len(builds),
            "pages": len(pages),
            "redirects": len(redirects),
        },
        logger_name="build",
    )
    return written
