"""Redirects for filter URLs that end in a bare attribute key.

Old filter links could stop after a key (``/products/search/size/``) with
no value. Those URLs are sent back to the nearest real page.
"""

from typing import Dict, Iterable, List

from storefront.filter_paths import path_to_filter, search_url
from storefront.models import Redirect
from storefront.reverse_index import ReverseIndex

__all__ = ["generate_filter_redirects", "format_redirects"]


def generate_filter_redirects(index: ReverseIndex, base_url: str) -> List[Redirect]:
    """Redirect dangling-key URLs for every filter combination.

    ``{search}/{key}/`` goes to ``{search}/#content``, and for each indexed
    path ``{search}/{path}/{key}/`` goes to ``{search}/{path}/#content`` for
    every key the path does not already set. First source wins.
    """
    keys = list(index.attributes)
    if not keys:
        return []

    search = search_url(base_url)
    redirects: Dict[str, str] = {}

    for key in keys:
        redirects.setdefault(f"{search}/{key}/", f"{search}/#content")

    for path in index.by_filter_path:
        filters = path_to_filter(path)
        for key in keys:
            if key not in filters:
                redirects.setdefault(f"{search}/{path}/{key}/", f"{search}/{path}/#content")

    return [Redirect(from_url=src, to_url=dest) for src, dest in redirects.items()]


def format_redirects(redirects: Iterable[Redirect], status: int = 301) -> str:
    """Render redirects as a ``_redirects`` file, one rule per line."""
    lines = [f"{r.from_url} {r.to_url} {status}" for r in redirects]
    return "\n".join(lines) + ("\n" if lines else "")
