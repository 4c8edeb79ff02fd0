"""Slug and permalink helpers.

Turns free-form references (full paths, filenames, display names) into the
canonical slugs used as item ids, attribute keys and URL segments.
"""

import posixpath
import re
from typing import Any, Iterable, Optional, TypeVar

from slugify import slugify as _slugify

__all__ = [
    "MissingContentError",
    "slugify",
    "normalise_slug",
    "normalise_permalink",
    "build_permalink",
    "find_by_slug",
]

T = TypeVar("T")

# Applied before transliteration: "Café & Bistro" -> "cafe-and-bistro",
# "Joe's Diner" -> "joes-diner"
SLUG_REPLACEMENTS = [["&", " and "], ["'", ""], ["’", ""]]

FILE_EXTENSION_RE = re.compile(r"\.[a-z0-9]+$", re.IGNORECASE)


class MissingContentError(LookupError):
    """Raised when content references a slug that does not exist."""
    pass


def slugify(text: Optional[str]) -> str:
    """Lowercase, hyphen-separated ASCII slug; ``None`` becomes ``""``."""
    if text is None:
        return ""
    return _slugify(str(text), replacements=SLUG_REPLACEMENTS)


def normalise_slug(reference: Optional[str]) -> Optional[str]:
    """Reduce a content reference to its slug.

    "content/menus/lunch.md" -> "lunch". Only a trailing ``.md`` is removed, so
    "v2.0-widgets.md" keeps its dot. Falsy values are returned unchanged.
    """
    if not reference:
        return reference
    name = posixpath.basename(reference.rstrip("/"))
    if name.endswith(".md"):
        name = name[: -len(".md")]
    return name


def normalise_permalink(permalink: Any) -> Any:
    """Ensure a bare permalink has leading and trailing slashes.

    Non-strings, template expressions and paths ending in a file extension
    ("feed.xml", "/page/index.html") are returned unchanged.
    """
    if not isinstance(permalink, str) or not permalink:
        return permalink
    if "{{" in permalink or "{%" in permalink:
        return permalink
    last_segment = permalink.rstrip("/").rsplit("/", 1)[-1]
    if not permalink.endswith("/") and FILE_EXTENSION_RE.search(last_segment):
        return permalink
    if not permalink.startswith("/"):
        permalink = "/" + permalink
    if not permalink.endswith("/"):
        permalink += "/"
    return permalink


def build_permalink(permalink: Any, directory: str, file_slug: str) -> str:
    """Explicit permalink if set, else ``/{directory}/{file_slug}/``."""
    if permalink:
        return normalise_permalink(permalink)
    return f"/{directory.strip('/')}/{file_slug}/"


def find_by_slug(items: Iterable[T], reference: str, kind: str = "item") -> T:
    """Find the item whose ``id`` matches a content reference.

    Raises:
        MissingContentError: If no item has that slug
    """
    slug = normalise_slug(reference)
    for item in items:
        if getattr(item, "id", None) == slug:
            return item
    raise MissingContentError(f"No {kind} found with slug '{slug}' (referenced as '{reference}')")
