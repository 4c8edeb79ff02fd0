"""URL validation for site configuration.

Checks the values that end up in generated links and outgoing requests:
the public site URL, the ecommerce API host and the notification endpoint.
"""

import re
from typing import Optional
from urllib.parse import urlparse

__all__ = [
    "validate_site_url",
    "validate_api_host",
    "validate_endpoint_url",
    "sanitize_url",
    "is_safe_url",
    "URLValidationError",
]


class URLValidationError(Exception):
    """Raised when URL validation fails."""
    pass


# Bare host name with an optional port: shop.example.com, localhost:8787
HOST_PATTERN = re.compile(
    r"^(?=.{1,253}(:\d{1,5})?$)[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?"
    r"(\.[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?)*(:\d{1,5})?$"
)

DANGEROUS_SCHEMES = {"javascript", "data", "vbscript", "file"}


def sanitize_url(url: str) -> str:
    """Strip whitespace and control characters from a URL."""
    if not url:
        return ""
    url = url.strip()
    url = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", url)
    return url.replace("%00", "")


def _check_scheme(url: str, label: str) -> str:
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise URLValidationError(f"Failed to parse {label}: {e}") from e

    scheme = parsed.scheme.lower()
    if scheme in DANGEROUS_SCHEMES:
        raise URLValidationError(f"Dangerous URL scheme in {label}: {scheme}")
    if scheme not in ("http", "https"):
        raise URLValidationError(
            f"{label} must use http or https protocol, got: {url}"
        )
    if not parsed.netloc:
        raise URLValidationError(f"{label} has no domain: {url}")
    return url


def validate_site_url(url: Optional[str]) -> str:
    """Validate the public site URL used to build absolute links.

    Raises:
        URLValidationError: If the URL is missing, ends with a slash,
            or does not use http(s)
    """
    url = sanitize_url(url or "")
    if not url:
        raise URLValidationError("site url is missing")
    if url.endswith("/"):
        raise URLValidationError(f"site url must not end with a slash: {url}")
    return _check_scheme(url, "site url")


def validate_api_host(host: Optional[str]) -> str:
    """Validate a bare API host name (no scheme, no path).

    Raises:
        URLValidationError: If the host is empty or not a plain host name
    """
    host = sanitize_url(host or "").lower()
    if not host:
        raise URLValidationError("API host is empty")
    if "://" in host or "/" in host:
        raise URLValidationError(
            f"API host must be a bare host name without scheme or path: {host}"
        )
    if not HOST_PATTERN.match(host):
        raise URLValidationError(f"API host is not a valid host name: {host}")
    return host


def validate_endpoint_url(url: Optional[str]) -> str:
    """Validate an absolute http(s) endpoint such as a notification topic."""
    url = sanitize_url(url or "")
    if not url:
        raise URLValidationError("endpoint url is empty")
    return _check_scheme(url, "endpoint url")


def is_safe_url(url: str) -> bool:
    """Check an endpoint URL without raising."""
    try:
        validate_endpoint_url(url)
        return True
    except URLValidationError:
        return False
