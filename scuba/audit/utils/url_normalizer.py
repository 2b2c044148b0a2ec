"""URL normalization utility for link resolution and deduplication.

This module resolves raw anchor hrefs against the page they were found on,
canonicalises the result so equal pages compare equal, and filters out
links that cannot be audited (mail/phone/script schemes, in-page fragments
and URLs outside the origin allowlist).
"""

from typing import Iterable, Optional
from urllib.parse import urljoin, urlparse, urlunparse


class URLNormalizationError(Exception):
    """Raised when URL normalization fails."""
    pass


# Hrefs that never lead to another auditable page
EXCLUDED_SCHEMES = ('mailto:', 'tel:', 'javascript:')

DEFAULT_PORTS = {'http': 80, 'https': 443}


def _normalize_netloc(scheme: str, parsed) -> str:
    """Lower-case the host, encode IDN hosts and drop the default port."""
    hostname = parsed.hostname
    if not hostname:
        raise URLNormalizationError(f"URL missing host: {parsed.geturl()}")

    # Raises ValueError for out-of-range or non-numeric ports
    port = parsed.port

    if ':' in hostname:
        # IPv6 literal
        host = f"[{hostname}]"
    else:
        try:
            host = hostname.encode('idna').decode('ascii')
        except UnicodeError:
            host = hostname

    if port is None or port == DEFAULT_PORTS.get(scheme):
        return host
    return f"{host}:{port}"


def normalize(url: str) -> str:
    """Normalize an absolute URL for consistent deduplication and comparison.

    Args:
        url: The URL to normalize

    Returns:
        The normalized URL string

    Raises:
        URLNormalizationError: If the URL cannot be normalized

    Example:
        >>> normalize("HTTPS://WWW.Example.COM:443/About?x=1#team")
        "https://www.example.com/About?x=1"
    """
    if not url or not isinstance(url, str):
        raise URLNormalizationError("URL must be a non-empty string")

    url = url.strip()
    if not url:
        raise URLNormalizationError("URL cannot be empty or whitespace only")

    try:
        parsed = urlparse(url)

        scheme = parsed.scheme.lower()
        if not scheme:
            raise URLNormalizationError(f"URL missing scheme: {url}")
        if scheme not in DEFAULT_PORTS:
            raise URLNormalizationError(f"Unsupported URL scheme: {scheme}")
        if not parsed.netloc:
            raise URLNormalizationError(f"URL missing netloc: {url}")

        netloc = _normalize_netloc(scheme, parsed)

        path = parsed.path or '/'

        # Fragment is dropped (not sent to server); query kept as-is
        return urlunparse((scheme, netloc, path, parsed.params, parsed.query, ''))

    except URLNormalizationError:
        raise
    except Exception as e:
        raise URLNormalizationError(f"Failed to normalize URL '{url}': {e}")


def get_origin(url: str) -> str:
    """Extract the origin (scheme://host[:port]) from a URL.

    Raises:
        URLNormalizationError: If the URL is not a valid http(s) URL

    Example:
        >>> get_origin("https://www.example.com/path?x=1")
        "https://www.example.com"
    """
    parsed = urlparse(normalize(url))
    return f"{parsed.scheme}://{parsed.netloc}"


def is_excluded_href(href: Optional[str]) -> bool:
    """Check whether a raw href is skipped before resolution."""
    if not href:
        return True
    lowered = href.strip().lower()
    if not lowered:
        return True
    return lowered.startswith('#') or lowered.startswith(EXCLUDED_SCHEMES)


def normalize_link(
    href: Optional[str],
    base_url: str,
    allowed_origins: Iterable[str]
) -> Optional[str]:
    """Resolve an anchor href into an internal absolute URL.

    Args:
        href: Raw href attribute value (may be None)
        base_url: URL of the page the anchor was found on
        allowed_origins: Normalized origins considered internal

    Returns:
        The normalized absolute URL, or None when the link is excluded.
        Never raises: malformed hrefs are treated as excluded.
    """
    if is_excluded_href(href):
        return None

    try:
        resolved = normalize(urljoin(base_url, href.strip()))
        origin = get_origin(resolved)
    except (URLNormalizationError, ValueError):
        return None

    if origin not in set(allowed_origins):
        return None

    return resolved


def strip_origin(url: str, origins: Iterable[str] = ()) -> str:
    """Shorten a URL for display by removing its origin prefix.

    The root page is shown as '/'. URLs whose origin is not listed are
    returned unchanged; when no origins are given the URL's own origin is
    stripped.
    """
    try:
        origin = get_origin(url)
    except URLNormalizationError:
        return url

    origins = list(origins)
    if origins and origin not in origins:
        return url

    parsed = urlparse(url)
    display = parsed.path or '/'
    if parsed.query:
        display = f"{display}?{parsed.query}"
    return display


def get_path(url: str) -> str:
    """Return the path component of a URL ('/' when empty)."""
    try:
        return urlparse(url).path or '/'
    except ValueError:
        return '/'


def is_valid_http_url(url: str) -> bool:
    """Check if a URL is a valid HTTP/HTTPS URL."""
    try:
        normalize(url)
        return True
    except URLNormalizationError:
        return False
