"""URL manipulation utilities."""

from urllib.parse import urljoin, urlparse


def get_scheme(url: str) -> str:
    """Return the lower-cased scheme of a URL, or an empty string."""
    return urlparse(url).scheme.lower()


def is_absolute_url(url: str) -> bool:
    """Check if a URL carries its own scheme."""
    return bool(get_scheme(url))


def resolve_url(base_url: str, href: str) -> str:
    """Resolve a potentially relative URL against ``base_url``."""
    if is_absolute_url(href):
        return href
    return urljoin(base_url, href)
