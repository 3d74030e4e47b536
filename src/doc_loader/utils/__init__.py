"""Utility functions."""

from doc_loader.utils.url_utils import get_scheme, is_absolute_url, resolve_url

__all__ = [
    "get_scheme",
    "is_absolute_url",
    "resolve_url",
]
