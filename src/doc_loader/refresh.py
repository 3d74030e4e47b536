"""Meta refresh discovery and parsing."""

import re

from bs4 import Tag

from doc_loader.document import Document, get_attribute
from doc_loader.errors import RefreshDirectiveError
from doc_loader.models import RefreshDirective
from doc_loader.utils.url_utils import resolve_url

_SEPARATORS = re.compile(r"[; \t]+")
_SECONDS = re.compile(r"\+?\d+")
_URL_PREFIX = "url="


def find_refresh_meta(document: Document) -> Tag | None:
    """Return the first ``<meta http-equiv="refresh">`` element, if any."""
    for element in document.get_elements_by_tag_name("meta"):
        http_equiv = get_attribute(element, "http-equiv")
        if http_equiv is not None and http_equiv.lower() == "refresh":
            return element
    return None


def _parse_seconds(token: str, content: str) -> int:
    token = token.strip()
    if not _SECONDS.fullmatch(token):
        raise RefreshDirectiveError(content, f"delay {token!r} is not a non-negative integer")
    return int(token)


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_refresh_content(content: str | None, base_url: str) -> RefreshDirective:
    """Parse the ``content`` attribute of a meta refresh element.

    ``"5;url=/next"`` waits five seconds and targets ``/next`` resolved
    against ``base_url``; ``"0"`` refreshes ``base_url`` immediately. An empty
    value after ``url=`` also refreshes in place.
    """
    if content is None:
        raise RefreshDirectiveError(content, "missing content attribute")

    url = base_url
    if ";" in content:
        parts = [p for p in _SEPARATORS.split(content) if p]
        if not parts:
            raise RefreshDirectiveError(content, "no delay given")
        delay = _parse_seconds(parts[0], content)

        if len(parts) > 1 and parts[1][: len(_URL_PREFIX)].lower() == _URL_PREFIX:
            relative = _strip_quotes(parts[1][len(_URL_PREFIX):])
            if relative:
                url = resolve_url(base_url, relative)
    else:
        delay = _parse_seconds(content, content)

    return RefreshDirective(delay=delay, url=url, base_url=base_url)


def read_refresh_directive(document: Document) -> RefreshDirective | None:
    """Find and parse the refresh directive of ``document``."""
    element = find_refresh_meta(document)
    if element is None:
        return None
    return parse_refresh_content(get_attribute(element, "content"), document.url)
