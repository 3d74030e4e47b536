"""Parsed documents built from responses."""

import logging
from typing import Any

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

BLANK_HTML = "<html><head></head><body></body></html>"


class Document:
    """A navigable HTML document owned by whoever opened it.

    Call :meth:`close` (or use the document as a context manager) once it is
    no longer needed; closing releases the parsed tree.
    """

    def __init__(
        self,
        url: str,
        soup: BeautifulSoup,
        status_code: int = 200,
        content_type: str = "text/html",
        source: Any = None,
    ):
        self.url = url
        self.status_code = status_code
        self.content_type = content_type
        self.source = source
        self._soup: BeautifulSoup | None = soup

    @property
    def closed(self) -> bool:
        return self._soup is None

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            raise RuntimeError(f"Document for {self.url} has been closed")
        return self._soup

    @property
    def title(self) -> str | None:
        title = self.soup.find(lambda tag: tag.name.lower() == "title")
        if title is None:
            return None
        return title.get_text(strip=True) or None

    def get_elements_by_tag_name(self, name: str) -> list[Tag]:
        """Return all elements with the given tag name in document order.

        Tag names match case-insensitively.
        """
        name = name.lower()
        return self.soup.find_all(lambda tag: tag.name.lower() == name)

    def close(self) -> None:
        """Release the parsed tree. Later calls do nothing."""
        if self._soup is None:
            return
        self._soup.decompose()
        self._soup = None
        logger.debug("Closed document %s", self.url)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Document {self.url} ({state})>"


def get_attribute(element: Tag, name: str) -> str | None:
    """Read an attribute with a case-insensitive name match."""
    name = name.lower()
    for key, value in element.attrs.items():
        if key.lower() == name:
            if isinstance(value, list):
                return " ".join(value)
            return value
    return None


def parse_document(
    content: bytes | str,
    url: str,
    encoding: str | None = None,
    status_code: int = 200,
    content_type: str = "text/html",
    source: Any = None,
) -> Document:
    """Build a document from markup."""
    if isinstance(content, bytes):
        soup = BeautifulSoup(content, "lxml", from_encoding=encoding)
    else:
        soup = BeautifulSoup(content, "lxml")
    return Document(
        url=url,
        soup=soup,
        status_code=status_code,
        content_type=content_type,
        source=source,
    )


def blank_document(url: str, source: Any = None) -> Document:
    """Build an empty document addressed at ``url``."""
    return parse_document(BLANK_HTML, url, source=source)
