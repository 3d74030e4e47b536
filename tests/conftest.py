"""Shared helpers for loader tests."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from doc_loader.config import FetcherConfig, LoaderConfig
from doc_loader.context import BrowsingContext
from doc_loader.document import Document
from doc_loader.fetcher.base import BaseRequester, Response
from doc_loader.fetcher.http_fetcher import HttpRequester
from doc_loader.loader import DocumentLoader
from doc_loader.models import TransportRequest


def refresh_page(content: str, title: str = "refresh") -> str:
    return (
        f"<html><head><title>{title}</title>"
        f'<meta http-equiv="refresh" content="{content}"></head>'
        "<body></body></html>"
    )


def plain_page(title: str = "plain") -> str:
    return f"<html><head><title>{title}</title></head><body><p>{title}</p></body></html>"


class RecordingContext(BrowsingContext):
    """Context that remembers every document it builds."""

    def __init__(self, loader: DocumentLoader):
        super().__init__(loader)
        self.documents: list[Document] = []
        self.blank_urls: list[str] = []

    async def open_from_response(self, response, cancel=None):
        document = await super().open_from_response(response, cancel)
        self.documents.append(document)
        return document

    async def open_blank(self, url, cancel=None):
        document = await super().open_blank(url, cancel)
        self.blank_urls.append(url)
        self.documents.append(document)
        return document


class StaticRequester(BaseRequester):
    """Serves in-memory pages and keeps every response it hands out."""

    def __init__(self, pages: dict[str, str]):
        self.pages = pages
        self.requests: list[TransportRequest] = []
        self.responses: list[Response] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass

    def supports_scheme(self, scheme: str) -> bool:
        return scheme in ("http", "https")

    async def request(self, request: TransportRequest) -> Response:
        self.requests.append(request)
        body = self.pages.get(request.address)
        response = Response(
            request.address,
            status_code=200 if body is not None else 404,
            headers={"Content-Type": "text/html; charset=utf-8"},
            content=(body or "").encode(),
        )
        self.responses.append(response)
        return response


class PageServer:
    """httpx mock transport serving a dict of pages.

    A page value may be a string or a callable taking the request count for
    that URL, which lets a page change between visits.
    """

    def __init__(self, pages: dict[str, str | Callable[[int], str]]):
        self.pages = pages
        self.requests: list[httpx.Request] = []
        self.visits: dict[str, int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        count = self.visits.get(url, 0)
        self.visits[url] = count + 1
        page = self.pages.get(url)
        if page is None:
            return httpx.Response(404, html="<html><body>not found</body></html>")
        if callable(page):
            page = page(count)
        return httpx.Response(200, html=page)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def make_context(
    server: PageServer,
    config: LoaderConfig | None = None,
    **loader_kwargs,
) -> RecordingContext:
    requester = HttpRequester(FetcherConfig(), transport=server.transport())
    loader = DocumentLoader([requester], config=config, **loader_kwargs)
    return RecordingContext(loader)


@pytest.fixture
def sleeps(monkeypatch) -> list[float]:
    """Replace the refresh delay with a recorder."""
    recorded: list[float] = []

    async def fake_sleep(delay, cancel=None):
        if cancel is not None:
            cancel.raise_if_cancelled()
        recorded.append(delay)

    monkeypatch.setattr("doc_loader.loader.sleep", fake_sleep)
    return recorded
