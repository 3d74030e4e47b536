"""Browsing context that builds documents for the loader."""

import logging
from contextlib import AsyncExitStack
from typing import TYPE_CHECKING

from doc_loader.cancellation import CancellationToken, run_cancellable
from doc_loader.config import AppConfig
from doc_loader.document import Document, blank_document, parse_document
from doc_loader.fetcher.base import Response
from doc_loader.fetcher.http_fetcher import HttpRequester
from doc_loader.models import NavigationRequest

if TYPE_CHECKING:
    from doc_loader.loader import DocumentLoader

logger = logging.getLogger(__name__)


class BrowsingContext:
    """Opens documents from responses and addresses.

    Used as an async context manager, the context enters the loader's
    requesters on entry and closes them on exit.
    """

    def __init__(self, loader: "DocumentLoader"):
        self.loader = loader
        self._stack: AsyncExitStack | None = None

    @classmethod
    def from_config(cls, config: AppConfig) -> "BrowsingContext":
        """Create a context with an HTTP requester configured from ``config``."""
        from doc_loader.loader import DocumentLoader

        loader = DocumentLoader([HttpRequester(config.fetcher)], config=config.loader)
        return cls(loader)

    async def __aenter__(self):
        self._stack = AsyncExitStack()
        try:
            for requester in self.loader.requesters:
                await self._stack.enter_async_context(requester)
        except BaseException:
            await self._stack.aclose()
            self._stack = None
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._stack is not None:
            await self._stack.aclose()
            self._stack = None

    async def open_from_response(
        self, response: Response, cancel: CancellationToken | None = None
    ) -> Document:
        """Build a document from a response body.

        The response stays owned by the caller.
        """
        content = await run_cancellable(response.read(), cancel)
        logger.debug("Parsing %d bytes from %s", len(content), response.address)
        return parse_document(
            content,
            url=response.address,
            encoding=response.encoding,
            status_code=response.status_code,
            content_type=response.content_type,
        )

    async def open_blank(self, url: str, cancel: CancellationToken | None = None) -> Document:
        """Create an empty document addressed at ``url``."""
        if cancel is not None:
            cancel.raise_if_cancelled()
        return blank_document(url)

    async def open_from_url(self, url: str, cancel: CancellationToken | None = None) -> Document:
        """Load and build the document at ``url`` without following refreshes."""
        return await self.loader.load(self, NavigationRequest.get(url), cancel)

    async def navigate(
        self,
        request: NavigationRequest | str,
        cancel: CancellationToken | None = None,
    ) -> Document:
        """Open a request (or address) through the loader."""
        if isinstance(request, str):
            request = NavigationRequest.get(request)
        return await self.loader.open(self, request, cancel)
