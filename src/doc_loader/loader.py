"""Document loader: fetches a navigation request and follows meta refreshes."""

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from doc_loader.cancellation import CancellationToken, sleep
from doc_loader.config import LoaderConfig
from doc_loader.document import Document
from doc_loader.errors import RedirectLimitExceededError, RefreshDirectiveError
from doc_loader.fetcher.base import BaseLoader, BaseRequester, Download, RequestFilter
from doc_loader.models import NavigationRequest, RefreshDirective, TransportRequest
from doc_loader.refresh import read_refresh_directive

if TYPE_CHECKING:
    from doc_loader.context import BrowsingContext

logger = logging.getLogger(__name__)

RequestTranslator = Callable[[NavigationRequest], TransportRequest]


def translate_request(request: NavigationRequest) -> TransportRequest:
    """Map a navigation request onto the transport request shape.

    Headers are copied in order, so a repeated name keeps its last value.
    """
    headers: dict[str, str] = {}
    for name, value in request.headers:
        headers[name] = value

    return TransportRequest(
        address=request.target,
        method=request.method,
        body=request.body,
        headers=headers,
    )


class _DocumentSlot:
    """Holds the one document the refresh loop owns at a time."""

    def __init__(self, document: Document):
        self._document: Document | None = document

    @property
    def current(self) -> Document:
        if self._document is None:
            raise RuntimeError("No document is held")
        return self._document

    def assign(self, document: Document) -> None:
        if self._document is not None:
            raise RuntimeError("Release the held document before assigning another")
        self._document = document

    def release(self) -> None:
        document, self._document = self._document, None
        if document is not None:
            document.close()

    def detach(self) -> Document:
        """Hand the held document over to the caller."""
        document = self.current
        self._document = None
        return document


class DocumentLoader(BaseLoader):
    """Loads documents for a browsing context.

    ``translate`` controls how a :class:`NavigationRequest` becomes a
    :class:`TransportRequest`; it defaults to :func:`translate_request`.
    """

    def __init__(
        self,
        requesters: Sequence[BaseRequester],
        config: LoaderConfig | None = None,
        request_filter: RequestFilter | None = None,
        translate: RequestTranslator = translate_request,
    ):
        super().__init__(requesters, request_filter)
        self.config = config or LoaderConfig()
        self.translate = translate

    def fetch(self, request: NavigationRequest) -> Download:
        """Start downloading ``request`` and return the in-flight download."""
        return self.download(self.translate(request), request.source)

    async def open(
        self,
        context: "BrowsingContext",
        request: NavigationRequest,
        cancel: CancellationToken | None = None,
    ) -> Document:
        """Open the document for ``request`` in ``context``.

        When ``follow_meta_refresh`` is enabled, meta refresh directives are
        followed until a document without one is reached. The returned
        document belongs to the caller. Raises
        :class:`~doc_loader.errors.OperationCancelledError` if ``cancel``
        fires before the navigation completes.
        """
        if request is None:
            raise ValueError("request must not be None")

        document, from_response = await self._load(context, request, cancel)
        if not from_response or not self.config.follow_meta_refresh:
            return document
        return await self._follow_refreshes(context, document, cancel)

    async def load(
        self,
        context: "BrowsingContext",
        request: NavigationRequest,
        cancel: CancellationToken | None = None,
    ) -> Document:
        """Open the document for ``request`` without following refreshes."""
        if request is None:
            raise ValueError("request must not be None")

        document, _ = await self._load(context, request, cancel)
        return document

    async def _load(
        self,
        context: "BrowsingContext",
        request: NavigationRequest,
        cancel: CancellationToken | None,
    ) -> tuple[Document, bool]:
        download = self.fetch(request)
        registration = cancel.register(download.cancel) if cancel is not None else None
        try:
            response = await download.wait()
        finally:
            if registration is not None:
                registration.dispose()

        if response is None:
            logger.debug("No response for %s, opening a blank document", request.target)
            document = await context.open_blank(request.target, cancel)
            document.source = request.source
            return document, False

        document = None
        try:
            async with response:
                document = await context.open_from_response(response, cancel)
        except BaseException:
            if document is not None:
                document.close()
            raise
        if document.source is None:
            document.source = request.source
        return document, True

    async def _follow_refreshes(
        self,
        context: "BrowsingContext",
        document: Document,
        cancel: CancellationToken | None,
    ) -> Document:
        slot = _DocumentSlot(document)
        limit = self.config.max_refreshes
        refreshes = 0
        try:
            while True:
                directive = self._read_directive(slot.current)
                if directive is None:
                    break
                if limit and refreshes >= limit:
                    raise RedirectLimitExceededError(limit, slot.current.url)

                logger.debug(
                    "Meta refresh on %s: %ds to %s",
                    directive.base_url,
                    directive.delay,
                    directive.url,
                )
                await sleep(directive.delay, cancel)

                slot.release()
                slot.assign(await context.open_from_url(directive.url, cancel))
                refreshes += 1

            if refreshes:
                logger.debug("Followed %d meta refresh(es) to %s", refreshes, slot.current.url)
            return slot.detach()
        finally:
            slot.release()

    def _read_directive(self, document: Document) -> RefreshDirective | None:
        try:
            return read_refresh_directive(document)
        except RefreshDirectiveError as e:
            if self.config.strict_refresh:
                raise
            logger.warning("Ignoring meta refresh on %s: %s", document.url, e.reason)
            return None
