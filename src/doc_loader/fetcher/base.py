"""Base classes for requesters, responses and downloads."""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from doc_loader.cancellation import cancel_soon
from doc_loader.errors import OperationCancelledError
from doc_loader.models import TransportRequest
from doc_loader.utils.url_utils import get_scheme

logger = logging.getLogger(__name__)

RequestFilter = Callable[[TransportRequest], bool]


class Response:
    """A transport response that must be closed exactly once.

    The base class serves an in-memory body; transports override
    :meth:`_read` and :meth:`_close` to stream from their own source.
    """

    def __init__(
        self,
        address: str,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
        content: bytes = b"",
    ):
        self.address = address
        self.status_code = status_code
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self._content = content
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def content_type(self) -> str:
        value = self.headers.get("content-type", "text/html")
        return value.split(";", 1)[0].strip().lower() or "text/html"

    @property
    def encoding(self) -> str | None:
        """Charset declared in the Content-Type header, if any."""
        for param in self.headers.get("content-type", "").split(";")[1:]:
            key, _, value = param.partition("=")
            if key.strip().lower() == "charset" and value.strip():
                return value.strip().strip('"').lower()
        return None

    async def read(self) -> bytes:
        """Read the full body."""
        if self._closed:
            raise RuntimeError(f"Response for {self.address} has been closed")
        return await self._read()

    async def aclose(self) -> None:
        """Release the response. Later calls do nothing."""
        if self._closed:
            return
        self._closed = True
        await self._close()

    async def _read(self) -> bytes:
        return self._content

    async def _close(self) -> None:
        self._content = b""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


class Download:
    """An in-flight request that resolves to a response or to ``None``.

    :meth:`cancel` may be called any number of times and from any thread.
    """

    def __init__(
        self,
        task: asyncio.Future,
        request: TransportRequest,
        originator: Any = None,
    ):
        self._task = task
        self._cancel = cancel_soon(task)
        self._lock = threading.Lock()
        self._cancel_requested = False
        self.request = request
        self.originator = originator

    @classmethod
    def completed(
        cls,
        request: TransportRequest,
        originator: Any = None,
        response: Response | None = None,
    ) -> "Download":
        """Create a download that has already resolved."""
        future = asyncio.get_running_loop().create_future()
        future.set_result(response)
        return cls(future, request, originator)

    @property
    def task(self) -> asyncio.Future:
        return self._task

    @property
    def is_running(self) -> bool:
        return not self._task.done()

    @property
    def is_cancelled(self) -> bool:
        return self._task.cancelled()

    def cancel(self) -> None:
        """Abort the request if it is still running."""
        with self._lock:
            if self._cancel_requested:
                return
            self._cancel_requested = True
        if not self._task.done():
            logger.debug("Cancelling download of %s", self.request.address)
            self._cancel()

    async def wait(self) -> Response | None:
        """Wait for the response.

        Raises :class:`OperationCancelledError` if :meth:`cancel` stopped the
        download before it completed.
        """
        try:
            return await self._task
        except asyncio.CancelledError:
            if self._cancel_requested and self._task.cancelled():
                raise OperationCancelledError() from None
            raise


class BaseRequester(ABC):
    """Abstract base class for transports that turn requests into responses."""

    @abstractmethod
    def supports_scheme(self, scheme: str) -> bool:
        """Check if this requester can serve URLs with the given scheme."""
        ...

    @abstractmethod
    async def request(self, request: TransportRequest) -> Response:
        """Perform the request and return its response."""
        ...

    @abstractmethod
    async def __aenter__(self):
        """Async context manager entry."""
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        pass


class BaseLoader:
    """Starts downloads through the first requester that supports a URL."""

    def __init__(
        self,
        requesters: Sequence[BaseRequester],
        request_filter: RequestFilter | None = None,
    ):
        self.requesters = list(requesters)
        self.request_filter = request_filter

    def download(self, request: TransportRequest, originator: Any = None) -> Download:
        """Start downloading ``request`` without waiting for it.

        The download resolves to ``None`` when the filter rejects the request
        or when no requester supports its scheme. Must be called from a
        running event loop.
        """
        if self.request_filter is not None and not self.request_filter(request):
            logger.debug("Request to %s rejected by filter", request.address)
            return Download.completed(request, originator)

        requester = self._find_requester(request.address)
        if requester is None:
            logger.debug("No requester supports %s", request.address)
            return Download.completed(request, originator)

        logger.debug("Starting %s %s", request.method.value, request.address)
        task = asyncio.ensure_future(requester.request(request))
        return Download(task, request, originator)

    def _find_requester(self, address: str) -> BaseRequester | None:
        scheme = get_scheme(address)
        for requester in self.requesters:
            if requester.supports_scheme(scheme):
                return requester
        return None
