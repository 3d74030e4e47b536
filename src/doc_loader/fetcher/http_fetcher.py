"""HTTP transport backed by httpx."""


import httpx

from doc_loader.config import FetcherConfig
from doc_loader.fetcher.base import BaseRequester, Response
from doc_loader.models import TransportRequest


class HttpResponse(Response):
    """Response streaming its body from an httpx response."""

    def __init__(self, response: httpx.Response):
        super().__init__(
            address=str(response.url),
            status_code=response.status_code,
            headers=response.headers,
        )
        self._response = response

    async def _read(self) -> bytes:
        return await self._response.aread()

    async def _close(self) -> None:
        await self._response.aclose()


class HttpRequester(BaseRequester):
    """Requester for http and https URLs."""

    def __init__(
        self,
        config: FetcherConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        """Initialize HTTP client."""
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=self.config.follow_redirects,
            timeout=self.config.timeout_ms / 1000,
            limits=httpx.Limits(max_connections=self.config.max_connections),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Clean up HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def supports_scheme(self, scheme: str) -> bool:
        return scheme in ("http", "https")

    async def request(self, request: TransportRequest) -> Response:
        """Send the request and return the response with its body unread."""
        if not self._client:
            raise RuntimeError("Requester not initialized. Use 'async with' context manager.")

        http_request = self._client.build_request(
            request.method.value,
            request.address,
            content=request.body,
            headers=request.headers,
        )
        response = await self._client.send(http_request, stream=True)
        return HttpResponse(response)
