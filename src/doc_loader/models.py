"""Request and directive shapes shared by the loader components."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HttpMethod(str, Enum):
    """HTTP methods a navigation may use."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    PATCH = "PATCH"


class NavigationRequest(BaseModel):
    """A request to navigate to a document.

    ``headers`` keeps the caller's order and may repeat a name; the transport
    request built from it keeps the last value for each name.
    """

    model_config = ConfigDict(frozen=True)

    target: str
    method: HttpMethod = HttpMethod.GET
    body: bytes | None = None
    headers: tuple[tuple[str, str], ...] = ()
    source: Any = None  # Originating Document, if any

    @classmethod
    def get(cls, target: str, source: Any = None) -> "NavigationRequest":
        """Create a GET request for the given address."""
        return cls(target=target, source=source)

    @classmethod
    def post(
        cls,
        target: str,
        body: bytes,
        content_type: str = "application/x-www-form-urlencoded",
        source: Any = None,
    ) -> "NavigationRequest":
        """Create a POST request carrying a body of the given type."""
        return cls(
            target=target,
            method=HttpMethod.POST,
            body=body,
            headers=(("Content-Type", content_type),),
            source=source,
        )


class TransportRequest(BaseModel):
    """The request shape handed to a requester."""

    address: str
    method: HttpMethod = HttpMethod.GET
    body: bytes | None = None
    headers: dict[str, str] = Field(default_factory=dict)


@dataclass(frozen=True)
class RefreshDirective:
    """Delay and target parsed from a meta refresh element."""

    delay: int  # Seconds
    url: str  # Absolute target
    base_url: str  # Address of the document carrying the directive

    @property
    def is_self_refresh(self) -> bool:
        return self.url == self.base_url
