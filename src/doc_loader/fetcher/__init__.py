"""Transports and the download primitive."""

from doc_loader.fetcher.base import BaseLoader, BaseRequester, Download, Response
from doc_loader.fetcher.http_fetcher import HttpRequester, HttpResponse

__all__ = [
    "BaseLoader",
    "BaseRequester",
    "Download",
    "Response",
    "HttpRequester",
    "HttpResponse",
]
