"""Error types raised by the document loader."""


class DocLoaderError(Exception):
    """Base class for document loader errors."""


class OperationCancelledError(DocLoaderError):
    """A navigation was cancelled through its cancellation token."""

    def __init__(self, message: str = "The operation was cancelled."):
        super().__init__(message)


class RefreshDirectiveError(DocLoaderError, ValueError):
    """The content of a meta refresh element could not be parsed."""

    def __init__(self, content: str | None, reason: str):
        self.content = content
        self.reason = reason
        super().__init__(f"Invalid meta refresh content {content!r}: {reason}")


class RedirectLimitExceededError(DocLoaderError):
    """A chain of meta refresh directives exceeded the configured cap."""

    def __init__(self, limit: int, url: str):
        self.limit = limit
        self.url = url
        super().__init__(f"Meta refresh limit of {limit} exceeded at {url}")
