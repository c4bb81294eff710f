"""Exceptions raised by the network logger."""

import httpx


class SinkError(OSError):
    """The trace file (or its directory) couldn't be created or opened."""


class NoResponseError(httpx.TransportError):
    """The delegate transport produced neither a response nor an error."""

    def __init__(self, message: str = "No response", *, request: httpx.Request | None = None):
        super().__init__(message, request=request)
