"""
Interceptor - an httpx transport that records every exchange it forwards.

The TransportRegistry offers each outgoing request to should_intercept(). When
accepted, the request is cloned, tagged as already handled, and sent through a
separate delegate transport that never routes back through the registry. The
caller gets the delegate's response (or exception) back untouched.

The response body is read in full before it is handed back, so a streamed
response (e.g. server-sent events via client.stream()) reaches the caller only
once the server has finished sending it.
"""

import time

import httpx

from .config import SettingsHolder, matches_endpoints
from .console import Console
from .errors import NoResponseError
from .models import TraceRecord
from .recorder import Recorder

# Request extension set on forwarded clones; its presence means "don't intercept again"
HANDLED_EXTENSION = "netlog.handled"


def _decoded(headers: httpx.Headers, raw: bytes) -> bytes:
    """Undo Content-Encoding for display. Falls back to the raw bytes."""
    try:
        return httpx.Response(200, headers=headers, content=raw).read()
    except httpx.DecodingError:
        return raw


class Interceptor(httpx.AsyncBaseTransport):
    def __init__(self, recorder: Recorder, settings: SettingsHolder,
                 delegate: httpx.AsyncBaseTransport | None = None,
                 console: Console | None = None):
        self.recorder = recorder
        self.settings = settings
        self.delegate = delegate or httpx.AsyncHTTPTransport()
        self.console = console or recorder.console

    def should_intercept(self, request: httpx.Request) -> bool:
        if request.extensions.get(HANDLED_EXTENSION):
            return False
        if not self.settings.enabled:
            return False
        return matches_endpoints(str(request.url), self.settings.get().allowed_endpoints)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self.forward(request)

    async def forward(self, request: httpx.Request) -> httpx.Response:
        """Send the request through the delegate, record it, relay the outcome once.

        Cancellation propagates straight through: nothing is recorded for a
        cancelled request.
        """
        start = time.perf_counter()
        body = await request.aread()

        forwarded = httpx.Request(
            request.method,
            request.url,
            headers=request.headers,
            stream=request.stream,
            extensions={**request.extensions, HANDLED_EXTENSION: True},
        )

        try:
            response = await self.delegate.handle_async_request(forwarded)
            if response is None:
                raise NoResponseError(request=request)
            # Raw bytes straight off the stream: the caller's client does its own content decoding
            raw = b"".join([chunk async for chunk in response.stream])
            await response.aclose()
        except Exception as e:
            elapsed = time.perf_counter() - start
            self._record(TraceRecord(
                method=request.method,
                url=str(request.url),
                request_headers=request.headers.multi_items(),
                request_body=body,
                elapsed=elapsed,
                error=str(e) or type(e).__name__,
            ))
            raise

        elapsed = time.perf_counter() - start
        self._record(TraceRecord(
            method=request.method,
            url=str(request.url),
            request_headers=request.headers.multi_items(),
            request_body=body,
            status_code=response.status_code,
            response_headers=response.headers.multi_items(),
            response_body=_decoded(response.headers, raw),
            elapsed=elapsed,
        ))

        return httpx.Response(
            response.status_code,
            headers=response.headers,
            stream=httpx.ByteStream(raw),
            extensions=response.extensions,
        )

    def _record(self, record: TraceRecord):
        try:
            self.recorder.record(record)
        except Exception as e:
            self.console.emit(f"Record error: {e}")

    async def aclose(self):
        await self.delegate.aclose()
