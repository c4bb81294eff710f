"""
Transport registry - the host application's httpx transport.

    registry = TransportRegistry()
    client = httpx.AsyncClient(transport=registry)

Every request is offered to the registered interceptors in order; the first one
whose should_intercept() accepts it handles it. Anything left over goes to the
default transport.
"""

import threading

import httpx


class TransportRegistry(httpx.AsyncBaseTransport):
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self.transport = transport or httpx.AsyncHTTPTransport()
        self._interceptors = []
        self._lock = threading.Lock()

    def register(self, interceptor):
        with self._lock:
            if interceptor not in self._interceptors:
                self._interceptors.append(interceptor)

    def unregister(self, interceptor):
        with self._lock:
            if interceptor in self._interceptors:
                self._interceptors.remove(interceptor)

    def is_registered(self, interceptor) -> bool:
        with self._lock:
            return interceptor in self._interceptors

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            interceptors = list(self._interceptors)

        for interceptor in interceptors:
            if interceptor.should_intercept(request):
                return await interceptor.handle_async_request(request)
        return await self.transport.handle_async_request(request)

    async def aclose(self):
        # Interceptors belong to their NetworkLogger; only the default transport is ours
        await self.transport.aclose()
