"""Shared service client and its interceptor pipeline.

The client is a plain ``httpx.AsyncClient``. Interceptors are httpx event
hooks wrapped so that each handler also receives the owning app, and so
that failures, error responses and broken connections included, can be
routed to a rejected handler.

Usage::

    client = create_client(AppConfig(service_prefix="https://api.example.com/"))
    client.event_hooks["request"].append(Interceptor(add_token, None, app))
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

import httpx

from nestling.config import AppConfig

logger = logging.getLogger("nestling.client")


def create_client(
    config: AppConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared client from app configuration.

    *transport* defaults to a ``RejectingTransport`` over httpx's own
    transport, so response interceptors can see connection failures.
    """
    return httpx.AsyncClient(
        base_url=config.service_prefix,
        timeout=config.service_timeout,
        headers=list(config.service_headers),
        transport=transport or RejectingTransport(httpx.AsyncHTTPTransport()),
    )


class RejectingTransport(httpx.AsyncBaseTransport):
    """Transport wrapper that hands transport errors to rejected handlers.

    httpx raises ``ConnectError``, ``ReadTimeout`` and friends before any
    response hook runs. This wrapper catches them and calls each handler
    in ``on_rejected`` with the error. The first handler that returns an
    ``httpx.Response`` recovers the request with it; if none does, the
    original error is re-raised.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport) -> None:
        self._transport = transport
        self.on_rejected: list[Callable[[Exception], Any]] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        try:
            return await self._transport.handle_async_request(request)
        except httpx.TransportError as exc:
            if not self.on_rejected:
                raise
            logger.debug("Transport error for %s %s: %s", request.method, request.url, exc)
            for handler in self.on_rejected:
                result = await invoke(handler, exc)
                if isinstance(result, httpx.Response):
                    return result
            raise

    async def aclose(self) -> None:
        await self._transport.aclose()


class Interceptor:
    """An httpx event hook bound to an app.

    ``on_fulfilled(value, app)`` runs for every request (or response).
    Both handlers may be sync or async. If ``on_fulfilled`` raises and
    ``on_rejected`` is set, ``on_rejected(exc)`` handles the error; a
    normal return from it recovers. Without ``on_rejected`` the error
    propagates out of the httpx call.

    With ``reject_error_status`` set, a 4xx or 5xx response skips
    ``on_fulfilled`` and reaches ``on_rejected`` as an
    ``httpx.HTTPStatusError``. The response itself is still returned to
    the caller when the handler returns normally.
    """

    __slots__ = ("_app", "on_fulfilled", "on_rejected", "reject_error_status")

    def __init__(
        self,
        on_fulfilled: Callable[..., Any],
        on_rejected: Callable[[Exception], Any] | None,
        app: Any,
        *,
        reject_error_status: bool = False,
    ) -> None:
        self.on_fulfilled = on_fulfilled
        self.on_rejected = on_rejected
        self.reject_error_status = reject_error_status
        self._app = app

    async def __call__(self, value: httpx.Request | httpx.Response) -> None:
        try:
            if (
                self.reject_error_status
                and self.on_rejected is not None
                and isinstance(value, httpx.Response)
                and value.is_error
            ):
                value.raise_for_status()
            await invoke(self.on_fulfilled, value, self._app)
        except Exception as exc:
            if self.on_rejected is None:
                raise
            logger.debug("Interceptor rejected %r: %s", value, exc)
            await invoke(self.on_rejected, exc)


async def invoke(handler: Callable[..., Any], *args: Any) -> Any:
    """Call a sync or async handler and await the result if needed."""
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
