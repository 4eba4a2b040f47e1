"""Nestling application class — the composition root.

Mutable during setup (module registration, interceptors, guards).
Frozen when ``app.run()`` assembles the route tree, the store and the
service table and hands them to the renderer.
"""

import logging
import threading
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, ClassVar, Literal

import httpx

from nestling.client import Interceptor, RejectingTransport, create_client
from nestling.config import AppConfig
from nestling.hierarchy import build_routes, build_store
from nestling.module import Module
from nestling.registry import ModuleRegistry
from nestling.rendering import KidaRenderer, Renderer, create_environment
from nestling.routing.router import Router
from nestling.services import inject_services
from nestling.store import Store

logger = logging.getLogger("nestling.app")


class App:
    """The nestling application.

    Usage::

        app = App(AppConfig(service_prefix="https://api.example.com/"))
        app.add_module(users).add_module(shop)
        app.request_interceptor(add_token)
        app.run("index.html")

    Every ``add_*`` / ``set_*`` method returns the app for chaining.
    Registration errors propagate to the caller and are meant to stop
    the bootstrap.
    """

    __slots__ = (
        "_client",
        "_frozen",
        "_mounted",
        "_registry",
        "_renderer",
        "_router",
        "_services",
        "_status",
        "_store",
        "_transport",
        "config",
    )

    _shared: ClassVar["App | None"] = None
    _shared_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        renderer: Renderer | None = None,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._registry = ModuleRegistry()
        # A caller-supplied client keeps its own transport; transport
        # errors then bypass the rejected handlers.
        self._transport: RejectingTransport | None = None
        if client is None:
            self._transport = RejectingTransport(transport or httpx.AsyncHTTPTransport())
            client = create_client(self.config, self._transport)
        self._client: httpx.AsyncClient = client
        self._router = Router()
        self._renderer: Renderer | None = renderer
        self._status: Literal["stop", "start"] = "stop"
        self._frozen = False

        # Set by run()
        self._store: Store | None = None
        self._services: dict[str, Any] = {}
        self._mounted: Any = None

        if self.config.debug:
            logging.getLogger("nestling").setLevel(self.config.log_level.upper())

    @classmethod
    def start(cls, config: AppConfig | None = None) -> "App":
        """Return the shared app, creating it on first call.

        Later calls return the same instance and ignore *config*.
        Prefer constructing ``App`` explicitly in the entry point and
        passing it along; this is for scripts that want one app per
        process without threading it through.
        """
        if cls._shared is not None:
            return cls._shared
        with cls._shared_lock:
            if cls._shared is None:
                cls._shared = cls(config)
            return cls._shared

    @classmethod
    def reset_shared(cls) -> None:
        """Forget the shared app so the next ``start()`` builds a new one."""
        with cls._shared_lock:
            cls._shared = None

    # -- Module registration --

    def add_module(
        self,
        module: Module | Mapping[str, Any],
        *,
        parent: str | None = None,
    ) -> "App":
        """Register a module (and its children) with the app.

        Args:
            module: A ``Module`` or an equivalent mapping.
            parent: Attach under an already registered module.

        Raises ``MissingNameError``, ``DuplicateNameError`` or
        ``UnknownParentError``; nothing is registered when it does.
        """
        self._check_not_frozen()
        self._registry.register(module, parent)
        return self

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    # -- Service client --

    @property
    def client(self) -> httpx.AsyncClient:
        """The shared client every service factory receives."""
        return self._client

    def set_service_prefix(self, prefix: str = "/") -> "App":
        """Set the base URL of the shared client."""
        self._client.base_url = prefix
        return self

    def request_interceptor(
        self,
        on_fulfilled: Callable[..., Any],
        on_rejected: Callable[[Exception], Any] | None = None,
    ) -> "App":
        """Run ``on_fulfilled(request, app)`` before every request is sent."""
        self._client.event_hooks["request"].append(
            Interceptor(on_fulfilled, on_rejected, self)
        )
        return self

    def response_interceptor(
        self,
        on_fulfilled: Callable[..., Any],
        on_rejected: Callable[[Exception], Any] | None = None,
    ) -> "App":
        """Run ``on_fulfilled(response, app)`` on every response received.

        When *on_rejected* is given it receives what went wrong instead:
        an ``httpx.HTTPStatusError`` for a 4xx or 5xx response, or the
        ``httpx.TransportError`` of a request that never got a response.
        For the latter, returning an ``httpx.Response`` recovers the
        request with it.
        """
        self._client.event_hooks["response"].append(
            Interceptor(on_fulfilled, on_rejected, self, reject_error_status=True)
        )
        if on_rejected is not None and self._transport is not None:
            self._transport.on_rejected.append(on_rejected)
        return self

    # -- Router --

    @property
    def router(self) -> Router:
        return self._router

    def add_router_guard(self, fn: Callable[[Router], Any]) -> "App":
        """Call ``fn(router)`` once so it can attach navigation guards."""
        fn(self._router)
        return self

    # -- Views --

    def routes(self) -> list[dict[str, Any]]:
        """The nested route tree of the registered modules."""
        return build_routes(self._registry.entries())

    def store_modules(self) -> dict[str, dict[str, Any]]:
        """The namespaced store tree of the registered modules."""
        return build_store(self._registry.entries())

    @property
    def store(self) -> Store | None:
        """The store handle, or ``None`` before ``run()``."""
        return self._store

    @property
    def services(self) -> Mapping[str, Any]:
        """Injected services by derived key (empty before ``run()``)."""
        return MappingProxyType(self._services)

    @property
    def status(self) -> Literal["stop", "start"]:
        return self._status

    @property
    def mounted(self) -> Any:
        """Whatever the renderer returned from mounting the root view."""
        return self._mounted

    # -- Lifecycle --

    def run(self, root_view: Any) -> "App":
        """Compose the app and mount *root_view*.

        Injects services, installs the route tree into the router, builds
        the store, then hands everything to the renderer. The app is
        frozen once the view is mounted.

        If any step raises, the app is put back to its unstarted state
        (router guards are kept) and the error propagates, so the cause
        can be fixed and ``run()`` called again.
        """
        self._check_not_frozen()

        entries = self._registry.entries()
        try:
            services = inject_services(
                entries, self._client, self.config.service_key_format
            )
            routes = build_routes(entries)
            store = Store(modules=build_store(entries))

            self._router.add_routes(routes)
            self._services = services
            self._store = store
            self._status = "start"
            logger.info(
                "Started with %d modules, %d routes, %d services",
                len(entries),
                len(self._router.records),
                len(services),
            )

            renderer = self._renderer or KidaRenderer(create_environment(self.config))
            self._mounted = renderer.mount(
                root_view,
                app=self,
                router=self._router,
                store=store,
                services=self.services,
            )
        except Exception:
            logger.warning("Start failed, app left unstarted")
            self._router.clear_routes()
            self._services = {}
            self._store = None
            self._mounted = None
            self._status = "stop"
            raise

        self._frozen = True
        return self

    async def aclose(self) -> None:
        """Close the shared client."""
        await self._client.aclose()

    # -- Internal --

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has been started. "
                "Register modules before calling app.run()."
            )
            raise RuntimeError(msg)
