"""Nestling — compose an application out of independently authored modules.

Each module declares a route, a store, a service factory and nested
children. Nestling merges them into a route tree, a namespaced store and
a table of injected services.

Basic usage::

    from nestling import App, Module

    app = App()
    app.add_module(
        Module(
            "shop",
            route={"path": "/shop"},
            store={"state": {"open": True}},
            service=lambda client: ShopApi(client),
            children=[Module("cart", route={"path": "cart"})],
        )
    )
    app.run("index.html")
"""

__version__ = "0.1.0-dev"
__all__ = [
    "App",
    "AppConfig",
    "DuplicateNameError",
    "MissingNameError",
    "Module",
    "ModuleRegistry",
    "NavigationAborted",
    "NestlingError",
    "NotFound",
    "OrphanModuleError",
    "RegistrationError",
    "Router",
    "Store",
    "UnknownParentError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import nestling`` fast while providing a clean top-level API.
    """
    if name == "App":
        from nestling.app import App

        return App

    if name == "AppConfig":
        from nestling.config import AppConfig

        return AppConfig

    if name == "Module":
        from nestling.module import Module

        return Module

    if name == "ModuleRegistry":
        from nestling.registry import ModuleRegistry

        return ModuleRegistry

    if name == "Router":
        from nestling.routing.router import Router

        return Router

    if name == "Store":
        from nestling.store import Store

        return Store

    if name in (
        "DuplicateNameError",
        "MissingNameError",
        "NavigationAborted",
        "NestlingError",
        "NotFound",
        "OrphanModuleError",
        "RegistrationError",
        "UnknownParentError",
    ):
        from nestling import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
