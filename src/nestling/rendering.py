"""Rendering — hands the composed app to a view layer.

``App.run()`` ends by mounting the root view through a ``Renderer``. The
default renderer uses kida: the root view is a template (by name, or an
already compiled one) rendered with the router, store and services in
its context. Each service is also available under its own key, so a
template can write ``{{ users_service }}`` directly.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from kida import Environment, FileSystemLoader

from nestling.config import AppConfig


class Renderer(Protocol):
    """Protocol for view layers.

    No base class required. The app checks the shape, not the lineage.
    """

    def mount(
        self,
        view: Any,
        *,
        app: Any,
        router: Any,
        store: Any,
        services: Mapping[str, Any],
    ) -> Any: ...


def create_environment(config: AppConfig) -> Environment:
    """Create a kida Environment from app configuration."""
    return Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )


class KidaRenderer:
    """Render the root view as a kida template."""

    __slots__ = ("env",)

    def __init__(self, env: Environment) -> None:
        self.env = env

    def mount(
        self,
        view: Any,
        *,
        app: Any,
        router: Any,
        store: Any,
        services: Mapping[str, Any],
    ) -> str:
        template = self.env.get_template(view) if isinstance(view, str) else view
        context = {
            **services,
            "app": app,
            "router": router,
            "store": store,
            "services": services,
        }
        return template.render(context)
