"""Application configuration.

One frozen dataclass holds every knob: the shared service client, the
derived service keys, the renderer and diagnostics.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(service_prefix="https://api.example.com/", debug=True)
    """

    # Shared service client
    service_prefix: str = "/"
    service_timeout: float = 10.0
    service_headers: tuple[tuple[str, str], ...] = ()

    # Injected service keys, e.g. "users" -> "users_service"
    service_key_format: str = "{name}_service"

    # Rendering
    template_dir: str | Path = "templates"
    autoescape: bool = True

    # Diagnostics
    debug: bool = False
    log_level: str = "warning"
