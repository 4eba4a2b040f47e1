"""Service injection — one shared client, one value per module.

Each module may declare a service factory. The factory is called once,
with the shared ``httpx.AsyncClient``, and its result is published under a
key derived from the module name (``"users"`` -> ``"users_service"``).

The table is handed to consumers explicitly. Nothing global is mutated.
"""

import logging
from collections.abc import Iterable
from typing import Any

from nestling.module import RegistryEntry

logger = logging.getLogger("nestling.services")

DEFAULT_KEY_FORMAT = "{name}_service"


def service_key(name: str, key_format: str = DEFAULT_KEY_FORMAT) -> str:
    """Derive the injection key for a module name."""
    return key_format.format(name=name)


def inject_services(
    entries: Iterable[RegistryEntry],
    client: Any,
    key_format: str = DEFAULT_KEY_FORMAT,
) -> dict[str, Any]:
    """Call every service factory once and collect the results.

    Modules without a factory, and factories returning a falsy value,
    contribute no key. A factory that returns an awaitable is stored
    as-is; nothing here awaits it.
    """
    services: dict[str, Any] = {}
    for entry in entries:
        if entry.service is None:
            continue
        value = entry.service(client)
        if not value:
            logger.debug("Service factory for %r returned nothing; skipped", entry.name)
            continue
        key = service_key(entry.name, key_format)
        services[key] = value
        logger.debug("Injected %s", key)
    return services
