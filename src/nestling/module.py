"""Module descriptors and registry entries.

A ``Module`` is what a feature author writes once: a unique name plus
optional route, store and service contributions and nested children.
A ``RegistryEntry`` is what the registry keeps after unpacking: the same
contributions without ``children``, plus the resolved parent pointer.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

type ServiceFactory = Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class Module:
    """A feature module descriptor.

    Usage::

        users = Module(
            "users",
            route={"path": "/users", "view": "users/list.html"},
            store={"state": {"items": []}},
            service=lambda client: UsersApi(client),
            children=[Module("profile", route={"path": "{id:int}"})],
        )
    """

    name: str
    route: Mapping[str, Any] | None = None
    store: Mapping[str, Any] | None = None
    service: ServiceFactory | None = None
    children: Sequence["Module"] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "children", tuple(coerce_module(c) for c in self.children)
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Module":
        """Build a descriptor from a plain mapping with the same keys.

        ``children`` may hold mappings too; they are converted recursively.
        Unknown keys are ignored.
        """
        return cls(
            name=data.get("name") or "",
            route=data.get("route"),
            store=data.get("store"),
            service=data.get("service"),
            children=tuple(data.get("children") or ()),
        )


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    """A registered module, flattened: parent pointer instead of children."""

    name: str
    parent_name: str | None = None
    route: Mapping[str, Any] | None = None
    store: Mapping[str, Any] | None = None
    service: ServiceFactory | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_name is None


def coerce_module(value: "Module | Mapping[str, Any]") -> Module:
    """Accept either a ``Module`` or a plain mapping describing one."""
    if isinstance(value, Module):
        return value
    if isinstance(value, Mapping):
        return Module.from_mapping(value)
    msg = f"Expected a Module or a mapping, got {type(value).__name__}"
    raise TypeError(msg)
