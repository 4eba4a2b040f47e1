"""Module registry — flat, append-only table of registered modules.

Nested descriptors are unpacked on registration into a single list of
``RegistryEntry`` records linked by ``parent_name``. The hierarchy is
rebuilt later, in one place (``nestling.hierarchy``).
"""

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from nestling.errors import DuplicateNameError, MissingNameError, UnknownParentError
from nestling.module import Module, RegistryEntry, coerce_module

logger = logging.getLogger("nestling.registry")


class ModuleRegistry:
    """Flat registry of modules in insertion order.

    Usage::

        registry = ModuleRegistry()
        registry.register(Module("shop", children=[Module("cart")]))
        registry.exists("cart")  # True
        [e.parent_name for e in registry.entries()]  # [None, "shop"]

    Registration is atomic: the whole descriptor tree is checked before
    anything is appended, so a failed call leaves the registry unchanged.
    """

    __slots__ = ("_entries", "_index")

    def __init__(self) -> None:
        self._entries: list[RegistryEntry] = []
        self._index: dict[str, RegistryEntry] = {}

    def register(
        self,
        module: Module | Mapping[str, Any],
        parent: str | None = None,
    ) -> None:
        """Register *module* and all of its descendants.

        Args:
            module: The descriptor (or an equivalent mapping).
            parent: Name of an already registered module to attach under.

        Raises:
            MissingNameError: a descriptor in the tree has no name.
            DuplicateNameError: a name is already taken, or repeated in the tree.
            UnknownParentError: *parent* is not registered.
        """
        module = coerce_module(module)
        if parent is not None and parent not in self._index:
            raise UnknownParentError(module.name, parent)

        pending = list(self._unpack(module, parent))

        seen: set[str] = set()
        for entry in pending:
            if entry.name in self._index or entry.name in seen:
                raise DuplicateNameError(entry.name)
            seen.add(entry.name)

        for entry in pending:
            self._entries.append(entry)
            self._index[entry.name] = entry
            logger.debug("Registered module %r (parent=%r)", entry.name, entry.parent_name)

    def _unpack(self, module: Module, parent: str | None) -> Iterator[RegistryEntry]:
        """Yield entries depth first: the module, then each child subtree."""
        stack = [(module, parent)]
        while stack:
            current, parent_name = stack.pop()
            if not current.name:
                raise MissingNameError(parent_name)
            yield RegistryEntry(
                name=current.name,
                parent_name=parent_name,
                route=current.route,
                store=current.store,
                service=current.service,
            )
            stack.extend((child, current.name) for child in reversed(current.children))

    def entries(self) -> tuple[RegistryEntry, ...]:
        """All registered entries, in insertion order."""
        return tuple(self._entries)

    def exists(self, name: str) -> bool:
        """Return whether *name* is already registered."""
        return name in self._index

    def get(self, name: str) -> RegistryEntry | None:
        """Look up an entry by name. Returns ``None`` if not found."""
        return self._index.get(name)

    def children_of(self, name: str) -> list[RegistryEntry]:
        """Direct children of *name*, in insertion order."""
        return [e for e in self._entries if e.parent_name == name]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(tuple(self._entries))
