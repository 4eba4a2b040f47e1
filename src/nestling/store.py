"""Store handle built from the namespaced store tree.

Each store module is an opaque mapping. The handle only reads the two
keys the composition engine owns (``modules`` and ``namespaced``) plus
``state``, which it nests by module name. Reducers, actions and anything
else on a module are left for the consumer.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any


class Store:
    """Namespaced store tree.

    Usage::

        store = Store(modules={"shop": {"state": {"open": True}, "namespaced": True,
                                        "modules": {"cart": {"state": {"items": []},
                                                             "namespaced": True}}}})
        store.module("shop/cart")["state"]  # {"items": []}
        store.state                         # {"shop": {"open": True, "cart": {"items": []}}}
        list(store.namespaces())            # ["shop", "shop/cart"]
    """

    __slots__ = ("_modules", "_state")

    def __init__(self, modules: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._modules: dict[str, Mapping[str, Any]] = dict(modules or {})
        self._state: dict[str, Any] = {
            name: _module_state(module) for name, module in self._modules.items()
        }

    @property
    def modules(self) -> Mapping[str, Mapping[str, Any]]:
        return MappingProxyType(self._modules)

    @property
    def state(self) -> dict[str, Any]:
        """Root state: each module's state under its module name."""
        return self._state

    def module(self, namespace: str) -> Mapping[str, Any]:
        """Look up a module by ``/``-separated namespace path.

        Raises ``KeyError`` if any segment is missing.
        """
        modules: Mapping[str, Any] = self._modules
        module: Mapping[str, Any] = {}
        for part in namespace.strip("/").split("/"):
            if part not in modules:
                msg = f"No store module {namespace!r}"
                raise KeyError(msg)
            module = modules[part]
            modules = module.get("modules") or {}
        return module

    def namespaces(self) -> Iterator[str]:
        """Every namespace path, parents before children."""
        stack = [(name, module) for name, module in reversed(list(self._modules.items()))]
        while stack:
            path, module = stack.pop()
            yield path
            children = module.get("modules") or {}
            stack.extend(
                (f"{path}/{name}", child) for name, child in reversed(list(children.items()))
            )

    def __contains__(self, namespace: object) -> bool:
        if not isinstance(namespace, str):
            return False
        try:
            self.module(namespace)
        except KeyError:
            return False
        return True


def _module_state(module: Mapping[str, Any]) -> dict[str, Any]:
    """Build one module's state, children nested under their names."""
    root = _own_state(module)
    stack = [(module, root)]
    while stack:
        current, state = stack.pop()
        for name, child in (current.get("modules") or {}).items():
            state[name] = child_state = _own_state(child)
            stack.append((child, child_state))
    return root


def _own_state(module: Mapping[str, Any]) -> dict[str, Any]:
    # ``state`` may be a mapping or a zero-argument factory
    raw = module.get("state")
    if callable(raw):
        raw = raw()
    return dict(raw or {})
