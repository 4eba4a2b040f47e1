"""Hierarchy rebuilder — nested trees from a flat parent-pointer list.

The registry stores modules flat so that uniqueness checks and iteration
stay simple. This module rebuilds the nesting, once, for both the route
view and the store view. The two views differ only in their attach policy.

Algorithm (two phases, linear in the number of nodes):

1. Index: one pass builds ``parent name -> [child nodes]`` and the ordered
   list of roots.
2. Assemble: each root is built bottom-up with an explicit stack, looking
   its children up in the index. Children attach in registration order.

Attach policies build new mappings and never mutate the payloads the
caller registered, so rebuilding the same registry twice gives equal
output.

A node without a payload for a view is transparent in that view: its
payload-bearing descendants are spliced into the nearest payload-bearing
ancestor, or promoted to the top level.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from nestling.errors import OrphanModuleError
from nestling.module import RegistryEntry

# (payload, [(child name, assembled child payload), ...]) -> assembled payload
type AttachPolicy = Callable[[Mapping[str, Any], list[tuple[str, Any]]], Any]


@dataclass(frozen=True, slots=True)
class Node:
    """One registry entry projected onto a single view."""

    name: str
    parent_name: str | None
    payload: Mapping[str, Any] | None


def project(
    entries: Iterable[RegistryEntry],
    field: Literal["route", "store"],
) -> list[Node]:
    """Project registry entries to ``Node``s carrying the *field* payload."""
    return [Node(e.name, e.parent_name, getattr(e, field)) for e in entries]


def rebuild(nodes: Sequence[Node], attach: AttachPolicy) -> list[tuple[str, Any]]:
    """Rebuild nesting and return ``(name, payload)`` for root nodes only.

    Raises ``OrphanModuleError`` if a node's parent is not among *nodes*.
    """
    names = {node.name for node in nodes}
    children: dict[str, list[Node]] = {}
    roots: list[Node] = []

    for node in nodes:
        if node.parent_name is None:
            roots.append(node)
        elif node.parent_name not in names:
            raise OrphanModuleError(node.name, node.parent_name)
        else:
            children.setdefault(node.parent_name, []).append(node)

    # name -> assembled pairs the node contributes to its parent
    built: dict[str, list[tuple[str, Any]]] = {}
    for root in roots:
        stack: list[tuple[Node, bool]] = [(root, False)]
        while stack:
            node, expanded = stack.pop()
            below = children.get(node.name, ())
            if not expanded:
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(below))
                continue
            kids = [pair for child in below for pair in built.pop(child.name)]
            if node.payload is None:
                built[node.name] = kids
            else:
                built[node.name] = [(node.name, attach(node.payload, kids))]

    return [pair for root in roots for pair in built.pop(root.name)]


# -- Attach policies --


def attach_routes(route: Mapping[str, Any], kids: list[tuple[str, Any]]) -> dict[str, Any]:
    """Append child routes to the route's ``children`` list.

    Children authored directly on the payload are kept and extended.
    """
    result = dict(route)
    if kids:
        result["children"] = [*(route.get("children") or ()), *(r for _, r in kids)]
    return result


def attach_store(store: Mapping[str, Any], kids: list[tuple[str, Any]]) -> dict[str, Any]:
    """Mark the store namespaced and merge child stores into ``modules``.

    Sub-modules authored directly on the payload are marked namespaced as
    well, at any depth. A registered child wins over an authored
    sub-module of the same name.
    """
    result = {**store, "namespaced": True}
    authored = store.get("modules") or {}
    if authored or kids:
        result["modules"] = {
            **{name: attach_store(module, []) for name, module in authored.items()},
            **dict(kids),
        }
    return result


# -- Views --


def build_routes(entries: Iterable[RegistryEntry]) -> list[dict[str, Any]]:
    """The route view: root routes with their nested ``children``."""
    return [route for _, route in rebuild(project(entries, "route"), attach_routes)]


def build_store(entries: Iterable[RegistryEntry]) -> dict[str, dict[str, Any]]:
    """The store view: ``{module name: namespaced store module}``."""
    return dict(rebuild(project(entries, "store"), attach_store))
