"""Router handle with trie-based path matching.

Receives the nested route tree assembled from the registered modules,
flattens it into ``RouteRecord``s (child paths are relative to their
parent unless they start with ``/``) and compiles them into a trie.
"""

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from nestling.errors import NavigationAborted, NotFound
from nestling.routing.params import CONVERTERS, convert_param, format_param
from nestling.routing.route import PathSegment, RouteMatch, RouteRecord

type Guard = Callable[[RouteMatch], Any]


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/{id:int}" -> [PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{path:path}" -> [PathSegment("{path:path}", is_param=True, param_type="path")]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            if ":" in inner:
                param_name, param_type = inner.split(":", 1)
            else:
                param_name = inner
                param_type = "str"
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


def join_path(base: str, path: str) -> str:
    """Resolve a child route path against its parent's full path."""
    if path.startswith("/"):
        return path
    if not path:
        return base or "/"
    return f"{base.rstrip('/')}/{path}"


class _TrieNode:
    """A node in the route trie."""

    __slots__ = ("catch_all", "children", "param_child", "record")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Single parameter child (only one param pattern per level)
        self.param_child: _ParamEdge | None = None
        # Catch-all record (path converter)
        self.catch_all: _CatchAllEdge | None = None
        # Record terminating at this node
        self.record: RouteRecord | None = None


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """A catch-all (path) edge: consumes the remaining path."""

    param_name: str
    record: RouteRecord


class Router:
    """Router handle for the composed route tree.

    Usage::

        router = Router()
        router.add_routes([
            {"path": "/users", "name": "users", "children": [
                {"path": "{id:int}", "name": "user"},
            ]},
        ])
        match = router.match("/users/42")
        match.params            # {"id": 42}
        [r.path for r in match.matched]  # ["/users", "/users/{id:int}"]

    When two records resolve to the same path, the first one added wins.
    """

    __slots__ = ("_guards", "_names", "_records", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._records: list[RouteRecord] = []
        self._names: dict[str, RouteRecord] = {}
        self._guards: list[Guard] = []

    # -- Building --

    def add_routes(self, routes: Iterable[Mapping[str, Any]]) -> None:
        """Add a nested route tree (each route may carry ``children``)."""
        # Depth-first with an explicit stack, parents before children
        stack: list[tuple[Mapping[str, Any], RouteRecord | None]] = [
            (route, None) for route in reversed(list(routes))
        ]
        while stack:
            route, parent = stack.pop()
            record = self._add(route, parent)
            stack.extend(
                (child, record) for child in reversed(list(route.get("children") or ()))
            )

    def _add(self, route: Mapping[str, Any], parent: RouteRecord | None) -> RouteRecord:
        base = parent.path if parent is not None else ""
        name = route.get("name")
        record = RouteRecord(
            path=join_path(base, route.get("path", "")),
            route=route,
            name=name,
            parent=parent,
        )
        self._records.append(record)
        if name is not None:
            self._names.setdefault(name, record)
        self._insert(record)
        return record

    def clear_routes(self) -> None:
        """Drop every record. Guards stay registered."""
        self._root = _TrieNode()
        self._records = []
        self._names = {}

    def _insert(self, record: RouteRecord) -> None:
        node = self._root

        for seg in parse_path(record.path):
            if seg.is_param and seg.param_type == "path":
                # Catch-all: consumes rest of path, must be last segment
                if node.catch_all is None:
                    node.catch_all = _CatchAllEdge(
                        param_name=seg.param_name or "path",
                        record=record,
                    )
                return

            if seg.is_param:
                if node.param_child is None:
                    pattern, _ = CONVERTERS[seg.param_type]
                    node.param_child = _ParamEdge(
                        param_name=seg.param_name or "",
                        param_type=seg.param_type,
                        regex=re.compile(f"^{pattern}$"),
                        node=_TrieNode(),
                    )
                node = node.param_child.node
            else:
                if seg.value not in node.children:
                    node.children[seg.value] = _TrieNode()
                node = node.children[seg.value]

        if node.record is None:
            node.record = record

    # -- Introspection --

    @property
    def records(self) -> list[RouteRecord]:
        """Every record, parents before children, in insertion order."""
        return list(self._records)

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def url_for(self, name: str, **params: Any) -> str:
        """Build the path of a named route.

        Raises ``KeyError`` if *name* is unknown or a parameter is missing,
        ``ValueError`` if a parameter does not fit its converter.
        """
        record = self._names.get(name)
        if record is None:
            msg = f"No route named {name!r}"
            raise KeyError(msg)
        parts = [
            format_param(params[seg.param_name or ""], seg.param_type)
            if seg.is_param
            else seg.value
            for seg in parse_path(record.path)
        ]
        return "/" + "/".join(parts)

    # -- Matching --

    def match(self, path: str) -> RouteMatch:
        """Match *path* against the route tree.

        Raises ``NotFound`` if no record matches.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})
        if result is None:
            raise NotFound(path)
        record, params = result
        return RouteMatch(record=record, params=params)

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, Any],
    ) -> tuple[RouteRecord, dict[str, Any]] | None:
        """Recursively match path parts against the trie."""
        if index == len(parts):
            if node.record is not None:
                return node.record, params
            return None

        part = parts[index]

        # 1. Static child first (exact match)
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        # 2. Parameter child
        if node.param_child is not None:
            edge = node.param_child
            if edge.regex.match(part):
                value = convert_param(part, edge.param_type)
                new_params = {**params, edge.param_name: value}
                result = self._match_node(edge.node, parts, index + 1, new_params)
                if result is not None:
                    return result

        # 3. Catch-all
        if node.catch_all is not None:
            remaining = "/".join(parts[index:])
            return node.catch_all.record, {**params, node.catch_all.param_name: remaining}

        return None

    # -- Guards --

    def before_each(self, guard: Guard) -> Guard:
        """Register a navigation guard. Usable as a decorator.

        Guards run in registration order on ``resolve()``. A guard that
        returns ``False`` aborts the navigation.
        """
        self._guards.append(guard)
        return guard

    @property
    def guards(self) -> tuple[Guard, ...]:
        return tuple(self._guards)

    def resolve(self, path: str) -> RouteMatch:
        """Match *path* and run the navigation guards.

        Raises ``NotFound`` if nothing matches and ``NavigationAborted``
        if a guard returns ``False``.
        """
        match = self.match(path)
        for guard in self._guards:
            if guard(match) is False:
                raise NavigationAborted(path)
        return match
