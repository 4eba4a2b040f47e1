"""RouteRecord and RouteMatch frozen dataclasses."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``  (is_param=False)
    Param:   ``/{id}``   (is_param=True, param_name="id")
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class RouteRecord:
    """One route of the tree, with its full path resolved.

    ``route`` is the payload the module registered, untouched.
    """

    path: str
    route: Mapping[str, Any]
    name: str | None = None
    parent: "RouteRecord | None" = None

    @property
    def chain(self) -> tuple["RouteRecord", ...]:
        """This record and its ancestors, root first."""
        chain: list[RouteRecord] = []
        record: RouteRecord | None = self
        while record is not None:
            chain.append(record)
            record = record.parent
        return tuple(reversed(chain))


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    record: RouteRecord
    params: dict[str, Any]

    @property
    def matched(self) -> tuple[RouteRecord, ...]:
        return self.record.chain
