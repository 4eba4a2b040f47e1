"""Nestling exception hierarchy.

Shared across the registry, the rebuilder, the router and the app so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class NestlingError(Exception):
    """Base for all nestling-specific errors."""


class RegistrationError(NestlingError):
    """Raised when a module cannot be added to the registry.

    Registration failures are meant to halt bootstrap: a partially
    composed application has no well-defined fallback.
    """


class MissingNameError(RegistrationError):
    """A module descriptor (root or nested) has no name."""

    def __init__(self, parent: str | None = None) -> None:
        self.parent = parent
        if parent is None:
            msg = "Module must have a name."
        else:
            msg = f"Module must have a name (child of {parent!r})."
        super().__init__(msg)


class DuplicateNameError(RegistrationError):
    """A module name is already registered, at any depth."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"[module] {name!r} already exists.")


class UnknownParentError(RegistrationError):
    """A module was attached under a parent that is not registered."""

    def __init__(self, name: str, parent: str) -> None:
        self.name = name
        self.parent = parent
        super().__init__(
            f"Cannot attach module {name!r}: parent {parent!r} is not registered."
        )


class OrphanModuleError(NestlingError):
    """A node points at a parent that is not part of the rebuilt view."""

    def __init__(self, name: str, parent: str) -> None:
        self.name = name
        self.parent = parent
        super().__init__(f"Module {name!r} refers to unknown parent {parent!r}.")


@dataclass(frozen=True, slots=True)
class RoutingError(NestlingError):
    """An error raised by the router handle while matching or navigating."""

    path: str
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.path}: {self.detail}"
        return self.path


class NotFound(RoutingError):  # noqa: N818
    """No route record matches the path."""

    def __init__(self, path: str, detail: str = "No route matches") -> None:
        super().__init__(path=path, detail=detail)


class NavigationAborted(RoutingError):  # noqa: N818
    """A navigation guard rejected the navigation."""

    def __init__(self, path: str, detail: str = "Navigation aborted by guard") -> None:
        super().__init__(path=path, detail=detail)
