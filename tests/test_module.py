"""Tests for nestling.module — descriptors and entries."""

import pytest

from nestling.module import Module, RegistryEntry, coerce_module


class TestModule:
    def test_defaults(self) -> None:
        m = Module("a")
        assert m.route is None
        assert m.store is None
        assert m.service is None
        assert m.children == ()

    def test_children_become_tuple(self) -> None:
        m = Module("a", children=[Module("b")])
        assert isinstance(m.children, tuple)

    def test_frozen(self) -> None:
        m = Module("a")
        with pytest.raises(AttributeError):
            m.name = "b"  # type: ignore[misc]

    def test_from_mapping_recursive(self) -> None:
        m = Module.from_mapping(
            {"name": "a", "route": {"path": "/a"}, "children": [{"name": "b"}]}
        )
        assert m.route == {"path": "/a"}
        assert m.children == (Module("b"),)

    def test_from_mapping_ignores_unknown_keys(self) -> None:
        m = Module.from_mapping({"name": "a", "extra": 1})
        assert m == Module("a")


class TestCoerce:
    def test_module_passthrough(self) -> None:
        m = Module("a")
        assert coerce_module(m) is m

    def test_mapping(self) -> None:
        assert coerce_module({"name": "a"}) == Module("a")

    def test_bad_type(self) -> None:
        with pytest.raises(TypeError, match="Expected a Module"):
            coerce_module(42)  # type: ignore[arg-type]


class TestRegistryEntry:
    def test_root(self) -> None:
        assert RegistryEntry("a").is_root

    def test_child(self) -> None:
        assert not RegistryEntry("b", parent_name="a").is_root
