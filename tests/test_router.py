"""Tests for nestling.routing.router — router handle for the route tree."""

import pytest

from nestling.errors import NavigationAborted, NotFound
from nestling.routing.route import RouteMatch
from nestling.routing.router import Router, join_path, parse_path

TREE = [
    {
        "path": "/users",
        "name": "users",
        "children": [
            {"path": "{id:int}", "name": "user", "children": [{"path": "posts", "name": "posts"}]},
            {"path": "/about", "name": "about"},
        ],
    },
    {"path": "/files/{rest:path}", "name": "files"},
    {"path": "/", "name": "home"},
]


def _router() -> Router:
    r = Router()
    r.add_routes(TREE)
    return r


class TestParsePath:
    def test_static(self) -> None:
        segments = parse_path("/users")
        assert [s.value for s in segments] == ["users"]
        assert segments[0].is_param is False

    def test_typed_param(self) -> None:
        segments = parse_path("/users/{id:int}")
        assert segments[1].is_param is True
        assert segments[1].param_name == "id"
        assert segments[1].param_type == "int"

    def test_root(self) -> None:
        assert parse_path("/") == []


class TestJoinPath:
    def test_relative(self) -> None:
        assert join_path("/users", "posts") == "/users/posts"

    def test_absolute_child(self) -> None:
        assert join_path("/users", "/about") == "/about"

    def test_trailing_slash_base(self) -> None:
        assert join_path("/", "users") == "/users"

    def test_empty_child(self) -> None:
        assert join_path("/users", "") == "/users"
        assert join_path("", "") == "/"


class TestAddRoutes:
    def test_records_flattened_parent_first(self) -> None:
        paths = [r.path for r in _router().records]
        assert paths == [
            "/users",
            "/users/{id:int}",
            "/users/{id:int}/posts",
            "/about",
            "/files/{rest:path}",
            "/",
        ]

    def test_records_keep_payload(self) -> None:
        record = _router().records[0]
        assert record.route is TREE[0]

    def test_names(self) -> None:
        assert _router().names == ["users", "user", "posts", "about", "files", "home"]

    def test_explicit_none_children(self) -> None:
        r = Router()
        r.add_routes([{"path": "/a", "name": "a", "children": None}])
        assert [rec.path for rec in r.records] == ["/a"]

    def test_accepts_generators(self) -> None:
        r = Router()
        r.add_routes(
            {"path": f"/{n}", "children": ({"path": "x"} for _ in range(1))} for n in "ab"
        )
        assert [rec.path for rec in r.records] == ["/a", "/a/x", "/b", "/b/x"]


class TestClearRoutes:
    def test_drops_records_keeps_guards(self) -> None:
        r = _router()
        guard = r.before_each(lambda m: None)
        r.clear_routes()

        assert r.records == []
        assert r.names == []
        assert r.guards == (guard,)
        with pytest.raises(NotFound):
            r.match("/users")

    def test_routes_can_be_added_again(self) -> None:
        r = _router()
        r.clear_routes()
        r.add_routes(TREE)
        assert len(r.records) == 6
        assert r.match("/users/1").record.name == "user"


class TestMatch:
    def test_static(self) -> None:
        match = _router().match("/users")
        assert isinstance(match, RouteMatch)
        assert match.record.name == "users"
        assert match.params == {}

    def test_param_converted(self) -> None:
        match = _router().match("/users/42")
        assert match.record.name == "user"
        assert match.params == {"id": 42}

    def test_matched_chain(self) -> None:
        match = _router().match("/users/7/posts")
        assert [r.name for r in match.matched] == ["users", "user", "posts"]

    def test_absolute_child_keeps_parent_chain(self) -> None:
        match = _router().match("/about")
        assert [r.name for r in match.matched] == ["users", "about"]

    def test_catch_all(self) -> None:
        match = _router().match("/files/a/b/c.txt")
        assert match.params == {"rest": "a/b/c.txt"}

    def test_root(self) -> None:
        assert _router().match("/").record.name == "home"

    def test_not_found(self) -> None:
        with pytest.raises(NotFound) as exc_info:
            _router().match("/nope")
        assert exc_info.value.path == "/nope"

    def test_param_type_mismatch(self) -> None:
        with pytest.raises(NotFound):
            _router().match("/users/abc")

    def test_first_record_wins(self) -> None:
        r = Router()
        r.add_routes([{"path": "/x", "name": "one"}, {"path": "/x", "name": "two"}])
        assert r.match("/x").record.name == "one"


class TestUrlFor:
    def test_static(self) -> None:
        assert _router().url_for("about") == "/about"

    def test_params(self) -> None:
        assert _router().url_for("posts", id=3) == "/users/3/posts"

    def test_unknown_name(self) -> None:
        with pytest.raises(KeyError):
            _router().url_for("nope")

    def test_param_must_fit_converter(self) -> None:
        with pytest.raises(ValueError, match="not a valid 'int'"):
            _router().url_for("user", id="abc")


class TestGuards:
    def test_before_each_as_decorator(self) -> None:
        r = _router()

        @r.before_each
        def guard(match: RouteMatch) -> None:
            return None

        assert r.guards == (guard,)

    def test_resolve_runs_guards_in_order(self) -> None:
        r = _router()
        seen: list[str] = []
        r.before_each(lambda m: seen.append(f"1:{m.record.name}"))
        r.before_each(lambda m: seen.append(f"2:{m.record.name}"))

        match = r.resolve("/users")
        assert match.record.name == "users"
        assert seen == ["1:users", "2:users"]

    def test_guard_returning_false_aborts(self) -> None:
        r = _router()
        r.before_each(lambda m: m.record.name != "about")
        with pytest.raises(NavigationAborted):
            r.resolve("/about")
        assert r.resolve("/users").record.name == "users"
