"""Tests for nestling.services — service injection."""

import logging

from nestling.module import RegistryEntry
from nestling.services import inject_services, service_key


class _Api:
    def __init__(self, client: object) -> None:
        self.client = client


class TestServiceKey:
    def test_default_format(self) -> None:
        assert service_key("users") == "users_service"

    def test_custom_format(self) -> None:
        assert service_key("users", "{name}Service") == "usersService"


class TestInjectServices:
    def test_factory_receives_shared_client(self) -> None:
        client = object()
        services = inject_services([RegistryEntry("users", service=_Api)], client)
        assert isinstance(services["users_service"], _Api)
        assert services["users_service"].client is client

    def test_modules_without_factory_skipped(self) -> None:
        services = inject_services(
            [RegistryEntry("plain"), RegistryEntry("users", service=_Api)], object()
        )
        assert list(services) == ["users_service"]

    def test_none_result_skipped(self) -> None:
        services = inject_services([RegistryEntry("a", service=lambda c: None)], object())
        assert services == {}

    def test_falsy_result_skipped(self) -> None:
        services = inject_services(
            [RegistryEntry("a", service=lambda c: {}), RegistryEntry("b", service=lambda c: 0)],
            object(),
        )
        assert services == {}

    def test_each_factory_called_once_in_order(self) -> None:
        calls: list[str] = []

        def factory(name: str):
            def build(client: object) -> str:
                calls.append(name)
                return name

            return build

        entries = [
            RegistryEntry("a", service=factory("a")),
            RegistryEntry("b", parent_name="a", service=factory("b")),
        ]
        services = inject_services(entries, object())
        assert calls == ["a", "b"]
        assert services == {"a_service": "a", "b_service": "b"}

    def test_awaitable_stored_as_is(self) -> None:
        async def fetch() -> str:
            return "later"

        coro = fetch()
        try:
            services = inject_services([RegistryEntry("a", service=lambda c: coro)], object())
            assert services["a_service"] is coro
        finally:
            coro.close()

    def test_custom_key_format(self) -> None:
        services = inject_services(
            [RegistryEntry("users", service=_Api)], object(), key_format="${name}Service"
        )
        assert list(services) == ["$usersService"]

    def test_logs_injected_keys(self, caplog) -> None:
        with caplog.at_level(logging.DEBUG, logger="nestling.services"):
            inject_services([RegistryEntry("users", service=_Api)], object())
        assert "users_service" in caplog.text
