"""Storefront — three feature modules composed into one app.

Demonstrates nested modules, late attachment under an existing module,
namespaced store modules, service factories sharing one client,
interceptors (a bearer token on the way out, sign-out on a 401 on the way
back) and a navigation guard.

Run:
    python app.py
"""

from pathlib import Path

import httpx

from nestling import App, AppConfig, Module

TEMPLATES = Path(__file__).parent / "templates"


class CatalogApi:
    """Thin wrapper over the shared client."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def products(self) -> list[dict]:
        response = await self.client.get("products")
        response.raise_for_status()
        return response.json()


catalog = Module(
    "catalog",
    route={"path": "/catalog", "name": "catalog", "title": "Catalog"},
    store={"state": lambda: {"products": []}},
    service=CatalogApi,
    children=[
        Module(
            "product",
            route={"path": "{id:int}", "name": "product", "title": "Product"},
            store={"state": lambda: {"current": None}},
        ),
    ],
)

account = Module(
    "account",
    route={"path": "/account", "name": "account", "title": "Account", "private": True},
    store={"state": {"user": None}},
)

orders = Module(
    "orders",
    route={"path": "orders", "name": "orders", "title": "Orders", "private": True},
    store={"state": lambda: {"items": []}},
)


def add_auth(request: httpx.Request, app: App) -> None:
    user = app.store.state["account"]["user"] if app.store else None
    if user:
        request.headers["Authorization"] = f"Bearer {user['token']}"


def sign_out_on_401(exc: Exception) -> None:
    if isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code == 401:
        if app.store:
            app.store.state["account"]["user"] = None
        return
    raise exc


def private_routes(router) -> None:
    @router.before_each
    def require_login(match):
        if any(r.route.get("private") for r in match.matched):
            return app.store.state["account"]["user"] is not None
        return None


app = (
    App(AppConfig(service_prefix="https://shop.example.com/api/", template_dir=TEMPLATES))
    .add_module(catalog)
    .add_module(account)
    .add_module(orders, parent="account")
    .request_interceptor(add_auth)
    .response_interceptor(lambda response, app: None, sign_out_on_401)
    .add_router_guard(private_routes)
)


if __name__ == "__main__":
    print(app.run("index.html").mounted)
