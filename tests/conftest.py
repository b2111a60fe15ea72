"""Shared test fixtures for the storeload test suite."""

from __future__ import annotations

import asyncio
import itertools
import logging
import socket
import threading
from typing import TYPE_CHECKING

import pytest
from aiohttp import web

from storeload.core.catalog import ScenarioConfig
from storeload.core.duration import Stage
from storeload.profiles.base import TestProfile

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterator

    from storeload.api.store import FakeStoreAPI


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


@pytest.fixture
def propagate_logs() -> Iterator[None]:
    """Let ``caplog`` see storeload records even after ``setup_logging``."""
    logger = logging.getLogger("storeload")
    previous = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = previous


# =============================================================================
# Network utilities
# =============================================================================


def _get_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# =============================================================================
# Fake store server
# =============================================================================

ACCESS_TOKEN = "test-access-token"
REFRESH_TOKEN = "test-refresh-token"
LOGIN_EMAIL = "john@mail.com"
LOGIN_PASSWORD = "changeme"

_CATEGORIES = [
    {"id": i, "name": name, "image": f"https://img.test/c{i}.png"}
    for i, name in enumerate(["Clothes", "Electronics", "Furniture", "Shoes", "Misc"], start=1)
]
_PRODUCTS = [
    {
        "id": i,
        "title": f"Product {i}",
        "price": float(i * 10),
        "description": f"Description {i}",
        "category": _CATEGORIES[(i - 1) % len(_CATEGORIES)],
        "images": [f"https://img.test/p{i}.png"],
    }
    for i in range(1, 31)
]
_USERS = [
    {
        "id": i,
        "email": "john@mail.com" if i == 1 else f"user{i}@mail.com",
        "name": f"User {i}",
        "role": "customer",
        "avatar": f"https://img.test/u{i}.png",
    }
    for i in range(1, 11)
]
_CARTS = [
    {
        "id": i,
        "userId": (i % 3) + 1,
        "date": f"2020-03-0{i}",
        "products": [{"productId": i, "quantity": 2}],
    }
    for i in range(1, 8)
]


def _page(items: list[dict[str, object]], request: web.Request) -> list[dict[str, object]]:
    offset = int(request.query.get("offset", "0"))
    limit = int(request.query.get("limit", str(len(items))))
    return items[offset : offset + limit]


def _find(items: list[dict[str, object]], raw_id: str) -> dict[str, object] | None:
    if not raw_id.isdigit():
        return None
    return next((item for item in items if item["id"] == int(raw_id)), None)


def _create_store_app() -> web.Application:
    """Build an in-memory fake store with the routes the profiles call."""
    ids = itertools.count(1000)

    async def list_products(request: web.Request) -> web.Response:
        items = _PRODUCTS
        if "title" in request.query:
            needle = request.query["title"].lower()
            items = [p for p in items if needle in str(p["title"]).lower()]
        if "price_min" in request.query:
            low = float(request.query["price_min"])
            high = float(request.query.get("price_max", "1e9"))
            items = [p for p in items if low <= float(p["price"]) <= high]  # type: ignore[arg-type]
        if "categoryId" in request.query:
            cid = int(request.query["categoryId"])
            items = [p for p in items if p["category"]["id"] == cid]  # type: ignore[index]
        return web.json_response(_page(items, request))

    async def get_product(request: web.Request) -> web.Response:
        product = _find(_PRODUCTS, request.match_info["id"])
        if product is None:
            return web.json_response({"message": "Could not find any entity"}, status=404)
        return web.json_response(product)

    async def create_product(request: web.Request) -> web.Response:
        data = await request.json()
        return web.json_response({**data, "id": next(ids)}, status=201)

    async def update_product(request: web.Request) -> web.Response:
        data = await request.json()
        return web.json_response({**data, "id": int(request.match_info["id"])})

    async def delete_any(request: web.Request) -> web.Response:
        return web.json_response(True)

    async def list_categories(request: web.Request) -> web.Response:
        return web.json_response(_page(_CATEGORIES, request))

    async def get_category(request: web.Request) -> web.Response:
        category = _find(_CATEGORIES, request.match_info["id"])
        if category is None:
            return web.json_response({"message": "Not found"}, status=404)
        return web.json_response(category)

    async def category_products(request: web.Request) -> web.Response:
        cid = int(request.match_info["id"])
        items = [p for p in _PRODUCTS if p["category"]["id"] == cid]  # type: ignore[index]
        return web.json_response(_page(items, request))

    async def list_users(request: web.Request) -> web.Response:
        return web.json_response(_page(_USERS, request))

    async def get_user(request: web.Request) -> web.Response:
        user = _find(_USERS, request.match_info["id"])
        if user is None:
            return web.json_response({"message": "Not found"}, status=404)
        return web.json_response(user)

    async def create_user(request: web.Request) -> web.Response:
        data = await request.json()
        return web.json_response({**data, "id": next(ids), "role": "customer"}, status=201)

    async def email_available(request: web.Request) -> web.Response:
        data = await request.json()
        taken = any(u["email"] == data.get("email") for u in _USERS)
        return web.json_response({"isAvailable": not taken}, status=201)

    async def login(request: web.Request) -> web.Response:
        data = await request.json()
        if data.get("email") != LOGIN_EMAIL or data.get("password") != LOGIN_PASSWORD:
            return web.json_response({"message": "Unauthorized"}, status=401)
        return web.json_response(
            {"access_token": ACCESS_TOKEN, "refresh_token": REFRESH_TOKEN}, status=201
        )

    async def refresh(request: web.Request) -> web.Response:
        data = await request.json()
        if data.get("refreshToken") != REFRESH_TOKEN:
            return web.json_response({"message": "Unauthorized"}, status=401)
        return web.json_response(
            {"access_token": ACCESS_TOKEN, "refresh_token": REFRESH_TOKEN}, status=201
        )

    async def profile(request: web.Request) -> web.Response:
        if request.headers.get("Authorization") != f"Bearer {ACCESS_TOKEN}":
            return web.json_response({"message": "Unauthorized"}, status=401)
        return web.json_response(_USERS[0])

    async def list_carts(request: web.Request) -> web.Response:
        items = list(_CARTS)
        if request.query.get("sort") == "desc":
            items.reverse()
        if "limit" in request.query:
            items = items[: int(request.query["limit"])]
        return web.json_response(items)

    async def get_cart(request: web.Request) -> web.Response:
        cart = _find(_CARTS, request.match_info["id"])
        if cart is None:
            return web.json_response({"message": "Not found"}, status=404)
        return web.json_response(cart)

    async def user_carts(request: web.Request) -> web.Response:
        uid = int(request.match_info["id"])
        return web.json_response([c for c in _CARTS if c["userId"] == uid])

    async def create_cart(request: web.Request) -> web.Response:
        data = await request.json()
        return web.json_response({**data, "id": next(ids)}, status=201)

    async def empty(request: web.Request) -> web.Response:
        return web.Response(status=200)

    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(5.0)
        return web.json_response({"slow": True})

    app = web.Application()
    app.router.add_get("/products", list_products)
    app.router.add_post("/products", create_product)
    app.router.add_get("/products/{id}", get_product)
    app.router.add_put("/products/{id}", update_product)
    app.router.add_patch("/products/{id}", update_product)
    app.router.add_delete("/products/{id}", delete_any)
    app.router.add_get("/categories", list_categories)
    app.router.add_get("/categories/{id}", get_category)
    app.router.add_get("/categories/{id}/products", category_products)
    app.router.add_delete("/categories/{id}", delete_any)
    app.router.add_get("/users", list_users)
    app.router.add_post("/users", create_user)
    app.router.add_post("/users/is-available", email_available)
    app.router.add_get("/users/{id}", get_user)
    app.router.add_delete("/users/{id}", delete_any)
    app.router.add_post("/auth/login", login)
    app.router.add_post("/auth/refresh-token", refresh)
    app.router.add_get("/auth/profile", profile)
    app.router.add_get("/carts", list_carts)
    app.router.add_post("/carts", create_cart)
    app.router.add_get("/carts/user/{id}", user_carts)
    app.router.add_get("/carts/{id}", get_cart)
    app.router.add_delete("/carts/{id}", delete_any)
    app.router.add_get("/empty", empty)
    app.router.add_get("/slow", slow)
    return app


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
async def store_server() -> AsyncIterator[str]:
    """In-memory fake store server.

    Returns the base URL (e.g., 'http://127.0.0.1:54321').
    """
    app = _create_store_app()
    port = _get_free_port()
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    yield f"http://127.0.0.1:{port}"
    await runner.cleanup()


@pytest.fixture
def sync_store_server() -> Iterator[str]:
    """Fake store server running in a background thread.

    For CLI tests, where the command under test owns the event loop.
    """
    port = _get_free_port()
    started = threading.Event()
    loop_holder: list[asyncio.AbstractEventLoop] = []

    def _thread_target() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        runner = web.AppRunner(_create_store_app())
        loop.run_until_complete(runner.setup())
        site = web.TCPSite(runner, "127.0.0.1", port)
        loop.run_until_complete(site.start())
        loop_holder.append(loop)
        started.set()
        loop.run_forever()
        loop.run_until_complete(runner.cleanup())
        loop.close()

    thread = threading.Thread(target=_thread_target, daemon=True)
    thread.start()
    started.wait(timeout=5.0)

    yield f"http://127.0.0.1:{port}"

    if loop_holder:
        loop_holder[0].call_soon_threadsafe(loop_holder[0].stop)
    thread.join(timeout=5.0)


# =============================================================================
# Profile builders
# =============================================================================


async def _noop(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    return None


def make_profile(
    weights: dict[str, float],
    *,
    behaviors: dict[str, object] | None = None,
    think_time: tuple[float, float] = (0.0, 0.0),
    log_interval: int = 1000,
    **overrides: object,
) -> TestProfile:
    """Build a small TestProfile keyed by plain strings."""
    return TestProfile(
        name=str(overrides.pop("name", "custom")),
        title=str(overrides.pop("title", "Custom Test")),
        description="",
        stages=overrides.pop("stages", (Stage("1m", 1),)),  # type: ignore[arg-type]
        thresholds=overrides.pop("thresholds", {}),  # type: ignore[arg-type]
        scenarios={name: ScenarioConfig(w) for name, w in weights.items()},  # type: ignore[misc]
        behaviors=behaviors or {name: _noop for name in weights},  # type: ignore[arg-type]
        think_time=think_time,
        log_interval=log_interval,
        **overrides,  # type: ignore[arg-type]
    )


@pytest.fixture
def profile_factory() -> Callable[..., TestProfile]:
    """Return the ``make_profile`` builder."""
    return make_profile
