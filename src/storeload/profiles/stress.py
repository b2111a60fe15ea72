"""Stress profile: step the load up to 50 virtual users with short think times."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from storeload.core.catalog import ScenarioConfig
from storeload.core.duration import Stage
from storeload.profiles import data
from storeload.profiles.base import TestProfile, pause, pick, rand_int, unique_suffix

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from storeload.api.store import FakeStoreAPI


class StressScenario(StrEnum):
    RAPID_FIRE_REQUESTS = "rapidFireRequests"
    HEAVY_DATA_RETRIEVAL = "heavyDataRetrieval"
    CONCURRENT_CRUD_OPERATIONS = "concurrentCrudOperations"
    AUTHENTICATED_HEAVY_LOAD = "authenticatedHeavyLoad"
    MIXED_WORKLOAD = "mixedWorkload"
    RESOURCE_EXHAUSTION = "resourceExhaustion"


SCENARIOS = {
    StressScenario.RAPID_FIRE_REQUESTS: ScenarioConfig(
        20, description="Back-to-back product lookups and large pages"
    ),
    StressScenario.HEAVY_DATA_RETRIEVAL: ScenarioConfig(
        25, description="Large pages, batch lookups and category sweeps"
    ),
    StressScenario.CONCURRENT_CRUD_OPERATIONS: ScenarioConfig(
        20, description="Create, patch and delete products"
    ),
    StressScenario.AUTHENTICATED_HEAVY_LOAD: ScenarioConfig(
        15, description="Repeated profile reads under one login"
    ),
    StressScenario.MIXED_WORKLOAD: ScenarioConfig(10, description="Random mix of reads and writes"),
    StressScenario.RESOURCE_EXHAUSTION: ScenarioConfig(
        10, description="Deep pagination and price filtering"
    ),
}


async def rapid_fire_requests(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    for _ in range(5):
        await api.products.get_product(pick(data.PRODUCT_IDS))
    await pause(0.1)
    for offset in (0, 50, 100):
        await api.products.list_products(offset, 50)


async def heavy_data_retrieval(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.list_products(0, 100)
    await pause(0.2)
    await api.products.get_products_batch(data.PRODUCT_IDS)
    await pause(0.2)
    for category_id in data.CATEGORY_IDS:
        await api.categories.products_in_category(category_id, 0, 50)


async def concurrent_crud_operations(
    api: FakeStoreAPI, elapsed_minutes: int, iteration: int
) -> None:
    created: list[int] = []
    for i in range(3):
        product = await api.products.create_product(
            {
                **data.NEW_PRODUCT,
                "title": f"{data.NEW_PRODUCT['title']} {unique_suffix()}_{i}",
                "price": rand_int(10, 210),
            }
        )
        if product is not None and product.id is not None:
            created.append(product.id)
    await pause(0.1)

    for product_id in created:
        await api.products.patch_product(product_id, {"price": rand_int(20, 320)})
    await pause(0.1)

    for product_id in created:
        await api.products.delete_product(product_id)


async def authenticated_heavy_load(
    api: FakeStoreAPI, elapsed_minutes: int, iteration: int
) -> None:
    await api.auth.login(data.LOGIN_EMAIL, data.LOGIN_PASSWORD)
    if not api.auth.is_authenticated():
        return
    for _ in range(10):
        await api.auth.get_profile()
    await pause(0.1)
    await api.users.list_users(0, 100)
    for user_id in data.USER_IDS:
        await api.users.get_user(user_id)
    api.auth.logout()


async def mixed_workload(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    operations: list[Callable[[], Awaitable[object]]] = [
        lambda: api.products.list_products(rand_int(0, 99), 25),
        lambda: api.products.get_product(pick(data.PRODUCT_IDS)),
        api.categories.list_categories,
        lambda: api.users.list_users(rand_int(0, 49), 20),
        lambda: api.products.create_product(
            {
                **data.NEW_PRODUCT,
                "title": f"Stress Test Product {unique_suffix()}",
                "price": rand_int(1, 1000),
            }
        ),
        lambda: api.users.create_user(
            {
                **data.NEW_USER,
                "email": f"stress_{unique_suffix()}@test.com",
                "name": f"Stress User {unique_suffix()}",
            }
        ),
    ]
    for _ in range(rand_int(3, 5)):
        await pick(operations)()


async def resource_exhaustion(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    for page in range(5):
        await api.products.list_products(page * 200, 200)
    for price_range in data.PRICE_RANGES:
        await api.products.products_by_price_range(price_range.min, price_range.max)


BEHAVIORS = {
    StressScenario.RAPID_FIRE_REQUESTS: rapid_fire_requests,
    StressScenario.HEAVY_DATA_RETRIEVAL: heavy_data_retrieval,
    StressScenario.CONCURRENT_CRUD_OPERATIONS: concurrent_crud_operations,
    StressScenario.AUTHENTICATED_HEAVY_LOAD: authenticated_heavy_load,
    StressScenario.MIXED_WORKLOAD: mixed_workload,
    StressScenario.RESOURCE_EXHAUSTION: resource_exhaustion,
}

PROFILE = TestProfile(
    name="stress",
    title="Stress Test",
    description="Find the breaking point: step from 10 to 20 to 50 users",
    stages=(
        Stage("2m", 10),
        Stage("5m", 10),
        Stage("2m", 20),
        Stage("5m", 20),
        Stage("2m", 50),
        Stage("5m", 50),
        Stage("2m", 0),
    ),
    thresholds={
        "http_req_duration": ("p(95)<1000",),
        "http_req_failed": ("rate<0.2",),
    },
    scenarios=SCENARIOS,
    behaviors=BEHAVIORS,
    think_time=(0.1, 0.6),
    log_interval=50,
    notes=("Testing system limits and potential breaking points",),
    checklist=(
        "Latency growth at each load step",
        "Error rate once the system saturates",
        "Recovery during the final ramp down",
    ),
)
