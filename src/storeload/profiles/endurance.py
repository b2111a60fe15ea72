"""Endurance profile: 8 users for 40 minutes with late-joining scenarios."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from storeload._internal.logging import get_logger
from storeload.core.catalog import ScenarioConfig
from storeload.core.duration import Stage
from storeload.core.phase import activate_after
from storeload.profiles import data
from storeload.profiles.base import TestProfile, pause, pick, rand_int

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from storeload.api.store import FakeStoreAPI

logger = get_logger("profiles.endurance")

CACHE_WARMUP_AFTER_MINUTES = 10
MEMORY_STRESS_AFTER_MINUTES = 20


class EnduranceScenario(StrEnum):
    REGULAR_USER_ACTIVITY = "regularUserActivity"
    PERIODIC_MAINTENANCE_SIMULATION = "periodicMaintenanceSimulation"
    LONG_TERM_BROWSING_SESSION = "longTermBrowsingSession"
    AUTHENTICATED_USER_SESSION = "authenticatedUserSession"
    BACKGROUND_DATA_PROCESSING = "backgroundDataProcessing"
    CACHE_WARMUP_ACTIVITY = "cacheWarmupActivity"
    MEMORY_STRESS_PATTERNS = "memoryStressPatterns"


SCENARIOS = {
    EnduranceScenario.REGULAR_USER_ACTIVITY: ScenarioConfig(
        70, description="Catalog pages and product views"
    ),
    EnduranceScenario.PERIODIC_MAINTENANCE_SIMULATION: ScenarioConfig(
        5, description="Health checks with a periodic deep check"
    ),
    EnduranceScenario.LONG_TERM_BROWSING_SESSION: ScenarioConfig(
        15, description="Mixed browsing, search and price comparison"
    ),
    EnduranceScenario.AUTHENTICATED_USER_SESSION: ScenarioConfig(
        8, description="Long-lived login with periodic re-login"
    ),
    EnduranceScenario.BACKGROUND_DATA_PROCESSING: ScenarioConfig(
        2, description="Sync, cache and monitoring style reads"
    ),
    EnduranceScenario.CACHE_WARMUP_ACTIVITY: ScenarioConfig(
        0, description="Cache warm-up, joins after 10 minutes"
    ),
    EnduranceScenario.MEMORY_STRESS_PATTERNS: ScenarioConfig(
        0, description="Large reads and filters, joins after 20 minutes"
    ),
}

DYNAMIC_WEIGHTS = {
    EnduranceScenario.CACHE_WARMUP_ACTIVITY: activate_after(CACHE_WARMUP_AFTER_MINUTES, 10),
    EnduranceScenario.MEMORY_STRESS_PATTERNS: activate_after(MEMORY_STRESS_AFTER_MINUTES, 10),
}


async def regular_user_activity(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.list_products(rand_int(0, 49), rand_int(10, 20))
    await pause(0.3)
    await api.products.get_product(pick(data.PRODUCT_IDS))
    await pause(0.5)
    if iteration % 3 == 0:
        await api.categories.products_in_category(pick(data.CATEGORY_IDS), 0, 15)
        await pause(0.4)


async def periodic_maintenance_simulation(
    api: FakeStoreAPI, elapsed_minutes: int, iteration: int
) -> None:
    await api.products.list_products(0, 1)
    await api.users.list_users(0, 1)
    await api.categories.list_categories(0, 5)
    await pause(0.2)
    if iteration % 100 == 0:
        logger.info("Maintenance check at iteration %d", iteration)
        await api.products.get_products_batch([1, 2, 3, 4, 5])
        await api.users.get_users_batch([1, 2, 3])
        await api.categories.get_categories_batch([1, 2, 3])
        await pause(0.5)


async def long_term_browsing_session(
    api: FakeStoreAPI, elapsed_minutes: int, iteration: int
) -> None:
    async def explore() -> None:
        await api.products.list_products(rand_int(0, 99), 15)
        await pause(0.4)

    async def search() -> None:
        await api.products.search_products(pick(data.SEARCH_TERMS[:4]))
        await pause(0.3)

    async def compare_prices() -> None:
        price_range = pick(data.PRICE_RANGES)
        await api.products.products_by_price_range(price_range.min, price_range.max)
        await pause(0.4)

    activities: list[Callable[[], Awaitable[None]]] = [explore, search, compare_prices]
    for _ in range(rand_int(2, 3)):
        await pick(activities)()


async def authenticated_user_session(
    api: FakeStoreAPI, elapsed_minutes: int, iteration: int
) -> None:
    if iteration % 20 == 0 or not api.auth.is_authenticated():
        await api.auth.login(data.LOGIN_EMAIL, data.LOGIN_PASSWORD)
        await pause(0.2)
    if not api.auth.is_authenticated():
        return
    await api.auth.get_profile()
    await pause(0.3)
    await api.products.list_products(0, 12)
    await pause(0.4)
    if iteration % 50 == 0:
        api.auth.logout()
        await pause(0.1)


async def background_data_processing(
    api: FakeStoreAPI, elapsed_minutes: int, iteration: int
) -> None:
    async def synchronise() -> None:
        for product_id in range(1, 6):
            await api.products.get_product(product_id)

    async def warm_cache() -> None:
        await api.categories.list_categories()
        await api.products.list_products(0, 20)

    async def monitor() -> None:
        await api.users.list_users(0, 5)
        await api.products.list_products(0, 5)
        await api.categories.list_categories(0, 3)

    tasks: list[Callable[[], Awaitable[None]]] = [synchronise, warm_cache, monitor]
    await pick(tasks)()
    await pause(0.15)


async def cache_warmup_activity(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.list_products(0, 10)
    await api.categories.list_categories(0, 5)
    await api.products.get_product(1)
    await api.products.get_product(2)
    await pause(0.1)
    if iteration % 30 == 0:
        for product_id in range(1, 11):
            await api.products.get_product(product_id)
        for category_id in data.CATEGORY_IDS:
            await api.categories.get_category(category_id)
        await pause(0.3)


async def memory_stress_patterns(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.list_products(0, 50)
    await pause(0.2)
    for i in range(10):
        await api.products.get_product(data.PRODUCT_IDS[i % len(data.PRODUCT_IDS)])
    await pause(0.3)
    for price_range in data.PRICE_RANGES:
        await api.products.products_by_price_range(price_range.min, price_range.max)
        await pause(0.1)


BEHAVIORS = {
    EnduranceScenario.REGULAR_USER_ACTIVITY: regular_user_activity,
    EnduranceScenario.PERIODIC_MAINTENANCE_SIMULATION: periodic_maintenance_simulation,
    EnduranceScenario.LONG_TERM_BROWSING_SESSION: long_term_browsing_session,
    EnduranceScenario.AUTHENTICATED_USER_SESSION: authenticated_user_session,
    EnduranceScenario.BACKGROUND_DATA_PROCESSING: background_data_processing,
    EnduranceScenario.CACHE_WARMUP_ACTIVITY: cache_warmup_activity,
    EnduranceScenario.MEMORY_STRESS_PATTERNS: memory_stress_patterns,
}

PROFILE = TestProfile(
    name="endurance",
    title="Endurance Test",
    description="Eight users for 40 minutes; cache and memory scenarios join late",
    stages=(Stage("2m", 8), Stage("40m", 8), Stage("2m", 0)),
    thresholds={
        "http_req_duration": ("p(95)<600",),
        "http_req_failed": ("rate<0.1",),
    },
    scenarios=SCENARIOS,
    behaviors=BEHAVIORS,
    think_time=(0.5, 2.0),
    log_interval=50,
    dynamic_weights=DYNAMIC_WEIGHTS,
    notes=(
        f"Cache warm-up joins after {CACHE_WARMUP_AFTER_MINUTES} minutes",
        f"Memory stress joins after {MEMORY_STRESS_AFTER_MINUTES} minutes",
    ),
    checklist=(
        "Response time consistency over duration",
        "Error rate stability",
        "Performance degradation trends",
        "Cache effectiveness over time",
    ),
)
