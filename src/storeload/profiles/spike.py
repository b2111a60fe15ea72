"""Spike profile: a sudden surge to 50 users with a surge-only scenario mix.

Inside the surge window the baseline scenarios drop out and the surge
budget is split evenly across the high-load scenarios; think time also
shrinks. Outside the window only the baseline scenarios run.

The surge budget is 200 rather than ``100 - sum(baseline weights)``. The
baseline weights already sum to 100, so that formula leaves no weight for
the surge and every spike iteration falls back to ``casualBrowsing``. With
200 each of the six surge scenarios gets ``floor(100 / 6) = 16``, so the
surge mix here differs from a run that used the zero budget.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from storeload.core.catalog import ScenarioConfig
from storeload.core.duration import Stage
from storeload.core.phase import PhaseWeightConfig
from storeload.profiles import data
from storeload.profiles.base import TestProfile, pause, pick, unique_suffix

if TYPE_CHECKING:
    from storeload.api.store import FakeStoreAPI

SPIKE_START_MINUTE = 1
SPIKE_END_MINUTE = 5

# Baseline weights sum to 100, so the surge gets the second 100.
WEIGHT_BUDGET = 200.0


class SpikeScenario(StrEnum):
    CASUAL_BROWSING = "casualBrowsing"
    PRODUCT_SEARCH = "productSearch"
    CATEGORY_EXPLORATION = "categoryExploration"
    FLASH_SALE_TRAFFIC = "flashSaleTraffic"
    VIRAL_CONTENT_ACCESS = "viralContentAccess"
    BOT_LIKE_ACTIVITY = "botLikeActivity"
    CONCURRENT_CHECKOUT = "concurrentCheckout"
    SOCIAL_MEDIA_RUSH = "socialMediaRush"
    API_HAMMERING = "apiHammering"


SCENARIOS = {
    SpikeScenario.CASUAL_BROWSING: ScenarioConfig(30, description="Normal, slow user browsing"),
    SpikeScenario.PRODUCT_SEARCH: ScenarioConfig(
        40, description="Normal search and category checks"
    ),
    SpikeScenario.CATEGORY_EXPLORATION: ScenarioConfig(
        30, description="Normal category deep dive"
    ),
    SpikeScenario.FLASH_SALE_TRAFFIC: ScenarioConfig(
        0, description="Users rushing popular products"
    ),
    SpikeScenario.VIRAL_CONTENT_ACCESS: ScenarioConfig(
        0, description="Sudden surge to specific viral content"
    ),
    SpikeScenario.BOT_LIKE_ACTIVITY: ScenarioConfig(
        0, description="Rapid, automated-looking sequential requests"
    ),
    SpikeScenario.CONCURRENT_CHECKOUT: ScenarioConfig(
        0, description="Users attempting simultaneous checkouts"
    ),
    SpikeScenario.SOCIAL_MEDIA_RUSH: ScenarioConfig(
        0, description="Traffic from social media links"
    ),
    SpikeScenario.API_HAMMERING: ScenarioConfig(
        0, description="Aggressive sequential requests against rate limits"
    ),
}

PHASE = PhaseWeightConfig.from_scenarios(
    SPIKE_START_MINUTE, SPIKE_END_MINUTE, SCENARIOS, weight_budget=WEIGHT_BUDGET
)


async def casual_browsing(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.list_products(0, 10)
    await pause(0.5)
    await api.products.get_product(pick(data.PRODUCT_IDS))
    await pause(0.8)


async def product_search(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.search_products("phone")
    await pause(0.4)
    await api.categories.list_categories()
    await pause(0.3)


async def category_exploration(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    category_id = pick(data.CATEGORY_IDS)
    await api.categories.get_category(category_id)
    await pause(0.3)
    await api.categories.products_in_category(category_id, 0, 15)
    await pause(0.6)


async def flash_sale_traffic(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    for product_id in (1, 2, 3, 4, 5):
        await api.products.get_product(product_id)
    await pause(0.1)
    await api.products.list_products(0, 20)
    await pause(0.1)
    await api.categories.list_categories()


async def viral_content_access(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.get_product(1)
    await api.products.get_product(1)
    await api.categories.products_in_category(1, 0, 30)
    await api.products.search_products("trending")
    await pause(0.05)


async def bot_like_activity(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    for product_id in range(1, 9):
        await api.products.get_product(product_id)
    for page in range(10):
        await api.products.list_products(page * 10, 10)


async def concurrent_checkout(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.auth.login(data.LOGIN_EMAIL, data.LOGIN_PASSWORD)
    if api.auth.is_authenticated():
        for _ in range(3):
            await api.auth.get_profile()
        for product_id in data.PRODUCT_IDS[:3]:
            await api.products.get_product(product_id)
        api.auth.logout()
    await pause(0.05)


async def social_media_rush(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    for product_id in (1, 5, 10):
        await api.products.get_product(product_id)
        await api.categories.get_category(1)
        await api.products.list_products(0, 5)
    await pause(0.08)

    suffix = unique_suffix()
    await api.users.create_user(
        {**data.NEW_USER, "email": f"social_{suffix}@example.com", "name": f"Social User {suffix}"}
    )


async def api_hammering(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    for _ in range(20):
        await api.products.list_products(0, 10)


BEHAVIORS = {
    SpikeScenario.CASUAL_BROWSING: casual_browsing,
    SpikeScenario.PRODUCT_SEARCH: product_search,
    SpikeScenario.CATEGORY_EXPLORATION: category_exploration,
    SpikeScenario.FLASH_SALE_TRAFFIC: flash_sale_traffic,
    SpikeScenario.VIRAL_CONTENT_ACCESS: viral_content_access,
    SpikeScenario.BOT_LIKE_ACTIVITY: bot_like_activity,
    SpikeScenario.CONCURRENT_CHECKOUT: concurrent_checkout,
    SpikeScenario.SOCIAL_MEDIA_RUSH: social_media_rush,
    SpikeScenario.API_HAMMERING: api_hammering,
}

PROFILE = TestProfile(
    name="spike",
    title="Spike Test",
    description="Sudden surge from 2 to 50 users and recovery",
    stages=(
        Stage("10s", 2),
        Stage("1m", 50),
        Stage("3m", 50),
        Stage("10s", 2),
        Stage("3m", 2),
    ),
    thresholds={
        "http_req_duration": ("p(95)<2000",),
        "http_req_failed": ("rate<0.3",),
    },
    scenarios=SCENARIOS,
    behaviors=BEHAVIORS,
    think_time=(1.0, 3.0),
    surge_think_time=(0.1, 0.4),
    log_interval=25,
    phase=PHASE,
    notes=("Testing sudden traffic surge and recovery",),
    checklist=(
        "Response time spikes during load surge",
        "Error rates during peak traffic",
        "System recovery time after spike",
    ),
)
