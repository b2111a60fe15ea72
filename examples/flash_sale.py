"""Custom profile: steady browsing with a two minute flash-sale surge.

Builds a TestProfile by hand instead of using a built-in one. During
minutes 2 to 4 the browsing scenarios drop out and the sale scenarios
share the surge budget. Run with:

    python examples/flash_sale.py
"""

from __future__ import annotations

import asyncio
from enum import StrEnum

from storeload import FakeStoreAPI, PhaseWeightConfig, TestProfile, TestSession
from storeload._internal.logging import setup_logging
from storeload.core.catalog import ScenarioConfig
from storeload.core.duration import Stage
from storeload.profiles.base import pause, pick

HOT_PRODUCTS = (1, 2, 3)


class Sale(StrEnum):
    BROWSE = "browse"
    SEARCH = "search"
    HOT_PRODUCT = "hotProduct"
    LOGIN_AND_BUY = "loginAndBuy"


SCENARIOS = {
    Sale.BROWSE: ScenarioConfig(60, description="Paging through the catalog"),
    Sale.SEARCH: ScenarioConfig(40, description="Title search"),
    Sale.HOT_PRODUCT: ScenarioConfig(0, description="Hammering the sale items"),
    Sale.LOGIN_AND_BUY: ScenarioConfig(0, description="Login, profile, cart"),
}


async def browse(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.list_products(0, 20)
    await pause(0.5)


async def search(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.search_products(pick(("shirt", "shoes", "lamp")))


async def hot_product(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.get_products_batch(HOT_PRODUCTS)


async def login_and_buy(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.auth.login("john@mail.com", "changeme")
    if api.auth.is_authenticated():
        await api.auth.get_profile()
        api.auth.logout()


PROFILE = TestProfile(
    name="flash-sale",
    title="Flash Sale Test",
    description="Browsing baseline with a flash-sale surge",
    stages=(Stage("1m", 5), Stage("4m", 20), Stage("1m", 0)),
    thresholds={"http_req_failed": ("rate<0.2",)},
    scenarios=SCENARIOS,
    behaviors={
        Sale.BROWSE: browse,
        Sale.SEARCH: search,
        Sale.HOT_PRODUCT: hot_product,
        Sale.LOGIN_AND_BUY: login_and_buy,
    },
    think_time=(1.0, 2.0),
    surge_think_time=(0.1, 0.3),
    phase=PhaseWeightConfig.from_scenarios(2, 4, SCENARIOS, weight_budget=200.0),
)


if __name__ == "__main__":
    setup_logging()
    # 0.1 plays the six minute table in 36 seconds.
    result = asyncio.run(TestSession(PROFILE, time_scale=0.1, seed=7).run())
    for stats in result.scenarios.values():
        print(f"{stats.name:<12} {stats.iterations:>5} iterations, {stats.failures} failed")
