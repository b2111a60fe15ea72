"""Load profile: steady expected traffic at 10 virtual users."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from storeload.core.catalog import ScenarioConfig
from storeload.core.duration import Stage
from storeload.profiles import data
from storeload.profiles.base import TestProfile, pause, pick, rand_int

if TYPE_CHECKING:
    from storeload.api.store import FakeStoreAPI


class LoadScenario(StrEnum):
    BROWSE_CATALOG = "browseCatalog"
    SEARCH_AND_FILTER = "searchAndFilter"
    VIEW_PRODUCT_DETAILS = "viewProductDetails"
    USER_MANAGEMENT = "userManagement"
    CATEGORY_BROWSING = "categoryBrowsing"
    AUTHENTICATION_FLOW = "authenticationFlow"


SCENARIOS = {
    LoadScenario.BROWSE_CATALOG: ScenarioConfig(30, description="Paging through the catalog"),
    LoadScenario.SEARCH_AND_FILTER: ScenarioConfig(
        25, description="Search, price filter and category filter"
    ),
    LoadScenario.VIEW_PRODUCT_DETAILS: ScenarioConfig(20, description="Opening product pages"),
    LoadScenario.USER_MANAGEMENT: ScenarioConfig(5, description="User lookups and email checks"),
    LoadScenario.CATEGORY_BROWSING: ScenarioConfig(15, description="Category drill-down"),
    LoadScenario.AUTHENTICATION_FLOW: ScenarioConfig(5, description="Login, profile, logout"),
}


async def browse_catalog(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.list_products(0, 20)
    await pause(0.5)
    await api.products.list_products(20, 20)
    await pause(0.3)
    await api.products.list_products(40, 20)
    await pause(0.2)


async def search_and_filter(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.search_products("shirt")
    await pause(0.4)
    price_range = pick(data.PRICE_RANGES)
    await api.products.products_by_price_range(price_range.min, price_range.max)
    await pause(0.3)
    await api.products.products_by_category(pick(data.PRODUCT_CATEGORY_IDS))
    await pause(0.2)


async def view_product_details(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.list_products(0, 10)
    await pause(0.2)
    for product_id in data.PRODUCT_IDS[:3]:
        await api.products.get_product(product_id)
        await pause(0.5)


async def user_management(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.users.list_users(0, 10)
    await pause(0.3)
    await api.users.get_user(pick(data.USER_IDS))
    await pause(0.4)
    await api.users.check_email_availability(f"test{rand_int(0, 999)}@example.com")
    await pause(0.2)


async def category_browsing(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.categories.list_categories()
    await pause(0.3)
    category_id = pick(data.CATEGORY_IDS)
    await api.categories.get_category(category_id)
    await pause(0.2)
    await api.categories.products_in_category(category_id, 0, 15)
    await pause(0.4)


async def authentication_flow(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.auth.login(data.LOGIN_EMAIL, data.LOGIN_PASSWORD)
    await pause(0.5)
    if api.auth.is_authenticated():
        await api.auth.get_profile()
        await pause(0.3)
        api.auth.logout()
    await pause(0.2)


BEHAVIORS = {
    LoadScenario.BROWSE_CATALOG: browse_catalog,
    LoadScenario.SEARCH_AND_FILTER: search_and_filter,
    LoadScenario.VIEW_PRODUCT_DETAILS: view_product_details,
    LoadScenario.USER_MANAGEMENT: user_management,
    LoadScenario.CATEGORY_BROWSING: category_browsing,
    LoadScenario.AUTHENTICATION_FLOW: authentication_flow,
}

PROFILE = TestProfile(
    name="load",
    title="Load Test",
    description="Normal expected load: ramp to 10 users, hold, ramp down",
    stages=(Stage("2m", 10), Stage("5m", 10), Stage("2m", 0)),
    thresholds={
        "http_req_duration": ("p(95)<500",),
        "http_req_failed": ("rate<0.1",),
        "api_calls_total": ("count>100",),
    },
    scenarios=SCENARIOS,
    behaviors=BEHAVIORS,
    think_time=(1.0, 3.0),
    log_interval=50,
    notes=("Expected load patterns under normal conditions",),
)
