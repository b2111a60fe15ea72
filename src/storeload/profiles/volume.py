"""Volume profile: few users moving large amounts of data."""

from __future__ import annotations

import time
from enum import StrEnum
from typing import TYPE_CHECKING

from storeload.core.catalog import ScenarioConfig
from storeload.core.duration import Stage
from storeload.profiles import data
from storeload.profiles.base import TestProfile, pause, rand_int, unique_suffix

if TYPE_CHECKING:
    from storeload.api.store import FakeStoreAPI

STREAM_SECONDS = 5.0

_DESCRIPTION_PADDING = " ".join(["Data padding for larger payloads."] * 20)


class VolumeScenario(StrEnum):
    BULK_DATA_RETRIEVAL = "bulkDataRetrieval"
    LARGE_PAGINATION_CYCLES = "largePaginationCycles"
    COMPREHENSIVE_DATA_SWEEP = "comprehensiveDataSweep"
    BULK_CREATION_OPERATIONS = "bulkCreationOperations"
    DATA_MINING_SIMULATION = "dataMiningSimulation"
    ARCHIVAL_DATA_ACCESS = "archivalDataAccess"
    MASS_DATA_EXPORT_SIMULATION = "massDataExportSimulation"
    CONTINUOUS_DATA_STREAMING = "continuousDataStreaming"


SCENARIOS = {
    VolumeScenario.BULK_DATA_RETRIEVAL: ScenarioConfig(
        15, description="Large pages across every resource"
    ),
    VolumeScenario.LARGE_PAGINATION_CYCLES: ScenarioConfig(
        15, description="Ten-page walks over products and users"
    ),
    VolumeScenario.COMPREHENSIVE_DATA_SWEEP: ScenarioConfig(
        15, description="Complex search/filter queries across price and categories"
    ),
    VolumeScenario.BULK_CREATION_OPERATIONS: ScenarioConfig(
        10, description="Bulk product and user creation with cleanup"
    ),
    VolumeScenario.DATA_MINING_SIMULATION: ScenarioConfig(
        10, description="Price bands, categories and search terms"
    ),
    VolumeScenario.ARCHIVAL_DATA_ACCESS: ScenarioConfig(
        10, description="High ids and deep pagination"
    ),
    VolumeScenario.MASS_DATA_EXPORT_SIMULATION: ScenarioConfig(
        15, description="Export-style full catalog reads"
    ),
    VolumeScenario.CONTINUOUS_DATA_STREAMING: ScenarioConfig(
        10, description="Small requests in a tight loop for a few seconds"
    ),
}


async def bulk_data_retrieval(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    await api.products.list_products(0, 100)
    await api.products.list_products(100, 100)
    await api.products.list_products(200, 100)
    await api.users.list_users(0, 50)
    await api.categories.list_categories(0, 20)
    await pause(0.2)
    for product_id in range(1, 21):
        await api.products.get_product(product_id)


async def large_pagination_cycles(
    api: FakeStoreAPI, elapsed_minutes: int, iteration: int
) -> None:
    page_size = 50
    for page in range(10):
        offset = page * page_size
        await api.products.list_products(offset, page_size)
        await api.users.list_users(offset, min(page_size, 30))
        await pause(0.1)


async def comprehensive_data_sweep(
    api: FakeStoreAPI, elapsed_minutes: int, iteration: int
) -> None:
    for category_id in data.CATEGORY_IDS:
        await api.categories.products_in_category(category_id, 0, 30)
    for price_range in data.PRICE_RANGES:
        await api.products.products_by_price_range(price_range.min, price_range.max)
    await api.users.get_users_batch(data.USER_IDS)
    await api.products.get_products_batch(data.PRODUCT_IDS)
    await pause(0.15)


async def bulk_creation_operations(
    api: FakeStoreAPI, elapsed_minutes: int, iteration: int
) -> None:
    created: list[int] = []
    for i in range(10):
        product = await api.products.create_product(
            {
                **data.NEW_PRODUCT,
                "title": f"Volume Test Product {unique_suffix()}_{i}",
                "description": f"Generated during volume testing - batch {i}. "
                f"{_DESCRIPTION_PADDING}",
                "price": rand_int(10, 509),
                "categoryId": data.CATEGORY_IDS[i % len(data.CATEGORY_IDS)],
            }
        )
        if product is not None and product.id is not None:
            created.append(product.id)
    await pause(0.2)

    for i in range(5):
        suffix = unique_suffix()
        await api.users.create_user(
            {
                **data.NEW_USER,
                "email": f"volume_test_{suffix}_{i}@example.com",
                "name": f"Volume Test User {suffix}_{i}",
            }
        )
    await pause(0.2)

    for product_id in created:
        await api.products.delete_product(product_id)


async def data_mining_simulation(
    api: FakeStoreAPI, elapsed_minutes: int, iteration: int
) -> None:
    for min_price in range(0, 500, 100):
        await api.products.products_by_price_range(min_price, min_price + 100)
    for category_id in data.CATEGORY_IDS:
        await api.categories.products_in_category(category_id, 0, 50)
    for term in data.SEARCH_TERMS:
        await api.products.search_products(term)
    await pause(0.3)


async def archival_data_access(api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
    for product_id in range(50, 101, 10):
        await api.products.get_product(product_id)
    await api.products.list_products(500, 50)
    await api.products.list_products(1000, 50)
    await api.users.list_users(100, 30)
    await pause(0.25)


async def mass_data_export_simulation(
    api: FakeStoreAPI, elapsed_minutes: int, iteration: int
) -> None:
    for offset in range(0, 1000, 100):
        await api.products.list_products(offset, 100)
    await api.users.list_users(0, 100)
    for category_id in data.CATEGORY_IDS:
        await api.categories.products_in_category(category_id, 0, 100)
    await pause(0.4)


async def continuous_data_streaming(
    api: FakeStoreAPI, elapsed_minutes: int, iteration: int
) -> None:
    deadline = time.monotonic() + STREAM_SECONDS
    while time.monotonic() < deadline:
        await api.products.list_products(rand_int(0, 200), 20)
        await api.users.list_users(rand_int(0, 50), 10)
        await api.categories.list_categories(0, 5)
        await pause(0.1)


BEHAVIORS = {
    VolumeScenario.BULK_DATA_RETRIEVAL: bulk_data_retrieval,
    VolumeScenario.LARGE_PAGINATION_CYCLES: large_pagination_cycles,
    VolumeScenario.COMPREHENSIVE_DATA_SWEEP: comprehensive_data_sweep,
    VolumeScenario.BULK_CREATION_OPERATIONS: bulk_creation_operations,
    VolumeScenario.DATA_MINING_SIMULATION: data_mining_simulation,
    VolumeScenario.ARCHIVAL_DATA_ACCESS: archival_data_access,
    VolumeScenario.MASS_DATA_EXPORT_SIMULATION: mass_data_export_simulation,
    VolumeScenario.CONTINUOUS_DATA_STREAMING: continuous_data_streaming,
}

PROFILE = TestProfile(
    name="volume",
    title="Volume Test",
    description="Five users pulling large pages and bulk writes for ten minutes",
    stages=(Stage("2m", 5), Stage("10m", 5), Stage("2m", 0)),
    thresholds={
        "http_req_duration": ("p(95)<800",),
        "http_req_failed": ("rate<0.1",),
        "data_received": ("count>1000000",),
    },
    scenarios=SCENARIOS,
    behaviors=BEHAVIORS,
    think_time=(0.1, 0.4),
    log_interval=50,
    notes=("Large payloads, deep pagination and bulk writes",),
    checklist=(
        "Latency of large pages versus small ones",
        "Bytes received against the data_received threshold",
    ),
)
