"""Categories resource: ``/categories``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from storeload.api.base import ResourceAPI
from storeload.api.models import Category, Product
from storeload.client.http_client import BatchRequest

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class CategoriesAPI(ResourceAPI):
    """Parameter-to-URL mapping for category endpoints."""

    endpoint = "/categories"

    async def list_categories(self, offset: int = 0, limit: int = 10) -> list[Category]:
        response = await self._client.get(
            self.endpoint,
            params={"offset": offset, "limit": limit},
            name="GET /categories",
        )
        return self._many(response, Category.list_from_json)

    async def get_category(self, category_id: int) -> Category | None:
        response = await self._client.get(self._path(category_id), name="GET /categories/:id")
        return self._one(response, Category.from_json)

    async def products_in_category(
        self, category_id: int, offset: int = 0, limit: int = 10
    ) -> list[Product]:
        response = await self._client.get(
            self._path(category_id, "products"),
            params={"offset": offset, "limit": limit},
            name="GET /categories/:id/products",
        )
        return self._many(response, Product.list_from_json)

    async def create_category(self, data: Mapping[str, object]) -> Category | None:
        response = await self._client.post(
            self.endpoint, json_body=dict(data), name="POST /categories"
        )
        return self._one(response, Category.from_json)

    async def update_category(
        self, category_id: int, data: Mapping[str, object]
    ) -> Category | None:
        response = await self._client.put(
            self._path(category_id), json_body=dict(data), name="PUT /categories/:id"
        )
        return self._one(response, Category.from_json)

    async def patch_category(
        self, category_id: int, data: Mapping[str, object]
    ) -> Category | None:
        response = await self._client.patch(
            self._path(category_id), json_body=dict(data), name="PATCH /categories/:id"
        )
        return self._one(response, Category.from_json)

    async def delete_category(self, category_id: int) -> bool:
        response = await self._client.delete(
            self._path(category_id), name="DELETE /categories/:id"
        )
        return response.ok

    async def get_categories_batch(self, category_ids: Sequence[int]) -> list[Category | None]:
        responses = await self._client.batch(
            [
                BatchRequest("GET", self._path(cid), name="GET /categories/:id (batch)")
                for cid in category_ids
            ]
        )
        return self._many_batch(responses, Category.from_json)
