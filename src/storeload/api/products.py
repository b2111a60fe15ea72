"""Products resource: ``/products``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from storeload.api.base import ResourceAPI
from storeload.api.models import Product
from storeload.client.http_client import BatchRequest

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class ProductsAPI(ResourceAPI):
    """Parameter-to-URL mapping for product endpoints."""

    endpoint = "/products"

    async def list_products(self, offset: int = 0, limit: int = 10) -> list[Product]:
        response = await self._client.get(
            self.endpoint,
            params={"offset": offset, "limit": limit},
            name="GET /products",
        )
        return self._many(response, Product.list_from_json)

    async def get_product(self, product_id: int) -> Product | None:
        response = await self._client.get(self._path(product_id), name="GET /products/:id")
        return self._one(response, Product.from_json)

    async def products_by_category(
        self, category_id: int, offset: int = 0, limit: int = 10
    ) -> list[Product]:
        response = await self._client.get(
            self.endpoint,
            params={"categoryId": category_id, "offset": offset, "limit": limit},
            name="GET /products?categoryId",
        )
        return self._many(response, Product.list_from_json)

    async def products_by_price_range(self, min_price: float, max_price: float) -> list[Product]:
        response = await self._client.get(
            self.endpoint,
            params={"price_min": min_price, "price_max": max_price},
            name="GET /products?price",
        )
        return self._many(response, Product.list_from_json)

    async def search_products(self, title: str) -> list[Product]:
        response = await self._client.get(
            self.endpoint, params={"title": title}, name="GET /products?title"
        )
        return self._many(response, Product.list_from_json)

    async def create_product(self, data: Mapping[str, object]) -> Product | None:
        response = await self._client.post(
            self.endpoint, json_body=dict(data), name="POST /products"
        )
        return self._one(response, Product.from_json)

    async def update_product(self, product_id: int, data: Mapping[str, object]) -> Product | None:
        response = await self._client.put(
            self._path(product_id), json_body=dict(data), name="PUT /products/:id"
        )
        return self._one(response, Product.from_json)

    async def patch_product(self, product_id: int, data: Mapping[str, object]) -> Product | None:
        response = await self._client.patch(
            self._path(product_id), json_body=dict(data), name="PATCH /products/:id"
        )
        return self._one(response, Product.from_json)

    async def delete_product(self, product_id: int) -> bool:
        response = await self._client.delete(self._path(product_id), name="DELETE /products/:id")
        return response.ok

    async def get_products_batch(self, product_ids: Sequence[int]) -> list[Product | None]:
        responses = await self._client.batch(
            [
                BatchRequest("GET", self._path(pid), name="GET /products/:id (batch)")
                for pid in product_ids
            ]
        )
        return self._many_batch(responses, Product.from_json)
