"""Carts resource: ``/carts``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from storeload.api.base import ResourceAPI
from storeload.api.models import Cart
from storeload.client.http_client import BatchRequest

if TYPE_CHECKING:
    from collections.abc import Sequence


class CartsAPI(ResourceAPI):
    """Parameter-to-URL mapping for cart endpoints."""

    endpoint = "/carts"

    async def list_carts(
        self,
        limit: int | None = None,
        sort: Literal["asc", "desc"] | None = None,
    ) -> list[Cart]:
        params: dict[str, str | int] = {}
        if limit is not None:
            params["limit"] = limit
        if sort is not None:
            params["sort"] = sort
        response = await self._client.get(self.endpoint, params=params or None, name="GET /carts")
        return self._many(response, Cart.list_from_json)

    async def get_cart(self, cart_id: int) -> Cart | None:
        response = await self._client.get(self._path(cart_id), name="GET /carts/:id")
        return self._one(response, Cart.from_json)

    async def get_user_carts(self, user_id: int) -> list[Cart]:
        response = await self._client.get(self._path("user", user_id), name="GET /carts/user/:id")
        return self._many(response, Cart.list_from_json)

    async def carts_in_date_range(self, start_date: str, end_date: str) -> list[Cart]:
        response = await self._client.get(
            self.endpoint,
            params={"startdate": start_date, "enddate": end_date},
            name="GET /carts?date",
        )
        return self._many(response, Cart.list_from_json)

    async def create_cart(self, cart: Cart) -> Cart | None:
        response = await self._client.post(
            self.endpoint, json_body=cart.to_json(), name="POST /carts"
        )
        return self._one(response, Cart.from_json)

    async def update_cart(self, cart_id: int, cart: Cart) -> Cart | None:
        response = await self._client.put(
            self._path(cart_id),
            json_body={**cart.to_json(), "id": cart_id},
            name="PUT /carts/:id",
        )
        return self._one(response, Cart.from_json)

    async def patch_cart(self, cart_id: int, cart: Cart) -> Cart | None:
        response = await self._client.patch(
            self._path(cart_id),
            json_body={**cart.to_json(), "id": cart_id},
            name="PATCH /carts/:id",
        )
        return self._one(response, Cart.from_json)

    async def delete_cart(self, cart_id: int) -> bool:
        response = await self._client.delete(self._path(cart_id), name="DELETE /carts/:id")
        return response.ok

    async def get_carts_batch(self, cart_ids: Sequence[int]) -> list[Cart | None]:
        responses = await self._client.batch(
            [
                BatchRequest("GET", self._path(cid), name="GET /carts/:id (batch)")
                for cid in cart_ids
            ]
        )
        return self._many_batch(responses, Cart.from_json)
