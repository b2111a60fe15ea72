"""Users resource: ``/users``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from storeload.api.base import ResourceAPI
from storeload.api.models import User
from storeload.client.http_client import BatchRequest

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class UsersAPI(ResourceAPI):
    """Parameter-to-URL mapping for user endpoints."""

    endpoint = "/users"

    async def list_users(self, offset: int = 0, limit: int = 10) -> list[User]:
        response = await self._client.get(
            self.endpoint,
            params={"offset": offset, "limit": limit},
            name="GET /users",
        )
        return self._many(response, User.list_from_json)

    async def get_user(self, user_id: int) -> User | None:
        response = await self._client.get(self._path(user_id), name="GET /users/:id")
        return self._one(response, User.from_json)

    async def create_user(self, data: Mapping[str, object]) -> User | None:
        response = await self._client.post(self.endpoint, json_body=dict(data), name="POST /users")
        return self._one(response, User.from_json)

    async def update_user(self, user_id: int, data: Mapping[str, object]) -> User | None:
        response = await self._client.put(
            self._path(user_id), json_body={**data, "id": user_id}, name="PUT /users/:id"
        )
        return self._one(response, User.from_json)

    async def patch_user(self, user_id: int, updates: Mapping[str, object]) -> User | None:
        response = await self._client.patch(
            self._path(user_id), json_body={**updates, "id": user_id}, name="PATCH /users/:id"
        )
        return self._one(response, User.from_json)

    async def delete_user(self, user_id: int) -> bool:
        response = await self._client.delete(self._path(user_id), name="DELETE /users/:id")
        return response.ok

    async def check_email_availability(self, email: str) -> bool | None:
        """Return whether *email* is free to register, None if the call failed."""
        response = await self._client.post(
            self._path("is-available"),
            json_body={"email": email},
            name="POST /users/is-available",
        )
        if not response.ok or not isinstance(response.body, dict):
            return None
        available = response.body.get("isAvailable")
        return available if isinstance(available, bool) else None

    async def get_users_batch(self, user_ids: Sequence[int]) -> list[User | None]:
        responses = await self._client.batch(
            [
                BatchRequest("GET", self._path(uid), name="GET /users/:id (batch)")
                for uid in user_ids
            ]
        )
        return self._many_batch(responses, User.from_json)
