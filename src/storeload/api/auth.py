"""Auth resource: ``/auth``. Login stores a bearer token on the shared client."""

from __future__ import annotations

from typing import TYPE_CHECKING

from storeload._internal.errors import ApiError
from storeload._internal.logging import get_logger
from storeload.api.base import ResourceAPI
from storeload.api.models import AuthToken, User

if TYPE_CHECKING:
    from storeload.client.http_client import HttpClient

logger = get_logger("api.auth")


class AuthAPI(ResourceAPI):
    """Login, profile and logout against ``/auth``.

    The token lives on the virtual user's own ``HttpClient`` headers, so
    two virtual users never share a session.
    """

    endpoint = "/auth"

    def __init__(self, client: HttpClient) -> None:
        super().__init__(client)
        self._token: AuthToken | None = None

    @property
    def token(self) -> AuthToken | None:
        return self._token

    def is_authenticated(self) -> bool:
        return self._token is not None

    async def login(self, email: str, password: str) -> AuthToken | None:
        response = await self._client.post(
            self._path("login"),
            json_body={"email": email, "password": password},
            name="POST /auth/login",
        )
        self._store(self._one(response, AuthToken.from_json))
        return self._token

    async def refresh(self) -> AuthToken | None:
        if self._token is None or self._token.refresh_token is None:
            msg = "No refresh token held; login first"
            raise ApiError(msg)
        response = await self._client.post(
            self._path("refresh-token"),
            json_body={"refreshToken": self._token.refresh_token},
            name="POST /auth/refresh-token",
        )
        self._store(self._one(response, AuthToken.from_json))
        return self._token

    async def get_profile(self) -> User | None:
        if self._token is None:
            msg = "Authentication token is required. Please login first."
            raise ApiError(msg)
        response = await self._client.get(self._path("profile"), name="GET /auth/profile")
        return self._one(response, User.from_json)

    async def validate_token(self) -> bool:
        """Return True if the held token is accepted by the profile endpoint."""
        if self._token is None:
            logger.warning("Token validation skipped: no authentication token held")
            return False
        return await self.get_profile() is not None

    def logout(self) -> None:
        self._token = None
        self._client.headers.pop("Authorization", None)

    def _store(self, token: AuthToken | None) -> None:
        if token is None:
            return
        self._token = token
        self._client.headers["Authorization"] = f"Bearer {token.access_token}"
