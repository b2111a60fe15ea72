"""Shared plumbing for the resource wrappers."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from storeload._internal.types import JsonBody
    from storeload.client.http_client import ApiResponse, HttpClient

T = TypeVar("T")


class ResourceAPI:
    """Base for one REST resource of the fake store.

    Subclasses set ``endpoint`` and map method parameters to paths. Failed
    responses decode to ``None`` (or an empty list); the failure itself has
    already been reported by the client as a metric.
    """

    endpoint: str = ""

    def __init__(self, client: HttpClient) -> None:
        self._client = client

    def _path(self, *parts: object) -> str:
        return "/".join([self.endpoint, *(str(p) for p in parts)])

    @staticmethod
    def _one(response: ApiResponse, decode: Callable[[JsonBody], T]) -> T | None:
        if not response.ok:
            return None
        return decode(response.body)

    @staticmethod
    def _many(response: ApiResponse, decode: Callable[[JsonBody], list[T]]) -> list[T]:
        if not response.ok:
            return []
        return decode(response.body)

    @staticmethod
    def _many_batch(
        responses: Sequence[ApiResponse], decode: Callable[[JsonBody], T]
    ) -> list[T | None]:
        return [decode(r.body) if r.ok else None for r in responses]
