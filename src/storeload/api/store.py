"""Facade bundling every resource wrapper around one client."""

from __future__ import annotations

from typing import TYPE_CHECKING

from storeload.api.auth import AuthAPI
from storeload.api.carts import CartsAPI
from storeload.api.categories import CategoriesAPI
from storeload.api.products import ProductsAPI
from storeload.api.users import UsersAPI

if TYPE_CHECKING:
    from storeload.client.http_client import HttpClient


class FakeStoreAPI:
    """All fake store resources, sharing one virtual user's ``HttpClient``."""

    def __init__(self, client: HttpClient) -> None:
        self.client = client
        self.products = ProductsAPI(client)
        self.users = UsersAPI(client)
        self.carts = CartsAPI(client)
        self.categories = CategoriesAPI(client)
        self.auth = AuthAPI(client)
