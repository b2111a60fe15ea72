"""Typed wrappers for the fake store REST resources."""

from __future__ import annotations

from storeload.api.auth import AuthAPI
from storeload.api.carts import CartsAPI
from storeload.api.categories import CategoriesAPI
from storeload.api.models import AuthToken, Cart, CartItem, Category, Product, User
from storeload.api.products import ProductsAPI
from storeload.api.store import FakeStoreAPI
from storeload.api.users import UsersAPI

__all__ = [
    "AuthAPI",
    "AuthToken",
    "Cart",
    "CartItem",
    "CartsAPI",
    "CategoriesAPI",
    "Category",
    "FakeStoreAPI",
    "Product",
    "ProductsAPI",
    "User",
    "UsersAPI",
]
