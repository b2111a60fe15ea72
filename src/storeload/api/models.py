"""Typed result records for the fake store API.

Responses are decoded into these records once, at the client boundary.
Every field is optional because the store omits or renames fields between
endpoints; a body that is not a JSON object at all raises ``ApiError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from storeload._internal.errors import ApiError

if TYPE_CHECKING:
    from storeload._internal.types import JsonBody


def _require_object(body: JsonBody, kind: str) -> dict[str, Any]:
    if not isinstance(body, dict):
        msg = f"Expected a JSON object for {kind}, got {type(body).__name__}"
        raise ApiError(msg)
    return body


def _require_list(body: JsonBody, kind: str) -> list[Any]:
    if not isinstance(body, list):
        msg = f"Expected a JSON array of {kind}, got {type(body).__name__}"
        raise ApiError(msg)
    return body


def _opt_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _opt_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    return None


def _opt_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class Category:
    """A product category."""

    id: int | None = None
    name: str | None = None
    image: str | None = None

    @classmethod
    def from_json(cls, body: JsonBody) -> Category:
        data = _require_object(body, "category")
        return cls(
            id=_opt_int(data.get("id")),
            name=_opt_str(data.get("name")),
            image=_opt_str(data.get("image")),
        )

    @classmethod
    def list_from_json(cls, body: JsonBody) -> list[Category]:
        return [cls.from_json(item) for item in _require_list(body, "categories")]


@dataclass(frozen=True)
class Product:
    """A store product.

    ``category`` is a nested record on the platzi-style API and a bare
    category name on the classic fake store; both decode into ``Category``.
    """

    id: int | None = None
    title: str | None = None
    price: float | None = None
    description: str | None = None
    category: Category | None = None
    images: tuple[str, ...] = ()

    @classmethod
    def from_json(cls, body: JsonBody) -> Product:
        data = _require_object(body, "product")
        raw_category = data.get("category")
        if isinstance(raw_category, dict):
            category: Category | None = Category.from_json(raw_category)
        elif isinstance(raw_category, str):
            category = Category(name=raw_category)
        else:
            category = None

        raw_images = data.get("images")
        if isinstance(raw_images, list):
            images = tuple(img for img in raw_images if isinstance(img, str))
        elif isinstance(data.get("image"), str):
            images = (data["image"],)
        else:
            images = ()

        return cls(
            id=_opt_int(data.get("id")),
            title=_opt_str(data.get("title")),
            price=_opt_float(data.get("price")),
            description=_opt_str(data.get("description")),
            category=category,
            images=images,
        )

    @classmethod
    def list_from_json(cls, body: JsonBody) -> list[Product]:
        return [cls.from_json(item) for item in _require_list(body, "products")]


@dataclass(frozen=True)
class User:
    """A store user."""

    id: int | None = None
    email: str | None = None
    name: str | None = None
    role: str | None = None
    avatar: str | None = None

    @classmethod
    def from_json(cls, body: JsonBody) -> User:
        data = _require_object(body, "user")
        raw_name = data.get("name")
        if isinstance(raw_name, dict):
            # Classic fake store splits the name into first/last.
            parts = [raw_name.get("firstname"), raw_name.get("lastname")]
            name: str | None = " ".join(p for p in parts if isinstance(p, str)) or None
        else:
            name = _opt_str(raw_name) or _opt_str(data.get("username"))
        return cls(
            id=_opt_int(data.get("id")),
            email=_opt_str(data.get("email")),
            name=name,
            role=_opt_str(data.get("role")),
            avatar=_opt_str(data.get("avatar")),
        )

    @classmethod
    def list_from_json(cls, body: JsonBody) -> list[User]:
        return [cls.from_json(item) for item in _require_list(body, "users")]


@dataclass(frozen=True)
class CartItem:
    """A product line inside a cart."""

    product_id: int
    quantity: int


@dataclass(frozen=True)
class Cart:
    """A shopping cart."""

    id: int | None = None
    user_id: int | None = None
    date: str | None = None
    products: tuple[CartItem, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, body: JsonBody) -> Cart:
        data = _require_object(body, "cart")
        items: list[CartItem] = []
        raw_products = data.get("products")
        if isinstance(raw_products, list):
            for entry in raw_products:
                if not isinstance(entry, dict):
                    continue
                product_id = _opt_int(entry.get("productId"))
                quantity = _opt_int(entry.get("quantity"))
                if product_id is not None and quantity is not None:
                    items.append(CartItem(product_id=product_id, quantity=quantity))
        return cls(
            id=_opt_int(data.get("id")),
            user_id=_opt_int(data.get("userId")),
            date=_opt_str(data.get("date")),
            products=tuple(items),
        )

    @classmethod
    def list_from_json(cls, body: JsonBody) -> list[Cart]:
        return [cls.from_json(item) for item in _require_list(body, "carts")]

    def to_json(self) -> dict[str, object]:
        """Return the request body the carts endpoint expects."""
        payload: dict[str, object] = {
            "products": [
                {"productId": i.product_id, "quantity": i.quantity} for i in self.products
            ],
        }
        if self.user_id is not None:
            payload["userId"] = self.user_id
        if self.date is not None:
            payload["date"] = self.date
        return payload


@dataclass(frozen=True)
class AuthToken:
    """Tokens returned by a successful login or refresh."""

    access_token: str
    refresh_token: str | None = None

    @classmethod
    def from_json(cls, body: JsonBody) -> AuthToken:
        data = _require_object(body, "auth token")
        access = data.get("access_token")
        if not isinstance(access, str):
            msg = "Login response has no access_token"
            raise ApiError(msg)
        return cls(access_token=access, refresh_token=_opt_str(data.get("refresh_token")))
