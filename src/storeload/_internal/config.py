"""Environment configuration for storeload."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from storeload._internal.errors import ConfigError

if TYPE_CHECKING:
    from storeload._internal.types import Headers

DEFAULT_BASE_URL = "https://api.escuelajs.co/api/v1"

DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Content-Type": "application/json",
}


@dataclass(frozen=True)
class StoreLoadConfig:
    """Global storeload configuration.

    Attributes:
        base_url: Root URL of the fake store API.
        default_headers: Headers sent with every request.
        connection_pool_size: Maximum open connections per session.
        request_timeout: Per-request timeout in seconds.
    """

    base_url: str = DEFAULT_BASE_URL
    default_headers: Headers = field(default_factory=lambda: dict(DEFAULT_HEADERS))
    connection_pool_size: int = 100
    request_timeout: float = 30.0


def load_config() -> StoreLoadConfig:
    """Load configuration from environment variables with defaults.

    Environment variables:
        STORELOAD_BASE_URL: API root URL.
        STORELOAD_POOL_SIZE: Connection pool size (default: 100).
        STORELOAD_TIMEOUT: Request timeout in seconds (default: 30.0).

    Returns:
        Populated StoreLoadConfig instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    pool_size_str = os.environ.get("STORELOAD_POOL_SIZE", "100")
    timeout_str = os.environ.get("STORELOAD_TIMEOUT", "30.0")

    try:
        pool_size = int(pool_size_str)
    except ValueError:
        msg = f"STORELOAD_POOL_SIZE must be an integer, got: {pool_size_str!r}"
        raise ConfigError(msg) from None

    if pool_size < 1:
        msg = f"STORELOAD_POOL_SIZE must be >= 1, got: {pool_size}"
        raise ConfigError(msg)

    try:
        timeout = float(timeout_str)
    except ValueError:
        msg = f"STORELOAD_TIMEOUT must be a number, got: {timeout_str!r}"
        raise ConfigError(msg) from None

    if timeout <= 0:
        msg = f"STORELOAD_TIMEOUT must be positive, got: {timeout}"
        raise ConfigError(msg)

    base_url = os.environ.get("STORELOAD_BASE_URL", "").strip() or DEFAULT_BASE_URL

    return StoreLoadConfig(
        base_url=base_url.rstrip("/"),
        connection_pool_size=pool_size,
        request_timeout=timeout,
    )
