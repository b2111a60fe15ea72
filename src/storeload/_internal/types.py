"""Shared type aliases for storeload."""

from __future__ import annotations

# HTTP headers dictionary.
Headers = dict[str, str]

# Think time range (min_seconds, max_seconds).
ThinkTime = tuple[float, float]

# Decoded JSON body as returned by the fake store API.
JsonBody = dict[str, object] | list[object] | None
