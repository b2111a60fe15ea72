"""Concurrency patterns that drive the number of active virtual users.

All patterns implement :class:`LoadPattern` and yield
``(elapsed_seconds, target_concurrency)`` tuples via
:meth:`LoadPattern.iter_concurrency`.
"""

from __future__ import annotations

from storeload.patterns.base import LoadPattern
from storeload.patterns.stages import StagePattern

__all__ = [
    "LoadPattern",
    "StagePattern",
]
