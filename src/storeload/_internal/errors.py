"""Exception hierarchy for storeload."""

from __future__ import annotations


class StoreLoadError(Exception):
    """Base exception for all storeload errors.

    Catching this class catches every error raised deliberately by the
    package, whether it comes from configuration, the scenario catalog,
    the engine, or the HTTP client boundary.
    """


class ConfigError(StoreLoadError):
    """Raised when configuration is invalid or missing.

    Examples:
        - An environment variable has an invalid value.
        - ``peak_minutes`` is asked for an empty stage list.
        - A threshold expression cannot be parsed.
    """


class ScenarioError(StoreLoadError):
    """Raised when a scenario catalog is invalid.

    Examples:
        - An enabled scenario has no behavior registered for it.
        - A behavior is registered for a scenario the table does not know.
        - A scenario declares a negative base weight.
        - The selector is called with no scenarios at all.
    """


class EngineError(StoreLoadError):
    """Raised when a test session cannot run to completion."""


class ApiError(StoreLoadError):
    """Raised at the HTTP client boundary.

    Covers transport failures (connection refused, timeouts), response
    bodies that cannot be decoded into the expected record, and calls that
    need an auth token when none is held.
    """
