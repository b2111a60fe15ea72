"""storeload: weighted-scenario load profiles for the fake store REST API."""

from __future__ import annotations

from storeload.api.store import FakeStoreAPI
from storeload.client.http_client import HttpClient, RequestMetric
from storeload.core.phase import PhaseWeightConfig
from storeload.core.selector import WeightedScenario, select_scenario
from storeload.engine.driver import IterationDriver
from storeload.engine.session import TestSession
from storeload.profiles import TestProfile, get_profile

__version__ = "0.1.0"

__all__ = [
    "FakeStoreAPI",
    "HttpClient",
    "IterationDriver",
    "PhaseWeightConfig",
    "RequestMetric",
    "TestProfile",
    "TestSession",
    "WeightedScenario",
    "get_profile",
    "select_scenario",
]
