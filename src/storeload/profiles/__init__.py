"""Built-in load profiles, keyed by name."""

from __future__ import annotations

from storeload._internal.errors import ScenarioError
from storeload.profiles.base import TestProfile, pause, scaled_pauses
from storeload.profiles.endurance import PROFILE as ENDURANCE_PROFILE
from storeload.profiles.load import PROFILE as LOAD_PROFILE
from storeload.profiles.spike import PROFILE as SPIKE_PROFILE
from storeload.profiles.stress import PROFILE as STRESS_PROFILE
from storeload.profiles.volume import PROFILE as VOLUME_PROFILE

PROFILES: dict[str, TestProfile] = {
    p.name: p
    for p in (LOAD_PROFILE, STRESS_PROFILE, SPIKE_PROFILE, VOLUME_PROFILE, ENDURANCE_PROFILE)
}


def get_profile(name: str) -> TestProfile:
    """Look up a profile by name.

    Raises:
        ScenarioError: If no profile has that name.
    """
    try:
        return PROFILES[name.lower()]
    except KeyError:
        msg = f"Unknown profile {name!r}; choose from {', '.join(PROFILES)}"
        raise ScenarioError(msg) from None


def all_profiles() -> list[TestProfile]:
    return list(PROFILES.values())


__all__ = [
    "ENDURANCE_PROFILE",
    "LOAD_PROFILE",
    "PROFILES",
    "SPIKE_PROFILE",
    "STRESS_PROFILE",
    "VOLUME_PROFILE",
    "TestProfile",
    "all_profiles",
    "get_profile",
    "pause",
    "scaled_pauses",
]
