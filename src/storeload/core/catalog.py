"""Scenario catalog: static weight tables joined to behavior handlers.

A profile declares its scenario kinds as a ``str`` enum, a table of
``ScenarioConfig`` keyed by kind, and a separate mapping from kind to an
async behavior. ``build_catalog`` joins the two and refuses to start when
they disagree, so a missing handler is a setup-time ``ScenarioError``
rather than a failure in the middle of a run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from storeload._internal.errors import ScenarioError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from storeload.api.store import FakeStoreAPI


class Behavior(Protocol):
    """Simulated user action run once per selected iteration."""

    async def __call__(self, api: FakeStoreAPI, elapsed_minutes: int, iteration: int) -> None:
        """Run the action."""
        ...


@dataclass(frozen=True)
class ScenarioConfig:
    """Static table entry for one scenario.

    Attributes:
        weight: Base selection weight. Must be >= 0; 0 means the scenario
            only runs when a dynamic weight activates it.
        enabled: Disabled scenarios never enter selection.
        description: Documentation only.
    """

    weight: float
    enabled: bool = True
    description: str = ""


@dataclass(frozen=True)
class ScenarioDefinition:
    """An enabled scenario with its behavior attached.

    Attributes:
        name: Unique scenario key.
        base_weight: Selection weight before any dynamic delta.
        enabled: Always True for catalog entries; kept for reporting.
        description: Documentation only.
        behavior: Async callable receiving the API facade, elapsed minutes
            and the iteration counter.
    """

    name: str
    base_weight: float
    enabled: bool
    description: str
    behavior: Behavior


def scenario_key(kind: str | Enum) -> str:
    """Return the string name of a scenario given by enum member or name."""
    return kind.value if isinstance(kind, Enum) else kind


def build_catalog(
    configs: Mapping[str, ScenarioConfig] | Mapping[Enum, ScenarioConfig],
    behaviors: Mapping[str, Behavior] | Mapping[Enum, Behavior],
) -> tuple[ScenarioDefinition, ...]:
    """Join a scenario table with its behaviors, keeping table order.

    Args:
        configs: Ordered scenario table keyed by name or enum member.
        behaviors: Handler per scenario, keyed the same way.

    Returns:
        Definitions for the enabled scenarios, in table order.

    Raises:
        ScenarioError: If an enabled scenario has no behavior, a behavior
            names a scenario missing from the table, or a weight is
            negative.
    """
    table = {scenario_key(k): v for k, v in configs.items()}
    handlers = {scenario_key(k): v for k, v in behaviors.items()}

    unknown = sorted(set(handlers) - set(table))
    if unknown:
        msg = f"Behaviors registered for unknown scenarios: {', '.join(unknown)}"
        raise ScenarioError(msg)

    definitions: list[ScenarioDefinition] = []
    for name, config in table.items():
        if config.weight < 0:
            msg = f"Scenario {name!r} has negative weight {config.weight}"
            raise ScenarioError(msg)
        if not config.enabled:
            continue
        behavior = handlers.get(name)
        if behavior is None:
            msg = f"Enabled scenario {name!r} has no behavior registered"
            raise ScenarioError(msg)
        definitions.append(
            ScenarioDefinition(
                name=name,
                base_weight=config.weight,
                enabled=True,
                description=config.description,
                behavior=behavior,
            )
        )
    return tuple(definitions)
