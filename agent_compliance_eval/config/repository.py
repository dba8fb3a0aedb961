"""
Read-only scenario repository.

The evaluation pipeline never keeps a module-level scenario cache. Callers
build a ScenarioRepository once (built-ins, a user file, or both merged) and
pass it to the orchestrator; refreshing means building a new repository.
"""

from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from agent_compliance_eval.exceptions import ScenarioNotFoundError

from .loader import load_builtin_scenarios, load_scenarios
from .schema import Scenario


class ScenarioRepository(Mapping[str, Scenario]):
    """
    Immutable mapping from scenario identifier to Scenario.

    Example:
        >>> repo = ScenarioRepository.builtin()
        >>> repo.get_scenario("CS-REFUND-POLICY").risk_category
        'authority'
        >>> custom = ScenarioRepository.from_yaml("my_scenarios.yaml")
        >>> combined = repo.merged_with(custom)
    """

    def __init__(self, scenarios: Iterable[Scenario] = ()):
        by_id: dict[str, Scenario] = {}
        for scenario in scenarios:
            by_id[scenario.id] = scenario
        self._scenarios = MappingProxyType(by_id)

    @classmethod
    def builtin(cls) -> "ScenarioRepository":
        """Repository holding only the bundled built-in scenarios."""
        return cls(load_builtin_scenarios())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ScenarioRepository":
        """Repository holding the scenarios of a single file."""
        return cls(load_scenarios(path))

    def merged_with(self, other: "ScenarioRepository") -> "ScenarioRepository":
        """
        Combine two repositories.

        Scenarios from ``other`` replace scenarios with the same identifier.
        """
        return ScenarioRepository([*self.values(), *other.values()])

    def get_scenario(self, scenario_id: str) -> Scenario:
        """
        Look up a scenario by identifier.

        Raises:
            ScenarioNotFoundError: If no scenario has this identifier
        """
        try:
            return self._scenarios[scenario_id]
        except KeyError:
            raise ScenarioNotFoundError(
                f"Scenario not found: {scenario_id}", scenario_id=scenario_id
            ) from None

    def __getitem__(self, scenario_id: str) -> Scenario:
        return self._scenarios[scenario_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._scenarios)

    def __len__(self) -> int:
        return len(self._scenarios)
