from __future__ import annotations

from typing import Callable, Dict

from wifiselect.core.domain.config import SelectorConfig
from .scorers import CandidateScorer, CompatibilityScorer, ThroughputScorer


class CandidateScorerFactory:
    def __init__(self) -> None:
        self._registry: Dict[str, Callable[[SelectorConfig], CandidateScorer]] = {}

    def register(self, identifier: str, builder: Callable[[SelectorConfig], CandidateScorer]) -> None:
        self._registry[identifier] = builder

    def create(self, identifier: str, params: SelectorConfig) -> CandidateScorer:
        if identifier not in self._registry:
            raise ValueError(f"Unknown candidate scorer: {identifier}")
        return self._registry[identifier](params)

    def identifiers(self) -> list[str]:
        return list(self._registry)

    def create_all(self, params: SelectorConfig) -> list[CandidateScorer]:
        return [builder(params) for builder in self._registry.values()]


default_scorer_factory = CandidateScorerFactory()
default_scorer_factory.register(ThroughputScorer.identifier, lambda params: ThroughputScorer(params))
default_scorer_factory.register(CompatibilityScorer.identifier, lambda params: CompatibilityScorer(params))

__all__ = ["CandidateScorerFactory", "default_scorer_factory"]
