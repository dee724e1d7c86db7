from __future__ import annotations

import logging
from typing import Iterator

from wifiselect.core.domain.enums import NominatorAttribution, NominatorId
from .nominators import NetworkNominator

logger = logging.getLogger(__name__)

_ATTRIBUTION: dict[NominatorId, NominatorAttribution] = {
    NominatorId.SAVED: NominatorAttribution.SAVED,
    NominatorId.SUGGESTION: NominatorAttribution.SUGGESTION,
    NominatorId.SCORED: NominatorAttribution.EXTERNAL_SCORED,
}


class NominatorRegistry:
    """Ordered nominators; registration order is nomination order."""

    def __init__(self) -> None:
        self._nominators: list[NetworkNominator] = []

    def register(self, nominator: NetworkNominator) -> None:
        if any(n.id == nominator.id for n in self._nominators):
            raise ValueError(f"Nominator already registered: {nominator.id.name}")
        self._nominators.append(nominator)

    def __iter__(self) -> Iterator[NetworkNominator]:
        return iter(list(self._nominators))

    def __len__(self) -> int:
        return len(self._nominators)

    def attribution_for(self, nominator_id: NominatorId) -> NominatorAttribution:
        attribution = _ATTRIBUTION.get(nominator_id)
        if attribution is None:
            logger.critical("Unexpected nominator id for attribution: %s", nominator_id)
            return NominatorAttribution.UNKNOWN
        return attribution


__all__ = ["NominatorRegistry"]
