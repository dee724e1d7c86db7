"""Sufficiency evaluation for the current association.

Responsibilities:
  - Decide whether the current connection may be kept without running
    network selection, via the ordered SUFFICIENCY_LADDER.

Inputs/Outputs:
  - Inputs: live ConnectionInfo, config store, tuning params, clock.
  - Outputs: SufficiencyDecision with the deciding reason.

Invariants:
  - First match wins; no rule matching means sufficient.
  - Read-only with respect to the config store.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from wifiselect.core.domain.config import SelectorConfig
from wifiselect.core.domain.enums import SUFFICIENCY_METADATA, SufficiencyReason
from wifiselect.core.domain.models import ConnectionInfo, WifiGlobals
from wifiselect.core.ports.config_store_port import ConfigStore
from .rules import (
    SUFFICIENCY_LADDER,
    Rule,
    SufficiencyContext,
    SufficiencyDecision,
    decision_for,
    first_match,
)

logger = logging.getLogger(__name__)


class SufficiencyEvaluator:
    def __init__(
        self,
        config_store: ConfigStore,
        params: SelectorConfig,
        wifi_globals: WifiGlobals,
        clock: Callable[[], int],
        ladder: Optional[Sequence[Rule]] = None,
    ) -> None:
        self._config_store = config_store
        self._params = params
        self._globals = wifi_globals
        self._clock = clock
        self._ladder = tuple(ladder) if ladder is not None else SUFFICIENCY_LADDER

    def evaluate(self, info: ConnectionInfo, sufficiency_check_enabled: bool = True) -> SufficiencyDecision:
        config = None
        if info.associated:
            logger.debug("Current connected network: %s", info.network_id)
            config = self._config_store.get_configured_network(info.network_id)
        ctx = SufficiencyContext(
            info=info,
            config=config,
            now_ms=self._clock(),
            last_selected_network_id=self._config_store.get_last_selected_network(),
            last_selected_timestamp_ms=self._config_store.get_last_selected_timestamp(),
            sufficiency_check_enabled=sufficiency_check_enabled,
            using_external_scorer=self._globals.using_external_scorer,
            params=self._params,
        )
        decision = first_match(self._ladder, ctx)
        if decision is None:
            decision = decision_for(SufficiencyReason.SUFFICIENT)
        logger.debug("%s", SUFFICIENCY_METADATA[decision.reason]["message"])
        return decision

    def is_sufficient(self, info: ConnectionInfo, sufficiency_check_enabled: bool = True) -> bool:
        return self.evaluate(info, sufficiency_check_enabled).sufficient
