"""Network nominators.

Responsibilities:
  - Report (scan entry, config) pairs that may be connected to, one
    strategy per network source: saved networks, app suggestions and
    externally scored open networks.

Inputs/Outputs:
  - Inputs: filtered scan entries, Passpoint candidates, NominationPolicy.
  - Outputs: synchronous on_connectable(entry, config) callbacks.

Invariants:
  - Nominators never build candidates themselves; the selector converts
    reported pairs into keys.
Must not:
  - Mutate selection-status fields of configs.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from wifiselect.core.domain.enums import NominatorId, SecurityType
from wifiselect.core.domain.models import (
    INVALID_NETWORK_ID,
    NetworkConfig,
    NominationPolicy,
    ScanEntry,
    SecurityParams,
)
from wifiselect.core.ports.config_store_port import ConfigStore
from wifiselect.core.ports.nomination_port import ExternalScoreProvider
from wifiselect.core.security import scan_security

logger = logging.getLogger(__name__)

OnConnectable = Callable[[ScanEntry, NetworkConfig], None]
PasspointCandidates = list[tuple[ScanEntry, NetworkConfig]]


class NetworkNominator(Protocol):
    id: NominatorId
    name: str

    def update(self, scan_entries: list[ScanEntry]) -> None:
        ...

    def nominate_networks(
        self,
        scan_entries: list[ScanEntry],
        passpoint_candidates: PasspointCandidates,
        policy: NominationPolicy,
        on_connectable: OnConnectable,
    ) -> None:
        ...


def allowed_by_policy(config: NetworkConfig, policy: NominationPolicy) -> bool:
    if not config.trusted and not policy.untrusted_allowed:
        return False
    if config.oem_paid and not policy.oem_paid_allowed:
        return False
    if config.oem_private and not policy.oem_private_allowed:
        return False
    return True


class SavedNetworkNominator:
    id = NominatorId.SAVED
    name = "SavedNetworkNominator"

    def __init__(self, config_store: ConfigStore) -> None:
        self._config_store = config_store

    def update(self, scan_entries: list[ScanEntry]) -> None:
        pass

    def nominate_networks(
        self,
        scan_entries: list[ScanEntry],
        passpoint_candidates: PasspointCandidates,
        policy: NominationPolicy,
        on_connectable: OnConnectable,
    ) -> None:
        for entry in scan_entries:
            config = self._config_store.get_saved_network_for_scan_entry(entry)
            if config is None:
                continue
            if config.passpoint or config.osu or config.ephemeral or config.from_suggestion:
                continue
            if not config.status.enabled:
                logger.debug("Network %s is disabled, skip", config.profile_key)
                continue
            if not allowed_by_policy(config, policy):
                continue
            on_connectable(entry, config)

        for entry, config in passpoint_candidates:
            if config.from_suggestion or not config.status.enabled:
                continue
            if not allowed_by_policy(config, policy):
                continue
            on_connectable(entry, config)


class NetworkSuggestionNominator:
    id = NominatorId.SUGGESTION
    name = "NetworkSuggestionNominator"

    def __init__(self, config_store: ConfigStore) -> None:
        self._config_store = config_store

    def update(self, scan_entries: list[ScanEntry]) -> None:
        pass

    def nominate_networks(
        self,
        scan_entries: list[ScanEntry],
        passpoint_candidates: PasspointCandidates,
        policy: NominationPolicy,
        on_connectable: OnConnectable,
    ) -> None:
        for entry, config in passpoint_candidates:
            if config.from_suggestion and config.status.enabled and allowed_by_policy(config, policy):
                on_connectable(entry, config)

        for entry in scan_entries:
            config = self._config_store.get_saved_network_for_scan_entry(entry)
            if config is None or not config.from_suggestion or config.passpoint:
                continue
            if not config.status.enabled:
                continue
            if not allowed_by_policy(config, policy):
                continue
            on_connectable(entry, config)


class ScoredNetworkNominator:
    """Nominates the best externally scored network.

    Saved networks opt in with use_external_scores; unsaved open networks
    are only considered when untrusted networks are allowed, and get an
    ephemeral untrusted config added to the store.
    """

    id = NominatorId.SCORED
    name = "ScoredNetworkNominator"

    def __init__(self, config_store: ConfigStore, scores: ExternalScoreProvider) -> None:
        self._config_store = config_store
        self._scores = scores

    def update(self, scan_entries: list[ScanEntry]) -> None:
        self._scores.update_scores(scan_entries)

    def nominate_networks(
        self,
        scan_entries: list[ScanEntry],
        passpoint_candidates: PasspointCandidates,
        policy: NominationPolicy,
        on_connectable: OnConnectable,
    ) -> None:
        best_score: Optional[int] = None
        best_entry: Optional[ScanEntry] = None
        best_config: Optional[NetworkConfig] = None

        for entry in scan_entries:
            score = self._scores.get_score(entry)
            if score is None:
                continue
            config = self._config_store.get_saved_network_for_scan_entry(entry)
            if config is not None:
                if not config.use_external_scores or not config.status.enabled:
                    continue
            elif not (policy.untrusted_allowed and scan_security.is_open(entry)):
                continue
            if best_score is None or score > best_score:
                best_score, best_entry, best_config = score, entry, config

        if best_entry is None:
            return
        if best_config is None:
            best_config = self._ephemeral_config_for(best_entry)
            if best_config is None:
                return
        logger.debug("Scored network %s with score %s", best_entry.scan_id, best_score)
        on_connectable(best_entry, best_config)

    def _ephemeral_config_for(self, entry: ScanEntry) -> Optional[NetworkConfig]:
        config = NetworkConfig(
            network_id=INVALID_NETWORK_ID,
            ssid=entry.ssid,
            security_params=[SecurityParams(SecurityType.OPEN)],
            ephemeral=True,
            trusted=False,
            use_external_scores=True,
        )
        network_id = self._config_store.add_or_update_network(config)
        if network_id == INVALID_NETWORK_ID:
            logger.info("Failed to add ephemeral network for %s", entry.scan_id)
            return None
        return self._config_store.get_configured_network(network_id)
