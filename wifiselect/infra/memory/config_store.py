"""In-memory network configuration store.

Responsibilities:
  - Hold saved NetworkConfig objects keyed by network id and implement the
    ConfigStore port for CLIs, snapshots and tests.
Must not:
  - Hand out internal objects; every read returns a deep copy.
"""

from __future__ import annotations

import copy
from typing import Callable, Iterable, Optional

from wifiselect.core.domain.models import (
    INVALID_NETWORK_ID,
    NetworkConfig,
    ScanEntry,
    SecurityParams,
)
from wifiselect.core.security import scan_security

MASKED_PSK = "*"


class InMemoryConfigStore:
    def __init__(
        self,
        networks: Iterable[NetworkConfig] = (),
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._networks: dict[int, NetworkConfig] = {}
        self._clock = clock if clock is not None else (lambda: 0)
        self._next_id = 0
        self._last_selected_network_id = INVALID_NETWORK_ID
        self._last_selected_timestamp_ms: Optional[int] = None
        self._disabled_until_ms: dict[int, int] = {}
        self.scan_details: dict[int, list[ScanEntry]] = {}
        for config in networks:
            self.add_or_update_network(config)

    def _masked(self, config: NetworkConfig) -> NetworkConfig:
        out = copy.deepcopy(config)
        if out.pre_shared_key is not None:
            out.pre_shared_key = MASKED_PSK
        return out

    def get_configured_network(self, network_id: int) -> Optional[NetworkConfig]:
        config = self._networks.get(network_id)
        return self._masked(config) if config is not None else None

    def get_configured_network_by_profile_key(self, profile_key: str) -> Optional[NetworkConfig]:
        for config in self._networks.values():
            if config.profile_key == profile_key:
                return self._masked(config)
        return None

    def get_configured_network_with_password(self, network_id: int) -> Optional[NetworkConfig]:
        config = self._networks.get(network_id)
        return copy.deepcopy(config) if config is not None else None

    def get_configured_networks(self) -> list[NetworkConfig]:
        return [self._masked(c) for c in self._networks.values()]

    def get_saved_network_for_scan_entry(self, entry: ScanEntry) -> Optional[NetworkConfig]:
        offered = set(scan_security.security_types(entry))
        for config in self._networks.values():
            if config.passpoint or config.ssid != entry.ssid:
                continue
            if offered.intersection(config.enabled_security_types()):
                return self._masked(config)
        return None

    def disable_network_temporarily(self, network_id: int, duration_ms: int, reason: str) -> None:
        config = self._networks.get(network_id)
        if config is None:
            return
        config.status.enabled = False
        config.status.disable_reason_counts[reason] = config.status.disable_reason_counts.get(reason, 0) + 1
        self._disabled_until_ms[network_id] = self._clock() + duration_ms

    def try_enable_network(self, network_id: int) -> bool:
        config = self._networks.get(network_id)
        if config is None:
            return False
        if config.status.enabled:
            return True
        until = self._disabled_until_ms.get(network_id)
        if until is None or self._clock() < until:
            return False
        config.status.enabled = True
        del self._disabled_until_ms[network_id]
        return True

    def clear_network_candidate_scan_result(self, network_id: int) -> None:
        config = self._networks.get(network_id)
        if config is None:
            return
        config.status.candidate = None
        config.status.candidate_score = 0
        config.status.candidate_security_params = None

    def set_network_candidate_scan_result(
        self,
        network_id: int,
        entry: ScanEntry,
        score: int,
        params: Optional[SecurityParams],
    ) -> None:
        config = self._networks.get(network_id)
        if config is None:
            return
        config.status.candidate = entry
        config.status.candidate_score = score
        config.status.candidate_security_params = copy.deepcopy(params)

    def update_scan_detail_for_network(self, network_id: int, entry: ScanEntry) -> None:
        if network_id not in self._networks:
            return
        details = self.scan_details.setdefault(network_id, [])
        details[:] = [d for d in details if d.bssid != entry.bssid]
        details.append(entry)

    def user_select_network(self, network_id: int, timestamp_ms: Optional[int] = None) -> None:
        self._last_selected_network_id = network_id
        self._last_selected_timestamp_ms = self._clock() if timestamp_ms is None else timestamp_ms

    def get_last_selected_network(self) -> int:
        return self._last_selected_network_id

    def get_last_selected_timestamp(self) -> Optional[int]:
        return self._last_selected_timestamp_ms

    def clear_last_selected_network(self) -> None:
        self._last_selected_network_id = INVALID_NETWORK_ID
        self._last_selected_timestamp_ms = None

    def set_legacy_user_connect_choice(self, config: NetworkConfig, rssi: int) -> None:
        selected = self._networks.get(config.network_id)
        if selected is None:
            return
        selected.status.connect_choice = None
        selected.status.connect_choice_rssi = 0
        for other in self._networks.values():
            if other.network_id == selected.network_id or other.status.candidate is None:
                continue
            other.status.connect_choice = selected.profile_key
            other.status.connect_choice_rssi = rssi

    def set_user_connect_choice(self, network_id: int, choice_profile_key: Optional[str], rssi: int) -> None:
        config = self._networks.get(network_id)
        if config is None:
            return
        config.status.connect_choice = choice_profile_key
        config.status.connect_choice_rssi = rssi

    def add_or_update_network(self, config: NetworkConfig) -> int:
        stored = copy.deepcopy(config)
        if stored.network_id == INVALID_NETWORK_ID:
            stored.network_id = self._next_id
        self._next_id = max(self._next_id, stored.network_id + 1)
        self._networks[stored.network_id] = stored
        return stored.network_id
