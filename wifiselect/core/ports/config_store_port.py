"""Port for persisted network configuration storage.

Responsibilities:
  - Define the contract the selector uses to read configs and to record
    per-pass candidate state, last selection and connect choices.
Must not:
  - Implement logic; interface only.

Invariants:
  - Returned NetworkConfig objects are copies; changes are persisted only
    through the mutating calls of this port.
"""

from __future__ import annotations

from typing import Optional, Protocol

from wifiselect.core.domain.models import NetworkConfig, ScanEntry, SecurityParams


class ConfigStore(Protocol):
    def get_configured_network(self, network_id: int) -> Optional[NetworkConfig]:
        ...

    def get_configured_network_by_profile_key(self, profile_key: str) -> Optional[NetworkConfig]:
        ...

    def get_configured_network_with_password(self, network_id: int) -> Optional[NetworkConfig]:
        ...

    def get_configured_networks(self) -> list[NetworkConfig]:
        ...

    def get_saved_network_for_scan_entry(self, entry: ScanEntry) -> Optional[NetworkConfig]:
        ...

    def try_enable_network(self, network_id: int) -> bool:
        ...

    def clear_network_candidate_scan_result(self, network_id: int) -> None:
        ...

    def set_network_candidate_scan_result(
        self,
        network_id: int,
        entry: ScanEntry,
        score: int,
        params: Optional[SecurityParams],
    ) -> None:
        ...

    def update_scan_detail_for_network(self, network_id: int, entry: ScanEntry) -> None:
        ...

    def get_last_selected_network(self) -> int:
        ...

    def get_last_selected_timestamp(self) -> Optional[int]:
        ...

    def clear_last_selected_network(self) -> None:
        ...

    def set_legacy_user_connect_choice(self, config: NetworkConfig, rssi: int) -> None:
        ...

    def add_or_update_network(self, config: NetworkConfig) -> int:
        ...
