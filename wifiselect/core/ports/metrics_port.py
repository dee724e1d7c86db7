"""Port for the fire-and-forget metrics sink.

Invariants:
  - Calls never influence control flow; return values are ignored.
"""

from __future__ import annotations

from typing import Protocol

from wifiselect.core.domain.enums import NominatorAttribution
from wifiselect.core.domain.models import NetworkConfig


class MetricsSink(Protocol):
    def increment_filtered_bssid_count(self, count: int) -> None:
        ...

    def increment_mbo_assoc_disallowed_count(self) -> None:
        ...

    def add_metered_stat(self, config: NetworkConfig, metered: bool) -> None:
        ...

    def set_nominator_for_network(self, network_id: int, attribution: NominatorAttribution) -> None:
        ...

    def set_network_selector_experiment_id(self, experiment_id: int) -> None:
        ...

    def log_network_selection_decision(
        self,
        experiment_id: int,
        active_experiment_id: int,
        same_selection: bool,
        num_groups: int,
    ) -> None:
        ...
