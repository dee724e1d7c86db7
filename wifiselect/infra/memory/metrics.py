from __future__ import annotations

from dataclasses import dataclass, field

from wifiselect.core.domain.enums import NominatorAttribution
from wifiselect.core.domain.models import NetworkConfig


@dataclass(frozen=True)
class SelectionDecision:
    experiment_id: int
    active_experiment_id: int
    same_selection: bool
    num_groups: int


@dataclass
class RecordingMetricsSink:
    filtered_bssid_count: int = 0
    mbo_assoc_disallowed_count: int = 0
    metered_stats: list[tuple[int, bool]] = field(default_factory=list)
    nominators: dict[int, NominatorAttribution] = field(default_factory=dict)
    experiment_id: int = 0
    decisions: list[SelectionDecision] = field(default_factory=list)

    def increment_filtered_bssid_count(self, count: int) -> None:
        self.filtered_bssid_count += count

    def increment_mbo_assoc_disallowed_count(self) -> None:
        self.mbo_assoc_disallowed_count += 1

    def add_metered_stat(self, config: NetworkConfig, metered: bool) -> None:
        self.metered_stats.append((config.network_id, metered))

    def set_nominator_for_network(self, network_id: int, attribution: NominatorAttribution) -> None:
        self.nominators[network_id] = attribution

    def set_network_selector_experiment_id(self, experiment_id: int) -> None:
        self.experiment_id = experiment_id

    def log_network_selection_decision(
        self,
        experiment_id: int,
        active_experiment_id: int,
        same_selection: bool,
        num_groups: int,
    ) -> None:
        self.decisions.append(
            SelectionDecision(experiment_id, active_experiment_id, same_selection, num_groups)
        )
