"""Network selection engine.

Responsibilities:
  - Decide per pass whether selection is needed at all (sufficiency of
    the current associations).
  - Filter the scan, run nominators in registry order, build the
    candidate pool and aggregate multi-link throughput.
  - Score candidates under every registered scorer, pick the active
    scorer's choice, and apply the user connect-choice override.

Inputs/Outputs:
  - Inputs: scan entries, BSSID blocklist, client states, NominationPolicy.
  - Outputs: candidate lists and the selected NetworkConfig (or None).

Invariants:
  - Run-to-completion, single-threaded; the caller serializes calls.
  - An empty scan never mutates the config store.
  - Candidate scan results in the store are cleared at the start of each
    candidate pass and written only by that pass and select_network.
  - Only the known-metered set and the last selection timestamp survive
    across passes; reset_on_disable() clears both.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence

from wifiselect.core.candidates.metered import MeteredNetworkTracker
from wifiselect.core.candidates.pool import CandidatePool, key_from_scan_and_config, pool_from_candidates
from wifiselect.core.candidates.registry import NominatorRegistry
from wifiselect.core.domain.config import SelectorConfig
from wifiselect.core.domain.enums import AssociatedSelectionOverride, NominatorId
from wifiselect.core.domain.models import (
    INVALID_NETWORK_ID,
    SCORED_NONE,
    Candidate,
    CandidateKey,
    ClientState,
    ConnectionInfo,
    MatchInfo,
    NetworkConfig,
    NominationPolicy,
    ScanEntry,
    ScoredCandidate,
    SecurityParams,
    WifiGlobals,
)
from wifiselect.core.filtering.scan_filter import ScanFilterResult, filter_scan_entries
from wifiselect.core.ports.config_store_port import ConfigStore
from wifiselect.core.ports.metrics_port import MetricsSink
from wifiselect.core.ports.nomination_port import PasspointNominateHelper
from wifiselect.core.ports.policy_port import DevicePolicyProvider, ScanRangeProvider
from wifiselect.core.ports.radio_port import (
    ChannelUtilizationProvider,
    RadioProvider,
    ThroughputPredictor,
)
from wifiselect.core.scoring.resolver import override_with_user_connect_choice
from wifiselect.core.scoring.scorers import (
    LEGACY_EXPERIMENT_ID,
    MIN_SCORER_EXP_ID,
    PRESET_CANDIDATE_SCORER_NAME,
    CandidateScorer,
    experiment_id_from_identifier,
)
from wifiselect.core.scoring.selection_weight import last_selection_weight
from wifiselect.core.security import scan_security
from wifiselect.core.security.reconciler import SecurityReconciler
from wifiselect.core.security.scan_range import ScanRangeIndex
from wifiselect.core.sufficiency.evaluator import SufficiencyEvaluator
from wifiselect.core.throughput.multi_link import update_multi_link_throughput
from wifiselect.core.throughput.predictor import predict_for_scan_entry

logger = logging.getLogger(__name__)

MINIMUM_NETWORK_SELECTION_INTERVAL_MS = 10_000


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class NetworkSelector:
    def __init__(
        self,
        config_store: ConfigStore,
        radio: RadioProvider,
        policy_provider: DevicePolicyProvider,
        metrics: MetricsSink,
        throughput_predictor: ThroughputPredictor,
        passpoint_helper: PasspointNominateHelper,
        nominators: NominatorRegistry,
        scorers: Sequence[CandidateScorer],
        params: Optional[SelectorConfig] = None,
        wifi_globals: Optional[WifiGlobals] = None,
        clock: Optional[Callable[[], int]] = None,
        scan_range: Optional[ScanRangeProvider] = None,
        utilization_provider: Optional[ChannelUtilizationProvider] = None,
    ) -> None:
        self._config_store = config_store
        self._radio = radio
        self._policy = policy_provider
        self._metrics = metrics
        self._predictor = throughput_predictor
        self._passpoint = passpoint_helper
        self._nominators = nominators
        self._scorers: dict[str, CandidateScorer] = {}
        for scorer in scorers:
            self.register_candidate_scorer(scorer)
        self._params = params if params is not None else SelectorConfig()
        self._globals = wifi_globals if wifi_globals is not None else WifiGlobals()
        self._clock = clock if clock is not None else monotonic_ms
        self._scan_range_provider = scan_range
        self._utilization = utilization_provider

        self._sufficiency = SufficiencyEvaluator(config_store, self._params, self._globals, self._clock)
        self._metered = MeteredNetworkTracker()
        self._reconciler = SecurityReconciler(config_store, self._globals, scan_range or ScanRangeIndex())

        self._last_selection_time_ms: Optional[int] = None
        self._filtered: list[ScanEntry] = []
        self._connectable: list[tuple[ScanEntry, NetworkConfig]] = []
        self._last_filter_result: Optional[ScanFilterResult] = None

        self._screen_on = False
        self._sufficiency_check_enabled_screen_on = True
        self._sufficiency_check_enabled_screen_off = True
        self._user_connect_choice_override_enabled = True
        self._last_selection_weight_enabled = True
        self._associated_selection_override = AssociatedSelectionOverride.NONE
        self._pass_log_level = logging.DEBUG

    # Runtime toggles

    def set_screen_state(self, screen_on: bool) -> None:
        self._screen_on = screen_on

    def set_sufficiency_check_enabled(self, screen_on: bool, screen_off: bool) -> None:
        self._sufficiency_check_enabled_screen_on = screen_on
        self._sufficiency_check_enabled_screen_off = screen_off

    def is_sufficiency_check_enabled(self) -> bool:
        if self._screen_on:
            return self._sufficiency_check_enabled_screen_on
        return self._sufficiency_check_enabled_screen_off

    def set_user_connect_choice_override_enabled(self, enabled: bool) -> None:
        self._user_connect_choice_override_enabled = enabled

    def set_last_selection_weight_enabled(self, enabled: bool) -> None:
        self._last_selection_weight_enabled = enabled

    def set_associated_network_selection_override(self, override: AssociatedSelectionOverride) -> None:
        self._associated_selection_override = override

    def is_associated_network_selection_enabled(self) -> bool:
        if self._associated_selection_override == AssociatedSelectionOverride.ENABLED:
            return True
        if self._associated_selection_override == AssociatedSelectionOverride.DISABLED:
            return False
        return self._params.associated_network_selection_enabled

    def enable_verbose_logging(self, verbose: bool) -> None:
        self._pass_log_level = logging.INFO if verbose else logging.DEBUG

    def register_candidate_scorer(self, scorer: CandidateScorer) -> None:
        self._scorers[scorer.identifier] = scorer

    def unregister_candidate_scorer(self, identifier: str) -> None:
        self._scorers.pop(identifier, None)

    def _log(self, msg: str, *args: object) -> None:
        logger.log(self._pass_log_level, msg, *args)

    # Sufficiency

    def is_network_selection_needed_for_client(self, state: ClientState) -> bool:
        if state.connected:
            if not self.is_associated_network_selection_enabled():
                self._log("%s: switching networks in connected state is not allowed", state.describe())
                return False
            now = self._clock()
            if (
                self._last_selection_time_ms is not None
                and now - self._last_selection_time_ms < MINIMUM_NETWORK_SELECTION_INTERVAL_MS
            ):
                self._log(
                    "%s: too short since last network selection: %s ms",
                    state.describe(),
                    now - self._last_selection_time_ms,
                )
                return False
            if self._sufficiency.is_sufficient(state.info, self.is_sufficiency_check_enabled()):
                self._log("%s: current connected network already sufficient", state.describe())
                return False
            return True
        if state.disconnected or state.ip_provisioning_timed_out:
            return True
        self._log("%s: client in an unknown state, skip network selection", state.describe())
        return False

    def is_network_selection_needed(
        self, scan_entries: Sequence[ScanEntry], client_states: Sequence[ClientState]
    ) -> bool:
        if not scan_entries:
            self._log("Empty connectivity scan results. Skip network selection.")
            return False
        return any(self.is_network_selection_needed_for_client(s) for s in client_states)

    # Candidate building

    def _info_for_network(
        self, network_id: int, client_states: Sequence[ClientState]
    ) -> Optional[ConnectionInfo]:
        for state in client_states:
            if state.info.network_id == network_id:
                return state.info
        return None

    def _selection_weight(self, network_id: int, metered: bool) -> float:
        return last_selection_weight(
            network_id,
            metered,
            self._config_store.get_last_selected_network(),
            self._config_store.get_last_selected_timestamp(),
            self._clock(),
            self._params,
            enabled=self._last_selection_weight_enabled,
        )

    def _predict(self, entry: ScanEntry) -> int:
        return predict_for_scan_entry(
            self._predictor,
            entry,
            self._radio.get_device_capabilities(),
            self._globals,
            self._utilization,
        )

    def _reconciler_for(self, scan_entries: Sequence[ScanEntry]) -> SecurityReconciler:
        scan_range = self._scan_range_provider
        if scan_range is None:
            scan_range = ScanRangeIndex(scan_entries)
        return SecurityReconciler(self._config_store, self._globals, scan_range)

    def _add_current_network_candidate(self, pool: CandidatePool, state: ClientState) -> None:
        info = state.info
        if info.network_id == INVALID_NETWORK_ID or not info.bssid:
            return
        config = self._config_store.get_configured_network(info.network_id)
        if config is None:
            return
        pool.set_current(info.network_id, info.bssid)
        params = config.status.last_used_security_params
        if params is None:
            self._log("%s: last used security params unknown, no fallback candidate", state.describe())
            return
        bssid = info.bssid.lower()
        entry = next((e for e in self._filtered if e.bssid.lower() == bssid), None)
        key = CandidateKey(
            match_info=MatchInfo(
                network_ssid=entry.ssid if entry is not None else config.ssid,
                security_types=frozenset(p.security_type for p in config.security_params),
            ),
            bssid=bssid,
            network_id=config.network_id,
            security_type=params.security_type,
        )
        metered = self._metered.is_ever_metered(config, info, None)
        pool.add(
            key,
            config,
            NominatorId.CURRENT,
            info.rssi,
            info.frequency,
            20,
            self._selection_weight(config.network_id, metered),
            metered,
            config.is_carrier_or_privileged,
            self._predict(entry) if entry is not None else 0,
            entry.mld_address if entry is not None else None,
        )

    def _update_configured_networks(self) -> None:
        for config in self._config_store.get_configured_networks():
            self._config_store.try_enable_network(config.network_id)
            self._config_store.clear_network_candidate_scan_result(config.network_id)

    def get_candidates_from_scan(
        self,
        scan_entries: Sequence[ScanEntry],
        bssid_blocklist: Sequence[str],
        client_states: Sequence[ClientState],
        policy: Optional[NominationPolicy] = None,
    ) -> Optional[list[Candidate]]:
        if policy is None:
            policy = NominationPolicy()
        self._filtered = []
        self._connectable = []
        if not scan_entries:
            return None

        scan_entries = list(scan_entries)
        client_states = list(client_states)
        for nominator in self._nominators:
            nominator.update(scan_entries)
        self._passpoint.update_passpoint_config(scan_entries)

        if not policy.multi_internet_allowed and not self.is_network_selection_needed(
            scan_entries, client_states
        ):
            return None

        result = filter_scan_entries(
            scan_entries,
            bssid_blocklist,
            client_states,
            self._params,
            self._globals,
            self.is_sufficiency_check_enabled(),
            min_security_level=self._policy.get_minimum_required_security_level(),
            ssid_policy=self._policy.get_ssid_policy(),
            metrics=self._metrics,
        )
        self._last_filter_result = result
        self._filtered = list(result.valid)
        if not self._filtered:
            return None

        pool = CandidatePool()
        for state in client_states:
            self._add_current_network_candidate(pool, state)

        self._update_configured_networks()
        passpoint_candidates = self._passpoint.get_passpoint_network_candidates(self._filtered)
        self._reconciler = self._reconciler_for(scan_entries)

        for nominator in self._nominators:

            def on_connectable(entry: ScanEntry, config: NetworkConfig, nominator=nominator) -> None:
                params = self._reconciler.resolve(config, entry)
                key = key_from_scan_and_config(entry, config, params)
                if key is None:
                    return
                info = self._info_for_network(config.network_id, client_states)
                metered = self._metered.is_ever_metered(config, info, entry)
                self._metrics.add_metered_stat(config, metered)
                added = pool.add(
                    key,
                    config,
                    nominator.id,
                    entry.level,
                    entry.frequency,
                    entry.channel_width,
                    self._selection_weight(config.network_id, metered),
                    metered,
                    config.is_carrier_or_privileged,
                    self._predict(entry),
                    entry.mld_address,
                )
                if not added:
                    return
                self._connectable.append((entry, config))
                self._config_store.update_scan_detail_for_network(config.network_id, entry)
                self._metrics.set_nominator_for_network(
                    config.network_id, self._nominators.attribution_for(nominator.id)
                )

            nominator.nominate_networks(self._filtered, passpoint_candidates, policy, on_connectable)

        update_multi_link_throughput(pool.multi_link_groups(), self._radio)
        candidates = pool.get_candidates()
        for candidate in candidates:
            self._log("%s", candidate.describe())
        return candidates

    def get_candidates_for_user_selection(
        self, config: NetworkConfig, scan_entries: Sequence[ScanEntry]
    ) -> Optional[list[Candidate]]:
        if not scan_entries:
            return None
        self._connectable = []
        self._reconciler = self._reconciler_for(scan_entries)
        pool = CandidatePool()
        for entry in scan_entries:
            params = self._reconciler.resolve(config, entry)
            key = key_from_scan_and_config(entry, config, params)
            if key is None:
                continue
            added = pool.add(
                key,
                config,
                NominatorId.CURRENT,
                entry.level,
                entry.frequency,
                entry.channel_width,
                0.0,
                False,
                config.is_carrier_or_privileged,
                self._predict(entry),
                entry.mld_address,
            )
            if added:
                self._connectable.append((entry, config))
                self._config_store.update_scan_detail_for_network(config.network_id, entry)
        return pool.get_candidates()

    # Selection

    def get_active_candidate_scorer(self) -> Optional[CandidateScorer]:
        preset = self._scorers.get(PRESET_CANDIDATE_SCORER_NAME)
        experiment_id = self._params.experiment_identifier
        if experiment_id >= MIN_SCORER_EXP_ID:
            for scorer in self._scorers.values():
                if experiment_id_from_identifier(scorer.identifier) == experiment_id:
                    return scorer
        if preset is None:
            logger.critical("Preset candidate scorer %s is not registered", PRESET_CANDIDATE_SCORER_NAME)
        return preset

    def _scan_entry_for_key(self, key: CandidateKey) -> Optional[ScanEntry]:
        for entry, config in self._connectable:
            if config.network_id == key.network_id and entry.bssid.lower() == key.bssid:
                return entry
        return None

    def _security_params_for(
        self, config: NetworkConfig, entry: ScanEntry, key: CandidateKey
    ) -> Optional[SecurityParams]:
        params = self._reconciler.resolve(config, entry)
        if params is not None and params.security_type == key.security_type:
            return params
        return config.get_security_params(key.security_type)

    def _record_candidate_scan_results(self, pool: CandidatePool, scorer: CandidateScorer) -> None:
        for group in pool.grouped_candidates():
            choice = scorer.score_candidates(group)
            if choice is None or choice.candidate_key is None:
                continue
            entry = self._scan_entry_for_key(choice.candidate_key)
            if entry is None:
                continue
            config = self._config_store.get_configured_network(choice.network_id)
            if config is None:
                continue
            self._config_store.set_network_candidate_scan_result(
                choice.network_id,
                entry,
                0,
                self._security_params_for(config, entry, choice.candidate_key),
            )

    def _update_chosen_passpoint_network(self, choice: ScoredCandidate) -> None:
        if choice.candidate_key is None:
            return
        config = self._config_store.get_configured_network_with_password(choice.network_id)
        if config is None or not config.passpoint:
            return
        config.ssid = choice.candidate_key.match_info.network_ssid
        self._config_store.add_or_update_network(config)

    def select_network(
        self, candidates: Optional[Sequence[Candidate]], override_enabled: bool = True
    ) -> Optional[NetworkConfig]:
        if not candidates:
            return None
        pool = pool_from_candidates(candidates)
        num_groups = len(pool.grouped_candidates())

        active = self.get_active_candidate_scorer()
        recording_order = [s for s in self._scorers.values() if s is not active]
        if active is not None:
            recording_order.insert(0, active)
        for scorer in recording_order:
            try:
                self._record_candidate_scan_results(pool, scorer)
                break
            except Exception:
                logger.critical("Candidate scorer %s failed", scorer.identifier, exc_info=True)

        choices: dict[int, ScoredCandidate] = {}
        active_choice: Optional[ScoredCandidate] = None
        for scorer in list(self._scorers.values()):
            try:
                choice = pool.choose(scorer)
            except Exception:
                logger.critical("Candidate scorer %s failed", scorer.identifier, exc_info=True)
                continue
            experiment_id = experiment_id_from_identifier(scorer.identifier)
            choices[experiment_id] = choice
            if scorer is active:
                active_choice = choice
            self._log(
                "%s selects network %s (score %s)%s",
                scorer.identifier,
                choice.network_id,
                choice.value,
                " [active]" if scorer is active else "",
            )

        if active_choice is not None:
            active_experiment_id = experiment_id_from_identifier(active.identifier)
        else:
            active_experiment_id = LEGACY_EXPERIMENT_ID
            active_choice = SCORED_NONE
            for choice in choices.values():
                if choice.value > active_choice.value:
                    active_choice = choice
            if choices:
                logger.critical("Active candidate scorer unavailable; using best remaining choice")

        selected_id = active_choice.network_id
        for experiment_id, choice in choices.items():
            if experiment_id == active_experiment_id:
                continue
            self._metrics.log_network_selection_decision(
                experiment_id,
                active_experiment_id,
                choice.network_id == selected_id,
                num_groups,
            )
        self._metrics.set_network_selector_experiment_id(active_experiment_id)

        self._update_chosen_passpoint_network(active_choice)
        selected = self._config_store.get_configured_network(selected_id)
        if (
            selected is not None
            and active_choice.user_connect_choice_override
            and override_enabled
            and self._user_connect_choice_override_enabled
        ):
            selected = override_with_user_connect_choice(
                selected,
                self._config_store,
                self._params.estimate_rssi_error_margin,
                self._metrics,
            )

        if selected is not None:
            self._last_selection_time_ms = self._clock()
        return selected

    # Accessors

    def get_filtered_scan_entries(self) -> list[ScanEntry]:
        return list(self._filtered)

    def get_connectable_scan_entries(self) -> list[tuple[ScanEntry, NetworkConfig]]:
        return list(self._connectable)

    def get_filtered_scan_entries_for_open_unsaved_networks(self) -> list[ScanEntry]:
        entries = []
        for entry in self._filtered:
            if not scan_security.is_open(entry):
                continue
            if self._config_store.get_saved_network_for_scan_entry(entry) is not None:
                continue
            entries.append(entry)
        return entries

    def get_last_filter_result(self) -> Optional[ScanFilterResult]:
        return self._last_filter_result

    def get_known_metered_network_ids(self) -> set[int]:
        return self._metered.known_metered_network_ids()

    def get_last_selection_time_ms(self) -> Optional[int]:
        return self._last_selection_time_ms

    def reset_on_disable(self) -> None:
        self._metered.clear()
        self._last_selection_time_ms = None
        self._filtered = []
        self._connectable = []
        self._last_filter_result = None
