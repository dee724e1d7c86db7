from __future__ import annotations

import pytest

from wifiselect.app_api.factories import build_network_selector
from wifiselect.core.domain.config import SelectorConfig
from wifiselect.core.domain.enums import NominatorAttribution, NominatorId, SecurityType, WifiStandard
from wifiselect.core.domain.models import (
    ClientState,
    ConnectionInfo,
    NetworkConfig,
    NetworkDetail,
    NominationPolicy,
    ScanEntry,
    SecurityParams,
)
from wifiselect.core.scoring.scorers import LEGACY_EXPERIMENT_ID, experiment_id_from_identifier
from wifiselect.infra.memory.config_store import InMemoryConfigStore
from wifiselect.infra.memory.metrics import RecordingMetricsSink
from wifiselect.infra.memory.providers import StaticExternalScores

HOME_BSSID = "aa:aa:aa:aa:aa:01"
CAFE_BSSID = "bb:bb:bb:bb:bb:01"
FREE_BSSID = "cc:cc:cc:cc:cc:01"
HOTSPOT_BSSID = "dd:dd:dd:dd:dd:01"

HOME = ScanEntry(bssid=HOME_BSSID, ssid="home", frequency=5180, level=-50, capabilities="[RSN-PSK-CCMP][ESS]")
CAFE = ScanEntry(bssid=CAFE_BSSID, ssid="cafe", frequency=2437, level=-70, capabilities="[RSN-PSK-CCMP][ESS]")
FREE = ScanEntry(bssid=FREE_BSSID, ssid="freewifi", frequency=2437, level=-60, capabilities="[ESS]")
HOTSPOT = ScanEntry(
    bssid=HOTSPOT_BSSID, ssid="hotspot-a", frequency=5180, level=-55, capabilities="[RSN-EAP/SHA1-CCMP][HS20]"
)

DISCONNECTED = ClientState(iface_name="wlan0", connected=False, disconnected=True)


class FakeClock:
    def __init__(self, now_ms: int = 1_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms


class FaultyScorer:
    def __init__(self, identifier: str = "FaultyScorer") -> None:
        self.identifier = identifier

    def score_candidates(self, group):
        raise RuntimeError("scorer bug")


class FakePasspointHelper:
    def __init__(self, candidates) -> None:
        self._candidates = candidates
        self.updates = 0

    def update_passpoint_config(self, scan_entries):
        self.updates += 1

    def get_passpoint_network_candidates(self, scan_entries):
        return [(entry, config) for entry, config in self._candidates if entry in scan_entries]


def mk_psk_network(network_id: int, ssid: str) -> NetworkConfig:
    config = NetworkConfig(network_id=network_id, ssid=ssid, security_params=[SecurityParams(SecurityType.PSK)])
    config.status.last_used_security_params = SecurityParams(SecurityType.PSK)
    return config


def mk_connected(metered: bool = False, score: int = 70) -> ClientState:
    return ClientState(
        iface_name="wlan0",
        connected=True,
        disconnected=False,
        info=ConnectionInfo(
            network_id=0,
            bssid=HOME_BSSID,
            ssid="home",
            rssi=-50,
            frequency=5180,
            score=score,
            associated=True,
            metered_hint=metered,
        ),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> InMemoryConfigStore:
    return InMemoryConfigStore([mk_psk_network(0, "home"), mk_psk_network(1, "cafe")], clock=clock)


def make_selector(store, clock, metrics=None, **kwargs):
    return build_network_selector(
        store,
        metrics=metrics if metrics is not None else RecordingMetricsSink(),
        clock=clock,
        **kwargs,
    )


def test_disconnected_selection_picks_strongest_saved_network(store, clock):
    metrics = RecordingMetricsSink()
    selector = make_selector(store, clock, metrics)
    candidates = selector.get_candidates_from_scan([HOME, CAFE], [], [DISCONNECTED])
    assert {c.network_id for c in candidates} == {0, 1}
    assert all(c.nominator_id == NominatorId.SAVED for c in candidates)

    selected = selector.select_network(candidates)
    assert selected.network_id == 0
    assert store.get_configured_network(0).status.candidate.bssid == HOME_BSSID
    assert metrics.experiment_id == experiment_id_from_identifier("ThroughputScorer")
    assert len(metrics.decisions) == 1
    assert all(d.same_selection for d in metrics.decisions)
    assert all(d.experiment_id != d.active_experiment_id for d in metrics.decisions)
    assert metrics.nominators[0] == NominatorAttribution.SAVED
    assert selector.get_last_selection_time_ms() == clock.now_ms
    connectable = selector.get_connectable_scan_entries()
    assert [entry for entry, _ in connectable] == [HOME, CAFE]
    assert [config.network_id for _, config in connectable] == [0, 1]


def test_empty_scan_returns_none_without_touching_store(store, clock):
    store.set_network_candidate_scan_result(0, HOME, 0, None)
    selector = make_selector(store, clock)
    assert selector.get_candidates_from_scan([], [], [DISCONNECTED]) is None
    assert store.get_configured_network(0).status.candidate == HOME
    assert selector.select_network(None) is None


def test_faulty_extra_scorer_is_isolated(store, clock):
    metrics = RecordingMetricsSink()
    selector = make_selector(store, clock, metrics)
    selector.register_candidate_scorer(FaultyScorer())
    candidates = selector.get_candidates_from_scan([HOME, CAFE], [], [DISCONNECTED])
    assert selector.select_network(candidates).network_id == 0
    assert metrics.experiment_id == experiment_id_from_identifier("ThroughputScorer")
    assert [d.experiment_id for d in metrics.decisions] == [experiment_id_from_identifier("CompatibilityScorer")]


def test_faulty_active_scorer_falls_back_to_best_remaining_choice(store, clock):
    metrics = RecordingMetricsSink()
    selector = make_selector(store, clock, metrics)
    selector.register_candidate_scorer(FaultyScorer("ThroughputScorer"))
    candidates = selector.get_candidates_from_scan([HOME, CAFE], [], [DISCONNECTED])
    assert selector.select_network(candidates).network_id == 0
    assert metrics.experiment_id == LEGACY_EXPERIMENT_ID
    assert store.get_configured_network(0).status.candidate.bssid == HOME_BSSID


def test_experiment_identifier_selects_active_scorer(store, clock):
    metrics = RecordingMetricsSink()
    compat_id = experiment_id_from_identifier("CompatibilityScorer")
    selector = make_selector(store, clock, metrics, params=SelectorConfig(experiment_identifier=compat_id))
    assert selector.get_active_candidate_scorer().identifier == "CompatibilityScorer"
    candidates = selector.get_candidates_from_scan([HOME, CAFE], [], [DISCONNECTED])
    selector.select_network(candidates)
    assert metrics.experiment_id == compat_id


def test_missing_preset_scorer_uses_remaining_scorers(store, clock):
    metrics = RecordingMetricsSink()
    selector = make_selector(store, clock, metrics, scorer_identifiers=["CompatibilityScorer"])
    assert selector.get_active_candidate_scorer() is None
    candidates = selector.get_candidates_from_scan([HOME, CAFE], [], [DISCONNECTED])
    assert selector.select_network(candidates).network_id == 0
    assert metrics.experiment_id == LEGACY_EXPERIMENT_ID


def test_sufficient_connection_skips_selection(store, clock):
    selector = make_selector(store, clock)
    assert selector.get_candidates_from_scan([HOME, CAFE], [], [mk_connected()]) is None


def test_multi_internet_bypasses_sufficiency(store, clock):
    selector = make_selector(store, clock)
    policy = NominationPolicy(multi_internet_allowed=True)
    candidates = selector.get_candidates_from_scan([HOME, CAFE], [], [mk_connected()], policy)
    assert candidates


def test_insufficient_metered_connection_merges_current_candidate(store, clock):
    selector = make_selector(store, clock)
    candidates = selector.get_candidates_from_scan([HOME, CAFE], [], [mk_connected(metered=True)])
    current = [c for c in candidates if c.network_id == 0]
    assert len(current) == 1
    [home] = current
    assert home.nominator_id == NominatorId.SAVED
    assert home.current_network and home.current_bssid
    assert home.metered
    assert selector.get_known_metered_network_ids() == {0}


def test_current_network_fallback_when_not_in_scan(store, clock):
    selector = make_selector(store, clock)
    candidates = selector.get_candidates_from_scan([CAFE], [], [mk_connected(metered=True, score=30)])
    fallback = [c for c in candidates if c.nominator_id == NominatorId.CURRENT]
    assert len(fallback) == 1
    assert fallback[0].predicted_throughput_mbps == 0
    assert fallback[0].channel_width == 20


def test_current_network_fallback_uses_scan_entry_when_present(store, clock):
    home_mlo = ScanEntry(
        bssid=HOME_BSSID.upper(),
        ssid="home",
        frequency=5180,
        level=-50,
        capabilities="[RSN-PSK-CCMP][ESS]",
        channel_width=80,
        detail=NetworkDetail(wifi_standard=WifiStandard.AX, max_spatial_streams=2, mld_address="02:00:00:00:00:aa"),
    )
    # Disabled networks are not nominated, so only the fallback reports the current BSSID.
    store.disable_network_temporarily(0, 3_600_000, "AUTHENTICATION_FAILURE")
    selector = make_selector(store, clock)
    candidates = selector.get_candidates_from_scan([home_mlo, CAFE], [], [mk_connected(metered=True, score=30)])
    [fallback] = [c for c in candidates if c.nominator_id == NominatorId.CURRENT]
    assert fallback.network_id == 0
    assert fallback.channel_width == 20
    assert fallback.predicted_throughput_mbps > 0
    assert fallback.mld_address == "02:00:00:00:00:aa"


def test_minimum_interval_between_selections(store, clock):
    selector = make_selector(store, clock)
    candidates = selector.get_candidates_from_scan([HOME, CAFE], [], [DISCONNECTED])
    selector.select_network(candidates)

    clock.now_ms += 5_000
    assert selector.get_candidates_from_scan([HOME, CAFE], [], [mk_connected(metered=True)]) is None
    clock.now_ms += 5_000
    assert selector.get_candidates_from_scan([HOME, CAFE], [], [mk_connected(metered=True)])


def test_associated_selection_disabled_by_params(store, clock):
    selector = make_selector(store, clock, params=SelectorConfig(associated_network_selection_enabled=False))
    assert selector.get_candidates_from_scan([HOME, CAFE], [], [mk_connected(metered=True)]) is None


def test_passpoint_selection_reports_scan_ssid(store, clock):
    hotspot = NetworkConfig(
        network_id=2,
        ssid="hotspot",
        passpoint=True,
        security_params=[SecurityParams(SecurityType.PASSPOINT)],
    )
    store.add_or_update_network(hotspot)
    helper = FakePasspointHelper([(HOTSPOT, hotspot)])
    selector = make_selector(store, clock, passpoint_helper=helper)
    candidates = selector.get_candidates_from_scan([HOTSPOT], [], [DISCONNECTED])
    assert [c.network_id for c in candidates] == [2]
    selected = selector.select_network(candidates)
    assert selected.ssid == "hotspot-a"
    assert store.get_configured_network(2).ssid == "hotspot-a"
    assert helper.updates == 1


def test_reset_on_disable_clears_cross_pass_state(store, clock):
    selector = make_selector(store, clock)
    candidates = selector.get_candidates_from_scan([HOME, CAFE], [], [mk_connected(metered=True)])
    selector.select_network(candidates)
    assert selector.get_known_metered_network_ids()
    selector.reset_on_disable()
    assert selector.get_known_metered_network_ids() == set()
    assert selector.get_last_selection_time_ms() is None
    assert selector.get_filtered_scan_entries() == []


def test_candidates_for_user_selection(store, clock):
    selector = make_selector(store, clock)
    home_2g = ScanEntry(bssid="aa:aa:aa:aa:aa:02", ssid="home", frequency=2437, level=-45, capabilities="[RSN-PSK-CCMP]")
    config = store.get_configured_network(0)
    candidates = selector.get_candidates_for_user_selection(config, [HOME, home_2g])
    assert [c.bssid for c in candidates] == [HOME_BSSID, "aa:aa:aa:aa:aa:02"]
    assert all(c.nominator_id == NominatorId.CURRENT for c in candidates)
    assert [entry for entry, _ in selector.get_connectable_scan_entries()] == [HOME, home_2g]
    assert store.scan_details[0] == [HOME, home_2g]
    assert selector.get_candidates_for_user_selection(config, []) is None


def test_open_unsaved_networks_accessor(store, clock):
    selector = make_selector(store, clock)
    selector.get_candidates_from_scan([HOME, FREE], [], [DISCONNECTED])
    assert selector.get_filtered_scan_entries_for_open_unsaved_networks() == [FREE]


def test_scored_nominator_adds_ephemeral_untrusted_network(store, clock):
    metrics = RecordingMetricsSink()
    scores = StaticExternalScores({FREE_BSSID: 80})
    selector = make_selector(store, clock, metrics, external_scores=scores)
    policy = NominationPolicy(untrusted_allowed=True)
    candidates = selector.get_candidates_from_scan([FREE], [], [DISCONNECTED], policy)
    [candidate] = candidates
    assert candidate.nominator_id == NominatorId.SCORED
    assert candidate.ephemeral and not candidate.trusted
    config = store.get_configured_network(candidate.network_id)
    assert config.ssid == "freewifi"
    assert config.ephemeral
    assert metrics.nominators[candidate.network_id] == NominatorAttribution.EXTERNAL_SCORED
    assert scores.updates == 1


def test_scored_nominator_ignores_open_networks_when_untrusted_not_allowed(store, clock):
    scores = StaticExternalScores({FREE_BSSID: 80})
    selector = make_selector(store, clock, external_scores=scores)
    assert selector.get_candidates_from_scan([FREE], [], [DISCONNECTED]) == []
