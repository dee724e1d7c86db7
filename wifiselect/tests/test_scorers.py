from __future__ import annotations

import pytest

from wifiselect.core.domain.config import SelectorConfig
from wifiselect.core.domain.enums import NominatorId, SecurityType
from wifiselect.core.domain.models import Candidate, CandidateKey, MatchInfo
from wifiselect.core.scoring.factory import default_scorer_factory
from wifiselect.core.scoring.scorers import (
    MIN_SCORER_EXP_ID,
    CompatibilityScorer,
    ThroughputScorer,
    experiment_id_from_identifier,
)


def make_candidate(
    network_id: int = 0,
    bssid: str = "aa:bb:cc:dd:ee:01",
    rssi: int = -60,
    frequency: int = 5180,
    tput: int = 433,
    **overrides,
) -> Candidate:
    fields = dict(
        key=CandidateKey(MatchInfo(f"net{network_id}"), bssid, network_id, SecurityType.PSK),
        nominator_id=NominatorId.SAVED,
        scan_rssi=rssi,
        frequency=frequency,
        channel_width=80,
        last_selection_weight=0.0,
        metered=False,
        carrier_or_privileged=False,
        predicted_throughput_mbps=tput,
    )
    fields.update(overrides)
    return Candidate(**fields)


@pytest.fixture
def throughput_scorer() -> ThroughputScorer:
    return ThroughputScorer(SelectorConfig())


def test_throughput_scorer_saved_secure_unmetered(throughput_scorer):
    candidate = make_candidate()
    assert throughput_scorer.rssi_base_score(candidate) == 60
    assert throughput_scorer.throughput_bonus(candidate) == 120
    assert throughput_scorer.score(candidate) == 2720


def test_throughput_scorer_current_network_bonus(throughput_scorer):
    assert throughput_scorer.score(make_candidate(current_network=True)) == 2756


def test_current_network_without_expected_internet_gets_no_bonus(throughput_scorer):
    candidate = make_candidate(current_network=True, no_internet_access=True)
    assert throughput_scorer.score(candidate) == 2720


def test_recent_user_selection_is_top_tier(throughput_scorer):
    assert throughput_scorer.score(make_candidate(last_selection_weight=0.5)) == 1_000_180


def test_untrusted_loses_saved_and_trusted_awards(throughput_scorer):
    assert throughput_scorer.score(make_candidate(trusted=False)) == 1220


def test_metered_open_ephemeral_bonuses(throughput_scorer):
    candidate = make_candidate(metered=True, open_network=True, ephemeral=True)
    assert throughput_scorer.score(candidate) == 180 + 1000


def test_throughput_bonus_tiers_and_cap(throughput_scorer):
    assert throughput_scorer.throughput_bonus(make_candidate(tput=1600)) == 271
    assert throughput_scorer.throughput_bonus(make_candidate(tput=10_000)) == 320


def test_multi_link_throughput_used_when_larger(throughput_scorer):
    candidate = make_candidate(tput=100, predicted_multi_link_throughput_mbps=433)
    assert throughput_scorer.throughput_bonus(candidate) == 120


def test_rssi_capped_at_sufficient_level(throughput_scorer):
    assert throughput_scorer.rssi_base_score(make_candidate(rssi=-30)) == 60
    assert throughput_scorer.rssi_base_score(make_candidate(rssi=-30, frequency=2437)) == 48


def test_score_candidates_returns_best_and_first_on_tie(throughput_scorer):
    weak = make_candidate(bssid="aa:bb:cc:dd:ee:01", rssi=-75)
    strong = make_candidate(bssid="aa:bb:cc:dd:ee:02", rssi=-65)
    twin = make_candidate(bssid="aa:bb:cc:dd:ee:03", rssi=-65)
    scored = throughput_scorer.score_candidates([weak, strong, twin])
    assert scored.candidate_key == strong.key
    assert scored.user_connect_choice_override is True
    assert throughput_scorer.score_candidates([]) is None


def test_compatibility_scorer():
    scorer = CompatibilityScorer(SelectorConfig())
    assert scorer.score(make_candidate()) == 180
    assert scorer.score(make_candidate(current_network=True, current_bssid=True)) == 220
    assert scorer.score(make_candidate(current_bssid=True)) == 180
    assert scorer.score(make_candidate(last_selection_weight=1.0)) == 660
    assert scorer.score(make_candidate(frequency=2437, open_network=True)) == 48


def test_experiment_ids_are_stable_and_distinct():
    throughput_id = experiment_id_from_identifier(ThroughputScorer.identifier)
    compat_id = experiment_id_from_identifier(CompatibilityScorer.identifier)
    assert MIN_SCORER_EXP_ID <= throughput_id < MIN_SCORER_EXP_ID + 1_000_000
    assert throughput_id == experiment_id_from_identifier("ThroughputScorer")
    assert throughput_id != compat_id


def test_scorer_factory():
    params = SelectorConfig()
    assert set(default_scorer_factory.identifiers()) == {"ThroughputScorer", "CompatibilityScorer"}
    assert isinstance(default_scorer_factory.create("CompatibilityScorer", params), CompatibilityScorer)
    with pytest.raises(ValueError):
        default_scorer_factory.create("NoSuchScorer", params)
