"""Candidate scorers.

Responsibilities:
  - Score the candidates of one network group and return the best as a
    ScoredCandidate.
  - Derive stable experiment ids from scorer identifiers.

Inputs/Outputs:
  - Inputs: a group of Candidate objects sharing a network id.
  - Outputs: ScoredCandidate or None for an empty group.

Invariants:
  - Scorers are pure; they never read or write the config store.
  - Ties keep the first candidate of the group.
"""

from __future__ import annotations

import zlib
from typing import Optional, Protocol, Sequence

from wifiselect.core.domain.config import SelectorConfig
from wifiselect.core.domain.enums import Band
from wifiselect.core.domain.models import Candidate, ScoredCandidate

PRESET_CANDIDATE_SCORER_NAME = "ThroughputScorer"
LEGACY_EXPERIMENT_ID = 0
MIN_SCORER_EXP_ID = 42_000_000

RSSI_SCORE_OFFSET = 85
RSSI_SCORE_SLOPE = 4
SCORE_ERROR_BOUND = 10

# ThroughputScorer
TOP_TIER_BASE_SCORE = 1_000_000
TRUSTED_AWARD = 1000

# CompatibilityScorer
BAND_5GHZ_AWARD = 40
LAST_SELECTION_BOOST = 480
CURRENT_NETWORK_BOOST = 16
SAME_BSSID_AWARD = 24
SECURITY_AWARD = 80


def experiment_id_from_identifier(identifier: str) -> int:
    return MIN_SCORER_EXP_ID + zlib.crc32(identifier.encode("utf-8")) % 1_000_000


class CandidateScorer(Protocol):
    identifier: str

    def score_candidates(self, group: Sequence[Candidate]) -> Optional[ScoredCandidate]:
        ...


def _best(scored: list[tuple[float, Candidate]], override: bool) -> Optional[ScoredCandidate]:
    if not scored:
        return None
    best_value, best = scored[0]
    for value, candidate in scored[1:]:
        if value > best_value:
            best_value, best = value, candidate
    return ScoredCandidate(
        value=best_value,
        err=SCORE_ERROR_BOUND,
        candidate_key=best.key,
        user_connect_choice_override=override,
    )


class ThroughputScorer:
    identifier = PRESET_CANDIDATE_SCORER_NAME

    def __init__(self, params: SelectorConfig) -> None:
        self._params = params

    def rssi_base_score(self, candidate: Candidate) -> int:
        rssi = min(candidate.scan_rssi, self._params.sufficient_rssi(candidate.frequency))
        return (rssi + RSSI_SCORE_OFFSET) * RSSI_SCORE_SLOPE

    def throughput_bonus(self, candidate: Candidate) -> int:
        p = self._params
        throughput = max(
            candidate.predicted_throughput_mbps,
            candidate.predicted_multi_link_throughput_mbps,
        )
        bonus = min(throughput, 800) * p.throughput_bonus_numerator // p.throughput_bonus_denominator
        if throughput > 800:
            bonus += (
                (throughput - 800)
                * p.throughput_bonus_numerator_after_800
                // p.throughput_bonus_denominator_after_800
            )
        return min(bonus, p.throughput_bonus_limit)

    def score(self, candidate: Candidate) -> int:
        p = self._params
        rssi_and_throughput = self.rssi_base_score(candidate) + self.throughput_bonus(candidate)

        current_network_bonus = 0
        lacks_internet = candidate.no_internet_access and not candidate.no_internet_access_expected
        if candidate.current_network and not lacks_internet:
            current_network_bonus = max(
                p.current_network_bonus_min,
                rssi_and_throughput * p.current_network_bonus_percent // 100,
            )

        secure_bonus = 0 if candidate.open_network else p.secure_network_bonus
        unmetered_bonus = 0 if candidate.metered else p.unmetered_network_bonus
        saved_bonus = 0 if candidate.ephemeral else p.saved_network_bonus
        trusted_bonus = TRUSTED_AWARD
        if not candidate.trusted:
            saved_bonus = 0
            trusted_bonus = 0

        if candidate.last_selection_weight > 0:
            return TOP_TIER_BASE_SCORE + rssi_and_throughput
        return (
            rssi_and_throughput
            + current_network_bonus
            + secure_bonus
            + unmetered_bonus
            + saved_bonus
            + trusted_bonus
        )

    def score_candidates(self, group: Sequence[Candidate]) -> Optional[ScoredCandidate]:
        return _best([(self.score(c), c) for c in group], override=True)


class CompatibilityScorer:
    """Legacy-compatible scoring: RSSI, 5/6 GHz, recency and security awards."""

    identifier = "CompatibilityScorer"

    def __init__(self, params: SelectorConfig) -> None:
        self._params = params

    def score(self, candidate: Candidate) -> float:
        rssi = min(candidate.scan_rssi, self._params.sufficient_rssi(candidate.frequency))
        score = (rssi + RSSI_SCORE_OFFSET) * RSSI_SCORE_SLOPE
        if candidate.band in (Band.BAND_5_GHZ, Band.BAND_6_GHZ):
            score += BAND_5GHZ_AWARD
        score += candidate.last_selection_weight * LAST_SELECTION_BOOST
        if candidate.current_network:
            score += CURRENT_NETWORK_BOOST
            if candidate.current_bssid:
                score += SAME_BSSID_AWARD
        if not candidate.open_network:
            score += SECURITY_AWARD
        return score

    def score_candidates(self, group: Sequence[Candidate]) -> Optional[ScoredCandidate]:
        return _best([(self.score(c), c) for c in group], override=True)
