"""Candidate pool for one selection pass.

Responsibilities:
  - Build candidate keys from (scan entry, config, security params).
  - Hold at most one candidate per key, resolving duplicates by nominator
    priority.
  - Group candidates per network and per multi-link device, and pick the
    best ScoredCandidate under a scorer.

Invariants:
  - Keys are unique; insertion order is preserved for grouping.
  - A duplicate key replaces the stored candidate only when reported by a
    strictly higher-priority (lower id) nominator; throughput estimates
    keep the larger of the two.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from wifiselect.core.domain.enums import NominatorId
from wifiselect.core.domain.models import (
    SCORED_NONE,
    Candidate,
    CandidateKey,
    MatchInfo,
    NetworkConfig,
    ScanEntry,
    ScoredCandidate,
    SecurityParams,
)

logger = logging.getLogger(__name__)

_BSSID = re.compile(r"[0-9A-Fa-f]{2}(:[0-9A-Fa-f]{2}){5}")


def is_valid_bssid(bssid: Optional[str]) -> bool:
    return bssid is not None and _BSSID.fullmatch(bssid) is not None


def key_from_scan_and_config(
    entry: ScanEntry,
    config: NetworkConfig,
    params: Optional[SecurityParams],
) -> Optional[CandidateKey]:
    if params is None:
        logger.debug("No matching security params for %s / %s", entry.scan_id, config.profile_key)
        return None
    if not is_valid_bssid(entry.bssid):
        logger.info("Skip scan entry with invalid bssid: %s", entry.scan_id)
        return None
    match_info = MatchInfo(
        network_ssid=entry.ssid,
        security_types=frozenset(p.security_type for p in config.security_params),
    )
    return CandidateKey(
        match_info=match_info,
        bssid=entry.bssid.lower(),
        network_id=config.network_id,
        security_type=params.security_type,
    )


class CandidatePool:
    def __init__(self) -> None:
        self._candidates: dict[CandidateKey, Candidate] = {}
        self._current_network_ids: set[int] = set()
        self._current_bssids: set[str] = set()

    def set_current(self, network_id: int, bssid: Optional[str]) -> None:
        self._current_network_ids.add(network_id)
        if bssid:
            self._current_bssids.add(bssid.lower())

    def add(
        self,
        key: CandidateKey,
        config: NetworkConfig,
        nominator_id: NominatorId,
        scan_rssi: int,
        frequency: int,
        channel_width: int,
        last_selection_weight: float,
        metered: bool,
        carrier_or_privileged: bool,
        predicted_throughput_mbps: int,
        mld_address: Optional[str] = None,
    ) -> bool:
        if config is None:
            return False
        candidate = Candidate(
            key=key,
            nominator_id=nominator_id,
            scan_rssi=scan_rssi,
            frequency=frequency,
            channel_width=channel_width,
            last_selection_weight=last_selection_weight,
            metered=metered,
            carrier_or_privileged=carrier_or_privileged,
            predicted_throughput_mbps=predicted_throughput_mbps,
            mld_address=mld_address,
            current_network=key.network_id in self._current_network_ids,
            current_bssid=key.bssid in self._current_bssids,
            open_network=config.is_open,
            passpoint=config.passpoint,
            ephemeral=config.ephemeral,
            trusted=config.trusted,
            no_internet_access=config.no_internet_access,
            no_internet_access_expected=config.no_internet_access_expected,
        )
        existing = self._candidates.get(key)
        if existing is not None:
            if nominator_id >= existing.nominator_id:
                logger.debug(
                    "Reject duplicate %s from %s; kept %s",
                    key.bssid,
                    nominator_id.name,
                    existing.nominator_id.name,
                )
                return False
            candidate.predicted_throughput_mbps = max(
                candidate.predicted_throughput_mbps, existing.predicted_throughput_mbps
            )
            candidate.predicted_multi_link_throughput_mbps = max(
                candidate.predicted_multi_link_throughput_mbps,
                existing.predicted_multi_link_throughput_mbps,
            )
        self._candidates[key] = candidate
        return True

    def add_candidate(self, candidate: Candidate) -> None:
        """Re-insert a candidate built by an earlier pass."""
        self._candidates[candidate.key] = candidate

    def get_candidates(self) -> list[Candidate]:
        return list(self._candidates.values())

    def size(self) -> int:
        return len(self._candidates)

    def grouped_candidates(self) -> list[list[Candidate]]:
        groups: dict[int, list[Candidate]] = {}
        for candidate in self._candidates.values():
            groups.setdefault(candidate.network_id, []).append(candidate)
        return list(groups.values())

    def multi_link_groups(self) -> list[list[Candidate]]:
        groups: dict[str, list[Candidate]] = {}
        for candidate in self._candidates.values():
            if candidate.mld_address:
                groups.setdefault(candidate.mld_address.lower(), []).append(candidate)
        return list(groups.values())

    def choose(self, scorer) -> ScoredCandidate:
        best = SCORED_NONE
        for group in self.grouped_candidates():
            scored = scorer.score_candidates(group)
            if scored is not None and scored.value > best.value:
                best = scored
        return best


def pool_from_candidates(candidates: Iterable[Candidate]) -> CandidatePool:
    pool = CandidatePool()
    for candidate in candidates:
        pool.add_candidate(candidate)
    return pool