"""Multi-link throughput aggregation.

Responsibilities:
  - For candidates sharing a multi-link device address, sum the
    single-link throughput over every band combination the radio can run
    simultaneously and raise each member's multi-link throughput to the
    best sum it takes part in.

Inputs/Outputs:
  - Inputs: multi-link candidate groups, RadioProvider.
  - Outputs: mutates predicted_multi_link_throughput_mbps in place.

Invariants:
  - Multi-link throughput never decreases.
  - Groups are independent; a candidate is counted at most once per
    band combination.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from wifiselect.core.domain.enums import Band
from wifiselect.core.domain.models import Candidate
from wifiselect.core.ports.radio_port import RadioProvider

logger = logging.getLogger(__name__)


def intersect_with_bands(
    candidates: Sequence[Candidate], bands: Sequence[Band]
) -> Optional[list[Candidate]]:
    """Best candidate per band (by single-link throughput), or None when a band is uncovered."""
    remaining = list(bands)
    picked: list[Candidate] = []
    # sorted() is stable, so equal throughput keeps declaration order.
    for candidate in sorted(candidates, key=lambda c: c.predicted_throughput_mbps, reverse=True):
        if candidate.band in remaining:
            remaining.remove(candidate.band)
            picked.append(candidate)
    if remaining:
        return None
    return picked


def aggregate_throughput(candidates: Sequence[Candidate]) -> int:
    total = sum(c.predicted_throughput_mbps for c in candidates)
    for candidate in candidates:
        if candidate.predicted_multi_link_throughput_mbps < total:
            candidate.predicted_multi_link_throughput_mbps = total
    return total


def update_multi_link_throughput(
    groups: Iterable[Sequence[Candidate]], radio: RadioProvider
) -> None:
    iface = radio.get_primary_interface_name()
    if iface is None:
        return
    max_links = radio.get_max_mlo_str_link_count(iface)
    if max_links <= 1:
        return
    combinations = radio.get_supported_band_combinations(iface)
    if not combinations:
        return

    for group in groups:
        for bands in combinations:
            if len(bands) > max_links:
                continue
            picked = intersect_with_bands(group, bands)
            if picked is None:
                continue
            total = aggregate_throughput(picked)
            logger.debug(
                "Multi-link throughput %s Mbps over %s for %s",
                total,
                [b.value for b in bands],
                [c.bssid for c in picked],
            )
