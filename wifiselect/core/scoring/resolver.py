"""User connect-choice resolution.

Responsibilities:
  - Follow the chain of connect-choice profile keys recorded when the user
    preferred one network over another, and replace the scorer's choice
    with the last acceptable network on that chain.

Invariants:
  - Terminates on any chain: a repeated profile key stops the walk, logs a
    defect and restores the legacy connect choice on the original.
  - A hop is accepted only with a recorded candidate, enabled status,
    internet as expected, and candidate RSSI within the error margin of the
    RSSI recorded at user selection.
"""

from __future__ import annotations

import logging
from typing import Optional

from wifiselect.core.domain.enums import NominatorAttribution
from wifiselect.core.domain.models import NetworkConfig
from wifiselect.core.ports.config_store_port import ConfigStore
from wifiselect.core.ports.metrics_port import MetricsSink

logger = logging.getLogger(__name__)


def is_rssi_close_to_or_above_expected(rssi: int, expected_rssi: int, margin: int) -> bool:
    if expected_rssi == 0:
        return True
    return rssi >= expected_rssi - margin


def override_with_user_connect_choice(
    candidate: NetworkConfig,
    config_store: ConfigStore,
    rssi_error_margin: int,
    metrics: Optional[MetricsSink] = None,
) -> NetworkConfig:
    original = candidate
    chosen = candidate
    chosen_entry = candidate.status.candidate
    seen = {candidate.profile_key}
    temp = candidate

    while temp.status.connect_choice is not None:
        key = temp.status.connect_choice
        user_selected_rssi = temp.status.connect_choice_rssi
        temp = config_store.get_configured_network_by_profile_key(key)
        if temp is None:
            break
        if key in seen:
            logger.critical(
                "user connect choice loop detected at %s starting from %s",
                key,
                original.profile_key,
            )
            rssi = chosen_entry.level if chosen_entry is not None else 0
            config_store.set_legacy_user_connect_choice(original, rssi)
            return original
        seen.add(key)

        status = temp.status
        if (
            status.candidate is not None
            and status.enabled
            and not temp.lacks_expected_internet
            and is_rssi_close_to_or_above_expected(
                status.candidate.level, user_selected_rssi, rssi_error_margin
            )
        ):
            chosen = temp
            chosen_entry = status.candidate

    if chosen is not original:
        logger.info(
            "After user connect choice, network %s overrides %s",
            chosen.profile_key,
            original.profile_key,
        )
        if metrics is not None:
            metrics.set_nominator_for_network(
                chosen.network_id, NominatorAttribution.SAVED_USER_CONNECT_CHOICE
            )
    return chosen
