"""Scan filter: drops scan entries that must never become candidates.

Responsibilities:
  - Apply the per-entry drop checks in a fixed order and record the
    dropped scan ids per FilterReason.
  - Abort the pass when a connected client with an acceptable score is
    missing from the scan (partial scans must not trigger a switch).

Inputs/Outputs:
  - Inputs: raw scan entries, BSSID blocklist, client states, admin
    policy, global toggles, tuning params.
  - Outputs: ScanFilterResult (valid entries, drops, abort flag).

Invariants:
  - Current BSSIDs pass through every check.
  - Dropped entries appear under exactly one reason.
Must not:
  - Touch the config store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from wifiselect.core.domain.config import SelectorConfig
from wifiselect.core.domain.enums import (
    FILTER_REASON_LABELS,
    Band,
    FilterReason,
    SecurityLevel,
    SecurityType,
    SsidPolicyType,
)
from wifiselect.core.domain.models import ClientState, ScanEntry, SsidPolicy, WifiGlobals
from wifiselect.core.ports.metrics_port import MetricsSink
from wifiselect.core.security import scan_security

logger = logging.getLogger(__name__)

# Connected score below the transition score (50) minus a margin of 10.
WIFI_POOR_SCORE = 40

_BAND_SUFFIX = {
    Band.BAND_24_GHZ: "(2.4GHz)",
    Band.BAND_5_GHZ: "(5GHz)",
    Band.BAND_6_GHZ: "(6GHz)",
}


@dataclass
class ScanFilterResult:
    valid: list[ScanEntry] = field(default_factory=list)
    dropped: dict[FilterReason, list[str]] = field(default_factory=dict)
    aborted: bool = False

    def drop(self, reason: FilterReason, scan_id: str) -> None:
        self.dropped.setdefault(reason, []).append(scan_id)

    def dropped_ids(self, reason: FilterReason) -> list[str]:
        return list(self.dropped.get(reason, []))


def _admin_ssid_restricted(entry: ScanEntry, policy: Optional[SsidPolicy]) -> bool:
    if policy is None or not policy.ssids:
        return False
    if policy.policy_type == SsidPolicyType.ALLOWLIST:
        return entry.ssid not in policy.ssids
    return entry.ssid in policy.ssids


def _meets_security_level(entry: ScanEntry, minimum: SecurityLevel) -> bool:
    if minimum <= SecurityLevel.OPEN:
        return True
    for security_type in scan_security.security_types(entry):
        level = scan_security.security_level(security_type)
        if level == SecurityLevel.UNKNOWN:
            continue
        if minimum <= level:
            return True
    return False


def _has_deprecated_security(entry: ScanEntry, wifi_globals: WifiGlobals) -> bool:
    if not (wifi_globals.wep_deprecated or wifi_globals.wpa_personal_deprecated):
        return False
    for security_type in scan_security.security_types(entry):
        if wifi_globals.wep_deprecated and security_type == SecurityType.WEP:
            return True
        if (
            wifi_globals.wpa_personal_deprecated
            and security_type == SecurityType.PSK
            and scan_security.is_wpa_personal_only(entry)
        ):
            return True
    return False


def filter_scan_entries(
    scan_entries: Iterable[ScanEntry],
    bssid_blocklist: Iterable[str],
    client_states: list[ClientState],
    params: SelectorConfig,
    wifi_globals: WifiGlobals,
    sufficiency_check_enabled: bool,
    min_security_level: SecurityLevel = SecurityLevel.OPEN,
    ssid_policy: Optional[SsidPolicy] = None,
    metrics: Optional[MetricsSink] = None,
) -> ScanFilterResult:
    result = ScanFilterResult()
    blocklist = set(bssid_blocklist)
    current_bssids = {s.info.bssid for s in client_states if s.info.bssid}
    seen_current: set[str] = set()
    num_blocklisted = 0

    for entry in scan_entries:
        if entry.bssid in current_bssids:
            seen_current.add(entry.bssid)
            result.valid.append(entry)
            continue

        if not entry.ssid:
            result.drop(FilterReason.INVALID_SSID, entry.bssid)
            continue

        scan_id = entry.scan_id
        if entry.bssid in blocklist:
            result.drop(FilterReason.BLOCKLISTED, scan_id)
            num_blocklisted += 1
            continue

        if entry.level < params.entry_rssi(entry.frequency):
            result.drop(
                FilterReason.LOW_RSSI,
                f"{scan_id}{_BAND_SUFFIX.get(entry.band, '')}{entry.level}",
            )
            continue

        if entry.mbo_assoc_disallowed_code is not None:
            if metrics is not None:
                metrics.increment_mbo_assoc_disallowed_count()
            result.drop(
                FilterReason.MBO_ASSOC_DISALLOWED,
                f"{scan_id}({entry.mbo_assoc_disallowed_code})",
            )
            continue

        if _admin_ssid_restricted(entry, ssid_policy) or not _meets_security_level(
            entry, min_security_level
        ):
            result.drop(FilterReason.ADMIN_RESTRICTED, scan_id)
            continue

        if _has_deprecated_security(entry, wifi_globals):
            result.drop(FilterReason.DEPRECATED_SECURITY, scan_id)
            continue

        result.valid.append(entry)

    if metrics is not None:
        metrics.increment_filtered_bssid_count(num_blocklisted)

    for state in client_states:
        if (
            state.connected
            and state.info.score >= WIFI_POOR_SCORE
            and state.info.bssid not in seen_current
        ):
            if sufficiency_check_enabled:
                logger.info(
                    "Current connected BSSID %s is not in the scan results. Skip network selection.",
                    state.info.bssid,
                )
                result.valid = []
                result.aborted = True
                return result
            logger.info(
                "Current connected BSSID %s is not in the scan results. But continue network "
                "selection because sufficiency check is disabled.",
                state.info.bssid,
            )

    for reason, scan_ids in result.dropped.items():
        logger.info(
            "Networks filtered out due to %s: %s",
            FILTER_REASON_LABELS[reason],
            " / ".join(scan_ids),
        )
    return result
