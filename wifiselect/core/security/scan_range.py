"""In-range security facts per SSID, built from the latest raw scan.

Responsibilities:
  - Answer "is a <family>-only access point for this SSID in range" for the
    security reconciler.
Must not:
  - Filter or mutate scan entries.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, Iterable

from wifiselect.core.domain.models import ScanEntry
from . import scan_security

_FAMILIES: dict[str, Callable[[ScanEntry], bool]] = {
    "wpa2_personal_only": scan_security.is_wpa2_personal_only,
    "wpa3_personal_only": scan_security.is_wpa3_personal_only,
    "open_only": scan_security.is_open_only,
    "owe_only": scan_security.is_owe_only,
    "wpa2_enterprise_only": scan_security.is_wpa2_enterprise_only,
    "wpa3_enterprise_only": scan_security.is_wpa3_enterprise_only,
}


class ScanRangeIndex:
    def __init__(self, scan_entries: Iterable[ScanEntry] = ()) -> None:
        self._in_range: dict[str, set[str]] = defaultdict(set)
        self.update(scan_entries)

    def update(self, scan_entries: Iterable[ScanEntry]) -> None:
        self._in_range = defaultdict(set)
        for entry in scan_entries:
            if not entry.ssid:
                continue
            for family, predicate in _FAMILIES.items():
                if predicate(entry):
                    self._in_range[entry.ssid].add(family)

    def _has(self, ssid: str, family: str) -> bool:
        return family in self._in_range.get(ssid, set())

    def is_wpa2_personal_only_network_in_range(self, ssid: str) -> bool:
        return self._has(ssid, "wpa2_personal_only")

    def is_wpa3_personal_only_network_in_range(self, ssid: str) -> bool:
        return self._has(ssid, "wpa3_personal_only")

    def is_open_only_network_in_range(self, ssid: str) -> bool:
        return self._has(ssid, "open_only")

    def is_owe_only_network_in_range(self, ssid: str) -> bool:
        return self._has(ssid, "owe_only")

    def is_wpa2_enterprise_only_network_in_range(self, ssid: str) -> bool:
        return self._has(ssid, "wpa2_enterprise_only")

    def is_wpa3_enterprise_only_network_in_range(self, ssid: str) -> bool:
        return self._has(ssid, "wpa3_enterprise_only")
