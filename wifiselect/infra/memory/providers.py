"""Static reference adapters for radio, policy, Passpoint and external scores."""

from __future__ import annotations

from typing import Optional

from wifiselect.core.domain.enums import Band, SecurityLevel
from wifiselect.core.domain.models import DeviceCapabilities, NetworkConfig, ScanEntry, SsidPolicy


class StaticRadioProvider:
    def __init__(
        self,
        primary_interface: Optional[str] = "wlan0",
        max_mlo_str_link_count: int = 1,
        band_combinations: Optional[list[tuple[Band, ...]]] = None,
        capabilities: Optional[DeviceCapabilities] = None,
    ) -> None:
        self._primary_interface = primary_interface
        self._max_links = max_mlo_str_link_count
        self._band_combinations = band_combinations
        self._capabilities = capabilities if capabilities is not None else DeviceCapabilities()

    def get_primary_interface_name(self) -> Optional[str]:
        return self._primary_interface

    def get_max_mlo_str_link_count(self, iface_name: str) -> int:
        return self._max_links

    def get_supported_band_combinations(self, iface_name: str) -> Optional[list[tuple[Band, ...]]]:
        if self._band_combinations is None:
            return None
        return list(self._band_combinations)

    def get_device_capabilities(self) -> Optional[DeviceCapabilities]:
        return self._capabilities


class StaticPolicyProvider:
    def __init__(
        self,
        minimum_security_level: SecurityLevel = SecurityLevel.OPEN,
        ssid_policy: Optional[SsidPolicy] = None,
    ) -> None:
        self._minimum_security_level = minimum_security_level
        self._ssid_policy = ssid_policy

    def get_minimum_required_security_level(self) -> SecurityLevel:
        return self._minimum_security_level

    def get_ssid_policy(self) -> Optional[SsidPolicy]:
        return self._ssid_policy


class NoPasspointHelper:
    def update_passpoint_config(self, scan_entries: list[ScanEntry]) -> None:
        pass

    def get_passpoint_network_candidates(
        self, scan_entries: list[ScanEntry]
    ) -> list[tuple[ScanEntry, NetworkConfig]]:
        return []


class StaticExternalScores:
    """External scores keyed by lowercase BSSID."""

    def __init__(self, scores: Optional[dict[str, int]] = None) -> None:
        self._scores = {k.lower(): v for k, v in (scores or {}).items()}
        self.updates = 0

    def update_scores(self, scan_entries: list[ScanEntry]) -> None:
        self.updates += 1

    def get_score(self, entry: ScanEntry) -> Optional[int]:
        return self._scores.get(entry.bssid.lower())
