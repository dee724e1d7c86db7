"""Ports for administrative policy and scan-range facts."""

from __future__ import annotations

from typing import Optional, Protocol

from wifiselect.core.domain.enums import SecurityLevel
from wifiselect.core.domain.models import SsidPolicy


class DevicePolicyProvider(Protocol):
    def get_minimum_required_security_level(self) -> SecurityLevel:
        ...

    def get_ssid_policy(self) -> Optional[SsidPolicy]:
        ...


class ScanRangeProvider(Protocol):
    def is_wpa2_personal_only_network_in_range(self, ssid: str) -> bool:
        ...

    def is_wpa3_personal_only_network_in_range(self, ssid: str) -> bool:
        ...

    def is_open_only_network_in_range(self, ssid: str) -> bool:
        ...

    def is_owe_only_network_in_range(self, ssid: str) -> bool:
        ...

    def is_wpa2_enterprise_only_network_in_range(self, ssid: str) -> bool:
        ...

    def is_wpa3_enterprise_only_network_in_range(self, ssid: str) -> bool:
        ...
