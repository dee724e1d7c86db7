"""Ports for radio capability queries and throughput prediction."""

from __future__ import annotations

from typing import Optional, Protocol

from wifiselect.core.domain.enums import Band, WifiStandard
from wifiselect.core.domain.models import DeviceCapabilities


class RadioProvider(Protocol):
    def get_primary_interface_name(self) -> Optional[str]:
        ...

    def get_max_mlo_str_link_count(self, iface_name: str) -> int:
        ...

    def get_supported_band_combinations(self, iface_name: str) -> Optional[list[tuple[Band, ...]]]:
        ...

    def get_device_capabilities(self) -> Optional[DeviceCapabilities]:
        ...


class ThroughputPredictor(Protocol):
    def predict_throughput(
        self,
        capabilities: Optional[DeviceCapabilities],
        wifi_standard: WifiStandard,
        channel_width: int,
        rssi: int,
        frequency: int,
        max_spatial_streams: int,
        channel_utilization_bss_load: Optional[int],
        channel_utilization_link_layer: Optional[int],
        bluetooth_connected: bool,
        disabled_subchannel_bitmap: int,
    ) -> int:
        ...


class ChannelUtilizationProvider(Protocol):
    def get_utilization_ratio(self, frequency: int) -> Optional[int]:
        ...
