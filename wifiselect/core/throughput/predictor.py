"""Default single-link throughput predictor.

Responsibilities:
  - Estimate achievable throughput (Mbps) from radio standard, channel
    width, signal strength, spatial streams and channel utilization.

Model:
  - data tones and symbol duration per standard, scaled by width/20 and
    reduced by punctured 20 MHz subchannels;
  - noise floor -96 dBm at 20 MHz, +3 dB per width doubling;
  - bits per tone = log2(1 + SNR), capped per standard;
  - airtime available = 1 - utilization/255.

Invariants:
  - Non-decreasing in RSSI for fixed other inputs.
  - Result is a non-negative int.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from wifiselect.core.domain.enums import Band, WifiStandard, band_for_frequency
from wifiselect.core.domain.models import DeviceCapabilities, ScanEntry, WifiGlobals
from wifiselect.core.ports.radio_port import ChannelUtilizationProvider, ThroughputPredictor

logger = logging.getLogger(__name__)

NOISE_FLOOR_20MHZ_DBM = -96.0
MAX_CHANNEL_UTILIZATION = 255
CHANNEL_UTILIZATION_DEFAULT_2G = MAX_CHANNEL_UTILIZATION * 6 // 16
CHANNEL_UTILIZATION_DEFAULT_ABOVE_2G = MAX_CHANNEL_UTILIZATION * 1 // 16
CHANNEL_UTILIZATION_BOOST_BT_CONNECTED_2G = MAX_CHANNEL_UTILIZATION // 4


@dataclass(frozen=True)
class StandardProfile:
    data_tones_20mhz: int
    symbol_duration_us: float
    max_bits_per_tone: float
    max_channel_width: int


STANDARD_PROFILES: dict[WifiStandard, StandardProfile] = {
    WifiStandard.LEGACY: StandardProfile(48, 4.0, 4.5, 20),
    WifiStandard.N: StandardProfile(52, 3.6, 5.0, 40),
    WifiStandard.AC: StandardProfile(52, 3.6, 6.67, 160),
    WifiStandard.AX: StandardProfile(234, 13.6, 8.33, 160),
    WifiStandard.BE: StandardProfile(234, 13.6, 10.0, 320),
}


def effective_standard(ap_standard: WifiStandard, capabilities: Optional[DeviceCapabilities]) -> WifiStandard:
    if capabilities is None:
        return ap_standard
    supported = [s for s in capabilities.supported_standards if s <= ap_standard]
    if not supported:
        return WifiStandard.LEGACY
    return max(supported)


def bits_per_tone(rssi: int, channel_width: int, max_bits: float) -> float:
    noise_floor = NOISE_FLOOR_20MHZ_DBM + 10.0 * np.log10(channel_width / 20.0)
    snr_linear = np.power(10.0, (rssi - noise_floor) / 10.0)
    return float(np.clip(np.log2(1.0 + snr_linear), 0.0, max_bits))


def usable_tone_fraction(channel_width: int, disabled_subchannel_bitmap: int) -> float:
    num_subchannels = max(1, channel_width // 20)
    bits = np.array([(disabled_subchannel_bitmap >> i) & 1 for i in range(num_subchannels)])
    punctured = int(np.count_nonzero(bits))
    return (num_subchannels - punctured) / num_subchannels


def channel_utilization(
    frequency: int,
    bss_load: Optional[int],
    link_layer: Optional[int],
    bluetooth_connected: bool,
) -> int:
    if bss_load is not None:
        utilization = bss_load
    elif link_layer is not None:
        utilization = link_layer
    elif band_for_frequency(frequency) == Band.BAND_24_GHZ:
        utilization = CHANNEL_UTILIZATION_DEFAULT_2G
    else:
        utilization = CHANNEL_UTILIZATION_DEFAULT_ABOVE_2G
    if bluetooth_connected and band_for_frequency(frequency) == Band.BAND_24_GHZ:
        utilization += CHANNEL_UTILIZATION_BOOST_BT_CONNECTED_2G
    return int(np.clip(utilization, 0, MAX_CHANNEL_UTILIZATION))


class DefaultThroughputPredictor:
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
        standard = effective_standard(wifi_standard, capabilities)
        profile = STANDARD_PROFILES[standard]

        width = min(max(20, channel_width), profile.max_channel_width)
        streams = max(1, max_spatial_streams)
        if capabilities is not None:
            width = min(width, capabilities.max_channel_width)
            streams = min(streams, max(1, capabilities.max_spatial_streams))
        if standard == WifiStandard.LEGACY:
            streams = 1

        tones = profile.data_tones_20mhz * (width / 20.0)
        tones *= usable_tone_fraction(width, disabled_subchannel_bitmap)
        bits = bits_per_tone(rssi, width, profile.max_bits_per_tone)
        phy_rate_mbps = tones * bits * streams / profile.symbol_duration_us

        utilization = channel_utilization(
            frequency,
            channel_utilization_bss_load,
            channel_utilization_link_layer,
            bluetooth_connected,
        )
        airtime = 1.0 - utilization / MAX_CHANNEL_UTILIZATION
        return max(0, int(round(phy_rate_mbps * airtime)))


def predict_for_scan_entry(
    predictor: ThroughputPredictor,
    entry: ScanEntry,
    capabilities: Optional[DeviceCapabilities],
    wifi_globals: WifiGlobals,
    utilization_provider: Optional[ChannelUtilizationProvider] = None,
) -> int:
    detail = entry.detail
    if detail is None:
        logger.debug("No network detail for %s, predicted throughput is 0", entry.scan_id)
        return 0
    link_layer = None
    if utilization_provider is not None:
        link_layer = utilization_provider.get_utilization_ratio(entry.frequency)
    return predictor.predict_throughput(
        capabilities,
        detail.wifi_standard,
        entry.channel_width,
        entry.level,
        entry.frequency,
        detail.max_spatial_streams,
        detail.channel_utilization,
        link_layer,
        wifi_globals.bluetooth_connected,
        detail.disabled_subchannel_bitmap,
    )
