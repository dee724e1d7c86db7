"""Selector tuning parameters.

Responsibilities:
  - Define the stable, typed tuning parameters used by the selector.
Must not:
  - Implement selection logic; threshold lookups only.
"""

from __future__ import annotations

from dataclasses import dataclass

from wifiselect.core.domain.enums import Band, band_for_frequency


@dataclass(frozen=True)
class SelectorConfig:
    rssi_24ghz_entry: int = -80
    rssi_24ghz_sufficient: int = -73
    rssi_5ghz_entry: int = -77
    rssi_5ghz_sufficient: int = -70
    rssi_6ghz_entry: int = -77
    rssi_6ghz_sufficient: int = -70
    estimate_rssi_error_margin: int = 5
    active_traffic_packets_per_second: int = 16
    sufficient_duration_after_user_selection_ms: int = 60_000
    last_unmetered_selection_minutes: int = 480
    last_metered_selection_minutes: int = 120
    low_connected_score_threshold: int = 55
    experiment_identifier: int = 0
    throughput_bonus_numerator: int = 120
    throughput_bonus_denominator: int = 433
    throughput_bonus_numerator_after_800: int = 1
    throughput_bonus_denominator_after_800: int = 16
    throughput_bonus_limit: int = 320
    saved_network_bonus: int = 500
    unmetered_network_bonus: int = 1000
    current_network_bonus_min: int = 16
    current_network_bonus_percent: int = 20
    secure_network_bonus: int = 40
    associated_network_selection_enabled: bool = True
    primary_interface_distinction: bool = True

    def entry_rssi(self, frequency: int) -> int:
        band = band_for_frequency(frequency)
        if band == Band.BAND_6_GHZ:
            return self.rssi_6ghz_entry
        if band == Band.BAND_5_GHZ:
            return self.rssi_5ghz_entry
        return self.rssi_24ghz_entry

    def sufficient_rssi(self, frequency: int) -> int:
        band = band_for_frequency(frequency)
        if band == Band.BAND_6_GHZ:
            return self.rssi_6ghz_sufficient
        if band == Band.BAND_5_GHZ:
            return self.rssi_5ghz_sufficient
        return self.rssi_24ghz_sufficient

    def validate(self) -> None:
        for band_name, entry, sufficient in [
            ("24ghz", self.rssi_24ghz_entry, self.rssi_24ghz_sufficient),
            ("5ghz", self.rssi_5ghz_entry, self.rssi_5ghz_sufficient),
            ("6ghz", self.rssi_6ghz_entry, self.rssi_6ghz_sufficient),
        ]:
            if not -127 <= entry <= 0 or not -127 <= sufficient <= 0:
                raise ValueError(f"rssi_{band_name} thresholds must be within [-127, 0]")
            if entry > sufficient:
                raise ValueError(f"rssi_{band_name}_entry must be <= rssi_{band_name}_sufficient")

        for name, value, min_val in [
            ("estimate_rssi_error_margin", self.estimate_rssi_error_margin, 0),
            ("active_traffic_packets_per_second", self.active_traffic_packets_per_second, 0),
            (
                "sufficient_duration_after_user_selection_ms",
                self.sufficient_duration_after_user_selection_ms,
                0,
            ),
            ("last_unmetered_selection_minutes", self.last_unmetered_selection_minutes, 1),
            ("last_metered_selection_minutes", self.last_metered_selection_minutes, 1),
            ("experiment_identifier", self.experiment_identifier, 0),
            ("throughput_bonus_denominator", self.throughput_bonus_denominator, 1),
            ("throughput_bonus_denominator_after_800", self.throughput_bonus_denominator_after_800, 1),
            ("throughput_bonus_limit", self.throughput_bonus_limit, 0),
            ("current_network_bonus_min", self.current_network_bonus_min, 0),
        ]:
            if value < min_val:
                raise ValueError(f"{name} must be >= {min_val}")

        if not 0 <= self.current_network_bonus_percent <= 100:
            raise ValueError("current_network_bonus_percent must be within [0, 100]")
