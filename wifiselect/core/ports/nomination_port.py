"""Ports used by nominators: Passpoint matching and external scores."""

from __future__ import annotations

from typing import Optional, Protocol

from wifiselect.core.domain.models import NetworkConfig, ScanEntry


class PasspointNominateHelper(Protocol):
    def update_passpoint_config(self, scan_entries: list[ScanEntry]) -> None:
        ...

    def get_passpoint_network_candidates(
        self, scan_entries: list[ScanEntry]
    ) -> list[tuple[ScanEntry, NetworkConfig]]:
        ...


class ExternalScoreProvider(Protocol):
    def update_scores(self, scan_entries: list[ScanEntry]) -> None:
        ...

    def get_score(self, entry: ScanEntry) -> Optional[int]:
        ...
