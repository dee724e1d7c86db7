"""Domain models for scan entries, network configs and candidates.

Responsibilities:
  - Define data carriers for scan snapshots, persisted network configs,
    live connection state, candidates and scorer results.

Inputs/Outputs:
  - Scan entries and client states are supplied per pass by the caller.
  - NetworkConfig instances are owned by the config store; selection only
    mutates their selection-status fields through the store.

Invariants:
  - Models carry data only; selection behavior lives in core/ modules.
  - CandidateKey is hashable and unique within a candidate pool.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .enums import (
    Band,
    MeteredOverride,
    NominatorId,
    SecurityType,
    SsidPolicyType,
    WifiStandard,
    band_for_frequency,
)

INVALID_NETWORK_ID = -1
INVALID_RSSI = -127


@dataclass
class SecurityParams:
    security_type: SecurityType
    enabled: bool = True
    added_by_auto_upgrade: bool = False
    require_pmf: bool = False

    def is_security_type(self, security_type: SecurityType) -> bool:
        return self.security_type == security_type


@dataclass(frozen=True)
class NetworkDetail:
    """Information elements parsed from the beacon/probe response."""

    mbo_assoc_disallowed_code: Optional[int] = None
    mld_address: Optional[str] = None
    wifi_standard: WifiStandard = WifiStandard.LEGACY
    max_spatial_streams: int = 1
    channel_utilization: Optional[int] = None  # BSS load, 0-255
    chargeable_public: bool = False
    disabled_subchannel_bitmap: int = 0  # one bit per punctured 20 MHz subchannel


@dataclass(frozen=True)
class ScanEntry:
    bssid: str
    ssid: str
    frequency: int
    level: int
    capabilities: str = ""
    channel_width: int = 20  # MHz
    detail: Optional[NetworkDetail] = None

    @property
    def band(self) -> Band:
        return band_for_frequency(self.frequency)

    @property
    def scan_id(self) -> str:
        return f"{self.ssid}:{self.bssid}"

    @property
    def mld_address(self) -> Optional[str]:
        if self.detail is None:
            return None
        return self.detail.mld_address

    @property
    def mbo_assoc_disallowed_code(self) -> Optional[int]:
        if self.detail is None:
            return None
        return self.detail.mbo_assoc_disallowed_code


@dataclass
class SelectionStatus:
    enabled: bool = True
    candidate: Optional[ScanEntry] = None
    candidate_score: int = 0
    candidate_security_params: Optional[SecurityParams] = None
    last_used_security_params: Optional[SecurityParams] = None
    connect_choice: Optional[str] = None
    connect_choice_rssi: int = 0
    disable_reason_counts: dict[str, int] = field(default_factory=dict)


@dataclass
class NetworkConfig:
    network_id: int
    ssid: str
    security_params: list[SecurityParams] = field(default_factory=list)
    pre_shared_key: Optional[str] = None
    metered_override: MeteredOverride = MeteredOverride.NONE
    metered_hint: bool = False
    ephemeral: bool = False
    from_suggestion: bool = False
    from_specifier: bool = False
    passpoint: bool = False
    osu: bool = False
    trusted: bool = True
    carrier_id: Optional[int] = None
    oem_paid: bool = False
    oem_private: bool = False
    no_internet_access: bool = False
    no_internet_access_expected: bool = False
    ip_provisioning_timed_out: bool = False
    use_external_scores: bool = False
    status: SelectionStatus = field(default_factory=SelectionStatus)

    @property
    def profile_key(self) -> str:
        if self.passpoint:
            return f'"{self.ssid}"PASSPOINT'
        primary = self.security_params[0].security_type.value if self.security_params else "NONE"
        return f'"{self.ssid}"{primary}'

    def get_security_params(self, security_type: SecurityType) -> Optional[SecurityParams]:
        for params in self.security_params:
            if params.security_type == security_type:
                return params
        return None

    def is_security_type(self, security_type: SecurityType) -> bool:
        return self.get_security_params(security_type) is not None

    def enabled_security_types(self) -> list[SecurityType]:
        return [p.security_type for p in self.security_params if p.enabled]

    @property
    def is_open(self) -> bool:
        return all(p.security_type == SecurityType.OPEN for p in self.security_params)

    @property
    def lacks_expected_internet(self) -> bool:
        return self.no_internet_access and not self.no_internet_access_expected

    @property
    def is_carrier_or_privileged(self) -> bool:
        if self.from_suggestion and self.carrier_id is not None:
            return True
        # Ephemeral configs outside suggestions/specifiers come from the scored nominator.
        if self.ephemeral and not self.from_specifier and not self.from_suggestion:
            return True
        return False


@dataclass
class ConnectionInfo:
    network_id: int = INVALID_NETWORK_ID
    bssid: Optional[str] = None
    ssid: Optional[str] = None
    rssi: int = INVALID_RSSI
    frequency: int = -1
    score: int = 0
    usable: bool = True
    primary: bool = True
    associated: bool = False
    tx_packets_per_second: float = 0.0
    rx_packets_per_second: float = 0.0
    metered_hint: bool = False


@dataclass(frozen=True)
class ClientState:
    iface_name: str = "unknown"
    connected: bool = False
    disconnected: bool = True
    ip_provisioning_timed_out: bool = False
    info: ConnectionInfo = field(default_factory=ConnectionInfo)

    def describe(self) -> str:
        if self.connected:
            state = "connected"
        elif self.disconnected:
            state = "disconnected"
        else:
            state = "unknown"
        return f"{self.iface_name}, connection state: {state}, bssid: {self.info.bssid}"


def is_metered(config: Optional[NetworkConfig], info: Optional[ConnectionInfo]) -> bool:
    metered = False
    if info is not None and info.metered_hint:
        metered = True
    if config is not None:
        if config.metered_hint:
            metered = True
        if config.metered_override == MeteredOverride.METERED:
            metered = True
        elif config.metered_override == MeteredOverride.NOT_METERED:
            metered = False
    return metered


@dataclass(frozen=True)
class SsidPolicy:
    policy_type: SsidPolicyType
    ssids: frozenset[str]


@dataclass
class WifiGlobals:
    using_external_scorer: bool = False
    wpa_personal_deprecated: bool = False
    wep_deprecated: bool = False
    wpa3_sae_upgrade_enabled: bool = True
    wpa3_sae_upgrade_offload_enabled: bool = False
    owe_upgrade_enabled: bool = True
    bluetooth_connected: bool = False


@dataclass(frozen=True)
class DeviceCapabilities:
    supported_standards: frozenset[WifiStandard] = frozenset(
        {WifiStandard.LEGACY, WifiStandard.N, WifiStandard.AC, WifiStandard.AX}
    )
    max_channel_width: int = 160
    max_spatial_streams: int = 2
    enhanced_open_supported: bool = True


@dataclass(frozen=True)
class NominationPolicy:
    untrusted_allowed: bool = False
    oem_paid_allowed: bool = False
    oem_private_allowed: bool = False
    restricted_allowed_uids: frozenset[int] = frozenset()
    multi_internet_allowed: bool = False


@dataclass(frozen=True)
class MatchInfo:
    network_ssid: str
    security_types: frozenset[SecurityType] = field(default=frozenset(), compare=False)


@dataclass(frozen=True)
class CandidateKey:
    match_info: MatchInfo
    bssid: str
    network_id: int
    security_type: SecurityType


@dataclass
class Candidate:
    key: CandidateKey
    nominator_id: NominatorId
    scan_rssi: int
    frequency: int
    channel_width: int
    last_selection_weight: float
    metered: bool
    carrier_or_privileged: bool
    predicted_throughput_mbps: int
    predicted_multi_link_throughput_mbps: int = 0
    mld_address: Optional[str] = None
    current_network: bool = False
    current_bssid: bool = False
    open_network: bool = False
    passpoint: bool = False
    ephemeral: bool = False
    trusted: bool = True
    no_internet_access: bool = False
    no_internet_access_expected: bool = False

    @property
    def network_id(self) -> int:
        return self.key.network_id

    @property
    def bssid(self) -> str:
        return self.key.bssid

    @property
    def band(self) -> Band:
        return band_for_frequency(self.frequency)

    def describe(self) -> str:
        return (
            f"Candidate {{ {self.key.match_info.network_ssid}:{self.network_id} "
            f"bssid={self.bssid} rssi={self.scan_rssi} freq={self.frequency} "
            f"tput={self.predicted_throughput_mbps} mlo_tput={self.predicted_multi_link_throughput_mbps} "
            f"nominator={self.nominator_id.name} metered={self.metered} "
            f"weight={self.last_selection_weight:.3f} current={self.current_network} }}"
        )


@dataclass(frozen=True)
class ScoredCandidate:
    value: float
    err: float
    candidate_key: Optional[CandidateKey]
    user_connect_choice_override: bool

    @property
    def network_id(self) -> int:
        if self.candidate_key is None:
            return INVALID_NETWORK_ID
        return self.candidate_key.network_id


SCORED_NONE = ScoredCandidate(
    value=float("-inf"),
    err=float("inf"),
    candidate_key=None,
    user_connect_choice_override=False,
)
