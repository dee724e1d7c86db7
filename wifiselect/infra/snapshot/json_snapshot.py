"""JSON snapshot loader.

Responsibilities:
  - Turn one JSON document (saved networks, scan, client states, radio,
    policy, toggles) into reference adapters and selector inputs.
Must not:
  - Run selection; loading and validation only.

Invariants:
  - Malformed documents raise ValueError naming the offending field.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

from wifiselect.core.domain.enums import (
    Band,
    MeteredOverride,
    SecurityLevel,
    SecurityType,
    SsidPolicyType,
    WifiStandard,
)
from wifiselect.core.domain.models import (
    INVALID_NETWORK_ID,
    INVALID_RSSI,
    ClientState,
    ConnectionInfo,
    DeviceCapabilities,
    NetworkConfig,
    NetworkDetail,
    NominationPolicy,
    ScanEntry,
    SecurityParams,
    SelectionStatus,
    SsidPolicy,
    WifiGlobals,
)
from wifiselect.infra.memory.config_store import InMemoryConfigStore
from wifiselect.infra.memory.providers import (
    StaticExternalScores,
    StaticPolicyProvider,
    StaticRadioProvider,
)


@dataclass
class Snapshot:
    config_store: InMemoryConfigStore
    scan_entries: list[ScanEntry]
    client_states: list[ClientState]
    bssid_blocklist: list[str] = field(default_factory=list)
    wifi_globals: WifiGlobals = field(default_factory=WifiGlobals)
    radio: StaticRadioProvider = field(default_factory=StaticRadioProvider)
    policy_provider: StaticPolicyProvider = field(default_factory=StaticPolicyProvider)
    external_scores: StaticExternalScores = field(default_factory=StaticExternalScores)
    nomination_policy: NominationPolicy = field(default_factory=NominationPolicy)
    now_ms: int = 0


def _get(payload: dict[str, Any], key: str, expected_type: type, default: Any, where: str) -> Any:
    if key not in payload or payload[key] is None:
        return default
    value = payload[key]
    if expected_type is int and isinstance(value, bool):
        raise ValueError(f"Field '{where}.{key}' must be int")
    if expected_type is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, expected_type):
        type_name = getattr(expected_type, "__name__", "int or str")
        raise ValueError(f"Field '{where}.{key}' must be {type_name}")
    return value


def _require(payload: dict[str, Any], key: str, expected_type: type, where: str) -> Any:
    if key not in payload:
        raise ValueError(f"Missing field '{where}.{key}'")
    return _get(payload, key, expected_type, None, where)


def _enum(enum_cls: Any, value: Any, where: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        try:
            return enum_cls[value]
        except (KeyError, TypeError):
            raise ValueError(f"Field '{where}' has unknown value: {value!r}") from None


def _object(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"Field '{where}' must be an object")
    return value


def _list(payload: dict[str, Any], key: str, where: str) -> list[Any]:
    return _get(payload, key, list, [], where)


def _flags(payload: dict[str, Any], cls: type, where: str) -> dict[str, Any]:
    """Copy the boolean fields of a dataclass present in payload."""
    values: dict[str, Any] = {}
    for f in fields(cls):
        if f.name in payload and isinstance(f.default, bool):
            values[f.name] = _get(payload, f.name, bool, f.default, where)
    return values


def parse_network_detail(payload: Any, where: str) -> NetworkDetail:
    payload = _object(payload, where)
    return NetworkDetail(
        mbo_assoc_disallowed_code=_get(payload, "mbo_assoc_disallowed_code", int, None, where),
        mld_address=_get(payload, "mld_address", str, None, where),
        wifi_standard=_enum(WifiStandard, _get(payload, "wifi_standard", (int, str), 1, where), f"{where}.wifi_standard"),
        max_spatial_streams=_get(payload, "max_spatial_streams", int, 1, where),
        channel_utilization=_get(payload, "channel_utilization", int, None, where),
        chargeable_public=_get(payload, "chargeable_public", bool, False, where),
        disabled_subchannel_bitmap=_get(payload, "disabled_subchannel_bitmap", int, 0, where),
    )


def parse_scan_entry(payload: Any, where: str) -> ScanEntry:
    payload = _object(payload, where)
    detail = payload.get("detail")
    return ScanEntry(
        bssid=_require(payload, "bssid", str, where),
        ssid=_get(payload, "ssid", str, "", where),
        frequency=_require(payload, "frequency", int, where),
        level=_require(payload, "level", int, where),
        capabilities=_get(payload, "capabilities", str, "", where),
        channel_width=_get(payload, "channel_width", int, 20, where),
        detail=parse_network_detail(detail, f"{where}.detail") if detail is not None else None,
    )


def parse_security_params(payload: Any, where: str) -> SecurityParams:
    if isinstance(payload, str):
        return SecurityParams(_enum(SecurityType, payload, where))
    payload = _object(payload, where)
    return SecurityParams(
        security_type=_enum(SecurityType, _require(payload, "type", str, where), f"{where}.type"),
        enabled=_get(payload, "enabled", bool, True, where),
        added_by_auto_upgrade=_get(payload, "added_by_auto_upgrade", bool, False, where),
        require_pmf=_get(payload, "require_pmf", bool, False, where),
    )


def parse_network_config(payload: Any, where: str) -> NetworkConfig:
    payload = _object(payload, where)
    params = [
        parse_security_params(p, f"{where}.security_params[{i}]")
        for i, p in enumerate(_list(payload, "security_params", where))
    ]
    last_used = payload.get("last_used_security_type")
    status = SelectionStatus(
        enabled=_get(payload, "enabled", bool, True, where),
        last_used_security_params=(
            SecurityParams(_enum(SecurityType, last_used, f"{where}.last_used_security_type"))
            if last_used is not None
            else None
        ),
        connect_choice=_get(payload, "connect_choice", str, None, where),
        connect_choice_rssi=_get(payload, "connect_choice_rssi", int, 0, where),
    )
    config = NetworkConfig(
        network_id=_get(payload, "network_id", int, INVALID_NETWORK_ID, where),
        ssid=_require(payload, "ssid", str, where),
        security_params=params,
        pre_shared_key=_get(payload, "pre_shared_key", str, None, where),
        metered_override=_enum(
            MeteredOverride, _get(payload, "metered_override", str, "NONE", where), f"{where}.metered_override"
        ),
        carrier_id=_get(payload, "carrier_id", int, None, where),
        status=status,
        **_flags(payload, NetworkConfig, where),
    )
    return config


def parse_client_state(payload: Any, where: str) -> ClientState:
    payload = _object(payload, where)
    info_payload = _object(payload.get("info", {}), f"{where}.info")
    info = ConnectionInfo(
        network_id=_get(info_payload, "network_id", int, INVALID_NETWORK_ID, f"{where}.info"),
        bssid=_get(info_payload, "bssid", str, None, f"{where}.info"),
        ssid=_get(info_payload, "ssid", str, None, f"{where}.info"),
        rssi=_get(info_payload, "rssi", int, INVALID_RSSI, f"{where}.info"),
        frequency=_get(info_payload, "frequency", int, -1, f"{where}.info"),
        score=_get(info_payload, "score", int, 0, f"{where}.info"),
        tx_packets_per_second=_get(info_payload, "tx_packets_per_second", float, 0.0, f"{where}.info"),
        rx_packets_per_second=_get(info_payload, "rx_packets_per_second", float, 0.0, f"{where}.info"),
        **_flags(info_payload, ConnectionInfo, f"{where}.info"),
    )
    connected = _get(payload, "connected", bool, False, where)
    return ClientState(
        iface_name=_get(payload, "iface_name", str, "wlan0", where),
        connected=connected,
        disconnected=_get(payload, "disconnected", bool, not connected, where),
        ip_provisioning_timed_out=_get(payload, "ip_provisioning_timed_out", bool, False, where),
        info=info,
    )


def parse_radio(payload: Any) -> StaticRadioProvider:
    payload = _object(payload, "radio")
    combinations = payload.get("band_combinations")
    parsed: Optional[list[tuple[Band, ...]]] = None
    if combinations is not None:
        if not isinstance(combinations, list):
            raise ValueError("Field 'radio.band_combinations' must be list")
        parsed = [
            tuple(_enum(Band, b, f"radio.band_combinations[{i}]") for b in combo)
            for i, combo in enumerate(combinations)
        ]
    caps_payload = _object(payload.get("capabilities", {}), "radio.capabilities")
    standards = _get(caps_payload, "supported_standards", list, None, "radio.capabilities")
    defaults = DeviceCapabilities()
    capabilities = DeviceCapabilities(
        supported_standards=(
            frozenset(_enum(WifiStandard, s, "radio.capabilities.supported_standards") for s in standards)
            if standards is not None
            else defaults.supported_standards
        ),
        max_channel_width=_get(caps_payload, "max_channel_width", int, defaults.max_channel_width, "radio.capabilities"),
        max_spatial_streams=_get(
            caps_payload, "max_spatial_streams", int, defaults.max_spatial_streams, "radio.capabilities"
        ),
        enhanced_open_supported=_get(
            caps_payload, "enhanced_open_supported", bool, defaults.enhanced_open_supported, "radio.capabilities"
        ),
    )
    return StaticRadioProvider(
        primary_interface=_get(payload, "primary_interface", str, "wlan0", "radio"),
        max_mlo_str_link_count=_get(payload, "max_mlo_str_link_count", int, 1, "radio"),
        band_combinations=parsed,
        capabilities=capabilities,
    )


def parse_policy(payload: Any) -> StaticPolicyProvider:
    payload = _object(payload, "policy")
    level = _enum(SecurityLevel, _get(payload, "minimum_security_level", int, 0, "policy"), "policy.minimum_security_level")
    ssid_policy = None
    if payload.get("ssid_policy") is not None:
        sp = _object(payload["ssid_policy"], "policy.ssid_policy")
        ssid_policy = SsidPolicy(
            policy_type=_enum(SsidPolicyType, _require(sp, "type", str, "policy.ssid_policy"), "policy.ssid_policy.type"),
            ssids=frozenset(_list(sp, "ssids", "policy.ssid_policy")),
        )
    return StaticPolicyProvider(minimum_security_level=level, ssid_policy=ssid_policy)


def snapshot_from_dict(payload: Any) -> Snapshot:
    payload = _object(payload, "snapshot")
    now_ms = _get(payload, "now_ms", int, 0, "snapshot")
    store = InMemoryConfigStore(
        [parse_network_config(n, f"networks[{i}]") for i, n in enumerate(_list(payload, "networks", "snapshot"))],
        clock=lambda: now_ms,
    )
    last_selected = payload.get("last_selected")
    if last_selected is not None:
        last_selected = _object(last_selected, "last_selected")
        store.user_select_network(
            _require(last_selected, "network_id", int, "last_selected"),
            _require(last_selected, "timestamp_ms", int, "last_selected"),
        )
    scores = _object(payload.get("external_scores", {}), "external_scores")
    return Snapshot(
        config_store=store,
        scan_entries=[parse_scan_entry(e, f"scan[{i}]") for i, e in enumerate(_list(payload, "scan", "snapshot"))],
        client_states=[
            parse_client_state(c, f"clients[{i}]") for i, c in enumerate(_list(payload, "clients", "snapshot"))
        ],
        bssid_blocklist=[str(b) for b in _list(payload, "blocklist", "snapshot")],
        wifi_globals=WifiGlobals(**_flags(_object(payload.get("globals", {}), "globals"), WifiGlobals, "globals")),
        radio=parse_radio(payload.get("radio", {})),
        policy_provider=parse_policy(payload.get("policy", {})),
        external_scores=StaticExternalScores({str(k): int(v) for k, v in scores.items()}),
        nomination_policy=NominationPolicy(
            **_flags(_object(payload.get("nomination", {}), "nomination"), NominationPolicy, "nomination")
        ),
        now_ms=now_ms,
    )


def load_snapshot(path: Path) -> Snapshot:
    if not path.exists():
        raise ValueError(f"Snapshot not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Snapshot is not valid JSON: {path}: {exc}") from exc
    return snapshot_from_dict(payload)
