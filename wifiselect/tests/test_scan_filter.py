from __future__ import annotations

from wifiselect.core.domain.config import SelectorConfig
from wifiselect.core.domain.enums import FilterReason, SecurityLevel, SsidPolicyType
from wifiselect.core.domain.models import (
    ClientState,
    ConnectionInfo,
    NetworkDetail,
    ScanEntry,
    SsidPolicy,
    WifiGlobals,
)
from wifiselect.core.filtering.scan_filter import WIFI_POOR_SCORE, filter_scan_entries
from wifiselect.infra.memory.metrics import RecordingMetricsSink

CURRENT_BSSID = "aa:aa:aa:aa:aa:01"


def mk_entry(bssid: str, ssid: str = "home", level: int = -55, frequency: int = 5180, caps: str = "[RSN-PSK-CCMP]", detail=None) -> ScanEntry:
    return ScanEntry(bssid=bssid, ssid=ssid, frequency=frequency, level=level, capabilities=caps, detail=detail)


def mk_connected(bssid: str = CURRENT_BSSID, score: int = 60) -> ClientState:
    return ClientState(
        iface_name="wlan0",
        connected=True,
        disconnected=False,
        info=ConnectionInfo(network_id=0, bssid=bssid, rssi=-60, frequency=5180, score=score, associated=True),
    )


def run_filter(entries, blocklist=(), clients=(), sufficiency_check_enabled=True, wifi_globals=None, metrics=None, **kwargs):
    return filter_scan_entries(
        entries,
        blocklist,
        list(clients),
        SelectorConfig(),
        wifi_globals if wifi_globals is not None else WifiGlobals(),
        sufficiency_check_enabled,
        metrics=metrics,
        **kwargs,
    )


def test_current_bssid_passes_through_every_check():
    current = mk_entry(CURRENT_BSSID, level=-95)
    result = run_filter([current], blocklist=[CURRENT_BSSID], clients=[mk_connected()])
    assert result.valid == [current]
    assert result.aborted is False


def test_blocklisted_non_current_bssid_is_dropped():
    metrics = RecordingMetricsSink()
    blocked = mk_entry("aa:aa:aa:aa:aa:02")
    result = run_filter([blocked], blocklist=["aa:aa:aa:aa:aa:02"], metrics=metrics)
    assert result.valid == []
    assert result.dropped_ids(FilterReason.BLOCKLISTED) == [blocked.scan_id]
    assert metrics.filtered_bssid_count == 1


def test_empty_ssid_is_dropped():
    result = run_filter([mk_entry("aa:aa:aa:aa:aa:03", ssid="")])
    assert result.dropped_ids(FilterReason.INVALID_SSID) == ["aa:aa:aa:aa:aa:03"]


def test_low_rssi_uses_per_band_entry_threshold():
    weak_24 = mk_entry("aa:aa:aa:aa:aa:04", level=-81, frequency=2437)
    ok_24 = mk_entry("aa:aa:aa:aa:aa:05", level=-79, frequency=2437)
    weak_5 = mk_entry("aa:aa:aa:aa:aa:06", level=-78, frequency=5180)
    result = run_filter([weak_24, ok_24, weak_5])
    assert result.valid == [ok_24]
    dropped = result.dropped_ids(FilterReason.LOW_RSSI)
    assert dropped == [f"{weak_24.scan_id}(2.4GHz)-81", f"{weak_5.scan_id}(5GHz)-78"]


def test_mbo_assoc_disallowed_is_dropped_and_counted():
    metrics = RecordingMetricsSink()
    entry = mk_entry("aa:aa:aa:aa:aa:07", detail=NetworkDetail(mbo_assoc_disallowed_code=1))
    result = run_filter([entry], metrics=metrics)
    assert result.valid == []
    assert result.dropped_ids(FilterReason.MBO_ASSOC_DISALLOWED) == [f"{entry.scan_id}(1)"]
    assert metrics.mbo_assoc_disallowed_count == 1


def test_admin_ssid_allowlist_and_denylist():
    home = mk_entry("aa:aa:aa:aa:aa:08", ssid="home")
    cafe = mk_entry("aa:aa:aa:aa:aa:09", ssid="cafe")
    allow = SsidPolicy(SsidPolicyType.ALLOWLIST, frozenset({"home"}))
    deny = SsidPolicy(SsidPolicyType.DENYLIST, frozenset({"home"}))
    assert run_filter([home, cafe], ssid_policy=allow).valid == [home]
    assert run_filter([home, cafe], ssid_policy=deny).valid == [cafe]


def test_admin_minimum_security_level():
    open_entry = mk_entry("aa:aa:aa:aa:aa:10", ssid="cafe", caps="[ESS]")
    psk_entry = mk_entry("aa:aa:aa:aa:aa:11", ssid="home", caps="[RSN-PSK-CCMP]")
    result = run_filter([open_entry, psk_entry], min_security_level=SecurityLevel.PERSONAL)
    assert result.valid == [psk_entry]
    assert result.dropped_ids(FilterReason.ADMIN_RESTRICTED) == [open_entry.scan_id]


def test_deprecated_security_types():
    wep = mk_entry("aa:aa:aa:aa:aa:12", ssid="old", caps="[WEP]")
    wpa1 = mk_entry("aa:aa:aa:aa:aa:13", ssid="older", caps="[WPA-PSK-TKIP][ESS]")
    wpa2 = mk_entry("aa:aa:aa:aa:aa:14", ssid="home", caps="[WPA2-PSK-CCMP][ESS]")
    wifi_globals = WifiGlobals(wep_deprecated=True, wpa_personal_deprecated=True)
    result = run_filter([wep, wpa1, wpa2], wifi_globals=wifi_globals)
    assert result.valid == [wpa2]
    assert result.dropped_ids(FilterReason.DEPRECATED_SECURITY) == [wep.scan_id, wpa1.scan_id]


def test_deprecated_types_kept_when_not_deprecated():
    wep = mk_entry("aa:aa:aa:aa:aa:12", ssid="old", caps="[WEP]")
    assert run_filter([wep]).valid == [wep]


def test_missing_current_bssid_aborts_pass():
    other = mk_entry("aa:aa:aa:aa:aa:15")
    result = run_filter([other], clients=[mk_connected(score=WIFI_POOR_SCORE)])
    assert result.aborted is True
    assert result.valid == []


def test_missing_current_bssid_continues_when_sufficiency_check_disabled():
    other = mk_entry("aa:aa:aa:aa:aa:15")
    result = run_filter([other], clients=[mk_connected()], sufficiency_check_enabled=False)
    assert result.aborted is False
    assert result.valid == [other]


def test_missing_current_bssid_with_poor_score_continues():
    other = mk_entry("aa:aa:aa:aa:aa:15")
    result = run_filter([other], clients=[mk_connected(score=WIFI_POOR_SCORE - 1)])
    assert result.aborted is False
    assert result.valid == [other]
