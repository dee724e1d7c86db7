"""Tests for the JSON snapshot loader and the selection CLI."""

from __future__ import annotations

import json

import pytest

from wifiselect.cli import run_network_selection as mod
from wifiselect.core.domain.enums import Band, SecurityType, WifiStandard
from wifiselect.infra.snapshot.json_snapshot import load_snapshot, snapshot_from_dict


def make_snapshot() -> dict:
    return {
        "now_ms": 5_000_000,
        "networks": [
            {
                "network_id": 0,
                "ssid": "home",
                "security_params": ["PSK", {"type": "SAE", "added_by_auto_upgrade": True}],
                "pre_shared_key": '"secret"',
            },
            {"network_id": 1, "ssid": "cafe", "security_params": ["PSK"], "metered_hint": True},
        ],
        "scan": [
            {
                "bssid": "aa:aa:aa:aa:aa:01",
                "ssid": "home",
                "frequency": 2437,
                "level": -50,
                "capabilities": "[RSN-PSK-CCMP][ESS]",
                "channel_width": 20,
                "detail": {"wifi_standard": "AX", "max_spatial_streams": 2, "mld_address": "02:00:00:00:00:aa"},
            },
            {
                "bssid": "aa:aa:aa:aa:aa:02",
                "ssid": "home",
                "frequency": 5180,
                "level": -55,
                "capabilities": "[RSN-PSK-CCMP][ESS]",
                "channel_width": 80,
                "detail": {"wifi_standard": 6, "max_spatial_streams": 2, "mld_address": "02:00:00:00:00:AA"},
            },
            {
                "bssid": "bb:bb:bb:bb:bb:01",
                "ssid": "cafe",
                "frequency": 2412,
                "level": -78,
                "capabilities": "[RSN-PSK-CCMP][ESS]",
            },
        ],
        "clients": [{"iface_name": "wlan0", "connected": False}],
        "radio": {"max_mlo_str_link_count": 2, "band_combinations": [["2.4GHz", "5GHz"]]},
        "last_selected": {"network_id": 0, "timestamp_ms": 4_000_000},
    }


def write(tmp_path, payload) -> str:
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_snapshot_from_dict_builds_adapters():
    snapshot = snapshot_from_dict(make_snapshot())
    home = snapshot.config_store.get_configured_network_with_password(0)
    assert home.pre_shared_key == '"secret"'
    assert home.get_security_params(SecurityType.SAE).added_by_auto_upgrade is True
    assert snapshot.config_store.get_configured_network(1).metered_hint is True
    assert snapshot.config_store.get_last_selected_network() == 0
    assert snapshot.scan_entries[0].detail.wifi_standard == WifiStandard.AX
    assert snapshot.scan_entries[1].detail.wifi_standard == WifiStandard.AX
    assert snapshot.client_states[0].disconnected is True
    assert snapshot.radio.get_supported_band_combinations("wlan0") == [(Band.BAND_24_GHZ, Band.BAND_5_GHZ)]
    assert snapshot.now_ms == 5_000_000


@pytest.mark.parametrize(
    "mutate",
    [
        lambda p: p["scan"][0].pop("bssid"),
        lambda p: p["scan"][0].update(level="strong"),
        lambda p: p["networks"][0].update(security_params=["WPA9"]),
        lambda p: p["clients"][0].update(connected="yes"),
        lambda p: p["radio"].update(band_combinations=[["7GHz"]]),
        lambda p: p["networks"][1].update(network_id=True),
    ],
)
def test_malformed_snapshot_raises(mutate):
    payload = make_snapshot()
    mutate(payload)
    with pytest.raises(ValueError):
        snapshot_from_dict(payload)


def test_load_snapshot_errors(tmp_path):
    with pytest.raises(ValueError):
        load_snapshot(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_snapshot(bad)


def test_cli_selects_network(tmp_path, capsys):
    code = mod.main(["--snapshot", write(tmp_path, make_snapshot())])
    out = capsys.readouterr().out

    assert code == 0
    assert "scan_entries=3" in out
    assert "filtered=3" in out
    assert "candidates=3" in out
    assert "selected_network_id=0" in out
    assert "selected_ssid=home" in out
    mlo_line = next(line for line in out.splitlines() if line.startswith("max_multi_link_throughput_mbps="))
    assert int(mlo_line.split("=", 1)[1]) > 0
    assert out.strip().endswith("SUMMARY status=OK")


def test_cli_with_scorer_subset_and_config(tmp_path, capsys):
    config_path = tmp_path / "selector.json"
    config_path.write_text(json.dumps({"rssi_24ghz_entry": -75}), encoding="utf-8")
    code = mod.main(
        [
            "--snapshot",
            write(tmp_path, make_snapshot()),
            "--config",
            str(config_path),
            "--scorer",
            "CompatibilityScorer",
        ]
    )
    out = capsys.readouterr().out

    assert code == 0
    assert "filtered=2" in out
    assert "experiment_id=0" in out
    assert "SUMMARY status=OK" in out


def test_cli_reports_invalid_snapshot(tmp_path, capsys):
    payload = make_snapshot()
    payload["scan"][0].pop("frequency")
    code = mod.main(["--snapshot", write(tmp_path, payload)])
    out = capsys.readouterr().out

    assert code == 2
    assert "SUMMARY status=ERROR" in out
    assert "scan[0].frequency" in out
