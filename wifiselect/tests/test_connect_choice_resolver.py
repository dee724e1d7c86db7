from __future__ import annotations

from wifiselect.core.domain.enums import NominatorAttribution, SecurityType
from wifiselect.core.domain.models import NetworkConfig, ScanEntry, SecurityParams
from wifiselect.core.scoring.resolver import (
    is_rssi_close_to_or_above_expected,
    override_with_user_connect_choice,
)
from wifiselect.infra.memory.config_store import InMemoryConfigStore
from wifiselect.infra.memory.metrics import RecordingMetricsSink

MARGIN = 5


def key_of(ssid: str) -> str:
    return f'"{ssid}"PSK'


def mk_network(network_id: int, ssid: str, level=-55, choice=None, choice_rssi=0, **overrides) -> NetworkConfig:
    config = NetworkConfig(network_id=network_id, ssid=ssid, security_params=[SecurityParams(SecurityType.PSK)], **overrides)
    if level is not None:
        config.status.candidate = ScanEntry(
            bssid=f"aa:bb:cc:dd:ee:{network_id:02x}", ssid=ssid, frequency=5180, level=level
        )
    config.status.connect_choice = choice
    config.status.connect_choice_rssi = choice_rssi
    return config


def resolve(store: InMemoryConfigStore, network_id: int, metrics=None) -> NetworkConfig:
    return override_with_user_connect_choice(store.get_configured_network(network_id), store, MARGIN, metrics)


def test_rssi_margin():
    assert is_rssi_close_to_or_above_expected(-65, -60, MARGIN)
    assert not is_rssi_close_to_or_above_expected(-66, -60, MARGIN)
    assert is_rssi_close_to_or_above_expected(-90, 0, MARGIN)


def test_no_connect_choice_keeps_original():
    store = InMemoryConfigStore([mk_network(0, "a")])
    assert resolve(store, 0).network_id == 0


def test_chain_stops_at_last_acceptable_hop():
    metrics = RecordingMetricsSink()
    store = InMemoryConfigStore(
        [
            mk_network(0, "a", choice=key_of("b"), choice_rssi=-60),
            mk_network(1, "b", level=-58, choice=key_of("c"), choice_rssi=-60),
            mk_network(2, "c", level=-80),
        ]
    )
    chosen = resolve(store, 0, metrics)
    assert chosen.network_id == 1
    assert metrics.nominators[1] == NominatorAttribution.SAVED_USER_CONNECT_CHOICE


def test_hop_below_margin_is_rejected():
    store = InMemoryConfigStore(
        [
            mk_network(0, "a", choice=key_of("b"), choice_rssi=-60),
            mk_network(1, "b", level=-70),
        ]
    )
    assert resolve(store, 0).network_id == 0


def test_three_hop_chain_terminates_at_first_network():
    # c at -62 is close enough to a's -60 but not to b's recorded -55.
    metrics = RecordingMetricsSink()
    store = InMemoryConfigStore(
        [
            mk_network(0, "a", choice=key_of("b"), choice_rssi=-60),
            mk_network(1, "b", level=-70, choice=key_of("c"), choice_rssi=-55),
            mk_network(2, "c", level=-62),
        ]
    )
    chosen = resolve(store, 0, metrics)
    assert chosen.network_id == 0
    assert metrics.nominators == {}


def test_three_hop_chain_reaches_last_network_past_weak_middle_hop():
    store = InMemoryConfigStore(
        [
            mk_network(0, "a", choice=key_of("b"), choice_rssi=-60),
            mk_network(1, "b", level=-70, choice=key_of("c"), choice_rssi=-55),
            mk_network(2, "c", level=-58),
        ]
    )
    assert resolve(store, 0).network_id == 2


def test_unrecorded_rssi_accepts_any_level():
    store = InMemoryConfigStore(
        [
            mk_network(0, "a", choice=key_of("b"), choice_rssi=0),
            mk_network(1, "b", level=-90),
        ]
    )
    assert resolve(store, 0).network_id == 1


def test_walk_continues_past_rejected_hops():
    store = InMemoryConfigStore(
        [
            mk_network(0, "a", choice=key_of("b")),
            mk_network(1, "b", level=None, choice=key_of("c")),
            mk_network(2, "c"),
        ]
    )
    assert resolve(store, 0).network_id == 2


def test_disabled_or_no_internet_hop_is_rejected():
    disabled = mk_network(1, "b")
    disabled.status.enabled = False
    store = InMemoryConfigStore([mk_network(0, "a", choice=key_of("b")), disabled])
    assert resolve(store, 0).network_id == 0

    store = InMemoryConfigStore(
        [mk_network(0, "a", choice=key_of("b")), mk_network(1, "b", no_internet_access=True)]
    )
    assert resolve(store, 0).network_id == 0


def test_missing_profile_stops_walk():
    store = InMemoryConfigStore([mk_network(0, "a", choice=key_of("gone"))])
    assert resolve(store, 0).network_id == 0


def test_loop_restores_legacy_connect_choice_on_original():
    metrics = RecordingMetricsSink()
    store = InMemoryConfigStore(
        [
            mk_network(0, "a", choice=key_of("b")),
            mk_network(1, "b", level=-50, choice=key_of("a")),
        ]
    )
    chosen = resolve(store, 0, metrics)
    assert chosen.network_id == 0
    assert metrics.nominators == {}
    assert store.get_configured_network(0).status.connect_choice is None
    b = store.get_configured_network(1)
    assert b.status.connect_choice == key_of("a")
    assert b.status.connect_choice_rssi == -50
