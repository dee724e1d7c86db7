from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from wifiselect.app_api.config import load_selector_config
from wifiselect.app_api.factories.build_selector import build_network_selector
from wifiselect.core.domain.config import SelectorConfig
from wifiselect.infra.logging_setup import configure_logging
from wifiselect.infra.memory.metrics import RecordingMetricsSink
from wifiselect.infra.snapshot.json_snapshot import load_snapshot


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one network selection pass over a JSON snapshot")
    parser.add_argument("--snapshot", required=True, help="Snapshot JSON path")
    parser.add_argument("--config", default=None, help="Selector config JSON path")
    parser.add_argument("--scorer", action="append", default=None, help="Scorer identifier (repeatable)")
    parser.add_argument("--screen-on", action="store_true", help="Evaluate with the screen on")
    parser.add_argument("--no-connect-choice", action="store_true", help="Disable user connect choice override")
    parser.add_argument("--log-level", default="WARNING", help="Log level for stderr")
    parser.add_argument("--log-file", default=None, help="Optional log file path")
    parser.add_argument("--verbose", action="store_true", help="Log per-pass details at INFO")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level, Path(args.log_file) if args.log_file else None)

    try:
        snapshot = load_snapshot(Path(args.snapshot))
        params = load_selector_config(Path(args.config)) if args.config else SelectorConfig()
    except ValueError as exc:
        print("SUMMARY status=ERROR")
        print(f"message={exc}")
        return 2

    metrics = RecordingMetricsSink()
    selector = build_network_selector(
        snapshot.config_store,
        params=params,
        wifi_globals=snapshot.wifi_globals,
        radio=snapshot.radio,
        policy_provider=snapshot.policy_provider,
        metrics=metrics,
        external_scores=snapshot.external_scores,
        scorer_identifiers=args.scorer,
        clock=lambda: snapshot.now_ms,
    )
    selector.set_screen_state(args.screen_on)
    selector.enable_verbose_logging(args.verbose)
    if args.no_connect_choice:
        selector.set_user_connect_choice_override_enabled(False)

    candidates = selector.get_candidates_from_scan(
        snapshot.scan_entries,
        snapshot.bssid_blocklist,
        snapshot.client_states,
        snapshot.nomination_policy,
    )
    selected = selector.select_network(candidates)

    filter_result = selector.get_last_filter_result()
    print(f"scan_entries={len(snapshot.scan_entries)}")
    print(f"filtered={len(selector.get_filtered_scan_entries())}")
    print(f"filter_aborted={filter_result.aborted if filter_result is not None else False}")
    print(f"candidates={len(candidates) if candidates is not None else 0}")
    if candidates:
        best_mlo = max(c.predicted_multi_link_throughput_mbps for c in candidates)
        print(f"max_multi_link_throughput_mbps={best_mlo}")
    print(f"experiment_id={metrics.experiment_id}")
    if selected is None:
        print("selected_network_id=NONE")
    else:
        print(f"selected_network_id={selected.network_id}")
        print(f"selected_ssid={selected.ssid}")
        if selected.status.candidate is not None:
            print(f"selected_bssid={selected.status.candidate.bssid}")
    print("SUMMARY status=OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
