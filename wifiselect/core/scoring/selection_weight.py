from __future__ import annotations

from typing import Optional

from wifiselect.core.domain.config import SelectorConfig

_MS_PER_MINUTE = 60_000


def last_selection_weight(
    network_id: int,
    metered: bool,
    last_selected_network_id: int,
    last_selected_timestamp_ms: Optional[int],
    now_ms: int,
    params: SelectorConfig,
    enabled: bool = True,
) -> float:
    """Linear decay from 1.0 at user selection to 0.0 at the end of the window."""
    if not enabled or network_id != last_selected_network_id or last_selected_timestamp_ms is None:
        return 0.0
    minutes = params.last_metered_selection_minutes if metered else params.last_unmetered_selection_minutes
    window_ms = minutes * _MS_PER_MINUTE
    elapsed = now_ms - last_selected_timestamp_ms
    if elapsed >= window_ms:
        return 0.0
    weight = 1.0 - elapsed / window_ms
    return min(1.0, max(0.0, weight))
