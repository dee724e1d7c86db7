from __future__ import annotations

import logging
from typing import Optional

from wifiselect.core.domain.models import ConnectionInfo, NetworkConfig, ScanEntry, is_metered
from wifiselect.core.domain.enums import MeteredOverride

logger = logging.getLogger(__name__)


class MeteredNetworkTracker:
    """Sticky metered status: once observed metered, a network stays metered
    until the user sets an explicit override or the selector is reset."""

    def __init__(self) -> None:
        self._known_metered: set[int] = set()

    def is_ever_metered(
        self,
        config: NetworkConfig,
        info: Optional[ConnectionInfo],
        entry: Optional[ScanEntry],
    ) -> bool:
        metered = is_metered(config, info)
        if entry is not None and entry.detail is not None and entry.detail.chargeable_public:
            metered = True
        if config.metered_override != MeteredOverride.NONE:
            self._known_metered.discard(config.network_id)
            return config.metered_override == MeteredOverride.METERED
        if metered and config.network_id not in self._known_metered:
            logger.debug("Remember network %s as metered", config.network_id)
            self._known_metered.add(config.network_id)
        return config.network_id in self._known_metered

    def known_metered_network_ids(self) -> set[int]:
        return set(self._known_metered)

    def clear(self) -> None:
        self._known_metered.clear()
