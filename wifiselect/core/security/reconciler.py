"""Security params reconciliation for a (config, scan entry) pair.

Responsibilities:
  - Drop auto-upgraded security types when the legacy type gives better
    connectivity (legacy-only APs of the same SSID in range).
  - Drop SAE for PSK+SAE configs keyed with a raw 64-hex-digit PSK.
  - Pick the most secure offered type the config has enabled and relax
    PMF for transition-mode access points.

Inputs/Outputs:
  - Inputs: NetworkConfig, ScanEntry, global toggles, in-range facts.
  - Outputs: resolved SecurityParams copy or None.

Invariants:
  - Only params added by auto-upgrade are ever removed from the offer.
  - Never mutates the config passed in.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import Optional

from wifiselect.core.domain.enums import SECURITY_STRENGTH, SecurityType
from wifiselect.core.domain.models import NetworkConfig, ScanEntry, SecurityParams, WifiGlobals
from wifiselect.core.ports.config_store_port import ConfigStore
from wifiselect.core.ports.policy_port import ScanRangeProvider
from . import scan_security

logger = logging.getLogger(__name__)

_HEX_PSK = re.compile(r"[0-9A-Fa-f]{64}")


def best_matching_security_params(
    config: NetworkConfig, offered: list[SecurityParams]
) -> Optional[SecurityParams]:
    enabled = {p.security_type: p for p in config.security_params if p.enabled}
    best: Optional[SecurityType] = None
    for params in offered:
        if params.security_type not in enabled:
            continue
        if best is None or SECURITY_STRENGTH[params.security_type] > SECURITY_STRENGTH[best]:
            best = params.security_type
    if best is None:
        return None
    return dataclasses.replace(enabled[best])


def match_security_params(config: NetworkConfig, entry: ScanEntry) -> Optional[SecurityParams]:
    return best_matching_security_params(config, scan_security.generate_security_params(entry))


def is_raw_hex_psk(pre_shared_key: Optional[str]) -> bool:
    if not pre_shared_key or pre_shared_key.startswith('"'):
        return False
    return _HEX_PSK.fullmatch(pre_shared_key) is not None


class SecurityReconciler:
    def __init__(
        self,
        config_store: ConfigStore,
        wifi_globals: WifiGlobals,
        scan_range: ScanRangeProvider,
    ) -> None:
        self._config_store = config_store
        self._globals = wifi_globals
        self._scan_range = scan_range

    def remove_auto_upgrade_params_if_necessary(
        self,
        config: NetworkConfig,
        offered: list[SecurityParams],
        base_type: SecurityType,
        upgrade_type: SecurityType,
        legacy_network_in_range: bool,
        upgrade_only_in_range: bool,
        auto_upgrade_enabled: bool,
    ) -> list[SecurityParams]:
        logger.debug(
            "remove_auto_upgrade_params_if_necessary: ssid=%s base=%s upgrade=%s "
            "legacy_in_range=%s upgrade_only_in_range=%s auto_upgrade=%s",
            config.ssid,
            base_type.value,
            upgrade_type.value,
            legacy_network_in_range,
            upgrade_only_in_range,
            auto_upgrade_enabled,
        )
        upgrade_params = config.get_security_params(upgrade_type)
        if upgrade_params is None or not upgrade_params.added_by_auto_upgrade:
            return offered

        if upgrade_params.enabled and auto_upgrade_enabled:
            if not legacy_network_in_range:
                return offered
            base_params = config.get_security_params(base_type)
            if base_params is None or not base_params.enabled:
                return offered
            if upgrade_only_in_range:
                return offered

        logger.debug("Remove upgradable security type %s for the network.", upgrade_type.value)
        return [p for p in offered if not p.is_security_type(upgrade_type)]

    def remove_params_if_necessary(
        self, config: NetworkConfig, offered: list[SecurityParams]
    ) -> list[SecurityParams]:
        ssid = config.ssid
        # With offload both types go down to the supplicant.
        if not self._globals.wpa3_sae_upgrade_offload_enabled:
            offered = self.remove_auto_upgrade_params_if_necessary(
                config,
                offered,
                SecurityType.PSK,
                SecurityType.SAE,
                self._scan_range.is_wpa2_personal_only_network_in_range(ssid),
                self._scan_range.is_wpa3_personal_only_network_in_range(ssid),
                self._globals.wpa3_sae_upgrade_enabled,
            )
        offered = self.remove_auto_upgrade_params_if_necessary(
            config,
            offered,
            SecurityType.OPEN,
            SecurityType.OWE,
            self._scan_range.is_open_only_network_in_range(ssid),
            self._scan_range.is_owe_only_network_in_range(ssid),
            self._globals.owe_upgrade_enabled,
        )
        offered = self.remove_auto_upgrade_params_if_necessary(
            config,
            offered,
            SecurityType.EAP,
            SecurityType.EAP_WPA3_ENTERPRISE,
            self._scan_range.is_wpa2_enterprise_only_network_in_range(ssid),
            self._scan_range.is_wpa3_enterprise_only_network_in_range(ssid),
            True,
        )

        # SAE treats every password as a string; a 64-hex PSK is a derived key only WPA2 accepts.
        with_password = self._config_store.get_configured_network_with_password(config.network_id)
        if with_password is None:
            with_password = config
        if (
            with_password.is_security_type(SecurityType.PSK)
            and with_password.is_security_type(SecurityType.SAE)
            and is_raw_hex_psk(with_password.pre_shared_key)
        ):
            logger.debug("Remove SAE type for %s with 64-octet Hex PSK.", with_password.ssid)
            offered = [p for p in offered if not p.is_security_type(SecurityType.SAE)]
        return offered

    def resolve(self, config: Optional[NetworkConfig], entry: Optional[ScanEntry]) -> Optional[SecurityParams]:
        if config is None or entry is None:
            return None
        offered = scan_security.generate_security_params(entry)
        if not offered:
            return None
        offered = self.remove_params_if_necessary(config, offered)
        params = best_matching_security_params(config, offered)
        if params is None:
            return None
        # Transition mode: MFP capable, not required.
        if params.is_security_type(SecurityType.SAE) and scan_security.is_psk_sae_transition(entry):
            params.require_pmf = False
        elif params.is_security_type(
            SecurityType.EAP_WPA3_ENTERPRISE
        ) and scan_security.is_wpa3_enterprise_transition(entry):
            params.require_pmf = False
        return params
