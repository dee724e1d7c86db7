"""Security classification of scan entries.

Responsibilities:
  - Classify a scan entry's capability string (e.g. "[RSN-PSK+SAE-CCMP][MFPC]")
    into personal/enterprise/open families and their transition modes.
  - Generate the list of SecurityParams an access point offers.

Invariants:
  - Pure functions of the capability string; no config or policy state.
  - Offered params are ordered legacy type first, upgrade type second.
"""

from __future__ import annotations

from wifiselect.core.domain.enums import (
    SECURITY_LEVEL_BY_TYPE,
    SecurityLevel,
    SecurityType,
)
from wifiselect.core.domain.models import ScanEntry, SecurityParams


def _caps(entry: ScanEntry) -> str:
    return (entry.capabilities or "").upper()


def is_wep(entry: ScanEntry) -> bool:
    return "WEP" in _caps(entry)


def is_psk(entry: ScanEntry) -> bool:
    caps = _caps(entry)
    return "PSK" in caps.replace("WAPI-PSK", "")


def is_sae(entry: ScanEntry) -> bool:
    return "SAE" in _caps(entry)


def is_eap_suite_b_192(entry: ScanEntry) -> bool:
    return "EAP_SUITE_B_192" in _caps(entry)


def is_eap(entry: ScanEntry) -> bool:
    caps = _caps(entry)
    if is_eap_suite_b_192(entry):
        return False
    return "EAP" in caps or "IEEE8021X" in caps


def is_owe_transition(entry: ScanEntry) -> bool:
    return "OWE_TRANSITION" in _caps(entry)


def is_owe(entry: ScanEntry) -> bool:
    return "OWE" in _caps(entry).replace("OWE_TRANSITION", "")


def _is_rsn(entry: ScanEntry) -> bool:
    caps = _caps(entry)
    return "RSN" in caps or "WPA2" in caps


def _is_mfpr(entry: ScanEntry) -> bool:
    return "[MFPR]" in _caps(entry)


def _is_mfpc(entry: ScanEntry) -> bool:
    return "[MFPC]" in _caps(entry)


def is_passpoint(entry: ScanEntry) -> bool:
    return "[HS20]" in _caps(entry)


def is_psk_sae_transition(entry: ScanEntry) -> bool:
    return is_psk(entry) and is_sae(entry)


def is_wpa3_personal_only(entry: ScanEntry) -> bool:
    return is_sae(entry) and not is_psk(entry)


def is_wpa2_personal_only(entry: ScanEntry) -> bool:
    return is_psk(entry) and not is_sae(entry)


def is_wpa_personal_only(entry: ScanEntry) -> bool:
    """WPA1 (TKIP-era) personal network with no RSN element."""
    caps = _caps(entry)
    return "WPA-PSK" in caps and not _is_rsn(entry) and not is_sae(entry)


def is_wpa3_enterprise_only(entry: ScanEntry) -> bool:
    return is_eap(entry) and _is_rsn(entry) and _is_mfpr(entry)


def is_wpa3_enterprise_transition(entry: ScanEntry) -> bool:
    return is_eap(entry) and _is_rsn(entry) and _is_mfpc(entry) and not _is_mfpr(entry)


def is_wpa2_enterprise_only(entry: ScanEntry) -> bool:
    return is_eap(entry) and not is_wpa3_enterprise_only(entry) and not is_wpa3_enterprise_transition(entry)


def is_open(entry: ScanEntry) -> bool:
    return not (
        is_wep(entry)
        or is_psk(entry)
        or is_sae(entry)
        or is_eap(entry)
        or is_eap_suite_b_192(entry)
        or is_owe(entry)
    )


def is_open_only(entry: ScanEntry) -> bool:
    return is_open(entry) and not is_owe_transition(entry)


def is_owe_only(entry: ScanEntry) -> bool:
    return is_owe(entry) and not is_owe_transition(entry)


def generate_security_params(entry: ScanEntry) -> list[SecurityParams]:
    params: list[SecurityParams] = []
    if is_psk(entry):
        params.append(SecurityParams(SecurityType.PSK))
    if is_sae(entry):
        params.append(SecurityParams(SecurityType.SAE, require_pmf=True))

    if is_eap_suite_b_192(entry):
        params.append(SecurityParams(SecurityType.EAP_WPA3_ENTERPRISE_192_BIT, require_pmf=True))
    elif is_eap(entry):
        if is_wpa3_enterprise_only(entry):
            params.append(SecurityParams(SecurityType.EAP_WPA3_ENTERPRISE, require_pmf=True))
        elif is_wpa3_enterprise_transition(entry):
            params.append(SecurityParams(SecurityType.EAP))
            params.append(SecurityParams(SecurityType.EAP_WPA3_ENTERPRISE, require_pmf=True))
        else:
            params.append(SecurityParams(SecurityType.EAP))
        if is_passpoint(entry):
            params.append(SecurityParams(SecurityType.PASSPOINT))

    if is_owe_transition(entry):
        params.append(SecurityParams(SecurityType.OPEN))
        params.append(SecurityParams(SecurityType.OWE, require_pmf=True))
    elif is_owe(entry):
        params.append(SecurityParams(SecurityType.OWE, require_pmf=True))

    if is_wep(entry):
        params.append(SecurityParams(SecurityType.WEP))

    if not params and is_open(entry):
        params.append(SecurityParams(SecurityType.OPEN))
    return params


def security_types(entry: ScanEntry) -> list[SecurityType]:
    return [p.security_type for p in generate_security_params(entry)]


def security_level(security_type: SecurityType) -> SecurityLevel:
    return SECURITY_LEVEL_BY_TYPE.get(security_type, SecurityLevel.UNKNOWN)
