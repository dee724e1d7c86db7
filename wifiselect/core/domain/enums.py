"""Domain enums for network selection.

Responsibilities:
  - Define security types, bands, nominator ids and the reason codes
    emitted by the sufficiency ladder and the scan filter.
  - Provide stable audit metadata for sufficiency reasons.

Invariants:
  - Enum values must remain stable; they appear in logs and metrics.
  - SufficiencyReason metadata must be complete and deterministic.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class SecurityType(Enum):
    OPEN = "OPEN"
    WEP = "WEP"
    PSK = "PSK"
    EAP = "EAP"
    SAE = "SAE"
    OWE = "OWE"
    EAP_WPA3_ENTERPRISE = "EAP_WPA3_ENTERPRISE"
    EAP_WPA3_ENTERPRISE_192_BIT = "EAP_WPA3_ENTERPRISE_192_BIT"
    PASSPOINT = "PASSPOINT"


# Ranking used when several offered types match a config; higher wins.
SECURITY_STRENGTH: dict[SecurityType, int] = {
    SecurityType.OPEN: 0,
    SecurityType.WEP: 1,
    SecurityType.OWE: 2,
    SecurityType.PSK: 3,
    SecurityType.SAE: 4,
    SecurityType.EAP: 5,
    SecurityType.PASSPOINT: 6,
    SecurityType.EAP_WPA3_ENTERPRISE: 7,
    SecurityType.EAP_WPA3_ENTERPRISE_192_BIT: 8,
}


class SecurityLevel(IntEnum):
    """Administrative security levels; 0 means no restriction."""

    UNKNOWN = -1
    OPEN = 0
    PERSONAL = 1
    ENTERPRISE_EAP = 2
    ENTERPRISE_192 = 3


SECURITY_LEVEL_BY_TYPE: dict[SecurityType, SecurityLevel] = {
    SecurityType.OPEN: SecurityLevel.OPEN,
    SecurityType.OWE: SecurityLevel.OPEN,
    SecurityType.WEP: SecurityLevel.PERSONAL,
    SecurityType.PSK: SecurityLevel.PERSONAL,
    SecurityType.SAE: SecurityLevel.PERSONAL,
    SecurityType.EAP: SecurityLevel.ENTERPRISE_EAP,
    SecurityType.EAP_WPA3_ENTERPRISE: SecurityLevel.ENTERPRISE_EAP,
    SecurityType.PASSPOINT: SecurityLevel.ENTERPRISE_EAP,
    SecurityType.EAP_WPA3_ENTERPRISE_192_BIT: SecurityLevel.ENTERPRISE_192,
}


class Band(Enum):
    BAND_24_GHZ = "2.4GHz"
    BAND_5_GHZ = "5GHz"
    BAND_6_GHZ = "6GHz"
    BAND_60_GHZ = "60GHz"
    UNKNOWN = "UNKNOWN"


def band_for_frequency(freq_mhz: int) -> Band:
    if 2400 <= freq_mhz < 2500:
        return Band.BAND_24_GHZ
    if 4900 <= freq_mhz < 5925:
        return Band.BAND_5_GHZ
    if 5925 <= freq_mhz <= 7125:
        return Band.BAND_6_GHZ
    if 58320 <= freq_mhz <= 70200:
        return Band.BAND_60_GHZ
    return Band.UNKNOWN


class WifiStandard(IntEnum):
    LEGACY = 1
    N = 4
    AC = 5
    AX = 6
    BE = 8


class NominatorId(IntEnum):
    # Lower id wins when two nominators report the same candidate key.
    SAVED = 0
    SUGGESTION = 1
    SCORED = 4
    CURRENT = 5


class NominatorAttribution(Enum):
    UNKNOWN = "UNKNOWN"
    SAVED = "SAVED"
    SUGGESTION = "SUGGESTION"
    EXTERNAL_SCORED = "EXTERNAL_SCORED"
    SAVED_USER_CONNECT_CHOICE = "SAVED_USER_CONNECT_CHOICE"


class MeteredOverride(Enum):
    NONE = "NONE"
    METERED = "METERED"
    NOT_METERED = "NOT_METERED"


class SsidPolicyType(Enum):
    ALLOWLIST = "ALLOWLIST"
    DENYLIST = "DENYLIST"


class AssociatedSelectionOverride(Enum):
    NONE = "NONE"
    ENABLED = "ENABLED"
    DISABLED = "DISABLED"


class FilterReason(Enum):
    INVALID_SSID = "INVALID_SSID"
    BLOCKLISTED = "BLOCKLISTED"
    LOW_RSSI = "LOW_RSSI"
    MBO_ASSOC_DISALLOWED = "MBO_ASSOC_DISALLOWED"
    ADMIN_RESTRICTED = "ADMIN_RESTRICTED"
    DEPRECATED_SECURITY = "DEPRECATED_SECURITY"


FILTER_REASON_LABELS: dict[FilterReason, str] = {
    FilterReason.INVALID_SSID: "invalid SSID",
    FilterReason.BLOCKLISTED: "blocklist",
    FilterReason.LOW_RSSI: "low signal strength",
    FilterReason.MBO_ASSOC_DISALLOWED: "mbo association disallowed indication",
    FilterReason.ADMIN_RESTRICTED: "admin restrictions",
    FilterReason.DEPRECATED_SECURITY: "deprecated security type",
}


class SufficiencyReason(Enum):
    NOT_ASSOCIATED = "NOT_ASSOCIATED"
    NETWORK_REMOVED = "NETWORK_REMOVED"
    RECENTLY_USER_SELECTED = "RECENTLY_USER_SELECTED"
    ONLINE_SIGN_UP = "ONLINE_SIGN_UP"
    UNUSABLE = "UNUSABLE"
    LOW_SCORE = "LOW_SCORE"
    OEM_RESTRICTED = "OEM_RESTRICTED"
    METERED = "METERED"
    NO_INTERNET = "NO_INTERNET"
    SUFFICIENCY_CHECK_DISABLED = "SUFFICIENCY_CHECK_DISABLED"
    IP_PROVISIONING_TIMED_OUT = "IP_PROVISIONING_TIMED_OUT"
    WEAK_LINK_NO_TRAFFIC = "WEAK_LINK_NO_TRAFFIC"
    SUFFICIENT = "SUFFICIENT"


# Audit metadata keyed by sufficiency reason.
SUFFICIENCY_METADATA: dict[SufficiencyReason, dict[str, object]] = {
    SufficiencyReason.NOT_ASSOCIATED: {
        "sufficient": False,
        "message": "Interface is not associated.",
    },
    SufficiencyReason.NETWORK_REMOVED: {
        "sufficient": False,
        "message": "Current network was removed",
    },
    SufficiencyReason.RECENTLY_USER_SELECTED: {
        "sufficient": True,
        "message": "Current network is recently user-selected",
    },
    SufficiencyReason.ONLINE_SIGN_UP: {
        "sufficient": True,
        "message": "Current connection is OSU",
    },
    SufficiencyReason.UNUSABLE: {
        "sufficient": False,
        "message": "Wifi is unusable according to external scorer.",
    },
    SufficiencyReason.LOW_SCORE: {
        "sufficient": False,
        "message": "Current connected score is below the low score threshold.",
    },
    SufficiencyReason.OEM_RESTRICTED: {
        "sufficient": False,
        "message": "Current network is oem paid/private",
    },
    SufficiencyReason.METERED: {
        "sufficient": False,
        "message": "Current network is metered",
    },
    SufficiencyReason.NO_INTERNET: {
        "sufficient": False,
        "message": "Current network has no internet access and internet is expected.",
    },
    SufficiencyReason.SUFFICIENCY_CHECK_DISABLED: {
        "sufficient": False,
        "message": "Current network assumed as insufficient because sufficiency check is disabled.",
    },
    SufficiencyReason.IP_PROVISIONING_TIMED_OUT: {
        "sufficient": False,
        "message": "Current network has no IPv4 provisioning and therefore insufficient",
    },
    SufficiencyReason.WEAK_LINK_NO_TRAFFIC: {
        "sufficient": False,
        "message": "Current network link quality is not sufficient and has low ongoing traffic",
    },
    SufficiencyReason.SUFFICIENT: {
        "sufficient": True,
        "message": "Current connected network is sufficient.",
    },
}


_missing = [r for r in SufficiencyReason if r not in SUFFICIENCY_METADATA]
if _missing:
    raise RuntimeError(f"Missing SUFFICIENCY_METADATA for: {[m.value for m in _missing]}")

_missing_labels = [r for r in FilterReason if r not in FILTER_REASON_LABELS]
if _missing_labels:
    raise RuntimeError(f"Missing FILTER_REASON_LABELS for: {[m.value for m in _missing_labels]}")
