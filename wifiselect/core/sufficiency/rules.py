from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from wifiselect.core.domain.config import SelectorConfig
from wifiselect.core.domain.enums import SUFFICIENCY_METADATA, SufficiencyReason
from wifiselect.core.domain.models import ConnectionInfo, NetworkConfig, is_metered


@dataclass(frozen=True)
class SufficiencyContext:
    info: ConnectionInfo
    config: Optional[NetworkConfig]
    now_ms: int
    last_selected_network_id: int
    last_selected_timestamp_ms: Optional[int]
    sufficiency_check_enabled: bool
    using_external_scorer: bool
    params: SelectorConfig


@dataclass(frozen=True)
class SufficiencyDecision:
    sufficient: bool
    reason: SufficiencyReason


Rule = Callable[[SufficiencyContext], Optional[SufficiencyDecision]]


def decision_for(reason: SufficiencyReason) -> SufficiencyDecision:
    return SufficiencyDecision(
        sufficient=bool(SUFFICIENCY_METADATA[reason]["sufficient"]),
        reason=reason,
    )


def has_sufficient_link_quality(info: ConnectionInfo, params: SelectorConfig) -> bool:
    return info.rssi >= params.sufficient_rssi(info.frequency)


def has_active_stream(info: ConnectionInfo, params: SelectorConfig) -> bool:
    threshold = params.active_traffic_packets_per_second
    return info.tx_packets_per_second > threshold or info.rx_packets_per_second > threshold


def rule_not_associated(ctx: SufficiencyContext) -> Optional[SufficiencyDecision]:
    if not ctx.info.associated:
        return decision_for(SufficiencyReason.NOT_ASSOCIATED)
    if ctx.config is None:
        return decision_for(SufficiencyReason.NETWORK_REMOVED)
    return None


def rule_recent_user_selection(ctx: SufficiencyContext) -> Optional[SufficiencyDecision]:
    # Hold off while connectivity may still be prompting about a no-internet network.
    if ctx.config is None or ctx.last_selected_timestamp_ms is None:
        return None
    if ctx.last_selected_network_id != ctx.config.network_id:
        return None
    elapsed = ctx.now_ms - ctx.last_selected_timestamp_ms
    if elapsed <= ctx.params.sufficient_duration_after_user_selection_ms:
        return decision_for(SufficiencyReason.RECENTLY_USER_SELECTED)
    return None


def rule_online_sign_up(ctx: SufficiencyContext) -> Optional[SufficiencyDecision]:
    if ctx.config is not None and ctx.config.osu:
        return decision_for(SufficiencyReason.ONLINE_SIGN_UP)
    return None


def rule_unusable(ctx: SufficiencyContext) -> Optional[SufficiencyDecision]:
    if not ctx.info.usable:
        return decision_for(SufficiencyReason.UNUSABLE)
    return None


def rule_low_score(ctx: SufficiencyContext) -> Optional[SufficiencyDecision]:
    if ctx.using_external_scorer:
        return None
    if ctx.info.score >= ctx.params.low_connected_score_threshold:
        return None
    # Secondary interfaces are not scored; only the primary may trigger on score.
    if not ctx.params.primary_interface_distinction or ctx.info.primary:
        return decision_for(SufficiencyReason.LOW_SCORE)
    return None


def rule_oem_restricted(ctx: SufficiencyContext) -> Optional[SufficiencyDecision]:
    if ctx.config is not None and (ctx.config.oem_paid or ctx.config.oem_private):
        return decision_for(SufficiencyReason.OEM_RESTRICTED)
    return None


def rule_metered(ctx: SufficiencyContext) -> Optional[SufficiencyDecision]:
    if is_metered(ctx.config, ctx.info):
        return decision_for(SufficiencyReason.METERED)
    return None


def rule_no_internet(ctx: SufficiencyContext) -> Optional[SufficiencyDecision]:
    if ctx.config is None or ctx.config.lacks_expected_internet:
        return decision_for(SufficiencyReason.NO_INTERNET)
    return None


def rule_sufficiency_check_disabled(ctx: SufficiencyContext) -> Optional[SufficiencyDecision]:
    if not ctx.sufficiency_check_enabled:
        return decision_for(SufficiencyReason.SUFFICIENCY_CHECK_DISABLED)
    return None


def rule_ip_provisioning_timed_out(ctx: SufficiencyContext) -> Optional[SufficiencyDecision]:
    if ctx.config is not None and ctx.config.ip_provisioning_timed_out:
        return decision_for(SufficiencyReason.IP_PROVISIONING_TIMED_OUT)
    return None


def rule_weak_link_no_traffic(ctx: SufficiencyContext) -> Optional[SufficiencyDecision]:
    if not has_sufficient_link_quality(ctx.info, ctx.params) and not has_active_stream(
        ctx.info, ctx.params
    ):
        return decision_for(SufficiencyReason.WEAK_LINK_NO_TRAFFIC)
    return None


# Ordered precedence; the first rule returning a decision wins.
SUFFICIENCY_LADDER: tuple[Rule, ...] = (
    rule_not_associated,
    rule_recent_user_selection,
    rule_online_sign_up,
    rule_unusable,
    rule_low_score,
    rule_oem_restricted,
    rule_metered,
    rule_no_internet,
    rule_sufficiency_check_disabled,
    rule_ip_provisioning_timed_out,
    rule_weak_link_no_traffic,
)


def first_match(rules: Iterable[Rule], ctx: SufficiencyContext) -> Optional[SufficiencyDecision]:
    for rule in rules:
        decision = rule(ctx)
        if decision is not None:
            return decision
    return None
