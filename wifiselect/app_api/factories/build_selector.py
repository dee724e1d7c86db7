"""Construct a fully wired NetworkSelector.

Responsibilities:
  - Assemble nominators, scorers and default collaborators around the
    supplied ports.
Must not:
  - Implement selection logic; composition only.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from wifiselect.core.candidates.nominators import (
    NetworkSuggestionNominator,
    SavedNetworkNominator,
    ScoredNetworkNominator,
)
from wifiselect.core.candidates.registry import NominatorRegistry
from wifiselect.core.domain.config import SelectorConfig
from wifiselect.core.domain.models import WifiGlobals
from wifiselect.core.engine.selector import NetworkSelector
from wifiselect.core.ports.config_store_port import ConfigStore
from wifiselect.core.ports.metrics_port import MetricsSink
from wifiselect.core.ports.nomination_port import ExternalScoreProvider, PasspointNominateHelper
from wifiselect.core.ports.policy_port import DevicePolicyProvider
from wifiselect.core.ports.radio_port import RadioProvider, ThroughputPredictor
from wifiselect.core.scoring.factory import CandidateScorerFactory, default_scorer_factory
from wifiselect.core.throughput.predictor import DefaultThroughputPredictor
from wifiselect.infra.memory.metrics import RecordingMetricsSink
from wifiselect.infra.memory.providers import (
    NoPasspointHelper,
    StaticExternalScores,
    StaticPolicyProvider,
    StaticRadioProvider,
)


def build_nominator_registry(
    config_store: ConfigStore, external_scores: Optional[ExternalScoreProvider] = None
) -> NominatorRegistry:
    registry = NominatorRegistry()
    registry.register(SavedNetworkNominator(config_store))
    registry.register(NetworkSuggestionNominator(config_store))
    if external_scores is not None:
        registry.register(ScoredNetworkNominator(config_store, external_scores))
    return registry


def build_network_selector(
    config_store: ConfigStore,
    params: Optional[SelectorConfig] = None,
    wifi_globals: Optional[WifiGlobals] = None,
    radio: Optional[RadioProvider] = None,
    policy_provider: Optional[DevicePolicyProvider] = None,
    metrics: Optional[MetricsSink] = None,
    throughput_predictor: Optional[ThroughputPredictor] = None,
    passpoint_helper: Optional[PasspointNominateHelper] = None,
    external_scores: Optional[ExternalScoreProvider] = None,
    scorer_identifiers: Optional[Sequence[str]] = None,
    scorer_factory: CandidateScorerFactory = default_scorer_factory,
    **kwargs: Any,
) -> NetworkSelector:
    """
    Composition root: wire default nominators (saved, suggestion, scored)
    and every registered scorer unless a subset is named.
    """
    params = params if params is not None else SelectorConfig()
    params.validate()
    if scorer_identifiers is None:
        scorers = scorer_factory.create_all(params)
    else:
        scorers = [scorer_factory.create(identifier, params) for identifier in scorer_identifiers]

    return NetworkSelector(
        config_store=config_store,
        radio=radio if radio is not None else StaticRadioProvider(),
        policy_provider=policy_provider if policy_provider is not None else StaticPolicyProvider(),
        metrics=metrics if metrics is not None else RecordingMetricsSink(),
        throughput_predictor=(
            throughput_predictor if throughput_predictor is not None else DefaultThroughputPredictor()
        ),
        passpoint_helper=passpoint_helper if passpoint_helper is not None else NoPasspointHelper(),
        nominators=build_nominator_registry(
            config_store,
            external_scores if external_scores is not None else StaticExternalScores(),
        ),
        scorers=scorers,
        params=params,
        wifi_globals=wifi_globals,
        clock=kwargs.pop("clock", None),
        scan_range=kwargs.pop("scan_range", None),
        utilization_provider=kwargs.pop("utilization_provider", None),
    )
