"""
simulator_engine.py — What-if scenario simulation over a session baseline

Covers:
  - Parameter transforms (timeline, resources, complexity, accessibility,
    targeted risk mitigation) applied to a clone of the baseline features
  - Risk re-identification and probability recomputation on adjusted features
  - Deltas vs the session baseline (probability, risk, cost, time)
  - Auto-naming from the deviating parameters
  - Comprehensive analysis: a fixed battery of standard scenarios, ranked

Probabilities here are percentages (10-95); the underlying model works in
[0.10, 0.95].
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from dpr_engine import config
from dpr_engine.models.document import DPRDocument
from dpr_engine.models.features import ProjectFeatures, clamp_feature, cost_per_month
from dpr_engine.models.simulation import (
    ComprehensiveAnalysis,
    SimulationParameters,
    SimulationScenario,
    SimulationSession,
)
from dpr_engine.services.errors import SessionNotFound
from dpr_engine.services.perf_monitor import timed
from dpr_engine.services.risk_engine import RiskFactor, top_risk_types
from dpr_engine.services.scenario_scoring import score_scenario
from dpr_engine.services.session_store import SessionStore

logger = logging.getLogger("dpr-simulator")

ParametersInput = Union[SimulationParameters, Mapping[str, Any], None]


def _as_parameters(parameters: ParametersInput) -> SimulationParameters:
    if isinstance(parameters, SimulationParameters):
        return parameters
    return SimulationParameters.model_validate(dict(parameters or {}))


def _standard_battery(top_types: List[str]) -> List[Tuple[str, Dict[str, Any]]]:
    mitigation = list(top_types) or list(config.DEFAULT_MITIGATION_TYPES)
    return [
        ("Optimistic Timeline", {"timelineMultiplier": 0.85, "resourceMultiplier": 1.1}),
        ("Conservative Timeline", {"timelineMultiplier": 1.3, "resourceMultiplier": 1.2}),
        ("High Resource Investment", {"resourceMultiplier": 1.5, "complexityMultiplier": 0.8}),
        ("Risk Mitigation Focus", {
            "resourceMultiplier": 1.2,
            "timelineMultiplier": 1.1,
            "additionalRiskMitigation": mitigation,
        }),
        ("Infrastructure Improvement", {
            "accessibilityImprovement": 1.5,
            "resourceMultiplier": 1.3,
            "timelineMultiplier": 1.1,
        }),
        ("Fast Track", {
            "timelineMultiplier": 0.7,
            "resourceMultiplier": 1.8,
            "complexityMultiplier": 1.2,
        }),
    ]


class ScenarioSimulator:
    """Runs what-if scenarios against sessions held by a SessionStore."""

    def __init__(self, store: Optional[SessionStore] = None):
        self.store = store or SessionStore()
        self.model = self.store.model
        self.risk_identifier = self.store.risk_identifier

    # -----------------------------------------------------------------------
    # Interactive simulation
    # -----------------------------------------------------------------------

    @timed
    def run_simulation(
        self,
        session_id: str,
        parameters: ParametersInput,
        name: Optional[str] = None,
    ) -> SimulationScenario:
        """
        Apply ``parameters`` to the session baseline and append the result.

        Calls on the same session are serialised on the session lock so the
        history order matches call order. Raises SessionNotFound for unknown
        or closed sessions before looking at ``parameters``; invalid parameters
        then raise pydantic ValidationError.
        """
        session = self.store.require(session_id)
        params = _as_parameters(parameters)

        with session.lock:
            # Closed while waiting for the lock
            if not self.store.is_open(session_id):
                raise SessionNotFound(session_id)

            scenario = self._simulate(session, params, name)
            self.store.record_scenario(session, scenario)

        logger.info(
            f"Scenario '{scenario.scenario_name}' on session {session_id}: "
            f"{scenario.completion_probability:.2f}% ({scenario.probability_change:+.2f}), "
            f"cost {scenario.cost_impact:+,.0f}, time {scenario.time_impact:+g} months",
            extra={"session_id": session_id, "scenario": scenario.scenario_name},
        )
        return scenario

    def _simulate(
        self,
        session: SimulationSession,
        params: SimulationParameters,
        name: Optional[str],
    ) -> SimulationScenario:
        baseline_features = session.baseline_features
        adjusted = self.apply_parameters(baseline_features, params)

        # Added budget counts as committed funding: FINANCIAL exposure is
        # assessed on the lower of baseline and adjusted cost.
        risks = self.risk_identifier.identify(
            adjusted,
            financial_basis=min(baseline_features.total_cost, adjusted.total_cost),
        )
        risks = self.apply_mitigation(risks, params.mitigated_types)

        scenario = score_scenario(
            self.model,
            name or self.scenario_name(params),
            params.to_dict(),
            adjusted,
            risks,
            baseline=session.baseline_scenario,
            cost_impact=self.cost_impact(baseline_features, adjusted, params),
        )
        scenario.recommendations = self.scenario_recommendations(params, scenario.completion_probability)
        return scenario

    # -----------------------------------------------------------------------
    # Transforms
    # -----------------------------------------------------------------------

    @staticmethod
    def apply_parameters(base: ProjectFeatures, params: SimulationParameters) -> ProjectFeatures:
        """Clone ``base`` with every supplied transform applied; ``base`` is untouched."""
        changes: Dict[str, Any] = {}
        duration = base.estimated_duration_months
        cost = base.total_cost

        if params.timeline_multiplier is not None:
            duration = duration * params.timeline_multiplier
            changes["estimated_duration_months"] = duration

        if params.resource_multiplier is not None:
            cost = round(cost * params.resource_multiplier, 2)
            changes["total_cost"] = cost
            # More budget eases resource complexity, less budget tightens it
            changes["resource_complexity_score"] = clamp_feature(
                "resource_complexity_score",
                base.resource_complexity_score / params.resource_multiplier,
            )

        if params.complexity_multiplier is not None:
            changes["technical_complexity_score"] = clamp_feature(
                "technical_complexity_score",
                base.technical_complexity_score * params.complexity_multiplier,
            )

        if params.accessibility_improvement is not None:
            changes["accessibility_score"] = clamp_feature(
                "accessibility_score",
                base.accessibility_score + params.accessibility_improvement,
            )

        if changes:
            changes["cost_per_month"] = cost_per_month(cost, duration)
        return base.with_changes(**changes)

    @staticmethod
    def apply_mitigation(risks: List[RiskFactor], mitigated_types: Tuple[str, ...]) -> List[RiskFactor]:
        if not mitigated_types:
            return list(risks)
        return [r.mitigated() if r.type in mitigated_types else r for r in risks]

    @staticmethod
    def cost_impact(base: ProjectFeatures, adjusted: ProjectFeatures, params: SimulationParameters) -> float:
        impact = adjusted.total_cost - base.total_cost
        if params.accessibility_improvement:
            impact += params.accessibility_improvement * config.ACCESSIBILITY_COST_PER_POINT
        impact += len(params.mitigated_types) * config.MITIGATION_COST_PER_RISK_TYPE
        return impact

    # -----------------------------------------------------------------------
    # Naming & advice
    # -----------------------------------------------------------------------

    @staticmethod
    def scenario_name(params: SimulationParameters) -> str:
        parts: List[str] = []
        timeline = params.timeline_multiplier
        if timeline is not None:
            if timeline <= config.FAST_TRACK_MULTIPLIER:
                parts.append("Fast Track")
            elif timeline < 1:
                parts.append("Fast")
            elif timeline > 1:
                parts.append("Extended")
        if params.resource_multiplier is not None and params.resource_multiplier > 1:
            parts.append("High-Resource")
        if params.complexity_multiplier is not None and params.complexity_multiplier < 1:
            parts.append("Simplified")
        if params.accessibility_improvement:
            parts.append("Infrastructure-Enhanced")
        if params.mitigated_types:
            parts.append("Risk-Mitigated")
        return " ".join(parts) + " Scenario" if parts else "Custom Scenario"

    @staticmethod
    def scenario_recommendations(params: SimulationParameters, percent: float) -> List[str]:
        recs: List[str] = []
        timeline = params.timeline_multiplier
        if timeline is not None and timeline < 1:
            recs.append("Fast-track timeline requires careful resource planning and risk monitoring")
        if timeline is not None and timeline > 1.2:
            recs.append("Extended timeline allows for better risk mitigation and quality control")
        if params.resource_multiplier is not None and params.resource_multiplier > 1.3:
            recs.append("Higher resource allocation should focus on critical path activities")
        if params.accessibility_improvement:
            recs.append("Infrastructure improvements will have long-term benefits beyond this project")
        if params.mitigated_types:
            recs.append("Risk mitigation investments should be prioritized by impact and probability")
        if percent > 80:
            recs.append("This scenario shows high success probability - consider implementation")
        elif percent < 60:
            recs.append("This scenario has elevated risks - additional mitigation may be needed")
        return recs[: config.MAX_SCENARIO_RECOMMENDATIONS]

    # -----------------------------------------------------------------------
    # Comprehensive analysis
    # -----------------------------------------------------------------------

    @timed(slow_ms=2000)
    def run_comprehensive_analysis(self, document: DPRDocument) -> ComprehensiveAnalysis:
        """
        Run the standard scenario battery on an ephemeral session and rank.

        Best / worst are picked by completion probability over the baseline
        plus every simulated scenario; ties go to the earliest in that order.
        """
        session = self.store.create_session(document)
        try:
            battery = _standard_battery(top_risk_types(session.baseline_risk_factors, limit=2))
            simulated = [
                self.run_simulation(session.session_id, params, name)
                for name, params in battery
            ]
        finally:
            self.store.close(session.session_id)

        baseline = session.baseline_scenario
        ranked = [baseline] + simulated
        best = worst = ranked[0]
        for scenario in ranked[1:]:
            if scenario.completion_probability > best.completion_probability:
                best = scenario
            if scenario.completion_probability < worst.completion_probability:
                worst = scenario

        logger.info(
            f"Comprehensive analysis for DPR {document.id}: {len(ranked)} scenarios, "
            f"best '{best.scenario_name}' {best.completion_probability:.2f}%, "
            f"worst '{worst.scenario_name}' {worst.completion_probability:.2f}%",
            extra={"dpr_id": document.id},
        )
        return ComprehensiveAnalysis(
            dpr_id=document.id,
            baseline_scenario=baseline,
            simulated_scenarios=simulated,
            best_scenario=best,
            worst_scenario=worst,
            total_scenarios_analyzed=len(ranked),
            analysis_timestamp=datetime.now(timezone.utc),
        )
