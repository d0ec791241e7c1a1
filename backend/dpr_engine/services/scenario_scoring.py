"""Scores a feature/risk set into a SimulationScenario (percent scale)."""
from typing import Any, Dict, List, Optional

from dpr_engine import config
from dpr_engine.models.features import ProjectFeatures
from dpr_engine.models.simulation import SimulationScenario
from dpr_engine.services.probability_model import ProbabilityModel
from dpr_engine.services.risk_engine import RiskFactor, adjust_for_risks, risk_weight

BASELINE_SCENARIO_NAME = "Baseline (Current Plan)"


def to_percent(probability: float) -> float:
    return round(probability * 100, 2)


def feasibility_rating(percent: float) -> str:
    for cutoff, rating in config.FEASIBILITY_RATINGS:
        if percent >= cutoff:
            return rating
    return "POOR"


def risk_level(risk_score: float) -> str:
    """LOW / MEDIUM / HIGH / CRITICAL for a risk score in percent points."""
    for cutoff, level in config.RISK_LEVELS:
        if risk_score >= cutoff:
            return level
    return "LOW"


def score_scenario(
    model: ProbabilityModel,
    name: str,
    parameters: Dict[str, Any],
    features: ProjectFeatures,
    risks: List[RiskFactor],
    baseline: Optional[SimulationScenario] = None,
    cost_impact: float = 0.0,
    recommendations: Optional[List[str]] = None,
) -> SimulationScenario:
    """
    Probability = adjust_for_risks(base_probability(features), risks). The
    model breakdown, with the risk adjustment filled in, rides along on the
    scenario.

    Deltas are taken against ``baseline``; with no baseline the scenario is
    the baseline itself and every delta is zero.
    """
    breakdown = model.explain(features)
    probability = adjust_for_risks(breakdown.final_score, risks)
    percent = to_percent(probability)
    risk_score = to_percent(risk_weight(risks))

    if baseline is None:
        probability_change = risk_change = time_impact = 0.0
        cost_impact = 0.0
    else:
        probability_change = round(percent - baseline.completion_probability, 2)
        risk_change = round(risk_score - baseline.risk_score, 2)
        time_impact = round(
            features.estimated_duration_months - baseline.adjusted_features.estimated_duration_months, 2
        )

    return SimulationScenario(
        scenario_name=name,
        parameters=dict(parameters),
        adjusted_features=features,
        adjusted_risk_factors=list(risks),
        completion_probability=percent,
        probability_change=probability_change,
        risk_score=risk_score,
        risk_change=risk_change,
        cost_impact=round(cost_impact, 2),
        time_impact=time_impact,
        feasibility_rating=feasibility_rating(percent),
        risk_level=risk_level(risk_score),
        probability_breakdown=breakdown.with_risk_adjustment(probability),
        recommendations=list(recommendations or []),
    )
