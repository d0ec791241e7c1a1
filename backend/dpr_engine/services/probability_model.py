"""Completion probability model — fixed, hand-tuned scoring function."""
from dataclasses import dataclass, replace
from typing import Any, Dict

from dpr_engine import config
from dpr_engine.models.features import ProjectFeatures, clamp


def clamp_probability(value: float) -> float:
    return clamp(value, config.PROBABILITY_FLOOR, config.PROBABILITY_CEILING)


@dataclass(frozen=True)
class ProbabilityBreakdown:
    """
    Signed contribution of each model term (0-1 scale).

    Negative values lowered the estimate. ``base_score`` plus the four
    feature adjustments gives ``model_score``; the historical blend moves it
    to the unclamped blend and ``final_score`` is that value clamped.
    ``risk_adjustment`` stays 0 until risks are applied on top.
    """
    base_score: float
    timeline_adjustment: float
    resource_adjustment: float
    complexity_adjustment: float
    location_adjustment: float
    historical_adjustment: float
    final_score: float
    risk_adjustment: float = 0.0

    @property
    def model_score(self) -> float:
        return (
            self.base_score
            + self.timeline_adjustment
            + self.resource_adjustment
            + self.complexity_adjustment
            + self.location_adjustment
        )

    def with_risk_adjustment(self, adjusted_probability: float) -> "ProbabilityBreakdown":
        return replace(self, risk_adjustment=adjusted_probability - self.final_score)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseScore": round(self.base_score, 4),
            "timelineAdjustment": round(self.timeline_adjustment, 4),
            "resourceAdjustment": round(self.resource_adjustment, 4),
            "complexityAdjustment": round(self.complexity_adjustment, 4),
            "locationAdjustment": round(self.location_adjustment, 4),
            "historicalAdjustment": round(self.historical_adjustment, 4),
            "riskAdjustment": round(self.risk_adjustment, 4),
            "finalScore": round(self.final_score + self.risk_adjustment, 4),
        }


class ProbabilityModel:
    """
    Maps ProjectFeatures to a completion probability in [0.10, 0.95].

    Pure and deterministic: the simulator re-evaluates it many times per
    session and identical features must yield bit-identical results.
    """

    def base_probability(self, features: ProjectFeatures) -> float:
        return self.explain(features).final_score

    def explain(self, features: ProjectFeatures) -> ProbabilityBreakdown:
        """Score ``features`` and report what each group of terms contributed."""
        p = config.BASE_PROBABILITY

        # Timeline
        mark = p
        if features.estimated_duration_months > config.LONG_DURATION_MONTHS:
            p -= config.DURATION_PENALTY
        if features.estimated_duration_months > config.VERY_LONG_DURATION_MONTHS:
            p -= config.DURATION_PENALTY
        p -= (features.weather_risk_months / 12) * config.WEATHER_PENALTY_PER_YEAR
        if features.seasonality_factor > 1:
            p *= config.SEASONALITY_MULTIPLIER
        timeline = p - mark

        # Resources
        mark = p
        if features.resource_complexity_score > config.RESOURCE_COMPLEXITY_THRESHOLD:
            p -= config.RESOURCE_COMPLEXITY_PENALTY
        if features.labor_intensity_score > config.LABOR_INTENSITY_THRESHOLD:
            p -= config.LABOR_INTENSITY_PENALTY
        resource = p - mark

        # Complexity
        mark = p
        for name, weight in config.COMPLEXITY_WEIGHTS.items():
            p -= (getattr(features, name) - 1) * weight
        complexity = p - mark

        # Location
        mark = p
        p -= (3 - features.accessibility_score) * config.ACCESSIBILITY_WEIGHT
        p -= (3 - features.infrastructure_score) * config.INFRASTRUCTURE_WEIGHT
        p -= (features.remoteness_score - 1) * config.REMOTENESS_WEIGHT
        location = p - mark

        # Historical blend
        blended = (
            p * config.BLEND_MODEL_WEIGHT
            + features.region_success_rate * config.BLEND_REGION_WEIGHT
            + features.category_success_rate * config.BLEND_CATEGORY_WEIGHT
        )
        return ProbabilityBreakdown(
            base_score=config.BASE_PROBABILITY,
            timeline_adjustment=timeline,
            resource_adjustment=resource,
            complexity_adjustment=complexity,
            location_adjustment=location,
            historical_adjustment=blended - p,
            final_score=clamp_probability(blended),
        )
