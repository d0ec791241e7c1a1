"""Numeric project feature record shared by every scoring engine."""
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict

from dpr_engine.config import FEATURE_RANGES


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def clamp_feature(name: str, value: float) -> float:
    """Clamp a score into the range declared for it in FEATURE_RANGES."""
    low, high = FEATURE_RANGES[name]
    return clamp(value, low, high)


def cost_per_month(total_cost: float, duration_months: float) -> float:
    if duration_months <= 0:
        return 0.0
    return total_cost / duration_months


@dataclass(frozen=True)
class ProjectFeatures:
    """
    Flat feature vector extracted from a DPR.

    Frozen: derive variants with ``with_changes`` (a clone), never by mutation.
    """
    # Timeline
    estimated_duration_months: float = 12.0
    seasonality_factor: float = 1.0
    weather_risk_months: float = 0.0

    # Resource
    total_cost: float = 0.0
    cost_per_month: float = 0.0
    resource_complexity_score: float = 1.0
    labor_intensity_score: float = 1.0

    # Complexity
    technical_complexity_score: float = 1.0
    environmental_complexity_score: float = 1.0
    regulatory_complexity_score: float = 1.0

    # Location
    accessibility_score: float = 3.0     # higher = better access
    infrastructure_score: float = 1.0
    remoteness_score: float = 1.0        # higher = more remote

    # Historical
    similar_projects_count: int = 0
    region_success_rate: float = 0.0
    category_success_rate: float = 0.0

    project_category: str = "infrastructure"

    def with_changes(self, **changes: Any) -> "ProjectFeatures":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        return {
            "estimatedDurationMonths": d["estimated_duration_months"],
            "seasonalityFactor": d["seasonality_factor"],
            "weatherRiskMonths": d["weather_risk_months"],
            "totalCost": d["total_cost"],
            "costPerMonth": d["cost_per_month"],
            "resourceComplexityScore": d["resource_complexity_score"],
            "laborIntensityScore": d["labor_intensity_score"],
            "technicalComplexityScore": d["technical_complexity_score"],
            "environmentalComplexityScore": d["environmental_complexity_score"],
            "regulatoryComplexityScore": d["regulatory_complexity_score"],
            "accessibilityScore": d["accessibility_score"],
            "infrastructureScore": d["infrastructure_score"],
            "remotenessScore": d["remoteness_score"],
            "similarProjectsCount": d["similar_projects_count"],
            "regionSuccessRate": d["region_success_rate"],
            "categorySuccessRate": d["category_success_rate"],
            "projectCategory": d["project_category"],
        }
