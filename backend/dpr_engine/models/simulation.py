"""
What-if simulation records.

SimulationParameters is the caller-facing input (validated, camelCase
aliases accepted). SimulationScenario / SimulationSession are engine-side
records; probabilities on them are percentages (10-95).
"""
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dpr_engine.config import RISK_TYPES
from dpr_engine.models.features import ProjectFeatures
from dpr_engine.services.probability_model import ProbabilityBreakdown
from dpr_engine.services.risk_engine import RiskFactor


class SimulationParameters(BaseModel):
    """Sparse what-if adjustments; unset fields leave the baseline untouched."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True, allow_inf_nan=False)

    timeline_multiplier: Optional[float] = Field(None, gt=0, alias="timelineMultiplier")
    resource_multiplier: Optional[float] = Field(None, gt=0, alias="resourceMultiplier")
    complexity_multiplier: Optional[float] = Field(None, gt=0, alias="complexityMultiplier")
    accessibility_improvement: Optional[float] = Field(None, ge=0, alias="accessibilityImprovement")
    additional_risk_mitigation: Optional[Tuple[str, ...]] = Field(None, alias="additionalRiskMitigation")

    @field_validator("additional_risk_mitigation", mode="before")
    @classmethod
    def _known_risk_types(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            v = [v]
        types = []
        for item in v:
            risk_type = str(item).strip().upper()
            if risk_type not in RISK_TYPES:
                raise ValueError(f"unknown risk type '{item}' (expected one of {', '.join(RISK_TYPES)})")
            if risk_type not in types:
                types.append(risk_type)
        return tuple(types)

    @property
    def mitigated_types(self) -> Tuple[str, ...]:
        return self.additional_risk_mitigation or ()

    def to_dict(self) -> Dict[str, Any]:
        """Only the supplied parameters, camelCase keys."""
        d = self.model_dump(by_alias=True, exclude_none=True)
        if "additionalRiskMitigation" in d:
            d["additionalRiskMitigation"] = list(d["additionalRiskMitigation"])
        return d


@dataclass
class SimulationScenario:
    scenario_name: str
    parameters: Dict[str, Any]
    adjusted_features: ProjectFeatures
    adjusted_risk_factors: List[RiskFactor]
    completion_probability: float  # percent, 10-95
    probability_change: float = 0.0
    risk_score: float = 0.0  # percent points removed by risk adjustment
    risk_change: float = 0.0
    cost_impact: float = 0.0
    time_impact: float = 0.0
    feasibility_rating: str = "POOR"  # POOR | FAIR | GOOD | EXCELLENT
    risk_level: str = "LOW"  # LOW | MEDIUM | HIGH | CRITICAL
    probability_breakdown: Optional[ProbabilityBreakdown] = None
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenarioName": self.scenario_name,
            "parameters": dict(self.parameters),
            "adjustedFeatures": self.adjusted_features.to_dict(),
            "adjustedRiskFactors": [r.to_dict() for r in self.adjusted_risk_factors],
            "completionProbability": self.completion_probability,
            "probabilityChange": self.probability_change,
            "riskScore": self.risk_score,
            "riskChange": self.risk_change,
            "costImpact": self.cost_impact,
            "timeImpact": self.time_impact,
            "feasibilityRating": self.feasibility_rating,
            "riskLevel": self.risk_level,
            "probabilityBreakdown": (
                self.probability_breakdown.to_dict() if self.probability_breakdown else None
            ),
            "recommendations": list(self.recommendations),
        }


@dataclass
class SimulationSession:
    """
    Exploration context for one DPR.

    ``scenario_history`` is append-only and starts with the baseline;
    ``current_scenario`` is always its last element. Only SessionStore and
    ScenarioSimulator mutate a session, under ``lock``.
    """
    session_id: str
    dpr_id: str
    baseline_features: ProjectFeatures
    baseline_risk_factors: Tuple[RiskFactor, ...]
    current_scenario: SimulationScenario
    scenario_history: List[SimulationScenario]
    created_at: datetime
    last_updated: datetime
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def baseline_scenario(self) -> SimulationScenario:
        return self.scenario_history[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "dprId": self.dpr_id,
            "baselineFeatures": self.baseline_features.to_dict(),
            "baselineRiskFactors": [r.to_dict() for r in self.baseline_risk_factors],
            "currentScenario": self.current_scenario.to_dict(),
            "scenarioHistory": [s.to_dict() for s in self.scenario_history],
            "createdAt": self.created_at.isoformat(),
            "lastUpdated": self.last_updated.isoformat(),
        }


@dataclass
class ComprehensiveAnalysis:
    dpr_id: str
    baseline_scenario: SimulationScenario
    simulated_scenarios: List[SimulationScenario]
    best_scenario: SimulationScenario
    worst_scenario: SimulationScenario
    total_scenarios_analyzed: int
    analysis_timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dprId": self.dpr_id,
            "baselineScenario": self.baseline_scenario.to_dict(),
            "simulatedScenarios": [s.to_dict() for s in self.simulated_scenarios],
            "bestScenario": self.best_scenario.to_dict(),
            "worstScenario": self.worst_scenario.to_dict(),
            "totalScenariosAnalyzed": self.total_scenarios_analyzed,
            "analysisTimestamp": self.analysis_timestamp.isoformat(),
        }
