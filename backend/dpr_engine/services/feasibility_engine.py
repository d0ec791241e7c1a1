"""
feasibility_engine.py — one-shot completion feasibility prediction for a DPR

Pipeline:
  FeatureExtractor -> ProbabilityModel (base) + RiskIdentifier (risks)
  -> adjust_for_risks -> RecommendationGenerator -> CompletionFeasibilityResult

Also produces three quick what-if variants (optimistic / conservative /
high-resource) next to the current plan, and a confidence score reflecting
how far the project sits from well-understood territory.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dpr_engine import config
from dpr_engine.models.document import DPRDocument
from dpr_engine.models.features import ProjectFeatures, clamp, clamp_feature, cost_per_month
from dpr_engine.services.errors import ContentUnavailable, FeasibilityError
from dpr_engine.services.feature_extractor import FeatureExtractor
from dpr_engine.services.perf_monitor import timed
from dpr_engine.services.probability_model import ProbabilityModel
from dpr_engine.services.recommendation_engine import RecommendationGenerator
from dpr_engine.services.risk_engine import RiskFactor, RiskIdentifier, adjust_for_risks

logger = logging.getLogger("dpr-feasibility")


# Quick scenarios: (name, duration x, cost x, resource complexity x)
QUICK_SCENARIOS = (
    ("Optimistic (10% faster timeline)", 0.9, 1.05, 0.9),
    ("Conservative (20% longer timeline)", 1.2, 1.1, 1.1),
    ("High Resource (25% more budget)", 1.0, 1.25, 0.8),
)


@dataclass
class FeasibilityScenario:
    scenario_name: str
    adjusted_timeline: float
    adjusted_resources: float
    adjusted_complexity: float
    predicted_probability: float  # 0-1, base model

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenarioName": self.scenario_name,
            "adjustedTimeline": self.adjusted_timeline,
            "adjustedResources": self.adjusted_resources,
            "adjustedComplexity": self.adjusted_complexity,
            "predictedProbability": self.predicted_probability,
        }


@dataclass
class CompletionFeasibilityResult:
    dpr_id: str
    completion_probability: float  # 0-1, 2 decimals
    risk_factors: List[RiskFactor] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    simulation_data: List[FeasibilityScenario] = field(default_factory=list)
    analysis_timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dprId": self.dpr_id,
            "completionProbability": self.completion_probability,
            "riskFactors": [r.to_dict() for r in self.risk_factors],
            "recommendations": list(self.recommendations),
            "simulationData": [s.to_dict() for s in self.simulation_data],
            "analysisTimestamp": self.analysis_timestamp.isoformat(),
            "confidence": self.confidence,
        }


class CompletionFeasibilityEngine:
    """Predicts on-time, on-budget completion likelihood for a DPR."""

    def __init__(
        self,
        extractor: Optional[FeatureExtractor] = None,
        model: Optional[ProbabilityModel] = None,
        risk_identifier: Optional[RiskIdentifier] = None,
        recommender: Optional[RecommendationGenerator] = None,
    ):
        self.extractor = extractor or FeatureExtractor()
        self.model = model or ProbabilityModel()
        self.risk_identifier = risk_identifier or RiskIdentifier()
        self.recommender = recommender or RecommendationGenerator()

    @timed
    def predict(self, document: DPRDocument) -> CompletionFeasibilityResult:
        """
        Score a DPR.

        ContentUnavailable propagates unchanged so callers can tell "document
        not ready" apart from "scoring failed" (FeasibilityError).
        """
        try:
            features = self.extractor.extract(document)
            base = self.model.base_probability(features)
            risks = self.risk_identifier.identify(features)
            adjusted = adjust_for_risks(base, risks)
            result = CompletionFeasibilityResult(
                dpr_id=document.id,
                completion_probability=round(adjusted, 2),
                risk_factors=risks,
                recommendations=self.recommender.generate(risks, features),
                simulation_data=self.quick_scenarios(features),
                confidence=self.confidence(features),
            )
        except ContentUnavailable:
            raise
        except Exception as e:
            logger.error(f"Feasibility prediction failed for DPR {document.id}: {e}", extra={"dpr_id": document.id})
            raise FeasibilityError(f"Failed to predict completion feasibility: {e}") from e

        logger.info(
            f"DPR {document.id}: completion probability {result.completion_probability:.2f} "
            f"(base {base:.3f}, {len(risks)} risks)",
            extra={"dpr_id": document.id},
        )
        return result

    def quick_scenarios(self, features: ProjectFeatures) -> List[FeasibilityScenario]:
        """Current plan plus the three standard variants, scored by the base model."""
        scenarios = [self._scenario("Current Plan", features)]
        for name, duration_x, cost_x, resource_x in QUICK_SCENARIOS:
            duration = features.estimated_duration_months * duration_x
            cost = features.total_cost * cost_x
            variant = features.with_changes(
                estimated_duration_months=duration,
                total_cost=cost,
                cost_per_month=cost_per_month(cost, duration),
                resource_complexity_score=clamp_feature(
                    "resource_complexity_score", features.resource_complexity_score * resource_x
                ),
            )
            scenarios.append(self._scenario(name, variant))
        return scenarios

    def _scenario(self, name: str, features: ProjectFeatures) -> FeasibilityScenario:
        return FeasibilityScenario(
            scenario_name=name,
            adjusted_timeline=features.estimated_duration_months,
            adjusted_resources=features.total_cost,
            adjusted_complexity=features.technical_complexity_score,
            predicted_probability=self.model.base_probability(features),
        )

    @staticmethod
    def confidence(features: ProjectFeatures) -> float:
        """Confidence in the prediction; lower for extreme or data-poor projects."""
        c = 0.8
        if features.estimated_duration_months > config.VERY_LONG_DURATION_MONTHS:
            c -= 0.1
        if features.technical_complexity_score > 2.5:
            c -= 0.1
        if features.similar_projects_count < 5:
            c -= 0.15
        if features.accessibility_score < 1.5:
            c -= 0.1
        return round(clamp(c, config.CONFIDENCE_FLOOR, config.CONFIDENCE_CEILING), 2)
