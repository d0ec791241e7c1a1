"""Recommendation generator — risk mitigations first, then feature-driven advice."""
from typing import Iterable, List, Optional

from dpr_engine import config
from dpr_engine.models.features import ProjectFeatures
from dpr_engine.services.risk_engine import RiskFactor


class RecommendationGenerator:

    def __init__(self, limit: int = config.MAX_RECOMMENDATIONS):
        self.limit = limit

    def generate(self, risks: Optional[Iterable[RiskFactor]], features: ProjectFeatures) -> List[str]:
        """Deduplicated action list in priority order, capped at ``limit``."""
        candidates: List[str] = []
        for risk in risks or []:
            mitigation = getattr(risk, "mitigation", "")
            if isinstance(mitigation, str) and mitigation.strip():
                candidates.append(mitigation.strip())

        if features.estimated_duration_months > config.PHASING_DURATION_MONTHS:
            candidates.append("Consider breaking the project into smaller, manageable phases")
        if features.resource_complexity_score > config.RESOURCE_ASSESSMENT_THRESHOLD:
            candidates.append("Conduct detailed resource availability assessment before project start")
        if features.accessibility_score < config.ACCESS_INVESTMENT_THRESHOLD:
            candidates.append("Invest in improving site accessibility to reduce logistics costs")
        if features.region_success_rate < config.REGION_SUCCESS_THRESHOLD:
            candidates.append("Study successful similar projects in the region for best practices")

        # dict preserves first-seen order
        return list(dict.fromkeys(candidates))[: self.limit]
