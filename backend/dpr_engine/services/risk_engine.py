"""Risk identification engine — threshold rules over ProjectFeatures."""
import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional

from dpr_engine import config
from dpr_engine.models.features import ProjectFeatures
from dpr_engine.services.probability_model import clamp_probability

logger = logging.getLogger("dpr-risk")


@dataclass(frozen=True)
class RiskFactor:
    type: str  # TIMELINE | RESOURCE | COMPLEXITY | ENVIRONMENTAL | FINANCIAL
    impact: str  # HIGH | MEDIUM | LOW
    probability: float  # (0, 1]
    description: str
    mitigation: str

    def weight(self) -> float:
        """Probability points this risk removes from a completion estimate."""
        return self.probability * config.IMPACT_WEIGHTS.get(self.impact, 0.0)

    def mitigated(self) -> "RiskFactor":
        """Copy with reduced likelihood and impact downgraded one level."""
        level = config.IMPACT_LEVELS.index(self.impact) if self.impact in config.IMPACT_LEVELS else 0
        return replace(
            self,
            impact=config.IMPACT_LEVELS[max(level - 1, 0)],
            probability=max(
                config.MITIGATED_PROBABILITY_FLOOR,
                self.probability * config.MITIGATION_PROBABILITY_FACTOR,
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "impact": self.impact,
            "probability": self.probability,
            "description": self.description,
            "mitigation": self.mitigation,
        }


def _valid_risks(risks: Optional[Iterable[Any]]) -> List[RiskFactor]:
    """Drop None / foreign entries so aggregate math never crashes on them."""
    return [r for r in (risks or []) if isinstance(r, RiskFactor)]


def risk_weight(risks: Optional[Iterable[RiskFactor]]) -> float:
    """Total probability reduction carried by a list of risks."""
    return sum(r.weight() for r in _valid_risks(risks))


def adjust_for_risks(base_probability: float, risks: Optional[Iterable[RiskFactor]]) -> float:
    """
    Subtract ``probability x weight(impact)`` for every risk and reclamp.

    HIGH weighs 0.15, MEDIUM 0.08, LOW 0.03. Identity for an empty list.
    """
    valid = _valid_risks(risks)
    if not valid:
        return base_probability
    adjusted = base_probability
    for risk in valid:
        adjusted -= risk.weight()
    return clamp_probability(adjusted)


def top_risk_types(risks: Optional[Iterable[RiskFactor]], limit: int = 2) -> List[str]:
    """Risk types ordered by summed weight, heaviest first (ties: first seen)."""
    totals: Dict[str, float] = defaultdict(float)
    order: List[str] = []
    for risk in _valid_risks(risks):
        if risk.type not in totals:
            order.append(risk.type)
        totals[risk.type] += risk.weight()
    ranked = sorted(order, key=lambda t: -totals[t])
    return ranked[:limit]


class RiskIdentifier:
    """Derives RiskFactors from features. Rules are independent, not exclusive."""

    def identify(
        self,
        features: ProjectFeatures,
        financial_basis: Optional[float] = None,
    ) -> List[RiskFactor]:
        """
        Run every rule and return the risk list.

        ``financial_basis`` overrides the cost the FINANCIAL rule is assessed
        on; defaults to ``features.total_cost``.
        """
        risks: List[RiskFactor] = []
        risks.extend(self._check_timeline(features))
        risks.extend(self._check_environment(features))
        risks.extend(self._check_resources(features))
        risks.extend(self._check_complexity(features))
        risks.extend(self._check_financial(
            features.total_cost if financial_basis is None else financial_basis
        ))

        logger.debug(f"Risk identification: {len(risks)} risks ({', '.join(r.type for r in risks) or 'none'})")
        return risks

    # ─── Timeline ─────────────────────────────────────────────────────────

    def _check_timeline(self, f: ProjectFeatures) -> List[RiskFactor]:
        if f.estimated_duration_months <= config.LONG_DURATION_MONTHS:
            return []
        return [RiskFactor(
            type="TIMELINE",
            impact="HIGH" if f.estimated_duration_months > config.VERY_LONG_DURATION_MONTHS else "MEDIUM",
            probability=0.6,
            description=f"Extended project duration ({f.estimated_duration_months:g} months) increases risk of delays",
            mitigation="Break project into phases, implement milestone-based monitoring",
        )]

    # ─── Environmental / site ─────────────────────────────────────────────

    def _check_environment(self, f: ProjectFeatures) -> List[RiskFactor]:
        risks = []
        if f.weather_risk_months > 0:
            risks.append(RiskFactor(
                type="ENVIRONMENTAL",
                impact="MEDIUM",
                probability=0.7,
                description=f"Monsoon season ({f.weather_risk_months:g} months) may cause construction delays",
                mitigation="Plan construction activities around monsoon season, prepare weather contingencies",
            ))
        if f.accessibility_score < config.ACCESSIBILITY_RISK_THRESHOLD:
            risks.append(RiskFactor(
                type="ENVIRONMENTAL",
                impact="MEDIUM",
                probability=0.7,
                description="Poor site accessibility may increase costs and delays",
                mitigation="Improve access roads, plan for higher transportation costs",
            ))
        return risks

    # ─── Resources ────────────────────────────────────────────────────────

    def _check_resources(self, f: ProjectFeatures) -> List[RiskFactor]:
        if f.resource_complexity_score <= config.RESOURCE_COMPLEXITY_THRESHOLD:
            return []
        return [RiskFactor(
            type="RESOURCE",
            impact="MEDIUM",
            probability=0.5,
            description="Complex resource requirements may cause procurement delays",
            mitigation="Early procurement planning, identify alternative suppliers",
        )]

    # ─── Complexity ───────────────────────────────────────────────────────

    def _check_complexity(self, f: ProjectFeatures) -> List[RiskFactor]:
        risks = []
        if f.technical_complexity_score > config.COMPLEXITY_RISK_THRESHOLD:
            risks.append(RiskFactor(
                type="COMPLEXITY",
                impact="HIGH",
                probability=0.6,
                description="High technical complexity increases implementation risk",
                mitigation="Engage technical experts, conduct detailed feasibility studies",
            ))
        if f.regulatory_complexity_score > config.COMPLEXITY_RISK_THRESHOLD:
            risks.append(RiskFactor(
                type="COMPLEXITY",
                impact="HIGH",
                probability=0.8,
                description="Multiple regulatory approvals required",
                mitigation="Start approval processes early, engage regulatory consultants",
            ))

        # Mild complexity must still be represented by at least one risk
        mild = max(
            f.technical_complexity_score,
            f.environmental_complexity_score,
            f.regulatory_complexity_score,
        ) > config.MILD_COMPLEXITY_THRESHOLD
        if mild and not risks:
            risks.append(RiskFactor(
                type="COMPLEXITY",
                impact="MEDIUM",
                probability=0.5,
                description="Project complexity requires careful management and monitoring",
                mitigation="Implement robust project management practices and regular monitoring",
            ))
        return risks

    # ─── Financial ────────────────────────────────────────────────────────

    def _check_financial(self, cost: float) -> List[RiskFactor]:
        if cost <= config.HIGH_COST_THRESHOLD:
            return []
        return [RiskFactor(
            type="FINANCIAL",
            impact="MEDIUM",
            probability=0.4,
            description="High project cost increases funding and cash flow risks",
            mitigation="Secure funding commitments, implement phased funding approach",
        )]
