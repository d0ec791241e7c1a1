"""
test_recommendation_engine.py — Unit tests for RecommendationGenerator.

Tests cover:
  - Risk mitigations listed first, in risk order
  - Feature-driven advice (phasing, resource assessment, access, regional study)
  - De-duplication and the five-item cap
"""

from dpr_engine.services.recommendation_engine import RecommendationGenerator
from dpr_engine.services.risk_engine import RiskFactor

_PHASING = "Consider breaking the project into smaller, manageable phases"
_RESOURCE = "Conduct detailed resource availability assessment before project start"
_ACCESS = "Invest in improving site accessibility to reduce logistics costs"
_REGION = "Study successful similar projects in the region for best practices"


def _risk(mitigation, risk_type="TIMELINE"):
    return RiskFactor(risk_type, "MEDIUM", 0.5, "desc", mitigation)


class TestRecommendations:

    def test_no_risks_no_advice(self, base_features):
        assert RecommendationGenerator().generate([], base_features) == []

    def test_mitigations_first_then_feature_advice(self, base_features):
        features = base_features.with_changes(estimated_duration_months=30)
        recs = RecommendationGenerator().generate([_risk("Phase the work")], features)
        assert recs == ["Phase the work", _PHASING]

    def test_feature_advice_order(self, base_features):
        features = base_features.with_changes(
            estimated_duration_months=24,
            resource_complexity_score=1.6,
            accessibility_score=2.0,
            region_success_rate=0.6,
        )
        assert RecommendationGenerator().generate([], features) == [_PHASING, _RESOURCE, _ACCESS, _REGION]

    def test_thresholds_are_exclusive(self, base_features):
        features = base_features.with_changes(
            estimated_duration_months=18,
            resource_complexity_score=1.5,
            accessibility_score=2.5,
            region_success_rate=0.7,
        )
        assert RecommendationGenerator().generate([], features) == []

    def test_duplicates_removed(self, base_features):
        risks = [_risk("Improve access roads"), _risk("Improve access roads", "ENVIRONMENTAL"), _risk("Hire early")]
        assert RecommendationGenerator().generate(risks, base_features) == ["Improve access roads", "Hire early"]

    def test_capped_at_five(self, base_features):
        risks = [_risk(f"Action {i}") for i in range(8)]
        recs = RecommendationGenerator().generate(risks, base_features)
        assert recs == [f"Action {i}" for i in range(5)]

    def test_custom_limit(self, base_features):
        risks = [_risk(f"Action {i}") for i in range(4)]
        assert len(RecommendationGenerator(limit=2).generate(risks, base_features)) == 2

    def test_blank_and_missing_mitigations_skipped(self, base_features):
        risks = [_risk("  "), None, _risk("Keep this")]
        assert RecommendationGenerator().generate(risks, base_features) == ["Keep this"]

    def test_reference_document(self, extractor, risk_identifier, monsoon_road_document):
        """18 months is not over the phasing threshold; only the three mitigations remain."""
        features = extractor.extract(monsoon_road_document)
        risks = risk_identifier.identify(features)
        recs = RecommendationGenerator().generate(risks, features)
        assert recs == [r.mitigation for r in risks]
        assert len(recs) == 3

    def test_hill_project_capped(self, extractor, risk_identifier, remote_hill_document):
        features = extractor.extract(remote_hill_document)
        risks = risk_identifier.identify(features)
        recs = RecommendationGenerator().generate(risks, features)
        assert len(recs) == 5
        assert recs[0] == risks[0].mitigation
        assert len(set(recs)) == 5
