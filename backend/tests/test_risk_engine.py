"""
test_risk_engine.py — Unit tests for RiskIdentifier and the risk adjustment helpers.

Tests cover:
  - Each rule in isolation (timeline, monsoon, accessibility, resource,
    technical / regulatory / mild complexity, financial)
  - Rule independence and output order
  - adjust_for_risks: impact weights, clamping, empty-list identity
  - RiskFactor.mitigated: impact downgrade, probability reduction, floor
  - top_risk_types ranking
"""

import pytest

from dpr_engine.services.risk_engine import (
    RiskFactor,
    adjust_for_risks,
    risk_weight,
    top_risk_types,
)


def _types(risks):
    return [r.type for r in risks]


def _risk(risk_type="TIMELINE", impact="MEDIUM", probability=0.5):
    return RiskFactor(risk_type, impact, probability, "desc", "mitigate")


# ===========================================================================
# Class 1: Individual rules
# ===========================================================================

class TestRules:

    def test_quiet_project_has_no_risks(self, risk_identifier, base_features):
        assert risk_identifier.identify(base_features) == []

    @pytest.mark.parametrize("months, impact", [(30, "MEDIUM"), (36, "MEDIUM"), (40, "HIGH")])
    def test_timeline_risk(self, risk_identifier, base_features, months, impact):
        risks = risk_identifier.identify(base_features.with_changes(estimated_duration_months=months))
        assert _types(risks) == ["TIMELINE"]
        assert risks[0].impact == impact
        assert risks[0].probability == 0.6
        assert f"{months} months" in risks[0].description

    def test_no_timeline_risk_at_24_months(self, risk_identifier, base_features):
        assert risk_identifier.identify(base_features.with_changes(estimated_duration_months=24)) == []

    def test_monsoon_risk(self, risk_identifier, base_features):
        risks = risk_identifier.identify(base_features.with_changes(weather_risk_months=4))
        assert _types(risks) == ["ENVIRONMENTAL"]
        assert risks[0].impact == "MEDIUM"
        assert risks[0].probability == 0.7
        assert risks[0].description.startswith("Monsoon season (4 months)")

    def test_poor_accessibility_risk(self, risk_identifier, base_features):
        risks = risk_identifier.identify(base_features.with_changes(accessibility_score=1.8))
        assert _types(risks) == ["ENVIRONMENTAL"]
        assert "accessibility" in risks[0].description

    def test_monsoon_and_access_both_fire(self, risk_identifier, base_features):
        features = base_features.with_changes(weather_risk_months=4, accessibility_score=1.0)
        assert _types(risk_identifier.identify(features)) == ["ENVIRONMENTAL", "ENVIRONMENTAL"]

    def test_resource_risk(self, risk_identifier, base_features):
        assert risk_identifier.identify(base_features.with_changes(resource_complexity_score=2.0)) == []
        risks = risk_identifier.identify(base_features.with_changes(resource_complexity_score=2.2))
        assert _types(risks) == ["RESOURCE"]
        assert (risks[0].impact, risks[0].probability) == ("MEDIUM", 0.5)

    def test_technical_complexity_risk(self, risk_identifier, base_features):
        risks = risk_identifier.identify(base_features.with_changes(technical_complexity_score=2.5))
        assert _types(risks) == ["COMPLEXITY"]
        assert (risks[0].impact, risks[0].probability) == ("HIGH", 0.6)

    def test_regulatory_complexity_risk(self, risk_identifier, base_features):
        risks = risk_identifier.identify(base_features.with_changes(regulatory_complexity_score=2.2))
        assert _types(risks) == ["COMPLEXITY"]
        assert (risks[0].impact, risks[0].probability) == ("HIGH", 0.8)
        assert "regulatory" in risks[0].description

    def test_mild_complexity_gets_generic_risk(self, risk_identifier, base_features):
        risks = risk_identifier.identify(base_features.with_changes(environmental_complexity_score=1.6))
        assert _types(risks) == ["COMPLEXITY"]
        assert (risks[0].impact, risks[0].probability) == ("MEDIUM", 0.5)

    def test_mild_complexity_not_added_when_specific_risk_exists(self, risk_identifier, base_features):
        features = base_features.with_changes(technical_complexity_score=2.5, environmental_complexity_score=2.4)
        risks = risk_identifier.identify(features)
        assert len(risks) == 1
        assert risks[0].impact == "HIGH"

    def test_complexity_at_one_and_a_half_is_quiet(self, risk_identifier, base_features):
        assert risk_identifier.identify(base_features.with_changes(technical_complexity_score=1.5)) == []

    def test_financial_risk(self, risk_identifier, base_features):
        assert risk_identifier.identify(base_features.with_changes(total_cost=50_000_000)) == []
        risks = risk_identifier.identify(base_features.with_changes(total_cost=50_000_001))
        assert _types(risks) == ["FINANCIAL"]
        assert (risks[0].impact, risks[0].probability) == ("MEDIUM", 0.4)

    def test_financial_basis_override(self, risk_identifier, base_features):
        expensive = base_features.with_changes(total_cost=80_000_000)
        assert risk_identifier.identify(expensive, financial_basis=30_000_000) == []
        cheap = base_features.with_changes(total_cost=10_000_000)
        assert _types(risk_identifier.identify(cheap, financial_basis=60_000_000)) == ["FINANCIAL"]


# ===========================================================================
# Class 2: Documents end-to-end
# ===========================================================================

class TestDocumentRisks:

    def test_reference_document(self, extractor, risk_identifier, monsoon_road_document):
        risks = risk_identifier.identify(extractor.extract(monsoon_road_document))
        assert _types(risks) == ["ENVIRONMENTAL", "COMPLEXITY", "FINANCIAL"]
        assert risks[0].description.startswith("Monsoon season")
        assert risks[1].impact == "MEDIUM"

    def test_remote_hill_document_rule_order(self, extractor, risk_identifier, remote_hill_document):
        risks = risk_identifier.identify(extractor.extract(remote_hill_document))
        assert _types(risks) == [
            "TIMELINE",
            "ENVIRONMENTAL", "ENVIRONMENTAL",
            "RESOURCE",
            "COMPLEXITY", "COMPLEXITY",
            "FINANCIAL",
        ]
        assert risks[0].impact == "HIGH"

    def test_identification_is_deterministic(self, extractor, risk_identifier, remote_hill_document):
        features = extractor.extract(remote_hill_document)
        assert risk_identifier.identify(features) == risk_identifier.identify(features)


# ===========================================================================
# Class 3: Risk adjustment
# ===========================================================================

class TestAdjustForRisks:

    def test_empty_list_is_identity(self):
        assert adjust_for_risks(0.63, []) == 0.63
        assert adjust_for_risks(0.63, None) == 0.63

    def test_impact_weights(self):
        """
        HIGH 0.6 → 0.09, MEDIUM 0.5 → 0.04, LOW 1.0 → 0.03.
        0.80 − 0.16 = 0.64
        """
        risks = [_risk(impact="HIGH", probability=0.6), _risk(impact="MEDIUM"), _risk(impact="LOW", probability=1.0)]
        assert risk_weight(risks) == pytest.approx(0.16)
        assert adjust_for_risks(0.80, risks) == pytest.approx(0.64)

    def test_clamps_to_floor(self):
        risks = [_risk(impact="HIGH", probability=1.0)] * 5
        assert adjust_for_risks(0.40, risks) == pytest.approx(0.10)

    def test_never_increases_probability(self):
        for base in (0.10, 0.35, 0.60, 0.95):
            assert adjust_for_risks(base, [_risk(impact="LOW", probability=0.05)]) <= base

    def test_none_entries_ignored(self):
        assert adjust_for_risks(0.70, [None, _risk(impact="MEDIUM")]) == pytest.approx(0.66)

    def test_unknown_impact_weighs_nothing(self):
        assert risk_weight([_risk(impact="SEVERE")]) == 0.0


# ===========================================================================
# Class 4: Mitigation and ranking
# ===========================================================================

class TestMitigationAndRanking:

    @pytest.mark.parametrize("impact, expected", [("HIGH", "MEDIUM"), ("MEDIUM", "LOW"), ("LOW", "LOW")])
    def test_mitigation_downgrades_impact(self, impact, expected):
        assert _risk(impact=impact).mitigated().impact == expected

    def test_mitigation_reduces_probability(self):
        mitigated = _risk(probability=0.8).mitigated()
        assert mitigated.probability == pytest.approx(0.56)
        assert mitigated.type == "TIMELINE"
        assert mitigated.mitigation == "mitigate"

    def test_mitigated_probability_floor(self):
        assert _risk(probability=0.06).mitigated().probability == 0.05

    def test_mitigation_returns_copy(self):
        original = _risk(impact="HIGH", probability=0.6)
        original.mitigated()
        assert (original.impact, original.probability) == ("HIGH", 0.6)

    def test_mitigation_always_lowers_weight(self):
        for impact in ("HIGH", "MEDIUM", "LOW"):
            risk = _risk(impact=impact, probability=0.5)
            assert risk.mitigated().weight() < risk.weight()

    def test_top_risk_types_for_hill_project(self, extractor, risk_identifier, remote_hill_document):
        """
        COMPLEXITY 0.09 + 0.12 = 0.21, ENVIRONMENTAL 2 × 0.056 = 0.112,
        TIMELINE 0.09, RESOURCE 0.04, FINANCIAL 0.032.
        """
        risks = risk_identifier.identify(extractor.extract(remote_hill_document))
        assert top_risk_types(risks) == ["COMPLEXITY", "ENVIRONMENTAL"]
        assert top_risk_types(risks, limit=3) == ["COMPLEXITY", "ENVIRONMENTAL", "TIMELINE"]

    def test_top_risk_types_ties_keep_first_seen(self):
        risks = [_risk("RESOURCE"), _risk("FINANCIAL"), _risk("TIMELINE")]
        assert top_risk_types(risks) == ["RESOURCE", "FINANCIAL"]

    def test_top_risk_types_empty(self):
        assert top_risk_types([]) == []
