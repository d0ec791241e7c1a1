"""
conftest.py — Shared pytest fixtures for the DPR feasibility engine test suite.

No database or external service fixtures are defined here. All tests in this
suite are pure unit tests that exercise the scoring and simulation engines
in isolation.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``dpr_engine.*`` imports resolve correctly regardless of where pytest is
    invoked.
"""

import sys
import os
import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any engine imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# Document builders
# ---------------------------------------------------------------------------

def _section(section_type, content, position=0):
    return {
        "type": section_type,
        "content": content,
        "confidence": 0.9,
        "startPosition": position,
        "endPosition": position + len(content or ""),
    }


@pytest.fixture
def make_document():
    """
    Factory building a DPRDocument from (section_type, text) pairs.

    Usage::

        doc = make_document([("TIMELINE", "24 months")], structured={"totalCost": 1e7})
    """
    from dpr_engine.models.document import DPRDocument

    def _make(sections, structured=None, entities=None, dpr_id="dpr-test"):
        payload = {
            "id": dpr_id,
            "originalFileName": f"{dpr_id}.pdf",
            "processingStatus": "COMPLETED",
            "extractedContent": {
                "sections": [_section(t, c, i * 100) for i, (t, c) in enumerate(sections)],
                "entities": entities or [],
                "rawText": " ".join(c for _, c in sections),
                "structuredData": structured or {},
            },
        }
        return DPRDocument.model_validate(payload)

    return _make


@pytest.fixture
def monsoon_road_document(make_document):
    """
    Reference DPR: 18-month road project in Assam, monsoon exposure,
    5.5 crore budget, advanced / specialized technical scope.

    Expected features:
      duration 18, weather 4 months, seasonality 1.2, cost 55,000,000,
      technical 1.75 (advanced, specialized, equipment), infrastructure 1.3
      (road), accessibility 3.0, category road (0.75).
    Expected risks: ENVIRONMENTAL (monsoon), COMPLEXITY (mild), FINANCIAL.
    """
    return make_document(
        [
            ("EXECUTIVE_SUMMARY", "Road construction project in Assam."),
            ("TIMELINE", "Project duration: 18 months. Work slows during the monsoon season from June to September."),
            ("COST_ESTIMATE", "Total project cost: 5.5 crores including contingency."),
            ("TECHNICAL_SPECS", "Advanced bridge design with specialized equipment."),
        ],
        dpr_id="dpr-assam-road",
    )


@pytest.fixture
def remote_hill_document(make_document):
    """Long, remote, heavily regulated hill project: seven risks fire."""
    return make_document(
        [
            ("EXECUTIVE_SUMMARY", "Hydro power station in a remote tribal district."),
            ("TIMELINE", "Construction period of 4 years with heavy monsoon rainfall."),
            ("COST_ESTIMATE", "Total estimated cost 120 crores."),
            ("RESOURCES", "Specialized technical experts, skilled and imported custom turbines; large manpower and labor camps."),
            ("TECHNICAL_SPECS", "Complex, sophisticated and innovative tunnelling equipment."),
            ("ENVIRONMENTAL", "Forest clearance, wildlife permit and environmental approval required near the river in mountainous, inaccessible and difficult terrain."),
        ],
        dpr_id="dpr-hill-hydro",
    )


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def extractor():
    """FeatureExtractor with the default static historical source (15 projects)."""
    from dpr_engine.services.feature_extractor import FeatureExtractor
    return FeatureExtractor()


@pytest.fixture(scope="session")
def model():
    """ProbabilityModel (stateless, pure-math)."""
    from dpr_engine.services.probability_model import ProbabilityModel
    return ProbabilityModel()


@pytest.fixture(scope="session")
def risk_identifier():
    from dpr_engine.services.risk_engine import RiskIdentifier
    return RiskIdentifier()


@pytest.fixture
def store():
    """Fresh SessionStore per test; sessions are stateful."""
    from dpr_engine.services.session_store import SessionStore
    return SessionStore()


@pytest.fixture
def simulator(store):
    from dpr_engine.services.simulator_engine import ScenarioSimulator
    return ScenarioSimulator(store)


@pytest.fixture
def base_features():
    """
    Mid-range feature vector used by model / risk unit tests.

    duration 18, no weather, cost 30M, all complexity 1.0, accessibility 3,
    infrastructure 2, remoteness 1, region 0.72, category 0.73.
    """
    from dpr_engine.models.features import ProjectFeatures
    return ProjectFeatures(
        estimated_duration_months=18.0,
        total_cost=30_000_000.0,
        cost_per_month=30_000_000.0 / 18.0,
        accessibility_score=3.0,
        infrastructure_score=2.0,
        remoteness_score=1.0,
        similar_projects_count=15,
        region_success_rate=0.72,
        category_success_rate=0.73,
    )
