"""
Scoring configuration: single source of truth for keyword vocabularies,
thresholds, weights and runtime settings.

Import from here in every engine rather than hardcoding values. Tables are
exposed as tuples / read-only mappings so nothing can mutate them at runtime.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from dotenv import load_dotenv

load_dotenv()


# ── Probability bounds ─────────────────────────────────────────────────────────
PROBABILITY_FLOOR: float = 0.10
PROBABILITY_CEILING: float = 0.95

CONFIDENCE_FLOOR: float = 0.30
CONFIDENCE_CEILING: float = 0.95


# ── Feature ranges (min, max) ─────────────────────────────────────────────────
FEATURE_RANGES: Mapping[str, tuple[float, float]] = MappingProxyType({
    "resource_complexity_score":      (1.0, 3.0),
    "labor_intensity_score":          (1.0, 2.5),
    "technical_complexity_score":     (1.0, 3.0),
    "environmental_complexity_score": (1.0, 2.5),
    "regulatory_complexity_score":    (1.0, 3.0),
    "accessibility_score":            (1.0, 3.0),
    "infrastructure_score":           (1.0, 3.0),
    "remoteness_score":               (1.0, 3.0),
})


# ── Timeline extraction ───────────────────────────────────────────────────────
DEFAULT_DURATION_MONTHS: float = 12.0
WEATHER_KEYWORDS: tuple[str, ...] = ("monsoon", "weather")
WEATHER_RISK_MONTHS: float = 4.0        # typical monsoon window
MONSOON_SEASONALITY_FACTOR: float = 1.2


# ── Cost extraction ───────────────────────────────────────────────────────────
CURRENCY_UNITS: Mapping[str, float] = MappingProxyType({
    "lakh":  100_000.0,
    "crore": 10_000_000.0,
    "rupee": 1.0,
})
MONETARY_ENTITY_TYPES: tuple[str, ...] = ("AMOUNT", "COST_ESTIMATE", "BUDGET_ITEM")


# ── Keyword vocabularies: (keywords, increment per hit) ──────────────────────
RESOURCE_COMPLEXITY_KEYWORDS: tuple[str, ...] = (
    "specialized", "technical", "expert", "skilled", "imported", "custom",
)
RESOURCE_COMPLEXITY_INCREMENT: float = 0.20

LABOR_INTENSITY_KEYWORDS: tuple[str, ...] = (
    "manpower", "labor", "worker", "staff", "personnel",
)
LABOR_INTENSITY_INCREMENT: float = 0.15

TECHNICAL_KEYWORDS: tuple[str, ...] = (
    "advanced", "complex", "sophisticated", "specialized",
    "innovative", "cutting-edge", "technical", "equipment",
)
TECHNICAL_INCREMENT: float = 0.25

ENVIRONMENTAL_KEYWORDS: tuple[str, ...] = (
    "environmental", "forest", "wildlife", "river",
    "mountain", "protected", "sensitive", "clearance",
)
ENVIRONMENTAL_INCREMENT: float = 0.20

REGULATORY_KEYWORDS: tuple[str, ...] = (
    "clearance", "approval", "permit", "license",
    "compliance", "regulation", "required",
)
REGULATORY_INCREMENT: float = 0.30

HARD_ACCESS_KEYWORDS: tuple[str, ...] = (
    "remote", "inaccessible", "difficult", "mountainous", "tribal",
)
ACCESSIBILITY_PENALTY: float = 0.40

INFRASTRUCTURE_KEYWORDS: tuple[str, ...] = (
    "road", "railway", "airport", "connectivity", "power", "water",
)
INFRASTRUCTURE_INCREMENT: float = 0.30

REMOTENESS_KEYWORDS: tuple[str, ...] = (
    "remote", "isolated", "far", "distant", "interior",
)
REMOTENESS_INCREMENT: float = 0.30


# ── Historical context ────────────────────────────────────────────────────────
# Category order matters: first matching category wins.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("road",     ("road", "highway")),
    ("water",    ("water", "irrigation")),
    ("building", ("building", "construction")),
    ("energy",   ("power", "energy")),
)
DEFAULT_CATEGORY: str = "infrastructure"

CATEGORY_SUCCESS_RATES: Mapping[str, float] = MappingProxyType({
    "road":           0.75,
    "water":          0.68,
    "building":       0.82,
    "energy":         0.71,
    "infrastructure": 0.73,
})
REGION_SUCCESS_RATE: float = 0.72       # Northeast India programme average


# ── Probability model weights ─────────────────────────────────────────────────
BASE_PROBABILITY: float = 0.70
LONG_DURATION_MONTHS: float = 24.0
VERY_LONG_DURATION_MONTHS: float = 36.0
DURATION_PENALTY: float = 0.10
WEATHER_PENALTY_PER_YEAR: float = 0.05
SEASONALITY_MULTIPLIER: float = 0.95
RESOURCE_COMPLEXITY_THRESHOLD: float = 2.0
RESOURCE_COMPLEXITY_PENALTY: float = 0.08
LABOR_INTENSITY_THRESHOLD: float = 2.0
LABOR_INTENSITY_PENALTY: float = 0.06

COMPLEXITY_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "technical_complexity_score":     0.05,
    "environmental_complexity_score": 0.04,
    "regulatory_complexity_score":    0.06,
})
ACCESSIBILITY_WEIGHT: float = 0.03
INFRASTRUCTURE_WEIGHT: float = 0.04
REMOTENESS_WEIGHT: float = 0.05

# Final blend: model x 0.7 + region x 0.2 + category x 0.1
BLEND_MODEL_WEIGHT: float = 0.7
BLEND_REGION_WEIGHT: float = 0.2
BLEND_CATEGORY_WEIGHT: float = 0.1


# ── Risk identification ───────────────────────────────────────────────────────
RISK_TYPES: tuple[str, ...] = ("TIMELINE", "RESOURCE", "COMPLEXITY", "ENVIRONMENTAL", "FINANCIAL")
IMPACT_LEVELS: tuple[str, ...] = ("LOW", "MEDIUM", "HIGH")

IMPACT_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "HIGH":   0.15,
    "MEDIUM": 0.08,
    "LOW":    0.03,
})

COMPLEXITY_RISK_THRESHOLD: float = 2.0
MILD_COMPLEXITY_THRESHOLD: float = 1.5
ACCESSIBILITY_RISK_THRESHOLD: float = 2.0
HIGH_COST_THRESHOLD: float = 50_000_000.0   # 5 crores


# ── Recommendations ───────────────────────────────────────────────────────────
MAX_RECOMMENDATIONS: int = 5
PHASING_DURATION_MONTHS: float = 18.0
RESOURCE_ASSESSMENT_THRESHOLD: float = 1.5
ACCESS_INVESTMENT_THRESHOLD: float = 2.5
REGION_SUCCESS_THRESHOLD: float = 0.70


# ── Simulation ────────────────────────────────────────────────────────────────
ACCESSIBILITY_COST_PER_POINT: float = 5_000_000.0   # 50 lakhs
MITIGATION_COST_PER_RISK_TYPE: float = 2_000_000.0  # 20 lakhs
MITIGATION_PROBABILITY_FACTOR: float = 0.7
MITIGATED_PROBABILITY_FLOOR: float = 0.05
FAST_TRACK_MULTIPLIER: float = 0.8
MAX_SCENARIO_RECOMMENDATIONS: int = 3

# Percent cutoffs, highest first
FEASIBILITY_RATINGS: tuple[tuple[float, str], ...] = (
    (80.0, "EXCELLENT"),
    (70.0, "GOOD"),
    (60.0, "FAIR"),
)

# Overall risk level from a scenario risk score (percent points), highest first
RISK_LEVELS: tuple[tuple[float, str], ...] = (
    (85.0, "CRITICAL"),
    (70.0, "HIGH"),
    (50.0, "MEDIUM"),
)

DEFAULT_MITIGATION_TYPES: tuple[str, ...] = ("COMPLEXITY", "ENVIRONMENTAL")


# ── Runtime settings ──────────────────────────────────────────────────────────

def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return float(raw)


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    json_logs: bool = True
    # Per-call timings from perf_monitor
    perf_logs: bool = False
    # None disables idle expiry of simulation sessions
    session_ttl_seconds: Optional[float] = None
    similar_projects_default: int = 15

    @classmethod
    def from_env(cls) -> "Settings":
        similar = _env_float("HISTORICAL_SIMILAR_PROJECTS_DEFAULT")
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            json_logs=os.getenv("LOG_FORMAT", "json").lower() != "text",
            perf_logs=os.getenv("LOG_PERF", "").strip().lower() in ("1", "true", "yes"),
            session_ttl_seconds=_env_float("SIMULATION_SESSION_TTL_SECONDS"),
            similar_projects_default=int(similar) if similar is not None else 15,
        )
