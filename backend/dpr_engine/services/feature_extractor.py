"""
feature_extractor.py — DPR text to ProjectFeatures

Covers:
  - Timeline: duration (months / years), monsoon / weather exposure
  - Resource: total cost (structured field, regex over the cost section,
    monetary entities), resource complexity, labor intensity, cost per month
  - Complexity: technical / environmental / regulatory keyword scores
  - Location: accessibility, infrastructure, remoteness
  - Historical: project category, category & region success rates,
    similar-project count from the historical collaborator

Each sub-extractor is independent; extraction is keyword/regex based and
fully deterministic.
"""

import logging
import re
from typing import Any, Dict, Iterable, Optional

from dpr_engine import config
from dpr_engine.models.document import DPRDocument, ExtractedContent
from dpr_engine.models.features import ProjectFeatures, clamp, cost_per_month
from dpr_engine.services.errors import ContentUnavailable
from dpr_engine.services.historical_source import HistoricalProjectsSource, StaticHistoricalSource

logger = logging.getLogger("dpr-features")

_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(month|year)", re.IGNORECASE)
_COST_RE = re.compile(
    r"(?:total|cost|amount).*?(\d+(?:,\d+)*(?:\.\d+)?)\s*(lakh|crore|rupee)",
    re.IGNORECASE,
)
_BARE_COST_RE = re.compile(r"(\d+(?:,\d+)*(?:\.\d+)?)\s*(lakh|crore|rupee)", re.IGNORECASE)

_LOCATION_ENTITY_TYPES = ("LOCATION", "LOCATION_NAME", "ADDRESS")


def _keyword_hits(text: str, keywords: Iterable[str]) -> int:
    """Number of distinct keywords present in ``text``."""
    return sum(1 for kw in keywords if kw in text)


def _parse_amount(number: str, unit: str) -> float:
    value = float(number.replace(",", ""))
    return value * config.CURRENCY_UNITS[unit.lower()]


class FeatureExtractor:
    """Turns a DPR's extracted sections/entities into ProjectFeatures."""

    def __init__(self, historical_source: Optional[HistoricalProjectsSource] = None):
        self.historical_source = historical_source or StaticHistoricalSource()

    def extract(self, document: DPRDocument) -> ProjectFeatures:
        """
        Extract the full feature vector.

        Raises ContentUnavailable when the document carries no extracted
        content; no partial feature set is ever returned.
        """
        content = document.extracted_content
        if content is None or content.is_empty():
            raise ContentUnavailable(document.id)

        fields: Dict[str, Any] = {}
        fields.update(self._extract_timeline(content))
        fields.update(self._extract_resources(content))
        fields.update(self._extract_complexity(content))
        fields.update(self._extract_location(content))
        fields.update(self._extract_historical(content))

        fields["cost_per_month"] = cost_per_month(
            fields["total_cost"], fields["estimated_duration_months"]
        )
        features = ProjectFeatures(**fields)
        logger.info(
            f"Features extracted for DPR {document.id}: "
            f"{features.estimated_duration_months:g} months, cost {features.total_cost:,.0f}, "
            f"category {features.project_category}",
            extra={"dpr_id": document.id},
        )
        return features

    # ─── Timeline ─────────────────────────────────────────────────────────

    def _extract_timeline(self, content: ExtractedContent) -> Dict[str, float]:
        duration = config.DEFAULT_DURATION_MONTHS
        seasonality = 1.0
        weather_months = 0.0

        section = content.section("TIMELINE")
        if section is not None:
            match = _DURATION_RE.search(section.content)
            if match:
                value = float(match.group(1))
                months = value * 12 if match.group(2).lower() == "year" else value
                if months > 0:
                    duration = months

            text = section.content.lower()
            if any(kw in text for kw in config.WEATHER_KEYWORDS):
                weather_months = config.WEATHER_RISK_MONTHS
                seasonality = config.MONSOON_SEASONALITY_FACTOR

        return {
            "estimated_duration_months": duration,
            "seasonality_factor": seasonality,
            "weather_risk_months": weather_months,
        }

    # ─── Resources ────────────────────────────────────────────────────────

    def _extract_resources(self, content: ExtractedContent) -> Dict[str, float]:
        total_cost = self._extract_total_cost(content)

        resource_score = 1.0
        labor_score = 1.0
        section = content.section("RESOURCES")
        if section is not None:
            text = section.content.lower()
            resource_score += _keyword_hits(text, config.RESOURCE_COMPLEXITY_KEYWORDS) * config.RESOURCE_COMPLEXITY_INCREMENT
            labor_score += _keyword_hits(text, config.LABOR_INTENSITY_KEYWORDS) * config.LABOR_INTENSITY_INCREMENT

        return {
            "total_cost": total_cost,
            "resource_complexity_score": min(resource_score, 3.0),
            "labor_intensity_score": min(labor_score, 2.5),
        }

    def _extract_total_cost(self, content: ExtractedContent) -> float:
        structured = content.structured_number("totalCost")
        if structured is not None and structured > 0:
            return structured

        section = content.section("COST_ESTIMATE")
        if section is not None:
            match = _COST_RE.search(section.content) or _BARE_COST_RE.search(section.content)
            if match:
                return _parse_amount(match.group(1), match.group(2))

        amounts = [
            e.numeric_value() for e in content.entities
            if e.type.upper() in config.MONETARY_ENTITY_TYPES
        ]
        amounts = [a for a in amounts if a is not None and a > 0]
        if amounts:
            return max(amounts)

        logger.debug("No cost found in structured data, cost section or entities; defaulting to 0")
        return 0.0

    # ─── Complexity ───────────────────────────────────────────────────────

    def _extract_complexity(self, content: ExtractedContent) -> Dict[str, float]:
        text = content.all_text()
        technical = 1.0 + _keyword_hits(text, config.TECHNICAL_KEYWORDS) * config.TECHNICAL_INCREMENT
        environmental = 1.0 + _keyword_hits(text, config.ENVIRONMENTAL_KEYWORDS) * config.ENVIRONMENTAL_INCREMENT
        regulatory = 1.0 + _keyword_hits(text, config.REGULATORY_KEYWORDS) * config.REGULATORY_INCREMENT
        return {
            "technical_complexity_score": min(technical, 3.0),
            "environmental_complexity_score": min(environmental, 2.5),
            "regulatory_complexity_score": min(regulatory, 3.0),
        }

    # ─── Location ─────────────────────────────────────────────────────────

    def _extract_location(self, content: ExtractedContent) -> Dict[str, float]:
        text = content.all_text()
        access = 3.0 - _keyword_hits(text, config.HARD_ACCESS_KEYWORDS) * config.ACCESSIBILITY_PENALTY
        infra = 1.0 + _keyword_hits(text, config.INFRASTRUCTURE_KEYWORDS) * config.INFRASTRUCTURE_INCREMENT
        remote = 1.0 + _keyword_hits(text, config.REMOTENESS_KEYWORDS) * config.REMOTENESS_INCREMENT
        return {
            "accessibility_score": clamp(access, 1.0, 3.0),
            "infrastructure_score": clamp(infra, 1.0, 3.0),
            "remoteness_score": clamp(remote, 1.0, 3.0),
        }

    # ─── Historical ───────────────────────────────────────────────────────

    def _extract_historical(self, content: ExtractedContent) -> Dict[str, Any]:
        category = self.classify_category(content.all_text())
        region = self._region_of(content)
        count = self.historical_source.similar_projects_count(category, region)
        return {
            "project_category": category,
            "similar_projects_count": max(int(count or 0), 0),
            "region_success_rate": config.REGION_SUCCESS_RATE,
            "category_success_rate": config.CATEGORY_SUCCESS_RATES.get(
                category, config.CATEGORY_SUCCESS_RATES[config.DEFAULT_CATEGORY]
            ),
        }

    @staticmethod
    def classify_category(text: str) -> str:
        text = text.lower()
        for category, keywords in config.CATEGORY_KEYWORDS:
            if any(kw in text for kw in keywords):
                return category
        return config.DEFAULT_CATEGORY

    @staticmethod
    def _region_of(content: ExtractedContent) -> str:
        location = content.structured_text("location")
        if location:
            return location
        for entity in content.entities:
            if entity.type.upper() in _LOCATION_ENTITY_TYPES and entity.text.strip():
                return entity.text.strip()
        return ""
