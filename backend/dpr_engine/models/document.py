"""
DPR document schema as delivered by the upstream text-extraction collaborator.

This is the boundary where extracted content is first consumed, so every
optional field is coerced to a documented default here: ``None`` text becomes
``""``, missing or unparsable numbers become ``0``, and list entries that
are not objects (``null``, bare strings, numbers) are dropped instead of
reaching the scoring code. Engines downstream can assume fully populated values.
"""
import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _drop_malformed(value: Any) -> list:
    """Keep only dict / model entries of a list; anything else is skipped."""
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, (dict, BaseModel))]


def _finite_float(value: Any) -> Optional[float]:
    """``value`` as a finite float, or None when it is not one (bools included)."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value.replace(",", "") if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _number_or_zero(value: Any) -> float:
    number = _finite_float(value)
    return 0.0 if number is None else number


class DocumentSection(BaseModel):
    """One classified section of the DPR (TIMELINE, COST_ESTIMATE, ...)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str = ""
    content: str = ""
    confidence: float = 0.0
    start_position: int = Field(0, alias="startPosition")
    end_position: int = Field(0, alias="endPosition")

    @field_validator("type", "content", mode="before")
    @classmethod
    def _text_or_empty(cls, v):
        return "" if v is None else str(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence_or_zero(cls, v):
        return _number_or_zero(v)

    @field_validator("start_position", "end_position", mode="before")
    @classmethod
    def _position_or_zero(cls, v):
        return int(_number_or_zero(v))


class ExtractedEntity(BaseModel):
    """Named entity (monetary amount, location, date, resource)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str = ""
    text: str = ""
    value: Optional[Any] = None
    confidence: float = 0.0

    @field_validator("type", "text", mode="before")
    @classmethod
    def _text_or_empty(cls, v):
        return "" if v is None else str(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence_or_zero(cls, v):
        return _number_or_zero(v)

    def numeric_value(self) -> Optional[float]:
        """Entity value as a float, or None when absent, not numeric or not finite."""
        if isinstance(self.value, (int, float, str)):
            return _finite_float(self.value)
        return None


class ExtractedContent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sections: List[DocumentSection] = Field(default_factory=list)
    entities: List[ExtractedEntity] = Field(default_factory=list)
    raw_text: str = Field("", alias="rawText")
    structured_data: Dict[str, Any] = Field(default_factory=dict, alias="structuredData")

    @field_validator("sections", "entities", mode="before")
    @classmethod
    def _skip_malformed_entries(cls, v):
        return _drop_malformed(v)

    @field_validator("raw_text", mode="before")
    @classmethod
    def _text_or_empty(cls, v):
        return "" if v is None else str(v)

    @field_validator("structured_data", mode="before")
    @classmethod
    def _dict_or_empty(cls, v):
        return v if isinstance(v, dict) else {}

    def is_empty(self) -> bool:
        return not self.sections and not self.raw_text.strip() and not self.structured_data

    def section(self, section_type: str) -> Optional[DocumentSection]:
        """First section of the given type, or None."""
        for s in self.sections:
            if s.type.upper() == section_type:
                return s
        return None

    def all_text(self) -> str:
        """Lower-cased concatenation of every section's text."""
        return " ".join(s.content for s in self.sections).lower()

    def structured_number(self, key: str) -> Optional[float]:
        value = self.structured_data.get(key)
        if not isinstance(value, (int, float)):
            return None
        return _finite_float(value)

    def structured_text(self, key: str) -> str:
        value = self.structured_data.get(key)
        return value.strip() if isinstance(value, str) else ""


class DPRDocument(BaseModel):
    """
    Detailed Project Report record.

    Accepts the camelCase payload produced by the ingestion service
    (``extractedContent``, ``structuredData`` ...) as well as snake_case.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    original_file_name: str = Field("", alias="originalFileName")
    language: str = "EN"
    processing_status: str = Field("", alias="processingStatus")
    extracted_content: Optional[ExtractedContent] = Field(None, alias="extractedContent")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v):
        return "" if v is None else str(v)

    @field_validator("original_file_name", "language", "processing_status", mode="before")
    @classmethod
    def _text_or_default(cls, v, info):
        if v is None:
            return "EN" if info.field_name == "language" else ""
        return str(v)

    @field_validator("extracted_content", mode="before")
    @classmethod
    def _content_object_or_none(cls, v):
        return v if isinstance(v, (dict, ExtractedContent)) else None
