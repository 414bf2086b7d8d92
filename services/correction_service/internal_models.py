"""Internal Pydantic models for the Correction Service."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from services.correction_service.protocols import CorrectionBackendProtocol

# Models returned to clients serialize with camelCase field names
WIRE_MODEL_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class EditCategory(StrEnum):
    """Category attached to every correction edit."""

    GRAMMAR = "Grammar"
    SPELLING = "Spelling"
    PUNCTUATION = "Punctuation"
    TENSE = "Tense"
    PRONOUN = "Pronoun"
    ARTICLE = "Article"
    PREPOSITION = "Preposition"
    COLLOCATION = "Collocation"
    IDIOM = "Idiom"
    STYLE = "Style"
    FORMATTING = "Formatting"
    OTHER = "Other"


class CorrectionEdit(BaseModel):
    """A single replacement of `original_span` at `offset` in the original text."""

    original_span: str = Field(description="Text covered by the edit in the original")
    replacement: str = Field(description="Replacement text")
    offset: int = Field(ge=0, description="Character offset into the original text")
    length: int = Field(ge=0, description="Number of original characters replaced")
    category: EditCategory = Field(default=EditCategory.GRAMMAR)
    message: str = Field(default="", description="Human readable explanation")
    confidence: int = Field(default=75, ge=0, le=100)

    model_config = WIRE_MODEL_CONFIG

    @property
    def end(self) -> int:
        return self.offset + self.length


class UpstreamEdit(BaseModel):
    """An edit as reported by an upstream API, before normalization."""

    offset: int
    length: int
    replacement: str
    category: str = ""
    message: str = ""
    confidence: int = Field(default=80, ge=0, le=100)

    model_config = ConfigDict(frozen=True)


class StructuredEdits(BaseModel):
    """Upstream answered with a list of positional edits."""

    kind: Literal["structured_edits"] = "structured_edits"
    candidates: list[UpstreamEdit] = Field(default_factory=list)
    language_code: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class ReplacementText(BaseModel):
    """Upstream answered with a full rewritten text."""

    kind: Literal["replacement_text"] = "replacement_text"
    text: str

    model_config = ConfigDict(frozen=True)


UpstreamResponse = Union[StructuredEdits, ReplacementText]


class LanguageInfo(BaseModel):
    name: str
    code: str

    model_config = WIRE_MODEL_CONFIG


class CorrectionStatistics(BaseModel):
    total_candidates: int = Field(default=0, ge=0)
    applied_count: int = Field(default=0, ge=0)
    original_length: int = Field(default=0, ge=0)
    corrected_length: int = Field(default=0, ge=0)
    processing_time_ms: int = Field(default=0, ge=0)

    model_config = WIRE_MODEL_CONFIG


class CorrectionAnalysis(BaseModel):
    confidence_score: int = Field(default=100, ge=0, le=100)
    quality_score: int = Field(default=100, ge=0, le=100)
    category_breakdown: dict[EditCategory, int] = Field(default_factory=dict)

    model_config = WIRE_MODEL_CONFIG


class CorrectionResult(BaseModel):
    """Outcome of one correction request; edits are held in descending-offset order."""

    original_text: str
    corrected_text: str
    edits: list[CorrectionEdit] = Field(default_factory=list)
    language: LanguageInfo
    service_used: str
    statistics: CorrectionStatistics = Field(default_factory=CorrectionStatistics)
    analysis: CorrectionAnalysis = Field(default_factory=CorrectionAnalysis)

    model_config = WIRE_MODEL_CONFIG

    @property
    def has_changes(self) -> bool:
        return self.corrected_text != self.original_text


@dataclass(frozen=True)
class BackendRegistration:
    """A backend adapter with the availability and priority decided at startup."""

    backend: CorrectionBackendProtocol
    available: bool
    priority: int
    requires_credential: bool = False

    @property
    def name(self) -> str:
        return self.backend.name

    @property
    def timeout_seconds(self) -> float:
        return self.backend.timeout_seconds
