"""API request and response models for the Correction Service."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from services.correction_service.internal_models import (
    CorrectionAnalysis,
    CorrectionEdit,
    CorrectionResult,
    CorrectionStatistics,
    LanguageInfo,
)


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CorrectOptions(ApiModel):
    """Optional settings sent along with the text."""

    language: str = Field(default="auto", min_length=1, max_length=35)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class CorrectionData(ApiModel):
    original: str
    corrected: str
    corrections: list[CorrectionEdit]
    analysis: CorrectionAnalysis
    statistics: CorrectionStatistics


class CorrectionMeta(ApiModel):
    timestamp: datetime
    processing_time: int = Field(description="Milliseconds spent correcting")
    has_changes: bool
    service_used: str
    language: LanguageInfo
    correlation_id: str


class CorrectResponse(ApiModel):
    success: bool = True
    data: CorrectionData
    meta: CorrectionMeta

    @classmethod
    def from_result(cls, result: CorrectionResult, correlation_id: str) -> CorrectResponse:
        return cls(
            data=CorrectionData(
                original=result.original_text,
                corrected=result.corrected_text,
                corrections=result.edits,
                analysis=result.analysis,
                statistics=result.statistics,
            ),
            meta=CorrectionMeta(
                timestamp=datetime.now(timezone.utc),
                processing_time=result.statistics.processing_time_ms,
                has_changes=result.has_changes,
                service_used=result.service_used,
                language=result.language,
                correlation_id=correlation_id,
            ),
        )

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class LanguagesResponse(ApiModel):
    success: bool = True
    data: list[LanguageInfo]

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
