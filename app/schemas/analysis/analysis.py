# app/schemas/analysis/analysis.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, List, Optional
from datetime import datetime
from enum import Enum

from ...application.ports.analysis_repo import AnalysisRecord
from ..common.common import as_utc


class AnalysisStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    owner_id: str
    image_path: str
    user_intent: str
    status: AnalysisStatus
    ai_result: Optional[str] = Field(None, description="Free-text AI report, set once the analysis completed")
    highlights: Optional[List[Any]] = Field(None, description="Highlight annotations extracted from the AI report")
    created_at: datetime

    @field_validator('created_at')
    @classmethod
    def created_at_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @classmethod
    def from_record(cls, record: AnalysisRecord) -> "AnalysisResponse":
        return cls(
            id=record.id,
            owner_id=record.owner_id,
            image_path=record.image_path,
            user_intent=record.user_intent,
            status=record.status,
            ai_result=record.ai_result,
            highlights=record.highlights,
            created_at=record.created_at,
        )
