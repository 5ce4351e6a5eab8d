from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class JobSummary(BaseModel):
    id: int
    title: str
    location: str | None = None
    employment_type: str | None = None

    model_config = ConfigDict(from_attributes=True)


class JobMatchRead(BaseModel):
    id: int
    student_id: int
    job_id: int
    match_score: float = Field(ge=1.0, le=100.0)
    match_details: str | None = None
    matched_at: datetime
    is_viewed: bool = False
    job: JobSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class JobMatchDetailedAnalysis(BaseModel):
    match_id: int
    job_id: int
    match_score: float
    analysis: dict[str, Any] = Field(default_factory=dict)


class JobMatchStatus(BaseModel):
    ai_analysis_available: bool
