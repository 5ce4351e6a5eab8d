from __future__ import annotations

import json
from typing import Any

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


MATCH_DETAILS_MAX_LENGTH = 2000


class JobMatch(Base):
    __tablename__ = "job_matches"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)

    match_score = Column(Float, nullable=False)
    match_details = Column(String(MATCH_DETAILS_MAX_LENGTH), nullable=True)
    # JSON object keyed by facet: overallMatch, githubAnalysis, portfolioAnalysis, ...
    detailed_analysis = Column(Text, nullable=True)
    matched_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    is_viewed = Column(Boolean, nullable=False, default=False)

    job = relationship("Job")

    __table_args__ = (
        UniqueConstraint("student_id", "job_id", name="uq_job_matches_student_id_job_id"),
    )

    def set_detailed_analysis(self, bundle: dict[str, Any]) -> None:
        self.detailed_analysis = json.dumps(bundle, ensure_ascii=False)

    def get_detailed_analysis(self) -> dict[str, Any]:
        if not self.detailed_analysis:
            return {}
        try:
            value = json.loads(self.detailed_analysis)
        except ValueError:
            return {}
        return value if isinstance(value, dict) else {}
