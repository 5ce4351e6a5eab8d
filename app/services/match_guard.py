from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.job_match import JobMatch
from app.models.jobs import Job

logger = logging.getLogger(__name__)


class MatchPersistenceGuard:
    """Keeps at most one JobMatch per (student, job).

    ``unmatched_jobs`` skips pairs that are already scored; ``create_if_absent``
    relies on the table's unique constraint so a concurrent run cannot insert
    a second row for the same pair.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def existing_matches(self, student_id: int) -> list[JobMatch]:
        return (
            self.db.query(JobMatch)
            .filter(JobMatch.student_id == student_id)
            .order_by(JobMatch.match_score.desc(), JobMatch.job_id.asc())
            .all()
        )

    def unmatched_jobs(self, jobs: Iterable[Job], existing: Iterable[JobMatch]) -> list[Job]:
        matched_ids = {m.job_id for m in existing}
        return [job for job in jobs if job.id not in matched_ids]

    def create_if_absent(self, match: JobMatch) -> JobMatch | None:
        self.db.add(match)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(
                "Match for student %s and job %s already exists; skipping",
                match.student_id,
                match.job_id,
            )
            return None
        self.db.refresh(match)
        return match
