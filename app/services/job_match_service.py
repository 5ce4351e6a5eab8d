# job_match_service.py
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.data.skill_tables import SkillTables, load_skill_tables
from app.models.job_match import MATCH_DETAILS_MAX_LENGTH, JobMatch
from app.models.jobs import Job
from app.services.evidence_analyzer import EvidenceAnalyzer
from app.services.evidence_fallbacks import FallbackEvidenceAnalyzer
from app.services.gemini_client import GeminiClient
from app.services.match_evidence import truncate_narrative
from app.services.match_guard import MatchPersistenceGuard
from app.services.match_ranker import rank_matches
from app.services.match_score_service import CompositeScoreResolver
from app.services.profile_service import (
    StudentSkillProfile,
    build_job_requirement,
    build_student_skill_profile,
    get_active_cv,
    get_student_profile,
)
from app.services.skill_matcher import HeuristicSkillScorer
from app.services.skill_relationships import RelationshipGraph

logger = logging.getLogger(__name__)


class JobMatchError(RuntimeError):
    """Base class for matching errors surfaced to callers."""


class StudentNotFoundError(JobMatchError):
    pass


class JobMatchNotFoundError(JobMatchError):
    pass


class JobMatchForbiddenError(JobMatchError):
    pass


class JobMatchService:
    """Scores a student against every active job and stores one match per pair."""

    def __init__(
        self,
        db: Session,
        *,
        client: GeminiClient,
        tables: SkillTables | None = None,
        settings: Settings | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        settings = settings or get_settings()
        tables = tables or load_skill_tables()
        graph = RelationshipGraph.from_tables(tables)

        self.db = db
        self.client = client
        self.narrative_limit = min(settings.match_details_max_length, MATCH_DETAILS_MAX_LENGTH)
        self.scorer = HeuristicSkillScorer(graph, apply_special_floor=settings.match_java_spring_react_floor)
        self.analyzer = EvidenceAnalyzer(
            client,
            FallbackEvidenceAnalyzer(tables, graph, narrative_limit=self.narrative_limit, today=today),
        )
        self.resolver = CompositeScoreResolver(client)
        self.guard = MatchPersistenceGuard(db)

    def _require_student(self, student_id: int):
        student = get_student_profile(self.db, student_id)
        if student is None:
            raise StudentNotFoundError(f"Student profile {student_id} not found")
        return student

    def find_matches_for_student(self, student_id: int, min_score: float | None = None) -> list[JobMatch]:
        student = self._require_student(student_id)
        profile = build_student_skill_profile(student, get_active_cv(self.db, student))

        jobs = self.db.query(Job).filter(Job.active.is_(True)).order_by(Job.id.asc()).all()
        existing = self.guard.existing_matches(student_id)
        pending = self.guard.unmatched_jobs(jobs, existing)
        logger.info(
            "Matching student %s: %d active jobs, %d already matched, %d to score",
            student_id,
            len(jobs),
            len(existing),
            len(pending),
        )

        created: list[JobMatch] = []
        for job in pending:
            job_id = job.id
            try:
                match = self._score_job(profile, job)
                saved = self.guard.create_if_absent(match)
            except Exception:
                self.db.rollback()
                logger.exception("Failed to score job %s for student %s; skipping", job_id, student_id)
                continue
            if saved is not None:
                created.append(saved)

        logger.info("Created %d new matches for student %s", len(created), student_id)
        if min_score is None:
            return rank_matches(created)
        return rank_matches([*existing, *created], min_score)

    def _score_job(self, profile: StudentSkillProfile, job: Job) -> JobMatch:
        requirement = build_job_requirement(job)
        skill_match = self.scorer.score_profile(profile, requirement)
        evidence = self.analyzer.build_evidence(profile, requirement, skill_match)
        resolution = self.resolver.resolve(profile, requirement, skill_match, evidence)
        logger.debug(
            "Student %s job %s: heuristic=%.1f final=%.1f (%s)",
            profile.student_id,
            requirement.job_id,
            skill_match.percentage,
            resolution.score,
            resolution.source,
        )

        match = JobMatch(
            student_id=profile.student_id,
            job_id=requirement.job_id,
            match_score=resolution.score,
            match_details=truncate_narrative(evidence.overall.narrative, self.narrative_limit),
            matched_at=datetime.now(timezone.utc),
            is_viewed=False,
        )
        match.set_detailed_analysis(evidence.to_bundle())
        return match

    def get_matches_for_student(self, student_id: int) -> list[JobMatch]:
        self._require_student(student_id)
        return rank_matches(self.guard.existing_matches(student_id))

    def get_match(self, match_id: int) -> JobMatch | None:
        return self.db.query(JobMatch).filter(JobMatch.id == match_id).first()

    def mark_viewed(self, match_id: int, student_id: int) -> JobMatch:
        match = self.get_match(match_id)
        if match is None:
            raise JobMatchNotFoundError(f"Job match {match_id} not found")
        if match.student_id != student_id:
            raise JobMatchForbiddenError("You do not have permission to update this job match")
        if not match.is_viewed:
            match.is_viewed = True
            self.db.commit()
            self.db.refresh(match)
        return match

    def is_analysis_available(self) -> bool:
        return self.client.is_configured
