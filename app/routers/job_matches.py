from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.models.job_match import JobMatch
from app.models.student_profile import StudentProfile
from app.routers.dependencies import get_current_student, get_job_match_service
from app.schemas.job_match import JobMatchDetailedAnalysis, JobMatchRead, JobMatchStatus
from app.services.job_match_service import (
    JobMatchForbiddenError,
    JobMatchNotFoundError,
    JobMatchService,
    StudentNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["job-matches"])


def _owned_match(service: JobMatchService, match_id: int, student: StudentProfile) -> JobMatch:
    match = service.get_match(match_id)
    if match is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job match not found")
    if match.student_id != student.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to view this job match")
    return match


@router.get("/findjobs", response_model=list[JobMatchRead])
def find_jobs(
    min_score: float | None = Query(default=None, alias="minScore", ge=0, le=100),
    service: JobMatchService = Depends(get_job_match_service),
    current_student: StudentProfile = Depends(get_current_student),
) -> list[JobMatchRead]:
    try:
        matches = service.find_matches_for_student(current_student.id, min_score=min_score)
    except StudentNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return [JobMatchRead.model_validate(m) for m in matches]


@router.get("/student/job-matches", response_model=list[JobMatchRead])
def list_my_matches(
    service: JobMatchService = Depends(get_job_match_service),
    current_student: StudentProfile = Depends(get_current_student),
) -> list[JobMatchRead]:
    try:
        matches = service.get_matches_for_student(current_student.id)
    except StudentNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return [JobMatchRead.model_validate(m) for m in matches]


@router.put("/job-matches/{match_id}/viewed", response_model=JobMatchRead)
def mark_match_viewed(
    match_id: int,
    service: JobMatchService = Depends(get_job_match_service),
    current_student: StudentProfile = Depends(get_current_student),
) -> JobMatchRead:
    try:
        match = service.mark_viewed(match_id, current_student.id)
    except JobMatchNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except JobMatchForbiddenError as exc:
        logger.warning("Student %s tried to mark match %s viewed", current_student.id, match_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return JobMatchRead.model_validate(match)


@router.get("/job-matches/{match_id}", response_model=JobMatchRead)
def read_match(
    match_id: int,
    service: JobMatchService = Depends(get_job_match_service),
    current_student: StudentProfile = Depends(get_current_student),
) -> JobMatchRead:
    return JobMatchRead.model_validate(_owned_match(service, match_id, current_student))


@router.get("/job-matches/{match_id}/detailed-analysis", response_model=JobMatchDetailedAnalysis)
def read_detailed_analysis(
    match_id: int,
    service: JobMatchService = Depends(get_job_match_service),
    current_student: StudentProfile = Depends(get_current_student),
) -> JobMatchDetailedAnalysis:
    match = _owned_match(service, match_id, current_student)
    return JobMatchDetailedAnalysis(
        match_id=match.id,
        job_id=match.job_id,
        match_score=float(match.match_score),
        analysis=match.get_detailed_analysis(),
    )


@router.get("/public/job-match-status", response_model=JobMatchStatus)
def job_match_status(service: JobMatchService = Depends(get_job_match_service)) -> JobMatchStatus:
    return JobMatchStatus(ai_analysis_available=service.is_analysis_available())
