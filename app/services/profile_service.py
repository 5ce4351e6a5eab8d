# profile_service.py
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.orm import Session

from app.models.cv import CV
from app.models.jobs import Job
from app.models.student_profile import StudentProfile
from app.services.skill_parser import parse_skill_list

logger = logging.getLogger(__name__)

_PROJECT_NAME_RE = re.compile(r'"name"\s*:\s*"([^"]+)"')


@dataclass(frozen=True)
class GitHubEvidence:
    url: str | None
    projects_raw: str | None
    project_names: tuple[str, ...] = ()
    # True when projects_raw was present but not a JSON list of project objects.
    projects_malformed: bool = False


@dataclass(frozen=True)
class PortfolioEvidence:
    url: str


@dataclass(frozen=True)
class CertificationEvidence:
    name: str
    issuer: str | None = None
    date_received: date | None = None
    expiry_date: date | None = None


@dataclass(frozen=True)
class ExperienceEvidence:
    title: str
    company: str | None = None
    location: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    current: bool = False
    description: str | None = None


@dataclass(frozen=True)
class StudentSkillProfile:
    student_id: int
    skills: tuple[str, ...]
    name: str = ""
    major: str | None = None
    university: str | None = None
    graduation_year: int | None = None
    bio: str | None = None
    github: GitHubEvidence | None = None
    portfolio: PortfolioEvidence | None = None
    certifications: tuple[CertificationEvidence, ...] = field(default_factory=tuple)
    experiences: tuple[ExperienceEvidence, ...] = field(default_factory=tuple)
    cv_text: str | None = None


@dataclass(frozen=True)
class JobRequirement:
    job_id: int
    title: str
    skills: tuple[str, ...]
    description: str = ""
    location: str | None = None


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_github_projects(raw: str | None) -> tuple[tuple[str, ...], bool]:
    """Return (project names, malformed flag) for the stored GitHub project JSON."""
    text = _blank_to_none(raw)
    if text is None:
        return (), False
    try:
        data = json.loads(text)
    except ValueError:
        # Truncated or hand-edited JSON: salvage whatever "name" fields survive.
        return tuple(_PROJECT_NAME_RE.findall(text)), True

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        return (), True

    names: list[str] = []
    for item in data:
        if isinstance(item, dict):
            name = _blank_to_none(item.get("name"))
            if name:
                names.append(name)
        elif isinstance(item, str) and item.strip():
            names.append(item.strip())
    return tuple(names), False


def build_student_skill_profile(student: StudentProfile, cv: CV | None = None) -> StudentSkillProfile:
    github_url = _blank_to_none(student.github_url)
    projects_raw = _blank_to_none(student.github_projects)
    github = None
    if github_url or projects_raw:
        names, malformed = parse_github_projects(projects_raw)
        github = GitHubEvidence(
            url=github_url,
            projects_raw=projects_raw,
            project_names=names,
            projects_malformed=malformed,
        )

    portfolio_url = _blank_to_none(student.portfolio_url)

    certifications = tuple(
        CertificationEvidence(
            name=cert.name.strip(),
            issuer=_blank_to_none(cert.issuer),
            date_received=cert.date_received,
            expiry_date=cert.expiry_date,
        )
        for cert in (student.certifications or [])
        if cert.name and cert.name.strip()
    )
    experiences = tuple(
        ExperienceEvidence(
            title=exp.title.strip(),
            company=_blank_to_none(exp.company),
            location=_blank_to_none(exp.location),
            start_date=exp.start_date,
            end_date=exp.end_date,
            current=bool(exp.current),
            description=_blank_to_none(exp.description),
        )
        for exp in (student.experiences or [])
        if exp.title and exp.title.strip()
    )

    return StudentSkillProfile(
        student_id=student.id,
        skills=tuple(parse_skill_list(student.skills)),
        name=student.full_name,
        major=_blank_to_none(student.major),
        university=_blank_to_none(student.university),
        graduation_year=student.graduation_year,
        bio=_blank_to_none(student.bio),
        github=github,
        portfolio=PortfolioEvidence(url=portfolio_url) if portfolio_url else None,
        certifications=certifications,
        experiences=experiences,
        cv_text=_blank_to_none(cv.as_prompt_text()) if cv is not None else None,
    )


def build_job_requirement(job: Job) -> JobRequirement:
    return JobRequirement(
        job_id=job.id,
        title=(job.title or "").strip(),
        skills=tuple(parse_skill_list(job.required_skills)),
        description=(job.description or "").strip(),
        location=_blank_to_none(job.location),
    )


def get_student_profile(db: Session, student_id: int) -> StudentProfile | None:
    return db.query(StudentProfile).filter(StudentProfile.id == student_id).first()


def get_active_cv(db: Session, student: StudentProfile) -> CV | None:
    if student.active_cv_id is None:
        return None
    cv = db.query(CV).filter(CV.id == student.active_cv_id).first()
    if cv is None:
        logger.warning("Active CV %s for student %s not found", student.active_cv_id, student.id)
    return cv
