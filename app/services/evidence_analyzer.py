# evidence_analyzer.py
from __future__ import annotations

import logging
from typing import Callable, Sequence

from app.services.evidence_fallbacks import NOT_PROVIDED, FallbackEvidenceAnalyzer
from app.services.gemini_client import GeminiClient, strip_code_fences
from app.services.match_evidence import EvidenceResult, MatchEvidence, extract_percentage, truncate_narrative
from app.services.profile_service import (
    CertificationEvidence,
    ExperienceEvidence,
    GitHubEvidence,
    JobRequirement,
    PortfolioEvidence,
    StudentSkillProfile,
)
from app.services.skill_matcher import SkillMatchResult

logger = logging.getLogger(__name__)

_SCORE_LINE = "End with a line of the form 'Relevance Score: NN%'."


def _skills_line(job: JobRequirement) -> str:
    return ", ".join(job.skills) if job.skills else NOT_PROVIDED


def github_prompt(evidence: GitHubEvidence, job: JobRequirement) -> str:
    return (
        "You are a technical recruiter reviewing a student's GitHub activity for a job opening.\n"
        f"Job title: {job.title}\n"
        f"Required skills: {_skills_line(job)}\n\n"
        f"GitHub URL: {evidence.url or NOT_PROVIDED}\n"
        f"GitHub projects (JSON): {evidence.projects_raw or NOT_PROVIDED}\n\n"
        "Identify which required skills the projects demonstrate directly, which are related, "
        "and which are missing. Suggest concrete projects that would close the gaps. "
        f"Keep the answer under 1500 characters. {_SCORE_LINE}"
    )


def portfolio_prompt(evidence: PortfolioEvidence, job: JobRequirement) -> str:
    return (
        "You are a technical recruiter reviewing a student's portfolio website for a job opening.\n"
        f"Job title: {job.title}\n"
        f"Required skills: {_skills_line(job)}\n\n"
        f"Portfolio URL: {evidence.url}\n\n"
        "Based on the URL and what it suggests about the site's technology and hosting, assess how "
        "well the portfolio supports the required skills. State clearly that the assessment is "
        f"inferred. Keep the answer under 1500 characters. {_SCORE_LINE}"
    )


def certifications_prompt(certs: Sequence[CertificationEvidence], job: JobRequirement) -> str:
    entries = "\n".join(
        f"- {c.name} | issuer: {c.issuer or NOT_PROVIDED} | received: "
        f"{c.date_received.isoformat() if c.date_received else NOT_PROVIDED}"
        for c in certs
    )
    return (
        "You are a technical recruiter reviewing a student's certifications for a job opening.\n"
        f"Job title: {job.title}\n"
        f"Required skills: {_skills_line(job)}\n\n"
        f"Certifications:\n{entries or NOT_PROVIDED}\n\n"
        "Explain which required skills the certifications validate, which gaps remain, and which "
        f"certifications would close them. Keep the answer under 1500 characters. {_SCORE_LINE}"
    )


def experiences_prompt(experiences: Sequence[ExperienceEvidence], job: JobRequirement) -> str:
    entries = []
    for exp in experiences:
        start = exp.start_date.isoformat() if exp.start_date else NOT_PROVIDED
        end = "Present" if exp.current or exp.end_date is None else exp.end_date.isoformat()
        entries.append(
            f"- {exp.title} at {exp.company or NOT_PROVIDED} ({start} to {end}): {exp.description or NOT_PROVIDED}"
        )
    return (
        "You are a technical recruiter reviewing a student's work experience for a job opening.\n"
        f"Job title: {job.title}\n"
        f"Job description: {job.description or NOT_PROVIDED}\n"
        f"Required skills: {_skills_line(job)}\n\n"
        "Work experience:\n" + ("\n".join(entries) or NOT_PROVIDED) + "\n\n"
        "Assess how relevant the experience is, how long it is in total, and which required skills "
        f"it demonstrates. Keep the answer under 1500 characters. {_SCORE_LINE}"
    )


def bio_prompt(bio: str, job: JobRequirement) -> str:
    return (
        "You are a technical recruiter reading a student's personal bio for a job opening.\n"
        f"Job title: {job.title}\n"
        f"Required skills: {_skills_line(job)}\n\n"
        f"Bio: {bio}\n\n"
        "Assess which required skills the bio mentions or implies and how motivated the student "
        f"appears. Keep the answer under 1000 characters. {_SCORE_LINE}"
    )


def overall_prompt(profile: StudentSkillProfile, job: JobRequirement, match: SkillMatchResult) -> str:
    lines = [
        "You are a job matcher explaining how well a student fits a job.",
        "Provide a thorough explanation (max 1500 characters) covering direct skill matches, related "
        "skills, transferable knowledge, education relevance and growth potential. Be specific about "
        "strengths and gaps and give recommendations for the student. End with the overall match "
        "percentage (1-100%).",
        "",
        "JOB DETAILS:",
        f"Title: {job.title}",
        f"Description: {job.description or NOT_PROVIDED}",
        f"Required Skills: {_skills_line(job)}",
        "",
        "STUDENT DETAILS:",
        f"Skills: {', '.join(profile.skills) if profile.skills else NOT_PROVIDED}",
        f"Major: {profile.major or NOT_PROVIDED}",
        f"University: {profile.university or NOT_PROVIDED}",
        f"Graduation Year: {profile.graduation_year or NOT_PROVIDED}",
    ]
    if profile.bio:
        lines.append(f"Bio: {profile.bio}")
    if profile.certifications:
        lines.append("Certifications: " + ", ".join(f"{c.name} ({c.issuer or NOT_PROVIDED})" for c in profile.certifications))
    if profile.experiences:
        lines.append("Work Experiences: " + ", ".join(f"{e.title} at {e.company or NOT_PROVIDED}" for e in profile.experiences))
    if profile.cv_text:
        lines.append(f"CV Content: {profile.cv_text}")
    lines += [
        "",
        f"Heuristic skill match: {match.percentage:.0f}%",
        f"Missing skills: {', '.join(match.missing) if match.missing else 'None'}",
    ]
    return "\n".join(lines)


class EvidenceAnalyzer:
    """Runs each evidence facet through the provider, falling back locally on any failure."""

    def __init__(
        self,
        client: GeminiClient,
        fallback: FallbackEvidenceAnalyzer,
        *,
        narrative_limit: int | None = None,
    ) -> None:
        self.client = client
        self.fallback = fallback
        self.narrative_limit = narrative_limit or fallback.narrative_limit

    def _run(self, purpose: str, prompt: str, fallback: Callable[[], EvidenceResult]) -> EvidenceResult:
        result = self.client.complete(prompt, purpose=purpose)
        text = strip_code_fences(result.text) if result.ok else ""
        if text:
            return EvidenceResult(
                narrative=truncate_narrative(text, self.narrative_limit),
                percentage=extract_percentage(text),
                source="provider",
            )
        if result.failure is None or result.failure.kind != "not_configured":
            logger.info("Falling back to local %s", purpose)
        return fallback()

    def analyze_github(self, evidence: GitHubEvidence, job: JobRequirement) -> EvidenceResult:
        return self._run(
            "GitHub analysis", github_prompt(evidence, job), lambda: self.fallback.github(evidence, job)
        )

    def analyze_portfolio(self, evidence: PortfolioEvidence, job: JobRequirement) -> EvidenceResult:
        return self._run(
            "portfolio analysis", portfolio_prompt(evidence, job), lambda: self.fallback.portfolio(evidence, job)
        )

    def analyze_certifications(self, certs: Sequence[CertificationEvidence], job: JobRequirement) -> EvidenceResult:
        return self._run(
            "certifications analysis",
            certifications_prompt(certs, job),
            lambda: self.fallback.certifications(certs, job),
        )

    def analyze_experiences(self, experiences: Sequence[ExperienceEvidence], job: JobRequirement) -> EvidenceResult:
        return self._run(
            "work experience analysis",
            experiences_prompt(experiences, job),
            lambda: self.fallback.experiences(experiences, job),
        )

    def analyze_bio(self, bio: str, job: JobRequirement) -> EvidenceResult:
        return self._run("bio analysis", bio_prompt(bio, job), lambda: self.fallback.bio(bio, job))

    def describe_overall_match(
        self, profile: StudentSkillProfile, job: JobRequirement, match: SkillMatchResult
    ) -> EvidenceResult:
        return self._run(
            "match details",
            overall_prompt(profile, job, match),
            lambda: self.fallback.overall(profile, job, match),
        )

    def build_evidence(
        self, profile: StudentSkillProfile, job: JobRequirement, match: SkillMatchResult
    ) -> MatchEvidence:
        return MatchEvidence(
            overall=self.describe_overall_match(profile, job, match),
            github=self.analyze_github(profile.github, job) if profile.github is not None else None,
            portfolio=self.analyze_portfolio(profile.portfolio, job) if profile.portfolio is not None else None,
            certifications=(
                self.analyze_certifications(profile.certifications, job) if profile.certifications else None
            ),
            experiences=self.analyze_experiences(profile.experiences, job) if profile.experiences else None,
            bio=self.analyze_bio(profile.bio, job) if profile.bio else None,
        )
