from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass

from app.services.evidence_fallbacks import NOT_PROVIDED
from app.services.gemini_client import GeminiClient, strip_code_fences
from app.services.match_evidence import MatchEvidence
from app.services.profile_service import JobRequirement, StudentSkillProfile
from app.services.skill_matcher import SkillMatchResult

logger = logging.getLogger(__name__)

MIN_SCORE = 1.0
MAX_SCORE = 100.0

_NUMBER_RE = re.compile(r"[-+]?\d+(?:\.\d+)?")


@dataclass(frozen=True)
class ScoreResolution:
    score: float
    source: str  # provider | heuristic


def clamp_score(value: float) -> float:
    return max(MIN_SCORE, min(MAX_SCORE, float(value)))


def parse_score(text: str | None) -> float | None:
    """Read the provider's score reply; ``None`` if it is not a single number.

    Accepts ``85``, ``85%``, ``"85"``, a fenced block around either, or a JSON
    object with a ``score`` / ``match_score`` key.
    """
    value = strip_code_fences(text)
    if not value:
        return None

    score: float | None = None
    if value.startswith("{"):
        try:
            data = json.loads(value)
        except ValueError:
            return None
        raw = data.get("score", data.get("match_score")) if isinstance(data, dict) else None
        try:
            score = float(raw)
        except (TypeError, ValueError):
            return None
    else:
        value = value.strip().strip("\"'").strip()
        if value.endswith("%"):
            value = value[:-1].strip()
        if _NUMBER_RE.fullmatch(value):
            score = float(value)

    # json.loads and float() both accept NaN and Infinity.
    if score is None or not math.isfinite(score):
        return None
    return score


def score_prompt(
    profile: StudentSkillProfile,
    job: JobRequirement,
    match: SkillMatchResult,
    evidence: MatchEvidence,
) -> str:
    lines = [
        "You are a job matcher combining several analyses of one student into a single score.",
        "Return a match score between 1 and 100, where 100 is a perfect match.",
        "Only return the numeric score as an integer between 1 and 100, nothing else.",
        "",
        "JOB DETAILS:",
        f"Title: {job.title}",
        f"Description: {job.description or NOT_PROVIDED}",
        f"Location: {job.location or NOT_PROVIDED}",
        f"Required Skills: {', '.join(job.skills) if job.skills else NOT_PROVIDED}",
        "",
        "STUDENT DETAILS:",
        f"Skills: {', '.join(profile.skills) if profile.skills else NOT_PROVIDED}",
        f"Major: {profile.major or NOT_PROVIDED}",
        f"University: {profile.university or NOT_PROVIDED}",
    ]
    if profile.cv_text:
        lines.append(f"CV Content: {profile.cv_text}")
    lines += [
        "",
        f"HEURISTIC SKILL MATCH: {match.percentage:.0f}%",
        f"Direct matches: {', '.join(match.direct) or 'None'}",
        f"Related matches: {', '.join(match.related) or 'None'}",
        f"Framework-language matches: {', '.join(match.framework_matches) or 'None'}",
        f"Missing skills: {', '.join(match.missing) or 'None'}",
    ]
    for key, result in evidence.items():
        lines += ["", f"{key.upper()}:", result.narrative]
    lines += ["", "IMPORTANT: Return only a single number between 1-100 representing the match percentage."]
    return "\n".join(lines)


class CompositeScoreResolver:
    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    def heuristic(self, match: SkillMatchResult) -> ScoreResolution:
        return ScoreResolution(score=clamp_score(round(match.percentage, 2)), source="heuristic")

    def resolve(
        self,
        profile: StudentSkillProfile,
        job: JobRequirement,
        match: SkillMatchResult,
        evidence: MatchEvidence,
    ) -> ScoreResolution:
        if not self.client.is_configured:
            return self.heuristic(match)

        result = self.client.complete(score_prompt(profile, job, match, evidence), purpose="match score")
        if not result.ok:
            return self.heuristic(match)

        parsed = parse_score(result.text)
        if parsed is None:
            logger.warning(
                "Could not parse match score for student %s job %s from %r; using heuristic score",
                profile.student_id,
                job.job_id,
                (result.text or "")[:80],
            )
            return self.heuristic(match)
        return ScoreResolution(score=clamp_score(parsed), source="provider")
