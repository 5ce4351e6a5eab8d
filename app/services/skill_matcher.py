# skill_matcher.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from app.services.profile_service import JobRequirement, StudentSkillProfile
from app.services.skill_parser import normalize_skill_name
from app.services.skill_relationships import RelationshipGraph


@dataclass(frozen=True)
class SkillMatchResult:
    base_percentage: float
    bonus: float
    percentage: float
    direct: tuple[str, ...]
    related: tuple[str, ...]
    framework_matches: tuple[str, ...]
    missing: tuple[str, ...]
    special_floor_applied: bool = False
    bonus_sources: tuple[str, ...] = ()


class HeuristicSkillScorer:
    DIRECT_WEIGHT = 1.0
    RELATED_WEIGHT = 0.7
    FRAMEWORK_WEIGHT = 0.5
    PROFILE_BONUS = 5.0
    FLOOR_TERMS = ("java", "spring", "react")
    FLOOR_PERCENTAGE = 60.0

    def __init__(self, graph: RelationshipGraph, *, apply_special_floor: bool = True) -> None:
        self.graph = graph
        self.apply_special_floor = apply_special_floor

    def score(self, student_skills: Sequence[str], job_skills: Sequence[str]) -> SkillMatchResult:
        students = [s.strip() for s in student_skills if s and s.strip()]
        students_l = [normalize_skill_name(s) for s in students]

        direct: list[str] = []
        related: list[str] = []
        framework: list[str] = []
        missing: list[str] = []
        total = 0.0

        for job_skill in job_skills:
            job_l = normalize_skill_name(job_skill)
            if not job_l:
                continue

            if job_l in students_l:
                direct.append(job_skill)
                total += self.DIRECT_WEIGHT
                continue

            related_to = next(
                (s for s, s_l in zip(students, students_l) if job_l in s_l or s_l in job_l),
                None,
            )
            if related_to is not None:
                related.append(f"{job_skill} (related to {related_to})")
                total += self.RELATED_WEIGHT
                continue

            via = self.graph.relationship(job_skill, students)
            if via is not None:
                framework.append(f"{job_skill} (via {via})")
                total += self.FRAMEWORK_WEIGHT
                continue

            missing.append(job_skill)

        counted = len(direct) + len(related) + len(framework) + len(missing)
        base = (total / counted) * 100.0 if counted else 0.0

        floor_applied = False
        if self.apply_special_floor and base < self.FLOOR_PERCENTAGE and self._floor_applies(students_l, job_skills):
            base = self.FLOOR_PERCENTAGE
            floor_applied = True

        base = min(100.0, max(0.0, base))
        return SkillMatchResult(
            base_percentage=base,
            bonus=0.0,
            percentage=base,
            direct=tuple(direct),
            related=tuple(related),
            framework_matches=tuple(framework),
            missing=tuple(missing),
            special_floor_applied=floor_applied,
        )

    def score_profile(self, profile: StudentSkillProfile, job: JobRequirement) -> SkillMatchResult:
        result = self.score(profile.skills, job.skills)

        sources: list[str] = []
        if profile.github is not None and profile.github.url:
            sources.append("GitHub profile")
        if profile.portfolio is not None:
            sources.append("Portfolio")
        if profile.certifications:
            sources.append("Certifications")
        if profile.experiences:
            sources.append("Work experience")

        bonus = self.PROFILE_BONUS * len(sources)
        return SkillMatchResult(
            base_percentage=result.base_percentage,
            bonus=bonus,
            percentage=min(100.0, result.base_percentage + bonus),
            direct=result.direct,
            related=result.related,
            framework_matches=result.framework_matches,
            missing=result.missing,
            special_floor_applied=result.special_floor_applied,
            bonus_sources=tuple(sources),
        )

    def _floor_applies(self, students_l: Sequence[str], job_skills: Sequence[str]) -> bool:
        jobs_l = [normalize_skill_name(s) for s in job_skills]
        return all(
            any(term in s for s in students_l) and any(term in j for j in jobs_l)
            for term in self.FLOOR_TERMS
        )
