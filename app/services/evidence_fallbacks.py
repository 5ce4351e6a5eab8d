# evidence_fallbacks.py
"""Deterministic, offline versions of every evidence analysis.

These run whenever the external provider is unavailable. They only use the
static keyword tables, never raise on missing or partial profile data, and
always return a bounded narrative.
"""
from __future__ import annotations

import math
from datetime import date
from typing import Callable, Iterable, Sequence
from urllib.parse import urlparse

from app.data.skill_tables import SkillTables
from app.services.match_evidence import DEFAULT_NARRATIVE_LIMIT, EvidenceResult, truncate_narrative
from app.services.profile_service import (
    CertificationEvidence,
    ExperienceEvidence,
    GitHubEvidence,
    JobRequirement,
    PortfolioEvidence,
    StudentSkillProfile,
)
from app.services.skill_matcher import HeuristicSkillScorer, SkillMatchResult
from app.services.skill_relationships import RelationshipGraph, contains_term, terms_overlap

NOT_PROVIDED = "Not provided"
PORTFOLIO_CAP = 75
GITHUB_LOW_MATCH = 50


def _overlaps(first: str, second: str) -> bool:
    a, b = first.strip().lower(), second.strip().lower()
    return bool(a and b) and (a in b or b in a)


def _credit(skill: str, via: str, label: str = "via") -> str:
    return skill if via.strip().lower() == skill.strip().lower() else f"{skill} ({label} {via})"


def _round_pct(value: float) -> int:
    # Half-up, so 62.5 reports as 63 regardless of float banker's rounding.
    return int(math.floor(value + 0.5))


def _bullets(items: Iterable[str], empty: str = "None") -> list[str]:
    lines = [f"- {item}" for item in items]
    return lines or [f"- {empty}"]


def _fmt_date(value: date | None) -> str:
    return value.isoformat() if value else NOT_PROVIDED


def months_between(start: date, end: date) -> int:
    return max(0, (end.year - start.year) * 12 + (end.month - start.month))


def format_duration(total_months: int) -> str:
    years, months = divmod(max(0, total_months), 12)
    return f"{years} year(s) and {months} month(s)"


class FallbackEvidenceAnalyzer:
    def __init__(
        self,
        tables: SkillTables,
        graph: RelationshipGraph,
        *,
        narrative_limit: int = DEFAULT_NARRATIVE_LIMIT,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.tables = tables
        self.graph = graph
        self.narrative_limit = narrative_limit
        self.today = today

    def _result(self, lines: Sequence[str], percentage: float | None) -> EvidenceResult:
        return EvidenceResult(
            narrative=truncate_narrative("\n".join(lines), self.narrative_limit),
            percentage=percentage,
            source="fallback",
        )

    # GitHub

    def github(self, evidence: GitHubEvidence, job: JobRequirement) -> EvidenceResult:
        combined = " ".join(
            part for part in (evidence.url, evidence.projects_raw, " ".join(evidence.project_names)) if part
        ).lower()
        detected = [kw for kw in self.tables.github_tech_keywords if contains_term(combined, kw)]

        direct: list[str] = []
        related: list[str] = []
        framework: list[str] = []
        missing: list[str] = []
        weighted = 0.0
        for skill in job.skills:
            if contains_term(combined, skill):
                direct.append(skill)
                weighted += HeuristicSkillScorer.DIRECT_WEIGHT
                continue
            near = next((kw for kw in detected if terms_overlap(skill, kw)), None)
            if near is not None:
                related.append(f"{skill} (related to {near})")
                weighted += HeuristicSkillScorer.RELATED_WEIGHT
                continue
            via = self.graph.relationship(skill, detected)
            if via is not None:
                framework.append(f"{skill} (via {via})")
                weighted += HeuristicSkillScorer.FRAMEWORK_WEIGHT
                continue
            missing.append(skill)

        pct = min(100, _round_pct(weighted / len(job.skills) * 100)) if job.skills else 0

        lines = [
            "## GitHub Profile Analysis",
            f"GitHub URL: {evidence.url or NOT_PROVIDED}",
            f"Projects: {', '.join(evidence.project_names) if evidence.project_names else NOT_PROVIDED}",
        ]
        if evidence.projects_malformed:
            lines.append("Note: project data could not be fully parsed; only recoverable names were used.")
        lines += ["", "### Technologies Detected", *_bullets(detected, "No recognizable technologies found")]
        lines += [
            "",
            "### Skill Match Analysis",
            "Direct Matches:", *_bullets(direct),
            "Related Matches:", *_bullets(related),
            "Framework-Language Matches:", *_bullets(framework),
            "Missing Skills:", *_bullets(missing),
            "",
            "### Recommendations",
        ]
        if pct < GITHUB_LOW_MATCH:
            for skill in (missing or list(job.skills))[:2]:
                lines.append(f"- Create a repository that demonstrates {skill}.")
            lines.append("- Add README files explaining the technologies and purpose of each project.")
            lines.append("- Pin the projects most relevant to this role on your GitHub profile.")
        else:
            lines.append("- Keep your most relevant repositories active and well documented.")
            lines.append("- Highlight the projects that use the job's required technologies.")
        lines += ["", f"GitHub evidence covers approximately {pct}% of the job requirements."]
        return self._result(lines, float(pct))

    # Portfolio

    def portfolio(self, evidence: PortfolioEvidence, job: JobRequirement) -> EvidenceResult:
        url_l = evidence.url.lower()
        try:
            domain = urlparse(evidence.url if "://" in evidence.url else f"//{evidence.url}").hostname
        except ValueError:
            domain = None
        domain = domain or evidence.url

        observations: list[str] = []
        likely: list[str] = []
        for hosts, note, skills in self.tables.portfolio_host_hints:
            if any(h in url_l for h in hosts):
                observations.append(note)
                likely.extend(s for s in skills if s not in likely)
        for keywords, skills in self.tables.portfolio_url_keywords:
            if any(contains_term(url_l, k) for k in keywords):
                likely.extend(s for s in skills if s not in likely)

        matched: list[str] = []
        for skill in job.skills:
            if contains_term(url_l, skill):
                matched.append(skill)
                continue
            via = next((s for s in likely if terms_overlap(skill, s)), None)
            if via is not None:
                matched.append(_credit(skill, via, "potentially via"))

        lines = [
            "## Portfolio Analysis",
            f"Portfolio URL: {evidence.url}",
            f"Domain: {domain}",
            "",
            "### Hosting Observations",
            *_bullets(observations, "No known hosting platform detected"),
            "",
            "### Likely Technologies",
            *_bullets(likely, "Unable to infer technologies from the URL"),
            "",
            "### Potential Skill Matches",
            *_bullets(matched, "No required skills could be linked to the portfolio URL"),
            "",
        ]
        if matched and job.skills:
            pct = min(PORTFOLIO_CAP, _round_pct(len(matched) / len(job.skills) * 100))
            lines.append(f"Estimated portfolio relevance: approximately {pct}% (low confidence).")
            percentage: float | None = float(pct)
        else:
            lines.append("Estimated portfolio relevance: Unable to determine automatically.")
            percentage = None
        lines.append(
            "Note: this is a basic analysis of the portfolio URL only. "
            "Review the portfolio content directly for an accurate assessment."
        )
        return self._result(lines, percentage)

    # Certifications

    def certifications(self, certs: Sequence[CertificationEvidence], job: JobRequirement) -> EvidenceResult:
        lines = ["## Certifications Analysis", "", "### Certifications"]
        domains: list[str] = []
        for cert in certs:
            entry = cert.name
            if cert.issuer:
                entry += f" ({cert.issuer})"
            if cert.date_received:
                entry += f" - {cert.date_received.isoformat()}"
                if cert.expiry_date:
                    entry += f" to {cert.expiry_date.isoformat()}"
            lines.append(f"- {entry}")

            text = f"{cert.name} {cert.issuer or ''}".lower()
            for keyword, skills in self.tables.certification_skills.items():
                if contains_term(text, keyword):
                    domains.extend(s for s in skills if s not in domains)
        if not certs:
            lines.append(f"- {NOT_PROVIDED}")

        matched: list[str] = []
        unmatched: list[str] = []
        cert_text = " ".join(f"{c.name} {c.issuer or ''}" for c in certs).lower()
        for skill in job.skills:
            via = next((d for d in domains if terms_overlap(skill, d)), None)
            if via is not None:
                matched.append(_credit(skill, via))
            elif contains_term(cert_text, skill):
                matched.append(skill)
            else:
                unmatched.append(skill)

        recommendations: list[str] = []
        for skill in unmatched:
            for keywords, cert_name in self.tables.certification_recommendations:
                if any(contains_term(skill, k) for k in keywords) and cert_name not in recommendations:
                    recommendations.append(cert_name)

        pct = min(100, _round_pct(len(matched) / len(job.skills) * 100)) if job.skills else 0
        lines += [
            "",
            "### Validated Skill Domains",
            *_bullets(domains, "No known skill domains recognised"),
            "",
            "### Job Skills Covered",
            *_bullets(matched),
            "",
            "### Recommended Certifications",
            *_bullets(recommendations, "Current certifications appear sufficient for this role"),
            "",
            f"Certifications validate approximately {pct}% of the job requirements.",
        ]
        return self._result(lines, float(pct))

    # Work experience

    def experiences(self, experiences: Sequence[ExperienceEvidence], job: JobRequirement) -> EvidenceResult:
        today = self.today()
        total_months = 0
        lines = ["## Work Experience Analysis", "", "### Positions"]
        role_skills: list[str] = []
        texts: list[str] = []
        for exp in experiences:
            end_label = "Present" if exp.current or exp.end_date is None else exp.end_date.isoformat()
            start_label = _fmt_date(exp.start_date)
            lines.append(f"- {exp.title} at {exp.company or NOT_PROVIDED} ({start_label} to {end_label})")
            if exp.description:
                lines.append(f"  {exp.description}")

            if exp.start_date is not None:
                end = today if exp.current or exp.end_date is None else exp.end_date
                total_months += months_between(exp.start_date, end)

            text = f"{exp.title} {exp.description or ''}".lower()
            texts.append(text)
            for keyword, skills in self.tables.role_skills.items():
                if contains_term(text, keyword):
                    role_skills.extend(s for s in skills if s not in role_skills)
        if not experiences:
            lines.append(f"- {NOT_PROVIDED}")

        matched: list[str] = []
        for skill in job.skills:
            if any(contains_term(t, skill) for t in texts):
                matched.append(skill)
                continue
            via = next((s for s in role_skills if terms_overlap(skill, s)), None)
            if via is not None:
                matched.append(_credit(skill, via))

        if total_months >= 24:
            qualifier = "Substantial"
        elif total_months >= 12:
            qualifier = "Moderate"
        else:
            qualifier = "Limited (less than 1 year)"

        pct = min(100, _round_pct(len(matched) / len(job.skills) * 100)) if job.skills else 0
        lines += [
            "",
            f"Total experience: {format_duration(total_months)}",
            f"Experience level: {qualifier}",
            "",
            "### Skills Demonstrated Through Experience",
            *_bullets(role_skills, "No role keywords recognised"),
            "",
            "### Job Skills Applied In Previous Roles",
            *_bullets(matched),
            "",
            f"Work experience reflects approximately {pct}% of the job requirements.",
        ]
        return self._result(lines, float(pct))

    # Bio

    def bio(self, bio: str, job: JobRequirement) -> EvidenceResult:
        bio_l = bio.lower()
        words = {w.strip(".,;:!?()\"'").lower() for w in bio.split()}
        words = {w for w in words if len(w) > 3}

        skills = [s.strip() for s in job.skills if s.strip()]
        direct = [s for s in skills if contains_term(bio_l, s)]
        partial = [s for s in skills if s not in direct and any(terms_overlap(w, s) for w in words)]
        passion = [w for w in self.tables.passion_words if contains_term(bio_l, w)]

        score = (len(direct) + 0.5 * len(partial)) / len(skills) * 100 if skills else 0.0
        pct = min(100, _round_pct(score))

        lines = [
            "## Bio Analysis",
            "",
            "### Skills Mentioned",
            *_bullets(direct),
            "### Partially Related Terms",
            *_bullets(partial),
            "### Enthusiasm Indicators",
            *_bullets(passion, "No enthusiasm indicators found"),
            "",
            "### Recommendations",
        ]
        if pct < 30:
            lines.append("- Mention the job's key technologies and how you have used them.")
            lines.append("- Describe a project or achievement related to this role.")
        elif pct < 60:
            lines.append("- Add concrete examples of work with the required skills.")
        else:
            lines.append("- The bio aligns well with this role; keep it concise and current.")
        lines += ["", f"The bio reflects approximately {pct}% of the job requirements."]
        return self._result(lines, float(pct))

    # Overall

    def overall(self, profile: StudentSkillProfile, job: JobRequirement, match: SkillMatchResult) -> EvidenceResult:
        pct = _round_pct(match.percentage)
        lines = [
            "## Job Match Analysis",
            "",
            "### Job Details",
            f"Title: {job.title or NOT_PROVIDED}",
            f"Required Skills: {', '.join(job.skills) if job.skills else NOT_PROVIDED}",
            "",
            "### Student Skills",
            ", ".join(profile.skills) if profile.skills else NOT_PROVIDED,
            "",
        ]
        if match.special_floor_applied:
            lines += [
                "### Special Match Bonus",
                "Java, Spring and React are required and present; a minimum match of 60% applies.",
                "",
            ]
        if match.bonus_sources:
            lines += [
                "### Profile Strength Bonus",
                f"+{_round_pct(match.bonus)}% for: {', '.join(match.bonus_sources)}",
                "",
            ]
        lines += [
            "### Skill Match Analysis",
            "Direct Matches:", *_bullets(match.direct),
            "Related Matches:", *_bullets(match.related),
            "Framework-Language Relationships:", *_bullets(match.framework_matches),
            "Missing Skills:", *_bullets(match.missing),
            "",
            "### Education Relevance",
        ]
        if profile.major:
            major_l = profile.major.lower()
            relevant = _overlaps(major_l, job.title) or any(_overlaps(major_l, s) for s in job.skills)
            if relevant:
                lines.append(f"The major in {profile.major} is directly relevant to this role.")
            else:
                lines.append(f"The major in {profile.major} provides a general foundation for this role.")
        else:
            lines.append(f"Major: {NOT_PROVIDED}")
        lines += ["", "### Recommendations"]
        if match.missing:
            lines += [f"- Build experience with {skill}." for skill in match.missing[:3]]
        else:
            lines.append("- The profile covers every required skill; highlight them in your application.")
        lines += ["", f"Overall Match: the student meets approximately {pct}% of the job requirements."]
        return self._result(lines, float(pct))
