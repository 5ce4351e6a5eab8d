from __future__ import annotations

from datetime import date

import pytest

from app.data.skill_tables import load_skill_tables
from app.services.evidence_analyzer import EvidenceAnalyzer
from app.services.evidence_fallbacks import FallbackEvidenceAnalyzer
from app.services.match_evidence import EvidenceResult, MatchEvidence, extract_percentage, truncate_narrative
from app.services.match_score_service import CompositeScoreResolver, clamp_score, parse_score
from app.services.profile_service import GitHubEvidence, JobRequirement, StudentSkillProfile
from app.services.skill_matcher import HeuristicSkillScorer
from app.services.skill_relationships import RelationshipGraph

JOB = JobRequirement(job_id=7, title="Backend Developer", skills=("Python", "Django", "Docker"))
PROFILE = StudentSkillProfile(student_id=3, skills=("Python", "Flask"), major="Computer Science")


@pytest.fixture()
def scorer() -> HeuristicSkillScorer:
    return HeuristicSkillScorer(RelationshipGraph.from_tables())


@pytest.fixture()
def fallback() -> FallbackEvidenceAnalyzer:
    tables = load_skill_tables()
    return FallbackEvidenceAnalyzer(tables, RelationshipGraph.from_tables(tables), today=lambda: date(2024, 6, 15))


def _evidence() -> MatchEvidence:
    return MatchEvidence(overall=EvidenceResult(narrative="Good fit overall. 70%"))


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("85", 85.0),
        ("  72% ", 72.0),
        ('"64"', 64.0),
        ("```\n85\n```", 85.0),
        ('{"score": 91}', 91.0),
        ('```json\n{"match_score": "58"}\n```', 58.0),
        ("150", 150.0),
        ("The score is 80", None),
        ("eighty", None),
        ("", None),
        (None, None),
        ('{"rating": 3}', None),
        ('{"score": NaN}', None),
        ('{"score": "Infinity"}', None),
        ('{"match_score": -Infinity}', None),
    ],
)
def test_parse_score(text, expected) -> None:
    assert parse_score(text) == expected


def test_clamp_score_bounds() -> None:
    assert clamp_score(0) == 1.0
    assert clamp_score(-4) == 1.0
    assert clamp_score(150) == 100.0
    assert clamp_score(42.5) == 42.5


def test_resolver_uses_provider_score(fake_client_factory, scorer) -> None:
    client = fake_client_factory({"match score": "```\n85\n```"})
    match = scorer.score_profile(PROFILE, JOB)

    resolution = CompositeScoreResolver(client).resolve(PROFILE, JOB, match, _evidence())

    assert resolution.score == 85.0
    assert resolution.source == "provider"
    purpose, prompt = client.calls[0]
    assert purpose == "match score"
    assert "Required Skills: Python, Django, Docker" in prompt
    assert "OVERALLMATCH:" in prompt


def test_resolver_clamps_out_of_range_provider_score(fake_client_factory, scorer) -> None:
    client = fake_client_factory({"match score": "150"})
    match = scorer.score_profile(PROFILE, JOB)

    assert CompositeScoreResolver(client).resolve(PROFILE, JOB, match, _evidence()).score == 100.0


def test_resolver_falls_back_on_unparseable_reply(fake_client_factory, scorer) -> None:
    client = fake_client_factory({"match score": "I think this student is a strong candidate."})
    match = scorer.score_profile(PROFILE, JOB)

    resolution = CompositeScoreResolver(client).resolve(PROFILE, JOB, match, _evidence())

    assert resolution.source == "heuristic"
    assert resolution.score == pytest.approx(round(match.percentage, 2))


def test_resolver_rejects_non_finite_provider_score(fake_client_factory, scorer) -> None:
    client = fake_client_factory({"match score": '{"score": NaN}'})
    profile = StudentSkillProfile(student_id=3, skills=("Cobol",))
    match = scorer.score_profile(profile, JOB)

    resolution = CompositeScoreResolver(client).resolve(profile, JOB, match, _evidence())

    assert resolution.source == "heuristic"
    assert resolution.score == 1.0


def test_resolver_falls_back_on_provider_failure(fake_client_factory, scorer) -> None:
    client = fake_client_factory({"match score": None})
    match = scorer.score_profile(PROFILE, JOB)

    assert CompositeScoreResolver(client).resolve(PROFILE, JOB, match, _evidence()).source == "heuristic"


def test_unconfigured_provider_uses_heuristic_with_minimum(fake_client_factory, scorer) -> None:
    client = fake_client_factory(configured=False)
    profile = StudentSkillProfile(student_id=3, skills=("Cobol",))
    match = scorer.score_profile(profile, JOB)
    assert match.percentage == 0.0

    resolution = CompositeScoreResolver(client).resolve(profile, JOB, match, _evidence())

    assert resolution.score == 1.0
    assert resolution.source == "heuristic"
    assert client.calls == []


def test_narrative_helpers() -> None:
    assert truncate_narrative("short", 10) == "short"
    assert truncate_narrative("x" * 20, 10) == "xxxxxxx..."
    assert truncate_narrative(None) == ""
    assert extract_percentage("Skills 40%, overall 65 %") == 65.0
    assert extract_percentage("no figures") is None
    assert extract_percentage("impossible 250%") is None


def test_analyzer_prefers_provider_text(fake_client_factory, fallback, scorer) -> None:
    client = fake_client_factory({"GitHub analysis": "```markdown\nSolid Django projects.\nRelevance Score: 80%\n```"})
    analyzer = EvidenceAnalyzer(client, fallback)

    result = analyzer.analyze_github(GitHubEvidence(url="https://github.com/bob", projects_raw=None), JOB)

    assert result.source == "provider"
    assert result.narrative == "Solid Django projects.\nRelevance Score: 80%"
    assert result.percentage == 80.0


def test_analyzer_falls_back_per_facet(fake_client_factory, fallback, scorer) -> None:
    client = fake_client_factory({"match details": "Great candidate, about 75% match.", "bio analysis": None})
    analyzer = EvidenceAnalyzer(client, fallback)
    profile = StudentSkillProfile(
        student_id=3,
        skills=("Python",),
        bio="I enjoy writing Python services.",
        github=GitHubEvidence(url="https://github.com/bob", projects_raw=None),
    )
    match = scorer.score_profile(profile, JOB)

    evidence = analyzer.build_evidence(profile, JOB, match)

    assert evidence.overall.source == "provider"
    assert evidence.github.source == "fallback"
    assert evidence.bio.source == "fallback"
    assert evidence.bio.narrative.startswith("## Bio Analysis")
    assert evidence.portfolio is None
    assert evidence.certifications is None

    bundle = evidence.to_bundle()
    assert set(bundle["analysisSources"]) == {"overallMatch", "githubAnalysis", "bioAnalysis"}
    assert bundle["facetPercentages"]["overallMatch"] == 75.0


def test_analyzer_bounds_provider_narrative(fake_client_factory, fallback, scorer) -> None:
    client = fake_client_factory({"match details": "word " * 1000})
    analyzer = EvidenceAnalyzer(client, fallback)
    match = scorer.score_profile(PROFILE, JOB)

    result = analyzer.describe_overall_match(PROFILE, JOB, match)

    assert len(result.narrative) == 2000
    assert result.narrative.endswith("...")
