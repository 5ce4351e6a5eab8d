from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from app.models.certification import Certification
from app.models.cv import CV
from app.models.job_match import JobMatch
from app.models.work_experience import WorkExperience
from app.services.job_match_service import (
    JobMatchForbiddenError,
    JobMatchNotFoundError,
    JobMatchService,
    StudentNotFoundError,
)
from app.services.match_guard import MatchPersistenceGuard
from app.services.match_ranker import rank_matches


@pytest.fixture()
def offline_service(db, fake_client_factory):
    def _build(client=None) -> JobMatchService:
        return JobMatchService(
            db,
            client=client or fake_client_factory(configured=False),
            today=lambda: date(2024, 6, 15),
        )

    return _build


@pytest.fixture()
def catalog(make_job):
    full_stack = make_job("Full Stack Developer", '["Java", "Spring Boot", "React", "Docker"]')
    analyst = make_job("Data Analyst", "Python, SQL, Tableau")
    make_job("Retired Role", "Java", active=False)
    return full_stack, analyst


def test_offline_matching_scores_every_active_job(offline_service, make_student, catalog) -> None:
    full_stack, analyst = catalog
    student = make_student(skills="Java, Spring, React")

    matches = offline_service().find_matches_for_student(student.id)

    assert [m.job_id for m in matches] == [full_stack.id, analyst.id]
    assert matches[0].match_score == pytest.approx(67.5)
    assert matches[1].match_score == 1.0
    assert all(m.is_viewed is False for m in matches)
    assert matches[0].match_details.startswith("## Job Match Analysis")
    analysis = matches[0].get_detailed_analysis()
    assert analysis["analysisSources"] == {"overallMatch": "fallback"}


def test_matching_is_idempotent(offline_service, make_student, db, catalog) -> None:
    student = make_student(skills="Java, Spring, React")
    service = offline_service()

    first = service.find_matches_for_student(student.id)
    second = service.find_matches_for_student(student.id)

    assert len(first) == 2
    assert second == []
    assert db.query(JobMatch).filter(JobMatch.student_id == student.id).count() == 2
    assert [m.job_id for m in service.get_matches_for_student(student.id)] == [m.job_id for m in first]


def test_existing_scores_are_never_recalculated(offline_service, make_student, db, catalog) -> None:
    full_stack, _ = catalog
    student = make_student(skills="Java, Spring, React")
    service = offline_service()
    service.find_matches_for_student(student.id)

    student.skills = "Docker"
    db.commit()
    service.find_matches_for_student(student.id)

    stored = db.query(JobMatch).filter(JobMatch.job_id == full_stack.id).one()
    assert stored.match_score == pytest.approx(67.5)


def test_identical_profiles_get_identical_scores(offline_service, make_student, catalog) -> None:
    first = make_student(skills="Python, Django", major="Computer Science")
    second = make_student(skills="Python, Django", major="Computer Science")
    service = offline_service()

    a = service.find_matches_for_student(first.id)
    b = service.find_matches_for_student(second.id)

    assert [(m.job_id, m.match_score, m.match_details) for m in a] == [
        (m.job_id, m.match_score, m.match_details) for m in b
    ]


def test_min_score_combines_existing_and_new(offline_service, make_student, make_job, catalog) -> None:
    full_stack, _ = catalog
    student = make_student(skills="Java, Spring, React")
    service = offline_service()
    service.find_matches_for_student(student.id)

    assert [m.job_id for m in service.find_matches_for_student(student.id, min_score=50)] == [full_stack.id]

    frontend = make_job("Frontend Developer", "React, CSS")
    result = service.find_matches_for_student(student.id, min_score=50)

    assert [(m.job_id, m.match_score) for m in result] == [(full_stack.id, 67.5), (frontend.id, 50.0)]


def test_failing_job_is_skipped_and_retried_later(offline_service, make_student, catalog, monkeypatch) -> None:
    full_stack, analyst = catalog
    student = make_student(skills="Java, Spring, React")
    service = offline_service()
    original = service.resolver.resolve

    def flaky(profile, job, match, evidence):
        if job.job_id == full_stack.id:
            raise RuntimeError("scoring exploded")
        return original(profile, job, match, evidence)

    monkeypatch.setattr(service.resolver, "resolve", flaky)
    first = service.find_matches_for_student(student.id)
    assert [m.job_id for m in first] == [analyst.id]

    monkeypatch.setattr(service.resolver, "resolve", original)
    second = service.find_matches_for_student(student.id)
    assert [m.job_id for m in second] == [full_stack.id]


def test_evidence_failure_skips_only_that_job(offline_service, make_student, catalog, monkeypatch) -> None:
    full_stack, analyst = catalog
    student = make_student(skills="Java, Spring, React")
    service = offline_service()
    original = service.analyzer.build_evidence

    def broken(profile, job, match):
        if job.job_id == full_stack.id:
            raise ValueError("evidence exploded")
        return original(profile, job, match)

    monkeypatch.setattr(service.analyzer, "build_evidence", broken)
    first = service.find_matches_for_student(student.id)
    assert [m.job_id for m in first] == [analyst.id]

    monkeypatch.setattr(service.analyzer, "build_evidence", original)
    second = service.find_matches_for_student(student.id)
    assert [m.job_id for m in second] == [full_stack.id]


def test_provider_answers_are_used(offline_service, fake_client_factory, make_student, make_job, db) -> None:
    job = make_job("Backend Developer", "Python, Docker")
    student = make_student(skills="Python", github_url="https://github.com/sam")
    cv = CV(student_id=student.id, parsed_resume="Built Docker images for Python services.")
    db.add(cv)
    db.commit()
    student.active_cv_id = cv.id
    db.commit()

    client = fake_client_factory(
        {
            "match details": "Strong backend fit. Overall 88%",
            "GitHub analysis": "Relevant repositories. Relevance Score: 70%",
            "match score": "88",
        }
    )
    [match] = offline_service(client).find_matches_for_student(student.id)

    assert match.job_id == job.id
    assert match.match_score == 88.0
    assert match.match_details == "Strong backend fit. Overall 88%"
    analysis = match.get_detailed_analysis()
    assert analysis["githubAnalysis"] == "Relevant repositories. Relevance Score: 70%"
    assert analysis["facetPercentages"] == {"overallMatch": 88.0, "githubAnalysis": 70.0}
    score_prompt = dict(client.calls)["match score"]
    assert "CV Content: Built Docker images for Python services." in score_prompt


def test_profile_evidence_reaches_every_facet(offline_service, make_student, make_job, db) -> None:
    make_job("Cloud Engineer", "AWS, Python, Terraform")
    student = make_student(
        skills="Python",
        bio="I am eager to learn cloud infrastructure.",
        portfolio_url="https://sam.netlify.app",
        github_projects='[{"name": "aws-lambda-demo"',
    )
    db.add(Certification(student_id=student.id, name="AWS Certified Cloud Practitioner", issuer="Amazon"))
    db.add(
        WorkExperience(
            student_id=student.id,
            title="DevOps Intern",
            company="Cloudy",
            start_date=date(2023, 6, 1),
            end_date=date(2023, 12, 1),
        )
    )
    db.commit()

    [match] = offline_service().find_matches_for_student(student.id)
    analysis = match.get_detailed_analysis()

    assert set(analysis["analysisSources"]) == {
        "overallMatch",
        "githubAnalysis",
        "portfolioAnalysis",
        "certificationsAnalysis",
        "experiencesAnalysis",
        "bioAnalysis",
    }
    assert "could not be fully parsed" in analysis["githubAnalysis"]
    assert "Total experience: 0 year(s) and 6 month(s)" in analysis["experiencesAnalysis"]
    assert "+15% for: Portfolio, Certifications, Work experience" in analysis["overallMatch"]


def test_match_details_stay_bounded(offline_service, make_student, make_job) -> None:
    skills = ", ".join(f"Skill{i:03d}" for i in range(400))
    make_job("Generalist", skills)
    student = make_student(skills="Skill000")

    [match] = offline_service().find_matches_for_student(student.id)

    assert len(match.match_details) <= 2000
    assert match.match_details.endswith("...")


def test_student_without_skills_still_gets_minimum_score(offline_service, make_student, catalog) -> None:
    student = make_student(skills=None)

    matches = offline_service().find_matches_for_student(student.id)

    assert {m.match_score for m in matches} == {1.0}


def test_unknown_student_is_reported(offline_service) -> None:
    service = offline_service()
    with pytest.raises(StudentNotFoundError):
        service.find_matches_for_student(404)
    with pytest.raises(StudentNotFoundError):
        service.get_matches_for_student(404)


def test_mark_viewed_checks_ownership(offline_service, make_student, catalog) -> None:
    owner = make_student(skills="Java")
    other = make_student(skills="Java")
    service = offline_service()
    match = service.find_matches_for_student(owner.id)[0]

    with pytest.raises(JobMatchForbiddenError):
        service.mark_viewed(match.id, other.id)
    with pytest.raises(JobMatchNotFoundError):
        service.mark_viewed(9999, owner.id)

    assert service.mark_viewed(match.id, owner.id).is_viewed is True
    assert service.mark_viewed(match.id, owner.id).is_viewed is True


def test_guard_refuses_duplicate_pair(db, make_student, make_job) -> None:
    job = make_job("QA Engineer", "Selenium")
    student = make_student()
    guard = MatchPersistenceGuard(db)

    def _match(score: float) -> JobMatch:
        return JobMatch(
            student_id=student.id,
            job_id=job.id,
            match_score=score,
            matched_at=datetime.now(timezone.utc),
            is_viewed=False,
        )

    assert guard.create_if_absent(_match(40.0)) is not None
    assert guard.create_if_absent(_match(90.0)) is None
    stored = db.query(JobMatch).filter(JobMatch.student_id == student.id).all()
    assert [m.match_score for m in stored] == [40.0]


def test_rank_matches_orders_by_score_then_job() -> None:
    matches = [
        JobMatch(job_id=3, match_score=50.0),
        JobMatch(job_id=1, match_score=80.0),
        JobMatch(job_id=2, match_score=50.0),
        JobMatch(job_id=4, match_score=10.0),
    ]

    assert [m.job_id for m in rank_matches(matches)] == [1, 2, 3, 4]
    assert [m.job_id for m in rank_matches(matches, min_score=50)] == [1, 2, 3]
