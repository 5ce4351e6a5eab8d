from __future__ import annotations

import os
from datetime import timedelta
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient


def pytest_configure() -> None:
    # Ensure the SQLAlchemy engine is created against sqlite for tests.
    os.environ["DB_URL"] = "sqlite:///./test.db"
    os.environ["ORM_DB_URL"] = "sqlite:///./test.db"
    os.environ["ORM_USE_MYSQL"] = "false"
    os.environ["ENVIRONMENT"] = "test"
    os.environ["JWT_SECRET"] = "test-secret"

    # Matching must never reach the real provider from the test suite.
    os.environ["GEMINI_API_KEY"] = ""
    os.environ["MATCH_JAVA_SPRING_REACT_FLOOR"] = "true"


class FakeAnalysisClient:
    """Stands in for GeminiClient; answers by purpose and records every prompt."""

    def __init__(
        self,
        responses: dict[str, Any] | None = None,
        *,
        configured: bool = True,
        default: str | None = None,
    ) -> None:
        self.responses = responses or {}
        self.configured = configured
        self.default = default
        self.calls: list[tuple[str, str]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def complete(self, prompt: str, *, purpose: str = "analysis"):
        from app.services.gemini_client import CompletionFailure, CompletionResult

        if not self.configured:
            return CompletionResult(failure=CompletionFailure(kind="not_configured", detail="no key"))
        self.calls.append((purpose, prompt))
        answer = self.responses.get(purpose, self.default)
        if isinstance(answer, CompletionResult):
            return answer
        if isinstance(answer, Exception):
            raise answer
        if answer is None:
            return CompletionResult(failure=CompletionFailure(kind="transport", detail="unreachable"))
        return CompletionResult(text=answer)


@pytest.fixture()
def fake_client_factory() -> Callable[..., FakeAnalysisClient]:
    return FakeAnalysisClient


@pytest.fixture()
def db() -> Any:
    from app.database import Base, SessionLocal, engine
    import app.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        yield session


@pytest.fixture()
def make_student(db) -> Callable[..., Any]:
    from app.models.student_profile import StudentProfile

    def _make(**fields: Any) -> StudentProfile:
        fields.setdefault("first_name", "Test")
        fields.setdefault("last_name", "Student")
        student = StudentProfile(**fields)
        db.add(student)
        db.commit()
        db.refresh(student)
        return student

    return _make


@pytest.fixture()
def make_job(db) -> Callable[..., Any]:
    from app.models.jobs import Job

    def _make(title: str, required_skills: str | None, **fields: Any) -> Job:
        fields.setdefault("description", f"{title} role")
        fields.setdefault("active", True)
        job = Job(title=title, required_skills=required_skills, **fields)
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    return _make


@pytest.fixture()
def auth_headers() -> Callable[[int], dict[str, str]]:
    from app.utils.jwt_handler import create_student_token

    def _headers(student_id: int) -> dict[str, str]:
        token = create_student_token(student_id, timedelta(minutes=5))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def client(db) -> Any:
    from app.main import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c
