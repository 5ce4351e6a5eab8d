from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest
from sqlalchemy import create_engine

from app.config import Settings

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "run_matching.py"


@pytest.fixture(scope="module")
def run_matching():
    spec = importlib.util.spec_from_file_location("run_matching", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_offline_client_drops_the_key_without_touching_settings(run_matching) -> None:
    config = Settings(GEMINI_API_KEY="k")

    offline = run_matching.build_client(config, offline=True)
    online = run_matching.build_client(config)

    assert offline.is_configured is False
    assert online.is_configured is True
    assert config.gemini_api_key == "k"


def test_create_missing_tables_reports_only_new_tables(run_matching) -> None:
    target = create_engine("sqlite://")

    created = run_matching.create_missing_tables(target)

    assert "job_matches" in created
    assert created == sorted(created)
    assert run_matching.create_missing_tables(target) == []


def test_requires_an_action(run_matching) -> None:
    with pytest.raises(SystemExit) as exc:
        run_matching.main([])
    assert exc.value.code == 2
