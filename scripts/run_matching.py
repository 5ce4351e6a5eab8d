from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def _bootstrap_import_path() -> None:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_bootstrap_import_path()

from sqlalchemy import inspect  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402

from app.config import Settings, settings  # noqa: E402
from app.database import Base, SessionLocal, engine, mask_db_url  # noqa: E402
from app.logging_config import configure_logging  # noqa: E402
from app.services.gemini_client import GeminiClient  # noqa: E402
from app.services.job_match_service import JobMatchService, StudentNotFoundError  # noqa: E402
import app.models  # noqa: F401,E402  # registers every table on Base.metadata

logger = logging.getLogger("scripts.run_matching")


def build_client(config: Settings, *, offline: bool = False) -> GeminiClient:
    if offline:
        config = config.model_copy(update={"gemini_api_key": None})
    return GeminiClient.from_settings(config)


def create_missing_tables(bind: Engine) -> list[str]:
    """Create any matching-engine tables the database lacks and return their names."""
    existing = set(inspect(bind).get_table_names())
    Base.metadata.create_all(bind=bind)
    return sorted(name for name in Base.metadata.tables if name not in existing)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run one matching pass for a student and print the ranked matches.")
    parser.add_argument("--student-id", type=int, default=None, help="student_profiles.id to match")
    parser.add_argument("--min-score", type=float, default=None, help="Also list existing matches at or above this score")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Ignore GEMINI_API_KEY and score with local heuristics only",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables in the configured database before matching",
    )
    args = parser.parse_args(argv)
    if args.student_id is None and not args.create_tables:
        parser.error("give --student-id, --create-tables, or both")

    configure_logging(settings)

    if args.create_tables:
        created = create_missing_tables(engine)
        logger.info(
            "Tables on %s: created %s",
            mask_db_url(str(engine.url)),
            ", ".join(created) if created else "nothing (all present)",
        )
    if args.student_id is None:
        return 0

    client = build_client(settings, offline=args.offline)
    with SessionLocal() as db:
        service = JobMatchService(db, client=client, settings=settings)
        try:
            matches = service.find_matches_for_student(args.student_id, min_score=args.min_score)
        except StudentNotFoundError as exc:
            logger.error("%s", exc)
            return 1

        if not matches:
            print("no new matches")
            return 0
        for match in matches:
            title = match.job.title if match.job is not None else "?"
            print(f"{match.match_score:6.1f}  job={match.job_id:<6} {title}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
