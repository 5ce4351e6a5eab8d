from __future__ import annotations

from typing import Iterable

from app.models.job_match import JobMatch


def rank_matches(matches: Iterable[JobMatch], min_score: float | None = None) -> list[JobMatch]:
    """Sort by score, highest first; ties keep a stable job order."""
    selected = [m for m in matches if min_score is None or float(m.match_score) >= min_score]
    return sorted(selected, key=lambda m: (-float(m.match_score), m.job_id))
