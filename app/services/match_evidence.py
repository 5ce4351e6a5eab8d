from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

DEFAULT_NARRATIVE_LIMIT = 2000
ELLIPSIS = "..."

_PERCENT_RE = re.compile(r"(\d{1,3}(?:\.\d+)?)\s*%")

FACET_KEYS = (
    "overallMatch",
    "githubAnalysis",
    "portfolioAnalysis",
    "certificationsAnalysis",
    "experiencesAnalysis",
    "bioAnalysis",
)


def truncate_narrative(text: str | None, limit: int = DEFAULT_NARRATIVE_LIMIT) -> str:
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def extract_percentage(text: str | None) -> float | None:
    """Last ``NN%`` figure in a narrative, which is where the prompts ask for it."""
    if not text:
        return None
    found = _PERCENT_RE.findall(text)
    if not found:
        return None
    value = float(found[-1])
    return value if 0.0 <= value <= 100.0 else None


@dataclass(frozen=True)
class EvidenceResult:
    narrative: str
    percentage: float | None = None
    source: str = "fallback"  # provider | fallback


@dataclass(frozen=True)
class MatchEvidence:
    overall: EvidenceResult
    github: EvidenceResult | None = None
    portfolio: EvidenceResult | None = None
    certifications: EvidenceResult | None = None
    experiences: EvidenceResult | None = None
    bio: EvidenceResult | None = None

    def items(self) -> list[tuple[str, EvidenceResult]]:
        pairs = zip(
            FACET_KEYS,
            (self.overall, self.github, self.portfolio, self.certifications, self.experiences, self.bio),
        )
        return [(key, result) for key, result in pairs if result is not None]

    def to_bundle(self) -> dict[str, Any]:
        bundle: dict[str, Any] = {key: result.narrative for key, result in self.items()}
        bundle["analysisSources"] = {key: result.source for key, result in self.items()}
        bundle["facetPercentages"] = {
            key: result.percentage for key, result in self.items() if result.percentage is not None
        }
        return bundle
