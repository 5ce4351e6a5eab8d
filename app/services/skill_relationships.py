# skill_relationships.py
from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Mapping, Sequence

from app.data.skill_tables import SkillTables, load_skill_tables


@lru_cache(maxsize=2048)
def _term_pattern(term: str) -> re.Pattern[str]:
    return re.compile(r"(?<![a-z0-9])" + re.escape(term) + r"(?![a-z0-9])")


def contains_term(text: str, term: str) -> bool:
    """True when ``term`` occurs in ``text`` as a whole token (case-insensitive).

    "node.js" contains "node" and "js"; "django" does not contain "go";
    "javascript" does not contain "java".
    """
    text_l = (text or "").lower()
    term_l = (term or "").strip().lower()
    if not text_l or not term_l:
        return False
    return _term_pattern(term_l).search(text_l) is not None


def terms_overlap(first: str, second: str) -> bool:
    return contains_term(first, second) or contains_term(second, first)


class RelationshipGraph:
    """Framework -> language lookup over the static framework table.

    Keys and tokens are matched with :func:`terms_overlap`, so "React Native",
    "react" and "React.js" all reach the react entries.
    """

    def __init__(self, framework_languages: Mapping[str, Sequence[str]]) -> None:
        self._table = framework_languages

    @classmethod
    def from_tables(cls, tables: SkillTables | None = None) -> "RelationshipGraph":
        return cls((tables or load_skill_tables()).framework_languages)

    def implies_languages(self, framework_token: str) -> frozenset[str]:
        token = (framework_token or "").strip().lower()
        if not token:
            return frozenset()
        languages: set[str] = set()
        for key, implied in self._table.items():
            if terms_overlap(token, key):
                languages.update(implied)
        return frozenset(languages)

    def frameworks_for_language(self, language_token: str) -> frozenset[str]:
        token = (language_token or "").strip().lower()
        if not token:
            return frozenset()
        return frozenset(
            key for key, implied in self._table.items() if any(terms_overlap(token, lang) for lang in implied)
        )

    def relationship(self, job_skill: str, student_skills: Iterable[str]) -> str | None:
        """Return the student skill that earns framework-language credit for ``job_skill``.

        Checks both directions: the job asks for a framework whose language the
        student knows, or the job asks for a language one of the student's
        frameworks is built on.
        """
        candidates = [s for s in student_skills if s and s.strip()]
        if not candidates:
            return None

        languages = self.implies_languages(job_skill)
        if languages:
            for student_skill in candidates:
                if any(contains_term(student_skill, lang) for lang in languages):
                    return student_skill

        frameworks = self.frameworks_for_language(job_skill)
        if frameworks:
            for student_skill in candidates:
                if any(contains_term(student_skill, fw) for fw in frameworks):
                    return student_skill
        return None
