from __future__ import annotations

from collections.abc import Iterable

from judgehub.domain.models import JudgeLanguage


def match_judge_language(languages: Iterable[JudgeLanguage], language: str) -> JudgeLanguage | None:
    """Finds a judge language by exact id, then by case-insensitive name prefix."""
    wanted = language.strip().lower()
    if not wanted:
        return None
    candidates = list(languages)
    for item in candidates:
        if item.language_id == wanted:
            return item
    for item in candidates:
        if item.name.lower().startswith(wanted):
            return item
    return None
