import pytest

from judgehub.domain.languages import match_judge_language
from judgehub.domain.models import JudgeLanguage

LANGUAGES = [
    JudgeLanguage(language_id="54", name="C++ (GCC 9.2.0)"),
    JudgeLanguage(language_id="62", name="Java (OpenJDK 13.0.1)"),
    JudgeLanguage(language_id="71", name="Python (3.8.1)"),
]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("language", "expected_id"),
    [
        ("71", "71"),
        ("python", "71"),
        ("  Java ", "62"),
        ("c++", "54"),
    ],
)
def test_match_judge_language_by_id_or_name_prefix(language: str, expected_id: str) -> None:
    found = match_judge_language(LANGUAGES, language)

    assert found is not None
    assert found.language_id == expected_id


@pytest.mark.unit
@pytest.mark.parametrize("language", ["cobol-85", "", "   ", "3.8"])
def test_match_judge_language_rejects_unknown_names(language: str) -> None:
    assert match_judge_language(LANGUAGES, language) is None


@pytest.mark.unit
def test_match_judge_language_accepts_generators() -> None:
    found = match_judge_language((item for item in LANGUAGES), "java")

    assert found == LANGUAGES[1]
