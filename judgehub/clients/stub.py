from __future__ import annotations

from dataclasses import dataclass, field

from judgehub.domain.errors import DomainDependencyError
from judgehub.domain.models import JudgeLanguage, TranslationLanguage
from judgehub.domain.verdicts import Verdict


def _default_judge_languages() -> list[JudgeLanguage]:
    return [
        JudgeLanguage(language_id="54", name="C++ (GCC 9.2.0)"),
        JudgeLanguage(language_id="62", name="Java (OpenJDK 13.0.1)"),
        JudgeLanguage(language_id="71", name="Python (3.8.1)"),
    ]


def _default_translation_languages() -> list[TranslationLanguage]:
    return [
        TranslationLanguage(language="en", name="English"),
        TranslationLanguage(language="fr", name="French"),
        TranslationLanguage(language="es", name="Spanish"),
        TranslationLanguage(language="vi", name="Vietnamese"),
    ]


@dataclass
class StubJudge:
    languages: list[JudgeLanguage] = field(default_factory=_default_judge_languages)
    verdicts: dict[str, str] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    available: bool = True

    def judge(self, *, code: str, language: str) -> str:
        if not self.available:
            raise DomainDependencyError("judge is unavailable")
        self.calls.append((code, language))
        if code in self.verdicts:
            return self.verdicts[code]
        if not code.strip():
            return Verdict.COMPILATION_ERROR.value
        return Verdict.ACCEPTED.value

    def list_languages(self) -> list[JudgeLanguage]:
        if not self.available:
            raise DomainDependencyError("judge is unavailable")
        return list(self.languages)


@dataclass
class StubTranslator:
    languages: list[TranslationLanguage] = field(default_factory=_default_translation_languages)
    translations: dict[tuple[str, str, str], str] = field(default_factory=dict)
    calls: list[tuple[str, str, str]] = field(default_factory=list)
    available: bool = True

    def translate(self, *, text: str, source: str, target: str) -> str:
        if not self.available:
            raise DomainDependencyError("translator is unavailable")
        key = (text, source, target)
        self.calls.append(key)
        # Deterministic pseudo-translation in stub mode.
        return self.translations.get(key, f"[{target}] {text}")

    def list_languages(self) -> list[TranslationLanguage]:
        if not self.available:
            raise DomainDependencyError("translator is unavailable")
        return list(self.languages)
