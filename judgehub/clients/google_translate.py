"""Google Cloud Translation (v2 REST) client."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

import requests

from judgehub.domain.errors import DomainDependencyError
from judgehub.domain.models import TranslationLanguage

logger = logging.getLogger("runtime")

GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"


@dataclass
class GoogleTranslateClient:
    api_key: str
    base_url: str = GOOGLE_TRANSLATE_URL
    display_language: str = "en"
    timeout_seconds: float = 10.0
    session: requests.Session = field(default_factory=requests.Session)

    def _post(self, path: str, body: dict[str, str]) -> dict[str, object]:
        try:
            response = self.session.post(
                f"{self.base_url}{path}",
                params={"key": self.api_key},
                json=body,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("translation request failed", extra={"path": path or "/"})
            raise DomainDependencyError(f"translation request failed: {exc}") from exc
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise DomainDependencyError("translation service returned no data")
        return data

    def translate(self, *, text: str, source: str, target: str) -> str:
        data = self._post("", {"q": text, "source": source, "target": target, "format": "text"})
        translations = data.get("translations")
        if not isinstance(translations, list) or not translations:
            raise DomainDependencyError("translation service returned no translations")
        first = translations[0] if isinstance(translations[0], dict) else {}
        translated = first.get("translatedText")
        if not isinstance(translated, str):
            raise DomainDependencyError("translation service returned no translated text")
        return translated

    def list_languages(self) -> list[TranslationLanguage]:
        data = self._post("/languages", {"target": self.display_language})
        languages = data.get("languages")
        if not isinstance(languages, list):
            raise DomainDependencyError("translation service returned no languages")
        return [
            TranslationLanguage(language=str(item["language"]), name=str(item.get("name", item["language"])))
            for item in languages
            if isinstance(item, dict) and "language" in item
        ]
