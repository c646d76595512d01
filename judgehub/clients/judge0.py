"""Judge0-compatible code execution client."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

import requests

from judgehub.domain.errors import DomainDependencyError, InvalidDataError
from judgehub.domain.languages import match_judge_language
from judgehub.domain.models import JudgeLanguage
from judgehub.domain.verdicts import verdict_from_judge_status

logger = logging.getLogger("runtime")


@dataclass
class Judge0Client:
    base_url: str
    api_key: str | None = None
    timeout_seconds: float = 30.0
    session: requests.Session = field(default_factory=requests.Session)
    _languages: list[JudgeLanguage] | None = field(default=None, init=False, repr=False)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-Auth-Token"] = self.api_key
        return headers

    def _request(self, method: str, path: str, **kwargs: object) -> object:
        url = f"{self.base_url.rstrip('/')}{path}"
        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout_seconds,
                **kwargs,
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("judge request failed", extra={"path": path})
            raise DomainDependencyError(f"judge request failed: {exc}") from exc

    def list_languages(self) -> list[JudgeLanguage]:
        if self._languages is None:
            payload = self._request("GET", "/languages")
            if not isinstance(payload, list):
                raise DomainDependencyError("judge returned an unexpected languages payload")
            self._languages = [
                JudgeLanguage(language_id=str(item["id"]), name=str(item["name"]))
                for item in payload
                if isinstance(item, dict) and "id" in item and "name" in item
            ]
        return list(self._languages)

    def resolve_language_id(self, language: str) -> str:
        """Accepts a judge language id or a name prefix such as "python"."""
        found = match_judge_language(self.list_languages(), language)
        if found is not None:
            return found.language_id
        raise InvalidDataError(f"unsupported language: {language}")

    def judge(self, *, code: str, language: str) -> str:
        payload = self._request(
            "POST",
            "/submissions?base64_encoded=false&wait=true",
            json={
                "source_code": code,
                "language_id": int(self.resolve_language_id(language)),
            },
        )
        status = payload.get("status") if isinstance(payload, dict) else None
        description = status.get("description") if isinstance(status, dict) else None
        if not isinstance(description, str):
            raise DomainDependencyError("judge returned no status description")
        return verdict_from_judge_status(description).value
