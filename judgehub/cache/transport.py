"""HTTP access to the contest API."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Protocol

import requests

logger = logging.getLogger("client")


class TransportError(Exception):
    """The request never produced an HTTP response."""


class HttpSession(Protocol):
    def request(self, method: str, url: str, **kwargs: Any) -> Any: ...


@dataclass(frozen=True)
class ApiResponse:
    status_code: int
    payload: Any

    @property
    def has_error_flag(self) -> bool:
        return isinstance(self.payload, dict) and bool(self.payload.get("isError"))


@dataclass
class ContestApiClient:
    """Thin JSON client; accepts any requests-compatible session."""

    base_url: str = "http://localhost:3500"
    session: HttpSession = field(default_factory=requests.Session)
    timeout_seconds: float | None = None
    default_headers: dict[str, str] = field(default_factory=dict)

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> ApiResponse:
        url = f"{self.base_url.rstrip('/')}{path}"
        merged_headers = {**self.default_headers, **(headers or {})}
        kwargs: dict[str, Any] = {"headers": merged_headers}
        if json is not None:
            kwargs["json"] = json
        if self.timeout_seconds is not None:
            kwargs["timeout"] = self.timeout_seconds
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            logger.warning("api request failed", extra={"path": path})
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None
        return ApiResponse(status_code=response.status_code, payload=payload)
