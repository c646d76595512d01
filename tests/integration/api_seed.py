from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from judgehub.api.handlers.deps import ApiDeps
from judgehub.api.http_app import build_app
from judgehub.clients.stub import StubJudge, StubTranslator
from judgehub.repositories.stub import InMemoryContestRepository

ADMIN_HEADERS = {"X-User-Roles": "Admin"}


def build_test_app(
    *,
    repository: object | None = None,
    judge: StubJudge | None = None,
    translator: StubTranslator | None = None,
    require_competition_roles: bool = True,
) -> tuple[FastAPI, ApiDeps]:
    api_deps = ApiDeps(
        repository=repository if repository is not None else InMemoryContestRepository(),  # type: ignore[arg-type]
        judge=judge if judge is not None else StubJudge(),
        translator=translator if translator is not None else StubTranslator(),
        require_competition_roles=require_competition_roles,
    )
    return build_app(role="api", run_id="integration-api", api_deps=api_deps), api_deps


def seed_submission(
    *,
    client: TestClient,
    user_id: str = "u1",
    problem_id: str = "p1",
    code: str = "print(1)",
    time_submitted: str | None = None,
) -> dict[str, object]:
    headers = {"timeSubmitted": time_submitted} if time_submitted else None
    response = client.post(
        "/submissions",
        json={"code": code, "language": "python", "userId": user_id, "problemId": problem_id},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


def seed_competition(
    *,
    client: TestClient,
    name: str = "Spring Cup",
    date: str = "2026-03-01",
    time: str = "09:00:00",
    duration: float = 3.0,
) -> dict[str, object]:
    response = client.post(
        "/competitions",
        json={"name": name, "date": date, "time": time, "duration": duration},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 201
    return response.json()
