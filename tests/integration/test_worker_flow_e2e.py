from __future__ import annotations

import asyncio
from datetime import UTC, datetime
import time

import pytest
from fastapi.testclient import TestClient

from judgehub.api.handlers.deps import ApiDeps
from judgehub.api.http_app import build_app
from judgehub.clients.stub import StubJudge, StubTranslator
from judgehub.domain.errors import DomainDependencyError
from judgehub.repositories.stub import InMemoryContestRepository
from judgehub.workers.loop import JudgeLoop
from judgehub.workers.runner import WorkerRuntimeSettings
from tests.integration.api_seed import seed_submission

FAST_SETTINGS = WorkerRuntimeSettings(poll_interval_ms=5, idle_backoff_ms=10, error_backoff_ms=10)


def _wait_for(predicate, *, timeout_seconds: float = 5.0) -> None:
    deadline = time.monotonic() + timeout_seconds
    while time.monotonic() < deadline:
        if predicate():
            return
        time.sleep(0.02)
    raise AssertionError("condition was not reached in time")


@pytest.mark.integration
def test_worker_role_judges_submissions_created_over_http() -> None:
    repository = InMemoryContestRepository()
    judge = StubJudge(verdicts={"print(2)": "Wrong Answer"})
    app = build_app(
        role="worker-judge",
        run_id="integration-worker",
        judge_loop=JudgeLoop(role="worker-judge", repository=repository, judge=judge),
        worker_runtime_settings=FAST_SETTINGS,
        api_deps=ApiDeps(repository=repository, judge=judge, translator=StubTranslator()),
    )

    with TestClient(app) as client:
        accepted = seed_submission(client=client, user_id="alice", code="print(1)")
        rejected = seed_submission(client=client, user_id="bob", code="print(2)")

        _wait_for(lambda: client.get("/ready").json()["worker_metrics"]["judged_total"] == 2)

        ready = client.get("/ready").json()
        assert ready["worker_loop_enabled"] is True
        assert ready["worker_loop_ready"] is True
        statuses = {item["_id"]: item["status"] for item in client.get("/submissions").json()}
        assert statuses == {accepted["_id"]: "Accepted", rejected["_id"]: "Wrong Answer"}

        standings = client.get("/scoreboard").json()
        assert [row["userId"] for row in standings] == ["alice", "bob"]


@pytest.mark.integration
def test_unavailable_judge_keeps_submission_queued() -> None:
    async def _run() -> None:
        repository = InMemoryContestRepository()
        judge = StubJudge(available=False)
        loop = JudgeLoop(role="worker-judge", repository=repository, judge=judge)
        created = await repository.create_submission(
            user_id="u1",
            problem_id="p1",
            code="print(1)",
            language="python",
            time_submitted=datetime.now(tz=UTC),
            status="Pending",
        )

        for _ in range(2):
            with pytest.raises(DomainDependencyError):
                await loop.run_once()
        assert repository.submissions[created.submission_id].status == "Pending"

        judge.available = True
        assert await loop.run_once() is True
        assert repository.submissions[created.submission_id].status == "Accepted"

    asyncio.run(_run())
