import pytest
from fastapi.testclient import TestClient

from judgehub.clients.stub import StubJudge, StubTranslator
from judgehub.repositories.stub import InMemoryContestRepository
from tests.integration.api_seed import ADMIN_HEADERS, build_test_app, seed_competition, seed_submission


class _BrokenRepository(InMemoryContestRepository):
    async def list_submissions(self):  # type: ignore[override]
        raise ConnectionError("database is gone")


class _ExplodingJudge(StubJudge):
    def list_languages(self):  # type: ignore[override]
        raise RuntimeError("unexpected judge state")


@pytest.mark.integration
def test_health_and_ready_for_api_role() -> None:
    app, _ = build_test_app()

    with TestClient(app) as client:
        assert client.get("/health").json() == {"status": "ok", "role": "api", "mode": "contest"}
        ready = client.get("/ready").json()
        assert ready["worker_loop_enabled"] is False
        assert ready["worker_loop_ready"] is True


@pytest.mark.integration
def test_submission_create_list_update_delete() -> None:
    app, _ = build_test_app()

    with TestClient(app) as client:
        created = seed_submission(client=client, time_submitted="2026-03-01T09:15:00Z")
        assert len(created["_id"]) == 26
        assert created["status"] == "Pending"
        assert created["userId"] == "u1"
        assert created["problemId"] == "p1"
        assert created["timeSubmitted"].startswith("2026-03-01T09:15:00")

        listed = client.get("/submissions").json()
        assert [item["_id"] for item in listed] == [created["_id"]]

        updated = client.patch("/submissions", json={"id": created["_id"], "status": "wrong answer"})
        assert updated.status_code == 200
        assert updated.json()["status"] == "Wrong Answer"

        deleted = client.request("DELETE", "/submissions", json={"id": created["_id"]})
        assert deleted.status_code == 200
        assert deleted.json() == {"message": f"Submission {created['_id']} deleted"}
        assert client.get("/submissions").json() == []


@pytest.mark.integration
def test_submission_without_time_header_gets_server_time() -> None:
    app, _ = build_test_app()

    with TestClient(app) as client:
        created = seed_submission(client=client)

    assert created["timeSubmitted"]


@pytest.mark.integration
@pytest.mark.parametrize(
    "payload",
    [
        {"code": "print(1)"},
        {"code": "", "language": "python", "userId": "u1", "problemId": "p1"},
        {},
    ],
)
def test_missing_fields_answer_402(payload: dict[str, str]) -> None:
    app, _ = build_test_app()

    with TestClient(app) as client:
        response = client.post("/submissions", json=payload)
        assert response.status_code == 402
        assert response.json() == {"error": "Missing all required fields."}
        assert client.get("/submissions").json() == []


@pytest.mark.integration
def test_invalid_data_answers_404() -> None:
    app, _ = build_test_app()

    with TestClient(app) as client:
        wrong_type = client.post(
            "/submissions",
            json={"code": "print(1)", "language": "python", "userId": ["u1"], "problemId": "p1"},
        )
        assert wrong_type.status_code == 404
        assert wrong_type.json() == {"error": "Invalid data received"}

        created = seed_submission(client=client)
        bad_status = client.patch("/submissions", json={"id": created["_id"], "status": "Excellent"})
        assert bad_status.status_code == 404
        assert bad_status.json() == {"error": "Invalid data received"}


@pytest.mark.integration
def test_unknown_submission_ids_leave_collection_unchanged() -> None:
    app, _ = build_test_app()

    with TestClient(app) as client:
        created = seed_submission(client=client)

        deleted = client.request("DELETE", "/submissions", json={"id": "does-not-exist"})
        assert deleted.status_code == 404
        assert deleted.json() == {"message": "Submission not found"}

        patched = client.patch("/submissions", json={"id": "does-not-exist", "status": "Accepted"})
        assert patched.status_code == 404

        missing_id = client.request("DELETE", "/submissions", json={})
        assert missing_id.status_code == 402

        assert [item["_id"] for item in client.get("/submissions").json()] == [created["_id"]]


@pytest.mark.integration
def test_submission_in_unknown_language_is_invalid_data() -> None:
    app, _ = build_test_app()

    with TestClient(app) as client:
        response = client.post(
            "/submissions",
            json={"code": "DISPLAY 'HI'.", "language": "cobol-85", "userId": "u1", "problemId": "p1"},
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Invalid data received"}
        assert client.get("/submissions").json() == []

        created = seed_submission(client=client)
        patched = client.patch("/submissions", json={"id": created["_id"], "language": "cobol-85"})
        assert patched.status_code == 404
        assert patched.json() == {"error": "Invalid data received"}

        by_id = client.post(
            "/submissions",
            json={"code": "int main() {}", "language": "54", "userId": "u1", "problemId": "p1"},
        )
        assert by_id.status_code == 201


@pytest.mark.integration
def test_submission_is_not_stored_while_judge_is_unreachable() -> None:
    app, api_deps = build_test_app(judge=StubJudge(available=False))

    with TestClient(app) as client:
        response = client.post(
            "/submissions",
            json={"code": "print(1)", "language": "python", "userId": "u1", "problemId": "p1"},
        )

    assert response.status_code == 500
    assert response.json() == {"message": "Cannot connect to the judge, please try again later."}
    assert api_deps.repository.submissions == {}


@pytest.mark.integration
def test_submission_languages_come_from_judge() -> None:
    app, _ = build_test_app()

    with TestClient(app) as client:
        languages = client.get("/submissions/languages").json()

    assert {"id": "71", "name": "Python (3.8.1)"} in languages


@pytest.mark.integration
def test_submission_languages_judge_unavailable() -> None:
    app, _ = build_test_app(judge=StubJudge(available=False))

    with TestClient(app) as client:
        response = client.get("/submissions/languages")

    assert response.status_code == 500
    assert response.json() == {"message": "Cannot connect to the judge, please try again later."}


@pytest.mark.integration
def test_competition_lifecycle_with_roles() -> None:
    app, _ = build_test_app()

    with TestClient(app) as client:
        created = seed_competition(client=client)
        assert created["name"] == "Spring Cup"
        assert created["date"] == "2026-03-01"
        assert created["time"] == "09:00:00"
        assert created["duration"] == 3.0

        updated = client.patch(
            "/competitions",
            json={"name": "Spring Cup Finals", "date": "2026-03-02", "time": "10:00:00", "duration": 2},
            headers={"X-User-Roles": "contestant, Judge"},
        )
        assert updated.status_code == 200
        assert updated.json()["_id"] == created["_id"]
        assert updated.json()["name"] == "Spring Cup Finals"

        deleted = client.delete(f"/competitions/{created['_id']}", headers=ADMIN_HEADERS)
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Competition deleted successfully"}
        assert client.get("/competitions").json() == []


@pytest.mark.integration
def test_competition_update_targets() -> None:
    app, _ = build_test_app()
    body = {"name": "Renamed", "date": "2026-04-01", "time": "12:00:00", "duration": 1.5}

    with TestClient(app) as client:
        none_yet = client.patch("/competitions", json=body, headers=ADMIN_HEADERS)
        assert none_yet.status_code == 404
        assert none_yet.json() == {"message": "Competition not found"}

        first = seed_competition(client=client, name="First")
        second = seed_competition(client=client, name="Second")

        ambiguous = client.patch("/competitions", json=body, headers=ADMIN_HEADERS)
        assert ambiguous.status_code == 409
        assert ambiguous.json() == {
            "error": "Competition id is required when more than one competition exists"
        }

        targeted = client.patch("/competitions", json={**body, "id": second["_id"]}, headers=ADMIN_HEADERS)
        assert targeted.status_code == 200
        names = {item["_id"]: item["name"] for item in client.get("/competitions").json()}
        assert names == {first["_id"]: "First", second["_id"]: "Renamed"}

        unknown = client.patch("/competitions", json={**body, "id": "nope"}, headers=ADMIN_HEADERS)
        assert unknown.status_code == 404


@pytest.mark.integration
def test_competition_changes_require_manager_role() -> None:
    app, _ = build_test_app()
    body = {"name": "Cup", "date": "2026-03-01", "time": "09:00:00", "duration": 3}

    with TestClient(app) as client:
        anonymous = client.post("/competitions", json=body)
        assert anonymous.status_code == 403
        assert anonymous.json() == {"error": "You are not authorized to create a new competition"}

        contestant = client.post("/competitions", json=body, headers={"X-User-Roles": "Contestant"})
        assert contestant.status_code == 403

        created = seed_competition(client=client)
        denied_delete = client.delete(f"/competitions/{created['_id']}")
        assert denied_delete.status_code == 403
        assert denied_delete.json() == {"error": "You are not authorized to delete this competition"}
        assert len(client.get("/competitions").json()) == 1


@pytest.mark.integration
def test_role_check_can_be_disabled() -> None:
    app, _ = build_test_app(require_competition_roles=False)
    body = {"name": "Cup", "date": "2026-03-01", "time": "09:00:00", "duration": 3}

    with TestClient(app) as client:
        assert client.post("/competitions", json=body).status_code == 201


@pytest.mark.integration
def test_competition_invalid_duration_is_invalid_data() -> None:
    app, _ = build_test_app()

    with TestClient(app) as client:
        response = client.post(
            "/competitions",
            json={"name": "Cup", "date": "2026-03-01", "time": "09:00:00", "duration": -1},
            headers=ADMIN_HEADERS,
        )

    assert response.status_code == 404
    assert response.json() == {"error": "Invalid data received"}


@pytest.mark.integration
def test_translation_flow() -> None:
    translator = StubTranslator(translations={("Hello", "en", "fr"): "Bonjour"})
    app, _ = build_test_app(translator=translator)

    with TestClient(app) as client:
        empty = client.get("/translation")
        assert empty.status_code == 404
        assert empty.json() == {"message": "No translation records found"}

        created = client.post(
            "/translation",
            json={"username": "kokinh11", "text": "Hello", "source": "en", "target": "fr"},
        )
        assert created.status_code == 201
        assert created.json() == {
            "message": "New translation record for the user kokinh11 created",
            "translation": "Bonjour",
        }
        assert translator.calls == [("Hello", "en", "fr")]

        records = client.get("/translation").json()
        assert len(records) == 1
        record = records[0]
        assert record["languageFrom"] == "en"
        assert record["translatedText"] == "Bonjour"

        by_user = client.get("/translation/username/kokinh11").json()
        assert [item["_id"] for item in by_user] == [record["_id"]]
        assert client.get("/translation/username/someone-else").status_code == 404

        by_id = client.get(f"/translation/id/{record['_id']}")
        assert by_id.status_code == 200
        assert by_id.json()["requestedText"] == "Hello"

        missing = client.get("/translation/id/missing")
        assert missing.status_code == 404
        assert missing.json() == {"message": "No translation records found"}

        languages = client.get("/translation/languages").json()
        assert {"language": "vi", "name": "Vietnamese"} in languages


@pytest.mark.integration
def test_translator_unavailable() -> None:
    app, api_deps = build_test_app(translator=StubTranslator(available=False))

    with TestClient(app) as client:
        created = client.post(
            "/translation",
            json={"username": "kokinh11", "text": "Hello", "source": "en", "target": "fr"},
        )
        assert created.status_code == 500
        assert created.json() == {
            "message": "Cannot connect to Google API to translate, please try again later"
        }

        languages = client.get("/translation/languages")
        assert languages.status_code == 500
        assert languages.json() == {"message": "Cannot connect to Google API, please try again later."}

    assert isinstance(api_deps.repository, InMemoryContestRepository)
    assert api_deps.repository.translations == {}


@pytest.mark.integration
def test_announcement_crud() -> None:
    app, _ = build_test_app()

    with TestClient(app) as client:
        created = client.post("/announcements", json={"title": "Welcome", "content": "Good luck", "author": "admin"})
        assert created.status_code == 201
        announcement = created.json()
        assert announcement["createdAt"]

        patched = client.patch("/announcements", json={"_id": announcement["_id"], "content": "Starts at 10"})
        assert patched.status_code == 200
        assert patched.json()["title"] == "Welcome"
        assert patched.json()["content"] == "Starts at 10"

        missing = client.patch("/announcements", json={"id": "nope", "title": "x"})
        assert missing.status_code == 404
        assert missing.json() == {"message": "Announcement not found"}

        assert client.post("/announcements", json={"title": "Only a title"}).status_code == 402

        deleted = client.request("DELETE", "/announcements", json={"id": announcement["_id"]})
        assert deleted.json() == {"message": f"Announcement {announcement['_id']} deleted"}
        assert client.get("/announcements").json() == []


@pytest.mark.integration
def test_scoreboard_uses_sole_competition_start() -> None:
    app, _ = build_test_app()

    with TestClient(app) as client:
        competition = seed_competition(client=client)
        wrong = seed_submission(client=client, user_id="alice", time_submitted="2026-03-01T09:10:00Z")
        client.patch("/submissions", json={"id": wrong["_id"], "status": "Wrong Answer"})
        accepted = seed_submission(client=client, user_id="alice", time_submitted="2026-03-01T09:30:00Z")
        client.patch("/submissions", json={"id": accepted["_id"], "status": "Accepted"})
        seed_submission(client=client, user_id="bob", time_submitted="2026-03-01T09:05:00Z")

        rows = client.get("/scoreboard").json()
        same = client.get("/scoreboard", params={"competition_id": competition["_id"]}).json()
        unknown = client.get("/scoreboard", params={"competition_id": "nope"})

    assert rows == same
    assert rows[0] == {"rank": 1, "userId": "alice", "solved": 1, "penalty": 50, "attempts": 2}
    assert rows[1] == {"rank": 2, "userId": "bob", "solved": 0, "penalty": 0, "attempts": 0}
    assert unknown.status_code == 404


@pytest.mark.integration
@pytest.mark.parametrize(
    ("accept", "media_type", "body"),
    [
        (None, "text/html", "<h1>404 Not Found</h1>"),
        ("text/html", "text/html", "<h1>404 Not Found</h1>"),
        ("application/json", "application/json", '{"message":"404 Not Found"}'),
        ("image/png", "text/plain", "404 Not Found"),
    ],
)
def test_unmatched_routes_negotiate_404(accept: str | None, media_type: str, body: str) -> None:
    app, _ = build_test_app()
    headers = {"Accept": accept} if accept else {"Accept": ""}

    with TestClient(app) as client:
        response = client.get("/no/such/page", headers=headers)
        wrong_method = client.put("/submissions", headers=headers)

    assert response.status_code == 404
    assert response.headers["content-type"].startswith(media_type)
    assert body in response.text
    assert wrong_method.status_code == 404


@pytest.mark.integration
def test_store_failure_answers_generic_500() -> None:
    app, _ = build_test_app(repository=_BrokenRepository())

    with TestClient(app) as client:
        response = client.get("/submissions")

    assert response.status_code == 500
    assert response.json() == {"error": "Error fetching submissions"}


@pytest.mark.integration
def test_unexpected_error_answers_generic_500() -> None:
    app, _ = build_test_app(judge=_ExplodingJudge())

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/submissions/languages")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
