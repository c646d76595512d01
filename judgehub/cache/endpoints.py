"""Query and mutation definitions with their cache tags."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, NamedTuple

from judgehub.cache.adapter import EntityAdapter

LIST_ID = "LIST"


class Tag(NamedTuple):
    type: str
    id: str = LIST_ID


def list_tag(tag_type: str) -> Tag:
    return Tag(tag_type, LIST_ID)


@dataclass(frozen=True)
class QueryDefinition:
    name: str
    path: str
    tag_type: str
    adapter: EntityAdapter = field(default_factory=EntityAdapter)

    def provided_tags(self, ids: tuple[str, ...]) -> frozenset[Tag]:
        return frozenset({list_tag(self.tag_type), *(Tag(self.tag_type, item_id) for item_id in ids)})


InvalidatesFn = Callable[[Mapping[str, Any], Any], list[Tag]]


@dataclass(frozen=True)
class MutationDefinition:
    name: str
    method: str
    path: str | Callable[[Mapping[str, Any]], str]
    invalidates: InvalidatesFn
    send_body: bool = True
    headers: Callable[[], dict[str, str]] | None = None

    def build_path(self, arg: Mapping[str, Any]) -> str:
        if callable(self.path):
            return self.path(arg)
        return self.path

    def build_headers(self) -> dict[str, str]:
        return self.headers() if self.headers is not None else {}


def _invalidate_list(*tag_types: str) -> InvalidatesFn:
    def invalidates(arg: Mapping[str, Any], result: Any) -> list[Tag]:
        del arg, result
        return [list_tag(tag_type) for tag_type in tag_types]

    return invalidates


def _invalidate_record(tag_type: str, *also: str) -> InvalidatesFn:
    def invalidates(arg: Mapping[str, Any], result: Any) -> list[Tag]:
        del result
        record_id = arg.get("id") or arg.get("_id")
        tags = [list_tag(extra) for extra in also]
        if record_id is None:
            return [list_tag(tag_type), *tags]
        return [Tag(tag_type, str(record_id)), *tags]

    return invalidates


def _invalidate_result_record(tag_type: str, *also: str) -> InvalidatesFn:
    # Updates without an explicit id address whichever record the server picked.
    def invalidates(arg: Mapping[str, Any], result: Any) -> list[Tag]:
        record_id = arg.get("id") or arg.get("_id")
        if record_id is None and isinstance(result, Mapping):
            record_id = result.get("_id")
        tags = [list_tag(extra) for extra in also]
        if record_id is None:
            return [list_tag(tag_type), *tags]
        return [Tag(tag_type, str(record_id)), *tags]

    return invalidates


def _time_submitted_header() -> dict[str, str]:
    return {"timeSubmitted": datetime.now(tz=UTC).isoformat()}


QUERIES: dict[str, QueryDefinition] = {
    "getSubmissions": QueryDefinition("getSubmissions", "/submissions", "Submission"),
    "getSubmissionLanguages": QueryDefinition(
        "getSubmissionLanguages",
        "/submissions/languages",
        "SubmissionLanguages",
    ),
    "getCompetitions": QueryDefinition("getCompetitions", "/competitions", "Competition"),
    "getTranslations": QueryDefinition("getTranslations", "/translation", "Translation"),
    "getAnnouncements": QueryDefinition("getAnnouncements", "/announcements", "Announcement"),
    "getScoreboard": QueryDefinition(
        "getScoreboard",
        "/scoreboard",
        "Scoreboard",
        adapter=EntityAdapter(select_id=lambda record: record.get("userId")),
    ),
}

MUTATIONS: dict[str, MutationDefinition] = {
    "addNewSubmission": MutationDefinition(
        "addNewSubmission",
        "POST",
        "/submissions",
        _invalidate_list("Submission", "Scoreboard"),
        headers=_time_submitted_header,
    ),
    "updateSubmission": MutationDefinition(
        "updateSubmission",
        "PATCH",
        "/submissions",
        _invalidate_record("Submission", "Scoreboard"),
    ),
    "deleteSubmission": MutationDefinition(
        "deleteSubmission",
        "DELETE",
        "/submissions",
        _invalidate_record("Submission", "Scoreboard"),
    ),
    "addNewCompetition": MutationDefinition(
        "addNewCompetition",
        "POST",
        "/competitions",
        _invalidate_list("Competition", "Scoreboard"),
    ),
    "updateCompetition": MutationDefinition(
        "updateCompetition",
        "PATCH",
        "/competitions",
        _invalidate_result_record("Competition", "Scoreboard"),
    ),
    "deleteCompetition": MutationDefinition(
        "deleteCompetition",
        "DELETE",
        lambda arg: f"/competitions/{arg['id']}",
        _invalidate_record("Competition", "Scoreboard"),
        send_body=False,
    ),
    "addNewTranslation": MutationDefinition(
        "addNewTranslation",
        "POST",
        "/translation",
        _invalidate_list("Translation"),
    ),
    "addNewAnnouncement": MutationDefinition(
        "addNewAnnouncement",
        "POST",
        "/announcements",
        _invalidate_list("Announcement"),
    ),
    "updateAnnouncement": MutationDefinition(
        "updateAnnouncement",
        "PATCH",
        "/announcements",
        _invalidate_record("Announcement"),
    ),
    "deleteAnnouncement": MutationDefinition(
        "deleteAnnouncement",
        "DELETE",
        "/announcements",
        _invalidate_record("Announcement"),
    ),
}
