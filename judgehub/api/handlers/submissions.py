from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from judgehub.api.handlers.deps import ApiDeps, store_errors
from judgehub.api.schemas import (
    CreateSubmissionRequest,
    MessageResponse,
    SubmissionLanguageResponse,
    SubmissionResponse,
    UpdateSubmissionRequest,
)
from judgehub.domain.errors import DomainDependencyError, InvalidDataError, RecordNotFoundError
from judgehub.domain.languages import match_judge_language
from judgehub.domain.models import JudgeLanguage, SubmissionChanges, SubmissionSnapshot
from judgehub.domain.verdicts import Verdict, parse_verdict

COMPONENT_ID_LIST = "api.list_submissions"
COMPONENT_ID_CREATE = "api.create_submission"
COMPONENT_ID_UPDATE = "api.update_submission"
COMPONENT_ID_DELETE = "api.delete_submission"

JUDGE_UNAVAILABLE_MESSAGE = "Cannot connect to the judge, please try again later."


def to_submission_response(snapshot: SubmissionSnapshot) -> SubmissionResponse:
    return SubmissionResponse(
        id=snapshot.submission_id,
        user_id=snapshot.user_id,
        problem_id=snapshot.problem_id,
        code=snapshot.code,
        language=snapshot.language,
        time_submitted=snapshot.time_submitted,
        status=snapshot.status,
    )


def parse_time_submitted(header_value: str | None) -> datetime:
    """Reads the client's submission timestamp, falling back to server time."""
    if header_value:
        try:
            parsed = datetime.fromisoformat(header_value.strip().replace("Z", "+00:00"))
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    return datetime.now(tz=UTC)


async def list_submissions_handler(*, api_deps: ApiDeps) -> list[SubmissionResponse]:
    with store_errors("Error fetching submissions"):
        items = await api_deps.repository.list_submissions()
    return [to_submission_response(item) for item in items]


async def _judge_languages(api_deps: ApiDeps) -> list[JudgeLanguage]:
    try:
        return await asyncio.to_thread(api_deps.judge.list_languages)
    except DomainDependencyError as exc:
        raise DomainDependencyError(JUDGE_UNAVAILABLE_MESSAGE) from exc


async def ensure_judge_language(*, language: str, api_deps: ApiDeps) -> None:
    """Rejects languages the judge cannot run before anything is stored."""
    if match_judge_language(await _judge_languages(api_deps), language) is None:
        raise InvalidDataError("Invalid data received")


async def list_submission_languages_handler(*, api_deps: ApiDeps) -> list[SubmissionLanguageResponse]:
    languages = await _judge_languages(api_deps)
    return [SubmissionLanguageResponse(id=item.language_id, name=item.name) for item in languages]


async def create_submission_handler(
    *,
    request: CreateSubmissionRequest,
    time_submitted_header: str | None,
    api_deps: ApiDeps,
) -> SubmissionResponse:
    await ensure_judge_language(language=request.language, api_deps=api_deps)
    with store_errors("Error creating submission"):
        created = await api_deps.repository.create_submission(
            user_id=request.user_id,
            problem_id=request.problem_id,
            code=request.code,
            language=request.language,
            time_submitted=parse_time_submitted(time_submitted_header),
            status=Verdict.PENDING.value,
        )
    return to_submission_response(created)


async def update_submission_handler(
    *,
    request: UpdateSubmissionRequest,
    api_deps: ApiDeps,
) -> SubmissionResponse:
    status: str | None = None
    if request.status is not None:
        verdict = parse_verdict(request.status)
        if verdict is None:
            raise InvalidDataError("Invalid data received")
        status = verdict.value
    if request.language is not None:
        await ensure_judge_language(language=request.language, api_deps=api_deps)
    with store_errors("Error updating submission"):
        updated = await api_deps.repository.update_submission(
            submission_id=request.id,
            changes=SubmissionChanges(status=status, code=request.code, language=request.language),
        )
    if updated is None:
        raise RecordNotFoundError("Submission not found")
    return to_submission_response(updated)


async def delete_submission_handler(*, submission_id: str, api_deps: ApiDeps) -> MessageResponse:
    with store_errors("Error deleting submission"):
        deleted = await api_deps.repository.delete_submission(submission_id=submission_id)
    if not deleted:
        raise RecordNotFoundError("Submission not found")
    return MessageResponse(message=f"Submission {submission_id} deleted")
