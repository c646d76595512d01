from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from judgehub.domain.models import (
    AnnouncementChanges,
    AnnouncementSnapshot,
    CompetitionFields,
    CompetitionSnapshot,
    JudgeLanguage,
    SubmissionChanges,
    SubmissionSnapshot,
    TranslationLanguage,
    TranslationSnapshot,
)


CLAIM_SQL_CONTRACT = "SELECT ... FOR UPDATE SKIP LOCKED"
DEFAULT_CLAIM_LEASE_SECONDS = 120


@runtime_checkable
class ContestRepository(Protocol):
    """Record store contract shared by the API controllers and the judge worker.

    Every method is a single-record operation; callers get no cross-record
    atomicity. Lists come back in insertion order.
    """

    async def list_submissions(self) -> list[SubmissionSnapshot]: ...

    async def get_submission(self, *, submission_id: str) -> SubmissionSnapshot | None: ...

    async def create_submission(
        self,
        *,
        user_id: str,
        problem_id: str,
        code: str,
        language: str,
        time_submitted: datetime,
        status: str,
    ) -> SubmissionSnapshot: ...

    async def update_submission(
        self,
        *,
        submission_id: str,
        changes: SubmissionChanges,
    ) -> SubmissionSnapshot | None: ...

    async def delete_submission(self, *, submission_id: str) -> bool: ...

    # Moves the oldest pending submission to judging and returns it. A judging
    # submission whose lease ran out is claimed again with a fresh lease.
    # Must stay compatible with SELECT ... FOR UPDATE SKIP LOCKED claims.
    async def claim_pending_submission(
        self,
        *,
        lease_seconds: int = DEFAULT_CLAIM_LEASE_SECONDS,
    ) -> SubmissionSnapshot | None: ...

    async def transition_submission(self, *, submission_id: str, from_status: str, to_status: str) -> None: ...

    async def list_competitions(self) -> list[CompetitionSnapshot]: ...

    async def get_competition(self, *, competition_id: str) -> CompetitionSnapshot | None: ...

    async def create_competition(self, *, fields: CompetitionFields) -> CompetitionSnapshot: ...

    async def update_competition(
        self,
        *,
        competition_id: str,
        fields: CompetitionFields,
    ) -> CompetitionSnapshot | None: ...

    async def delete_competition(self, *, competition_id: str) -> bool: ...

    async def list_translations(self, *, username: str | None = None) -> list[TranslationSnapshot]: ...

    async def get_translation(self, *, translation_id: str) -> TranslationSnapshot | None: ...

    async def create_translation(
        self,
        *,
        username: str,
        language_from: str,
        language_to: str,
        requested_text: str,
        translated_text: str,
    ) -> TranslationSnapshot: ...

    async def list_announcements(self) -> list[AnnouncementSnapshot]: ...

    async def create_announcement(
        self,
        *,
        title: str,
        content: str,
        author: str | None,
        created_at: datetime,
    ) -> AnnouncementSnapshot: ...

    async def update_announcement(
        self,
        *,
        announcement_id: str,
        changes: AnnouncementChanges,
    ) -> AnnouncementSnapshot | None: ...

    async def delete_announcement(self, *, announcement_id: str) -> bool: ...


@runtime_checkable
class Judge(Protocol):
    """Code-execution capability. Blocking; callers move it off the event loop."""

    def judge(self, *, code: str, language: str) -> str: ...

    def list_languages(self) -> list[JudgeLanguage]: ...


@runtime_checkable
class Translator(Protocol):
    def translate(self, *, text: str, source: str, target: str) -> str: ...

    def list_languages(self) -> list[TranslationLanguage]: ...
