from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import importlib
from typing import Any

from judgehub.domain.contracts import DEFAULT_CLAIM_LEASE_SECONDS
from judgehub.domain.errors import InvalidDataError
from judgehub.domain.ids import new_record_id
from judgehub.domain.models import (
    AnnouncementChanges,
    AnnouncementSnapshot,
    CompetitionFields,
    CompetitionSnapshot,
    SubmissionChanges,
    SubmissionSnapshot,
    TranslationSnapshot,
)
from judgehub.domain.verdicts import ALLOWED_TRANSITIONS, Verdict, parse_verdict
from judgehub.repositories.sql_loader import load_sql

try:
    asyncpg_module = importlib.import_module("asyncpg")
except ModuleNotFoundError:  # pragma: no cover
    asyncpg_module = None  # type: ignore[assignment]


SQL_LIST_SUBMISSIONS = load_sql("list_submissions.sql")
SQL_GET_SUBMISSION = load_sql("get_submission.sql")
SQL_CREATE_SUBMISSION = load_sql("create_submission.sql")
SQL_UPDATE_SUBMISSION = load_sql("update_submission.sql")
SQL_DELETE_SUBMISSION = load_sql("delete_submission.sql")
SQL_CLAIM_PENDING_SUBMISSION = load_sql("claim_pending_submission.sql")
SQL_TRANSITION_SUBMISSION = load_sql("transition_submission.sql")
SQL_LIST_COMPETITIONS = load_sql("list_competitions.sql")
SQL_GET_COMPETITION = load_sql("get_competition.sql")
SQL_CREATE_COMPETITION = load_sql("create_competition.sql")
SQL_UPDATE_COMPETITION = load_sql("update_competition.sql")
SQL_DELETE_COMPETITION = load_sql("delete_competition.sql")
SQL_LIST_TRANSLATIONS = load_sql("list_translations.sql")
SQL_GET_TRANSLATION = load_sql("get_translation.sql")
SQL_CREATE_TRANSLATION = load_sql("create_translation.sql")
SQL_LIST_ANNOUNCEMENTS = load_sql("list_announcements.sql")
SQL_CREATE_ANNOUNCEMENT = load_sql("create_announcement.sql")
SQL_UPDATE_ANNOUNCEMENT = load_sql("update_announcement.sql")
SQL_DELETE_ANNOUNCEMENT = load_sql("delete_announcement.sql")

# Attempts at allocating a fresh public id before giving up.
_ID_ALLOCATION_ATTEMPTS = 5


def _is_unique_violation(exc: Exception) -> bool:
    return getattr(exc, "sqlstate", None) == "23505"


def _submission_from_row(row: Any) -> SubmissionSnapshot:
    return SubmissionSnapshot(
        submission_id=row["public_id"],
        user_id=row["user_id"],
        problem_id=row["problem_id"],
        code=row["code"],
        language=row["language"],
        time_submitted=row["time_submitted"],
        status=row["status"],
    )


def _competition_from_row(row: Any) -> CompetitionSnapshot:
    return CompetitionSnapshot(
        competition_id=row["public_id"],
        name=row["name"],
        date=row["starts_on"],
        time=row["starts_at"],
        duration=row["duration"],
    )


def _translation_from_row(row: Any) -> TranslationSnapshot:
    return TranslationSnapshot(
        translation_id=row["public_id"],
        username=row["username"],
        language_from=row["language_from"],
        language_to=row["language_to"],
        requested_text=row["requested_text"],
        translated_text=row["translated_text"],
    )


def _announcement_from_row(row: Any) -> AnnouncementSnapshot:
    return AnnouncementSnapshot(
        announcement_id=row["public_id"],
        title=row["title"],
        content=row["content"],
        author=row["author"],
        created_at=row["created_at"],
    )


@dataclass
class AsyncpgPoolManager:
    dsn: str
    pool: Any | None = None

    async def startup(self) -> None:
        if asyncpg_module is None:  # pragma: no cover
            raise RuntimeError("asyncpg is required for postgres repository mode")
        self.pool = await asyncpg_module.create_pool(dsn=self.dsn, min_size=1, max_size=5)

    async def shutdown(self) -> None:
        if self.pool is None:
            return
        await self.pool.close()
        self.pool = None


@dataclass
class PostgresContestRepository:
    pool_manager: AsyncpgPoolManager

    def _pool(self) -> Any:
        if self.pool_manager.pool is None:
            raise RuntimeError("postgres pool is not initialized")
        return self.pool_manager.pool

    async def _insert_with_fresh_id(self, sql: str, *args: object) -> Any:
        pool = self._pool()
        async with pool.acquire() as conn:
            for _ in range(_ID_ALLOCATION_ATTEMPTS):
                try:
                    row = await conn.fetchrow(sql, new_record_id(), *args)
                except Exception as exc:
                    if _is_unique_violation(exc):
                        continue
                    raise
                if row is None:
                    raise RuntimeError("insert returned no row")
                return row
        raise RuntimeError("failed to allocate unique public id")

    async def list_submissions(self) -> list[SubmissionSnapshot]:
        rows = await self._pool().fetch(SQL_LIST_SUBMISSIONS)
        return [_submission_from_row(row) for row in rows]

    async def get_submission(self, *, submission_id: str) -> SubmissionSnapshot | None:
        row = await self._pool().fetchrow(SQL_GET_SUBMISSION, submission_id)
        return _submission_from_row(row) if row is not None else None

    async def create_submission(
        self,
        *,
        user_id: str,
        problem_id: str,
        code: str,
        language: str,
        time_submitted: datetime,
        status: str,
    ) -> SubmissionSnapshot:
        row = await self._insert_with_fresh_id(
            SQL_CREATE_SUBMISSION,
            user_id,
            problem_id,
            code,
            language,
            time_submitted,
            status,
        )
        return _submission_from_row(row)

    async def update_submission(
        self,
        *,
        submission_id: str,
        changes: SubmissionChanges,
    ) -> SubmissionSnapshot | None:
        row = await self._pool().fetchrow(
            SQL_UPDATE_SUBMISSION,
            submission_id,
            changes.status,
            changes.code,
            changes.language,
        )
        return _submission_from_row(row) if row is not None else None

    async def delete_submission(self, *, submission_id: str) -> bool:
        deleted = await self._pool().fetchval(SQL_DELETE_SUBMISSION, submission_id)
        return deleted is not None

    async def claim_pending_submission(
        self,
        *,
        lease_seconds: int = DEFAULT_CLAIM_LEASE_SECONDS,
    ) -> SubmissionSnapshot | None:
        pool = self._pool()
        async with pool.acquire() as conn:
            async with conn.transaction():
                row = await conn.fetchrow(
                    SQL_CLAIM_PENDING_SUBMISSION,
                    Verdict.PENDING.value,
                    Verdict.JUDGING.value,
                    float(lease_seconds),
                )
        return _submission_from_row(row) if row is not None else None

    async def transition_submission(self, *, submission_id: str, from_status: str, to_status: str) -> None:
        source = parse_verdict(from_status)
        target = parse_verdict(to_status)
        if source is None or target is None or target not in ALLOWED_TRANSITIONS.get(source, set()):
            raise InvalidDataError(f"transition is not allowed: {from_status} -> {to_status}")
        updated = await self._pool().fetchval(
            SQL_TRANSITION_SUBMISSION,
            submission_id,
            source.value,
            target.value,
        )
        if updated is None:
            raise InvalidDataError(f"submission {submission_id} is not in status {from_status}")

    async def list_competitions(self) -> list[CompetitionSnapshot]:
        rows = await self._pool().fetch(SQL_LIST_COMPETITIONS)
        return [_competition_from_row(row) for row in rows]

    async def get_competition(self, *, competition_id: str) -> CompetitionSnapshot | None:
        row = await self._pool().fetchrow(SQL_GET_COMPETITION, competition_id)
        return _competition_from_row(row) if row is not None else None

    async def create_competition(self, *, fields: CompetitionFields) -> CompetitionSnapshot:
        row = await self._insert_with_fresh_id(
            SQL_CREATE_COMPETITION,
            fields.name,
            fields.date,
            fields.time,
            fields.duration,
        )
        return _competition_from_row(row)

    async def update_competition(
        self,
        *,
        competition_id: str,
        fields: CompetitionFields,
    ) -> CompetitionSnapshot | None:
        row = await self._pool().fetchrow(
            SQL_UPDATE_COMPETITION,
            competition_id,
            fields.name,
            fields.date,
            fields.time,
            fields.duration,
        )
        return _competition_from_row(row) if row is not None else None

    async def delete_competition(self, *, competition_id: str) -> bool:
        deleted = await self._pool().fetchval(SQL_DELETE_COMPETITION, competition_id)
        return deleted is not None

    async def list_translations(self, *, username: str | None = None) -> list[TranslationSnapshot]:
        rows = await self._pool().fetch(SQL_LIST_TRANSLATIONS, username)
        return [_translation_from_row(row) for row in rows]

    async def get_translation(self, *, translation_id: str) -> TranslationSnapshot | None:
        row = await self._pool().fetchrow(SQL_GET_TRANSLATION, translation_id)
        return _translation_from_row(row) if row is not None else None

    async def create_translation(
        self,
        *,
        username: str,
        language_from: str,
        language_to: str,
        requested_text: str,
        translated_text: str,
    ) -> TranslationSnapshot:
        row = await self._insert_with_fresh_id(
            SQL_CREATE_TRANSLATION,
            username,
            language_from,
            language_to,
            requested_text,
            translated_text,
        )
        return _translation_from_row(row)

    async def list_announcements(self) -> list[AnnouncementSnapshot]:
        rows = await self._pool().fetch(SQL_LIST_ANNOUNCEMENTS)
        return [_announcement_from_row(row) for row in rows]

    async def create_announcement(
        self,
        *,
        title: str,
        content: str,
        author: str | None,
        created_at: datetime,
    ) -> AnnouncementSnapshot:
        row = await self._insert_with_fresh_id(SQL_CREATE_ANNOUNCEMENT, title, content, author, created_at)
        return _announcement_from_row(row)

    async def update_announcement(
        self,
        *,
        announcement_id: str,
        changes: AnnouncementChanges,
    ) -> AnnouncementSnapshot | None:
        row = await self._pool().fetchrow(
            SQL_UPDATE_ANNOUNCEMENT,
            announcement_id,
            changes.title,
            changes.content,
            changes.author,
        )
        return _announcement_from_row(row) if row is not None else None

    async def delete_announcement(self, *, announcement_id: str) -> bool:
        deleted = await self._pool().fetchval(SQL_DELETE_ANNOUNCEMENT, announcement_id)
        return deleted is not None
