from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

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


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class InMemoryContestRepository:
    """Non-network repository with deterministic behavior for local runs and tests."""

    submissions: dict[str, SubmissionSnapshot] = field(default_factory=dict)
    competitions: dict[str, CompetitionSnapshot] = field(default_factory=dict)
    translations: dict[str, TranslationSnapshot] = field(default_factory=dict)
    announcements: dict[str, AnnouncementSnapshot] = field(default_factory=dict)
    transitions: list[tuple[str, str, str]] = field(default_factory=list)
    lease_expires_at: dict[str, datetime] = field(default_factory=dict)
    clock: Callable[[], datetime] = _utc_now

    async def list_submissions(self) -> list[SubmissionSnapshot]:
        return list(self.submissions.values())

    async def get_submission(self, *, submission_id: str) -> SubmissionSnapshot | None:
        return self.submissions.get(submission_id)

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
        snapshot = SubmissionSnapshot(
            submission_id=new_record_id(),
            user_id=user_id,
            problem_id=problem_id,
            code=code,
            language=language,
            time_submitted=time_submitted,
            status=status,
        )
        self.submissions[snapshot.submission_id] = snapshot
        return snapshot

    async def update_submission(
        self,
        *,
        submission_id: str,
        changes: SubmissionChanges,
    ) -> SubmissionSnapshot | None:
        current = self.submissions.get(submission_id)
        if current is None:
            return None
        updated = replace(
            current,
            status=changes.status if changes.status is not None else current.status,
            code=changes.code if changes.code is not None else current.code,
            language=changes.language if changes.language is not None else current.language,
        )
        if updated.status != current.status:
            self.lease_expires_at.pop(submission_id, None)
        self.submissions[submission_id] = updated
        return updated

    async def delete_submission(self, *, submission_id: str) -> bool:
        self.lease_expires_at.pop(submission_id, None)
        return self.submissions.pop(submission_id, None) is not None

    async def claim_pending_submission(
        self,
        *,
        lease_seconds: int = DEFAULT_CLAIM_LEASE_SECONDS,
    ) -> SubmissionSnapshot | None:
        now = self.clock()
        claimable = [
            item
            for item in self.submissions.values()
            if item.status == Verdict.PENDING
            or (item.status == Verdict.JUDGING and self._lease_expired(item.submission_id, now))
        ]
        if not claimable:
            return None
        oldest = min(claimable, key=lambda item: item.time_submitted)
        if oldest.status == Verdict.PENDING:
            await self.transition_submission(
                submission_id=oldest.submission_id,
                from_status=Verdict.PENDING,
                to_status=Verdict.JUDGING,
            )
        self.lease_expires_at[oldest.submission_id] = now + timedelta(seconds=lease_seconds)
        return self.submissions[oldest.submission_id]

    def _lease_expired(self, submission_id: str, now: datetime) -> bool:
        # Judging rows without a lease were moved there by hand and count as stale.
        expires_at = self.lease_expires_at.get(submission_id)
        return expires_at is None or expires_at <= now

    async def transition_submission(self, *, submission_id: str, from_status: str, to_status: str) -> None:
        current = self.submissions.get(submission_id)
        if current is None:
            raise InvalidDataError(f"submission not found: {submission_id}")
        source = parse_verdict(from_status)
        target = parse_verdict(to_status)
        if source is None or target is None or target not in ALLOWED_TRANSITIONS.get(source, set()):
            raise InvalidDataError(f"transition is not allowed: {from_status} -> {to_status}")
        if current.status != source:
            raise InvalidDataError(f"submission {submission_id} is {current.status}, expected {from_status}")
        self.submissions[submission_id] = replace(current, status=target.value)
        if target != Verdict.JUDGING:
            self.lease_expires_at.pop(submission_id, None)
        self.transitions.append((submission_id, source.value, target.value))

    async def list_competitions(self) -> list[CompetitionSnapshot]:
        return list(self.competitions.values())

    async def get_competition(self, *, competition_id: str) -> CompetitionSnapshot | None:
        return self.competitions.get(competition_id)

    async def create_competition(self, *, fields: CompetitionFields) -> CompetitionSnapshot:
        snapshot = CompetitionSnapshot(
            competition_id=new_record_id(),
            name=fields.name,
            date=fields.date,
            time=fields.time,
            duration=fields.duration,
        )
        self.competitions[snapshot.competition_id] = snapshot
        return snapshot

    async def update_competition(
        self,
        *,
        competition_id: str,
        fields: CompetitionFields,
    ) -> CompetitionSnapshot | None:
        if competition_id not in self.competitions:
            return None
        updated = CompetitionSnapshot(
            competition_id=competition_id,
            name=fields.name,
            date=fields.date,
            time=fields.time,
            duration=fields.duration,
        )
        self.competitions[competition_id] = updated
        return updated

    async def delete_competition(self, *, competition_id: str) -> bool:
        return self.competitions.pop(competition_id, None) is not None

    async def list_translations(self, *, username: str | None = None) -> list[TranslationSnapshot]:
        return [
            item
            for item in self.translations.values()
            if username is None or item.username == username
        ]

    async def get_translation(self, *, translation_id: str) -> TranslationSnapshot | None:
        return self.translations.get(translation_id)

    async def create_translation(
        self,
        *,
        username: str,
        language_from: str,
        language_to: str,
        requested_text: str,
        translated_text: str,
    ) -> TranslationSnapshot:
        snapshot = TranslationSnapshot(
            translation_id=new_record_id(),
            username=username,
            language_from=language_from,
            language_to=language_to,
            requested_text=requested_text,
            translated_text=translated_text,
        )
        self.translations[snapshot.translation_id] = snapshot
        return snapshot

    async def list_announcements(self) -> list[AnnouncementSnapshot]:
        return list(self.announcements.values())

    async def create_announcement(
        self,
        *,
        title: str,
        content: str,
        author: str | None,
        created_at: datetime,
    ) -> AnnouncementSnapshot:
        snapshot = AnnouncementSnapshot(
            announcement_id=new_record_id(),
            title=title,
            content=content,
            author=author,
            created_at=created_at,
        )
        self.announcements[snapshot.announcement_id] = snapshot
        return snapshot

    async def update_announcement(
        self,
        *,
        announcement_id: str,
        changes: AnnouncementChanges,
    ) -> AnnouncementSnapshot | None:
        current = self.announcements.get(announcement_id)
        if current is None:
            return None
        updated = replace(
            current,
            title=changes.title if changes.title is not None else current.title,
            content=changes.content if changes.content is not None else current.content,
            author=changes.author if changes.author is not None else current.author,
        )
        self.announcements[announcement_id] = updated
        return updated

    async def delete_announcement(self, *, announcement_id: str) -> bool:
        return self.announcements.pop(announcement_id, None) is not None
