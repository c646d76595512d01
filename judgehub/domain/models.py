from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time


@dataclass(frozen=True)
class SubmissionSnapshot:
    submission_id: str
    user_id: str
    problem_id: str
    code: str
    language: str
    time_submitted: datetime
    status: str


@dataclass(frozen=True)
class SubmissionChanges:
    status: str | None = None
    code: str | None = None
    language: str | None = None


@dataclass(frozen=True)
class CompetitionSnapshot:
    competition_id: str
    name: str
    date: date
    time: time
    duration: float

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.time)


@dataclass(frozen=True)
class CompetitionFields:
    name: str
    date: date
    time: time
    duration: float


@dataclass(frozen=True)
class TranslationSnapshot:
    translation_id: str
    username: str
    language_from: str
    language_to: str
    requested_text: str
    translated_text: str


@dataclass(frozen=True)
class AnnouncementSnapshot:
    announcement_id: str
    title: str
    content: str
    author: str | None
    created_at: datetime


@dataclass(frozen=True)
class AnnouncementChanges:
    title: str | None = None
    content: str | None = None
    author: str | None = None


@dataclass(frozen=True)
class JudgeLanguage:
    language_id: str
    name: str


@dataclass(frozen=True)
class TranslationLanguage:
    language: str
    name: str


@dataclass(frozen=True)
class ScoreboardRow:
    rank: int
    user_id: str
    solved: int
    penalty: int
    attempts: int
