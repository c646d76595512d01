from __future__ import annotations

import datetime as dt

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Camel-case wire names; records expose their id as ``_id``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    error: str | None = None
    message: str | None = None


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    role: str
    mode: str


class WorkerMetrics(BaseModel):
    started: bool = False
    stopped: bool = False
    ticks_total: int = 0
    judged_total: int = 0
    idle_ticks_total: int = 0
    requeued_total: int = 0
    errors_total: int = 0


class ReadyResponse(BaseModel):
    status: str
    role: str
    mode: str
    worker_loop_enabled: bool
    worker_loop_ready: bool
    worker_metrics: WorkerMetrics


class SubmissionResponse(ApiModel):
    id: str = Field(alias="_id")
    user_id: str
    problem_id: str
    code: str
    language: str
    time_submitted: dt.datetime
    status: str


class CreateSubmissionRequest(ApiModel):
    user_id: str = Field(min_length=1, max_length=128)
    problem_id: str = Field(min_length=1, max_length=128)
    code: str = Field(min_length=1)
    language: str = Field(min_length=1, max_length=64)


class UpdateSubmissionRequest(ApiModel):
    id: str = Field(min_length=1, validation_alias=AliasChoices("id", "_id"))
    status: str | None = None
    code: str | None = Field(default=None, min_length=1)
    language: str | None = Field(default=None, min_length=1, max_length=64)


class DeleteRecordRequest(ApiModel):
    id: str = Field(min_length=1, validation_alias=AliasChoices("id", "_id"))


class SubmissionLanguageResponse(ApiModel):
    id: str
    name: str


class CompetitionResponse(ApiModel):
    id: str = Field(alias="_id")
    name: str
    date: dt.date
    time: dt.time
    duration: float


class CreateCompetitionRequest(ApiModel):
    name: str = Field(min_length=1, max_length=256)
    date: dt.date
    time: dt.time
    duration: float = Field(gt=0)


class UpdateCompetitionRequest(CreateCompetitionRequest):
    id: str | None = Field(default=None, min_length=1, validation_alias=AliasChoices("id", "_id"))


class TranslationResponse(ApiModel):
    id: str = Field(alias="_id")
    username: str
    language_from: str
    language_to: str
    requested_text: str
    translated_text: str


class CreateTranslationRequest(ApiModel):
    username: str = Field(min_length=1, max_length=128)
    text: str = Field(min_length=1)
    source: str = Field(min_length=1, max_length=16)
    target: str = Field(min_length=1, max_length=16)


class CreateTranslationResponse(ApiModel):
    message: str
    translation: str


class TranslationLanguageResponse(ApiModel):
    language: str
    name: str


class AnnouncementResponse(ApiModel):
    id: str = Field(alias="_id")
    title: str
    content: str
    author: str | None = None
    created_at: dt.datetime


class CreateAnnouncementRequest(ApiModel):
    title: str = Field(min_length=1, max_length=256)
    content: str = Field(min_length=1)
    author: str | None = Field(default=None, min_length=1, max_length=128)


class UpdateAnnouncementRequest(ApiModel):
    id: str = Field(min_length=1, validation_alias=AliasChoices("id", "_id"))
    title: str | None = Field(default=None, min_length=1, max_length=256)
    content: str | None = Field(default=None, min_length=1)
    author: str | None = Field(default=None, min_length=1, max_length=128)


class ScoreboardRowResponse(ApiModel):
    rank: int = Field(ge=1)
    user_id: str
    solved: int = Field(ge=0)
    penalty: int = Field(ge=0)
    attempts: int = Field(ge=0)
