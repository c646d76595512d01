from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import asdict
import asyncio
from collections.abc import Awaitable, Callable
import logging

from fastapi import Body, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from judgehub.api.handlers.announcements import (
    create_announcement_handler,
    delete_announcement_handler,
    list_announcements_handler,
    update_announcement_handler,
)
from judgehub.api.handlers.competitions import (
    create_competition_handler,
    delete_competition_handler,
    list_competitions_handler,
    update_competition_handler,
)
from judgehub.api.handlers.deps import ApiDeps
from judgehub.api.handlers.scoreboard import get_scoreboard_handler
from judgehub.api.handlers.submissions import (
    create_submission_handler,
    delete_submission_handler,
    list_submission_languages_handler,
    list_submissions_handler,
    update_submission_handler,
)
from judgehub.api.handlers.translations import (
    create_translation_handler,
    get_translation_handler,
    list_translation_languages_handler,
    list_translations_handler,
)
from judgehub.api.negotiation import not_found_response
from judgehub.api.schemas import (
    AnnouncementResponse,
    CompetitionResponse,
    CreateAnnouncementRequest,
    CreateCompetitionRequest,
    CreateSubmissionRequest,
    CreateTranslationRequest,
    CreateTranslationResponse,
    DeleteRecordRequest,
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    ReadyResponse,
    ScoreboardRowResponse,
    SubmissionLanguageResponse,
    SubmissionResponse,
    TranslationLanguageResponse,
    TranslationResponse,
    UpdateAnnouncementRequest,
    UpdateCompetitionRequest,
    UpdateSubmissionRequest,
    WorkerMetrics,
)
from judgehub.domain.authorization import parse_roles
from judgehub.domain.error_taxonomy import error_envelope, http_status_for
from judgehub.domain.errors import DomainError
from judgehub.workers.loop import JudgeLoop
from judgehub.workers.runner import (
    WorkerRuntimeSettings,
    WorkerRuntimeState,
    run_worker_until_stopped,
    worker_runtime_settings_from_env,
)

ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    402: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _require_deps(api_deps: ApiDeps | None) -> ApiDeps:
    if api_deps is None:
        raise HTTPException(status_code=503, detail="api dependencies are not available")
    return api_deps


def _is_missing(error: dict[str, object]) -> bool:
    # Blank strings count as absent fields.
    if error.get("type") == "missing":
        return True
    return error.get("type") == "string_too_short" and error.get("input") == ""


def install_error_handlers(app: FastAPI, logger: logging.Logger) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        del request
        return JSONResponse(
            status_code=http_status_for(exc.code),
            content=error_envelope(code=exc.code, message=str(exc) or None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        del request
        missing = any(_is_missing(error) for error in exc.errors())
        code = "missing_fields" if missing else "invalid_data"
        return JSONResponse(status_code=http_status_for(code), content=error_envelope(code=code))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
        # Unknown paths and unsupported methods share the catch-all answer.
        if exc.status_code in (404, 405) and exc.detail in ("Not Found", "Method Not Allowed"):
            return not_found_response(request.headers.get("accept"))
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled request error",
            exc_info=exc,
            extra={"path": request.url.path},
        )
        return JSONResponse(status_code=500, content=error_envelope(code="internal_error"))


def build_app(
    role: str,
    run_id: str,
    judge_loop: JudgeLoop | None = None,
    worker_runtime_settings: WorkerRuntimeSettings | None = None,
    api_deps: ApiDeps | None = None,
    on_startup: Callable[[], Awaitable[None]] | None = None,
    on_shutdown: Callable[[], Awaitable[None]] | None = None,
) -> FastAPI:
    logger = logging.getLogger("runtime")
    worker_state: WorkerRuntimeState | None = None
    worker_task: asyncio.Task[None] | None = None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        nonlocal worker_task, worker_state
        del app
        stop_event: asyncio.Event | None = None

        logger.info(
            "role started",
            extra={"role": role, "service": role, "run_id": run_id},
        )

        if on_startup is not None:
            await on_startup()

        if judge_loop is not None:
            settings = worker_runtime_settings or worker_runtime_settings_from_env()
            worker_state = WorkerRuntimeState()
            stop_event = asyncio.Event()
            worker_task = asyncio.create_task(
                run_worker_until_stopped(
                    judge_loop=judge_loop,
                    role=role,
                    run_id=run_id,
                    stop_event=stop_event,
                    settings=settings,
                    logger=logger,
                    state=worker_state,
                )
            )

        yield

        if stop_event is not None and worker_task is not None:
            stop_event.set()
            await worker_task

        if on_shutdown is not None:
            await on_shutdown()

        logger.info(
            "role stopped",
            extra={"role": role, "service": role, "run_id": run_id},
        )

    app = FastAPI(title="judgehub", version="0.1.0", lifespan=lifespan)
    install_error_handlers(app, logger)

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", role=role, mode="contest")

    @app.get("/ready", response_model=ReadyResponse, tags=["System"])
    async def ready() -> ReadyResponse:
        judge_enabled = judge_loop is not None
        judge_running = (
            worker_state is not None
            and worker_state.started
            and worker_task is not None
            and not worker_task.done()
        )
        return ReadyResponse(
            status="ready",
            role=role,
            mode="contest",
            worker_loop_enabled=judge_enabled,
            worker_loop_ready=judge_running or not judge_enabled,
            worker_metrics=WorkerMetrics(**asdict(worker_state)) if worker_state is not None else WorkerMetrics(),
        )

    @app.get(
        "/submissions",
        response_model=list[SubmissionResponse],
        responses=ERROR_RESPONSES,
        tags=["Submissions"],
    )
    async def list_submissions() -> list[SubmissionResponse]:
        return await list_submissions_handler(api_deps=_require_deps(api_deps))

    @app.get(
        "/submissions/languages",
        response_model=list[SubmissionLanguageResponse],
        responses=ERROR_RESPONSES,
        tags=["Submissions"],
    )
    async def list_submission_languages() -> list[SubmissionLanguageResponse]:
        return await list_submission_languages_handler(api_deps=_require_deps(api_deps))

    @app.post(
        "/submissions",
        status_code=201,
        response_model=SubmissionResponse,
        responses=ERROR_RESPONSES,
        tags=["Submissions"],
    )
    async def create_submission(request: Request, payload: CreateSubmissionRequest) -> SubmissionResponse:
        return await create_submission_handler(
            request=payload,
            time_submitted_header=request.headers.get("timeSubmitted"),
            api_deps=_require_deps(api_deps),
        )

    @app.patch(
        "/submissions",
        response_model=SubmissionResponse,
        responses=ERROR_RESPONSES,
        tags=["Submissions"],
    )
    async def update_submission(payload: UpdateSubmissionRequest) -> SubmissionResponse:
        return await update_submission_handler(request=payload, api_deps=_require_deps(api_deps))

    @app.delete(
        "/submissions",
        response_model=MessageResponse,
        responses=ERROR_RESPONSES,
        tags=["Submissions"],
    )
    async def delete_submission(payload: DeleteRecordRequest = Body(...)) -> MessageResponse:  # noqa: B008
        return await delete_submission_handler(submission_id=payload.id, api_deps=_require_deps(api_deps))

    @app.get(
        "/competitions",
        response_model=list[CompetitionResponse],
        responses=ERROR_RESPONSES,
        tags=["Competitions"],
    )
    async def list_competitions() -> list[CompetitionResponse]:
        return await list_competitions_handler(api_deps=_require_deps(api_deps))

    @app.post(
        "/competitions",
        status_code=201,
        response_model=CompetitionResponse,
        responses={**ERROR_RESPONSES, 403: {"model": ErrorResponse}},
        tags=["Competitions"],
    )
    async def create_competition(
        payload: CreateCompetitionRequest,
        user_roles: str | None = Header(default=None, alias="X-User-Roles"),
    ) -> CompetitionResponse:
        return await create_competition_handler(
            request=payload,
            roles=parse_roles(user_roles),
            api_deps=_require_deps(api_deps),
        )

    @app.patch(
        "/competitions",
        response_model=CompetitionResponse,
        responses={**ERROR_RESPONSES, 403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Competitions"],
    )
    async def update_competition(
        payload: UpdateCompetitionRequest,
        user_roles: str | None = Header(default=None, alias="X-User-Roles"),
    ) -> CompetitionResponse:
        return await update_competition_handler(
            request=payload,
            roles=parse_roles(user_roles),
            api_deps=_require_deps(api_deps),
        )

    @app.delete(
        "/competitions/{competition_id}",
        response_model=MessageResponse,
        responses={**ERROR_RESPONSES, 403: {"model": ErrorResponse}},
        tags=["Competitions"],
    )
    async def delete_competition(
        competition_id: str,
        user_roles: str | None = Header(default=None, alias="X-User-Roles"),
    ) -> MessageResponse:
        return await delete_competition_handler(
            competition_id=competition_id,
            roles=parse_roles(user_roles),
            api_deps=_require_deps(api_deps),
        )

    @app.get(
        "/translation",
        response_model=list[TranslationResponse],
        responses=ERROR_RESPONSES,
        tags=["Translations"],
    )
    async def list_translations() -> list[TranslationResponse]:
        return await list_translations_handler(api_deps=_require_deps(api_deps))

    @app.post(
        "/translation",
        status_code=201,
        response_model=CreateTranslationResponse,
        responses=ERROR_RESPONSES,
        tags=["Translations"],
    )
    async def create_translation(payload: CreateTranslationRequest) -> CreateTranslationResponse:
        return await create_translation_handler(request=payload, api_deps=_require_deps(api_deps))

    @app.get(
        "/translation/username/{username}",
        response_model=list[TranslationResponse],
        responses=ERROR_RESPONSES,
        tags=["Translations"],
    )
    async def list_translations_by_username(username: str) -> list[TranslationResponse]:
        return await list_translations_handler(username=username, api_deps=_require_deps(api_deps))

    @app.get(
        "/translation/id/{translation_id}",
        response_model=TranslationResponse,
        responses=ERROR_RESPONSES,
        tags=["Translations"],
    )
    async def get_translation(translation_id: str) -> TranslationResponse:
        return await get_translation_handler(translation_id=translation_id, api_deps=_require_deps(api_deps))

    @app.get(
        "/translation/languages",
        response_model=list[TranslationLanguageResponse],
        responses=ERROR_RESPONSES,
        tags=["Translations"],
    )
    async def list_translation_languages() -> list[TranslationLanguageResponse]:
        return await list_translation_languages_handler(api_deps=_require_deps(api_deps))

    @app.get(
        "/announcements",
        response_model=list[AnnouncementResponse],
        responses=ERROR_RESPONSES,
        tags=["Announcements"],
    )
    async def list_announcements() -> list[AnnouncementResponse]:
        return await list_announcements_handler(api_deps=_require_deps(api_deps))

    @app.post(
        "/announcements",
        status_code=201,
        response_model=AnnouncementResponse,
        responses=ERROR_RESPONSES,
        tags=["Announcements"],
    )
    async def create_announcement(payload: CreateAnnouncementRequest) -> AnnouncementResponse:
        return await create_announcement_handler(request=payload, api_deps=_require_deps(api_deps))

    @app.patch(
        "/announcements",
        response_model=AnnouncementResponse,
        responses=ERROR_RESPONSES,
        tags=["Announcements"],
    )
    async def update_announcement(payload: UpdateAnnouncementRequest) -> AnnouncementResponse:
        return await update_announcement_handler(request=payload, api_deps=_require_deps(api_deps))

    @app.delete(
        "/announcements",
        response_model=MessageResponse,
        responses=ERROR_RESPONSES,
        tags=["Announcements"],
    )
    async def delete_announcement(payload: DeleteRecordRequest = Body(...)) -> MessageResponse:  # noqa: B008
        return await delete_announcement_handler(announcement_id=payload.id, api_deps=_require_deps(api_deps))

    @app.get(
        "/scoreboard",
        response_model=list[ScoreboardRowResponse],
        responses=ERROR_RESPONSES,
        tags=["Scoreboard"],
    )
    async def get_scoreboard(competition_id: str | None = Query(default=None)) -> list[ScoreboardRowResponse]:
        return await get_scoreboard_handler(competition_id=competition_id, api_deps=_require_deps(api_deps))

    return app
