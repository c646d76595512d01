from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import os

from judgehub.api.handlers.deps import ApiDeps
from judgehub.clients.google_translate import GoogleTranslateClient
from judgehub.clients.judge0 import Judge0Client
from judgehub.clients.stub import StubJudge, StubTranslator
from judgehub.domain.contracts import ContestRepository, Judge, Translator
from judgehub.repositories.postgres import AsyncpgPoolManager, PostgresContestRepository
from judgehub.repositories.stub import InMemoryContestRepository
from judgehub.roles import RuntimeRole
from judgehub.workers.loop import JudgeLoop
from judgehub.workers.runner import worker_runtime_settings_from_env


@dataclass
class RuntimeContainer:
    repository: ContestRepository
    judge: Judge
    translator: Translator
    api_deps: ApiDeps
    judge_loop: JudgeLoop | None
    on_startup: Callable[[], Awaitable[None]] | None
    on_shutdown: Callable[[], Awaitable[None]] | None


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


def build_judge() -> Judge:
    judge_url = os.getenv("JUDGE0_URL")
    if judge_url:
        return Judge0Client(base_url=judge_url, api_key=os.getenv("JUDGE0_API_KEY"))
    return StubJudge()


def build_translator() -> Translator:
    api_key = os.getenv("GOOGLE_TRANSLATE_API_KEY")
    if api_key:
        return GoogleTranslateClient(api_key=api_key)
    return StubTranslator()


def build_runtime_container(role: RuntimeRole) -> RuntimeContainer:
    database_url = os.getenv("DATABASE_URL")
    on_startup: Callable[[], Awaitable[None]] | None = None
    on_shutdown: Callable[[], Awaitable[None]] | None = None
    repository: ContestRepository
    if database_url:
        pool_manager = AsyncpgPoolManager(dsn=database_url)
        repository = PostgresContestRepository(pool_manager=pool_manager)
        on_startup = pool_manager.startup
        on_shutdown = pool_manager.shutdown
    else:
        repository = InMemoryContestRepository()
    judge = build_judge()
    translator = build_translator()
    api_deps = ApiDeps(
        repository=repository,
        judge=judge,
        translator=translator,
        require_competition_roles=_env_flag("REQUIRE_COMPETITION_ROLES", True),
    )

    judge_loop: JudgeLoop | None = None
    if role.runs_judge:
        judge_loop = JudgeLoop(
            role=role.name,
            repository=repository,
            judge=judge,
            claim_lease_seconds=worker_runtime_settings_from_env().claim_lease_seconds,
        )

    return RuntimeContainer(
        repository=repository,
        judge=judge,
        translator=translator,
        api_deps=api_deps,
        judge_loop=judge_loop,
        on_startup=on_startup,
        on_shutdown=on_shutdown,
    )
