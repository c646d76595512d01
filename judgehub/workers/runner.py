from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass

from judgehub.domain.contracts import DEFAULT_CLAIM_LEASE_SECONDS
from judgehub.domain.errors import DomainDependencyError
from judgehub.workers.loop import JudgeLoop

DEFAULT_POLL_INTERVAL_MS = 200
DEFAULT_IDLE_BACKOFF_MS = 1000
DEFAULT_ERROR_BACKOFF_MS = 2000


@dataclass(frozen=True)
class WorkerRuntimeSettings:
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    idle_backoff_ms: int = DEFAULT_IDLE_BACKOFF_MS
    error_backoff_ms: int = DEFAULT_ERROR_BACKOFF_MS
    claim_lease_seconds: int = DEFAULT_CLAIM_LEASE_SECONDS


@dataclass
class WorkerRuntimeState:
    started: bool = False
    stopped: bool = False
    ticks_total: int = 0
    judged_total: int = 0
    idle_ticks_total: int = 0
    requeued_total: int = 0
    errors_total: int = 0


def worker_runtime_settings_from_env() -> WorkerRuntimeSettings:
    return WorkerRuntimeSettings(
        poll_interval_ms=_positive_env_int("WORKER_POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS),
        idle_backoff_ms=_positive_env_int("WORKER_IDLE_BACKOFF_MS", DEFAULT_IDLE_BACKOFF_MS),
        error_backoff_ms=_positive_env_int("WORKER_ERROR_BACKOFF_MS", DEFAULT_ERROR_BACKOFF_MS),
        claim_lease_seconds=_positive_env_int("WORKER_CLAIM_LEASE_SECONDS", DEFAULT_CLAIM_LEASE_SECONDS),
    )


def _positive_env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        parsed = int(raw)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


async def _judge_tick(
    *,
    judge_loop: JudgeLoop,
    settings: WorkerRuntimeSettings,
    logger: logging.Logger,
    log_extra: dict[str, str],
    state: WorkerRuntimeState,
) -> int:
    """Runs one claim/judge cycle and returns the delay before the next one."""
    state.ticks_total += 1
    try:
        judged = await judge_loop.run_once()
    except DomainDependencyError:
        # The submission is already back in the queue.
        state.requeued_total += 1
        logger.warning("judge unavailable, backing off", extra=log_extra)
        return settings.error_backoff_ms
    except Exception:
        state.errors_total += 1
        logger.exception("judge tick failed", extra=log_extra)
        return settings.error_backoff_ms

    if judged:
        state.judged_total += 1
        return settings.poll_interval_ms
    state.idle_ticks_total += 1
    return settings.idle_backoff_ms


async def run_worker_until_stopped(
    *,
    judge_loop: JudgeLoop,
    role: str,
    run_id: str,
    stop_event: asyncio.Event,
    settings: WorkerRuntimeSettings,
    logger: logging.Logger,
    state: WorkerRuntimeState | None = None,
) -> None:
    state = state if state is not None else WorkerRuntimeState()
    log_extra = {"role": role, "service": role, "run_id": run_id}
    state.started = True
    logger.info("judge worker started", extra=log_extra)

    while not stop_event.is_set():
        delay_ms = await _judge_tick(
            judge_loop=judge_loop,
            settings=settings,
            logger=logger,
            log_extra=log_extra,
            state=state,
        )
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=delay_ms / 1000)
        except TimeoutError:
            pass

    state.stopped = True
    logger.info(
        "judge worker stopped",
        extra={**log_extra, "detail": f"judged={state.judged_total} requeued={state.requeued_total}"},
    )
