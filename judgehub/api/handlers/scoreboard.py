from __future__ import annotations

from datetime import datetime

from judgehub.api.handlers.deps import ApiDeps, store_errors
from judgehub.api.schemas import ScoreboardRowResponse
from judgehub.domain.errors import RecordNotFoundError
from judgehub.domain.scoreboard import compute_scoreboard

COMPONENT_ID = "api.scoreboard"


async def _competition_start(*, competition_id: str | None, api_deps: ApiDeps) -> datetime | None:
    if competition_id is not None:
        competition = await api_deps.repository.get_competition(competition_id=competition_id)
        if competition is None:
            raise RecordNotFoundError("Competition not found")
        return competition.starts_at

    competitions = await api_deps.repository.list_competitions()
    if len(competitions) == 1:
        return competitions[0].starts_at
    return None


async def get_scoreboard_handler(
    *,
    competition_id: str | None = None,
    api_deps: ApiDeps,
) -> list[ScoreboardRowResponse]:
    with store_errors("Error fetching scoreboard"):
        starts_at = await _competition_start(competition_id=competition_id, api_deps=api_deps)
        submissions = await api_deps.repository.list_submissions()
    rows = compute_scoreboard(submissions=submissions, starts_at=starts_at)
    return [
        ScoreboardRowResponse(
            rank=row.rank,
            user_id=row.user_id,
            solved=row.solved,
            penalty=row.penalty,
            attempts=row.attempts,
        )
        for row in rows
    ]
