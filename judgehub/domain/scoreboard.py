from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from judgehub.domain.models import ScoreboardRow, SubmissionSnapshot
from judgehub.domain.verdicts import UNJUDGED_VERDICTS, Verdict, is_penalized, parse_verdict

PENALTY_MINUTES_PER_REJECTION = 20


@dataclass
class _ProblemState:
    solved: bool = False
    rejected: int = 0


@dataclass
class _UserState:
    first_submitted: datetime
    solved: int = 0
    penalty: int = 0
    attempts: int = 0
    problems: dict[str, _ProblemState] = field(default_factory=dict)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _elapsed_minutes(*, start: datetime, moment: datetime) -> int:
    seconds = (_as_utc(moment) - _as_utc(start)).total_seconds()
    return max(0, int(seconds // 60))


def compute_scoreboard(
    *,
    submissions: Sequence[SubmissionSnapshot],
    starts_at: datetime | None = None,
) -> list[ScoreboardRow]:
    """ICPC-style standings.

    Solved problems count once, at the first accepted submission. Each solved
    problem adds the minutes elapsed since ``starts_at`` (or since the user's
    first submission when no start is known) plus a fixed penalty for every
    rejected attempt before the accept. Pending and judging submissions are
    not attempts yet.
    """
    users: dict[str, _UserState] = {}
    ordered = sorted(submissions, key=lambda item: _as_utc(item.time_submitted))
    for submission in ordered:
        user = users.get(submission.user_id)
        if user is None:
            user = _UserState(first_submitted=submission.time_submitted)
            users[submission.user_id] = user

        verdict = parse_verdict(submission.status)
        if verdict in UNJUDGED_VERDICTS:
            continue
        user.attempts += 1

        problem = user.problems.setdefault(submission.problem_id, _ProblemState())
        if problem.solved:
            continue
        if verdict == Verdict.ACCEPTED:
            problem.solved = True
            user.solved += 1
            start = starts_at if starts_at is not None else user.first_submitted
            user.penalty += _elapsed_minutes(start=start, moment=submission.time_submitted)
            user.penalty += PENALTY_MINUTES_PER_REJECTION * problem.rejected
        elif is_penalized(submission.status):
            problem.rejected += 1

    standings = sorted(users.items(), key=lambda item: (-item[1].solved, item[1].penalty, item[0]))
    rows: list[ScoreboardRow] = []
    previous_key: tuple[int, int] | None = None
    rank = 0
    for position, (user_id, state) in enumerate(standings, start=1):
        key = (state.solved, state.penalty)
        if key != previous_key:
            rank = position
            previous_key = key
        rows.append(
            ScoreboardRow(
                rank=rank,
                user_id=user_id,
                solved=state.solved,
                penalty=state.penalty,
                attempts=state.attempts,
            )
        )
    return rows
