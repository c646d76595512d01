from datetime import UTC, datetime, timedelta

import pytest

from judgehub.domain.models import SubmissionSnapshot
from judgehub.domain.scoreboard import PENALTY_MINUTES_PER_REJECTION, compute_scoreboard

START = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


def _submission(idx: int, user_id: str, problem_id: str, minute: int, status: str) -> SubmissionSnapshot:
    return SubmissionSnapshot(
        submission_id=f"s{idx}",
        user_id=user_id,
        problem_id=problem_id,
        code="print(1)",
        language="python",
        time_submitted=START + timedelta(minutes=minute),
        status=status,
    )


@pytest.mark.unit
def test_scoreboard_orders_by_solved_then_penalty() -> None:
    submissions = [
        _submission(1, "alice", "A", 10, "Wrong Answer"),
        _submission(2, "alice", "A", 30, "Accepted"),
        _submission(3, "bob", "A", 15, "Accepted"),
        _submission(4, "bob", "B", 40, "Accepted"),
        _submission(5, "carol", "A", 5, "Time Limit Exceeded"),
    ]

    rows = compute_scoreboard(submissions=submissions, starts_at=START)

    assert [row.user_id for row in rows] == ["bob", "alice", "carol"]
    assert rows[0].solved == 2
    assert rows[0].penalty == 15 + 40
    assert rows[1].penalty == 30 + PENALTY_MINUTES_PER_REJECTION
    assert rows[2].solved == 0
    assert rows[2].attempts == 1
    assert [row.rank for row in rows] == [1, 2, 3]


@pytest.mark.unit
def test_scoreboard_ignores_pending_and_post_accept_submissions() -> None:
    submissions = [
        _submission(1, "alice", "A", 10, "Pending"),
        _submission(2, "alice", "A", 20, "Accepted"),
        _submission(3, "alice", "A", 25, "Wrong Answer"),
        _submission(4, "alice", "B", 26, "Judging"),
    ]

    rows = compute_scoreboard(submissions=submissions, starts_at=START)

    assert len(rows) == 1
    assert rows[0].solved == 1
    assert rows[0].penalty == 20
    assert rows[0].attempts == 2


@pytest.mark.unit
def test_scoreboard_ties_share_rank() -> None:
    submissions = [
        _submission(1, "zed", "A", 10, "Accepted"),
        _submission(2, "amy", "A", 10, "Accepted"),
        _submission(3, "max", "A", 50, "Accepted"),
    ]

    rows = compute_scoreboard(submissions=submissions, starts_at=START)

    assert [(row.user_id, row.rank) for row in rows] == [("amy", 1), ("zed", 1), ("max", 3)]


@pytest.mark.unit
def test_scoreboard_without_start_counts_from_first_submission() -> None:
    submissions = [
        _submission(1, "alice", "A", 100, "Compilation Error"),
        _submission(2, "alice", "A", 107, "Accepted"),
    ]

    rows = compute_scoreboard(submissions=submissions)

    assert rows[0].penalty == 7


@pytest.mark.unit
def test_scoreboard_accepts_naive_competition_start() -> None:
    submissions = [_submission(1, "alice", "A", 45, "Accepted")]

    rows = compute_scoreboard(submissions=submissions, starts_at=START.replace(tzinfo=None))

    assert rows[0].penalty == 45
