from __future__ import annotations

from enum import StrEnum


class Verdict(StrEnum):
    PENDING = "Pending"
    JUDGING = "Judging"
    ACCEPTED = "Accepted"
    WRONG_ANSWER = "Wrong Answer"
    TIME_LIMIT_EXCEEDED = "Time Limit Exceeded"
    MEMORY_LIMIT_EXCEEDED = "Memory Limit Exceeded"
    RUNTIME_ERROR = "Runtime Error"
    COMPILATION_ERROR = "Compilation Error"
    INTERNAL_ERROR = "Internal Error"


# Verdicts that do not count as an attempt on the scoreboard.
UNJUDGED_VERDICTS: frozenset[Verdict] = frozenset({Verdict.PENDING, Verdict.JUDGING})

# Verdicts that do not penalize the contestant.
NON_PENALIZED_VERDICTS: frozenset[Verdict] = frozenset(
    {
        Verdict.PENDING,
        Verdict.JUDGING,
        Verdict.ACCEPTED,
        Verdict.COMPILATION_ERROR,
        Verdict.INTERNAL_ERROR,
    }
)

ALLOWED_TRANSITIONS: dict[Verdict, set[Verdict]] = {
    Verdict.PENDING: {Verdict.JUDGING},
    Verdict.JUDGING: {
        Verdict.PENDING,
        Verdict.ACCEPTED,
        Verdict.WRONG_ANSWER,
        Verdict.TIME_LIMIT_EXCEEDED,
        Verdict.MEMORY_LIMIT_EXCEEDED,
        Verdict.RUNTIME_ERROR,
        Verdict.COMPILATION_ERROR,
        Verdict.INTERNAL_ERROR,
    },
}

# Judge0 status descriptions that do not match a verdict name verbatim.
_JUDGE0_ALIASES: dict[str, Verdict] = {
    "in queue": Verdict.PENDING,
    "processing": Verdict.JUDGING,
    "exec format error": Verdict.RUNTIME_ERROR,
    "internal error": Verdict.INTERNAL_ERROR,
}


def parse_verdict(value: str) -> Verdict | None:
    normalized = value.strip().lower()
    for verdict in Verdict:
        if verdict.value.lower() == normalized:
            return verdict
    return None


def verdict_from_judge_status(description: str) -> Verdict:
    """Maps a judge status description such as "Runtime Error (NZEC)" to a verdict."""
    normalized = description.strip().lower()
    if normalized in _JUDGE0_ALIASES:
        return _JUDGE0_ALIASES[normalized]
    exact = parse_verdict(normalized)
    if exact is not None:
        return exact
    if normalized.startswith("runtime error"):
        return Verdict.RUNTIME_ERROR
    return Verdict.INTERNAL_ERROR


def is_penalized(verdict: str) -> bool:
    parsed = parse_verdict(verdict)
    return parsed is not None and parsed not in NON_PENALIZED_VERDICTS
