from __future__ import annotations

from collections.abc import Iterable

from judgehub.domain.errors import AuthorizationError

COMPETITION_MANAGER_ROLES = frozenset({"admin", "judge"})


def parse_roles(header_value: str | None) -> frozenset[str]:
    if not header_value:
        return frozenset()
    return frozenset(part.strip().lower() for part in header_value.split(",") if part.strip())


def require_competition_manager(*, roles: Iterable[str], action: str) -> None:
    if COMPETITION_MANAGER_ROLES.isdisjoint(role.lower() for role in roles):
        raise AuthorizationError(f"You are not authorized to {action}")
