from __future__ import annotations

import logging

from judgehub.api.handlers.deps import ApiDeps, store_errors
from judgehub.api.schemas import (
    CompetitionResponse,
    CreateCompetitionRequest,
    MessageResponse,
    UpdateCompetitionRequest,
)
from judgehub.domain.authorization import require_competition_manager
from judgehub.domain.errors import AmbiguousTargetError, RecordNotFoundError
from judgehub.domain.models import CompetitionFields, CompetitionSnapshot

COMPONENT_ID_LIST = "api.list_competitions"
COMPONENT_ID_CREATE = "api.create_competition"
COMPONENT_ID_UPDATE = "api.update_competition"
COMPONENT_ID_DELETE = "api.delete_competition"

logger = logging.getLogger("runtime")


def to_competition_response(snapshot: CompetitionSnapshot) -> CompetitionResponse:
    return CompetitionResponse(
        id=snapshot.competition_id,
        name=snapshot.name,
        date=snapshot.date,
        time=snapshot.time,
        duration=snapshot.duration,
    )


def _fields(request: CreateCompetitionRequest) -> CompetitionFields:
    return CompetitionFields(
        name=request.name,
        date=request.date,
        time=request.time,
        duration=request.duration,
    )


def _authorize(*, roles: frozenset[str], action: str, api_deps: ApiDeps) -> None:
    if api_deps.require_competition_roles:
        require_competition_manager(roles=roles, action=action)


async def list_competitions_handler(*, api_deps: ApiDeps) -> list[CompetitionResponse]:
    with store_errors("Error fetching competitions"):
        items = await api_deps.repository.list_competitions()
    return [to_competition_response(item) for item in items]


async def create_competition_handler(
    *,
    request: CreateCompetitionRequest,
    roles: frozenset[str],
    api_deps: ApiDeps,
) -> CompetitionResponse:
    _authorize(roles=roles, action="create a new competition", api_deps=api_deps)
    with store_errors("Error creating competition"):
        created = await api_deps.repository.create_competition(fields=_fields(request))
    logger.info("competition created", extra={"competition_id": created.competition_id})
    return to_competition_response(created)


async def resolve_competition_target(*, competition_id: str | None, api_deps: ApiDeps) -> CompetitionSnapshot:
    """Finds the competition an update addresses.

    Without an explicit id the update is only unambiguous while exactly one
    competition exists.
    """
    if competition_id is not None:
        with store_errors("Error updating competition"):
            found = await api_deps.repository.get_competition(competition_id=competition_id)
        if found is None:
            raise RecordNotFoundError("Competition not found")
        return found

    with store_errors("Error updating competition"):
        items = await api_deps.repository.list_competitions()
    if not items:
        raise RecordNotFoundError("Competition not found")
    if len(items) > 1:
        raise AmbiguousTargetError("Competition id is required when more than one competition exists")
    return items[0]


async def update_competition_handler(
    *,
    request: UpdateCompetitionRequest,
    roles: frozenset[str],
    api_deps: ApiDeps,
) -> CompetitionResponse:
    _authorize(roles=roles, action="update this competition", api_deps=api_deps)
    target = await resolve_competition_target(competition_id=request.id, api_deps=api_deps)
    with store_errors("Error updating competition"):
        updated = await api_deps.repository.update_competition(
            competition_id=target.competition_id,
            fields=_fields(request),
        )
    if updated is None:
        raise RecordNotFoundError("Competition not found")
    return to_competition_response(updated)


async def delete_competition_handler(
    *,
    competition_id: str,
    roles: frozenset[str],
    api_deps: ApiDeps,
) -> MessageResponse:
    _authorize(roles=roles, action="delete this competition", api_deps=api_deps)
    with store_errors("Error deleting competition"):
        deleted = await api_deps.repository.delete_competition(competition_id=competition_id)
    if not deleted:
        raise RecordNotFoundError("Competition not found")
    return MessageResponse(message="Competition deleted successfully")
