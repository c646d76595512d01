from __future__ import annotations

from datetime import UTC, datetime

from judgehub.api.handlers.deps import ApiDeps, store_errors
from judgehub.api.schemas import (
    AnnouncementResponse,
    CreateAnnouncementRequest,
    MessageResponse,
    UpdateAnnouncementRequest,
)
from judgehub.domain.errors import RecordNotFoundError
from judgehub.domain.models import AnnouncementChanges, AnnouncementSnapshot

COMPONENT_ID = "api.announcements"


def to_announcement_response(snapshot: AnnouncementSnapshot) -> AnnouncementResponse:
    return AnnouncementResponse(
        id=snapshot.announcement_id,
        title=snapshot.title,
        content=snapshot.content,
        author=snapshot.author,
        created_at=snapshot.created_at,
    )


async def list_announcements_handler(*, api_deps: ApiDeps) -> list[AnnouncementResponse]:
    with store_errors("Error fetching announcements"):
        items = await api_deps.repository.list_announcements()
    return [to_announcement_response(item) for item in items]


async def create_announcement_handler(
    *,
    request: CreateAnnouncementRequest,
    api_deps: ApiDeps,
) -> AnnouncementResponse:
    with store_errors("Error creating announcement"):
        created = await api_deps.repository.create_announcement(
            title=request.title,
            content=request.content,
            author=request.author,
            created_at=datetime.now(tz=UTC),
        )
    return to_announcement_response(created)


async def update_announcement_handler(
    *,
    request: UpdateAnnouncementRequest,
    api_deps: ApiDeps,
) -> AnnouncementResponse:
    with store_errors("Error updating announcement"):
        updated = await api_deps.repository.update_announcement(
            announcement_id=request.id,
            changes=AnnouncementChanges(title=request.title, content=request.content, author=request.author),
        )
    if updated is None:
        raise RecordNotFoundError("Announcement not found")
    return to_announcement_response(updated)


async def delete_announcement_handler(*, announcement_id: str, api_deps: ApiDeps) -> MessageResponse:
    with store_errors("Error deleting announcement"):
        deleted = await api_deps.repository.delete_announcement(announcement_id=announcement_id)
    if not deleted:
        raise RecordNotFoundError("Announcement not found")
    return MessageResponse(message=f"Announcement {announcement_id} deleted")
