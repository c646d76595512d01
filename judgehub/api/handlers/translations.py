from __future__ import annotations

import asyncio

from judgehub.api.handlers.deps import ApiDeps, store_errors
from judgehub.api.schemas import (
    CreateTranslationRequest,
    CreateTranslationResponse,
    TranslationLanguageResponse,
    TranslationResponse,
)
from judgehub.domain.errors import DomainDependencyError, RecordNotFoundError
from judgehub.domain.models import TranslationSnapshot

COMPONENT_ID_LIST = "api.list_translations"
COMPONENT_ID_CREATE = "api.create_translation"
COMPONENT_ID_LANGUAGES = "api.list_translation_languages"

NO_RECORDS_MESSAGE = "No translation records found"


def to_translation_response(snapshot: TranslationSnapshot) -> TranslationResponse:
    return TranslationResponse(
        id=snapshot.translation_id,
        username=snapshot.username,
        language_from=snapshot.language_from,
        language_to=snapshot.language_to,
        requested_text=snapshot.requested_text,
        translated_text=snapshot.translated_text,
    )


async def list_translations_handler(
    *,
    username: str | None = None,
    api_deps: ApiDeps,
) -> list[TranslationResponse]:
    with store_errors("Error fetching translation records"):
        items = await api_deps.repository.list_translations(username=username)
    if not items:
        raise RecordNotFoundError(NO_RECORDS_MESSAGE)
    return [to_translation_response(item) for item in items]


async def get_translation_handler(*, translation_id: str, api_deps: ApiDeps) -> TranslationResponse:
    with store_errors("Error fetching translation records"):
        found = await api_deps.repository.get_translation(translation_id=translation_id)
    if found is None:
        raise RecordNotFoundError(NO_RECORDS_MESSAGE)
    return to_translation_response(found)


async def create_translation_handler(
    *,
    request: CreateTranslationRequest,
    api_deps: ApiDeps,
) -> CreateTranslationResponse:
    try:
        translated = await asyncio.to_thread(
            api_deps.translator.translate,
            text=request.text,
            source=request.source,
            target=request.target,
        )
    except DomainDependencyError as exc:
        raise DomainDependencyError(
            "Cannot connect to Google API to translate, please try again later"
        ) from exc

    with store_errors("Error saving translation record"):
        await api_deps.repository.create_translation(
            username=request.username,
            language_from=request.source,
            language_to=request.target,
            requested_text=request.text,
            translated_text=translated,
        )
    return CreateTranslationResponse(
        message=f"New translation record for the user {request.username} created",
        translation=translated,
    )


async def list_translation_languages_handler(*, api_deps: ApiDeps) -> list[TranslationLanguageResponse]:
    try:
        languages = await asyncio.to_thread(api_deps.translator.list_languages)
    except DomainDependencyError as exc:
        raise DomainDependencyError("Cannot connect to Google API, please try again later.") from exc
    return [TranslationLanguageResponse(language=item.language, name=item.name) for item in languages]
