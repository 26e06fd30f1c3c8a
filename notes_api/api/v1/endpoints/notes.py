"""
Notes API Endpoints.

REST API endpoints for note management.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query

from notes_api.core.config import get_app_config
from notes_api.core.dependencies import DbSession, RequestId
from notes_api.core.exceptions import ValidationError
from notes_api.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from notes_api.schemas.base import ApiResponse
from notes_api.schemas.note import (
    NOTE_ID_MAX,
    NoteCreate,
    NoteCursor,
    NoteResponse,
    NoteShort,
    NoteUpdate,
)
from notes_api.services.note import NoteService

router = APIRouter()

NoteId = Annotated[int, Path(ge=1, le=NOTE_ID_MAX, description="Note ID")]


def get_note_service(db: DbSession) -> NoteService:
    """Build a NoteService with the configured deadline and feature flags."""
    app_config = get_app_config()
    return NoteService(
        db,
        timeout=app_config.application.timeouts.database,
        audit_log_enabled=app_config.features.notes_audit_log_enabled,
    )


NoteServiceDep = Annotated[NoteService, Depends(get_note_service)]


@router.post(
    "",
    response_model=ApiResponse[NoteResponse],
    status_code=201,
    summary="Create a note",
    description="Create a new note with title and optional content.",
)
async def create_note(
    data: NoteCreate,
    service: NoteServiceDep,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Create a new note."""
    note = await service.create_note(data)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.get(
    "",
    summary="List notes (paginated)",
    description=(
        "Get a page of notes, newest first. Pass the returned next_cursor "
        "to continue. all=true returns every note when enabled."
    ),
)
async def list_notes(
    service: NoteServiceDep,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    all_notes: bool = Query(
        default=False,
        alias="all",
        description="Return every note without paging",
    ),
) -> dict[str, Any]:
    """List notes with keyset pagination."""
    if all_notes:
        if not get_app_config().features.notes_unbounded_list_enabled:
            raise ValidationError(
                "Unbounded listing is disabled",
                details={"all": "Use limit and cursor to page through notes"},
            )
        notes = await service.list_all_notes()
        response = ApiResponse(data=[NoteResponse.model_validate(n) for n in notes])
        return response.model_dump(mode="json")

    cursor = None
    if pagination.is_cursor_based:
        try:
            cursor = NoteCursor.decode(pagination.cursor)
        except ValueError as e:
            raise ValidationError(
                "Invalid cursor",
                details={"cursor": "Must be a next_cursor value from a previous page"},
            ) from e

    page = await service.list_notes(limit=pagination.limit, cursor=cursor)

    return create_paginated_response(
        items=page.items,
        item_schema=NoteResponse,
        limit=page.limit,
        cursor=pagination.cursor,
        next_cursor=page.next_cursor,
        request_id=request_id,
    )


@router.get(
    "/batch",
    response_model=ApiResponse[list[NoteShort]],
    summary="Batch lookup",
    description="Get id and title for several notes. Unknown IDs are omitted.",
)
async def get_notes_batch(
    service: NoteServiceDep,
    request_id: RequestId,
    ids: list[int] = Query(default=[], description="Note IDs"),
) -> ApiResponse[list[NoteShort]]:
    """Batch-fetch note titles."""
    if any(not 1 <= note_id <= NOTE_ID_MAX for note_id in ids):
        raise ValidationError(
            "Invalid note ID",
            details={"ids": f"Must be between 1 and {NOTE_ID_MAX}"},
        )
    notes = await service.get_notes_short(ids)
    return ApiResponse(data=notes)


@router.get(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Get a note",
    description="Get a single note by ID.",
)
async def get_note(
    note_id: NoteId,
    service: NoteServiceDep,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Get a note by ID."""
    note = await service.get_note(note_id)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.patch(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Update a note",
    description="Update an existing note. Only provided fields are updated.",
)
async def update_note(
    note_id: NoteId,
    data: NoteUpdate,
    service: NoteServiceDep,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Update a note."""
    note = await service.update_note(note_id, data)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.delete(
    "/{note_id}",
    status_code=204,
    summary="Delete a note",
    description="Permanently delete a note.",
)
async def delete_note(
    note_id: NoteId,
    service: NoteServiceDep,
    request_id: RequestId,
) -> None:
    """Delete a note."""
    await service.delete_note(note_id)
