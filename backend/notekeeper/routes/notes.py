"""
Notekeeper Backend — Notes Route Handlers
===========================================

What:  CRUD endpoints for notes plus the per-note recycle-bin transitions.
Why:   Gives clients HTTP access to the repository contract.
How:   Each handler is a single repository call. A None/False result becomes
       NotFoundError (404); every other failure propagates to the global
       exception handlers registered in main.py.

Endpoints:
    GET    /api/notes                    active notes, newest update first
    GET    /api/notes/all                every note, recycle bin included
    GET    /api/notes/{id}               one note (active or deleted)
    POST   /api/notes                    create                     → 201
    PUT    /api/notes/{id}               replace title/content
    DELETE /api/notes/{id}               move to recycle bin        → 204
    POST   /api/notes/{id}/restore       bring back from recycle bin → 204
    DELETE /api/notes/{id}/permanent     delete for good            → 204
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from notekeeper.dependencies import get_repository
from notekeeper.exceptions import NotFoundError
from notekeeper.schemas.note import ErrorResponse, NoteIn, NoteResponse
from notekeeper.storage.base import NoteRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes", tags=["Notes"])

_NOT_FOUND = {404: {"description": "Note not found", "model": ErrorResponse}}
_CONFLICT = {409: {"description": "Concurrent modification", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[NoteResponse],
    summary="List active notes",
)
async def list_notes(
    repository: NoteRepository = Depends(get_repository),
) -> List[NoteResponse]:
    notes = await repository.find_all()
    return [NoteResponse.from_note(note) for note in notes]


@router.get(
    "/all",
    response_model=List[NoteResponse],
    summary="List all notes, including the recycle bin",
)
async def list_all_notes(
    repository: NoteRepository = Depends(get_repository),
) -> List[NoteResponse]:
    notes = await repository.find_all_including_deleted()
    return [NoteResponse.from_note(note) for note in notes]


@router.get(
    "/{note_id}",
    response_model=NoteResponse,
    responses=_NOT_FOUND,
    summary="Get a single note by ID",
)
async def get_note(
    note_id: str,
    repository: NoteRepository = Depends(get_repository),
) -> NoteResponse:
    """
    Deleted notes are returned too; clients tell them apart by deletedAt.
    Malformed ids are a 404, not a 400: the backend decides what an id looks like.
    """
    note = await repository.find_by_id(note_id)
    if note is None:
        raise NotFoundError(resource="note", resource_id=note_id)
    return NoteResponse.from_note(note)


@router.post(
    "",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Empty title or content", "model": ErrorResponse}},
    summary="Create a note",
)
async def create_note(
    body: NoteIn,
    repository: NoteRepository = Depends(get_repository),
) -> NoteResponse:
    note = await repository.create(body.title, body.content)
    logger.info("Created note %s", note.id)
    return NoteResponse.from_note(note)


@router.put(
    "/{note_id}",
    response_model=NoteResponse,
    responses={**_NOT_FOUND, **_CONFLICT},
    summary="Replace a note's title and content",
)
async def update_note(
    note_id: str,
    body: NoteIn,
    repository: NoteRepository = Depends(get_repository),
) -> NoteResponse:
    note = await repository.update(note_id, body.title, body.content)
    if note is None:
        raise NotFoundError(resource="note", resource_id=note_id)
    return NoteResponse.from_note(note)


@router.delete(
    "/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**_NOT_FOUND, **_CONFLICT},
    summary="Move a note to the recycle bin",
)
async def move_note_to_recycle_bin(
    note_id: str,
    repository: NoteRepository = Depends(get_repository),
) -> Response:
    if not await repository.move_to_recycle_bin(note_id):
        raise NotFoundError(resource="note", resource_id=note_id)
    logger.info("Moved note %s to the recycle bin", note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{note_id}/restore",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**_NOT_FOUND, **_CONFLICT},
    summary="Restore a note from the recycle bin",
)
async def restore_note(
    note_id: str,
    repository: NoteRepository = Depends(get_repository),
) -> Response:
    if not await repository.restore(note_id):
        raise NotFoundError(resource="note", resource_id=note_id)
    logger.info("Restored note %s", note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{note_id}/permanent",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**_NOT_FOUND, **_CONFLICT},
    summary="Permanently delete a note",
)
async def delete_note_permanently(
    note_id: str,
    repository: NoteRepository = Depends(get_repository),
) -> Response:
    """Works on active and deleted notes alike. There is no undo."""
    if not await repository.permanent_delete(note_id):
        raise NotFoundError(resource="note", resource_id=note_id)
    logger.info("Permanently deleted note %s", note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
