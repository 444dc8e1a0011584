"""
Notekeeper Backend — Recycle Bin Route Handlers
=================================================

What:  Listing, counting, and bulk operations over soft-deleted notes.
How:   Thin wrappers over the repository's recycle-bin operations.

Endpoints:
    GET    /api/recycle-bin           deleted notes, most recently deleted first
    GET    /api/recycle-bin/count     {"count": n}
    DELETE /api/recycle-bin           permanently delete everything in the bin
    POST   /api/recycle-bin/restore   restore everything in the bin

Bulk counts:
    The bulk operations report how many notes were actually affected. On
    CouchDB a note that changed between listing and writing is skipped, so
    the count can be lower than the bin's size a moment earlier.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from notekeeper.dependencies import get_repository
from notekeeper.schemas.note import CountResponse, NoteResponse
from notekeeper.storage.base import NoteRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recycle-bin", tags=["Recycle Bin"])


@router.get("", response_model=List[NoteResponse], summary="List the recycle bin")
async def list_recycle_bin(
    repository: NoteRepository = Depends(get_repository),
) -> List[NoteResponse]:
    notes = await repository.find_deleted()
    return [NoteResponse.from_note(note) for note in notes]


@router.get("/count", response_model=CountResponse, summary="Count notes in the recycle bin")
async def count_recycle_bin(
    repository: NoteRepository = Depends(get_repository),
) -> CountResponse:
    return CountResponse(count=await repository.count_deleted())


@router.delete("", response_model=CountResponse, summary="Empty the recycle bin")
async def empty_recycle_bin(
    repository: NoteRepository = Depends(get_repository),
) -> CountResponse:
    removed = await repository.empty_recycle_bin()
    logger.info("Recycle bin emptied via API: %d note(s) removed", removed)
    return CountResponse(count=removed)


@router.post("/restore", response_model=CountResponse, summary="Restore every deleted note")
async def restore_recycle_bin(
    repository: NoteRepository = Depends(get_repository),
) -> CountResponse:
    restored = await repository.restore_all()
    logger.info("Recycle bin restored via API: %d note(s) restored", restored)
    return CountResponse(count=restored)
