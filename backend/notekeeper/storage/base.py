"""
Notekeeper Backend — Note Repository Contract
===============================================

What:  The capability set every storage backend must provide.
Why:   Routes and services talk to one interface whatever the configured
       backend is; the indexed-view (CouchDB) and query (MongoDB) adapters
       are interchangeable behind it.
How:   Every operation is an async method that raises
       UnsupportedOperationError until a concrete adapter overrides it.
       A partially implemented adapter therefore fails loudly at the call
       site instead of returning a plausible-looking empty result.

Contract (all operations are coroutines and may raise):
    init()                        idempotent setup; fails if backend unreachable
    find_all()                    active notes, most recently updated first
    find_deleted()                recycle bin, most recently deleted first
    find_all_including_deleted()  everything, most recently updated first
    find_by_id(id)                Note or None (also None for malformed ids)
    create(title, content)        new Note with backend-assigned id
    update(id, title, content)    Note or None; keeps created_at/deleted_at
    move_to_recycle_bin(id)       True if the note existed
    restore(id)                   True if the note existed
    permanent_delete(id)          True if the note existed and was removed
    empty_recycle_bin()           number of notes permanently removed
    restore_all()                 number of notes restored
    count_deleted()               number of notes in the recycle bin
    close()                       release the backend handle
"""

from typing import List, Optional

from notekeeper.exceptions import UnsupportedOperationError
from notekeeper.models.note import Note


class NoteRepository:
    """
    Base class for note storage adapters.

    Subclasses set ``backend_name`` and override the full operation set:

        class CouchDbNoteRepository(NoteRepository):
            backend_name = "couchdb"

    Each adapter instance owns exactly one backend handle (HTTP client or
    driver client), established by init() and released by close().
    """

    backend_name: str = "unknown"

    def _unsupported(self, operation: str) -> UnsupportedOperationError:
        return UnsupportedOperationError(operation, backend=self.backend_name)

    async def init(self) -> None:
        raise self._unsupported("init")

    async def find_all(self) -> List[Note]:
        raise self._unsupported("find_all")

    async def find_deleted(self) -> List[Note]:
        raise self._unsupported("find_deleted")

    async def find_all_including_deleted(self) -> List[Note]:
        raise self._unsupported("find_all_including_deleted")

    async def find_by_id(self, note_id: str) -> Optional[Note]:
        raise self._unsupported("find_by_id")

    async def create(self, title: str, content: str) -> Note:
        raise self._unsupported("create")

    async def update(self, note_id: str, title: str, content: str) -> Optional[Note]:
        raise self._unsupported("update")

    async def move_to_recycle_bin(self, note_id: str) -> bool:
        raise self._unsupported("move_to_recycle_bin")

    async def restore(self, note_id: str) -> bool:
        raise self._unsupported("restore")

    async def permanent_delete(self, note_id: str) -> bool:
        raise self._unsupported("permanent_delete")

    async def empty_recycle_bin(self) -> int:
        raise self._unsupported("empty_recycle_bin")

    async def restore_all(self) -> int:
        raise self._unsupported("restore_all")

    async def count_deleted(self) -> int:
        raise self._unsupported("count_deleted")

    async def close(self) -> None:
        """Release the backend handle. Adapters without one may keep this no-op."""
        return None
