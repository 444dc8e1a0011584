"""
Notekeeper Backend — Storage Layer
====================================

What:  Note repository adapters and the factory that picks one.
Why:   The configured vendor is resolved exactly once, here. Everything
       above this package only ever sees a NoteRepository.
How:   DbVendor enumerates the supported backends; create_note_repository()
       maps a vendor to its adapter class.

Adapters:
    couchdb.py   indexed-view adapter (CouchDB HTTP API via httpx)
    mongodb.py   query adapter (MongoDB via pymongo's AsyncMongoClient)
"""

from enum import Enum

from notekeeper.storage.base import NoteRepository
from notekeeper.storage.couchdb import CouchDbNoteRepository
from notekeeper.storage.mongodb import MongoDbNoteRepository


class DbVendor(str, Enum):
    COUCHDB = "couchdb"
    MONGODB = "mongodb"


_ADAPTERS = {
    DbVendor.COUCHDB: CouchDbNoteRepository,
    DbVendor.MONGODB: MongoDbNoteRepository,
}


def create_note_repository(
    vendor: DbVendor,
    url: str,
    db_name: str,
    timeout: float = 10.0,
) -> NoteRepository:
    """
    Build (but do not initialize) the adapter for ``vendor``.

    The caller owns the returned repository: await init() before use and
    close() on shutdown.

    Raises:
        ValueError: vendor is not a supported DbVendor
    """
    vendor = DbVendor(vendor)
    return _ADAPTERS[vendor](url, db_name, timeout=timeout)


__all__ = [
    "CouchDbNoteRepository",
    "DbVendor",
    "MongoDbNoteRepository",
    "NoteRepository",
    "create_note_repository",
]
