"""
Notekeeper Backend — MongoDB Note Repository (Query Adapter)
==============================================================

What:  NoteRepository implementation backed by MongoDB through pymongo's
       native asyncio client (AsyncMongoClient).
Why:   MongoDB answers ad-hoc predicates directly and mutates single
       documents atomically, so this adapter needs neither view refreshes nor
       revision tokens. Concurrent writers to the same note: last one wins.
How:   Deletion-state predicates are pushed down to the server; every
       single-note mutation is one find-and-modify round trip.

Recycle-Bin Accounting:
    count_deleted, empty_recycle_bin and restore_all act on the same notes
    find_deleted lists. Stored records that do not hydrate into a Note are
    left where they are and never counted.

Identifier Handling:
    Note ids are ObjectId hex strings (24 hex characters). Anything else is
    rejected by bson with InvalidId; that is caught here and reported as
    "not found" (None / False), never as an error.

Record Shape:
    Declared once per adapter on init() as a $jsonSchema validator on the
    ``notes`` collection (non-blank title/content, date timestamps), plus
    descending indexes on updatedAt and deletedAt for the listing sorts.
    Re-running init() is a no-op.

Error Translation:
    ConnectionFailure (incl. ServerSelectionTimeoutError) → BackendUnavailableError
    OperationFailure code 18/13 (auth)                    → BackendUnavailableError
    OperationFailure code 121 (document validation)       → ValidationError
    any other PyMongoError                                → DatabaseError
"""

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, AsyncMongoClient, ReturnDocument
from pymongo.errors import (
    CollectionInvalid,
    ConnectionFailure,
    OperationFailure,
    PyMongoError,
)

from notekeeper.exceptions import (
    BackendUnavailableError,
    DatabaseError,
    ValidationError,
)
from notekeeper.models.note import Note, utcnow, validate_note_fields
from notekeeper.storage.base import NoteRepository

logger = logging.getLogger(__name__)

COLLECTION_NAME = "notes"

# MongoDB server error codes
AUTH_FAILURE_CODES = {13, 18}  # Unauthorized, AuthenticationFailed
DOCUMENT_VALIDATION_FAILURE = 121

ACTIVE_FILTER: Dict[str, Any] = {"deletedAt": None}
DELETED_FILTER: Dict[str, Any] = {"deletedAt": {"$ne": None}}

NOTE_SCHEMA: Dict[str, Any] = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["title", "content", "createdAt", "updatedAt"],
        "properties": {
            "title": {"bsonType": "string", "pattern": "\\S"},
            "content": {"bsonType": "string", "pattern": "\\S"},
            "createdAt": {"bsonType": "date"},
            "updatedAt": {"bsonType": "date"},
            "deletedAt": {"bsonType": ["date", "null"]},
        },
    }
}


class MongoDbNoteRepository(NoteRepository):
    """
    MongoDB implementation of the note repository.

    Usage:
        repository = MongoDbNoteRepository("mongodb://localhost:27017", "notes_db")
        await repository.init()
        note = await repository.create("Title", "Content")
    """

    backend_name = "mongodb"

    def __init__(self, url: str, db_name: str, timeout: float = 10.0):
        """
        Args:
            url: MongoDB connection string (credentials allowed)
            db_name: Database holding the ``notes`` collection
            timeout: Server selection timeout in seconds
        """
        self.url = url
        self.db_name = db_name
        self.timeout = timeout
        self._client: Optional[AsyncMongoClient] = None
        self._collection = None
        self._display_url = re.sub(r"//[^@/]+@", "//", url)

    # ══════════════════════════════════════════════════════════════════════
    # Setup
    # ══════════════════════════════════════════════════════════════════════

    async def init(self) -> None:
        """
        Connect, verify the server answers, and declare the collection shape.

        Raises:
            BackendUnavailableError: server unreachable or credentials rejected
            DatabaseError: collection or index creation failed
        """
        if self._collection is not None:
            logger.debug("MongoDB repository already initialized; skipping")
            return

        logger.info(
            "Connecting to MongoDB at %s (database=%s)", self._display_url, self.db_name
        )
        client = AsyncMongoClient(
            self.url,
            serverSelectionTimeoutMS=int(self.timeout * 1000),
            tz_aware=True,
        )
        try:
            with self._translate_errors("init"):
                await client.admin.command("ping")
                database = client[self.db_name]
                await self._declare_collection(database)
                collection = database[COLLECTION_NAME]
                await collection.create_index([("updatedAt", DESCENDING)], name="updatedAt_desc")
                await collection.create_index([("deletedAt", DESCENDING)], name="deletedAt_desc")
        except Exception:
            await client.close()
            raise

        self._client = client
        self._collection = collection
        logger.info("MongoDB repository ready")

    @staticmethod
    async def _declare_collection(database: Any) -> None:
        if COLLECTION_NAME in await database.list_collection_names():
            return
        try:
            await database.create_collection(COLLECTION_NAME, validator=NOTE_SCHEMA)
            logger.info("Created collection '%s' with schema validator", COLLECTION_NAME)
        except CollectionInvalid:
            logger.info("Collection '%s' was created concurrently; keeping it", COLLECTION_NAME)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
        self._client = None
        self._collection = None

    @property
    def _notes(self) -> Any:
        if self._collection is None:
            raise DatabaseError(
                message="The note repository has not been initialized.",
                context={"backend": self.backend_name},
            )
        return self._collection

    # ══════════════════════════════════════════════════════════════════════
    # Reads
    # ══════════════════════════════════════════════════════════════════════

    async def find_all(self) -> List[Note]:
        return await self._find(ACTIVE_FILTER, "updatedAt", "find_all")

    async def find_deleted(self) -> List[Note]:
        return await self._find(DELETED_FILTER, "deletedAt", "find_deleted")

    async def find_all_including_deleted(self) -> List[Note]:
        return await self._find({}, "updatedAt", "find_all_including_deleted")

    async def _find(self, query: Dict[str, Any], sort_field: str, operation: str) -> List[Note]:
        with self._translate_errors(operation):
            cursor = self._notes.find(query).sort(sort_field, DESCENDING)
            documents = [document async for document in cursor]
        return list(self._hydrate(documents))

    async def find_by_id(self, note_id: str) -> Optional[Note]:
        object_id = self._object_id(note_id)
        if object_id is None:
            return None

        with self._translate_errors("find_by_id", note_id):
            document = await self._notes.find_one({"_id": object_id})
        if document is None:
            return None

        note = Note.from_record(str(document["_id"]), document)
        if note is None:
            logger.warning("Note %s exists but is malformed; treating it as not found", note_id)
        return note

    async def count_deleted(self) -> int:
        return len(await self._deleted_note_ids("count_deleted"))

    # ══════════════════════════════════════════════════════════════════════
    # Single-document writes
    # ══════════════════════════════════════════════════════════════════════

    async def create(self, title: str, content: str) -> Note:
        validate_note_fields(title, content)
        now = utcnow()
        document = {
            "title": title,
            "content": content,
            "createdAt": now,
            "updatedAt": now,
            "deletedAt": None,
        }

        with self._translate_errors("create"):
            result = await self._notes.insert_one(document)
        note_id = str(result.inserted_id)
        logger.debug("Created note %s", note_id)

        return Note(
            id=note_id,
            title=title,
            content=content,
            created_at=now,
            updated_at=now,
            deleted_at=None,
        )

    async def update(self, note_id: str, title: str, content: str) -> Optional[Note]:
        validate_note_fields(title, content)
        object_id = self._object_id(note_id)
        if object_id is None:
            return None

        now = utcnow()
        with self._translate_errors("update", note_id):
            document = await self._notes.find_one_and_update(
                {"_id": object_id},
                {
                    "$set": {"title": title, "content": content, "updatedAt": now},
                    # fills in a missing createdAt, leaves an existing one alone
                    "$min": {"createdAt": now},
                },
                return_document=ReturnDocument.AFTER,
            )
        if document is None:
            return None
        logger.debug("Updated note %s", note_id)
        return Note.from_record(str(document["_id"]), document)

    async def move_to_recycle_bin(self, note_id: str) -> bool:
        now = utcnow()
        return await self._set_fields(
            note_id, {"deletedAt": now, "updatedAt": now}, "move_to_recycle_bin"
        )

    async def restore(self, note_id: str) -> bool:
        return await self._set_fields(
            note_id, {"deletedAt": None, "updatedAt": utcnow()}, "restore"
        )

    async def _set_fields(self, note_id: str, fields: Dict[str, Any], operation: str) -> bool:
        object_id = self._object_id(note_id)
        if object_id is None:
            return False

        with self._translate_errors(operation, note_id):
            document = await self._notes.find_one_and_update(
                {"_id": object_id},
                {"$set": fields},
                projection={"_id": 1},
                return_document=ReturnDocument.AFTER,
            )
        return document is not None

    async def permanent_delete(self, note_id: str) -> bool:
        object_id = self._object_id(note_id)
        if object_id is None:
            return False

        with self._translate_errors("permanent_delete", note_id):
            document = await self._notes.find_one_and_delete(
                {"_id": object_id}, projection={"_id": 1}
            )
        return document is not None

    # ══════════════════════════════════════════════════════════════════════
    # Bulk recycle-bin operations
    # ══════════════════════════════════════════════════════════════════════

    async def empty_recycle_bin(self) -> int:
        note_ids = await self._deleted_note_ids("empty_recycle_bin")
        if not note_ids:
            return 0
        with self._translate_errors("empty_recycle_bin"):
            result = await self._notes.delete_many(self._still_deleted(note_ids))
        removed = result.deleted_count or 0
        logger.info("Emptied recycle bin: %d note(s) permanently deleted", removed)
        return removed

    async def restore_all(self) -> int:
        note_ids = await self._deleted_note_ids("restore_all")
        if not note_ids:
            return 0
        with self._translate_errors("restore_all"):
            result = await self._notes.update_many(
                self._still_deleted(note_ids),
                {"$set": {"deletedAt": None, "updatedAt": utcnow()}},
            )
        restored = result.modified_count or 0
        logger.info("Restored %d note(s) from the recycle bin", restored)
        return restored

    async def _deleted_note_ids(self, operation: str) -> List[ObjectId]:
        with self._translate_errors(operation):
            documents = [document async for document in self._notes.find(DELETED_FILTER)]
        return [ObjectId(note.id) for note in self._hydrate(documents)]

    @staticmethod
    def _still_deleted(note_ids: List[ObjectId]) -> Dict[str, Any]:
        # a note restored since it was listed no longer matches
        return {"_id": {"$in": note_ids}, **DELETED_FILTER}

    # ══════════════════════════════════════════════════════════════════════
    # Helpers
    # ══════════════════════════════════════════════════════════════════════

    @staticmethod
    def _object_id(note_id: Any) -> Optional[ObjectId]:
        # ObjectId(None) would mint a fresh id, so only strings are accepted
        if not isinstance(note_id, str):
            return None
        try:
            return ObjectId(note_id)
        except (InvalidId, TypeError):
            logger.debug("Rejecting malformed note id %r", note_id)
            return None

    @staticmethod
    def _hydrate(documents: Iterable[Dict[str, Any]]) -> Iterator[Note]:
        for document in documents:
            note = Note.from_record(document.get("_id"), document)
            if note is None:
                logger.warning("Skipping malformed note document %s", document.get("_id"))
                continue
            yield note

    @contextmanager
    def _translate_errors(self, operation: str, note_id: Optional[str] = None) -> Iterator[None]:
        context = {"backend": self.backend_name, "operation": operation}
        if note_id:
            context["note_id"] = note_id
        try:
            yield
        except ConnectionFailure as e:
            logger.error("MongoDB at %s unreachable during %s: %s", self._display_url, operation, e)
            raise BackendUnavailableError(context=context) from e
        except OperationFailure as e:
            if e.code == DOCUMENT_VALIDATION_FAILURE:
                logger.warning("MongoDB rejected note document during %s: %s", operation, e)
                raise ValidationError(
                    message="Note title and content are required and must not be empty",
                    context=context,
                ) from e
            if e.code in AUTH_FAILURE_CODES:
                logger.error("MongoDB rejected our credentials during %s", operation)
                raise BackendUnavailableError(
                    message="Authentication with the storage backend failed.",
                    context=context,
                ) from e
            logger.error("MongoDB %s failed: %s", operation, e, exc_info=True)
            raise DatabaseError(context={**context, "code": e.code}) from e
        except PyMongoError as e:
            logger.error("MongoDB %s failed: %s", operation, e, exc_info=True)
            raise DatabaseError(context=context) from e
