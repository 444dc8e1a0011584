"""
Notekeeper Backend — Note Entity
==================================

What:  The Note record returned by every repository adapter.
Why:   Callers get a detached snapshot that is the same whichever storage
       backend produced it: no backend handle, no revision token, no ObjectId.
How:   Frozen dataclass plus a few helpers shared by the adapters
       (field validation, millisecond-precision clock, ISO formatting).

Lifecycle:
    create            → deleted_at = None, created_at == updated_at
    update            → title/content/updated_at change, deleted_at untouched
    move_to_recycle_bin → deleted_at = now, updated_at = now
    restore           → deleted_at = None, updated_at = now
    permanent_delete  → record gone, id never resolves again
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from notekeeper.exceptions import ValidationError


def utcnow() -> datetime:
    """
    Current UTC time truncated to milliseconds.

    Both backends store milliseconds (CouchDB as ISO strings written by us,
    MongoDB as BSON dates), so truncating up front keeps the note returned
    by create() equal to the one read back later.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def isoformat(value: datetime) -> str:
    """Format an aware datetime as ``2024-01-15T12:00:00.000Z``."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC) and ISO-8601 strings,
    including the trailing ``Z`` form. Returns None for anything missing or
    unparseable so that hydration can decide what to do with the record.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, str) and value:
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    return None


def _is_filled(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_note_fields(title: Any, content: Any) -> None:
    """
    Enforce the non-empty title/content invariant.

    Raises:
        ValidationError: title or content missing, not a string, or blank.
    """
    for field, value in (("title", title), ("content", content)):
        if not _is_filled(value):
            raise ValidationError(
                message=f"Note {field} is required and must not be empty",
                field=field,
            )


@dataclass(frozen=True)
class Note:
    """
    A short text note.

    Attributes:
        id:          Backend-assigned identifier, immutable after creation
        title:       Non-empty title
        content:     Non-empty body text
        created_at:  When the note was created (aware UTC)
        updated_at:  Advanced on every mutation, including soft delete/restore
        deleted_at:  None while active; when it entered the recycle bin otherwise
    """

    id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @classmethod
    def from_record(cls, note_id: Any, record: Any) -> Optional["Note"]:
        """
        Hydrate a Note from a stored document, or return None if it is malformed.

        A record missing one of createdAt/updatedAt borrows the other one.
        A record without an id, a non-blank title and content, or any usable
        timestamp is malformed; the caller decides whether that means
        "skip this row" or "not found".
        """
        if not note_id or not isinstance(record, dict):
            return None
        title = record.get("title")
        content = record.get("content")
        if not _is_filled(title) or not _is_filled(content):
            return None

        created_at = parse_timestamp(record.get("createdAt"))
        updated_at = parse_timestamp(record.get("updatedAt"))
        created_at = created_at or updated_at
        updated_at = updated_at or created_at
        if created_at is None:
            return None

        return cls(
            id=str(note_id),
            title=title,
            content=content,
            created_at=created_at,
            updated_at=updated_at,
            deleted_at=parse_timestamp(record.get("deletedAt")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain-record form with camelCase keys; deletedAt is null, never omitted."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
            "deletedAt": isoformat(self.deleted_at) if self.deleted_at else None,
        }

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id!r}, title={self.title!r}, "
            f"deleted={self.is_deleted})>"
        )
