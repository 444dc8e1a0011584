"""
Notekeeper Backend — Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the API contract between clients and backend.
Why:   Strict input validation, automatic serialization, and OpenAPI doc generation.
How:   FastAPI uses these models to validate request bodies, serialize responses,
       and generate Swagger/OpenAPI documentation automatically.
Who:   Used by route handlers as request bodies and response models.

Wire Shape:
    Python attributes are snake_case; JSON keys are the camelCase names the
    storage documents use (createdAt, updatedAt, deletedAt). Timestamps are
    ISO 8601 UTC strings with millisecond precision, exactly as produced by
    Note.to_dict(). deletedAt is always present, null for active notes.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from notekeeper.models.note import Note


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteIn(BaseModel):
    """Body of POST /api/notes and PUT /api/notes/{id}."""

    title: str = Field(min_length=1, description="Note title (non-empty)")
    content: str = Field(min_length=1, description="Note body text (non-empty)")

    @field_validator("title", "content")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        """Whitespace-only values count as empty."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    What:  Full representation of a note, active or in the recycle bin.
    Who:   Returned by every endpoint that hands out notes.
    """

    id: str = Field(description="Backend-assigned note identifier")
    title: str
    content: str
    created_at: str = Field(alias="createdAt", description="Creation time (UTC ISO 8601)")
    updated_at: str = Field(alias="updatedAt", description="Last mutation (UTC ISO 8601)")
    deleted_at: Optional[str] = Field(
        default=None,
        alias="deletedAt",
        description="When the note entered the recycle bin; null while active",
    )

    model_config = {"populate_by_name": True}

    @classmethod
    def from_note(cls, note: Note) -> "NoteResponse":
        return cls.model_validate(note.to_dict())


class CountResponse(BaseModel):
    """Number of notes affected by (or matching) a recycle-bin operation."""

    count: int = Field(ge=0)


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.
    Why:   Clients need a consistent structure to parse errors programmatically.

    Example:
        {
            "error": "conflict",
            "message": "The note was modified concurrently. Please reload and try again.",
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and storage backend status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """

    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    backend: str = Field(description="Configured storage backend: couchdb or mongodb")
    database: str = Field(description="Backend connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
