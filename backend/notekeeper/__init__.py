"""
Notekeeper Backend — Application Package Initializer
======================================================

What: Note storage service with a recycle bin over CouchDB or MongoDB.
Who:  Imported by uvicorn (notekeeper.main:app), pytest, and the CLI entry point.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   NoteRepository (storage contract) │  ← one interface, two adapters
    ├──────────────────┬──────────────────┤
    │  CouchDB adapter │  MongoDB adapter │  ← views + _rev / queries + atomic ops
    └──────────────────┴──────────────────┘

    Models (Note) and Schemas (pydantic) sit beside the layers: the Note
    entity is what adapters return, schemas are what the API speaks.
    The adapter is chosen once at startup from DB_VENDOR.
"""

__version__ = "1.0.0"
