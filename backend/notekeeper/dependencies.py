"""
Notekeeper Backend — FastAPI Dependencies
===========================================

What:  Providers injected into route handlers with Depends().
Why:   The repository is built and initialized once by the lifespan handler
       (or handed to create_app() in tests). Routes reach it through
       app.state, so there is no module-level repository to patch.
"""

from fastapi import Request

from notekeeper.exceptions import BackendUnavailableError
from notekeeper.storage.base import NoteRepository


def get_repository(request: Request) -> NoteRepository:
    """Return the repository attached to the running application."""
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise BackendUnavailableError(message="The storage backend has not been initialized.")
    return repository
