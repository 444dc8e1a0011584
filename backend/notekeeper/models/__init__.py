"""Domain entities shared by every storage backend."""

from notekeeper.models.note import Note

__all__ = ["Note"]
