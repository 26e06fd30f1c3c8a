# SQLAlchemy models package
from notes_api.models.base import Base
from notes_api.models.note import Note, NotesLog

__all__ = ["Base", "Note", "NotesLog"]
