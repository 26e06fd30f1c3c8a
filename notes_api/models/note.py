"""
Note Models.

Database models for notes and their append-only audit log.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from notes_api.core.utils import utc_now
from notes_api.models.base import Base, BigIntId, BigIntIdMixin, TimestampMixin


class Note(BigIntIdMixin, TimestampMixin, Base):
    """
    Note database model.

    Listings are ordered by (created_at DESC, id DESC); the composite index
    backs both the first page and keyset continuation queries.
    sqlite_autoincrement keeps SQLite from reusing ids of deleted rows.
    """

    __tablename__ = "notes"
    __table_args__ = (
        Index("ix_notes_created_at_id", "created_at", "id"),
        {"sqlite_autoincrement": True},
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default="",
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r})>"


class NotesLog(BigIntIdMixin, Base):
    """Audit record written in the same transaction as the note it describes."""

    __tablename__ = "notes_log"
    __table_args__ = {"sqlite_autoincrement": True}

    note_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<NotesLog(note_id={self.note_id}, action={self.action!r})>"
