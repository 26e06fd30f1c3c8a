"""
Note Repository.

Data access layer for notes. Every listing uses the canonical ordering
(created_at DESC, id DESC); continuation pages compare the (created_at, id)
pair as a single row value so notes sharing a timestamp are neither skipped
nor repeated.
"""

from sqlalchemy import select, tuple_
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.core.utils import utc_now
from notes_api.models.note import Note, NotesLog
from notes_api.repositories.base import BaseRepository
from notes_api.schemas.note import NoteCreate, NoteCursor, NoteShort, NoteUpdate

NOTE_CREATED_ACTION = "created"
CREATE_WITH_LOG_ISOLATION = "READ COMMITTED"

CANONICAL_ORDER = (Note.created_at.desc(), Note.id.desc())


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note model.

    Inherits standard CRUD operations from BaseRepository and adds
    note-specific writes and keyset listing.
    """

    model = Note

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def create_note(self, data: NoteCreate) -> int:
        """
        Insert a note and return its store-assigned ID.

        created_at and updated_at receive the same timestamp.
        """
        now = utc_now()
        note = await self.create(
            title=data.title,
            content=data.content,
            created_at=now,
            updated_at=now,
        )
        return note.id

    async def create_note_with_log(self, data: NoteCreate) -> int:
        """
        Insert a note and its "created" log entry atomically.

        Both rows commit together or neither is visible.

        Returns:
            ID of the new note
        """
        async with self.transaction(isolation_level=CREATE_WITH_LOG_ISOLATION):
            note_id = await self.create_note(data)
            await self._append_log(note_id, NOTE_CREATED_ACTION)
        return note_id

    async def _append_log(self, note_id: int, action: str) -> None:
        self.session.add(NotesLog(note_id=note_id, action=action, created_at=utc_now()))
        await self.session.flush()

    async def update_note(self, note_id: int, data: NoteUpdate) -> bool:
        """
        Apply a partial update.

        Fields absent from `data` keep their stored value; updated_at is
        always refreshed.

        Returns:
            False if no note has this ID
        """
        return await self.update_by_id(note_id, **data.changes(), updated_at=utc_now())

    async def list_first_page(self, limit: int) -> list[Note]:
        """Get the first `limit` notes in canonical order."""
        result = await self.session.execute(
            select(Note).order_by(*CANONICAL_ORDER).limit(limit)
        )
        return list(result.scalars().all())

    async def list_after_cursor(self, cursor: NoteCursor, limit: int) -> list[Note]:
        """
        Get up to `limit` notes that follow `cursor` in canonical order.

        Args:
            cursor: Position of the last note of the previous page
            limit: Maximum number of notes to return
        """
        result = await self.session.execute(
            select(Note)
            .where(tuple_(Note.created_at, Note.id) < (cursor.created_at, cursor.id))
            .order_by(*CANONICAL_ORDER)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_by_ids(self, ids: list[int]) -> list[NoteShort]:
        """
        Batch-fetch (id, title) for the given IDs.

        Missing IDs are skipped. Result order is not guaranteed to follow
        `ids`.
        """
        if not ids:
            return []

        result = await self.session.execute(
            select(Note.id, Note.title).where(Note.id.in_(ids))
        )
        return [NoteShort(id=row.id, title=row.title) for row in result]

    async def get_all(self) -> list[Note]:
        """Get every note in canonical order. Unbounded; small datasets only."""
        result = await self.session.execute(
            select(Note).order_by(*CANONICAL_ORDER)
        )
        return list(result.scalars().all())
