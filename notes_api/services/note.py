"""
Note Service.

Business logic layer for notes. Orchestrates the repository, turns
"no row affected" into NotFoundError, and wraps storage failures.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.core.exceptions import NotFoundError, ValidationError
from notes_api.core.pagination import PagedResult, paginate_keyset
from notes_api.models.note import Note
from notes_api.repositories.note import NoteRepository
from notes_api.schemas.note import NoteCreate, NoteCursor, NoteShort, NoteUpdate
from notes_api.services.base import BaseService


def _note_cursor(note: Note) -> str:
    return NoteCursor.from_note(note).encode()


class NoteService(BaseService):
    """
    Service for note business logic.

    Args:
        session: Database session for this unit of work
        timeout: Deadline in seconds for each database operation
        audit_log_enabled: Write a notes_log entry atomically with each
            created note
    """

    def __init__(
        self,
        session: AsyncSession,
        timeout: float | None = None,
        audit_log_enabled: bool = True,
    ) -> None:
        super().__init__(session, timeout=timeout)
        self.repo = NoteRepository(session)
        self.audit_log_enabled = audit_log_enabled

    async def create_note(self, data: NoteCreate) -> Note:
        """
        Create a note and return the stored record.

        Raises:
            ValidationError: If the title is blank
            PersistenceError: If either write fails; nothing is persisted
        """
        self._validate_required(data.model_dump(), ["title"])
        self._log_operation(
            "Creating note",
            title=data.title,
            audit_log=self.audit_log_enabled,
        )

        if self.audit_log_enabled:
            note_id = await self._execute_db_operation(
                "create_note_with_log",
                self.repo.create_note_with_log(data),
            )
        else:
            note_id = await self._execute_db_operation(
                "create_note",
                self.repo.create_note(data),
            )

        self._log_debug("Note created", note_id=note_id)
        return await self.get_note(note_id)

    async def get_note(self, note_id: int) -> Note:
        """
        Get a note by ID.

        Raises:
            NotFoundError: If note not found
        """
        return await self._execute_db_operation(
            "get_note",
            self.repo.get_by_id(note_id),
        )

    async def get_notes_short(self, note_ids: list[int]) -> list[NoteShort]:
        """Batch lookup of (id, title); unknown IDs are omitted."""
        if not note_ids:
            return []
        return await self._execute_db_operation(
            "get_notes_short",
            self.repo.get_by_ids(note_ids),
        )

    async def list_notes(
        self,
        limit: int,
        cursor: NoteCursor | None = None,
    ) -> PagedResult[Note]:
        """
        List one page of notes, newest first.

        Args:
            limit: Page size
            cursor: Position after which to continue, None for the first page

        Returns:
            PagedResult whose next_cursor continues the listing
        """
        if cursor is None:
            def query(n: int):
                return self.repo.list_first_page(n)
        else:
            def query(n: int):
                return self.repo.list_after_cursor(cursor, n)

        return await self._execute_db_operation(
            "list_notes",
            paginate_keyset(query_func=query, limit=limit, cursor_func=_note_cursor),
        )

    async def list_all_notes(self) -> list[Note]:
        """List every note, newest first. Unbounded."""
        self._logger.warning("Unbounded note listing requested")
        return await self._execute_db_operation(
            "list_all_notes",
            self.repo.get_all(),
        )

    async def update_note(self, note_id: int, data: NoteUpdate) -> Note:
        """
        Partially update a note.

        Args:
            note_id: Note ID to update
            data: Fields to change; omitted fields are kept

        Returns:
            Updated note

        Raises:
            ValidationError: If no fields are supplied or the title is blank
            NotFoundError: If note not found
        """
        changes = data.changes()
        if not changes:
            raise ValidationError("No fields to update")
        if "title" in changes:
            self._validate_required(changes, ["title"])

        self._log_operation(
            "Updating note",
            note_id=note_id,
            fields=list(changes.keys()),
        )

        updated = await self._execute_db_operation(
            "update_note",
            self.repo.update_note(note_id, data),
        )
        if not updated:
            raise NotFoundError("Note not found")

        return await self.get_note(note_id)

    async def delete_note(self, note_id: int) -> None:
        """
        Permanently delete a note.

        Raises:
            NotFoundError: If note not found
        """
        self._log_operation("Deleting note", note_id=note_id)

        deleted = await self._execute_db_operation(
            "delete_note",
            self.repo.delete_by_id(note_id),
        )
        if not deleted:
            raise NotFoundError("Note not found")
