"""
Note Schemas.

Pydantic schemas for note API request/response validation, plus the
keyset cursor used to page through notes.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from notes_api.core.pagination import decode_cursor, encode_cursor

TITLE_MAX_LENGTH = 255
NOTE_ID_MAX = 2**63 - 1


def _reject_blank(value: str, message: str) -> str:
    if not value.strip():
        raise ValueError(message)
    return value


class NoteCreate(BaseModel):
    """Schema for creating a new note."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
        description="Note title, must not be blank",
        examples=["My First Note"],
    )
    content: str = Field(
        default="",
        description="Note content, may be empty",
        examples=["This is the content of my note."],
    )

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        return _reject_blank(value, "Title is required")

    @field_validator("content", mode="before")
    @classmethod
    def null_content_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class NoteUpdate(BaseModel):
    """
    Schema for a partial update.

    An omitted or null field leaves the stored value unchanged. A title that
    is present must not be blank; content may be set to the empty string.
    """

    title: str | None = Field(
        default=None,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
        description="New title",
    )
    content: str | None = Field(
        default=None,
        description="New content",
    )

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return _reject_blank(value, "Title cannot be empty")

    def changes(self) -> dict[str, str]:
        """Fields the caller actually supplied, without nulls."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class NoteResponse(BaseModel):
    """Schema for note in API responses."""

    id: int = Field(description="Note unique identifier")
    title: str = Field(description="Note title")
    content: str = Field(description="Note content")
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    updated_at: datetime = Field(description="Last update timestamp (UTC)")

    model_config = ConfigDict(from_attributes=True)


class NoteShort(BaseModel):
    """Projection of a note used by batch lookups."""

    id: int
    title: str

    model_config = ConfigDict(from_attributes=True)


class NoteCursor(BaseModel):
    """
    Position of the last-seen note in (created_at DESC, id DESC) order.

    Sent to clients as an opaque token produced by `encode`.
    """

    created_at: datetime
    id: int = Field(ge=1, le=NOTE_ID_MAX)

    model_config = ConfigDict(frozen=True)

    @field_validator("created_at")
    @classmethod
    def created_at_is_naive(cls, value: datetime) -> datetime:
        # Note timestamps are stored as naive UTC
        if value.tzinfo is not None:
            raise ValueError("Cursor timestamp must not carry a timezone")
        return value

    @classmethod
    def from_note(cls, note: Any) -> "NoteCursor":
        """Cursor pointing at the given note."""
        return cls(created_at=note.created_at, id=note.id)

    def encode(self) -> str:
        return encode_cursor(self.model_dump_json())

    @classmethod
    def decode(cls, token: str) -> "NoteCursor":
        """
        Parse a token produced by `encode`.

        Raises:
            ValueError: If the token is malformed
        """
        raw = decode_cursor(token)
        try:
            return cls.model_validate_json(raw)
        except PydanticValidationError as exc:
            raise ValueError(f"Invalid cursor: {token}") from exc
