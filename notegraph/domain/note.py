"""Note domain models."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator

UNCATEGORIZED = "Uncategorized"
DEFAULT_CONTENT_TYPE = "plain-text"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class NoteMetadata(BaseModel):
    """Free-form note metadata the graph cares about."""

    model_config = ConfigDict(extra="allow")

    tags: list[str] = []
    pinned: bool = False
    favorite: bool = False


class Note(BaseModel):
    """Represents a note as handed over by the note store.

    Notes are read-only inputs: the graph never mutates them, and layout state
    is kept separately per node id.

    Attributes:
        id: Unique identifier of the note
        text: Plain text body
        title: Optional display title
        category: Category name, "Uncategorized" when missing
        tags: Unique tags in first-seen order
        content_type: Editor content type (plain-text, rich-text, code, ...)
        created_at: Creation timestamp (timezone aware, UTC when unspecified)
        deleted_at: Soft-delete timestamp, if the note is in the trash
        metadata: Additional metadata such as the pinned flag
    """

    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    title: str | None = None
    category: str = UNCATEGORIZED
    tags: tuple[str, ...] = ()
    content_type: str = DEFAULT_CONTENT_TYPE
    created_at: datetime = EPOCH
    deleted_at: datetime | None = None
    metadata: NoteMetadata = NoteMetadata()

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return UNCATEGORIZED
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _unique_tags(cls, value: object) -> tuple[str, ...]:
        if not isinstance(value, (list, tuple, set, frozenset)):
            return ()
        return tuple(dict.fromkeys(str(tag) for tag in value if tag))

    @field_validator("created_at", "deleted_at", mode="before")
    @classmethod
    def _parse_iso(cls, value: object) -> object:
        if isinstance(value, str):
            return datetime.fromisoformat(value.strip())
        return value

    @field_validator("created_at", "deleted_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_pinned(self) -> bool:
        return self.metadata.pinned

    def searchable_fields(self) -> list[str]:
        """Fields matched by free-text search."""
        return [self.title or "", self.text, self.category, *self.tags]
