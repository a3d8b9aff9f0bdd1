from typing import List, Protocol

from notegraph.domain.note import Note


class NoteSource(Protocol):
    """Protocol for the note store the graph is built from."""

    def list_notes(self) -> List[Note]:
        """Get all notes, soft-deleted ones included."""
        ...

    def get_note(self, note_id: str) -> Note | None:
        """Get a note by its ID."""
        ...
