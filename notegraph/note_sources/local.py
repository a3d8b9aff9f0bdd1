import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping

from loguru import logger

from notegraph.domain.note import Note
from notegraph.ingestion.ingestor import coerce_notes
from notegraph.note_sources.base import NoteSource


class LocalNoteSource(NoteSource):
    """Read-only note source backed by a JSON export of the note store."""

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalNoteSource.

        Args:
            filepath: Path to a JSON file holding either a list of notes or an
                     object with a "notes" list. If not provided, the source is
                     empty until populated with from_notes().

        Raises:
            FileNotFoundError: If a filepath is given but does not exist
        """
        self._filepath = str(filepath) if filepath else None
        self._notes: dict[str, Note] = {}

        if self._filepath:
            if not Path(self._filepath).exists():
                raise FileNotFoundError(f"Note file not found: {self._filepath}")
            with open(self._filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
            records = data.get("notes", []) if isinstance(data, dict) else data
            self._load(records if isinstance(records, list) else [])
            logger.info(f"Loaded {len(self._notes)} notes from {self._filepath}")

    @classmethod
    def from_notes(cls, notes: Iterable[Note | Mapping[str, Any]]) -> "LocalNoteSource":
        """Create a source from in-memory notes (useful for testing).

        Args:
            notes: Notes or raw note mappings

        Returns:
            LocalNoteSource holding the given notes
        """
        instance = cls(filepath=None)
        instance._load(notes)
        return instance

    def list_notes(self) -> List[Note]:
        return list(self._notes.values())

    def get_note(self, note_id: str) -> Note | None:
        return self._notes.get(note_id)

    def _load(self, records: Iterable[Note | Mapping[str, Any]]) -> None:
        for note in coerce_notes(records):
            self._notes.setdefault(note.id, note)
