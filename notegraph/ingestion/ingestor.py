"""Normalization of raw notes into graph nodes."""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from notegraph.domain.graph import GraphNode
from notegraph.domain.note import DEFAULT_CONTENT_TYPE, EPOCH, Note, NoteMetadata

logger = logging.getLogger(__name__)

RawNote = Note | Mapping[str, Any]

SCALAR_TEXT_FIELDS = ("text", "title", "category", "content_type")


def category_cluster_id(category: str) -> str:
    return f"category-{category}"


def _parse_timestamp(value: object) -> datetime | None:
    """Parse a datetime, ISO-8601 string or epoch seconds, returning None if unusable."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def _usable_metadata(note_id: str, metadata: Mapping[str, Any]) -> Mapping[str, Any]:
    """Metadata as given, or empty when it does not validate."""
    try:
        NoteMetadata.model_validate(metadata)
    except ValidationError:
        logger.warning(f"Ignoring malformed metadata of note {note_id}")
        return {}
    return metadata


def coerce_note(raw: RawNote) -> Note | None:
    """Convert a raw note record into a Note, defaulting whatever is missing.

    Tags may be given at top level or under ``metadata.tags``. Records that
    cannot be turned into a note (no id, wrong shape) are skipped.

    Args:
        raw: A Note or a mapping as delivered by the note store

    Returns:
        The normalized Note, or None if the record is unusable
    """
    if isinstance(raw, Note):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning(f"Skipping note record of unsupported type {type(raw).__name__}")
        return None

    data = dict(raw)
    if data.get("id") in (None, ""):
        logger.warning("Skipping note record without an id")
        return None
    data["id"] = str(data["id"])

    metadata = data.get("metadata")
    if not isinstance(metadata, Mapping):
        metadata = {}
    data["metadata"] = _usable_metadata(data["id"], metadata)

    tags = data.get("tags") or metadata.get("tags") or []
    data["tags"] = tags if isinstance(tags, (list, tuple, set, frozenset)) else []

    if data.get("text") is None:
        data["text"] = ""
    if data.get("content_type") in (None, ""):
        data["content_type"] = DEFAULT_CONTENT_TYPE
    for field in SCALAR_TEXT_FIELDS:
        if isinstance(data.get(field), (int, float)):
            data[field] = str(data[field])

    created_at = _parse_timestamp(data.get("created_at"))
    if created_at is None:
        logger.debug(f"Note {data['id']} has no usable created_at, using the epoch")
        created_at = EPOCH
    data["created_at"] = created_at
    data["deleted_at"] = _parse_timestamp(data.get("deleted_at"))

    try:
        return Note.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Skipping malformed note {data['id']}: {e.error_count()} validation error(s)")
        return None


def coerce_notes(raw_notes: Iterable[RawNote]) -> list[Note]:
    """Normalize a batch of raw notes, dropping unusable records."""
    notes = []
    for raw in raw_notes:
        note = coerce_note(raw)
        if note is not None:
            notes.append(note)
    return notes


class NoteIngestor:
    """Turns notes into graph nodes, applying the deleted-notes rule."""

    def __init__(self, *, include_deleted: bool = False, selected_note_id: str | None = None):
        """Initialize the ingestor.

        Args:
            include_deleted: Keep soft-deleted notes in the graph
            selected_note_id: ID of the note currently open in the editor
        """
        self.include_deleted = include_deleted
        self.selected_note_id = selected_note_id

    def ingest(self, raw_notes: Iterable[RawNote]) -> list[GraphNode]:
        """Create one node per usable note, in input order.

        Args:
            raw_notes: Notes or raw note mappings

        Returns:
            List of fresh GraphNode objects with degree 0
        """
        nodes = []
        seen: set[str] = set()
        skipped_deleted = 0

        for note in coerce_notes(raw_notes):
            if note.is_deleted and not self.include_deleted:
                skipped_deleted += 1
                continue
            if note.id in seen:
                logger.warning(f"Duplicate note id {note.id}, keeping the first occurrence")
                continue
            seen.add(note.id)

            nodes.append(
                GraphNode(
                    id=note.id,
                    note=note,
                    cluster_id=category_cluster_id(note.category),
                    is_selected=note.id == self.selected_note_id,
                    is_pinned=note.is_pinned,
                )
            )

        logger.debug(f"Ingested {len(nodes)} notes ({skipped_deleted} deleted notes skipped)")
        return nodes
