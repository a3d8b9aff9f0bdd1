import json
from pathlib import Path

import pytest

from notegraph.domain.note import Note
from notegraph.note_sources.local import LocalNoteSource


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_loads_plain_list(tmp_path: Path) -> None:
    """A JSON array of note records is loaded as-is."""
    path = _write(
        tmp_path / "notes.json",
        [
            {"id": "a", "title": "First", "category": "Setup", "tags": ["fomc"]},
            {"id": "b", "text": "Second", "created_at": "2025-01-02T00:00:00Z"},
        ],
    )

    source = LocalNoteSource(path)

    assert [note.id for note in source.list_notes()] == ["a", "b"]
    assert source.get_note("a").tags == ("fomc",)
    assert source.get_note("b").created_at.year == 2025


def test_loads_wrapped_export(tmp_path: Path) -> None:
    """An object with a "notes" list is accepted too."""
    path = _write(tmp_path / "export.json", {"version": 1, "notes": [{"id": "only"}]})

    source = LocalNoteSource(path)

    assert [note.id for note in source.list_notes()] == ["only"]


def test_malformed_records_are_skipped(tmp_path: Path) -> None:
    path = _write(tmp_path / "notes.json", [{"id": "ok"}, {"text": "no id"}, 7])

    source = LocalNoteSource(path)

    assert [note.id for note in source.list_notes()] == ["ok"]


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        LocalNoteSource(tmp_path / "missing.json")


def test_no_path_gives_empty_source() -> None:
    source = LocalNoteSource()

    assert source.list_notes() == []
    assert source.get_note("anything") is None


def test_from_notes_keeps_first_duplicate() -> None:
    source = LocalNoteSource.from_notes(
        [Note(id="dup", title="first"), {"id": "dup", "title": "second"}, {"id": "other"}]
    )

    assert [note.id for note in source.list_notes()] == ["dup", "other"]
    assert source.get_note("dup").title == "first"
