from typing import Callable

import pytest
from fastapi.testclient import TestClient

from notegraph.api import create_app
from notegraph.domain.graph import Graph
from notegraph.domain.note import Note
from notegraph.ingestion.ingestor import NoteIngestor
from notegraph.ingestion.relationship_extraction import RelationshipDetector
from notegraph.note_sources.base import NoteSource
from tests.fakes import FakeNoteSource, FakeRenderer


@pytest.fixture
def setup_notes() -> list[Note]:
    """Two notes sharing a category and a tag, created two days apart."""
    return [
        Note(
            id="a",
            title="FOMC fade",
            text="",
            category="Setup",
            tags=["fomc"],
            created_at="2025-01-01T00:00:00+00:00",
        ),
        Note(
            id="b",
            title="FOMC drift",
            text="",
            category="Setup",
            tags=["fomc"],
            created_at="2025-01-03T00:00:00+00:00",
        ),
    ]


@pytest.fixture
def journal_notes() -> list[Note]:
    """A small trading journal with every kind of relationship."""
    return [
        Note(
            id="n1",
            title="Opening range breakout",
            text="Momentum entries after the opening range breakout.",
            category="Setup",
            tags=["breakout", "momentum"],
            content_type="rich-text",
            created_at="2025-02-01T09:00:00+00:00",
        ),
        Note(
            id="n2",
            title="Gap and go",
            text="Premarket gappers with volume and momentum.",
            category="Setup",
            tags=["momentum"],
            content_type="plain-text",
            created_at="2025-02-03T09:00:00+00:00",
        ),
        Note(
            id="n3",
            title="Revenge trading",
            text="Stopped trading after three losses; momentum faded.",
            category="Psychology",
            tags=["discipline"],
            content_type="plain-text",
            created_at="2025-02-20T09:00:00+00:00",
        ),
        Note(
            id="n4",
            title="Position sizing",
            text="Risk one percent per trade.",
            category="Risk",
            tags=["discipline"],
            content_type="code",
            created_at="2025-04-01T09:00:00+00:00",
        ),
        Note(
            id="n5",
            title="Old idea",
            text="Archived thoughts.",
            category="Setup",
            created_at="2025-06-01T09:00:00+00:00",
            deleted_at="2025-06-02T09:00:00+00:00",
        ),
        Note(
            id="n6",
            title="Quiet note",
            text="Nothing here.",
            category="Misc",
            created_at="2025-09-01T09:00:00+00:00",
        ),
    ]


@pytest.fixture
def build_graph() -> Callable[..., Graph]:
    """Ingest notes and detect relationships in one call."""

    def _build(notes: list[Note], **ingestor_options) -> Graph:
        nodes = NoteIngestor(**ingestor_options).ingest(notes)
        return RelationshipDetector().build_graph(nodes)

    return _build


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def fake_note_source(journal_notes: list[Note]) -> NoteSource:
    return FakeNoteSource(journal_notes)


@pytest.fixture
def test_client(fake_note_source: NoteSource, fake_renderer: FakeRenderer) -> TestClient:
    """Create test client with fake implementations."""
    app = create_app(note_source=fake_note_source, renderer=fake_renderer)
    return TestClient(app)
