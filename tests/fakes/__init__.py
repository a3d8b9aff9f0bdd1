from tests.fakes.fake_note_source import FakeNoteSource
from tests.fakes.fake_renderer import FakeRenderer

__all__ = ["FakeNoteSource", "FakeRenderer"]
