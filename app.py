import sys

from loguru import logger

from notegraph.api import create_app
from notegraph.config import settings
from notegraph.note_sources.local import LocalNoteSource
from notegraph.rendering.figure import MatplotlibRenderer

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Serving note relationship graph for {settings.notes_path}")
note_source = LocalNoteSource(settings.notes_path)
app = create_app(note_source=note_source, renderer=MatplotlibRenderer())
