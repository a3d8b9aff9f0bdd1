from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notegraph.api.endpoints import get_endpoints_router
from notegraph.note_sources.base import NoteSource
from notegraph.rendering.base import GraphRenderer


def create_app(
    *,
    note_source: NoteSource,
    renderer: GraphRenderer | None = None,
) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router=get_endpoints_router(note_source=note_source, renderer=renderer))

    return app
