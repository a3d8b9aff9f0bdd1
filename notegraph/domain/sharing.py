"""Models handed to sharing and export collaborators."""

import base64
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, PlainSerializer

from notegraph.domain.filters import FilterCriteria
from notegraph.domain.graph import GraphStats, ViewMode


class ShareConfiguration(BaseModel):
    """Serializable description of the current graph view.

    Attributes:
        filters: Active filter criteria
        view_mode: Layout mode (force, radial or hierarchical)
        timestamp: When the configuration was captured (UTC)
        stats: Node, edge and cluster counts at capture time
        title: Human readable title for share sheets
        text: Short human readable summary
    """

    filters: FilterCriteria
    view_mode: ViewMode
    timestamp: datetime
    stats: GraphStats
    title: str = "Note Relationship Graph"
    text: str = ""


class ExportedImage(BaseModel):
    """An image of the graph produced by a renderer.

    Attributes:
        filename: Suggested download filename
        content: The image content, encoded as base64 when serialized.
        mime_type: The MIME type of the image.
    """

    filename: str
    content: Annotated[
        bytes,
        BeforeValidator(lambda x: base64.b64decode(x) if isinstance(x, str) else x),
        PlainSerializer(lambda x: base64.b64encode(x).decode(), return_type=str),
    ]
    mime_type: str
