from typing import Protocol

from notegraph.rendering.scene import RenderScene


class GraphRenderer(Protocol):
    """Protocol for turning a render scene into image bytes."""

    mime_type: str
    file_extension: str

    def render(self, scene: RenderScene, scale: float = 2.0) -> bytes:
        """Render the scene, ``scale`` times the viewport size."""
        ...
