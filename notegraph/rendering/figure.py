"""Raster and vector export of a render scene through matplotlib."""

import io

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.patches import Circle  # noqa: E402

from notegraph.rendering.base import GraphRenderer  # noqa: E402
from notegraph.rendering.scene import RenderScene  # noqa: E402

BASE_DPI = 100
PX_TO_POINTS = 72 / BASE_DPI
LABEL_COLOR = "#374151"

MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "svg": "image/svg+xml",
    "pdf": "application/pdf",
}


class MatplotlibRenderer(GraphRenderer):
    """Draws a scene on an Agg figure sized to the viewport.

    Scene coordinates are viewport pixels with y growing downwards; the axes
    span the whole figure so one scene pixel maps to ``scale`` output pixels.
    """

    def __init__(self, image_format: str = "png") -> None:
        """Initialize the renderer.

        Args:
            image_format: Output format understood by ``savefig``

        Raises:
            ValueError: If the format is not supported
        """
        if image_format not in MIME_TYPES:
            raise ValueError(f"Unsupported image format: {image_format}")
        self.file_extension = image_format
        self.mime_type = MIME_TYPES[image_format]

    def render(self, scene: RenderScene, scale: float = 2.0) -> bytes:
        fig = plt.figure(figsize=(scene.width / BASE_DPI, scene.height / BASE_DPI))
        try:
            ax = fig.add_axes((0, 0, 1, 1))
            ax.set_xlim(0, scene.width)
            ax.set_ylim(scene.height, 0)
            ax.set_aspect("equal")
            ax.axis("off")

            for edge in scene.edges:
                ax.plot(
                    [edge.x1, edge.x2],
                    [edge.y1, edge.y2],
                    color=edge.color,
                    linewidth=edge.width * PX_TO_POINTS,
                    alpha=edge.opacity,
                    solid_capstyle="round",
                    zorder=1,
                )

            for node in scene.nodes:
                ax.add_patch(
                    Circle(
                        (node.x, node.y),
                        node.radius,
                        facecolor=node.fill,
                        edgecolor=node.stroke,
                        linewidth=node.stroke_width * PX_TO_POINTS,
                        alpha=node.opacity,
                        zorder=2,
                    )
                )

            for label in scene.labels:
                ax.text(
                    label.x,
                    label.y,
                    label.text,
                    ha="center",
                    va="center",
                    fontsize=12 * PX_TO_POINTS,
                    fontweight="bold",
                    color=LABEL_COLOR,
                    zorder=3,
                )

            buffer = io.BytesIO()
            fig.savefig(
                buffer,
                format=self.file_extension,
                dpi=BASE_DPI * scale,
                facecolor=scene.background,
                edgecolor="none",
            )
            return buffer.getvalue()
        finally:
            plt.close(fig)
