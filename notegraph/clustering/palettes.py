"""Qualitative colour palettes for cluster legends."""

from pydantic import BaseModel, ConfigDict, Field


class Palette(BaseModel):
    """An ordered list of colours assigned by cycling through an index."""

    model_config = ConfigDict(frozen=True)

    name: str
    colors: tuple[str, ...] = Field(min_length=1)

    def color_for(self, index: int) -> str:
        return self.colors[index % len(self.colors)]


CATEGORY10 = Palette(
    name="category10",
    colors=(
        "#1f77b4",
        "#ff7f0e",
        "#2ca02c",
        "#d62728",
        "#9467bd",
        "#8c564b",
        "#e377c2",
        "#7f7f7f",
        "#bcbd22",
        "#17becf",
    ),
)

SET3 = Palette(
    name="set3",
    colors=(
        "#8dd3c7",
        "#ffffb3",
        "#bebada",
        "#fb8072",
        "#80b1d3",
        "#fdb462",
        "#b3de69",
        "#fccde5",
        "#d9d9d9",
        "#bc80bd",
        "#ccebc5",
        "#ffed6f",
    ),
)
