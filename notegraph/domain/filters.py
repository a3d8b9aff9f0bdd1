"""Filter criteria for narrowing the visible graph."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FilterCriteria(BaseModel):
    """Value object describing which notes should be visible.

    Empty selections mean "no restriction". Both date bounds are inclusive and
    either may be left open.
    """

    model_config = ConfigDict(frozen=True)

    search_text: str = ""
    categories: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    content_types: tuple[str, ...] = ()
    start_date: datetime | None = None
    end_date: datetime | None = None
    min_degree: int = Field(default=0, ge=0)
    include_deleted: bool = False

    @field_validator("start_date", "end_date")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_empty(self) -> bool:
        return self == FilterCriteria(include_deleted=self.include_deleted)
