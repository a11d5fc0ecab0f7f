from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WatchRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    brand: str
    price: float = Field(..., ge=0)
    style: list[str] = Field(default_factory=list)
    image: str | None = None

    @field_validator("style", mode="before")
    @classmethod
    def _coerce_style(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [s.strip().lower() for s in value.split(",") if s.strip()]
        return value


class SwipeStateResponse(BaseModel):
    watch: WatchRecord | None
    position: int
    pool_size: int
    liked_count: int
    narrowed: bool
    top_styles: list[str] = Field(default_factory=list)


class SavedWatchesResponse(BaseModel):
    watches: list[WatchRecord]
    total: int
