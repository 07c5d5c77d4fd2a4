"""Pydantic data models for topics, reports and export progress."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator

# --- Discovery ---


class Topic(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    id: str = ""
    title: str
    summary: str = ""
    platform_tags: list[str] = Field(default_factory=list, alias="platformTags")
    impact_score: int = Field(default=0, ge=0, le=100, alias="impactScore")
    category: str = ""

    @field_validator("impact_score", mode="before")
    @classmethod
    def _clamp_score(cls, value: object) -> object:
        # The scan model occasionally answers on a 1-100 scale with overshoot
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return max(0, min(100, int(value)))
        return value

    @field_validator("summary", "category", mode="before")
    @classmethod
    def _null_to_empty(cls, value: object) -> object:
        return "" if value is None else value


class TopicScan(RootModel[list[Topic]]):
    pass


# --- Report ---


class GroundingSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = ""
    uri: str


class Report(BaseModel):
    model_config = ConfigDict(frozen=True)

    markdown: str
    sources: list[GroundingSource] = Field(default_factory=list)
    cover_image: bytes | None = None  # raw PNG bytes

    @property
    def has_cover_image(self) -> bool:
        return bool(self.cover_image)


def dedupe_sources(sources: list[GroundingSource]) -> list[GroundingSource]:
    """Drop sources whose uri was already seen. First occurrence wins, order kept."""
    seen: set[str] = set()
    unique: list[GroundingSource] = []
    for source in sources:
        if source.uri in seen:
            continue
        seen.add(source.uri)
        unique.append(source)
    return unique


# --- Export ---


class ExportProgress(BaseModel):
    current: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    label: str = ""

    @property
    def fraction(self) -> float:
        if self.total == 0:
            return 0.0
        return self.current / self.total
