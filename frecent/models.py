"""Pydantic models for tracked entries, tracker settings, and ranked results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FileEntry(BaseModel):
    """Usage record for one tracked path."""

    model_config = ConfigDict(populate_by_name=True)

    score: float = Field(ge=0)  # base score: +1 per counted visit, scaled down by aging
    last_access: int = Field(alias="lastAccess")  # ms since epoch


class TrackerSettings(BaseModel):
    # Stored camelCase alongside the records (maxItems, recordOnEveryVisit, ...)
    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)

    max_items: int = Field(default=50, gt=0)
    exclude_paths: str = ""
    max_age: float = Field(default=9000, allow_inf_nan=False)
    record_on_every_visit: bool = False
    # Display-only flags, passed through to hosts
    open_in_new_tab: bool = False
    show_frecency_badge: bool = True
    show_score_badge: bool = True


class PersistedData(BaseModel):
    files: dict[str, FileEntry] = Field(default_factory=dict)
    settings: TrackerSettings = Field(default_factory=TrackerSettings)


class RankedEntry(BaseModel):
    path: str
    score: float
    last_access: int
    frecency: float
