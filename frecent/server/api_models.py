"""Pydantic request models for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class VisitRequest(BaseModel):
    path: str
    now: int | None = None  # ms since epoch; server clock when omitted


class RenameRequest(BaseModel):
    old_path: str
    new_path: str


class PathRequest(BaseModel):
    path: str


class OpenPathsRequest(BaseModel):
    paths: list[str] = Field(default_factory=list)


class SettingsUpdate(BaseModel):
    max_items: int | None = None
    exclude_paths: str | None = None
    max_age: float | None = None
    record_on_every_visit: bool | None = None
    open_in_new_tab: bool | None = None
    show_frecency_badge: bool | None = None
    show_score_badge: bool | None = None
