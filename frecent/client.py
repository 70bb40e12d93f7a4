"""Sync HTTP client for the frecent API."""

from __future__ import annotations

from typing import Any

import httpx

from frecent.state import DEFAULT_PORT


class FrecentClient:
    """Sync httpx client wrapping the frecent HTTP API."""

    def __init__(self, base_url: str | None = None, timeout: float = 5.0):
        url = base_url or f"http://localhost:{DEFAULT_PORT}/api"
        self._client = httpx.Client(base_url=url, timeout=timeout)

    # ── lifecycle ─────────────────────────────────────────────

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> FrecentClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ── helpers ───────────────────────────────────────────────

    def _post(self, path: str, /, **kwargs: Any) -> dict:
        r = self._client.post(path, json=kwargs)
        r.raise_for_status()
        return r.json()

    def _get(self, path: str, params: dict | None = None) -> Any:
        r = self._client.get(path, params=params)
        r.raise_for_status()
        return r.json()

    def _patch(self, path: str, **kwargs: Any) -> dict:
        r = self._client.patch(path, json=kwargs)
        r.raise_for_status()
        return r.json()

    # ── health ────────────────────────────────────────────────

    def health(self) -> dict:
        return self._get("/health")

    # ── visit events ──────────────────────────────────────────

    def visit(self, path: str, now: int | None = None) -> dict:
        return self._post("/visit", path=path, now=now)

    def rename(self, old_path: str, new_path: str) -> dict:
        return self._post("/rename", old_path=old_path, new_path=new_path)

    def delete(self, path: str) -> dict:
        return self._post("/delete", path=path)

    def remove(self, path: str) -> dict:
        return self._post("/remove", path=path)

    def clear(self) -> dict:
        return self._post("/clear")

    # ── open-set ──────────────────────────────────────────────

    def syncOpen(self, paths: list[str]) -> dict:
        return self._post("/open", paths=paths)

    def markClosed(self, path: str) -> dict:
        return self._post("/close", path=path)

    # ── queries ───────────────────────────────────────────────

    def entries(self, limit: int | None = None, unbounded: bool = False) -> dict:
        params: dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if unbounded:
            params["all"] = True
        return self._get("/entries", params=params)

    def search(self, query: str, limit: int | None = None) -> dict:
        params: dict[str, Any] = {"query": query}
        if limit is not None:
            params["limit"] = limit
        return self._get("/search", params=params)

    def stats(self) -> dict:
        return self._get("/stats")

    # ── settings ──────────────────────────────────────────────

    def settings(self) -> dict:
        return self._get("/settings")

    def updateSettings(self, **changes: Any) -> dict:
        return self._patch("/settings", **changes)

    def agingPreview(self, max_age: float) -> dict:
        return self._get("/settings/preview", params={"max_age": max_age})
