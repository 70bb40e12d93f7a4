"""FrecentClient tests with mocked httpx responses."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx
import pytest

from frecent.client import FrecentClient


def _mockResp(data: dict, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = data
    resp.raise_for_status = MagicMock()
    return resp


@pytest.fixture
def client():
    with patch("frecent.client.httpx.Client") as MockClient:
        mock = MockClient.return_value
        c = FrecentClient("http://localhost:7717/api")
        c._client = mock
        yield c, mock


class TestHealth:
    def test_health(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"status": "ok"})
        assert c.health() == {"status": "ok"}
        mock.get.assert_called_once_with("/health", params=None)


class TestVisitEvents:
    def test_visit(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"path": "a.md", "counted": True})
        assert c.visit("a.md")["counted"] is True
        mock.post.assert_called_once_with("/visit", json={"path": "a.md", "now": None})

    def test_visit_withNow(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"path": "a.md", "counted": True})
        c.visit("a.md", now=42)
        mock.post.assert_called_once_with("/visit", json={"path": "a.md", "now": 42})

    def test_rename(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"renamed": True})
        c.rename("a.md", "b.md")
        mock.post.assert_called_once_with(
            "/rename", json={"old_path": "a.md", "new_path": "b.md"}
        )

    def test_deleteAndRemove(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({})
        c.delete("a.md")
        c.remove("b.md")
        assert mock.post.call_args_list[0].args == ("/delete",)
        assert mock.post.call_args_list[0].kwargs == {"json": {"path": "a.md"}}
        assert mock.post.call_args_list[1].kwargs == {"json": {"path": "b.md"}}

    def test_clear(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"cleared": 3})
        assert c.clear() == {"cleared": 3}
        mock.post.assert_called_once_with("/clear", json={})


class TestOpenSet:
    def test_syncOpen(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"open": ["a.md"]})
        c.syncOpen(["a.md"])
        mock.post.assert_called_once_with("/open", json={"paths": ["a.md"]})

    def test_markClosed(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"closed": "a.md"})
        c.markClosed("a.md")
        mock.post.assert_called_once_with("/close", json={"path": "a.md"})


class TestQueries:
    def test_entries_default(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"entries": [], "count": 0})
        c.entries()
        mock.get.assert_called_once_with("/entries", params={})

    def test_entries_limitAndAll(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"entries": [], "count": 0})
        c.entries(limit=5, unbounded=True)
        mock.get.assert_called_once_with("/entries", params={"limit": 5, "all": True})

    def test_search(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"query": "plan", "entries": [], "count": 0})
        c.search("plan", limit=3)
        mock.get.assert_called_once_with("/search", params={"query": "plan", "limit": 3})

    def test_stats(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"tracked": 2})
        assert c.stats()["tracked"] == 2
        mock.get.assert_called_once_with("/stats", params=None)


class TestSettings:
    def test_settings(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"max_items": 50})
        assert c.settings()["max_items"] == 50

    def test_updateSettings(self, client):
        c, mock = client
        mock.patch.return_value = _mockResp({"settings": {}, "pruned": 0})
        c.updateSettings(max_items=10, exclude_paths="^Daily/")
        mock.patch.assert_called_once_with(
            "/settings", json={"max_items": 10, "exclude_paths": "^Daily/"}
        )

    def test_agingPreview(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"would_prune": 1})
        c.agingPreview(100)
        mock.get.assert_called_once_with("/settings/preview", params={"max_age": 100})


class TestErrors:
    def test_httpErrorPropagates(self, client):
        c, mock = client
        resp = _mockResp({})
        resp.raise_for_status.side_effect = httpx.HTTPStatusError(
            "422", request=MagicMock(), response=MagicMock()
        )
        mock.patch.return_value = resp
        with pytest.raises(httpx.HTTPStatusError):
            c.updateSettings(max_items=0)

    def test_contextManagerCloses(self, client):
        c, mock = client
        with c:
            pass
        mock.close.assert_called_once()
