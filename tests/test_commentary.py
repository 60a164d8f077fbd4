"""Tests for the commentary client.  No network access."""

from __future__ import annotations

import requests

from page_replacement.simulation.commentary import (
    COMMENTARY_UNAVAILABLE,
    CommentaryClient,
    CommentaryRequest,
    build_prompt,
)
from page_replacement.simulation.engine import run_simulation


# ── Helpers ──────────────────────────────────────────────────────────

class FakeResponse:
    def __init__(self, status: int = 200, payload=None, bad_json: bool = False) -> None:
        self.status_code = status
        self.payload = payload
        self.bad_json = bad_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.bad_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def _request() -> CommentaryRequest:
    return CommentaryRequest(algorithm="LRU", frame_count=3,
                             page_references=(7, 0, 1), page_faults=3)


# ── Prompt ───────────────────────────────────────────────────────────

class TestPrompt:
    def test_prompt_text(self):
        assert build_prompt(_request()) == (
            "The user has completed a page replacement simulation using the LRU "
            "algorithm with 3 frames and the page reference sequence 7, 0, 1. "
            "There were 3 page faults. Provide a simple explanation of the "
            "results and suggest if a different algorithm might perform better."
        )

    def test_from_result(self):
        result = run_simulation([1, 2, 1], 2, "Optimal")
        req = CommentaryRequest.from_result(result)
        assert req == CommentaryRequest("Optimal", 2, (1, 2, 1), 2)


# ── Fetch ────────────────────────────────────────────────────────────

class TestFetch:
    def test_success(self):
        session = FakeSession(FakeResponse(payload={"feedback": "Looks good."}))
        client = CommentaryClient("http://svc/api/ai-feedback", timeout=3.0, session=session)
        assert client.fetch(_request()) == "Looks good."
        url, kwargs = session.calls[0]
        assert url == "http://svc/api/ai-feedback"
        assert kwargs["json"] == {"prompt": build_prompt(_request())}
        assert kwargs["timeout"] == 3.0

    def test_http_error(self, caplog):
        session = FakeSession(FakeResponse(status=503))
        client = CommentaryClient("http://svc", session=session)
        assert client.fetch(_request()) == COMMENTARY_UNAVAILABLE
        assert "Commentary unavailable" in caplog.text

    def test_connection_error(self):
        session = FakeSession(error=requests.ConnectionError("refused"))
        client = CommentaryClient("http://svc", session=session)
        assert client.fetch(_request()) == COMMENTARY_UNAVAILABLE

    def test_bad_json(self):
        client = CommentaryClient("http://svc", session=FakeSession(FakeResponse(bad_json=True)))
        assert client.fetch(_request()) == COMMENTARY_UNAVAILABLE

    def test_missing_feedback(self):
        client = CommentaryClient("http://svc", session=FakeSession(FakeResponse(payload={"text": "x"})))
        assert client.fetch(_request()) == COMMENTARY_UNAVAILABLE
        client = CommentaryClient("http://svc", session=FakeSession(FakeResponse(payload=["x"])))
        assert client.fetch(_request()) == COMMENTARY_UNAVAILABLE

    def test_disabled_without_url(self):
        session = FakeSession(FakeResponse(payload={"feedback": "unused"}))
        client = CommentaryClient(None, session=session)
        assert client.fetch(_request()) == COMMENTARY_UNAVAILABLE
        assert session.calls == []


# ── Background submit ───────────────────────────────────────────────

class TestSubmit:
    def test_future_and_callback(self):
        received = []
        session = FakeSession(FakeResponse(payload={"feedback": "Try LRU."}))
        client = CommentaryClient("http://svc", session=session)
        try:
            future = client.submit(_request(), callback=received.append)
            assert future.result(timeout=5) == "Try LRU."
        finally:
            client.close()
        assert received == ["Try LRU."]

    def test_failure_resolves_to_indicator(self):
        session = FakeSession(error=requests.Timeout("slow"))
        client = CommentaryClient("http://svc", session=session)
        try:
            future = client.submit(_request())
            assert future.result(timeout=5) == COMMENTARY_UNAVAILABLE
            assert future.exception() is None
        finally:
            client.close()
