# tests/advisory/test_advisory_client.py
from __future__ import annotations

import json
import logging

import httpx
import pytest

from allocprep.advisory.client import HttpAdvisoryClient, build_client
from allocprep.errors import AdvisoryError
from allocprep.schemas.models import AdvisoryConfig


def _transport(status: int = 200, body: object | None = None, seen: list | None = None):
    """MockTransport answering every request with `body` as JSON."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=body)

    return httpx.MockTransport(handler)


def _client(transport: httpx.BaseTransport) -> HttpAdvisoryClient:
    return HttpAdvisoryClient(
        "https://llm.example.test/v1/", "secret", "gpt-4o-mini", transport=transport
    )


def test_complete_posts_chat_request_and_returns_content():
    """
    @brief
    One POST to /chat/completions with bearer auth and the prompt.

    @details
    The answer text is read from choices[0].message.content.
    """
    # --- Arrange ---
    seen: list[httpx.Request] = []
    body = {"choices": [{"message": {"content": "[0, 1]"}}]}
    client = _client(_transport(body=body, seen=seen))

    # --- Act ---
    answer = client.complete("find backend workers")

    # --- Assert ---
    assert answer == "[0, 1]"
    assert len(seen) == 1
    request = seen[0]
    assert str(request.url) == "https://llm.example.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer secret"
    payload = json.loads(request.content)
    assert payload["model"] == "gpt-4o-mini"
    assert payload["messages"][-1] == {"role": "user", "content": "find backend workers"}


@pytest.mark.parametrize(
    "body",
    [
        {"choices": []},
        {"unexpected": True},
        {"choices": [{"message": {"content": "   "}}]},
    ],
)
def test_complete_rejects_unusable_response(body):
    with pytest.raises(AdvisoryError):
        _client(_transport(body=body)).complete("hi")


def test_complete_propagates_http_status_error():
    with pytest.raises(httpx.HTTPStatusError):
        _client(_transport(status=500, body={"error": "boom"})).complete("hi")


def test_build_client_requires_enabled_endpoint_and_key(caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.WARNING)

    assert build_client(AdvisoryConfig()) is None
    assert build_client(AdvisoryConfig(enabled=True, endpoint="https://x.test")) is None
    assert "api_key missing" in caplog.text

    client = build_client(
        AdvisoryConfig(enabled=True, endpoint="https://x.test", api_key="k", request_timeout=5)
    )
    assert isinstance(client, HttpAdvisoryClient)
    assert client.timeout == 5
