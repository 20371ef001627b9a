# src/allocprep/advisory/client.py
from __future__ import annotations

import logging
from typing import Any

import httpx

from allocprep.errors import AdvisoryError
from allocprep.schemas.models import AdvisoryConfig

logger = logging.getLogger(__name__)


class AdvisoryClient:
    """
    @brief
    Minimal text-completion capability used by the advisory features.

    @details
    Implementations send one prompt and return the raw text answer. They
    raise AdvisoryError (or let transport errors propagate) on failure; the
    advisory service turns every failure into its deterministic fallback.
    """

    def complete(self, prompt: str) -> str:
        raise NotImplementedError


class HttpAdvisoryClient(AdvisoryClient):
    """Client for an OpenAI-compatible chat-completions endpoint."""

    SYSTEM_PROMPT = (
        "You help clean tabular business data about clients, workers and tasks. "
        "Answer with JSON only, without commentary."
    )

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        model: str,
        *,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport

    def complete(self, prompt: str) -> str:
        response = self._post(prompt)
        return self._parse_response(response)

    def _post(self, prompt: str) -> dict[str, Any]:
        url = f"{self.endpoint}/chat/completions"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.1,
        }

        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            response = client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            return response.json()

    def _parse_response(self, response: dict[str, Any]) -> str:
        try:
            content = response["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise AdvisoryError(
                "Advisory response has no message content",
                source="HttpAdvisoryClient._parse_response",
            ) from e
        if not isinstance(content, str) or not content.strip():
            raise AdvisoryError(
                "Advisory response content is empty",
                source="HttpAdvisoryClient._parse_response",
            )
        return content


def build_client(cfg: AdvisoryConfig) -> AdvisoryClient | None:
    """
    @brief
    Creates the HTTP client from configuration, or None when not configured.

    @details
    The service is configured only when enabled and both endpoint and API
    key are set. Nothing is read from the environment here; the caller
    decides where the key comes from.
    """
    if not cfg.enabled:
        return None
    if not cfg.endpoint or not cfg.api_key:
        logger.warning("Advisory enabled but endpoint or api_key missing; using fallbacks.")
        return None
    return HttpAdvisoryClient(
        endpoint=cfg.endpoint, api_key=cfg.api_key, model=cfg.model, timeout=cfg.request_timeout
    )


__all__ = ["AdvisoryClient", "HttpAdvisoryClient", "build_client"]
