# src/allocprep/advisory/service.py
from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from allocprep.advisory.client import AdvisoryClient
from allocprep.errors import AdvisoryError
from allocprep.schemas.models import Client, Finding, Rule, Task, Worker
from allocprep.schemas.records import record_type

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```")

# Failures that degrade to a fallback instead of reaching the caller
_ADVISORY_FAILURES = (AdvisoryError, httpx.HTTPError, ValueError, TypeError, KeyError)


def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def _record_text(record: Any) -> str:
    payload = record.to_row() if hasattr(record, "to_row") else record
    return json.dumps(payload, ensure_ascii=False, default=str).lower()


# ----------------------------
# DETERMINISTIC FALLBACKS
# ----------------------------
def match_headers(headers: Sequence[str], expected: Sequence[str]) -> dict[str, str]:
    """
    Case-insensitive exact-or-substring header match; unmatched headers map
    to themselves.
    """
    mapping: dict[str, str] = {}
    for header in headers:
        h = header.lower()
        match = None
        if h:
            match = next(
                (f for f in expected if f.lower() == h or h in f.lower() or f.lower() in h),
                None,
            )
        mapping[header] = match or header
    return mapping


def substring_search(query: str, records: Sequence[T]) -> list[T]:
    """Records whose JSON form contains the query, case-insensitively."""
    q = query.lower()
    return [r for r in records if q in _record_text(r)]


# ----------------------------
# SERVICE
# ----------------------------
class AdvisoryService:
    """
    @brief
    Optional AI-backed helpers with deterministic fallbacks.

    @details
    The client is injected explicitly; without one the service is "not
    configured" and every operation returns its fallback directly. With a
    client, a failed call or an unparseable answer is logged and the
    fallback is returned. Nothing here is ever raised to the validation
    layer, and validation results never depend on this service.
    """

    def __init__(self, client: AdvisoryClient | None = None) -> None:
        self.client = client

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    # ---------- Operations ----------
    def map_headers(
        self, headers: Sequence[str], expected: Sequence[str], entity: str
    ) -> dict[str, str]:
        """Map uploaded headers to canonical column names."""
        prompt = (
            f"Map the following CSV headers to the expected fields for {entity}.\n"
            f"Provided headers: {json.dumps(list(headers))}\n"
            f"Expected fields: {json.dumps(list(expected))}\n"
            "Return a JSON object mapping each provided header to the best matching "
            "expected field, or to null when nothing matches."
        )

        def parse(text: str) -> dict[str, str]:
            raw = json.loads(_strip_fences(text))
            if not isinstance(raw, dict):
                raise ValueError("header mapping is not an object")
            mapping = match_headers(headers, expected)
            for header, target in raw.items():
                if header in mapping and target in expected:
                    mapping[header] = target
            return mapping

        return self._ask(
            "map_headers", prompt, parse, lambda: match_headers(headers, expected)
        )

    def search(self, query: str, records: Sequence[T], entity: str) -> list[T]:
        """Natural-language search returning the matching records in order."""
        if not query.strip():
            return list(records)
        prompt = (
            f'Search the {entity} data for this natural language query: "{query}"\n'
            f"Data: {json.dumps([_record_text(r) for r in records])}\n"
            "Return the zero-based indices of matching rows as a JSON array of numbers."
        )

        def parse(text: str) -> list[T]:
            indices = json.loads(_strip_fences(text))
            if not isinstance(indices, list):
                raise ValueError("search answer is not an array")
            wanted = {i for i in indices if isinstance(i, int) and not isinstance(i, bool)}
            return [r for i, r in enumerate(records) if i in wanted]

        return self._ask("search", prompt, parse, lambda: substring_search(query, records))

    def convert_to_rule(
        self,
        text: str,
        rule_id: str,
        clients: Sequence[Client],
        workers: Sequence[Worker],
        tasks: Sequence[Task],
    ) -> Rule | None:
        """Turn a plain-language rule into a Rule; None when not possible."""
        if not text.strip():
            return None
        prompt = (
            f'Convert this natural language rule into a structured rule object: "{text}"\n'
            f"Clients: {', '.join(c.client_id for c in clients[:3])}\n"
            f"Workers: {', '.join(w.worker_id for w in workers[:3])}\n"
            f"Tasks: {', '.join(t.task_id for t in tasks[:3])}\n"
            'Return {"type": "coRun|slotRestriction|loadLimit|phaseWindow|patternMatch|'
            'precedence", "name": str, "parameters": {}, "description": str} or null.'
        )

        def parse(answer: str) -> Rule | None:
            raw = json.loads(_strip_fences(answer))
            if not isinstance(raw, dict) or not raw.get("type"):
                return None
            try:
                return Rule.model_validate({**raw, "id": rule_id})
            except ValidationError as e:
                raise ValueError(f"rule does not fit schema: {e}") from e

        return self._ask("convert_to_rule", prompt, parse, lambda: None)

    def suggest_corrections(
        self, records: Sequence[Any], findings: Sequence[Finding], entity: str
    ) -> dict[int, dict[str, Any]]:
        """
        @brief
        Proposed cell values keyed by row index, then column name.

        @details
        Only suggestions addressing an existing row and a known column are
        kept. Candidates are advisory; checking whether one clears its
        finding is the job of corrections.would_resolve.
        """
        if not findings:
            return {}
        model = record_type(entity)
        prompt = (
            f"Suggest corrections for these {entity} data errors.\n"
            f"Rows: {json.dumps([_record_text(r) for r in records[:20]])}\n"
            f"Errors: {json.dumps([f.model_dump(mode='json') for f in findings[:20]])}\n"
            'Return {"<row index>": {"<column>": <corrected value>}}.'
        )

        def parse(text: str) -> dict[int, dict[str, Any]]:
            raw = json.loads(_strip_fences(text))
            if not isinstance(raw, dict):
                raise ValueError("suggestions are not an object")
            columns = set(model.columns())
            out: dict[int, dict[str, Any]] = {}
            for key, fixes in raw.items():
                try:
                    row = int(key)
                except (TypeError, ValueError):
                    continue
                if not 0 <= row < len(records) or not isinstance(fixes, dict):
                    continue
                kept = {col: value for col, value in fixes.items() if col in columns}
                if kept:
                    out[row] = kept
            return out

        return self._ask("suggest_corrections", prompt, parse, dict)

    # ---------- Plumbing ----------
    def _ask(
        self,
        feature: str,
        prompt: str,
        parse: Callable[[str], T],
        fallback: Callable[[], T],
    ) -> T:
        """Single request, no retry; any failure returns the fallback."""
        if self.client is None:
            return fallback()
        try:
            return parse(self.client.complete(prompt))
        except _ADVISORY_FAILURES as e:
            logger.warning("Advisory %s failed, using fallback: %s", feature, e)
            return fallback()


__all__ = ["AdvisoryService", "match_headers", "substring_search"]
