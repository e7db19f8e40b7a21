"""
Remote enrichment strategy backed by the Anthropic Messages API.

Requests go through the official ``anthropic`` SDK::

    anthropic.Anthropic(api_key=..., timeout=..., http_client=...)
        .messages.create(model=..., max_tokens=..., messages=[{"role": "user", ...}])

The reply's first text block must hold a JSON object matching
``EnrichmentResponse`` (optionally wrapped in a ```json fence). Every way
this can go wrong (connection error, timeout, non-2xx status, missing text,
invalid JSON, schema mismatch) surfaces as ``EnrichmentError`` so the
enrichment stage can fall back to the heuristic context for that signal.

The API key is never logged.
"""

from __future__ import annotations

import json
import logging
import re
from typing import ClassVar, Optional

import anthropic
import httpx
from pydantic import ValidationError

from intent_scorer.enrichment.base import ContextEnricher, EnrichmentError, EnrichmentResponse
from intent_scorer.enrichment.prompts import build_extraction_prompt
from intent_scorer.models.signal import Prospect, Signal

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


class AnthropicEnricher(ContextEnricher):
    """Enrich signals by asking a Claude model for a structured reading.

    Usage::

        enricher = AnthropicEnricher(api_key=os.environ["ANTHROPIC_API_KEY"])
        response = enricher.enrich(signal, prospect)
        enricher.close()

    A shared ``httpx.Client`` may be injected; the SDK sends its requests
    through it (tests pass one built on ``httpx.MockTransport``). An
    injected client is not closed by ``close()``.
    """

    DEFAULT_MODEL: ClassVar[str] = "claude-sonnet-4-20250514"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 1024,
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        if not api_key:
            raise ValueError("An API key is required for the anthropic enrichment provider.")
        self.model = model
        self.name = model
        self.max_tokens = max_tokens
        self._owns_client = http_client is None
        self._client = anthropic.Anthropic(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=max_retries,
            http_client=http_client,
        )

    def enrich(self, signal: Signal, prospect: Prospect) -> EnrichmentResponse:
        try:
            message = self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[
                    {"role": "user", "content": build_extraction_prompt(signal, prospect)},
                ],
            )
        except anthropic.APIStatusError as exc:
            raise EnrichmentError(
                f"Enrichment API returned HTTP {exc.status_code} for {signal.type}"
            ) from exc
        except anthropic.APIError as exc:
            raise EnrichmentError(f"Enrichment request failed for {signal.type}: {exc}") from exc

        text = _first_text_block(message)
        if text is None:
            raise EnrichmentError(f"Enrichment reply for {signal.type} has no text content")

        try:
            data = json.loads(unwrap_json_fence(text))
        except json.JSONDecodeError as exc:
            raise EnrichmentError(f"Enrichment reply is not valid JSON: {exc}") from exc

        try:
            result = EnrichmentResponse.model_validate(data)
        except ValidationError as exc:
            raise EnrichmentError(
                f"Enrichment reply does not match the expected schema: "
                f"{exc.error_count()} error(s)"
            ) from exc

        logger.debug("Remote enrichment succeeded | type=%s model=%s", signal.type, self.model)
        return result

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


def unwrap_json_fence(text: str) -> str:
    """Strip a surrounding Markdown code fence (```json ... ```), if any."""
    stripped = text.strip()
    if "```" in stripped:
        match = _FENCE_RE.search(stripped)
        if match:
            return match.group(1).strip()
    return stripped


def _first_text_block(message: object) -> Optional[str]:
    # A non-JSON body comes back from the SDK as plain text, not a Message.
    content = getattr(message, "content", None)
    if not isinstance(content, list) or not content:
        return None
    block = content[0]
    if getattr(block, "type", None) != "text":
        return None
    text = getattr(block, "text", None)
    return text if isinstance(text, str) and text.strip() else None
