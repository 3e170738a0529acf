"""OpenAI-compatible extraction client."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx
from openai import OpenAI

from .exceptions import ExtractionFailedError, MalformedModelOutputError
from .models import LLMCallUsage, NormalizedPayload, PayloadKind

LOGGER = logging.getLogger(__name__)


class OpenAIExtractor:
    """Send one extraction prompt (and optional document) to the model."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        timeout_sec: int,
        temperature: float = 0.2,
        trust_env: bool = False,
        client: OpenAI | None = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.client = client or OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_sec,
            http_client=httpx.Client(
                timeout=timeout_sec,
                trust_env=trust_env,
            ),
        )

    def extract(self, prompt: str, payload: NormalizedPayload | None = None) -> str:
        """Return the raw completion text for ``prompt``.

        Text payloads are expected to be appended to the prompt already.
        A binary payload is attached as an inline base64 file part.
        """

        response = self._request_completion(self._build_content(prompt, payload))

        if not response.choices:
            raise ExtractionFailedError("Model returned no choices")

        content = response.choices[0].message.content or ""
        if not content.strip():
            raise MalformedModelOutputError("Model returned an empty completion")

        usage = self._extract_usage(response)
        LOGGER.info(
            "Extraction completed with model=%s total_tokens=%s",
            self.model,
            usage.total_tokens,
        )
        return content

    def _build_content(
        self,
        prompt: str,
        payload: NormalizedPayload | None,
    ) -> str | list[dict[str, Any]]:
        if payload is None or payload.kind is not PayloadKind.BINARY:
            return prompt

        raw = payload.content if isinstance(payload.content, bytes) else payload.content.encode()
        encoded = base64.b64encode(raw).decode("ascii")
        return [
            {
                "type": "file",
                "file": {
                    "filename": payload.filename or "paper.pdf",
                    "file_data": f"data:{payload.media_type};base64,{encoded}",
                },
            },
            {"type": "text", "text": prompt},
        ]

    def _request_completion(self, content: str | list[dict[str, Any]]) -> Any:
        try:
            return self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": content}],
                temperature=self.temperature,
            )
        except Exception as exc:
            raise ExtractionFailedError(f"Failed to generate insights: {exc}") from exc

    def _extract_usage(self, response: Any) -> LLMCallUsage:
        usage = getattr(response, "usage", None)
        if usage is None:
            return LLMCallUsage(total_tokens=None)

        if isinstance(usage, dict):
            value = usage.get("total_tokens")
        else:
            value = getattr(usage, "total_tokens", None)
        try:
            return LLMCallUsage(total_tokens=int(value) if value is not None else None)
        except (TypeError, ValueError):
            return LLMCallUsage(total_tokens=None)
