"""End-to-end pipeline: acquire source, prompt the model, decode the reply."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from .decoder import decode_response
from .exceptions import PaperInsightsError
from .models import AnalysisRequest, AnalysisResult, PayloadKind, PipelineResult
from .openai_extractor import OpenAIExtractor
from .pmc_client import PmcClient
from .prompts import append_paper_text, build_prompt
from .sources import build_source

if TYPE_CHECKING:
    from collections.abc import Callable

    from .config import Settings

LOGGER = logging.getLogger(__name__)


class PaperInsightsPipeline:
    """Coordinates source acquisition, extraction and response decoding."""

    def __init__(
        self,
        extractor: OpenAIExtractor,
        pmc_client: PmcClient | None = None,
        progress_callback: Callable[[str, str], None] | None = None,
    ) -> None:
        self.extractor = extractor
        self.pmc_client = pmc_client or PmcClient()
        self.progress_callback = progress_callback

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        pmc_client: PmcClient | None = None,
        progress_callback: Callable[[str, str], None] | None = None,
    ) -> PaperInsightsPipeline:
        extractor = OpenAIExtractor(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            timeout_sec=settings.openai_timeout_sec,
            temperature=settings.openai_temperature,
            trust_env=settings.network_trust_env,
        )
        return cls(
            extractor=extractor,
            pmc_client=pmc_client or build_pmc_client(settings),
            progress_callback=progress_callback,
        )

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Run one request to completion or raise its classified error.

        Each step depends on the previous one; the first failure ends the
        request and no partial result is returned.
        """

        source = build_source(request, self.pmc_client)

        self._report("acquire", f"Reading {request.source_label}...")
        payload = source.acquire()

        prompt = build_prompt(payload.kind, request.title)
        if payload.kind is PayloadKind.TEXT:
            prompt = append_paper_text(prompt, str(payload.content))
            extractor_payload = None
        else:
            extractor_payload = payload

        self._report("extract", "Waiting for the model...")
        raw = self.extractor.extract(prompt, extractor_payload)

        self._report("decode", "Validating model output...")
        result = decode_response(raw)

        LOGGER.info(
            "Analyzed %s: sdg_primary=%s challenges=%d",
            request.source_label,
            result.sdg_primary,
            len(result.challenges),
        )
        self._report("done", f"SDG {result.sdg_primary}")
        return result

    def analyze_many(self, requests: Iterable[AnalysisRequest]) -> list[PipelineResult]:
        """Analyze independent requests one after another, recording each outcome."""

        results: list[PipelineResult] = []
        for request in requests:
            try:
                result = self.analyze(request)
            except PaperInsightsError as exc:
                LOGGER.warning("Analysis failed for %s: %s", request.source_label, exc)
                results.append(
                    PipelineResult(
                        source=request.source_label,
                        result=None,
                        success=False,
                        error=str(exc),
                    )
                )
                continue

            results.append(
                PipelineResult(
                    source=request.source_label,
                    result=result,
                    success=True,
                )
            )
        return results

    def _report(self, step: str, details: str) -> None:
        if self.progress_callback:
            self.progress_callback(step, details)


def build_pmc_client(settings: Settings) -> PmcClient:
    return PmcClient(
        base_url=settings.pmc_base_url,
        timeout_sec=settings.pmc_timeout_sec,
        api_key=settings.pmc_api_key,
        trust_env=settings.network_trust_env,
    )
