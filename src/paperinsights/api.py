"""HTTP endpoints for paper analysis and PMC search."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, File, Form, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .exceptions import ConfigError, InvalidInputError, PaperInsightsError
from .models import AnalysisRequest, PdfUpload
from .pipeline import PaperInsightsPipeline, build_pmc_client
from .pmc_client import PmcClient
from .sources import MAX_PDF_BYTES, PMCID_PATTERN

LOGGER = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    pipeline: PaperInsightsPipeline | None = None,
    pmc_client: PmcClient | None = None,
    dotenv_path: str | Path | None = None,
) -> FastAPI:
    """Build the API application.

    A missing model credential does not stop the app from starting; the
    analysis endpoints answer with a server misconfiguration error instead.
    """

    config_error: ConfigError | None = None

    if pipeline is None and settings is None:
        try:
            settings = load_settings(dotenv_path=dotenv_path)
        except ConfigError as exc:
            LOGGER.error("Analysis endpoints disabled: %s", exc)
            config_error = exc

    if pmc_client is None:
        if pipeline is not None:
            pmc_client = pipeline.pmc_client
        elif settings is not None:
            pmc_client = build_pmc_client(settings)
        else:
            pmc_client = PmcClient()

    if pipeline is None and settings is not None:
        pipeline = PaperInsightsPipeline.from_settings(settings, pmc_client=pmc_client)

    search_max_results = settings.pmc_search_max_results if settings else 10

    app = FastAPI(
        title="Paper Insights",
        description="Extract SDG-tagged lessons and challenges from research papers.",
    )

    @app.exception_handler(PaperInsightsError)
    async def _handle_error(request: Request, exc: PaperInsightsError) -> JSONResponse:
        if exc.status_code >= 500:
            LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _handle_invalid_request(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        LOGGER.info("%s %s rejected: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(
            {"error": "Invalid request body - expected form data."},
            status_code=InvalidInputError.status_code,
        )

    def _require_pipeline() -> PaperInsightsPipeline:
        if pipeline is None:
            raise config_error or ConfigError("Server misconfiguration")
        return pipeline

    @app.post("/api/generate")
    def generate(
        file: UploadFile | None = File(None),
        text: str | None = Form(None),
        title: str | None = Form(None),
    ):
        upload = None
        if file is not None:
            # One byte past the limit is enough for the size check to reject it.
            upload = PdfUpload(
                data=file.file.read(MAX_PDF_BYTES + 1),
                content_type=file.content_type or "",
                filename=file.filename or "paper.pdf",
            )

        request = AnalysisRequest.from_inputs(pdf=upload, text=text, title=title)
        return _require_pipeline().analyze(request).to_dict()

    @app.get("/api/fetch-pmc")
    def fetch_pmc(pmcid: str | None = Query(None)):
        if not pmcid or PMCID_PATTERN.fullmatch(pmcid) is None:
            raise InvalidInputError("Provide a valid PMCID (e.g. PMC1234567).")

        request = AnalysisRequest.from_inputs(pmcid=pmcid)
        return _require_pipeline().analyze(request).to_dict()

    @app.get("/api/search-pmc")
    def search_pmc(
        sdg: str | None = Query(None),
        keywords: str = Query(""),
    ):
        try:
            sdg_number = int(sdg or "")
        except ValueError as exc:
            raise InvalidInputError("Provide a valid SDG number (1-17).") from exc

        papers = pmc_client.search_by_sdg(
            sdg_number,
            keywords=keywords,
            max_results=search_max_results,
        )
        return {"papers": [paper.to_dict() for paper in papers]}

    return app
