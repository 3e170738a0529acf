"""Source acquirers: turn one request input into a model-ready payload."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from .exceptions import InsufficientContentError, InvalidInputError
from .models import AnalysisMode, AnalysisRequest, NormalizedPayload, PayloadKind, PdfUpload
from .text_normalizer import extract_text_from_xml

if TYPE_CHECKING:
    from .pmc_client import PmcClient

PDF_MEDIA_TYPE = "application/pdf"
MAX_PDF_BYTES = 20 * 1024 * 1024
MIN_REMOTE_TEXT_CHARS = 100
MAX_REMOTE_TEXT_CHARS = 100_000
TRUNCATION_MARKER = "\n\n[Text truncated]"
PMCID_PATTERN = re.compile(r"PMC([0-9]+)")

LOGGER = logging.getLogger(__name__)


class Source(Protocol):
    def acquire(self) -> NormalizedPayload: ...


@dataclass(frozen=True)
class PdfSource:
    upload: PdfUpload

    def acquire(self) -> NormalizedPayload:
        if self.upload.content_type != PDF_MEDIA_TYPE:
            raise InvalidInputError("Only PDF files are accepted.")
        if self.upload.size > MAX_PDF_BYTES:
            raise InvalidInputError("PDF must be under 20 MB.")

        LOGGER.debug("Accepted PDF %s (%d bytes)", self.upload.filename, self.upload.size)
        return NormalizedPayload(
            kind=PayloadKind.BINARY,
            content=self.upload.data,
            media_type=PDF_MEDIA_TYPE,
            filename=self.upload.filename,
        )


@dataclass(frozen=True)
class PastedTextSource:
    text: str

    def acquire(self) -> NormalizedPayload:
        text = self.text.strip()
        if not text:
            raise InvalidInputError("Please provide a PDF file or paste paper text.")
        return NormalizedPayload(kind=PayloadKind.TEXT, content=text)


@dataclass(frozen=True)
class PmcRecordSource:
    pmcid: str
    client: PmcClient

    def acquire(self) -> NormalizedPayload:
        match = PMCID_PATTERN.fullmatch(self.pmcid)
        if match is None:
            raise InvalidInputError("Provide a valid PMCID (e.g. PMC1234567).")

        xml = self.client.fetch_full_text_xml(match.group(1))
        full_text = extract_text_from_xml(xml)

        if len(full_text) < MIN_REMOTE_TEXT_CHARS:
            raise InsufficientContentError(
                "Could not extract enough text from this paper. "
                "It may not be available as open-access full text."
            )

        if len(full_text) > MAX_REMOTE_TEXT_CHARS:
            LOGGER.info(
                "Truncating %s from %d to %d chars",
                self.pmcid,
                len(full_text),
                MAX_REMOTE_TEXT_CHARS,
            )
            full_text = full_text[:MAX_REMOTE_TEXT_CHARS] + TRUNCATION_MARKER

        return NormalizedPayload(kind=PayloadKind.TEXT, content=full_text)


def build_source(request: AnalysisRequest, pmc_client: PmcClient) -> Source:
    """Select the acquirer matching the request mode."""

    if request.mode is AnalysisMode.PDF and request.pdf is not None:
        return PdfSource(upload=request.pdf)
    if request.mode is AnalysisMode.PASTED_TEXT and request.text is not None:
        return PastedTextSource(text=request.text)
    if request.mode is AnalysisMode.REMOTE_RECORD and request.pmcid is not None:
        return PmcRecordSource(pmcid=request.pmcid, client=pmc_client)

    raise InvalidInputError("Please provide a PDF file or paste paper text.")
