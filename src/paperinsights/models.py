"""Typed models used across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .exceptions import InvalidInputError


class AnalysisMode(str, Enum):
    PDF = "pdf"
    PASTED_TEXT = "text"
    REMOTE_RECORD = "pmc"


class PayloadKind(str, Enum):
    BINARY = "binary"
    TEXT = "text"


@dataclass(frozen=True)
class PdfUpload:
    """An uploaded PDF blob with its declared media type."""

    data: bytes
    content_type: str
    filename: str = "paper.pdf"

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class AnalysisRequest:
    """One paper-analysis request; exactly one source is populated."""

    mode: AnalysisMode
    pdf: PdfUpload | None = None
    text: str | None = None
    pmcid: str | None = None
    title: str | None = None

    def __post_init__(self) -> None:
        populated = {
            AnalysisMode.PDF: self.pdf is not None,
            AnalysisMode.PASTED_TEXT: self.text is not None,
            AnalysisMode.REMOTE_RECORD: self.pmcid is not None,
        }
        if sum(populated.values()) != 1 or not populated[self.mode]:
            raise InvalidInputError(
                f"Request in mode '{self.mode.value}' must carry exactly one matching source"
            )

    @classmethod
    def from_inputs(
        cls,
        pdf: PdfUpload | None = None,
        text: str | None = None,
        pmcid: str | None = None,
        title: str | None = None,
    ) -> AnalysisRequest:
        """Build a request from loosely supplied form or CLI inputs.

        Text and title are trimmed and treated as absent when empty. An
        uploaded PDF takes precedence over pasted text.
        """

        safe_title = (title or "").strip() or None
        safe_text = (text or "").strip() or None

        if pdf is not None:
            return cls(mode=AnalysisMode.PDF, pdf=pdf, title=safe_title)
        if safe_text is not None:
            return cls(mode=AnalysisMode.PASTED_TEXT, text=safe_text, title=safe_title)
        if pmcid is not None:
            return cls(mode=AnalysisMode.REMOTE_RECORD, pmcid=pmcid, title=safe_title)

        raise InvalidInputError("Please provide a PDF file or paste paper text.")

    @property
    def source_label(self) -> str:
        if self.mode is AnalysisMode.PDF and self.pdf is not None:
            return self.pdf.filename
        if self.mode is AnalysisMode.REMOTE_RECORD and self.pmcid is not None:
            return self.pmcid
        return self.title or "pasted text"


@dataclass(frozen=True)
class NormalizedPayload:
    """Source content ready to be sent to the extraction model."""

    kind: PayloadKind
    content: bytes | str
    media_type: str | None = None
    filename: str | None = None


@dataclass(frozen=True)
class Lesson:
    title: str
    main_summary: str
    why_it_matters: str


@dataclass(frozen=True)
class Challenge:
    title: str
    description: str
    location: str


@dataclass(frozen=True)
class AnalysisResult:
    """Structured insights extracted from one paper."""

    authors: str | None
    date_published: str | None
    journal: str | None
    location_constraint: str
    sdg_primary: int
    sdg_secondary: tuple[int, ...]
    summary: str
    lesson: Lesson
    challenges: tuple[Challenge, ...]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisResult:
        """Build a result from data that already passed schema validation."""

        lesson = data["lesson"]
        return cls(
            authors=data["authors"],
            date_published=data["date_published"],
            journal=data["journal"],
            location_constraint=data["location_constraint"],
            sdg_primary=data["sdg_primary"],
            sdg_secondary=tuple(data["sdg_secondary"]),
            summary=data["summary"],
            lesson=Lesson(
                title=lesson["title"],
                main_summary=lesson["main_summary"],
                why_it_matters=lesson["why_it_matters"],
            ),
            challenges=tuple(
                Challenge(
                    title=item["title"],
                    description=item["description"],
                    location=item["location"],
                )
                for item in data["challenges"]
            ),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "authors": self.authors,
            "date_published": self.date_published,
            "journal": self.journal,
            "location_constraint": self.location_constraint,
            "sdg_primary": self.sdg_primary,
            "sdg_secondary": list(self.sdg_secondary),
            "summary": self.summary,
            "lesson": {
                "title": self.lesson.title,
                "main_summary": self.lesson.main_summary,
                "why_it_matters": self.lesson.why_it_matters,
            },
            "challenges": [
                {
                    "title": challenge.title,
                    "description": challenge.description,
                    "location": challenge.location,
                }
                for challenge in self.challenges
            ],
        }


@dataclass(frozen=True)
class PmcSummary:
    """Search hit returned by the PMC literature search."""

    pmcid: str
    title: str
    authors: str
    journal: str
    date: str

    def to_dict(self) -> dict[str, str]:
        return {
            "pmcid": self.pmcid,
            "title": self.title,
            "authors": self.authors,
            "journal": self.journal,
            "date": self.date,
        }


@dataclass(frozen=True)
class LLMCallUsage:
    """Token usage for one LLM call."""

    total_tokens: int | None


@dataclass(frozen=True)
class PipelineResult:
    """Status for a single analysis run."""

    source: str
    result: AnalysisResult | None
    success: bool
    error: str | None = None
    analyzed_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
