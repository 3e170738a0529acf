"""Decode raw model completions into ``AnalysisResult`` objects."""

from __future__ import annotations

import json
import logging
import re

from .exceptions import MalformedModelOutputError
from .models import AnalysisResult
from .schema import CHALLENGE_COUNT, validate

LEADING_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
TRAILING_FENCE_PATTERN = re.compile(r"\s*```$")

LOGGER = logging.getLogger(__name__)


def strip_code_fences(raw: str) -> str:
    """Remove one leading and one trailing code fence, then trim."""

    cleaned = LEADING_FENCE_PATTERN.sub("", raw.strip(), count=1)
    cleaned = TRAILING_FENCE_PATTERN.sub("", cleaned, count=1)
    return cleaned.strip()


def decode_response(raw: str) -> AnalysisResult:
    cleaned = strip_code_fences(raw)

    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise MalformedModelOutputError(f"Model reply is not valid JSON: {exc}") from exc

    violations = validate(data)
    if violations:
        raise MalformedModelOutputError(
            "Model reply does not match the result schema: " + "; ".join(violations)
        )

    result = AnalysisResult.from_dict(data)
    if len(result.challenges) != CHALLENGE_COUNT:
        LOGGER.warning(
            "Model returned %d challenges, expected %d",
            len(result.challenges),
            CHALLENGE_COUNT,
        )
    return result
