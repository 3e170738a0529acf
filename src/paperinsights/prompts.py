"""Prompt templates and rendering helpers."""

from __future__ import annotations

from .models import PayloadKind
from .schema import ANYWHERE, CHALLENGE_COUNT, NO_LOCATION_CONSTRAINT, render_schema

BINARY_INPUT_DESCRIPTION = "The research paper PDF is attached. Analyze the full paper."
TEXT_INPUT_DESCRIPTION = "Analyze the following research paper text."

DEFAULT_PROMPT_TEMPLATE = """You are a research intelligence assistant. {{input_description}}

{{paper_ref}}Your tasks:
1. Extract the author(s), publication date, and journal name (if available). Use null for anything not found.
2. Identify what problem the paper studies.
3. What it finds or concludes.
4. Why it matters in the real world.
5. Which UN Sustainable Development Goal(s) it most closely relates to (use SDG numbers 1-17).
6. Whether the findings are tied to a specific location. If they are not, use "{{no_location}}".
7. Propose exactly {{challenge_count}} actionable challenges inspired by the findings. Give each a location, or "{{anywhere}}" if it can be done anywhere.

Return ONLY valid JSON matching this exact schema - no markdown, no code fences, no extra text:

{{schema}}"""


def build_prompt(modality: PayloadKind, title: str | None = None) -> str:
    """Render the extraction instruction for one input modality."""

    input_description = (
        BINARY_INPUT_DESCRIPTION
        if modality is PayloadKind.BINARY
        else TEXT_INPUT_DESCRIPTION
    )
    paper_ref = f"Title: {title}\n" if title else ""
    return _replace_placeholders(
        DEFAULT_PROMPT_TEMPLATE,
        {
            "{{input_description}}": input_description,
            "{{no_location}}": NO_LOCATION_CONSTRAINT,
            "{{anywhere}}": ANYWHERE,
            "{{challenge_count}}": str(CHALLENGE_COUNT),
            "{{schema}}": render_schema(),
            "{{paper_ref}}": paper_ref,
        },
    )


def append_paper_text(prompt: str, paper_text: str) -> str:
    return f"{prompt}\n\n{paper_text}"


def _replace_placeholders(template: str, values: dict[str, str]) -> str:
    rendered = template
    for placeholder, value in values.items():
        rendered = rendered.replace(placeholder, value)
    return rendered
