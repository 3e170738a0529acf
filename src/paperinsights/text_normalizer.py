"""Convert full-text article XML into plain prose for the model."""

from __future__ import annotations

import re

BODY_PATTERN = re.compile(r"<body[^>]*>(.*?)</body>", re.IGNORECASE | re.DOTALL)
TAG_PATTERN = re.compile(r"<[^<>]*(?:>|$)")
ENTITY_PATTERN = re.compile(r"&(amp|lt|gt|quot|#39);")
WHITESPACE_PATTERN = re.compile(r"\s+")

_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "#39": "'",
}


def extract_text_from_xml(xml: str) -> str:
    """Return whitespace-collapsed body text of an article XML document.

    Only the first ``<body>`` region is kept when present, so front matter
    and reference lists do not reach the prompt. Malformed markup degrades
    the output but never raises.
    """

    match = BODY_PATTERN.search(xml)
    section = match.group(1) if match else xml

    text = TAG_PATTERN.sub(" ", section)
    text = decode_entities(text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def decode_entities(text: str) -> str:
    # Single pass: "&amp;lt;" becomes "&lt;", not "<".
    return ENTITY_PATTERN.sub(lambda m: _ENTITIES[m.group(1)], text)
