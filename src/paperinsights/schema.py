"""Output schema shared by the prompt builder and the response decoder.

The schema is declared once as a tree of ``FieldSpec`` entries. The prompt
embeds ``render_schema()`` and the decoder checks replies with
``validate()``, so the two cannot drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

STRING = "string"
SDG = "sdg"
SDG_LIST = "sdg_list"
OBJECT = "object"
OBJECT_LIST = "object_list"

SDG_MIN = 1
SDG_MAX = 17
CHALLENGE_COUNT = 3
NO_LOCATION_CONSTRAINT = "No location constraint"
ANYWHERE = "Anywhere"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: str
    hint: str = ""
    nullable: bool = False
    fields: tuple[FieldSpec, ...] = ()
    count: int = 1


LESSON_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("title", STRING, "a readable, engaging title for the key lesson"),
    FieldSpec("main_summary", STRING, "what the paper is saying, explained simply"),
    FieldSpec("why_it_matters", STRING, "why this matters in the real world"),
)

CHALLENGE_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("title", STRING, "short, action-oriented challenge title"),
    FieldSpec(
        "description",
        STRING,
        "what a person or community can do to act on the findings, in 1-2 sentences",
    ),
    FieldSpec(
        "location",
        STRING,
        f"specific place where the challenge applies, or '{ANYWHERE}'",
    ),
)

RESULT_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(
        "authors",
        STRING,
        "comma-separated list of author names, or null if not found",
        nullable=True,
    ),
    FieldSpec(
        "date_published",
        STRING,
        "publication date as found in the paper, e.g. '2023', 'March 2024', "
        "'2024-01-15', or null if not found",
        nullable=True,
    ),
    FieldSpec(
        "journal",
        STRING,
        "journal or conference name, or null if not found",
        nullable=True,
    ),
    FieldSpec(
        "location_constraint",
        STRING,
        "country, region or site the findings are tied to, "
        f"or '{NO_LOCATION_CONSTRAINT}'",
    ),
    FieldSpec("sdg_primary", SDG),
    FieldSpec("sdg_secondary", SDG_LIST),
    FieldSpec("summary", STRING, "plain-language summary of the paper in 2-3 sentences"),
    FieldSpec("lesson", OBJECT, fields=LESSON_FIELDS),
    FieldSpec("challenges", OBJECT_LIST, fields=CHALLENGE_FIELDS, count=CHALLENGE_COUNT),
)


def render_schema(fields: tuple[FieldSpec, ...] = RESULT_FIELDS) -> str:
    """Render the schema as the JSON skeleton shown to the model."""

    return _render_object(fields, indent=0)


def _render_object(fields: tuple[FieldSpec, ...], indent: int) -> str:
    pad = "  " * (indent + 1)
    entries = [f'{pad}"{spec.name}": {_render_value(spec, indent + 1)}' for spec in fields]
    return "{\n" + ",\n".join(entries) + "\n" + "  " * indent + "}"


def _render_value(spec: FieldSpec, indent: int) -> str:
    if spec.kind == STRING:
        return f'"<{spec.hint}>"'
    if spec.kind == SDG:
        return f"<number {SDG_MIN}-{SDG_MAX}>"
    if spec.kind == SDG_LIST:
        return f"[<number {SDG_MIN}-{SDG_MAX}>, ...]"
    if spec.kind == OBJECT:
        return _render_object(spec.fields, indent)
    if spec.kind == OBJECT_LIST:
        item_pad = "  " * (indent + 1)
        items = [
            item_pad + _render_object(spec.fields, indent + 1) for _ in range(spec.count)
        ]
        return "[\n" + ",\n".join(items) + "\n" + "  " * indent + "]"
    raise ValueError(f"Unknown field kind: {spec.kind}")


def validate(data: Any, fields: tuple[FieldSpec, ...] = RESULT_FIELDS) -> list[str]:
    """Return every schema violation found in ``data``; empty when valid."""

    if not isinstance(data, dict):
        return [f"$: expected object, got {_type_name(data)}"]

    violations: list[str] = []
    _validate_object(data, fields, prefix="", violations=violations)
    return violations


def _validate_object(
    data: dict[str, Any],
    fields: tuple[FieldSpec, ...],
    prefix: str,
    violations: list[str],
) -> None:
    for spec in fields:
        path = f"{prefix}{spec.name}"
        if spec.name not in data:
            violations.append(f"{path}: missing field")
            continue
        _validate_value(data[spec.name], spec, path, violations)


def _validate_value(value: Any, spec: FieldSpec, path: str, violations: list[str]) -> None:
    if value is None:
        if not spec.nullable:
            violations.append(f"{path}: must not be null")
        return

    if spec.kind == STRING:
        if not isinstance(value, str):
            violations.append(f"{path}: expected string, got {_type_name(value)}")
    elif spec.kind == SDG:
        _check_sdg(value, path, violations)
    elif spec.kind == SDG_LIST:
        if not isinstance(value, list):
            violations.append(f"{path}: expected array, got {_type_name(value)}")
            return
        for index, item in enumerate(value):
            _check_sdg(item, f"{path}[{index}]", violations)
    elif spec.kind == OBJECT:
        if not isinstance(value, dict):
            violations.append(f"{path}: expected object, got {_type_name(value)}")
            return
        _validate_object(value, spec.fields, f"{path}.", violations)
    elif spec.kind == OBJECT_LIST:
        if not isinstance(value, list):
            violations.append(f"{path}: expected array, got {_type_name(value)}")
            return
        for index, item in enumerate(value):
            item_path = f"{path}[{index}]"
            if not isinstance(item, dict):
                violations.append(f"{item_path}: expected object, got {_type_name(item)}")
                continue
            _validate_object(item, spec.fields, f"{item_path}.", violations)


def _check_sdg(value: Any, path: str, violations: list[str]) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        violations.append(f"{path}: expected integer SDG number, got {_type_name(value)}")
    elif not SDG_MIN <= value <= SDG_MAX:
        violations.append(f"{path}: SDG number {value} outside {SDG_MIN}-{SDG_MAX}")


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
