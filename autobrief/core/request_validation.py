"""Schema-driven validation and sanitization of JSON request bodies.

Each gated endpoint declares the field names it accepts. A body is checked
against that allow-list (anything else is a mass-assignment attempt) and
every allowed field is validated against its entry in ``FIELD_SCHEMAS``.

Problems are collected rather than raised so that a client sees every defect
of a request in one round trip.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from autobrief.utils.text_sanitizer import sanitize_string


class ProblemKind(str, Enum):
    UNEXPECTED_FIELD = "unexpected_field"
    MISSING_REQUIRED = "missing_required"
    WRONG_TYPE = "wrong_type"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    PATTERN_MISMATCH = "pattern_mismatch"
    NOT_IN_ENUM = "not_in_enum"


@dataclass(frozen=True)
class FieldSchema:
    """Declarative rules for one request field.

    Attributes:
        type: Expected runtime type of the decoded JSON value.
        required: Whether a missing/empty value is an error.
        min_length: Minimum sanitized length (strings only).
        max_length: Maximum sanitized length (strings only).
        pattern: Regex the whole sanitized value must match.
        allowed_values: Closed set of accepted values, in display order.
    """

    type: type = str
    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern[str] | None = None
    allowed_values: tuple[Any, ...] | None = None


@dataclass(frozen=True)
class FieldProblem:
    field: str
    kind: ProblemKind
    message: str


@dataclass(frozen=True)
class ValidationResult:
    """Aggregated outcome of validating one request body."""

    problems: tuple[FieldProblem, ...] = ()
    sanitized_body: dict[str, Any] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.problems

    @property
    def errors(self) -> list[str]:
        """Human-readable problem messages, in detection order."""
        return [problem.message for problem in self.problems]


@dataclass(frozen=True)
class OversizedBody:
    """Stands in for a request body that exceeded the read limit."""

    limit_bytes: int


ARTIFACT_TYPES: tuple[str, ...] = ("slides", "flashcards")

FIELD_SCHEMAS: Mapping[str, FieldSchema] = MappingProxyType(
    {
        "bookTitle": FieldSchema(
            type=str,
            required=True,
            min_length=1,
            max_length=200,
            # Letters, digits, whitespace and common title punctuation
            pattern=re.compile(r"[\w\s\-'\":,.!?()&]+", re.IGNORECASE | re.ASCII),
        ),
        "slug": FieldSchema(
            type=str,
            required=True,
            min_length=1,
            max_length=100,
            pattern=re.compile(r"[a-z0-9\-_]+"),
        ),
        "artifactType": FieldSchema(
            type=str,
            required=True,
            allowed_values=ARTIFACT_TYPES,
        ),
    }
)

_TYPE_NAMES = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}

_MISSING = object()


def _is_empty(value: Any) -> bool:
    return value is _MISSING or value is None or value == ""


def _matches_type(value: Any, expected: type) -> bool:
    # JSON booleans decode to bool, which is an int subclass
    if isinstance(value, bool) and expected is not bool:
        return False
    return isinstance(value, expected)


def validate_field(name: str, value: Any, schema: FieldSchema) -> tuple[Any, FieldProblem | None]:
    """Validate and sanitize a single value.

    Returns:
        ``(sanitized_value, None)`` on success, ``(None, problem)`` on the
        first failed check. An absent optional field yields ``(_MISSING, None)``
        so the caller can leave it out of the sanitized body.
    """
    if _is_empty(value):
        if schema.required:
            return None, FieldProblem(name, ProblemKind.MISSING_REQUIRED, f"{name} is required")
        return value, None

    if not _matches_type(value, schema.type):
        type_name = _TYPE_NAMES.get(schema.type, schema.type.__name__)
        article = "an" if type_name[0] in "aeiou" else "a"
        return None, FieldProblem(name, ProblemKind.WRONG_TYPE, f"{name} must be {article} {type_name}")

    if isinstance(value, str):
        value = sanitize_string(value)

        if schema.min_length is not None and len(value) < schema.min_length:
            return None, FieldProblem(
                name, ProblemKind.TOO_SHORT, f"{name} is too short (min {schema.min_length} chars)"
            )
        if schema.max_length is not None and len(value) > schema.max_length:
            return None, FieldProblem(
                name, ProblemKind.TOO_LONG, f"{name} is too long (max {schema.max_length} chars)"
            )
        if schema.pattern is not None and not schema.pattern.fullmatch(value):
            return None, FieldProblem(
                name, ProblemKind.PATTERN_MISMATCH, f"{name} contains invalid characters"
            )

    if schema.allowed_values is not None and value not in schema.allowed_values:
        allowed = ", ".join(str(v) for v in schema.allowed_values)
        return None, FieldProblem(name, ProblemKind.NOT_IN_ENUM, f"{name} must be one of: {allowed}")

    return value, None


def validate_request_body(
    body: Any,
    allowed_fields: Sequence[str],
    schemas: Mapping[str, FieldSchema] = FIELD_SCHEMAS,
) -> ValidationResult:
    """Validate a decoded JSON body against an endpoint's allowed fields.

    Args:
        body: Decoded request body, or ``OversizedBody`` when reading was cut
            short; anything but a mapping is rejected.
        allowed_fields: Field names the endpoint accepts, in report order.
        schemas: Field rule table (defaults to the built-in schemas).

    Returns:
        ValidationResult whose ``sanitized_body`` holds only fields that
        passed their own checks.
    """
    if isinstance(body, OversizedBody):
        problem = FieldProblem(
            "body", ProblemKind.TOO_LONG, f"Request body too large (max {body.limit_bytes} bytes)"
        )
        return ValidationResult(problems=(problem,))

    if not isinstance(body, Mapping):
        problem = FieldProblem("body", ProblemKind.WRONG_TYPE, "Request body must be a JSON object")
        return ValidationResult(problems=(problem,))

    problems: list[FieldProblem] = []
    sanitized: dict[str, Any] = {}

    allowed = set(allowed_fields)
    for key in body:
        if key not in allowed:
            problems.append(
                FieldProblem(str(key), ProblemKind.UNEXPECTED_FIELD, f"Unexpected field: {key}")
            )

    for name in allowed_fields:
        schema = schemas.get(name)
        if schema is None:
            continue

        value, problem = validate_field(name, body.get(name, _MISSING), schema)
        if problem is not None:
            problems.append(problem)
        elif value is not _MISSING:
            sanitized[name] = value

    return ValidationResult(problems=tuple(problems), sanitized_body=sanitized)
