"""Tests for schema-driven request body validation."""

import re

import pytest

from autobrief.core.request_validation import (
    FIELD_SCHEMAS,
    FieldSchema,
    OversizedBody,
    ProblemKind,
    validate_field,
    validate_request_body,
)


def _kinds(result) -> list[ProblemKind]:
    return [p.kind for p in result.problems]


class TestValidateRequestBody:
    def test_valid_title(self) -> None:
        result = validate_request_body({"bookTitle": "Atomic Habits"}, ["bookTitle"])

        assert result.valid is True
        assert result.sanitized_body == {"bookTitle": "Atomic Habits"}
        assert result.errors == []

    def test_valid_slug_and_artifact_type(self) -> None:
        result = validate_request_body(
            {"slug": "atomic-habits", "artifactType": "flashcards"},
            ["slug", "artifactType"],
        )

        assert result.valid is True
        assert result.sanitized_body == {"slug": "atomic-habits", "artifactType": "flashcards"}

    def test_artifact_type_outside_enum(self) -> None:
        result = validate_request_body(
            {"slug": "atomic-habits", "artifactType": "poster"},
            ["slug", "artifactType"],
        )

        assert result.valid is False
        assert _kinds(result) == [ProblemKind.NOT_IN_ENUM]
        assert result.problems[0].field == "artifactType"
        assert result.errors == ["artifactType must be one of: slides, flashcards"]
        # The valid field is still sanitized and kept
        assert result.sanitized_body == {"slug": "atomic-habits"}

    def test_unexpected_field_rejected_even_if_allowed_fields_valid(self) -> None:
        result = validate_request_body(
            {"bookTitle": "Atomic Habits", "isAdmin": True},
            ["bookTitle"],
        )

        assert result.valid is False
        assert _kinds(result) == [ProblemKind.UNEXPECTED_FIELD]
        assert result.problems[0].field == "isAdmin"
        assert "isAdmin" in result.errors[0]
        assert result.sanitized_body == {"bookTitle": "Atomic Habits"}

    def test_every_problem_is_reported(self) -> None:
        result = validate_request_body(
            {"slug": "Not A Slug", "artifactType": 3, "extra": 1, "other": 2},
            ["slug", "artifactType"],
        )

        assert _kinds(result) == [
            ProblemKind.UNEXPECTED_FIELD,
            ProblemKind.UNEXPECTED_FIELD,
            ProblemKind.PATTERN_MISMATCH,
            ProblemKind.WRONG_TYPE,
        ]
        assert result.sanitized_body == {}

    def test_missing_required_field(self) -> None:
        result = validate_request_body({}, ["bookTitle"])

        assert _kinds(result) == [ProblemKind.MISSING_REQUIRED]
        assert result.errors == ["bookTitle is required"]

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_required_field(self, value) -> None:
        result = validate_request_body({"bookTitle": value}, ["bookTitle"])

        assert _kinds(result) == [ProblemKind.MISSING_REQUIRED]

    def test_whitespace_only_title_is_too_short(self) -> None:
        result = validate_request_body({"bookTitle": "   "}, ["bookTitle"])

        assert _kinds(result) == [ProblemKind.TOO_SHORT]

    def test_wrong_type(self) -> None:
        result = validate_request_body({"bookTitle": 42}, ["bookTitle"])

        assert _kinds(result) == [ProblemKind.WRONG_TYPE]
        assert result.errors == ["bookTitle must be a string"]

    def test_script_tag_brackets_stripped(self) -> None:
        result = validate_request_body({"bookTitle": "<script>"}, ["bookTitle"])

        assert result.valid is True
        assert result.sanitized_body == {"bookTitle": "script"}

    def test_oversized_title_truncated_then_too_long(self) -> None:
        result = validate_request_body({"bookTitle": "a" * 10_000}, ["bookTitle"])

        assert _kinds(result) == [ProblemKind.TOO_LONG]
        assert result.errors == ["bookTitle is too long (max 200 chars)"]

    def test_title_pattern_rejects_unlisted_punctuation(self) -> None:
        result = validate_request_body({"bookTitle": "Rich Dad; Poor Dad"}, ["bookTitle"])

        assert _kinds(result) == [ProblemKind.PATTERN_MISMATCH]

    def test_title_accepts_common_punctuation(self) -> None:
        title = "Surely You're Joking, Mr. Feynman! (Adventures & \"Stories\"): Vol-1?"
        result = validate_request_body({"bookTitle": title}, ["bookTitle"])

        assert result.valid is True
        assert result.sanitized_body["bookTitle"] == title

    def test_slug_rejects_uppercase(self) -> None:
        result = validate_request_body({"slug": "Atomic-Habits", "artifactType": "slides"}, ["slug", "artifactType"])

        assert _kinds(result) == [ProblemKind.PATTERN_MISMATCH]

    def test_slug_too_long(self) -> None:
        result = validate_request_body({"slug": "a" * 101, "artifactType": "slides"}, ["slug", "artifactType"])

        assert _kinds(result) == [ProblemKind.TOO_LONG]

    def test_fields_without_schema_are_ignored(self) -> None:
        result = validate_request_body({"note": "anything"}, ["note"])

        assert result.valid is True
        assert result.sanitized_body == {}

    @pytest.mark.parametrize("body", [["bookTitle"], "Atomic Habits", None, 7])
    def test_non_object_body_rejected(self, body) -> None:
        result = validate_request_body(body, ["bookTitle"])

        assert result.valid is False
        assert _kinds(result) == [ProblemKind.WRONG_TYPE]
        assert result.problems[0].field == "body"

    @pytest.mark.parametrize(
        "body,fields",
        [
            ({"bookTitle": "  <i>Atomic Habits</i>  "}, ["bookTitle"]),
            ({"bookTitle": "x" * 499 + " y"}, ["bookTitle"]),
            ({"bookTitle": "\x01 Dune <"}, ["bookTitle"]),
            ({"slug": " atomic-habits\n", "artifactType": " slides "}, ["slug", "artifactType"]),
        ],
    )
    def test_validation_is_idempotent(self, body, fields) -> None:
        first = validate_request_body(body, fields)
        second = validate_request_body(first.sanitized_body, fields)

        assert second.sanitized_body == first.sanitized_body
        assert validate_request_body(second.sanitized_body, fields) == second


class TestValidateFieldOptional:
    schema = FieldSchema(type=str, required=False, min_length=2, max_length=5, pattern=re.compile(r"[a-z]+"))

    def test_empty_optional_passes_through(self) -> None:
        value, problem = validate_field("nickname", "", self.schema)

        assert problem is None
        assert value == ""

    def test_absent_optional_field_is_omitted(self) -> None:
        result = validate_request_body({}, ["nickname"], {"nickname": self.schema})

        assert result.valid is True
        assert result.sanitized_body == {}

    def test_present_optional_field_still_validated(self) -> None:
        result = validate_request_body({"nickname": "x"}, ["nickname"], {"nickname": self.schema})

        assert [p.kind for p in result.problems] == [ProblemKind.TOO_SHORT]

    def test_boolean_is_not_an_integer(self) -> None:
        _, problem = validate_field("count", True, FieldSchema(type=int, required=True))

        assert problem is not None
        assert problem.kind is ProblemKind.WRONG_TYPE
        assert problem.message == "count must be an integer"


def test_builtin_schema_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        FIELD_SCHEMAS["bookTitle"] = FieldSchema()  # type: ignore[index]


def test_oversized_body_reported_as_single_problem() -> None:
    result = validate_request_body(OversizedBody(limit_bytes=1024), ["bookTitle"])

    assert [p.kind for p in result.problems] == [ProblemKind.TOO_LONG]
    assert result.problems[0].field == "body"
    assert result.errors == ["Request body too large (max 1024 bytes)"]
    assert result.sanitized_body == {}
