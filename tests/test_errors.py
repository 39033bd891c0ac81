import pytest

from hclkit.hcl_errors import (
    BugError,
    DeserializeError,
    ErrorKind,
    ErrorMergingKeysError,
    HclError,
    HclIOError,
    HclSyntaxError,
    IllegalMultipleEntriesError,
    InvalidNumberError,
    InvalidUnicodeCodePointError,
    InvalidUnicodeError,
    RecursionLimitError,
    UnexpectedVariantError,
    render_diagnostic,
)


@pytest.mark.parametrize(
    "error,kind",
    [
        (HclSyntaxError("bad"), ErrorKind.PARSE_ERROR),
        (RecursionLimitError("deep"), ErrorKind.PARSE_ERROR),
        (InvalidUnicodeCodePointError("\\UD800"), ErrorKind.INVALID_UNICODE_CODE_POINT),
        (InvalidUnicodeError(b"\xff"), ErrorKind.INVALID_UNICODE),
        (InvalidNumberError("1..2"), ErrorKind.INVALID_NUMBER),
        (IllegalMultipleEntriesError("a", "integer"), ErrorKind.ILLEGAL_MULTIPLE_ENTRIES),
        (ErrorMergingKeysError("a", "object", "block"), ErrorKind.ERROR_MERGING_KEYS),
        (UnexpectedVariantError("string", "integer"), ErrorKind.UNEXPECTED_VARIANT),
        (HclIOError("gone"), ErrorKind.IO_ERROR),
        (BugError("oops"), ErrorKind.BUG),
        (DeserializeError("nope"), ErrorKind.DESERIALIZE_ERROR),
    ],
)  # type: ignore[misc]
def test_error_kinds(error: HclError, kind: ErrorKind) -> None:
    assert isinstance(error, HclError)
    assert error.kind is kind


def test_syntax_error_message_forms() -> None:
    assert str(HclSyntaxError("bad")) == "bad"
    assert str(HclSyntaxError("bad", 3, 7)) == "bad (line 3, col 7)"


def test_merge_error_messages() -> None:
    assert str(IllegalMultipleEntriesError("a", "integer")) == (
        "Key 'a' of variant 'integer' cannot have multiple entries"
    )
    err = ErrorMergingKeysError("a", "object", "block")
    assert "'object'" in str(err) and "'block'" in str(err)


def test_render_diagnostic_points_at_column() -> None:
    source = "first\n  second = ?\nthird"
    position = source.index("?")
    message = render_diagnostic("Expected an expression", source, position, 2, 12)
    assert message.splitlines() == [
        "Expected an expression",
        "Line 2, column 12:",
        "second = ?",
        "         ^",
    ]


def test_render_diagnostic_truncates_long_lines() -> None:
    source = "x" * 100 + "!" + "y" * 100
    message = render_diagnostic("Bad", source, 100, 1, 101)
    text, pointer = message.splitlines()[2:]
    assert text.startswith("...")
    assert text.endswith("...")
    assert text[len(pointer) - 1] == "!"


def test_render_diagnostic_at_end_of_input() -> None:
    message = render_diagnostic("Unexpected end", "a = ", 4, 1, 5)
    assert message.splitlines()[2:] == ["a = ", "    ^"]
