"""
Error taxonomy for hclkit.

Every failure raised by the lexer, parser, merge engine, typed accessors and
the adapters around them derives from `HclError`, so callers can catch a
single type. Each class carries an `ErrorKind` naming its taxonomy entry.

Classes:
    ErrorKind: Enumeration of error kinds.
    HclError: Base class for all hclkit errors.
    HclSyntaxError: Grammar mismatch with a rendered, position-aware diagnostic.
    RecursionLimitError: Nesting deeper than the configured limit.
    InvalidUnicodeCodePointError: An escape resolving to no Unicode scalar value.
    InvalidUnicodeError: Input bytes that are not valid UTF-8.
    InvalidNumberError: Digits that parse as neither integer nor float.
    IllegalMultipleEntriesError: A scalar or tuple key repeated during merge.
    ErrorMergingKeysError: A repeated key whose values are of different variants.
    UnexpectedVariantError: Typed accessor called on the wrong variant.
    HclIOError: I/O failure around parsing.
    BugError: Internal invariant violation.
    DeserializeError: Record mapping failure in the deserialization adapter.

Example:
    >>> try:
    ...     parse("a = ")
    ... except HclError as e:
    ...     print(e.kind)
    ErrorKind.PARSE_ERROR
"""

from enum import Enum

from hclkit.hcl_constants import INLINE_WHITESPACE, MAX_ERROR_CONTEXT_LEN

ERROR_POINTER_CHAR = "^"
ERROR_ELLIPSIS = "..."


class ErrorKind(Enum):
    INVALID_UNICODE_CODE_POINT = "InvalidUnicodeCodePoint"
    INVALID_UNICODE = "InvalidUnicode"
    INVALID_NUMBER = "InvalidNumber"
    PARSE_ERROR = "ParseError"
    ILLEGAL_MULTIPLE_ENTRIES = "IllegalMultipleEntries"
    ERROR_MERGING_KEYS = "ErrorMergingKeys"
    UNEXPECTED_VARIANT = "UnexpectedVariant"
    IO_ERROR = "IOError"
    BUG = "Bug"
    DESERIALIZE_ERROR = "DeserializeError"


class HclError(Exception):
    """Base class of every error raised by hclkit.

    Attributes:
        kind (ErrorKind): The taxonomy entry of this error.
    """

    kind = ErrorKind.BUG

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class HclSyntaxError(HclError):
    """Raised when the input does not match the HCL grammar.

    The message is rendered from the source text: the reason, the 1-based line
    and column, the offending line (truncated around the error position) and a
    pointer under the offending character.

    Attributes:
        reason (str): Why the input is invalid, as a complete sentence.
        line (int): 1-based line number of the error position.
        column (int): 1-based column number of the error position.
    """

    kind = ErrorKind.PARSE_ERROR

    def __init__(
        self,
        reason: str,
        line: int = 0,
        column: int = 0,
        source: str | None = None,
        position: int | None = None,
    ) -> None:
        self.reason = reason
        self.line = line
        self.column = column
        if source is not None and position is not None:
            message = render_diagnostic(reason, source, position, line, column)
        elif line:
            message = f"{reason} (line {line}, col {column})"
        else:
            message = reason
        super().__init__(message)


class RecursionLimitError(HclSyntaxError):
    """Raised when tuples, objects or blocks nest deeper than the parser allows."""


class InvalidUnicodeCodePointError(HclError):
    """Raised when a string escape does not resolve to a Unicode scalar value.

    Attributes:
        escape (str): The raw escape text, including the backslash (e.g. ``\\UD800``).
    """

    kind = ErrorKind.INVALID_UNICODE_CODE_POINT

    def __init__(self, escape: str) -> None:
        self.escape = escape
        super().__init__(f"Invalid Unicode Code Points {escape}")


class InvalidUnicodeError(HclError):
    """Raised when input bytes are not valid UTF-8.

    Attributes:
        data (bytes): The offending byte sequence.
    """

    kind = ErrorKind.INVALID_UNICODE

    def __init__(self, data: bytes) -> None:
        self.data = data
        super().__init__(f"Invalid UTF-8 byte sequence {data!r}")


class InvalidNumberError(HclError):
    """Raised when a numeric literal is neither a valid integer nor a valid float."""

    kind = ErrorKind.INVALID_NUMBER

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Invalid number {text!r}")


class IllegalMultipleEntriesError(HclError):
    """Raised when a key holding a scalar or tuple appears more than once in a merge."""

    kind = ErrorKind.ILLEGAL_MULTIPLE_ENTRIES

    def __init__(self, key: str, variant: str) -> None:
        self.key = key
        self.variant = variant
        super().__init__(
            f"Key {key!r} of variant {variant!r} cannot have multiple entries"
        )


class ErrorMergingKeysError(HclError):
    """Raised when a repeated key carries values of different variants."""

    kind = ErrorKind.ERROR_MERGING_KEYS

    def __init__(self, key: str, existing_variant: str, incoming_variant: str) -> None:
        self.key = key
        self.existing_variant = existing_variant
        self.incoming_variant = incoming_variant
        super().__init__(
            f"Cannot merge key {key!r}: existing variant {existing_variant!r}, "
            f"incoming variant {incoming_variant!r}"
        )


class UnexpectedVariantError(HclError):
    """Raised by typed accessors when a value holds a different variant."""

    kind = ErrorKind.UNEXPECTED_VARIANT

    def __init__(self, expected: str, actual: str, enum_type: str = "Value") -> None:
        self.expected = expected
        self.actual = actual
        self.enum_type = enum_type
        super().__init__(
            f"Unexpected {enum_type} variant: expected {expected!r}, got {actual!r}"
        )


class HclIOError(HclError):
    """Raised when reading input or writing output fails."""

    kind = ErrorKind.IO_ERROR


class BugError(HclError):
    """Raised when an internal invariant is violated. Always a defect in hclkit."""

    kind = ErrorKind.BUG


class DeserializeError(HclError):
    """Raised when a parsed body cannot be mapped onto a record type."""

    kind = ErrorKind.DESERIALIZE_ERROR


def render_diagnostic(
    reason: str, source: str, position: int, line: int, column: int
) -> str:
    """Render a multi-line error message pointing at `position` in `source`.

    Args:
        reason: Why the input is invalid.
        source: The complete input text.
        position: 0-based offset of the offending character.
        line: 1-based line number of `position`.
        column: 1-based column number of `position`.

    Returns:
        The reason, a location line, the (possibly truncated) source line and a
        pointer line.
    """
    line_start = source.rfind("\n", 0, position) + 1
    line_end = source.find("\n", position)
    if line_end == -1:
        line_end = len(source)
    text = source[line_start:line_end].rstrip("\r")
    offset = position - line_start

    if MAX_ERROR_CONTEXT_LEN < len(text) - offset:
        text = f"{text[: offset + MAX_ERROR_CONTEXT_LEN]}{ERROR_ELLIPSIS}"
    stripped = len(text) - len(text.lstrip(INLINE_WHITESPACE))
    stripped = min(stripped, offset)
    text = text[stripped:]
    offset -= stripped
    if MAX_ERROR_CONTEXT_LEN < offset:
        cut = offset - MAX_ERROR_CONTEXT_LEN
        text = f"{ERROR_ELLIPSIS}{text[cut:]}"
        offset = MAX_ERROR_CONTEXT_LEN + len(ERROR_ELLIPSIS)

    return (
        f"{reason}\n"
        f"Line {line}, column {column}:\n"
        f"{text}\n"
        f"{' ' * offset}{ERROR_POINTER_CHAR}"
    )
