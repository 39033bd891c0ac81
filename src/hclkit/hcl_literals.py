"""
Literal parsers for complete HCL literal texts.

Each helper scans exactly one literal from `text` with the `Lexer` primitives
and requires the whole input to be consumed. The expression and body grammar
in `hcl_parser` drive the same primitives directly over a shared stream; these
wrappers exist for callers that hold a single literal.

Functions:
    number_value: Convert a lexically valid number to int or float.
    parse_number, parse_boolean, parse_string, parse_heredoc,
    parse_identifier, parse_key: Whole-text literal parsers.
    unescape: Decode one escape sequence body.
    escape_text: Produce quoted-string content that parses back to the input.
"""

from typing import Any, Callable

from hclkit.hcl_ast import Key
from hclkit.hcl_constants import (
    DECIMAL_MARK,
    ESCAPE,
    EXPONENT_SET,
    FALSE_LITERAL,
    INT64_MAX,
    INT64_MIN,
    TRUE_LITERAL,
)
from hclkit.hcl_errors import HclSyntaxError, InvalidNumberError
from hclkit.hcl_lexer import CharacterStream, Heredoc, Lexer, decode_escape

# Characters that must be escaped to survive a quoted-string round trip.
_ESCAPE_OUT = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def number_value(text: str) -> int | float:
    """Converts the lexical form of a number to its value.

    An integer is produced when the text has neither a decimal mark nor an
    exponent and fits in a signed 64-bit integer; otherwise a float.

    Raises:
        InvalidNumberError: If the text is neither an integer nor a float.
    """
    if not any(c in text for c in DECIMAL_MARK + EXPONENT_SET):
        try:
            value = int(text)
        except ValueError:
            value = None
        if value is not None and INT64_MIN <= value <= INT64_MAX:
            return value
    try:
        return float(text)
    except ValueError as e:
        raise InvalidNumberError(text) from e


def _whole(text: str, scan: Callable[[Lexer], Any], what: str) -> Any:
    lexer = Lexer(CharacterStream(text))
    result = scan(lexer)
    if result is None:
        raise lexer.stream.error(f"Expected {what}")
    if not lexer.stream.end_of_file():
        raise lexer.stream.error(f"Unexpected input after {what}")
    return result


def parse_number(text: str) -> int | float:
    token = _whole(text, Lexer.number, "a number")
    return number_value(token.value)


def parse_boolean(text: str) -> bool:
    if text == TRUE_LITERAL:
        return True
    if text == FALSE_LITERAL:
        return False
    raise HclSyntaxError(f"Expected a boolean, got {text!r}")


def parse_string(text: str) -> str:
    """Parses a complete quoted string literal, including its quotes."""
    return _whole(text, Lexer.quoted_string, "a quoted string").value


def parse_heredoc(text: str) -> Heredoc:
    """Parses a complete heredoc literal.

    A single line terminator after the terminator line is accepted.
    """

    def scan(lexer: Lexer) -> Heredoc | None:
        heredoc = lexer.heredoc()
        if heredoc is not None:
            lexer.line_end()
        return heredoc

    return _whole(text, scan, "a heredoc")


def parse_identifier(text: str) -> str:
    return _whole(text, Lexer.identifier, "an identifier").value


def parse_key(text: str) -> Key:
    """Parses a key: an identifier, or failing that a quoted string."""

    def scan(lexer: Lexer) -> Key | None:
        token = lexer.identifier()
        if token is not None:
            return Key(token.value)
        token = lexer.quoted_string()
        if token is not None:
            return Key(token.value, Key.STRING)
        return None

    return _whole(text, scan, "a key")


def unescape(escape: str) -> str:
    """Decodes one escape sequence, backslash included.

    Args:
        escape: The full escape as written in a quoted string, e.g. ``"\\n"``,
            ``"\\\\"``, ``"\\xFF"`` or ``"\\251"``.

    Returns:
        The single decoded character.

    Raises:
        HclSyntaxError: If `escape` does not start with a backslash, the escape
            is unknown or incomplete, or input follows it.
    """
    if not escape.startswith(ESCAPE):
        raise HclSyntaxError(f"Escape sequence {escape!r} must start with a backslash")
    body = escape[1:]
    decoded, end = decode_escape(body, 0)
    if end != len(body):
        raise HclSyntaxError(f"Unexpected input after escape sequence \\{body[:end]}")
    return decoded


def escape_text(text: str) -> str:
    """Escapes `text` so that it can be placed between double quotes."""
    out = []
    for c in text:
        if c in _ESCAPE_OUT:
            out.append(_ESCAPE_OUT[c])
        elif ord(c) < 0x20 or ord(c) == 0x7F:
            out.append(f"\\u{ord(c):04x}")
        else:
            out.append(c)
    return "".join(out)


__all__ = [
    "Heredoc",
    "escape_text",
    "number_value",
    "parse_boolean",
    "parse_heredoc",
    "parse_identifier",
    "parse_key",
    "parse_number",
    "parse_string",
    "unescape",
]
