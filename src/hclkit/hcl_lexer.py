"""
Lexical primitives for HCL text.

HCL is newline sensitive and has context dependent tokens (heredocs, one-line
blocks), so the grammar does not run over a pre-built token list. Instead the
parser drives a `Lexer` that recognises one lexical element at a time from a
`CharacterStream`, and rolls the stream back when an alternative fails.

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: A recognised lexical element with type, value and source location.
    Heredoc: The result of scanning a heredoc literal.
    Lexer: Whitespace/comment skipping and literal scanners over a CharacterStream.

Features:
    - Inline whitespace (space, tab, inline comments) vs full whitespace
      (adds CR, LF and line comments)
    - Newline recognition where a line comment counts as a line terminator
    - Identifiers per Unicode XID_Start / XID_Continue plus `-`
    - Number, quoted string (with escapes) and heredoc scanners

Raises:
    HclSyntaxError: On unterminated strings, heredocs or inline comments, and
        on malformed escape sequences.
    InvalidUnicodeCodePointError: If an escape names no Unicode scalar value.

Example:
    >>> lexer = Lexer(CharacterStream("name = 42"))
    >>> lexer.identifier()
    Token(IDENT, name)

Exports:
    - CharacterStream
    - Token
    - Heredoc
    - Lexer
    - is_id_start, is_id_continue, decode_escape
"""

import re
from typing import Any, Callable

from hclkit.hcl_constants import (
    CRLF,
    ESCAPE,
    HASH_COMMENT,
    HEREDOC_INDENT_FLAG,
    HEREDOC_MARK,
    IDENTIFIER_EXTRA_CONTINUE,
    INLINE_COMMENT_CLOSE,
    INLINE_COMMENT_OPEN,
    INLINE_WHITESPACE,
    LF,
    LINE_TERMINATORS,
    NUMERIC_ESCAPES,
    OCTAL_DIGITS,
    OCTAL_ESCAPE,
    QUOTE,
    SIMPLE_ESCAPES,
    SLASH_COMMENT,
    SURROGATE_MAX,
    SURROGATE_MIN,
    UNICODE_MAX,
    WHITESPACE,
)
from hclkit.hcl_errors import (
    BugError,
    HclSyntaxError,
    InvalidUnicodeCodePointError,
)

_NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

Mark = tuple[int, int, int]


def is_id_start(c: str) -> bool:
    """Return True if `c` may start an identifier (XID_Start or `_`)."""
    return c != "" and c.isidentifier()


def is_id_continue(c: str) -> bool:
    """Return True if `c` may continue an identifier (XID_Continue or `-`)."""
    return c != "" and (("_" + c).isidentifier() or c in IDENTIFIER_EXTRA_CONTINUE)


def is_heredoc_identifier_char(c: str) -> bool:
    return c != "" and (c.isalnum() or c == "_")


def decode_escape(text: str, start: int) -> tuple[str, int]:
    """Decode one escape sequence whose body begins at `text[start]`.

    The backslash itself is expected at `text[start - 1]` and is not examined.

    Args:
        text: The text containing the escape.
        start: Index of the first character after the backslash.

    Returns:
        A `(decoded, end)` pair where `end` is the index just past the escape.

    Raises:
        HclSyntaxError: If the escape letter is unknown or digits are missing.
        InvalidUnicodeCodePointError: If the numeric value is not a Unicode
            scalar value.
    """
    if start >= len(text):
        raise HclSyntaxError("Unterminated escape sequence")
    c = text[start]
    if c in SIMPLE_ESCAPES:
        return SIMPLE_ESCAPES[c], start + 1

    if c in OCTAL_DIGITS:
        allowed, max_len, radix = OCTAL_ESCAPE
        digits_start = start
    elif c in NUMERIC_ESCAPES:
        allowed, max_len, radix = NUMERIC_ESCAPES[c]
        digits_start = start + 1
    else:
        raise HclSyntaxError(f"Unknown escape sequence {ESCAPE}{c}")

    end = digits_start
    while end < len(text) and end - digits_start < max_len and text[end] in allowed:
        end += 1
    if end == digits_start:
        raise HclSyntaxError(f"Expected digits after escape {ESCAPE}{c}")

    raw = ESCAPE + text[start:end]
    code_point = int(text[digits_start:end], radix)
    if code_point > UNICODE_MAX or SURROGATE_MIN <= code_point <= SURROGATE_MAX:
        raise InvalidUnicodeCodePointError(raw)
    return chr(code_point), end


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Besides sequential reads, the stream can be marked and reset so that the
    parser can try an alternative and roll back when it does not match.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            BugError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise BugError(
                f"Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def take(self, count: int) -> str:
        """Consumes `count` characters and returns them."""
        return "".join(self.next() for _ in range(count))

    def advance_to(self, position: int) -> None:
        """Consumes characters until the stream stands at `position`."""
        while self.position < position:
            self.next()

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character at the given offset from the current position without advancing.

        Returns:
            str: The character at the offset, or an empty string if out of bounds.
        """
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def startswith(self, text: str) -> bool:
        return self.source.startswith(text, self.position)

    def current(self) -> str | None:
        """Returns the current character, or None if the stream has reached EOF."""
        return self.source[self.position] if self.position < len(self.source) else None

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)

    def mark(self) -> Mark:
        """Returns an opaque snapshot of the stream location for `reset`."""
        return (self.position, self.line, self.column)

    def reset(self, mark: Mark) -> None:
        self.position, self.line, self.column = mark

    def error(self, reason: str, mark: Mark | None = None) -> HclSyntaxError:
        """Builds a syntax error pointing at the current (or marked) location."""
        position, line, column = mark if mark is not None else self.mark()
        return HclSyntaxError(reason, line, column, self.source, position)


class Token:
    """Represents a single lexical element recognised by the Lexer.

    Attributes:
        type (str): The token type (e.g. 'IDENT', 'NUMBER', 'STRING').
        value (str): The decoded value (escape sequences already resolved).
        line (int): The 1-based line number where the token starts.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: str, value: str, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


class Heredoc:
    """A scanned heredoc literal.

    Attributes:
        content (str): Text between the opening line and the terminator line,
            without the final line terminator.
        identifier (str): The terminator identifier.
        indented (bool): True for the `<<-` form.
    """

    def __init__(self, content: str, identifier: str, indented: bool = False):
        self.content = content
        self.identifier = identifier
        self.indented = indented

    def __repr__(self) -> str:
        flag = "-" if self.indented else ""
        return f"Heredoc(<<{flag}{self.identifier}, {self.content!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Heredoc)
            and self.content == other.content
            and self.identifier == other.identifier
            and self.indented == other.indented
        )

    def __hash__(self) -> int:
        return hash((self.content, self.identifier, self.indented))


class Lexer:
    """Lexical primitives for HCL over a CharacterStream.

    Every scanner either recognises its element and advances the stream, or
    returns None (or False) and leaves the stream where it was. Hard failures
    (an opened string that never closes, an invalid escape) raise.

    Attributes:
        stream (CharacterStream): The source stream to scan.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def take_while(self, predicate: Callable[[str], bool], minimum: int = 0) -> str | None:
        """Consumes the maximal run of characters satisfying `predicate`.

        Returns:
            str | None: The run, or None (stream untouched) if it is shorter
            than `minimum`.
        """
        mark = self.stream.mark()
        run = []
        while not self.stream.end_of_file() and predicate(self.peek()):
            run.append(self.advance())
        if len(run) < minimum:
            self.stream.reset(mark)
            return None
        return "".join(run)

    # Whitespace and comments

    def line_end(self) -> bool:
        """Consumes one LF or CRLF line terminator."""
        if self.peek() == LF:
            self.advance()
            return True
        if self.stream.startswith(CRLF):
            self.stream.take(2)
            return True
        return False

    def at_line_end(self) -> bool:
        return self.peek() == LF or self.stream.startswith(CRLF)

    def line_comment(self) -> bool:
        """Consumes a `#` or `//` comment up to, not including, the line terminator."""
        if not (self.peek() == HASH_COMMENT or self.stream.startswith(SLASH_COMMENT)):
            return False
        while not self.stream.end_of_file() and not self.at_line_end():
            self.advance()
        return True

    def inline_comment(self) -> bool:
        """Consumes a non-nesting `/* ... */` comment."""
        if not self.stream.startswith(INLINE_COMMENT_OPEN):
            return False
        mark = self.stream.mark()
        end = self.stream.source.find(INLINE_COMMENT_CLOSE, self.stream.position + 2)
        if end == -1:
            raise self.stream.error("Unterminated inline comment", mark)
        self.stream.advance_to(end + len(INLINE_COMMENT_CLOSE))
        return True

    def skip_inline_whitespace(self) -> None:
        """Skips spaces, tabs and inline comments; never crosses a line terminator
        outside of a comment."""
        while not self.stream.end_of_file():
            if self.peek() in INLINE_WHITESPACE:
                self.advance()
            elif not self.inline_comment():
                break

    def skip_whitespace(self) -> None:
        """Skips all whitespace, line terminators and comments."""
        while not self.stream.end_of_file():
            if self.peek() in WHITESPACE:
                self.advance()
            elif not (self.line_comment() or self.inline_comment()):
                break

    def newline(self) -> bool:
        """Consumes one or more newline sequences.

        A newline sequence is a line terminator, a line comment (with its
        terminator, if any), or an inline comment directly followed by a line
        terminator. Inline whitespace between sequences is skipped.

        Returns:
            bool: True if at least one sequence was consumed.
        """
        matched = False
        while True:
            mark = self.stream.mark()
            if matched:
                self.skip_inline_whitespace_only()
            if self.line_end():
                matched = True
            elif self.line_comment():
                self.line_end()
                matched = True
            elif self.inline_comment():
                self.skip_inline_whitespace_only()
                if self.line_end():
                    matched = True
                else:
                    self.stream.reset(mark)
                    return matched
            else:
                self.stream.reset(mark)
                return matched

    def skip_inline_whitespace_only(self) -> None:
        self.take_while(lambda c: c in INLINE_WHITESPACE)

    # Literal scanners

    def identifier(self) -> Token | None:
        """Scans an identifier: XID_Start or `_`, then XID_Continue or `-`."""
        if not is_id_start(self.peek()):
            return None
        line, col = self.stream.line, self.stream.column
        first = self.advance()
        rest = self.take_while(is_id_continue) or ""
        return Token("IDENT", first + rest, line, col)

    def keyword(self, word: str) -> Token | None:
        """Scans `word` when it is not immediately followed by an identifier character."""
        if not self.stream.startswith(word) or is_id_continue(self.peek(len(word))):
            return None
        line, col = self.stream.line, self.stream.column
        self.stream.take(len(word))
        return Token("KEYWORD", word, line, col)

    def number(self) -> Token | None:
        """Scans the lexical form of a decimal number (sign, digits, fraction, exponent)."""
        match = _NUMBER_RE.match(self.stream.source, self.stream.position)
        if match is None:
            return None
        line, col = self.stream.line, self.stream.column
        self.stream.take(len(match.group(0)))
        return Token("NUMBER", match.group(0), line, col)

    def quoted_string(self) -> Token | None:
        """Scans a single-line quoted string and resolves its escape sequences.

        Raises:
            HclSyntaxError: If the string is not closed on the same line or
                contains an unknown escape.
            InvalidUnicodeCodePointError: If an escape names no scalar value.
        """
        if self.peek() != QUOTE:
            return None
        mark = self.stream.mark()
        line, col = self.stream.line, self.stream.column
        self.advance()
        parts: list[str] = []
        while True:
            c = self.peek()
            if c == "" or c in LINE_TERMINATORS:
                raise self.stream.error("Unterminated string literal", mark)
            if c == QUOTE:
                self.advance()
                return Token("STRING", "".join(parts), line, col)
            if c == ESCAPE:
                escape_mark = self.stream.mark()
                source = self.stream.source
                try:
                    decoded, end = decode_escape(source, self.stream.position + 1)
                except HclSyntaxError as e:
                    raise self.stream.error(e.reason, escape_mark) from e
                self.stream.advance_to(end)
                parts.append(decoded)
            else:
                parts.append(self.advance())

    def heredoc(self) -> Heredoc | None:
        """Scans a heredoc: `<<` or `<<-`, identifier, line end, content, terminator line.

        The terminator line may be indented and carry trailing whitespace. The
        stream is left at that line's terminator (not consumed).

        Raises:
            HclSyntaxError: If no terminator line follows.
        """
        if not self.stream.startswith(HEREDOC_MARK):
            return None
        mark = self.stream.mark()
        self.stream.take(len(HEREDOC_MARK))
        indented = False
        if self.peek() == HEREDOC_INDENT_FLAG:
            self.advance()
            indented = True
        identifier = self.take_while(is_heredoc_identifier_char, minimum=1)
        if identifier is None or not self.at_line_end():
            self.stream.reset(mark)
            return None
        self.line_end()

        source = self.stream.source
        content_start = self.stream.position
        line_start = content_start
        while line_start <= len(source):
            line_end = source.find(LF, line_start)
            if line_end == -1:
                line_end = len(source)
            text_end = line_end
            if text_end > line_start and source[text_end - 1] == "\r":
                text_end -= 1
            if source[line_start:text_end].strip(INLINE_WHITESPACE) == identifier:
                content_end = line_start
                if content_end > content_start:
                    content_end -= 1
                    if content_end > content_start and source[content_end - 1] == "\r":
                        content_end -= 1
                self.stream.advance_to(text_end)
                return Heredoc(source[content_start:content_end], identifier, indented)
            if line_end == len(source):
                break
            line_start = line_end + 1

        raise self.stream.error(f"Unterminated heredoc, expected {identifier!r}", mark)


__all__ = [
    "CharacterStream",
    "Heredoc",
    "Lexer",
    "Token",
    "decode_escape",
    "is_id_continue",
    "is_id_start",
]
