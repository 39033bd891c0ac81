"""
HCL Parser

Parses HCL source text into a `Body` document tree.

This module implements the expression grammar and the body/attribute/block
grammar on top of the `Lexer` primitives. The parser works directly on the
character stream: HCL decides between constructs by what follows on the same
line (one-line vs multi-line blocks, element terminators), so no separate
token list is built. Alternatives are tried in a fixed order; an alternative
that does not match leaves the stream untouched, and an alternative that has
committed (consumed its opening delimiter) raises instead of backtracking.

Supported Constructs
--------------------
- Expressions:
    * `null`, `true`, `false`
    * Numbers: `1`, `-12`, `1.5`, `1e3`, `.5` (integer vs float kept distinct)
    * Quoted strings with escapes, heredocs `<<EOF` / `<<-EOF`
    * Tuples `[1, 2, 3,]` and objects `{ a = 1, "b" = 2, (expr) = 3 }`
      spanning lines, with comments between elements

- Body elements:
    * Attributes: `key = expression`, `"quoted/key" = expression`
    * Blocks: `type label* { ... }`, multi-line or one-line `type { a = 1 }`
    * `#`, `//` and `/* */` comments; a line comment ends an element

Parser Behavior
---------------
- Every element of a body ends with one or more newlines, the end of input
  (top level only) or the closing `}` of the enclosing block.
- After a block's `{`, a newline starts a multi-line body. Otherwise the first
  element sits on the `{` line: a `}` right after it makes a one-line block,
  a newline continues a multi-line body, anything else is an error.
- Nesting of tuples, objects and blocks is limited by `max_depth`.
- Input left over after the body is an error.

Entry Points
------------
- `parse()`: Parse a document into an unmerged `Body`.
- `parse_str()`, `parse_bytes()`, `parse_file()`: Parse text, UTF-8 bytes or a
  file, optionally merging the result.
- `Parser.parse_expression()`: Parse a single expression.

Raises
------
HclSyntaxError
    Raised when the input does not match the grammar; the message shows the
    offending line with a pointer.
RecursionLimitError
    Raised when nesting exceeds the configured depth.
InvalidUnicodeCodePointError
    Raised when a string escape names no Unicode scalar value.
"""

from __future__ import annotations

import logging
import os
from typing import IO, Union

from hclkit.hcl_ast import Attribute, Block, BlockLabel, Body, Element, Key, Value
from hclkit.hcl_constants import (
    ASSIGN,
    BLOCK_CLOSE,
    BLOCK_OPEN,
    FALSE_LITERAL,
    LINE_TERMINATORS,
    MAX_NESTING_DEPTH,
    NULL_LITERAL,
    OBJECT_CLOSE,
    OBJECT_OPEN,
    PAREN_CLOSE,
    PAREN_OPEN,
    QUOTE,
    SEPARATOR,
    TRUE_LITERAL,
    TUPLE_CLOSE,
    TUPLE_OPEN,
)
from hclkit.hcl_errors import (
    HclIOError,
    HclSyntaxError,
    InvalidUnicodeError,
    RecursionLimitError,
)
from hclkit.hcl_lexer import CharacterStream, Lexer, Mark
from hclkit.hcl_literals import number_value
from hclkit.hcl_merge import MapValues

logger = logging.getLogger(__name__)

PathOrFile = Union[str, "os.PathLike[str]", IO[str], IO[bytes]]


class Parser:
    """
    HCL Parser Class

    Turns HCL source text into an unmerged `Body`.

    Attributes
    ----------
    stream : CharacterStream
        The source being parsed, with the current position.
    lexer : Lexer
        Lexical primitives over `stream`.
    max_depth : int
        Deepest accepted nesting of tuples, objects and blocks.
    depth : int
        Current nesting depth.

    Methods
    -------
    parse() -> Body
        Parse a complete document.
    parse_body(nested: bool) -> Body
        Parse body elements until EOF, or until `}` when nested.
    parse_element() -> Attribute | Block
        Parse one attribute or block.
    parse_expression() -> Value
        Parse one expression.
    parse_tuple() -> Value
        Parse a `[...]` tuple.
    parse_object() -> Value
        Parse a `{...}` object.

    Raises
    ------
    HclSyntaxError
        When the input does not match the grammar.
    """

    def __init__(self, source: str, max_depth: int = MAX_NESTING_DEPTH) -> None:
        self.stream = CharacterStream(source)
        self.lexer = Lexer(self.stream)
        self.max_depth = max_depth
        self.depth = 0

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def error(self, reason: str, mark: Mark | None = None) -> HclSyntaxError:
        return self.stream.error(reason, mark)

    def match(self, char: str, what: str | None = None) -> None:
        """Consumes `char` or raises a syntax error naming what was expected."""
        if self.peek() != char:
            raise self.error(f"Expected {what or repr(char)}, got {self._describe()}")
        self.stream.next()

    def _describe(self) -> str:
        c = self.peek()
        if c == "":
            return "end of input"
        if c in LINE_TERMINATORS:
            return "end of line"
        return repr(c)

    def enter(self, mark: Mark) -> None:
        """Opens one nesting level; every successful call is paired with `leave`."""
        if self.depth >= self.max_depth:
            position, line, column = mark
            raise RecursionLimitError(
                f"Nesting deeper than {self.max_depth} levels",
                line,
                column,
                self.stream.source,
                position,
            )
        self.depth += 1

    def leave(self) -> None:
        self.depth -= 1

    # Body grammar

    def parse(self) -> Body:
        """Parse the whole source as a body and require all input to be consumed."""
        logger.debug("Parsing %d characters", len(self.stream.source))
        try:
            body = self.parse_body(nested=False)
        except RecursionError as e:
            raise RecursionLimitError(
                "Nesting exceeds the interpreter recursion limit",
                self.stream.line,
                self.stream.column,
                self.stream.source,
                self.stream.position,
            ) from e
        if not self.stream.end_of_file():
            raise self.error("Unexpected input after body")
        logger.debug("Parsed body with %d elements", len(body))
        return body

    def parse_body(self, nested: bool) -> Body:
        elements: list[Element] = []
        self.lexer.skip_whitespace()
        while not self.stream.end_of_file():
            if nested and self.peek() == BLOCK_CLOSE:
                break
            elements.append(self.parse_element())
            self._end_element(nested)
        return Body.new_unmerged(elements)

    def _end_element(self, nested: bool) -> None:
        self.lexer.skip_inline_whitespace()
        if self.lexer.newline():
            self.lexer.skip_whitespace()
            return
        if self.stream.end_of_file():
            return
        if nested and self.peek() == BLOCK_CLOSE:
            return
        raise self.error(f"Expected a newline after body element, got {self._describe()}")

    def parse_key(self) -> Key | None:
        token = self.lexer.identifier()
        if token is not None:
            return Key(token.value, Key.IDENTIFIER)
        token = self.lexer.quoted_string()
        if token is not None:
            return Key(token.value, Key.STRING)
        return None

    def parse_element(self) -> Element:
        mark = self.stream.mark()
        key = self.parse_key()
        if key is None:
            raise self.error(f"Expected an attribute or block, got {self._describe()}")
        self.lexer.skip_inline_whitespace()
        if self.peek() == ASSIGN:
            self.stream.next()
            self.lexer.skip_inline_whitespace()
            return Attribute(key, self.parse_expression())
        if key.kind != Key.IDENTIFIER:
            raise self.error(f"Expected '=' after key {key.text!r}, got {self._describe()}")
        return self.parse_block(key.text, mark)

    def parse_block(self, block_type: str, mark: Mark) -> Block:
        """Parse labels and the braced body of a block whose type was already read."""
        labels: list[BlockLabel] = []
        while True:
            token = self.lexer.quoted_string()
            if token is not None:
                labels.append(BlockLabel(token.value, BlockLabel.STRING))
            else:
                token = self.lexer.identifier()
                if token is None:
                    break
                labels.append(BlockLabel(token.value, BlockLabel.IDENTIFIER))
            self.lexer.skip_inline_whitespace()

        if self.peek() != BLOCK_OPEN:
            expected = "'{'" if labels else "'=' or '{'"
            raise self.error(f"Expected {expected} after {block_type!r}, got {self._describe()}")
        self.enter(mark)
        try:
            self.stream.next()
            body = self._parse_block_body()
        finally:
            self.leave()
        _, line, column = mark
        return Block(block_type, labels, body, line, column)

    def _parse_block_body(self) -> Body:
        self.lexer.skip_inline_whitespace()
        if self.peek() == BLOCK_CLOSE:
            self.stream.next()
            return Body.new_unmerged([])

        if self.lexer.newline():
            body = self.parse_body(nested=True)
            self.match(BLOCK_CLOSE, "'}' to close block")
            return body

        first = self.parse_element()
        self.lexer.skip_inline_whitespace()
        if self.peek() == BLOCK_CLOSE:
            if isinstance(first, Block):
                raise self.error("A one-line block holds at most one attribute, got a nested block")
            self.stream.next()
            return Body.new_unmerged([first])
        if not self.lexer.newline():
            raise self.error(
                f"Expected '}}' or a newline after one-line block element, got {self._describe()}"
            )
        rest = self.parse_body(nested=True)
        self.match(BLOCK_CLOSE, "'}' to close block")
        return Body.new_unmerged([first, *rest.elements])

    # Expression grammar

    def parse_expression(self) -> Value:
        """
        Parse one expression, trying in order: `null`, number, boolean,
        quoted string, heredoc, tuple, object.

        Returns:
            Value: The parsed expression value.

        Raises:
            HclSyntaxError: If no alternative matches.
        """
        if self.lexer.keyword(NULL_LITERAL):
            return Value.null()

        token = self.lexer.number()
        if token is not None:
            number = number_value(token.value)
            return Value.from_int(number) if isinstance(number, int) else Value.from_float(number)

        if self.lexer.keyword(TRUE_LITERAL):
            return Value.from_bool(True)
        if self.lexer.keyword(FALSE_LITERAL):
            return Value.from_bool(False)

        token = self.lexer.quoted_string()
        if token is not None:
            return Value.from_str(token.value)
        heredoc = self.lexer.heredoc()
        if heredoc is not None:
            return Value.from_str(heredoc.content)

        if self.peek() == TUPLE_OPEN:
            return self.parse_tuple()
        if self.peek() == OBJECT_OPEN:
            return self.parse_object()

        raise self.error(f"Expected an expression, got {self._describe()}")

    def parse_tuple(self) -> Value:
        mark = self.stream.mark()
        self.enter(mark)
        try:
            self.stream.next()
            items: list[Value] = []
            self.lexer.skip_whitespace()
            while self.peek() != TUPLE_CLOSE:
                if self.stream.end_of_file():
                    raise self.error("Expected ']' to close tuple, got end of input")
                items.append(self.parse_expression())
                self.lexer.skip_whitespace()
                if self.peek() == SEPARATOR:
                    self.stream.next()
                    self.lexer.skip_whitespace()
                elif self.peek() != TUPLE_CLOSE:
                    raise self.error(f"Expected ',' or ']' in tuple, got {self._describe()}")
            self.stream.next()
        finally:
            self.leave()
        return Value.from_list(items)

    def parse_object(self) -> Value:
        """
        Parse a `{ key = expression ... }` object into a single-stanza value.

        Elements are separated by commas and/or newlines; repeated keys are
        folded with the merge rules.
        """
        mark = self.stream.mark()
        self.enter(mark)
        try:
            self.stream.next()
            pairs: list[tuple[Key, Value]] = []
            self.lexer.skip_whitespace()
            while self.peek() != OBJECT_CLOSE:
                if self.stream.end_of_file():
                    raise self.error("Expected '}' to close object, got end of input")
                key = self.parse_object_key()
                self.lexer.skip_inline_whitespace()
                self.match(ASSIGN, f"'=' after object key {key.text!r}")
                self.lexer.skip_inline_whitespace()
                pairs.append((key, self.parse_expression()))

                self.lexer.skip_inline_whitespace()
                if self.peek() == SEPARATOR:
                    self.stream.next()
                    self.lexer.skip_whitespace()
                elif self.lexer.newline():
                    self.lexer.skip_whitespace()
                elif self.peek() != OBJECT_CLOSE:
                    raise self.error(f"Expected ',', a newline or '}}' in object, got {self._describe()}")
            self.stream.next()
        finally:
            self.leave()
        return Value.from_stanzas([MapValues.new_merged(pairs)])

    def parse_object_key(self) -> Key:
        """Parse an object key: identifier, quoted string or `( ... )` captured verbatim."""
        key = self.parse_key()
        if key is not None:
            return key
        if self.peek() == PAREN_OPEN:
            return Key(self._capture_parenthesised(), Key.EXPRESSION)
        raise self.error(f"Expected an object key, got {self._describe()}")

    def _capture_parenthesised(self) -> str:
        mark = self.stream.mark()
        start = self.stream.position
        depth = 0
        while True:
            c = self.peek()
            if c == "":
                raise self.error("Unterminated parenthesised object key", mark)
            if c == QUOTE:
                self.lexer.quoted_string()
                continue
            self.stream.next()
            if c == PAREN_OPEN:
                depth += 1
            elif c == PAREN_CLOSE:
                depth -= 1
                if depth == 0:
                    return self.stream.source[start : self.stream.position]


def parse(source: str, max_depth: int = MAX_NESTING_DEPTH) -> Body:
    """Parse HCL text into an unmerged body.

    Args:
        source: The complete document.
        max_depth: Deepest accepted nesting of tuples, objects and blocks.

    Returns:
        The unmerged `Body`.
    """
    return Parser(source, max_depth).parse()


def parse_str(source: str, merge: bool = False, max_depth: int = MAX_NESTING_DEPTH) -> Body:
    body = parse(source, max_depth)
    return body.merge() if merge else body


def parse_bytes(data: bytes, merge: bool = False, max_depth: int = MAX_NESTING_DEPTH) -> Body:
    """Decode UTF-8 bytes and parse them.

    Raises:
        InvalidUnicodeError: If `data` is not valid UTF-8; carries the offending bytes.
    """
    try:
        source = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidUnicodeError(data[e.start : e.end]) from e
    return parse_str(source, merge, max_depth)


def parse_file(path_or_file: PathOrFile, merge: bool = False, max_depth: int = MAX_NESTING_DEPTH) -> Body:
    """Parse a file given by path or as an open (text or binary) file object.

    Raises:
        HclIOError: If the file cannot be read.
        InvalidUnicodeError: If the file is not valid UTF-8.
    """
    try:
        if hasattr(path_or_file, "read"):
            data = path_or_file.read()
        else:
            with open(path_or_file, "rb") as f:
                data = f.read()
    except OSError as e:
        raise HclIOError(f"Cannot read {getattr(path_or_file, 'name', path_or_file)}: {e}") from e

    if isinstance(data, bytes):
        return parse_bytes(data, merge, max_depth)
    return parse_str(data, merge, max_depth)
