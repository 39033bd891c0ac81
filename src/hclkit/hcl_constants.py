"""
Shared lexical tables and tunables for the hclkit parser.

Groups every character set, marker and limit that the lexer, literal parsers
and the body grammar agree on, so that the grammar modules never hard-code
punctuation.

Exports:
    - Whitespace and line terminator sets
    - Comment markers
    - Delimiters for tuples, objects, blocks and strings
    - SIMPLE_ESCAPES / NUMERIC_ESCAPES: the quoted-string escape table
    - Keyword literals: `null`, `true`, `false`
    - MAX_NESTING_DEPTH, MAX_ERROR_CONTEXT_LEN, INT64_MIN, INT64_MAX
"""

INLINE_WHITESPACE = " \t"
LINE_TERMINATORS = "\r\n"
WHITESPACE = INLINE_WHITESPACE + LINE_TERMINATORS

LF = "\n"
CRLF = "\r\n"

HASH_COMMENT = "#"
SLASH_COMMENT = "//"
INLINE_COMMENT_OPEN = "/*"
INLINE_COMMENT_CLOSE = "*/"

ASSIGN = "="
SEPARATOR = ","
TUPLE_OPEN = "["
TUPLE_CLOSE = "]"
OBJECT_OPEN = "{"
OBJECT_CLOSE = "}"
BLOCK_OPEN = OBJECT_OPEN
BLOCK_CLOSE = OBJECT_CLOSE
PAREN_OPEN = "("
PAREN_CLOSE = ")"

QUOTE = '"'
ESCAPE = "\\"
HEREDOC_MARK = "<<"
HEREDOC_INDENT_FLAG = "-"

IDENTIFIER_EXTRA_CONTINUE = "-"

DECIMAL_MARK = "."
EXPONENT_SET = "eE"
OCTAL_DIGITS = "01234567"
HEX_DIGITS = "0123456789abcdefABCDEF"

# Single-character escapes after a backslash.
SIMPLE_ESCAPES: dict[str, str] = {
    "a": "\x07",
    "b": "\x08",
    "f": "\x0c",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\x0b",
    "\\": "\\",
    '"': '"',
    "?": "?",
}

# Prefix letter -> (allowed digits, max digit count, radix)
NUMERIC_ESCAPES: dict[str, tuple[str, int, int]] = {
    "x": (HEX_DIGITS, 2, 16),
    "u": (HEX_DIGITS, 4, 16),
    "U": (HEX_DIGITS, 8, 16),
}
OCTAL_ESCAPE = (OCTAL_DIGITS, 3, 8)

NULL_LITERAL = "null"
TRUE_LITERAL = "true"
FALSE_LITERAL = "false"

NULL_KIND = "null"
INTEGER_KIND = "integer"
FLOAT_KIND = "float"
BOOLEAN_KIND = "boolean"
STRING_KIND = "string"
TUPLE_KIND = "tuple"
OBJECT_KIND = "object"
BLOCK_KIND = "block"
SCALAR_KINDS = (NULL_KIND, INTEGER_KIND, FLOAT_KIND, BOOLEAN_KIND, STRING_KIND)
VALUE_KINDS = (*SCALAR_KINDS, TUPLE_KIND, OBJECT_KIND, BLOCK_KIND)
# Kinds whose repeated keys are folded together instead of rejected.
MERGEABLE_KINDS = (OBJECT_KIND, BLOCK_KIND)

UNICODE_MAX = 0x10FFFF
SURROGATE_MIN = 0xD800
SURROGATE_MAX = 0xDFFF

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

MAX_NESTING_DEPTH = 128
"""Deepest tuple/object/block nesting accepted before RecursionLimitError."""

MAX_ERROR_CONTEXT_LEN = 60
"""Characters of source shown on each side of an error position."""
