import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from hclkit.hcl_ast import Key
from hclkit.hcl_errors import (
    HclSyntaxError,
    InvalidNumberError,
    InvalidUnicodeCodePointError,
)
from hclkit.hcl_literals import (
    Heredoc,
    escape_text,
    number_value,
    parse_boolean,
    parse_heredoc,
    parse_identifier,
    parse_key,
    parse_number,
    parse_string,
    unescape,
)


@given(st.integers(min_value=-(2**63), max_value=2**63 - 1))  # type: ignore[misc]
def test_integers_parse_as_int(value: int) -> None:
    result = parse_number(str(value))
    assert isinstance(result, int)
    assert result == value


@given(st.from_regex(r"[+-]?[0-9]{1,6}\.[0-9]{1,6}([eE][+-]?[0-9]{1,2})?", fullmatch=True))  # type: ignore[misc]
def test_decimals_parse_as_float(text: str) -> None:
    result = parse_number(text)
    assert isinstance(result, float)
    assert result == float(text)


def test_number_value_overflow_falls_back_to_float() -> None:
    assert number_value("9223372036854775807") == 2**63 - 1
    result = number_value("9223372036854775808")
    assert isinstance(result, float)
    assert number_value("1e3") == 1000.0
    assert isinstance(number_value("1e3"), float)


def test_number_value_rejects_garbage() -> None:
    with pytest.raises(InvalidNumberError):
        number_value("1.2.3")


def test_huge_exponent_is_infinite() -> None:
    assert math.isinf(parse_number("1e999"))


@pytest.mark.parametrize("text", ["", "abc", "1 2", "--1"])  # type: ignore[misc]
def test_parse_number_requires_whole_input(text: str) -> None:
    with pytest.raises(HclSyntaxError):
        parse_number(text)


def test_parse_boolean() -> None:
    assert parse_boolean("true") is True
    assert parse_boolean("false") is False
    with pytest.raises(HclSyntaxError):
        parse_boolean("True")


@pytest.mark.parametrize(
    "escape,expected",
    [
        ("\\n", "\n"),
        ("\\t", "\t"),
        ("\\\\", "\\"),
        ('\\"', '"'),
        ("\\a", "\x07"),
        ("\\?", "?"),
        ("\\xFF", "ÿ"),
        ("\\251", "©"),
        ("\\uD000", "\ud000"),
        ("\\U29000", "\U00029000"),
    ],
)  # type: ignore[misc]
def test_unescape(escape: str, expected: str) -> None:
    assert unescape(escape) == expected


def test_unescape_requires_one_whole_escape() -> None:
    for escape in ("\\xFFF", "n", "251", "\\", ""):
        with pytest.raises(HclSyntaxError):
            unescape(escape)


@pytest.mark.parametrize("escape", ["\\UD800", "\\uDFFF", "\\U110000"])  # type: ignore[misc]
def test_unescape_invalid_code_points(escape: str) -> None:
    with pytest.raises(InvalidUnicodeCodePointError) as exc:
        unescape(escape)
    assert str(exc.value) == f"Invalid Unicode Code Points {escape}"


def test_parse_string() -> None:
    assert parse_string('"foo bar"') == "foo bar"
    assert parse_string('""') == ""
    assert parse_string('"\\251 2019"') == "© 2019"
    with pytest.raises(HclSyntaxError):
        parse_string('"a" extra')
    with pytest.raises(HclSyntaxError):
        parse_string("no quotes")


@given(st.text())  # type: ignore[misc]
def test_escape_text_parses_back(text: str) -> None:
    assert parse_string(f'"{escape_text(text)}"') == text


def test_escape_text_control_characters() -> None:
    assert escape_text('a"b\\c') == 'a\\"b\\\\c'
    assert escape_text("\n\r\t") == "\\n\\r\\t"
    assert escape_text("\x00\x7f") == "\\u0000\\u007f"
    assert escape_text("藏") == "藏"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("<<EOF\nsomething\nEOF\n", Heredoc("something", "EOF")),
        ("<<EOF\nsomething\nEOF", Heredoc("something", "EOF")),
        ("<<EOH\nsomething\nwith\nnew lines\nand quotes \"\"\"\nEOH", Heredoc('something\nwith\nnew lines\nand quotes """', "EOH")),
        ("<<EOF\nEOF\n", Heredoc("", "EOF")),
        ("<<-EOF\n    indented\n    EOF\n", Heredoc("    indented", "EOF", indented=True)),
    ],
)  # type: ignore[misc]
def test_parse_heredoc(text: str, expected: Heredoc) -> None:
    assert parse_heredoc(text) == expected


@pytest.mark.parametrize("text", ["<<EOF something\nEOF\n", "<<EOF\nsomething\n", "<<\nEOF\n"])  # type: ignore[misc]
def test_parse_heredoc_rejects_malformed(text: str) -> None:
    with pytest.raises(HclSyntaxError):
        parse_heredoc(text)


@pytest.mark.parametrize("text", ["abcd123", "_abc", "abcd-123", "藏_a"])  # type: ignore[misc]
def test_parse_identifier_accepts(text: str) -> None:
    assert parse_identifier(text) == text


@pytest.mark.parametrize("text", ["1abc", "①_is_some_number", "a b", ""])  # type: ignore[misc]
def test_parse_identifier_rejects(text: str) -> None:
    with pytest.raises(HclSyntaxError):
        parse_identifier(text)


def test_parse_key() -> None:
    key = parse_key("name")
    assert key == Key("name")
    assert key.kind == Key.IDENTIFIER

    key = parse_key('"security/group"')
    assert key == "security/group"
    assert key.kind == Key.STRING

    with pytest.raises(HclSyntaxError):
        parse_key("(expr)")
