from __future__ import annotations

import pytest

from pyminini.quoting import (
    decode_value,
    dequote,
    enquote,
    format_key_line,
    format_section_line,
    needs_quoting,
    resolve,
)


def test_comment_after_closing_quote_is_stripped() -> None:
    assert resolve(b'"a;b" ; trailing\n') == (b"a;b", True)


def test_unquoted_trailing_comment() -> None:
    assert resolve(b"plain ; c\n") == (b"plain", False)
    assert resolve(b"plain#c") == (b"plain", False)


def test_empty_quotes() -> None:
    assert resolve(b'""') == (b"", True)


def test_doubled_quotes_collapse() -> None:
    assert decode_value(b'"say ""hi"""\n', 512) == b'say "hi"'


def test_backslash_escaped_quote() -> None:
    assert decode_value(b'"a\\"b"', 512) == b'a"b'


def test_escaped_quote_does_not_end_the_string() -> None:
    assert decode_value(b'"x\\";y" # c\n', 512) == b'x";y'


def test_unquoted_values_keep_inner_quotes() -> None:
    assert decode_value(b'a "b" c\n', 512) == b'a "b" c'


def test_dequote_truncates() -> None:
    assert dequote(b'ab""cd', 4) == b'ab"'


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (b"abc", False),
        (b'a"b', True),
        (b"a;b", True),
        (b"a#b", True),
        (b"ab ", True),
        (b" ab", False),
    ],
)
def test_needs_quoting(value: bytes, expected: bool) -> None:
    assert needs_quoting(value) is expected


def test_enquote_escapes_quotes() -> None:
    assert enquote(b'a"b', 512) == b'"a\\"b"'


def test_enquote_truncates_inside_quotes() -> None:
    assert enquote(b"abcdef", 5) == b'"ab"'


def test_enquote_falls_back_without_room() -> None:
    assert enquote(b"abc", 2) == b"a"


def test_key_line() -> None:
    assert format_key_line(b"host", b"example.com", 512, b"\n") == b"host = example.com\n"
    assert format_key_line(b"k", b"a;b", 512, b"\n") == b'k = "a;b"\n'
    assert format_key_line(b"k", b"v", 512, b"\r\n") == b"k = v\r\n"


def test_key_line_fits_the_buffer() -> None:
    line = format_key_line(b"key", b"0123456789", 16, b"\n")
    assert line == b"key = 01234567\n"
    assert len(line) == 15


def test_section_line() -> None:
    assert format_section_line(b"net", 512, b"\n") == b"[net]\n"


def test_written_fields_stop_at_line_breaks() -> None:
    assert format_key_line(b"k", b"x\n[evil]\ny = z", 512, b"\n") == b"k = x\n"
    assert format_key_line(b"a\r\nb", b"v", 512, b"\n") == b"a = v\n"
    assert format_section_line(b"s]\r\n[t", 512, b"\n") == b"[s]]\n"
