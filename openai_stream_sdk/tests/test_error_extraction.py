"""Unit tests for error payload extraction helpers.

Covers:
- quote-aware field scanning on truncated and nested (escape-doubled) JSON
- layered ``ErrorPayloadExtractor`` behavior and selector override
- user-facing message cleanup
"""
from __future__ import annotations

import pytest

from openai_stream_sdk.base.extraction import (
    GENERIC_ERROR_MESSAGE,
    ErrorPayloadExtractor,
    clean_error_message,
    extract_error,
    first_message,
    looks_truncated,
    shortest_message,
)
from openai_stream_sdk.base.extraction.quote_scanner import (
    extract_numeric_field,
    extract_quoted_value,
    extract_string_field,
    find_field,
    unescape_json_string,
)


def test_find_field_reports_quoting_level():
    plain = find_field('{"message": "x"}', "message")
    assert plain is not None and plain[2] is False  # nosec B101 - pytest assert in tests
    nested = find_field(r'{"error":"{\"message\":\"x\"}"}', "message")
    assert nested is not None and nested[2] is True  # nosec B101
    assert find_field('{"msg":"x"}', "message") is None  # nosec B101


def test_extract_quoted_value_respects_escaped_quotes():
    text = r'"say \"hi\" now", "next"'
    raw, end, escaped = extract_quoted_value(text, 0)
    assert raw == r"say \"hi\" now"  # nosec B101
    assert escaped is False  # nosec B101
    assert text[end:].startswith(",")  # nosec B101


def test_extract_quoted_value_even_backslash_run_terminates():
    raw, _, _ = extract_quoted_value(r'"ends with backslash \\" trailing', 0)
    assert unescape_json_string(raw) == "ends with backslash \\"  # nosec B101


def test_unterminated_value_is_rejected():
    assert extract_quoted_value('"never closed', 0) is None  # nosec B101
    assert extract_string_field('{"message":"cut off', "message") == []  # nosec B101


def test_nested_escaped_value_is_unescaped_twice():
    text = r'{"error":"{\"message\":\"line one\\nline two\"}"'
    assert extract_string_field(text, "message") == ["line one\nline two"]  # nosec B101


def test_unicode_escape_and_unknown_escape():
    assert unescape_json_string(r"caf\u00e9 \q") == "café \\q"  # nosec B101


def test_numeric_field_skips_string_codes():
    assert extract_numeric_field('{"code":"abc","inner":{"code": 429}}') == "429"  # nosec B101
    assert extract_numeric_field('{"code":"abc"}') is None  # nosec B101


@pytest.mark.parametrize(
    "text,expected",
    [
        ('{"id":1,"te', True),
        ('{"text":"open string', True),
        ("[1, 2", True),
        ('{"id":1}', False),
        ('{"id":1}}', False),
        ('{"id":1]', False),
        ("plain text", False),
        ("", False),
    ],
)
def test_looks_truncated(text, expected):
    assert looks_truncated(text) is expected  # nosec B101


def test_extract_well_formed_envelope_returns_exact_message():
    found = extract_error('{"error":{"message":"X","code":"bad_request"}}')
    assert found is not None  # nosec B101
    assert found.message == "X" and found.code == "bad_request"  # nosec B101


def test_extract_prefers_inner_error_message():
    found = extract_error('{"message":"outer wrapper: inner cause","error":{"message":"inner cause"}}')
    assert found is not None and found.message == "inner cause"  # nosec B101


def test_extract_flat_and_string_error_shapes():
    assert extract_error('{"message":["a","b"],"code":400}').message == "a\nb"  # nosec B101
    assert extract_error('{"message":["a","b"],"code":400}').code == "400"  # nosec B101
    assert extract_error('{"error":"rate limited"}').message == "rate limited"  # nosec B101


def test_extract_truncated_payload_uses_shortest_scanned_message():
    text = '{"message":"Stream failed: upstream said boom","details":{"message":"boom","code":502,"trace":"...'
    found = extract_error(text)
    assert found is not None  # nosec B101
    assert found.message == "boom"  # nosec B101
    assert found.code == "502"  # nosec B101


def test_extract_skips_connection_error_wrappers():
    text = '{"message":"ConnectionError: x","inner":{"message":"socket closed by peer"'
    assert extract_error(text).message == "socket closed by peer"  # nosec B101


def test_extract_code_only_keeps_raw_text():
    text = '{"status":"failed","code":500,"trace":"abc'
    found = extract_error(text)
    assert found is not None  # nosec B101
    assert found.code == "500" and found.message == text  # nosec B101


def test_extract_nothing_message_like():
    assert extract_error("") is None  # nosec B101
    assert extract_error("   ") is None  # nosec B101
    assert extract_error("totally unrelated text") is None  # nosec B101


def test_selector_is_configurable_and_failures_degrade():
    text = '{"message":"outer: cause","x":{"message":"cause"'
    assert ErrorPayloadExtractor(selector=first_message).extract(text).message == "outer: cause"  # nosec B101
    assert ErrorPayloadExtractor(selector=shortest_message).extract(text).message == "cause"  # nosec B101

    def _broken(_candidates):
        raise RuntimeError("selector bug")

    assert ErrorPayloadExtractor(selector=_broken).extract(text) is None  # nosec B101


def test_message_or_raw_falls_back_to_stripped_text():
    ex = ErrorPayloadExtractor()
    assert ex.message_or_raw("  Bad Gateway \n") == "Bad Gateway"  # nosec B101
    assert ex.message_or_raw('{"error":{"message":"nope"}}') == "nope"  # nosec B101


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Error in processing chat stream: ValueError: bad input", "Bad input"),
        ("RuntimeException: crashed", "Crashed"),
        ("Error: lower case start", "Lower case start"),
        ("already clean", "Already clean"),
        ("  ", GENERIC_ERROR_MESSAGE),
        (None, GENERIC_ERROR_MESSAGE),
        ("Error: x", "X"),
    ],
)
def test_clean_error_message(raw, expected):
    assert clean_error_message(raw) == expected  # nosec B101
