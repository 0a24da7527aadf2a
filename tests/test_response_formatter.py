"""Tests for tool result envelopes."""
import json

from utils.error_handler import ToolValidationError
from utils.response_formatter import format_error, format_success


def test_format_success_serializes_json():
    result = format_success({"success": True, "count": 2})
    assert result.isError is False
    assert len(result.content) == 1
    text = result.content[0].text
    assert json.loads(text) == {"success": True, "count": 2}
    assert '\n  "count": 2' in text


def test_format_success_passes_strings_through():
    result = format_success("plain text")
    assert result.content[0].text == "plain text"


def test_format_error_single_line():
    error = ToolValidationError("get_record", ["sys_id: too short", "table: required"])
    result = format_error(error)
    assert result.isError is True
    assert result.content[0].text == "Error: Validation error in get_record: sys_id: too short; table: required"


def test_format_error_collapses_newlines():
    result = format_error("first line\nsecond line")
    assert result.content[0].text == "Error: first line second line"
