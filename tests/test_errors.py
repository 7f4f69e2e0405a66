"""Test error messages, position accuracy, and context snippets."""

from pathlib import Path

import pytest

from bithlex.errors import ConfigError, EditError, line_col
from bithlex.incremental import Edit


class TestLineCol:
    def test_first_character(self):
        assert line_col("abc", 0) == (1, 1)

    def test_second_line(self):
        assert line_col("ab\ncd", 4) == (2, 2)

    def test_offset_clamped_to_document(self):
        assert line_col("ab", 99) == (1, 3)
        assert line_col("ab", -5) == (1, 1)


class TestEditErrorPositions:
    def test_start_past_end(self):
        with pytest.raises(EditError) as exc_info:
            Edit(20, 20).apply("line1\nline2")
        err = exc_info.value
        assert err.offset == 20
        assert line_col(err.source, err.offset) == (2, 6)

    def test_reversed_range_reports_start(self):
        with pytest.raises(EditError) as exc_info:
            Edit(3, 1).apply("abcdef")
        assert exc_info.value.offset == 3


class TestEditErrorFormatting:
    def _error(self, source: str, edit: Edit) -> EditError:
        with pytest.raises(EditError) as exc_info:
            edit.apply(source)
        return exc_info.value

    def test_format_contains_line(self):
        err = self._error("older 1000;", Edit(4, 2))
        assert "older 1000;" in err.format()

    def test_format_contains_caret(self):
        err = self._error("older 1000;", Edit(4, 2))
        lines = err.format().splitlines()
        assert lines[-1].endswith("    ^")

    def test_format_contains_error_prefix(self):
        err = self._error("x", Edit(0, 5))
        assert err.format().startswith("error: edit end 5")

    def test_format_contains_position(self):
        err = self._error("a\nb\nc", Edit(4, 3))
        assert "input.bithoven:3:1" in err.format()

    def test_format_with_custom_filename(self):
        err = self._error("x", Edit(0, 5))
        assert "htlc.bithoven:1:2" in err.format("htlc.bithoven")

    def test_str_is_formatted(self):
        err = self._error("x", Edit(0, 5))
        assert str(err) == err.format()


class TestConfigErrorFormatting:
    def test_without_path(self):
        err = ConfigError("bad thing")
        assert err.format() == "error: bad thing"

    def test_with_path(self):
        err = ConfigError("bad thing", Path("bithlex.toml"))
        assert err.format() == "error: bad thing\n  --> bithlex.toml"
        assert str(err) == err.format()


class TestCarriageReturnLines:
    def test_lone_carriage_return_ends_line(self):
        assert line_col("a\rbb\rc", 4) == (2, 3)
        assert line_col("a\r\nb", 3) == (2, 1)

    def test_caret_line_for_cr_only_document(self):
        with pytest.raises(EditError) as exc_info:
            Edit(4, 3).apply("a\rbb\rc")
        formatted = exc_info.value.format()
        assert "input.bithoven:2:3" in formatted
        assert "2 | bb\n" in formatted
        assert formatted.splitlines()[-1].endswith("|   ^")
