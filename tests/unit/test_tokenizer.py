"""
Unit tests for the line tokenizer (ascii_points.tokenizer).
"""

from __future__ import annotations

import pytest

from ascii_points.tokenizer import DEFAULT_SEPARATORS, count_tokens, is_blank, tokenize


class TestTokenize:
    """Tests for tokenize()."""

    def test_default_separators(self):
        assert DEFAULT_SEPARATORS == " \t\n,"
        assert list(tokenize("1 2\t3,4\n")) == ["1", "2", "3", "4"]

    def test_runs_of_separators_are_one_boundary(self):
        assert list(tokenize("1,,,2  ,\t3", DEFAULT_SEPARATORS)) == ["1", "2", "3"]

    def test_leading_and_trailing_separators(self):
        assert list(tokenize(",,1,2,,", ",")) == ["1", "2"]

    @pytest.mark.parametrize("line", [",, ,", "", "   ", "\t\n", "\r\n", ",\n"])
    def test_only_separators_is_blank(self, line):
        assert list(tokenize(line, ",")) == []
        assert is_blank(line, ",")

    def test_line_terminator_trimmed_without_newline_separator(self):
        assert list(tokenize("1,2,3\n", ",")) == ["1", "2", "3"]
        assert list(tokenize("1,2,3\r\n", ",")) == ["1", "2", "3"]

    def test_tokens_are_stripped(self):
        assert list(tokenize("1, 2 ,3", ",")) == ["1", "2", "3"]

    def test_separator_set_limits_splitting(self):
        """Characters outside the separator set stay inside tokens."""
        assert list(tokenize("1;2 3", ";")) == ["1", "2 3"]

    def test_regex_metacharacters_as_separators(self):
        assert list(tokenize("1|2^3]4-5\\6", "|^]-\\")) == ["1", "2", "3", "4", "5", "6"]

    def test_is_lazy_and_restartable(self):
        tokens = tokenize("a b c")
        assert next(tokens) == "a"
        assert list(tokens) == ["b", "c"]
        assert list(tokenize("a b c")) == ["a", "b", "c"]

    def test_empty_separator_set_rejected(self):
        with pytest.raises(ValueError):
            list(tokenize("1 2", ""))


class TestHelpers:
    """Tests for count_tokens() and is_blank()."""

    def test_count_tokens(self):
        assert count_tokens("1 2 3") == 3
        assert count_tokens("  ") == 0

    def test_is_blank_false_for_data(self):
        assert not is_blank("0")
