"""
Tests for the line rewriter component.
"""

import pytest

from formula_updater.components.errors import FormulaFileError
from formula_updater.components.line_rewriter import (
    find_hash,
    rewrite_line,
    rewrite_lines,
    rewrite_text,
    rewrite_file,
    check_formula,
)

SHA = {"sha256": "cafef00d"}


def test_version_line_is_rewritten():
    assert rewrite_line("  version 1.2.2", "1.3.0", {}) == "  version 1.3.0"


def test_every_numeric_token_on_a_version_line_is_replaced():
    assert rewrite_line("version 1.2 (was 1.1)", "2.0", {}) == "version 2.0 (was 2.0)"


def test_quoted_version_keeps_quotes():
    assert rewrite_line('  version "1.2.2"', "1.3.0", {}) == '  version "1.3.0"'


def test_numbers_without_version_marker_are_untouched():
    line = '  url "https://example.com/pkg-1.2.2.tar.gz"'
    assert rewrite_line(line, "1.3.0", {}) == line


def test_hash_line_is_rewritten():
    assert rewrite_line('  sha256 "deadbeef"', "1.3.0", SHA) == '  sha256 "cafef00d"'


def test_every_quoted_token_on_a_hash_line_is_replaced():
    line = 'sha256 "aaa" => "bbb"'
    assert rewrite_line(line, "1.0", SHA) == 'sha256 "cafef00d" => "cafef00d"'


def test_quoted_token_with_punctuation_is_not_replaced():
    line = 'sha256 "dead-beef"'
    assert rewrite_line(line, "1.0", SHA) == line


def test_non_matching_line_is_unchanged():
    line = '  url "https://example.com/pkg.tar.gz"'
    assert rewrite_line(line, "1.3.0", SHA) == line


def test_both_rules_apply_to_the_same_line():
    line = 'checksum "old" # version 1.0'
    fields = {"checksum": "cafef00d"}
    assert rewrite_line(line, "2.0", fields) == 'checksum "cafef00d" # version 2.0'


def test_digits_anywhere_on_a_version_line_are_replaced():
    # Textual substitution only: a hash label with digits is not protected
    assert rewrite_line('sha256 "old" # version 1.0', "2.0", {}) == 'sha2.0 "old" # version 2.0'


def test_replacements_are_literal():
    assert rewrite_line("version 1.0", r"\1.0", {}) == r"version \1.0"
    assert rewrite_line('sha256 "x"', "1.0", {"sha256": r"a\g<0>"}) == r'sha256 "a\g<0>"'


def test_first_key_in_mapping_order_wins():
    fields = {"arm64": "first", "darwin": "second"}
    assert find_hash('sha256 "x" # darwin-arm64', fields) == "first"
    fields = {"darwin": "second", "arm64": "first"}
    assert find_hash('sha256 "x" # darwin-arm64', fields) == "second"


def test_key_match_uses_the_original_line():
    # "10" would disappear from the line after the version substitution
    fields = {"10": "tenhash"}
    assert rewrite_line('version 10 "old"', "2", fields) == 'version 2 "tenhash"'


def test_line_count_is_preserved(sample_formula):
    lines = sample_formula.split("\n")
    assert len(rewrite_lines(lines, "9.9.9", SHA)) == len(lines)


def test_multi_field_rewrite(sample_formula):
    fields = {"arm64": "aaaa1111", "x64": "bbbb2222"}
    updated = rewrite_text(sample_formula, "2.5.0", fields)

    assert "  version 2.5.0" in updated
    assert 'sha256 "aaaa1111" # darwin-arm64' in updated
    assert 'sha256 "bbbb2222" # darwin-x64' in updated
    # url lines contain no "version" marker, so they keep the old release
    assert "releases/download/2.4.0/slidesk.tar.gz" in updated
    assert 'bin.install "slidesk"' in updated


def test_rewrite_is_stable(sample_formula):
    once = rewrite_text(sample_formula, "2.5.0", SHA)
    assert rewrite_text(once, "2.5.0", SHA) == once


def test_crlf_line_endings_survive():
    text = 'version 1.0\r\nsha256 "old"\r\n'
    assert rewrite_text(text, "2.0", SHA) == 'version 2.0\r\nsha256 "cafef00d"\r\n'


def test_rewrite_file_overwrites_in_place(tmp_path):
    formula = tmp_path / "tool.rb"
    formula.write_bytes(b'  version 1.2.2\r\n  sha256 "deadbeef"\r\n  url "https://example.com/pkg.tar.gz"')

    result = rewrite_file(formula, "1.3.0", SHA, display_path="tool.rb")

    assert formula.read_bytes() == b'  version 1.3.0\r\n  sha256 "cafef00d"\r\n  url "https://example.com/pkg.tar.gz"'
    assert result.changed_lines == 2
    diff = result.diff()
    assert diff[0] == "--- a/tool.rb"
    assert "+  version 1.3.0\r" in diff


def test_rewrite_file_keeps_undecodable_bytes(tmp_path):
    formula = tmp_path / "tool.rb"
    formula.write_bytes(b'desc "caf\xe9"\nversion 1.0\n')
    rewrite_file(formula, "2.0", {})
    assert formula.read_bytes() == b'desc "caf\xe9"\nversion 2.0\n'


def test_rewrite_file_reports_no_change(tmp_path):
    formula = tmp_path / "tool.rb"
    formula.write_text("nothing to see\n")
    assert rewrite_file(formula, "2.0", SHA).changed is False


def test_missing_file_is_fatal(tmp_path):
    with pytest.raises(FormulaFileError) as excinfo:
        check_formula(tmp_path / "missing.rb")
    assert excinfo.value.step == "open"

    with pytest.raises(FormulaFileError) as excinfo:
        rewrite_file(tmp_path / "missing.rb", "1.0", SHA)
    assert excinfo.value.step == "rewrite"
