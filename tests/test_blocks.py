"""
Unit tests for urscenario/blocks.py.
"""
import pytest

from urscenario.blocks import check_blocks, extract_block, scan_blocks
from urscenario.errors import MissingBlockError, UnbalancedBlockError

SOURCE = 'scenario("t") { domain { klass("A") { prop("x", "int") } } steps { then("call values.a.b") } }'


class TestExtractBlock:
    """Tests for extract_block()."""

    def test_nested_body(self):
        body, end = extract_block(SOURCE, "domain")
        assert body.strip() == 'klass("A") { prop("x", "int") }'
        assert SOURCE[end - 1] == "}"

    def test_class_body(self):
        body, _ = extract_block(SOURCE, "klass")
        assert body.strip() == 'prop("x", "int")'

    def test_start_offset(self):
        source = 'a { 1 } a { 2 }'
        body, end = extract_block(source, "a")
        assert body.strip() == "1"
        body, _ = extract_block(source, "a", start=end)
        assert body.strip() == "2"

    def test_missing_block(self):
        with pytest.raises(MissingBlockError, match="checks"):
            extract_block(SOURCE, "checks")

    def test_braces_inside_strings_are_ignored(self):
        source = 'steps { then("call values.a.b with \\"}\\"") }'
        body, _ = extract_block(source, "steps")
        assert body.strip() == 'then("call values.a.b with \\"}\\"")'

    def test_braces_inside_raw_blocks_and_comments_are_ignored(self):
        source = 'steps { // }\n then([[a {\nb]]) /* { */ }'
        body, _ = extract_block(source, "steps")
        assert "then([[a {\nb]])" in body


class TestScanBlocks:
    """Tests for scan_blocks()."""

    def test_depths(self):
        depths = {b.keyword: b.depth for b in scan_blocks(SOURCE)}
        assert depths == {"scenario": 0, "domain": 1, "klass": 2, "steps": 1}

    def test_unclosed_block(self):
        source = 'scenario("t") {\n  domain {\n    klass("A") {\n  }\n  steps { }\n}'
        with pytest.raises(UnbalancedBlockError, match="scenario") as exc:
            scan_blocks(source)
        assert exc.value.line_number == 1

    def test_innermost_unclosed_block_is_reported(self):
        with pytest.raises(UnbalancedBlockError, match="klass"):
            scan_blocks('scenario("t") { domain { klass("A") {')

    def test_stray_closing_brace(self):
        with pytest.raises(UnbalancedBlockError, match="Unexpected"):
            scan_blocks('scenario("t") { } }')


class TestCheckBlocks:
    """Tests for check_blocks()."""

    def test_valid(self):
        assert len(check_blocks(SOURCE)) == 4

    def test_missing_steps(self):
        with pytest.raises(MissingBlockError, match="steps"):
            check_blocks('scenario("t") { domain { } checks { } }')

    def test_missing_domain(self):
        with pytest.raises(MissingBlockError, match="domain"):
            check_blocks('scenario("t") { steps { } }')

    def test_nested_steps_do_not_count(self):
        with pytest.raises(MissingBlockError, match="steps"):
            check_blocks('scenario("t") { domain { steps { } } }')

    def test_missing_scenario(self):
        with pytest.raises(MissingBlockError, match="scenario"):
            check_blocks('domain { } steps { }')
