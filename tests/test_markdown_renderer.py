"""Tests for front matter parsing and body rendering."""

import pytest
import os

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dealsmith_pkg.exceptions import FormatError
from dealsmith_pkg.markdown_renderer import (
    coerce_value,
    generate_excerpt,
    parse_front_matter,
    render_body,
    render_inline,
)


class TestParseFrontMatter:
    """Test cases for parse_front_matter."""

    def test_scalar_coercion(self):
        """Test booleans and numbers are coerced and everything else stays a string."""
        raw = "---\na: true\nb: false\nc: 42\nd: 42.5\ne: hello world\nf: True\n---\nbody"
        front_matter, body = parse_front_matter(raw)

        assert front_matter['a'] is True
        assert front_matter['b'] is False
        assert front_matter['c'] == 42 and isinstance(front_matter['c'], int)
        assert front_matter['d'] == 42.5
        assert front_matter['e'] == 'hello world'
        assert front_matter['f'] == 'True'
        assert body == 'body'

    def test_value_split_at_first_colon(self):
        """Test URLs keep their own colons."""
        front_matter, _ = parse_front_matter("---\nurl: https://acme.test:8080/x\n---\n")
        assert front_matter['url'] == 'https://acme.test:8080/x'

    def test_last_occurrence_wins(self):
        """Test duplicate keys keep the last value."""
        front_matter, _ = parse_front_matter("---\nslug: one\nslug: two\n---\n")
        assert front_matter == {'slug': 'two'}

    def test_lines_without_colon_ignored(self):
        """Test blank and colon-less lines are skipped."""
        front_matter, _ = parse_front_matter("---\ncompany: Acme\n   \njust text\n---\nBody")
        assert front_matter == {'company': 'Acme'}

    def test_body_is_stripped(self):
        """Test surrounding whitespace is removed from the body."""
        _, body = parse_front_matter("---\na: 1\n---\n\n\nHello\n\n")
        assert body == 'Hello'

    def test_crlf_line_endings(self):
        """Test Windows line endings parse like Unix ones."""
        front_matter, body = parse_front_matter("---\r\ncompany: Acme\r\n---\r\nHello\r\n")
        assert front_matter == {'company': 'Acme'}
        assert body == 'Hello'

    def test_closing_marker_at_end_of_file(self):
        """Test a document with no body after the closing marker."""
        front_matter, body = parse_front_matter("---\ncompany: Acme\n---")
        assert front_matter == {'company': 'Acme'}
        assert body == ''

    @pytest.mark.parametrize('raw', [
        'company: Acme\n',
        'Intro\n---\ncompany: Acme\n---\nBody',
        '---\ncompany: Acme\nBody without closing marker',
        '',
    ])
    def test_missing_delimiters_raise(self, raw):
        """Test documents without a leading front matter block are rejected."""
        with pytest.raises(FormatError, match='missing front matter'):
            parse_front_matter(raw)


class TestCoerceValue:
    """Test cases for coerce_value."""

    def test_numbers(self):
        """Test numeric strings of various shapes."""
        assert coerce_value('0') == 0
        assert coerce_value('-7') == -7
        assert coerce_value('.5') == 0.5
        assert coerce_value('1e3') == 1000.0

    @pytest.mark.parametrize('raw, expected', [('1e3', 1000), ('100.', 100), ('42.0', 42)])
    def test_whole_floats_become_ints(self, raw, expected):
        """Test whole numbers written in float form render without a decimal part."""
        value = coerce_value(raw)
        assert value == expected
        assert isinstance(value, int)
        assert str(value) == str(expected)

    def test_non_numbers(self):
        """Test strings that only look partly numeric."""
        assert coerce_value('$100') == '$100'
        assert coerce_value('100%') == '100%'
        assert coerce_value('') == ''
        assert coerce_value('1_000') == '1_000'


class TestRenderInline:
    """Test cases for render_inline."""

    def test_bold_and_link(self):
        """Test the bold span and hyperlink substitutions."""
        result = render_inline('**Save 20%** at [Acme](https://acme.test)')
        assert result == '<strong>Save 20%</strong> at <a href="https://acme.test">Acme</a>'

    def test_every_occurrence_replaced(self):
        """Test substitutions are global and non-greedy."""
        result = render_inline('**a** and **b**, [x](1) [y](2)')
        assert result == '<strong>a</strong> and <strong>b</strong>, <a href="1">x</a> <a href="2">y</a>'

    def test_unmatched_delimiters_left_alone(self):
        """Test a lone bold marker is not transformed."""
        assert render_inline('**not closed') == '**not closed'


class TestRenderBody:
    """Test cases for render_body."""

    def test_headings(self):
        """Test heading levels and that headings skip inline transforms."""
        result = render_body('# One\n## Two\n### **Three**')
        assert result == '<h1>One</h1>\n<h2>Two</h2>\n<h3>**Three**</h3>'

    def test_list_type_switch(self):
        """Test switching marker type closes the previous list."""
        result = render_body('- a\n- b\n1. c')
        assert result == '<ul>\n<li>a</li>\n<li>b</li>\n</ul>\n<ol>\n<li>c</li>\n</ol>'

    def test_ordered_prefix_stripped(self):
        """Test the numeric prefix is removed from ordered items."""
        result = render_body('10. ten\n2. **two**')
        assert result == '<ol>\n<li>ten</li>\n<li><strong>two</strong></li>\n</ol>'

    def test_paragraph_lines_joined(self):
        """Test consecutive text lines form one paragraph."""
        assert render_body('line one\nline two') == '<p>line one line two</p>'

    def test_blank_line_separates_paragraphs(self):
        """Test a blank line flushes the paragraph."""
        assert render_body('first\n\nsecond') == '<p>first</p>\n<p>second</p>'

    def test_text_after_list_closes_list(self):
        """Test a paragraph line closes an open list."""
        result = render_body('- a\ntext')
        assert result == '<ul>\n<li>a</li>\n</ul>\n<p>text</p>'

    def test_list_after_paragraph_flushes_paragraph(self):
        """Test a list item flushes pending paragraph text first."""
        result = render_body('intro\n- a')
        assert result == '<p>intro</p>\n<ul>\n<li>a</li>\n</ul>'

    def test_heading_flushes_paragraph(self):
        """Test headings are never wrapped in a paragraph."""
        assert render_body('text\n## Title') == '<p>text</p>\n<h2>Title</h2>'

    def test_indented_lines_trimmed(self):
        """Test leading whitespace does not hide list markers."""
        assert render_body('   - item') == '<ul>\n<li>item</li>\n</ul>'

    def test_empty_body(self):
        """Test empty and whitespace-only bodies render nothing."""
        assert render_body('') == ''
        assert render_body('\n   \n') == ''

    @pytest.mark.parametrize('body', [
        '- a',
        '1. a',
        '- a\n1. b\n- c',
        '- a\n\n- b\n# h\n1. c',
        'p\n- a\n2. b\np2',
    ])
    def test_lists_always_closed(self, body):
        """Test every opened list container is closed."""
        result = render_body(body)
        assert result.count('<ul>') == result.count('</ul>')
        assert result.count('<ol>') == result.count('</ol>')
        assert not result.endswith(('<ul>', '<ol>', '</li>'))


class TestGenerateExcerpt:
    """Test cases for generate_excerpt."""

    def test_first_block(self):
        """Test only the first blank-line separated block is returned."""
        assert generate_excerpt('First para\nstill first\n\nSecond') == 'First para\nstill first'
