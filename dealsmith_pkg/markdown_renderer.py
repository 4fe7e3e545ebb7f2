#!/usr/bin/env python3
"""
Front matter parsing and a small markdown-to-HTML renderer for deal documents.

The renderer understands only what deal write-ups use: ``#``/``##``/``###``
headings, ``-`` and ``1.`` lists, paragraphs, ``**bold**`` and
``[label](url)`` links. Inline transforms are plain non-greedy regular
expression substitutions, so nested or escaped delimiters (``**a **b** c**``,
``\\*\\*``, brackets inside link labels) are not supported. Text is passed
through unescaped, which lets authors drop in inline HTML.
"""

import re
from typing import Dict, List, Optional, Tuple, Union

from .exceptions import FormatError

FrontMatterValue = Union[str, bool, int, float]

FRONT_MATTER_PATTERN = re.compile(r'\A---\n(.*?)\n---(?:\n(.*))?\Z', re.DOTALL)
NUMBER_PATTERN = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')
ORDERED_ITEM_PATTERN = re.compile(r'^\d+\.\s')
BOLD_PATTERN = re.compile(r'\*\*(.*?)\*\*')
LINK_PATTERN = re.compile(r'\[(.*?)\]\((.*?)\)')

HEADING_PREFIXES = (('### ', 'h3'), ('## ', 'h2'), ('# ', 'h1'))


def coerce_value(value: str) -> FrontMatterValue:
    """Turn a raw front matter value into a bool, int, float or str."""
    if value == 'true':
        return True
    if value == 'false':
        return False
    if NUMBER_PATTERN.match(value):
        if re.fullmatch(r'[+-]?\d+', value):
            return int(value)
        number = float(value)
        # "1e3" and "100." are whole numbers
        return int(number) if number.is_integer() else number
    return value


def parse_front_matter(raw: str) -> Tuple[Dict[str, FrontMatterValue], str]:
    """
    Split a document into its front matter record and body text.

    Args:
        raw: Full document text, starting with a ``---`` line

    Returns:
        Tuple of (front matter dict, stripped body)

    Raises:
        FormatError: If the document lacks the opening or closing marker
    """
    text = raw.replace('\r\n', '\n')
    match = FRONT_MATTER_PATTERN.match(text)
    if not match:
        raise FormatError('Invalid markdown format - missing front matter')

    front_matter = {}
    for line in match.group(1).split('\n'):
        key, sep, value = line.partition(':')
        key = key.strip()
        if not sep or not key:
            continue
        front_matter[key] = coerce_value(value.strip())

    body = (match.group(2) or '').strip()
    return front_matter, body


def render_inline(text: str) -> str:
    """Apply bold and link substitutions to a single line."""
    text = BOLD_PATTERN.sub(r'<strong>\1</strong>', text)
    return LINK_PATTERN.sub(r'<a href="\2">\1</a>', text)


class _BlockWriter:
    """Accumulates block elements while tracking the open list and paragraph."""

    def __init__(self):
        self.blocks: List[str] = []
        self.list_type: Optional[str] = None
        self.paragraph: List[str] = []

    def flush_paragraph(self):
        if self.paragraph:
            text = ' '.join(self.paragraph).strip()
            if text:
                self.blocks.append(f'<p>{text}</p>')
            self.paragraph = []

    def close_list(self):
        if self.list_type:
            self.blocks.append(f'</{self.list_type}>')
            self.list_type = None

    def list_item(self, list_type, text):
        self.flush_paragraph()
        if self.list_type != list_type:
            self.close_list()
            self.blocks.append(f'<{list_type}>')
            self.list_type = list_type
        self.blocks.append(f'<li>{render_inline(text)}</li>')

    def finish(self):
        self.flush_paragraph()
        self.close_list()
        return '\n'.join(self.blocks)


def render_body(body: str) -> str:
    """
    Render a deal body to newline-joined block-level HTML.

    Every list opened is closed before the function returns, headings are
    never wrapped in paragraphs, and consecutive text lines are joined into
    one paragraph.
    """
    writer = _BlockWriter()

    for raw_line in body.replace('\r\n', '\n').split('\n'):
        line = raw_line.strip()

        if not line:
            writer.flush_paragraph()
            writer.close_list()
            continue

        heading = next(((tag, line[len(prefix):]) for prefix, tag in HEADING_PREFIXES
                        if line.startswith(prefix)), None)
        if heading:
            tag, text = heading
            writer.flush_paragraph()
            writer.close_list()
            writer.blocks.append(f'<{tag}>{text}</{tag}>')
        elif line.startswith('- '):
            writer.list_item('ul', line[2:])
        elif ORDERED_ITEM_PATTERN.match(line):
            writer.list_item('ol', ORDERED_ITEM_PATTERN.sub('', line, count=1))
        else:
            writer.close_list()
            writer.paragraph.append(render_inline(line))

    return writer.finish()


def generate_excerpt(body: str) -> str:
    """Return the first blank-line separated block of a raw body."""
    return body.replace('\r\n', '\n').split('\n\n')[0]
