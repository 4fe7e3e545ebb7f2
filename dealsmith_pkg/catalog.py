#!/usr/bin/env python3
"""
Deal catalog loading for Dealsmith.

Reads deal documents from ``<content>/deals``, derives the fields the page
templates rely on, validates them and groups the result into categories.
"""

import os
import re
import json
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from .exceptions import (
    CatalogValidationError,
    ContentError,
    FormatError,
    MissingFieldError,
)
from .markdown_renderer import generate_excerpt, parse_front_matter, render_body

REQUIRED_FIELDS = (
    'company', 'category', 'benefit', 'benefitAmount', 'codeType',
    'url', 'slug', 'metaTitle', 'metaDescription',
)
CODE_TYPES = ('code', 'link')
DEFAULT_PRIORITY = 999
DEFAULT_SUCCESS_RATE = 100

# Top-level output names a category slug must not take over
RESERVED_SLUGS = {'deal', 'assets', 'index.html', 'sitemap.xml', 'robots.txt'}


def slugify(text):
    """Lower-case text with runs of non-alphanumerics collapsed to one hyphen."""
    return re.sub(r'[^a-z0-9]+', '-', str(text).lower()).strip('-')


def is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def priority_key(deal):
    priority = deal.get('priority')
    return priority if is_number(priority) else DEFAULT_PRIORITY


def sort_by_priority(deals):
    """Stable sort by numeric priority; deals without one go last."""
    return sorted(deals, key=priority_key)


def numeric_amount(value):
    """
    Pull a number out of a benefit amount such as ``"$100"`` or ``150``.
    Returns 0 when no digits are present.
    """
    if is_number(value):
        return value
    match = re.match(r'\d*\.?\d+|\d+', re.sub(r'[^0-9.]', '', str(value or '')))
    if not match:
        return 0
    amount = float(match.group(0))
    return int(amount) if amount.is_integer() else amount


def require_field(deal, field):
    """Raise MissingFieldError if a field is absent or empty."""
    value = deal.get(field)
    if value is None or value == '':
        raise MissingFieldError(deal.get('sourceFile', '<unknown>'), field)
    return value


def validate_deal(deal) -> List[tuple]:
    """Return a list of (source, field, message) problems for one deal."""
    source = deal.get('sourceFile', '<unknown>')
    problems = []

    required = list(REQUIRED_FIELDS)
    if deal.get('codeType') == 'code':
        required.append('code')
    for field in required:
        try:
            require_field(deal, field)
        except MissingFieldError as e:
            problems.append((e.source, e.field, 'missing required field'))

    code_type = deal.get('codeType')
    if code_type not in (None, '') and code_type not in CODE_TYPES:
        problems.append((source, 'codeType', f"must be one of {', '.join(CODE_TYPES)}, got {code_type!r}"))

    if 'priority' in deal and not is_number(deal['priority']):
        problems.append((source, 'priority', f"must be a number, got {deal['priority']!r}"))

    # Slugs become directory names under the output directory
    for field in ('slug', 'categorySlug'):
        value = deal.get(field)
        if value is None or value == '':
            continue
        if not isinstance(value, str):
            problems.append((source, field, f"must be text, got {value!r}"))
        elif '/' in value or '\\' in value or value in ('.', '..'):
            problems.append((source, field, f"'{value}' is not a valid path segment"))

    if deal.get('categorySlug') in RESERVED_SLUGS:
        problems.append((source, 'categorySlug', f"'{deal['categorySlug']}' is reserved for site output"))
    elif 'category' in deal and not deal.get('categorySlug'):
        problems.append((source, 'categorySlug', 'category produces an empty slug'))

    return problems


class DealProcessor:
    """Turn one deal document into a deal record."""

    def __init__(self, default_success_rate=DEFAULT_SUCCESS_RATE):
        self.default_success_rate = default_success_rate
        self.logger = logging.getLogger('Dealsmith')

    def read_file(self, file_path):
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return f.read()
        except (IOError, OSError, PermissionError) as e:
            raise ContentError(f"Failed to read deal file {file_path}: {e}")

    def build_deal(self, front_matter, body, source_file=None) -> Dict[str, Any]:
        """Merge front matter with the derived fields."""
        deal = dict(front_matter)
        category = front_matter.get('category')
        deal['categorySlug'] = front_matter.get('categorySlug') or (
            slugify(category) if category is not None else '')
        deal['verified'] = True
        deal['successRate'] = front_matter.get('successRate') or self.default_success_rate
        deal['bodyContent'] = body
        deal['bodyHtml'] = render_body(body)
        deal['excerpt'] = generate_excerpt(body)
        deal['sourceFile'] = source_file
        return deal

    def process(self, file_path):
        """Parse and render a single deal file."""
        content = self.read_file(file_path)
        try:
            front_matter, body = parse_front_matter(content)
        except FormatError as e:
            raise FormatError(f"{file_path}: {e}") from e
        deal = self.build_deal(front_matter, body, source_file=file_path)
        self.logger.debug(f"Parsed deal {deal.get('slug')} from {file_path}")
        return deal


def get_markdown_files(directory):
    """Get all markdown files from a directory, in filename order."""
    if not os.path.isdir(directory):
        raise ContentError(f"Deals directory not found: {directory}")
    return [os.path.join(directory, f) for f in sorted(os.listdir(directory)) if f.endswith('.md')]


def load_deals(content_dir, default_success_rate=DEFAULT_SUCCESS_RATE, validate=True):
    """
    Load, validate and priority-sort every deal under ``<content_dir>/deals``.

    Raises:
        FormatError: First document with missing front matter delimiters
        CatalogValidationError: Every field problem found across all files
    """
    processor = DealProcessor(default_success_rate=default_success_rate)
    deals = [processor.process(path) for path in get_markdown_files(os.path.join(content_dir, 'deals'))]

    if validate:
        problems = []
        seen_slugs = {}
        for deal in deals:
            problems.extend(validate_deal(deal))
            slug = deal.get('slug')
            if slug in seen_slugs:
                problems.append((deal['sourceFile'], 'slug',
                                 f"duplicate slug '{slug}' (also used by {seen_slugs[slug]})"))
            elif slug:
                seen_slugs[slug] = deal['sourceFile']
        if problems:
            raise CatalogValidationError(problems)

    return sort_by_priority(deals)


def load_category_blurbs(content_dir) -> Dict[str, str]:
    """Load the optional category slug -> blurb mapping."""
    file_path = os.path.join(content_dir, 'categories.json')
    if not os.path.exists(file_path):
        return {}
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            blurbs = json.load(f) or {}
    except (IOError, OSError, PermissionError) as e:
        raise ContentError(f"Failed to read category blurbs {file_path}: {e}")
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in category blurbs {file_path}: {e}")

    if not isinstance(blurbs, dict):
        raise ContentError(
            f"Category blurbs {file_path} must be an object mapping slugs to text, "
            f"got {type(blurbs).__name__}")
    return blurbs


def get_categories(deals, blurbs: Optional[Dict[str, str]] = None):
    """Group deals by category slug, in order of first appearance."""
    blurbs = blurbs or {}
    categories = OrderedDict()
    for deal in deals:
        slug = deal['categorySlug']
        if slug not in categories:
            categories[slug] = {
                'name': deal.get('category'),
                'slug': slug,
                'blurb': blurbs.get(slug) or None,
                'deals': [],
            }
        categories[slug]['deals'].append(deal)
    return list(categories.values())


def get_related_deals(deal, deals, limit=3):
    """Other deals in the same category, in catalog order."""
    return [d for d in deals
            if d['categorySlug'] == deal['categorySlug'] and d.get('slug') != deal.get('slug')][:limit]
