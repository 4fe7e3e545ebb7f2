"""
Dealsmith - A static site generator for referral deal catalogs.

Dealsmith reads deal write-ups in Markdown with front matter and uses Jinja2
templates to generate a homepage, per-deal pages, per-category listing pages,
a sitemap and robots.txt, with client-side fuzzy search built in.
"""

__version__ = "1.0.0"

from .core import DealSite
from .catalog import DealProcessor, load_deals
from .markdown_renderer import parse_front_matter, render_body
from .search import search_deals

__all__ = ['DealSite', 'DealProcessor', 'load_deals', 'parse_front_matter', 'render_body', 'search_deals']
