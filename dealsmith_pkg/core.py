import os
import re
import shutil
import logging
from datetime import date, datetime
from xml.sax.saxutils import escape

import csscompressor
import rjsmin
from jinja2 import Environment, FileSystemLoader, TemplateNotFound, TemplateSyntaxError

from .catalog import (
    DEFAULT_SUCCESS_RATE,
    get_categories,
    get_related_deals,
    load_category_blurbs,
    load_deals,
    numeric_amount,
)
from .exceptions import BuildError, ContentError
from .search import build_search_index
from .settings import DealsmithSettings

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
PACKAGE_TEMPLATES_DIR = os.path.join(PACKAGE_DIR, 'templates')
PACKAGE_ASSETS_DIR = os.path.join(PACKAGE_DIR, 'assets')

SITEMAP_PRIORITIES = {'home': '1.0', 'deal': '0.8', 'category': '0.7'}


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages to be shown in the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Site build completed in",
            "Total deals generated:",
            "Total categories generated:",
            "Loaded",
            "Building homepage",
            "Building deal pages",
            "Building category pages",
            "Generating XML sitemap",
            "Generating robots.txt",
            "Preserved non-Dealsmith files",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


def minify_html(html):
    """Collapse blank lines and indentation between tags."""
    html = re.sub(r'\n\s*\n', '\n', html)
    html = re.sub(r'\n\s+<', '\n<', html)
    html = re.sub(r'>\s+\n', '>\n', html)
    html = re.sub(r'\n+', '\n', html)
    return html.strip()


def apply_current_year(text, year, token='2025'):
    """Replace the first year token in a meta string with the build year."""
    if not isinstance(text, str) or not token:
        return text
    return text.replace(str(token), str(year), 1)


class DealSite:
    def __init__(self, content_dir='_data', output_dir='site', templates_dir=None, assets_dir=None,
                 site_url='https://example.com', site_name='ReferralCode.com', site_tagline=None,
                 contact_email=None, footer_note=None, current_year=None, year_token='2025',
                 robots='public', robots_disallow=None, minify=False, related_limit=3,
                 default_success_rate=DEFAULT_SUCCESS_RATE, log_dir=None):
        self.content_dir = content_dir
        self.output_dir = output_dir
        self.assets_dir = assets_dir
        self.site_url = (site_url or '').rstrip('/')
        self.site_name = site_name
        self.site_tagline = site_tagline
        self.contact_email = contact_email
        self.footer_note = footer_note
        self.current_year = current_year or date.today().year
        self.year_token = year_token
        self.robots = robots
        if robots_disallow is None:
            robots_disallow = DealsmithSettings.DEFAULT_SETTINGS['robots_disallow']
        self.robots_disallow = list(robots_disallow)
        self.minify = minify
        self.related_limit = related_limit
        self.default_success_rate = default_success_rate
        self.log_dir = log_dir
        self.build_date = date.today()

        self.deals = []
        self.categories = []
        self.deals_generated = 0
        self.categories_generated = 0

        self.setup_logging()

        if not os.path.isdir(self.content_dir):
            raise ContentError(f"Content directory not found: {self.content_dir}")

        # User templates override the packaged ones file by file
        template_dirs = [PACKAGE_TEMPLATES_DIR]
        if templates_dir:
            if not os.path.isdir(templates_dir):
                raise ContentError(f"Templates directory not found: {templates_dir}")
            template_dirs.insert(0, templates_dir)
        self.templates_dirs = template_dirs
        self.env = Environment(loader=FileSystemLoader(template_dirs))

    def setup_logging(self):
        """Set up logging configuration."""
        self.logger = logging.getLogger('Dealsmith')
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            # Console handler with filter
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.addFilter(InfoFilter())
            console_handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(console_handler)

            # File handler for all logs
            if self.log_dir:
                os.makedirs(self.log_dir, exist_ok=True)
                log_filename = datetime.now().strftime('dealsmith_%Y-%m-%d_%H-%M-%S.log')
                file_handler = logging.FileHandler(os.path.join(self.log_dir, log_filename))
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(
                    logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
                self.logger.addHandler(file_handler)

    def load_catalog(self):
        """Load deals and derive categories."""
        self.deals = load_deals(self.content_dir, default_success_rate=self.default_success_rate)
        blurbs = load_category_blurbs(self.content_dir)
        self.categories = get_categories(self.deals, blurbs)
        self.logger.info(f"Loaded {len(self.deals)} deals in {len(self.categories)} categories")
        return self.deals

    def create_output_dir(self):
        """Create output directory, removing what a previous build generated."""
        if not os.path.exists(self.output_dir):
            os.makedirs(self.output_dir, exist_ok=True)
            return

        generated = {'index.html', 'sitemap.xml', 'robots.txt', 'deal', 'assets'}
        generated.update(category['slug'] for category in self.categories)

        preserved_items = []
        for item in sorted(os.listdir(self.output_dir)):
            item_path = os.path.join(self.output_dir, item)
            if item in generated:
                if os.path.isdir(item_path):
                    shutil.rmtree(item_path)
                else:
                    os.remove(item_path)
            else:
                preserved_items.append(item)

        if preserved_items:
            self.logger.info(f"Preserved non-Dealsmith files: {', '.join(preserved_items)}")

    def copy_assets_to_output(self):
        """Copy packaged assets, then any user assets over them."""
        output_assets_dir = os.path.join(self.output_dir, 'assets')
        try:
            shutil.copytree(PACKAGE_ASSETS_DIR, output_assets_dir, dirs_exist_ok=True)
            if self.assets_dir and os.path.exists(self.assets_dir):
                shutil.copytree(self.assets_dir, output_assets_dir, dirs_exist_ok=True)
                self.logger.debug(f"Copied assets from {self.assets_dir}")
        except (IOError, OSError, shutil.Error) as e:
            self.logger.error(f"Failed to copy assets: {e}")
            raise BuildError(f"Failed to copy assets to {output_assets_dir}: {e}")

    def _minify_directory(self, directory, extension, minifier):
        if not os.path.exists(directory):
            return
        for file in os.listdir(directory):
            if not file.endswith(extension) or file.endswith('.min' + extension):
                continue
            source_path = os.path.join(directory, file)
            minified_path = os.path.join(directory, file[:-len(extension)] + '.min' + extension)
            try:
                with open(source_path, 'r', encoding='utf-8') as f:
                    content = f.read()
                with open(minified_path, 'w', encoding='utf-8') as f:
                    f.write(minifier(content))
                self.logger.debug(f"Minified {file}")
            except (IOError, OSError) as e:
                self.logger.error(f"Failed to minify {file}: {e}")
                raise BuildError(f"Failed to minify {source_path}: {e}")

    def minify_assets(self):
        """Minify CSS and JS assets."""
        assets_output_dir = os.path.join(self.output_dir, 'assets')
        self._minify_directory(os.path.join(assets_output_dir, 'css'), '.css', csscompressor.compress)
        self._minify_directory(os.path.join(assets_output_dir, 'js'), '.js', rjsmin.jsmin)

    def calculate_relative_path(self, current_output_dir):
        """Calculate relative path from current directory to root."""
        rel_path = os.path.relpath(self.output_dir, current_output_dir)
        # Ensure relative path ends with '/' for proper asset linking
        if rel_path == '.':
            return ''
        return rel_path.replace(os.sep, '/') + '/'

    def page_url(self, path=''):
        """Absolute canonical URL for a site path such as ``deal/acme/``."""
        return f"{self.site_url}/{path}"

    def render_template(self, template_name, **context):
        """Render a Jinja2 template with the site-wide context."""
        relative_path = context.get('relative_path', '')
        site_context = {
            'site_name': self.site_name,
            'site_url': self.site_url,
            'site_tagline': self.site_tagline,
            'contact_email': self.contact_email,
            'footer_note': self.footer_note,
            'current_year': self.current_year,
            'minify': self.minify,
            'deals': self.deals,
            'search_data': build_search_index(self.deals, relative_path),
            'numeric_amount': numeric_amount,
            'breadcrumbs': [],
            'include_sitemap_link': False,
        }
        site_context.update(context)
        try:
            template = self.env.get_template(template_name)
            return template.render(**site_context)
        except (TemplateNotFound, TemplateSyntaxError) as e:
            self.logger.error(f"Template error: {e}")
            raise BuildError(f"Template error in {template_name}: {e}")

    def write_file(self, file_path, content):
        """Write a generated file, failing the build if it cannot be written."""
        try:
            os.makedirs(os.path.dirname(file_path) or '.', exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(content)
            self.logger.debug(f"Generated: {file_path}")
        except (IOError, OSError) as e:
            self.logger.error(f"Failed to write {file_path}: {e}")
            raise BuildError(f"Failed to write {file_path}: {e}")

    def render_page(self, template_name, page_dir, **context):
        """Render a page into ``<page_dir>/index.html``."""
        context['relative_path'] = self.calculate_relative_path(page_dir)
        html = self.render_template(template_name, **context)
        self.write_file(os.path.join(page_dir, 'index.html'), minify_html(html))

    def get_structured_data(self, deal):
        """schema.org Offer for a deal page."""
        return {
            '@context': 'https://schema.org',
            '@type': 'Offer',
            'name': f"{deal['company']} Referral Code",
            'description': deal['benefit'],
            'url': self.page_url(f"deal/{deal['slug']}/"),
            'seller': {'@type': 'Organization', 'name': deal['company']},
            'priceSpecification': {
                '@type': 'PriceSpecification',
                'price': '0',
                'priceCurrency': 'USD',
            },
        }

    def build_homepage(self):
        self.logger.info("Building homepage")
        self.render_page(
            'index.html',
            self.output_dir,
            title=f"{self.site_name} - Verified Referral Codes That Work",
            description=('Find verified referral codes and promo codes that actually work. '
                         'Every code tested within 24 hours. Earn cash back, bonuses, and '
                         'discounts from top brands.'),
            canonical_url=self.page_url(),
            include_sitemap_link=True,
        )

    def build_deal_pages(self):
        self.logger.info("Building deal pages")
        for deal in self.deals:
            page_dir = os.path.join(self.output_dir, 'deal', deal['slug'])
            self.render_page(
                'deal.html',
                page_dir,
                deal=deal,
                related_deals=get_related_deals(deal, self.deals, self.related_limit),
                structured_data=self.get_structured_data(deal),
                title=apply_current_year(deal['metaTitle'], self.current_year, self.year_token),
                description=apply_current_year(deal['metaDescription'], self.current_year, self.year_token),
                canonical_url=self.page_url(f"deal/{deal['slug']}/"),
                breadcrumbs=[
                    {'label': 'Home', 'url': '../../index.html'},
                    {'label': 'Deals', 'url': '../../index.html#deals'},
                    {'label': deal['company'], 'url': f"../../deal/{deal['slug']}/index.html"},
                ],
            )
            self.deals_generated += 1

    def build_category_pages(self):
        self.logger.info("Building category pages")
        for category in self.categories:
            page_dir = os.path.join(self.output_dir, category['slug'])
            name = str(category['name'])
            self.render_page(
                'category.html',
                page_dir,
                category=category,
                title=f"{name} Referral Codes {self.current_year} - Verified Promo Codes | {self.site_name}",
                description=(f"Find verified {name.lower()} referral codes and promo codes. "
                             f"{len(category['deals'])} working codes tested today. "
                             "Save money with trusted offers."),
                canonical_url=self.page_url(f"{category['slug']}/"),
                breadcrumbs=[
                    {'label': 'Home', 'url': '../index.html'},
                    {'label': 'Categories', 'url': '../index.html#deals'},
                    {'label': name, 'url': f"../{category['slug']}/index.html"},
                ],
            )
            self.categories_generated += 1

    def format_xml_sitemap_entry(self, url, priority):
        """Format a single sitemap entry."""
        return f'''<url>
<loc>{escape(url)}</loc>
<lastmod>{self.build_date.strftime('%Y-%m-%d')}</lastmod>
<changefreq>daily</changefreq>
<priority>{priority}</priority>
</url>
'''

    def generate_xml_sitemap(self):
        """Generate XML sitemap listing the homepage, every deal and every category."""
        self.logger.info("Generating XML sitemap")
        sitemap_content = '''<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
'''
        sitemap_content += self.format_xml_sitemap_entry(self.page_url(), SITEMAP_PRIORITIES['home'])
        for deal in self.deals:
            sitemap_content += self.format_xml_sitemap_entry(
                self.page_url(f"deal/{deal['slug']}/"), SITEMAP_PRIORITIES['deal'])
        for category in self.categories:
            sitemap_content += self.format_xml_sitemap_entry(
                self.page_url(f"{category['slug']}/"), SITEMAP_PRIORITIES['category'])
        sitemap_content += '</urlset>'

        self.write_file(os.path.join(self.output_dir, 'sitemap.xml'), sitemap_content)

    def generate_robots_txt(self, mode="public"):
        """Generate robots.txt file."""
        self.logger.info("Generating robots.txt")
        if mode == "public":
            lines = ["User-agent: *", "Allow: /"]
            lines.extend(f"Disallow: {path}" for path in self.robots_disallow)
            lines.extend(["", f"Sitemap: {self.page_url('sitemap.xml')}"])
            robots_content = "\n".join(lines)
        else:
            robots_content = """User-agent: *
Disallow: /"""

        self.write_file(os.path.join(self.output_dir, 'robots.txt'), robots_content)

    def build(self):
        """Main build process."""
        self.logger.info("Starting site build...")
        self.load_catalog()
        self.create_output_dir()

        self.copy_assets_to_output()
        if self.minify:
            self.minify_assets()

        self.build_homepage()
        self.build_deal_pages()
        self.build_category_pages()

        self.generate_xml_sitemap()
        self.generate_robots_txt(self.robots)
