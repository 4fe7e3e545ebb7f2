#!/usr/bin/env python3
"""
Command-line interface for Dealsmith - referral deal site generator.
"""

import os
import sys
import json
import time
import shutil
import argparse
from datetime import date

from . import __version__
from .catalog import load_deals
from .core import DealSite, PACKAGE_TEMPLATES_DIR
from .search import build_search_index, search_deals
from .settings import DealsmithSettings

SAMPLE_DEAL = """---
company: Acme Bank
category: Banking
benefit: Get $100 when you open a checking account
benefitAmount: $100
codeType: code
code: ACME100
url: https://acme.example/refer/ACME100
slug: acme-bank
metaTitle: Acme Bank Referral Code 2025 - Get $100
metaDescription: Use our verified Acme Bank referral code to get $100 in 2025.
priority: 1
---

Open an Acme Bank checking account with our referral code and get **$100** after your first direct deposit.

## How to claim

1. Click the link below and start your application.
2. Enter code **ACME100** when asked.
3. Set up a direct deposit within 60 days.

## Fine print

- Offer valid for new customers only.
- See [Acme's terms](https://acme.example/terms) for details.
"""

SAMPLE_BLURBS = {
    'banking': 'Checking and savings accounts that pay you to switch.',
}


def create_starter_structure() -> None:
    """Create a starter content tree and a copy of the default templates."""
    current_dir = os.getcwd()

    deals_dir = os.path.join(current_dir, '_data', 'deals')
    if os.path.exists(deals_dir):
        print("Directory already exists: _data/deals")
    else:
        os.makedirs(deals_dir, exist_ok=True)
        print("Created directory: _data/deals")

    deal_path = os.path.join(deals_dir, 'acme-bank.md')
    if os.path.exists(deal_path):
        print("Sample deal already exists: _data/deals/acme-bank.md")
    else:
        with open(deal_path, 'w', encoding='utf-8') as f:
            f.write(SAMPLE_DEAL)
        print("Created sample deal: _data/deals/acme-bank.md")

    blurbs_path = os.path.join(current_dir, '_data', 'categories.json')
    if os.path.exists(blurbs_path):
        print("Category blurbs already exist: _data/categories.json")
    else:
        with open(blurbs_path, 'w', encoding='utf-8') as f:
            json.dump(SAMPLE_BLURBS, f, indent=2)
        print("Created category blurbs: _data/categories.json")

    templates_dest = os.path.join(current_dir, 'templates')
    if os.path.exists(templates_dest):
        print("Directory already exists: templates")
    else:
        shutil.copytree(PACKAGE_TEMPLATES_DIR, templates_dest)
        print("Created templates: templates/")

    print("\n✅ Starter structure created successfully!")
    print("\nNext steps:")
    print("1. Edit the configuration file (dealsmith.yml)")
    print("2. Add deals to '_data/deals/' and blurbs to '_data/categories.json'")
    print("3. Customize templates in 'templates/' and pass --templates templates")
    print("4. Run 'dealsmith' to build your site")


def run_search(query, content_dir, default_success_rate) -> int:
    """Print ranked matches for a query against the catalog."""
    deals = load_deals(content_dir, default_success_rate=default_success_rate)
    results = search_deals(query, build_search_index(deals))
    if not results:
        print("No deals found. Try a different search.")
        return 1
    for result in results:
        print(f"{result['score']:>4}  {result['company']} ({result['category']}) - "
              f"{result['benefit']}  [{result['match_type']}]")
    return 0


def main(argv=None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description='Dealsmith - Referral Deal Site Generator')
    parser.add_argument('--output', type=str,
                        help='Output directory for generated site')
    parser.add_argument('--content', type=str,
                        help='Content directory containing deals/ and categories.json')
    parser.add_argument('--templates', type=str,
                        help='Templates directory overriding the packaged templates')
    parser.add_argument('--assets', type=str,
                        help='Assets directory copied over the packaged assets')
    parser.add_argument('--site-url', type=str,
                        help='Site URL for canonical links and the sitemap')
    parser.add_argument('--site-name', type=str, help='Site name for titles and navigation')
    parser.add_argument('--robots', type=str, choices=['public', 'private'],
                        help='Robots.txt configuration')
    parser.add_argument('--minify', action='store_true',
                        help='Minify CSS and JS assets')
    parser.add_argument('--year', type=int,
                        help='Year shown in titles (defaults to the current year)')
    parser.add_argument('--search', type=str, metavar='QUERY',
                        help='Search the catalog instead of building')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file and starter content')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    args = parser.parse_args(argv)

    # Handle init command
    if args.init:
        settings_loader = DealsmithSettings()
        config_path = settings_loader.create_sample_config(args.init)
        print(f"Created sample configuration file: {config_path}")
        print("\nCreating starter project structure...")
        create_starter_structure()
        return

    # Load settings from configuration file
    settings_loader = DealsmithSettings()
    settings_loader.load_settings()

    # Command line arguments take precedence
    args_dict = {k: v for k, v in vars(args).items() if v is not None}
    final_settings = settings_loader.merge_with_args(args_dict)

    output_dir = os.path.expanduser(final_settings['output'])
    current_year = final_settings['year'] or date.today().year

    overall_start_time = time.time()

    try:
        if args.search is not None:
            sys.exit(run_search(args.search, final_settings['content'],
                                final_settings['default_success_rate']))

        generator = DealSite(
            content_dir=final_settings['content'],
            output_dir=output_dir,
            templates_dir=final_settings['templates'],
            assets_dir=final_settings['assets'],
            site_url=final_settings['site_url'],
            site_name=final_settings['site_name'],
            site_tagline=final_settings['site_tagline'],
            contact_email=final_settings['contact_email'],
            footer_note=final_settings['footer_note'],
            current_year=current_year,
            year_token=final_settings['year_token'],
            robots=final_settings['robots'],
            robots_disallow=final_settings['robots_disallow'],
            minify=final_settings['minify'],
            related_limit=final_settings['related_limit'],
            default_success_rate=final_settings['default_success_rate'],
            log_dir=final_settings['logs'],
        )

        generator.build()

        total_time = time.time() - overall_start_time
        generator.logger.info(f"Site build completed in {total_time:.6f} seconds.")
        generator.logger.info(f"Total deals generated: {generator.deals_generated}")
        generator.logger.info(f"Total categories generated: {generator.categories_generated}")

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
