"""Test configuration and fixtures for Dealsmith tests."""

import pytest
import tempfile
import shutil
import json
from pathlib import Path

ACME_DEAL = """---
company: Acme Bank
category: Banking
benefit: Get $100 cash bonus
benefitAmount: $100
codeType: code
code: ACME100
url: https://acme.test/refer
slug: acme-bank
metaTitle: Acme Bank Referral Code 2025
metaDescription: Verified Acme Bank code for 2025.
priority: 2
---

Open an account with **Acme** today.

## Steps

1. Sign up
2. Deposit
"""

BETA_DEAL = """---
company: Beta Eats
category: Food & Drink
benefit: 15% off your first order
benefitAmount: 15
codeType: link
url: https://beta.test/invite
slug: beta-eats
metaTitle: Beta Eats Promo 2025
metaDescription: Beta Eats invite link.
successRate: 95
priority: 1
---

Fresh meals delivered.
"""

CASHLY_DEAL = """---
company: Cashly
category: Banking
benefit: $50 when you deposit $500
benefitAmount: $50
codeType: code
code: CASH50
url: https://cashly.test/r
slug: cashly
metaTitle: Cashly Referral 2025
metaDescription: Cashly bonus.
---

- No fees
- Instant transfers
"""


def write_deal(content_dir, filename, text):
    """Write a deal document into ``<content_dir>/deals``."""
    deals_dir = Path(content_dir) / 'deals'
    deals_dir.mkdir(parents=True, exist_ok=True)
    path = deals_dir / filename
    path.write_text(text, encoding='utf-8')
    return str(path)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def mock_content_dir(temp_dir):
    """Create a content directory with three deals and a blurb file."""
    content_dir = Path(temp_dir) / '_data'
    write_deal(content_dir, 'acme-bank.md', ACME_DEAL)
    write_deal(content_dir, 'beta-eats.md', BETA_DEAL)
    write_deal(content_dir, 'cashly.md', CASHLY_DEAL)

    blurbs_file = content_dir / 'categories.json'
    blurbs_file.write_text(json.dumps({'banking': 'Banks that pay you to switch.'}))

    return str(content_dir)


@pytest.fixture
def mock_output_dir(temp_dir):
    """Path for generated output (not created)."""
    return str(Path(temp_dir) / 'site')
