#!/usr/bin/env python3
"""
Fuzzy deal search.

This is the reference implementation of the matcher shipped to browsers as
``assets/js/search.js``; both must rank identically. Matching is
case-insensitive substring containment over three weighted fields, falling
back to a bounded Levenshtein distance against the first two.
"""

from typing import Any, Dict, List, Sequence, Tuple

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 5
MAX_FUZZY_DISTANCE = 2
FUZZY_LENGTH_RATIO = 0.4

DEFAULT_FIELDS = ('company', 'category', 'benefit')

# Base score for a substring hit in each field, in field order
SUBSTRING_SCORES = (100, 80, 60)
# Base score for a fuzzy hit against the primary and secondary fields
FUZZY_SCORES = (40, 30)
SUBSTRING_MATCH_TYPES = ('exact', 'category', 'benefit')


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings; insert, delete and substitute all cost 1."""
    previous = list(range(len(a) + 1))
    for i, char_b in enumerate(b, start=1):
        current = [i]
        for j, char_a in enumerate(a, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], current[j - 1], previous[j]) + 1)
        previous = current
    return previous[len(a)]


def score_record(query: str, record: Dict[str, Any],
                 fields: Sequence[str] = DEFAULT_FIELDS) -> Tuple[int, str]:
    """
    Score one record against an already trimmed, lower-cased query.

    Returns:
        Tuple of (score, match_type); a score of 0 means no match
    """
    values = [str(record.get(field) or '').lower() for field in fields]

    for value, base, match_type in zip(values, SUBSTRING_SCORES, SUBSTRING_MATCH_TYPES):
        position = value.find(query)
        if position != -1:
            return base - position, match_type

    for value, base in zip(values, FUZZY_SCORES):
        distance = levenshtein_distance(query, value)
        if distance <= MAX_FUZZY_DISTANCE and distance < len(value) * FUZZY_LENGTH_RATIO:
            return base - distance, 'fuzzy'

    return 0, ''


def search_deals(query: str, index: Sequence[Dict[str, Any]], limit: int = MAX_RESULTS,
                 fields: Sequence[str] = DEFAULT_FIELDS) -> List[Dict[str, Any]]:
    """
    Rank index records for a query.

    Args:
        query: Raw user input
        index: Records exposing the primary, secondary and tertiary fields
        limit: Maximum number of results
        fields: Names of the primary, secondary and tertiary fields

    Returns:
        Copies of the matching records with ``score`` and ``match_type`` added,
        best first. Equal scores keep their index order.
    """
    query = (query or '').strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []

    lower_query = query.lower()
    results = []
    for record in index:
        score, match_type = score_record(lower_query, record, fields)
        if score > 0:
            results.append({**record, 'score': score, 'match_type': match_type})

    # sorted() is stable, so ties stay in index order
    return sorted(results, key=lambda r: r['score'], reverse=True)[:limit]


def build_search_index(deals, path_prefix=''):
    """Project deals to the records embedded in every page for client-side search."""
    return [
        {
            'company': deal.get('company'),
            'category': deal.get('category'),
            'benefit': deal.get('benefit'),
            'slug': deal.get('slug'),
            'url': f"{path_prefix}deal/{deal.get('slug')}/index.html",
        }
        for deal in deals
    ]
