"""
Heuristic relevance scoring of catalog products against a free-text query.

Weights:
  full query in any field      +8
  full query in name           +10 (on top of the above)
  token in name / category /
  colors / description         +6 / +5 / +4 / +3 (first matching field only)
  token as a standalone word   +0.5
  rating tie-break             min(rating, 5) * 0.15
"""

from typing import Sequence

from catalog.models import Product
from search.text import normalize

PHRASE_ANY_FIELD_BONUS = 8.0
PHRASE_NAME_BONUS = 10.0
MIN_PHRASE_LENGTH = 3

# Checked in order; a token only counts for the first field it appears in.
FIELD_WEIGHTS = (
    ("name", 6.0),
    ("category", 5.0),
    ("colors", 4.0),
    ("description", 3.0),
)
NAME_WEIGHT = dict(FIELD_WEIGHTS)["name"]
WORD_BOUNDARY_BONUS = 0.5
RATING_WEIGHT = 0.15


def _field_haystacks(product: Product) -> dict[str, str]:
    return {
        "name": normalize(product.name),
        "category": normalize(product.category),
        "colors": normalize(" ".join(product.colors)),
        "description": normalize(product.description),
    }


def build_search_text(product: Product) -> str:
    """Combined normalized text used for the literal substring rescue in search."""
    parts = [product.name, product.description, product.category, " ".join(product.colors)]
    return normalize(" ".join(p for p in parts if p))


def _is_standalone_word(token: str, haystack: str) -> bool:
    return (
        f" {token} " in haystack
        or haystack.startswith(f"{token} ")
        or haystack.endswith(f" {token}")
    )


def _rating_tie_break(product: Product) -> float:
    return min(product.rating, 5) * RATING_WEIGHT


def score(product: Product, query_tokens: Sequence[str], query_text: str) -> float:
    if not query_tokens:
        return 0.0

    fields = _field_haystacks(product)
    haystack_all = " ".join(
        fields[key] for key in ("name", "category", "description", "colors") if fields[key]
    )

    total = 0.0
    if query_text and len(query_text) >= MIN_PHRASE_LENGTH:
        if query_text in haystack_all:
            total += PHRASE_ANY_FIELD_BONUS
        if query_text in fields["name"]:
            total += PHRASE_NAME_BONUS

    for token in query_tokens:
        if not token:
            continue
        for field, weight in FIELD_WEIGHTS:
            if token in fields[field]:
                total += weight
                break
        if _is_standalone_word(token, haystack_all):
            total += WORD_BOUNDARY_BONUS

    total += _rating_tie_break(product)
    return total


def score_name(product: Product, query_tokens: Sequence[str], query_text: str) -> float:
    """
    Score against the product name alone, with the weights used by score().

    Returns 0 when nothing in the name matches, so the rating tie-break never
    admits a product on its own.
    """
    if not query_tokens:
        return 0.0

    name = normalize(product.name)
    total = 0.0
    if len(query_text) >= MIN_PHRASE_LENGTH and query_text in name:
        total += PHRASE_NAME_BONUS
    for token in query_tokens:
        if token and token in name:
            total += NAME_WEIGHT
            if _is_standalone_word(token, name):
                total += WORD_BOUNDARY_BONUS

    if total == 0:
        return 0.0
    return total + _rating_tie_break(product)
