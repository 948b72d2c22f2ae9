from typing import Iterable, Sequence

from catalog.models import Product
from search.text import normalize

MAX_RECOMMENDATIONS = 4
CATEGORY_WEIGHT = 3
COLOR_WEIGHT = 1


def recommend(
    products: Sequence[Product],
    seed_products: Iterable[Product],
    limit: int = MAX_RECOMMENDATIONS,
) -> list[Product]:
    """
    Rank products the shopper has not seen or carted by affinity with the
    seed products (recently viewed and carted items).

    Affinity is a shared category (+3) and each shared color (+1). Slots left
    over are filled with the best-rated remaining products.
    """
    seeds = list(seed_products)
    excluded = {p.id for p in seeds}
    seed_categories = {normalize(p.category) for p in seeds if p.category}
    seed_colors = {normalize(c) for p in seeds for c in p.colors}

    candidates = [p for p in products if p.id not in excluded]

    def affinity(product: Product) -> int:
        points = CATEGORY_WEIGHT if normalize(product.category) in seed_categories else 0
        points += COLOR_WEIGHT * len({normalize(c) for c in product.colors} & seed_colors)
        return points

    scored = [(affinity(p), p) for p in candidates]
    related = [pair for pair in scored if pair[0] > 0]
    related.sort(key=lambda pair: (pair[0], pair[1].rating), reverse=True)
    picks = [p for _, p in related[:limit]]

    if len(picks) < limit:
        picked_ids = {p.id for p in picks}
        top_rated = sorted(
            (p for p in candidates if p.id not in picked_ids),
            key=lambda p: p.rating,
            reverse=True,
        )
        picks.extend(top_rated[: limit - len(picks)])
    return picks
