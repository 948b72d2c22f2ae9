import logging
from typing import Sequence

from catalog.models import Product
from search.scoring import MIN_PHRASE_LENGTH, build_search_text, score, score_name
from search.text import normalize, tokenize

logger = logging.getLogger(__name__)

DEFAULT_RESULT_LIMIT = 8


class SearchEngine:
    """
    Ranks the catalog against a free-text query.

    Ties in score keep catalog order (the sort is stable).
    """

    def __init__(self, products: Sequence[Product], limit: int = DEFAULT_RESULT_LIMIT):
        self.products = tuple(products)
        self.limit = limit
        self._search_text = {p.id: build_search_text(p) for p in self.products}

    def search(self, query) -> dict:
        if not isinstance(query, str) or not query:
            return {"success": False, "error": "Invalid search query"}

        query_text = normalize(query)
        query_tokens = tokenize(query_text)

        if not query_text or not query_tokens:
            return {
                "success": True,
                "query": "",
                "count": len(self.products),
                "products": list(self.products),
                "message": f"Showing all {len(self.products)} products",
            }

        results = self.rank(query_tokens, query_text)[: self.limit]
        logger.info(f"Search '{query_text}' matched {len(results)} products")
        plural = "" if len(results) == 1 else "s"
        return {
            "success": True,
            "query": query_text,
            "count": len(results),
            "products": results,
            "message": f'Found {len(results)} product{plural} matching "{query}"',
        }

    def rank(self, query_tokens: Sequence[str], query_text: str) -> list[Product]:
        """All matching products by descending score, uncapped."""
        scored = []
        for product in self.products:
            product_score = score(product, query_tokens, query_text)
            rescued = (
                len(query_text) >= MIN_PHRASE_LENGTH
                and query_text in self._search_text[product.id]
            )
            if product_score > 0 or rescued:
                scored.append((product_score, product))
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [product for _, product in scored]

    def rank_names(self, reference) -> list[tuple[float, Product]]:
        """
        Score products against their names only, best first.

        Used to resolve loose references like "that blue jacket" to a product.
        """
        tokens = tokenize(reference)
        if not tokens:
            return []
        query_text = normalize(reference)
        scored = []
        for product in self.products:
            name_score = score_name(product, tokens, query_text)
            if name_score > 0:
                scored.append((name_score, product))
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return scored
