"""
Tests for relevance scoring and the search engine.

Scores are compared with pytest.approx because of the fractional rating
tie-break.
"""

import pytest

from catalog.loader import build_catalog, load_catalog
from core.config import PROJECT_ROOT
from search.engine import SearchEngine
from search.scoring import build_search_text, score, score_name
from search.text import normalize, tokenize


def _score(product, query):
    return score(product, tokenize(query), normalize(query))


class TestScore:
    def test_no_tokens_scores_zero(self, jacket):
        assert score(jacket, [], "") == 0

    def test_full_phrase_in_name(self, jacket):
        # +8 phrase anywhere, +10 phrase in name, 2 x (+6 name, +0.5 word), rating 4.5 * 0.15
        assert _score(jacket, "blue jacket") == pytest.approx(8 + 10 + 6 + 0.5 + 6 + 0.5 + 0.675)

    def test_field_priority_counts_first_match_only(self, products):
        scarf = products[4]  # "red" only appears in colors
        assert _score(scarf, "red") == pytest.approx(8 + 4 + 0.5 + 3.9 * 0.15)

    def test_category_beats_description(self, products):
        shirt = products[5]
        assert _score(shirt, "clothing") == pytest.approx(8 + 5 + 0.5 + 4.1 * 0.15)

    def test_partial_word_gets_no_boundary_bonus(self, jacket):
        # "jack" is inside "jacket" but not a standalone word
        assert _score(jacket, "jack") == pytest.approx(8 + 10 + 6 + 0.675)

    def test_rating_tie_break_without_match(self):
        [product] = build_catalog([{"id": 1, "name": "Thing", "price": 1, "rating": 5}])
        assert _score(product, "zz") == pytest.approx(0.75)

    def test_search_text_includes_all_fields(self, jacket):
        text = build_search_text(jacket)
        assert "quilted" in text and "clothing" in text and "navy" in text


class TestScoreName:
    def test_uses_name_weights_and_word_bonus(self, jacket):
        assert score_name(jacket, tokenize("blue jacket"), "blue jacket") == pytest.approx(10 + 6.5 + 6.5 + 0.675)

    def test_partial_word_has_no_bonus(self, jacket):
        assert score_name(jacket, tokenize("jack"), "jack") == pytest.approx(10 + 6 + 0.675)

    def test_other_fields_are_ignored(self, jacket):
        assert score_name(jacket, tokenize("quilted"), "quilted") == 0


class TestSearchEngine:
    def test_invalid_query(self, products):
        engine = SearchEngine(products)
        assert engine.search(None)["success"] is False
        assert engine.search("")["success"] is False
        assert engine.search(12)["success"] is False

    def test_tokenless_query_returns_everything(self, products):
        result = SearchEngine(products).search("?!")
        assert result["success"] is True
        assert result["query"] == ""
        assert result["count"] == len(products)

    def test_whitespace_query_returns_everything(self, products):
        result = SearchEngine(products).search("   ")
        assert result["success"] is True
        assert result["count"] == len(products)

    def test_blue_jacket_ranks_first(self, products):
        result = SearchEngine(products).search("blue jacket")
        assert result["success"] is True
        assert result["products"][0].name == "Blue Jacket"
        assert result["query"] == "blue jacket"

    def test_results_capped_at_eight(self):
        catalog = load_catalog(PROJECT_ROOT / "data" / "products.json")
        assert len(catalog) > 8
        result = SearchEngine(catalog).search("leather")
        assert result["count"] == len(result["products"]) <= 8

    def test_positive_scores_are_included(self, products):
        query = "wallet"
        result = SearchEngine(products).search(query)
        for product in products:
            if _score(product, query) > 0:
                assert product in result["products"]

    def test_ties_keep_catalog_order(self):
        catalog = build_catalog([
            {"id": 1, "name": "Red Mug", "price": 5},
            {"id": 2, "name": "Red Cup", "price": 5},
            {"id": 3, "name": "Red Bowl", "price": 5},
        ])
        result = SearchEngine(catalog).search("red")
        assert [p.id for p in result["products"]] == [1, 2, 3]

    def test_unrated_non_matches_are_excluded(self):
        catalog = build_catalog([
            {"id": 1, "name": "Plain Tee", "description": "made of organic cotton", "price": 5},
            {"id": 2, "name": "Other", "price": 5},
        ])
        result = SearchEngine(catalog).search("organic")
        assert [p.id for p in result["products"]] == [1]

    def test_rank_names_resolves_loose_reference(self, products):
        ranked = SearchEngine(products).rank_names("that blue jacket")
        assert ranked[0][1].id == 1

    def test_rank_names_without_match(self, products):
        assert SearchEngine(products).rank_names("teapot") == []

    def test_rank_names_prefers_whole_words(self):
        catalog = build_catalog([
            {"id": 1, "name": "Capri Pants", "price": 30},
            {"id": 2, "name": "Baseball Cap", "price": 15},
        ])
        ranked = SearchEngine(catalog).rank_names("cap")
        assert [product.id for _, product in ranked] == [2, 1]
