from .text import normalize, tokenize
from .scoring import build_search_text, score
from .engine import SearchEngine

__all__ = ["normalize", "tokenize", "build_search_text", "score", "SearchEngine"]
