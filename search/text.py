"""Text normalization shared by product search and negotiation."""

import re

_APOSTROPHES = re.compile(r"['’]")
_NON_ALNUM = re.compile(r"[^a-z0-9 ]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text) -> str:
    """Lower-case, drop apostrophes, turn punctuation into spaces and collapse whitespace."""
    if text is None:
        return ""
    value = str(text).lower()
    value = _APOSTROPHES.sub("", value)
    value = _NON_ALNUM.sub(" ", value)
    return _WHITESPACE.sub(" ", value).strip()


def tokenize(text) -> list[str]:
    """Split normalized text into words, keeping numbers of any length (e.g. "20")."""
    normalized = normalize(text)
    if not normalized:
        return []
    return [t for t in normalized.split(" ") if len(t) >= 2 or t.isdigit()]
