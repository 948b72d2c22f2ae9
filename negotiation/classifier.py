"""
Classifies a free-text discount request ("haggle") into an outcome class.

Rudeness is checked first and overrides every other signal: "it's my
birthday, you idiot" is rude, not a birthday request.

Known calibration issue: the rude vocabulary contains broad words such as
"money", "return", "stop" and "hell". Matching is by substring, so innocuous
requests ("I want to return this", "hello") are classified as rude. The list
is kept as shipped until product owners decide how to narrow it.
"""

import re
from dataclasses import dataclass

from search.text import normalize

RUDE_KEYWORDS = (
    # profanity
    "fuck", "fck", "fuk", "phuck", "shit", "sh1t", "bitch", "btch", "bastard",
    "crap", "damn", "dammit", "hell", "piss", "wtf", "stfu", "asshole", "arsehole",
    "dick", "jerk",
    # abuse
    "idiot", "idiet", "idot", "stupid", "stoopid", "stupd", "dumb", "moron",
    "loser", "pathetic", "useless", "incompetent", "clown", "scammer", "scam",
    "thief", "thieves",
    # aggression
    "shut up", "or else", "threat", "sue you", "kill", "hate you", "stop",
    "report you", "destroy",
    # price complaints
    "ripoff", "rip off", "overpriced", "over priced", "cheap", "garbage", "trash",
    "junk", "robbery", "money", "return",
    # unethical conduct
    "fake review", "chargeback", "lie to", "steal", "stolen", "bribe", "fraud",
)

LOWBALL_PATTERNS = (
    re.compile(r"\$\d+\s*(only|just|max)", re.IGNORECASE),
    re.compile(r"half\s*price", re.IGNORECASE),
    re.compile(r"50\s*percent", re.IGNORECASE),
    re.compile(r"free", re.IGNORECASE),
)

# Declaration order breaks ties between equally scored categories.
REASON_KEYWORDS: dict[str, tuple[str, ...]] = {
    "birthday": ("birthday", "bday", "born", "turning"),
    "multiple": ("two", "three", "multiple", "buying", "several", "both"),
    "vip": ("vip", "regular", "customer", "loyal"),
    "student": ("student", "college", "university", "school"),
    "first": ("first", "new", "first time"),
    "loyalty": ("loyal", "repeat", "always", "often"),
}

DEFAULT_REASON = "default"


@dataclass(frozen=True)
class Classification:
    is_rude: bool
    is_lowball: bool
    reason_type: str
    reason_score: int


def is_rude(normalized_request: str) -> bool:
    return any(keyword in normalized_request for keyword in RUDE_KEYWORDS)


def is_lowball(request: str) -> bool:
    return any(pattern.search(request) for pattern in LOWBALL_PATTERNS)


def best_reason(normalized_request: str) -> tuple[str, int]:
    reason_type, reason_score = DEFAULT_REASON, 0
    for category, keywords in REASON_KEYWORDS.items():
        matches = sum(1 for keyword in keywords if keyword in normalized_request)
        if matches > reason_score:
            reason_type, reason_score = category, matches
    return reason_type, reason_score


def classify(request) -> Classification:
    raw = request if isinstance(request, str) else ""
    normalized = normalize(raw)
    reason_type, reason_score = best_reason(normalized)
    return Classification(
        is_rude=is_rude(normalized),
        is_lowball=is_lowball(raw),
        reason_type=reason_type,
        reason_score=reason_score,
    )
