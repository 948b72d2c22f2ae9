"""
Coupon code generation.

Codes look like BDAY-20-042: a reason prefix, the percentage and a 3-digit
random suffix. Penalty codes use the PENALTY prefix and the increase.
"""

import random

COUPON_PREFIXES: dict[str, str] = {
    "birthday": "BDAY",
    "multiple": "DOUBLE",
    "vip": "VIP",
    "student": "STUDENT",
    "first": "FIRST",
    "loyalty": "LOYAL",
    "special": "SPECIAL",
    "default": "SAVE",
}
PENALTY_PREFIX = "PENALTY"


def _suffix(rng: random.Random) -> str:
    return f"{rng.randint(0, 999):03d}"


def generate_coupon_code(reason_type: str, discount_percent: int, rng: random.Random) -> str:
    prefix = COUPON_PREFIXES.get(reason_type, COUPON_PREFIXES["default"])
    return f"{prefix}-{discount_percent}-{_suffix(rng)}"


def generate_penalty_code(increase_percent: int, rng: random.Random) -> str:
    return f"{PENALTY_PREFIX}-{increase_percent}-{_suffix(rng)}"
