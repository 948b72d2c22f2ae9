from .classifier import Classification, classify
from .calculator import DiscountCalculator, NegotiationOutcome, discounted_price
from .coupons import generate_coupon_code, generate_penalty_code

__all__ = [
    "Classification",
    "classify",
    "DiscountCalculator",
    "NegotiationOutcome",
    "discounted_price",
    "generate_coupon_code",
    "generate_penalty_code",
]
