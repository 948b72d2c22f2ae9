"""
Turns a classified discount request into a concrete outcome.

Outcomes are drawn from an injected random.Random, so results are not
deterministic unless the caller seeds it. The calculator has no side effects;
recording the negotiation and applying the coupon is up to the store.
"""

import math
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from catalog.models import Product
from negotiation.classifier import Classification, classify
from negotiation.coupons import generate_coupon_code, generate_penalty_code

GOOD_REASON_RANGE = (15, 25)
NEUTRAL_REASON_RANGE = (5, 10)
PENALTY_RANGE = (10, 20)
STRONG_REASONS = {"birthday", "multiple"}

RUDE_BEHAVIOR = "rude_behavior"
LOWBALL_OFFER = "lowball_offer"
NO_REASON = "no_reason"
BELOW_BOTTOM_PRICE = "below_bottom_price"


@dataclass(frozen=True)
class NegotiationOutcome:
    approved: bool
    discount_percent: int
    reason: str
    reason_type: str
    price_increase_percent: int = 0
    coupon_code: Optional[str] = None
    penalty_coupon_code: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "approved": self.approved,
            "discountPercent": self.discount_percent,
            "priceIncreasePercent": self.price_increase_percent,
            "reason": self.reason,
            "couponCode": self.coupon_code,
            "penaltyCouponCode": self.penalty_coupon_code,
        }


def max_discount_percent(price: float, bottom_price: float) -> int:
    """Largest whole percentage that keeps the price at or above bottom_price."""
    if price <= 0:
        return 0
    return math.floor((price - bottom_price) * 100 / price)


def discounted_price(price: float, discount_percent: int) -> float:
    return price * (1 - discount_percent / 100)


class DiscountCalculator:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def evaluate(self, request: str, product: Optional[Product], cart_lines: Sequence = ()) -> NegotiationOutcome:
        return self.decide(classify(request), product)

    def decide(self, classification: Classification, product: Optional[Product]) -> NegotiationOutcome:
        reason_type = classification.reason_type

        if classification.is_rude:
            increase = self.rng.randint(*PENALTY_RANGE)
            return NegotiationOutcome(
                approved=False,
                discount_percent=0,
                reason=RUDE_BEHAVIOR,
                reason_type=reason_type,
                price_increase_percent=increase,
                penalty_coupon_code=generate_penalty_code(increase, self.rng),
            )

        if classification.is_lowball:
            return NegotiationOutcome(False, 0, LOWBALL_OFFER, reason_type)

        if classification.reason_score >= 2 or reason_type in STRONG_REASONS:
            discount = self.rng.randint(*GOOD_REASON_RANGE)
        elif classification.reason_score == 1:
            discount = self.rng.randint(*NEUTRAL_REASON_RANGE)
        else:
            return NegotiationOutcome(False, 0, NO_REASON, reason_type)

        if product is not None and discounted_price(product.price, discount) < product.bottom_price:
            ceiling = max_discount_percent(product.price, product.bottom_price)
            if ceiling <= 0:
                return NegotiationOutcome(False, 0, BELOW_BOTTOM_PRICE, reason_type)
            discount = min(discount, ceiling)

        return NegotiationOutcome(
            approved=True,
            discount_percent=discount,
            reason=reason_type,
            reason_type=reason_type,
            coupon_code=generate_coupon_code(reason_type, discount, self.rng),
        )
