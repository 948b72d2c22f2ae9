"""
Store state machine: the single source of truth for what a shopper sees.

Holds the catalog view, cart, active coupon, navigation and negotiation
history of one shopping session. Every public operation validates its input
and returns a result dict with a ``success`` flag; invalid input produces
``{"success": False, "error": ...}`` instead of an exception.
"""

import functools
import logging
import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from catalog.models import Product
from core.errors import NotFoundError, StoreError, ValidationError
from negotiation.calculator import (
    BELOW_BOTTOM_PRICE,
    LOWBALL_OFFER,
    RUDE_BEHAVIOR,
    DiscountCalculator,
    discounted_price,
)
from search.engine import DEFAULT_RESULT_LIMIT, SearchEngine
from store.persistence import CART_KEY, COUPON_KEY, InMemoryKeyValueStore, KeyValueStore
from store.recommendations import MAX_RECOMMENDATIONS, recommend

logger = logging.getLogger(__name__)

PAGES = ("home", "products", "product", "cart", "checkout")
SORT_ORDERS = ("asc", "desc")
RECENTLY_VIEWED_LIMIT = 10

REFUSAL_MESSAGES = {
    RUDE_BEHAVIOR: (
        "I'm happy to help, but not when I'm spoken to like that. "
        "Prices for this session just went up by {increase}%."
    ),
    LOWBALL_OFFER: (
        "I understand you're looking for a deal, but I can't go that low. "
        "Would you like to see similar products at different price points?"
    ),
    BELOW_BOTTOM_PRICE: (
        "I'm sorry, but I can't go below our minimum price for this item. "
        "The current price is already competitive."
    ),
}
DEFAULT_REFUSAL = (
    "I appreciate your interest, but I can't offer a discount right now. "
    "However, I'd be happy to help you find something that fits your budget!"
)


@dataclass
class CartLine:
    product: Product
    quantity: int = 1

    def to_dict(self) -> dict:
        return {"product": self.product.model_dump(mode="json"), "quantity": self.quantity}


@dataclass(frozen=True)
class Coupon:
    code: str
    discount_percent: float  # negative = penalty

    def to_dict(self) -> dict:
        return {"code": self.code, "discountPercent": self.discount_percent}


@dataclass(frozen=True)
class NegotiationRecord:
    id: str
    timestamp: str
    request: str
    product_id: int
    product_name: str
    approved: bool
    discount_percent: int
    reason: str
    coupon_code: Optional[str]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "request": self.request,
            "productId": self.product_id,
            "productName": self.product_name,
            "approved": self.approved,
            "discountPercent": self.discount_percent,
            "reason": self.reason,
            "couponCode": self.coupon_code,
        }


def store_operation(func):
    """Turn StoreError raised inside an operation into a failed result."""

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except StoreError as e:
            logger.info(f"{func.__name__} rejected: {e}")
            return {"success": False, "error": str(e)}

    return wrapper


def _product_id(value) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError("Invalid product ID. Product ID must be a positive integer.")
    return value


def _non_empty_str(value, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid {what}")
    return value


class StoreStateMachine:
    def __init__(
        self,
        products: Sequence[Product],
        storage: Optional[KeyValueStore] = None,
        rng: Optional[random.Random] = None,
        search_limit: int = DEFAULT_RESULT_LIMIT,
    ):
        self.products = tuple(products)
        self._by_id = {p.id: p for p in self.products}
        self.search_engine = SearchEngine(self.products, limit=search_limit)
        self.calculator = DiscountCalculator(rng)
        self.storage = storage if storage is not None else InMemoryKeyValueStore()

        self.visible_products: list[Product] = list(self.products)
        self.active_category: Optional[str] = None
        self.sort_order: Optional[str] = None

        self.cart: list[CartLine] = []
        self.applied_coupon: Optional[Coupon] = None

        self.negotiation_history: list[NegotiationRecord] = []
        self.generated_coupon_codes: set[str] = set()

        self.current_page = "home"
        self.current_product_id: Optional[int] = None
        self.recently_viewed: list[int] = []
        self.recommended_products: list[Product] = []

        self._restore()

    # ------------------------------------------------------------------
    # Lookups

    def get_product(self, product_id) -> Product:
        product = self._by_id.get(_product_id(product_id))
        if product is None:
            raise NotFoundError(
                f"Product with ID {product_id} not found in inventory. "
                "Use searchProducts() first to find the correct product ID."
            )
        return product

    def find_product_by_name(self, reference: str) -> Optional[Product]:
        """Best name match for a loose reference such as "that blue jacket"."""
        ranked = self.search_engine.rank_names(reference)
        return ranked[0][1] if ranked else None

    def resolve_product(self, reference) -> Product:
        if isinstance(reference, str):
            if reference.strip().isdigit():
                return self.get_product(int(reference.strip()))
            product = self.find_product_by_name(reference)
            if product is None:
                raise NotFoundError(f'No product matches "{reference}"')
            return product
        return self.get_product(reference)

    def _cart_line(self, product_id: int) -> Optional[CartLine]:
        return next((line for line in self.cart if line.product.id == product_id), None)

    # ------------------------------------------------------------------
    # Catalog view

    @store_operation
    def search_products(self, query) -> dict:
        result = self.search_engine.search(query)
        if result["success"]:
            self.visible_products = list(result["products"])
        return result

    @store_operation
    def filter_category(self, category) -> dict:
        _non_empty_str(category, "category")
        normalized = category.lower().strip()
        filtered = [p for p in self.products if p.category.lower() == normalized]
        if not filtered:
            raise NotFoundError(f'No products found in category "{category}"')

        if self.sort_order:
            filtered = self._sorted_by_price(filtered, self.sort_order)
        self.active_category = normalized
        self.visible_products = filtered
        plural = "" if len(filtered) == 1 else "s"
        return {
            "success": True,
            "category": normalized,
            "count": len(filtered),
            "products": list(filtered),
            "message": f"Found {len(filtered)} product{plural} in {normalized}",
        }

    @store_operation
    def sort_products(self, order) -> dict:
        if order not in SORT_ORDERS:
            raise ValidationError('Invalid sort order. Must be "asc" or "desc"')
        self.sort_order = order
        self.visible_products = self._sorted_by_price(self.visible_products, order)
        order_text = "lowest to highest" if order == "asc" else "highest to lowest"
        return {
            "success": True,
            "order": order,
            "count": len(self.visible_products),
            "message": f"Products sorted by price ({order_text})",
        }

    @staticmethod
    def _sorted_by_price(products: Sequence[Product], order: str) -> list[Product]:
        return sorted(products, key=lambda p: p.price, reverse=(order == "desc"))

    @store_operation
    def reset_filters(self) -> dict:
        self.active_category = None
        self.sort_order = None
        self.visible_products = list(self.products)
        return {"success": True, "count": len(self.visible_products), "message": "Filters cleared"}

    # ------------------------------------------------------------------
    # Cart

    @store_operation
    def add_to_cart(self, product_id) -> dict:
        product = self.get_product(product_id)
        line = self._cart_line(product.id)
        if line:
            line.quantity += 1
        else:
            line = CartLine(product=product)
            self.cart.append(line)
        self._persist()
        logger.info(f"Added {product.name} (ID: {product.id}) to cart, quantity {line.quantity}")
        return {
            "success": True,
            "product": product,
            "quantity": line.quantity,
            "message": f"Added {product.name} to cart",
        }

    @store_operation
    def remove_from_cart(self, product_id, quantity: Optional[int] = None) -> dict:
        """Remove a line, or only `quantity` units of it (the line goes when none are left)."""
        product_id = _product_id(product_id)
        if quantity is not None and (isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1):
            raise ValidationError("Invalid quantity. Must be a positive integer.")
        line = self._cart_line(product_id)
        if line is None:
            raise NotFoundError("Product not in cart")

        if quantity is None or line.quantity - quantity <= 0:
            self.cart.remove(line)
            remaining = 0
        else:
            line.quantity -= quantity
            remaining = line.quantity
        self._persist()
        return {
            "success": True,
            "product": line.product,
            "quantity": remaining,
            "message": f"Removed {line.product.name} from cart",
        }

    @store_operation
    def clear_cart(self) -> dict:
        self.cart = []
        self._persist()
        return {"success": True, "message": "Cart cleared"}

    @property
    def cart_item_count(self) -> int:
        return sum(line.quantity for line in self.cart)

    def cart_total(self) -> dict:
        """Subtotal, coupon effect and total; a penalty coupon makes the discount negative."""
        subtotal = sum(line.product.price * line.quantity for line in self.cart)
        if self.applied_coupon is None or self.applied_coupon.discount_percent == 0:
            return {"subtotal": round(subtotal, 2), "discount": 0.0, "total": round(subtotal, 2), "coupon": None}
        discount = subtotal * self.applied_coupon.discount_percent / 100
        return {
            "subtotal": round(subtotal, 2),
            "discount": round(discount, 2),
            "total": round(subtotal - discount, 2),
            "coupon": self.applied_coupon.to_dict(),
        }

    # ------------------------------------------------------------------
    # Coupons and negotiation

    @store_operation
    def apply_coupon(self, code, discount_percent) -> dict:
        _non_empty_str(code, "coupon code")
        if isinstance(discount_percent, bool) or not isinstance(discount_percent, (int, float)) \
                or not 0 <= discount_percent <= 100:
            raise ValidationError("Invalid discount percentage. Must be between 0 and 100")
        coupon = self._set_coupon(code.strip().upper(), discount_percent)
        return {
            "success": True,
            "coupon": coupon.to_dict(),
            "message": f"Coupon {coupon.code} applied: {discount_percent}% off",
        }

    def _set_coupon(self, code: str, discount_percent: float) -> Coupon:
        self.applied_coupon = Coupon(code=code, discount_percent=discount_percent)
        self._persist()
        return self.applied_coupon

    @store_operation
    def remove_coupon(self) -> dict:
        self.applied_coupon = None
        self._persist()
        return {"success": True, "message": "Coupon removed"}

    def _negotiation_target(self, product_id) -> Product:
        if product_id is not None:
            return self.resolve_product(product_id)
        if self.cart:
            return self.cart[0].product
        if self.current_product_id is not None:
            return self.get_product(self.current_product_id)
        raise NotFoundError("No product specified for negotiation")

    @store_operation
    def negotiate_discount(self, request, product_id=None) -> dict:
        _non_empty_str(request, "negotiation request")
        product = self._negotiation_target(product_id)

        outcome = self.calculator.evaluate(request, product, self.cart)
        self.negotiation_history.append(NegotiationRecord(
            id=uuid.uuid4().hex,
            timestamp=datetime.now(timezone.utc).isoformat(),
            request=request,
            product_id=product.id,
            product_name=product.name,
            approved=outcome.approved,
            discount_percent=outcome.discount_percent,
            reason=outcome.reason,
            coupon_code=outcome.coupon_code,
        ))
        logger.info(f"Negotiation for {product.name}: {outcome.reason} ({outcome.discount_percent}%)")

        result = {"success": True, **outcome.to_dict()}
        if outcome.approved:
            self.generated_coupon_codes.add(outcome.coupon_code)
            self._set_coupon(outcome.coupon_code, outcome.discount_percent)
            result["product"] = {
                "id": product.id,
                "name": product.name,
                "originalPrice": product.price,
                "discountedPrice": round(discounted_price(product.price, outcome.discount_percent), 2),
            }
            result["message"] = (
                f"Great! I've approved a {outcome.discount_percent}% discount. "
                f"Your coupon code {outcome.coupon_code} has been applied to your cart."
            )
            return result

        if outcome.penalty_coupon_code:
            self._set_coupon(outcome.penalty_coupon_code, -outcome.price_increase_percent)
        result["product"] = {"id": product.id, "name": product.name, "price": product.price}
        result["message"] = REFUSAL_MESSAGES.get(outcome.reason, DEFAULT_REFUSAL).format(
            increase=outcome.price_increase_percent
        )
        return result

    # ------------------------------------------------------------------
    # Navigation and recommendations

    @store_operation
    def navigate_to(self, page, product_id=None) -> dict:
        if page not in PAGES:
            raise ValidationError(f"Invalid page. Must be one of: {', '.join(PAGES)}")
        if product_id is not None:
            product_id = self.get_product(product_id).id
            self._mark_viewed(product_id)
        self.current_page = page
        self.current_product_id = product_id
        return {"success": True, "page": page, "productId": product_id}

    @store_operation
    def navigate_to_product(self, product_id) -> dict:
        product = self.get_product(product_id)
        self.current_page = "product"
        self.current_product_id = product.id
        self._mark_viewed(product.id)
        return {"success": True, "product": product, "message": f"Navigating to {product.name}"}

    def _mark_viewed(self, product_id: int):
        if product_id in self.recently_viewed:
            self.recently_viewed.remove(product_id)
        self.recently_viewed.append(product_id)
        del self.recently_viewed[:-RECENTLY_VIEWED_LIMIT]

    @store_operation
    def recommend_products(self, limit: int = MAX_RECOMMENDATIONS) -> dict:
        seeds = [self._by_id[pid] for pid in reversed(self.recently_viewed) if pid in self._by_id]
        seeds.extend(line.product for line in self.cart)
        picks = recommend(self.products, seeds, limit=min(limit, MAX_RECOMMENDATIONS))
        self.recommended_products = picks
        return {
            "success": True,
            "count": len(picks),
            "products": list(picks),
            "message": "Recommendations generated",
        }

    # ------------------------------------------------------------------
    # Persistence and serialization

    def _persist(self):
        try:
            self.storage.set(CART_KEY, [
                {"productId": line.product.id, "quantity": line.quantity} for line in self.cart
            ])
            if self.applied_coupon:
                self.storage.set(COUPON_KEY, self.applied_coupon.to_dict())
            else:
                self.storage.remove(COUPON_KEY)
        except Exception as e:
            logger.warning(f"Failed to persist cart/coupon: {e}")

    def _restore(self):
        try:
            saved_cart = self.storage.get(CART_KEY) or []
            saved_coupon = self.storage.get(COUPON_KEY)
        except Exception as e:
            logger.warning(f"Failed to restore cart/coupon: {e}")
            return

        for entry in saved_cart if isinstance(saved_cart, list) else []:
            if not isinstance(entry, dict):
                continue
            product_id = entry.get("productId")
            valid_id = isinstance(product_id, int) and not isinstance(product_id, bool)
            product = self._by_id.get(product_id) if valid_id else None
            quantity = entry.get("quantity")
            if product is None or isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
                logger.warning(f"Dropping unusable saved cart entry: {entry}")
                continue
            line = self._cart_line(product.id)
            if line:
                line.quantity += quantity
            else:
                self.cart.append(CartLine(product=product, quantity=quantity))

        if isinstance(saved_coupon, dict):
            code = saved_coupon.get("code")
            percent = saved_coupon.get("discountPercent")
            if isinstance(code, str) and isinstance(percent, (int, float)) and not isinstance(percent, bool) \
                    and -100 <= percent <= 100:
                self.applied_coupon = Coupon(code=code, discount_percent=percent)

    def snapshot(self) -> dict:
        """JSON-ready view of the whole session state."""
        return {
            "visibleProducts": [p.model_dump(mode="json") for p in self.visible_products],
            "activeCategory": self.active_category,
            "sortOrder": self.sort_order,
            "cartItems": [line.to_dict() for line in self.cart],
            "cartItemCount": self.cart_item_count,
            "cartTotal": self.cart_total(),
            "appliedCoupon": self.applied_coupon.to_dict() if self.applied_coupon else None,
            "currentPage": self.current_page,
            "currentProductId": self.current_product_id,
            "negotiationHistory": [record.to_dict() for record in self.negotiation_history],
            "recommendedProducts": [p.model_dump(mode="json") for p in self.recommended_products],
        }
