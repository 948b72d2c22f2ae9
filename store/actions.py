"""
Server-side handlers for the assistant's function calls.

These only validate a proposed call against the catalog and describe what it
would do; the session's StoreStateMachine applies the call afterwards. The
returned dicts are JSON-ready, they are sent back to the chat model as
function results.
"""

import logging
from typing import Optional, Sequence

from catalog.models import Product
from core.errors import NotFoundError, StoreError, ValidationError
from negotiation.calculator import LOWBALL_OFFER, NO_REASON, RUDE_BEHAVIOR
from negotiation.classifier import classify
from search.engine import DEFAULT_RESULT_LIMIT, SearchEngine
from store.commands import CommandName, UnknownCommandError, parse_command

logger = logging.getLogger(__name__)


class StoreActions:
    def __init__(self, products: Sequence[Product], search_limit: int = DEFAULT_RESULT_LIMIT):
        self.products = tuple(products)
        self._by_id = {p.id: p for p in self.products}
        self.search_engine = SearchEngine(self.products, limit=search_limit)
        self._handlers = {
            CommandName.ADD_TO_CART: self._add_to_cart,
            CommandName.REMOVE_FROM_CART: self._remove_from_cart,
            CommandName.SORT_PRODUCTS: self._sort_products,
            CommandName.FILTER_CATEGORY: self._filter_category,
            CommandName.NAVIGATE_TO_PRODUCT: self._navigate_to_product,
            CommandName.APPLY_COUPON: self._apply_coupon,
            CommandName.SEARCH_PRODUCTS: self._search_products,
            CommandName.NEGOTIATE_DISCOUNT: self._negotiate_discount,
            CommandName.RECOMMEND_PRODUCTS: self._recommend_products,
        }

    def execute(self, name: str, params: Optional[dict] = None) -> dict:
        """Validate and describe one function call. Never raises."""
        try:
            command = parse_command(name, params)
            return self._handlers[command.name](command.args)
        except UnknownCommandError:
            logger.warning(f"Assistant proposed unknown function '{name}'")
            return {"success": False, "error": f"Unknown function: {name}"}
        except StoreError as e:
            return {"success": False, "error": str(e)}

    def _product(self, product_id: int) -> Product:
        product = self._by_id.get(product_id)
        if product is None:
            raise NotFoundError(
                f"Product with ID {product_id} not found in inventory. "
                "Please use searchProducts() first to find the correct product ID."
            )
        return product

    def _add_to_cart(self, args) -> dict:
        product = self._product(args.productId)
        return {
            "success": True,
            "action": CommandName.ADD_TO_CART.value,
            "productId": product.id,
            "product": product.summary(),
            "message": f"Ready to add {product.name} (ID: {product.id}, Category: {product.category}) to cart",
        }

    def _remove_from_cart(self, args) -> dict:
        product = self._product(args.productId)
        return {
            "success": True,
            "action": CommandName.REMOVE_FROM_CART.value,
            "productId": product.id,
            "product": product.summary(),
            "message": f"Removed {product.name} from cart",
        }

    def _sort_products(self, args) -> dict:
        order_text = "lowest to highest" if args.order == "asc" else "highest to lowest"
        return {
            "success": True,
            "action": CommandName.SORT_PRODUCTS.value,
            "order": args.order,
            "message": f"Products sorted by price ({order_text})",
        }

    def _filter_category(self, args) -> dict:
        category = args.category.lower().strip()
        filtered = [p for p in self.products if p.category.lower() == category]
        if not filtered:
            raise NotFoundError(f'No products found in category "{args.category}"')
        plural = "" if len(filtered) == 1 else "s"
        return {
            "success": True,
            "action": CommandName.FILTER_CATEGORY.value,
            "category": category,
            "count": len(filtered),
            "products": [p.model_dump(mode="json") for p in filtered],
            "message": f"Found {len(filtered)} product{plural} in {category}",
        }

    def _navigate_to_product(self, args) -> dict:
        product = self._product(args.productId)
        return {
            "success": True,
            "action": CommandName.NAVIGATE_TO_PRODUCT.value,
            "productId": product.id,
            "product": product.model_dump(mode="json"),
            "message": f"Navigating to {product.name}",
        }

    def _apply_coupon(self, args) -> dict:
        code = args.code.strip().upper()
        if not code:
            raise ValidationError("Invalid coupon code")
        return {
            "success": True,
            "action": CommandName.APPLY_COUPON.value,
            "code": code,
            "discountPercent": args.discountPercent,
            "message": f"Coupon {code} applied: {args.discountPercent}% off",
        }

    def _search_products(self, args) -> dict:
        result = self.search_engine.search(args.query)
        if not result["success"]:
            raise ValidationError(result["error"])
        return {
            **result,
            "action": CommandName.SEARCH_PRODUCTS.value,
            "products": [p.model_dump(mode="json") for p in result["products"]],
        }

    def _negotiate_discount(self, args) -> dict:
        if not args.request.strip():
            raise ValidationError("Invalid negotiation request")
        product = None
        if isinstance(args.productId, int):
            product = self._product(args.productId)
        elif isinstance(args.productId, str):
            ranked = self.search_engine.rank_names(args.productId)
            if not ranked:
                raise NotFoundError(f'No product matches "{args.productId}"')
            product = ranked[0][1]

        # Outcome amounts are drawn when the store applies the call; only the class is known here
        classification = classify(args.request)
        if classification.is_rude:
            assessment = RUDE_BEHAVIOR
        elif classification.is_lowball:
            assessment = LOWBALL_OFFER
        elif classification.reason_score > 0:
            assessment = f"likely_approved:{classification.reason_type}"
        else:
            assessment = NO_REASON

        return {
            "success": True,
            "action": CommandName.NEGOTIATE_DISCOUNT.value,
            "request": args.request,
            "productId": product.id if product else None,
            "assessment": assessment,
            "message": "Negotiation request received; the outcome is applied to the shopper's cart",
        }

    def _recommend_products(self, args) -> dict:
        return {
            "success": True,
            "action": CommandName.RECOMMEND_PRODUCTS.value,
            "message": "Recommendations generated",
        }
