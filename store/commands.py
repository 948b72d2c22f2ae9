"""
Commands the chat assistant can issue against a store.

A proposed call (function name + loose argument object) is parsed into a
Command: a CommandName plus a typed argument model. Unknown names are not an
error, they are skipped with a warning.

The assistant may chain calls within one turn (search, then add to cart). A
chain arrives newest-first through ``previousFunction`` links and is applied
oldest-first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator
from pydantic import ValidationError as SchemaValidationError

from core.errors import ValidationError

logger = logging.getLogger(__name__)

MAX_CHAIN_DEPTH = 16


class CommandName(str, Enum):
    ADD_TO_CART = "addToCart"
    REMOVE_FROM_CART = "removeFromCart"
    SORT_PRODUCTS = "sortProducts"
    FILTER_CATEGORY = "filterCategory"
    NAVIGATE_TO_PRODUCT = "navigateToProduct"
    APPLY_COUPON = "applyCoupon"
    SEARCH_PRODUCTS = "searchProducts"
    NEGOTIATE_DISCOUNT = "negotiateDiscount"
    RECOMMEND_PRODUCTS = "recommendProducts"


def _integral_float(value):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


ProductId = Annotated[StrictInt, BeforeValidator(_integral_float), Field(ge=1)]


class CommandArgs(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class ProductArgs(CommandArgs):
    productId: ProductId


class SortArgs(CommandArgs):
    order: Literal["asc", "desc"]


class CategoryArgs(CommandArgs):
    category: StrictStr = Field(..., min_length=1)


class CouponArgs(CommandArgs):
    code: StrictStr = Field(..., min_length=1)
    discountPercent: Union[StrictInt, StrictFloat]

    @field_validator("discountPercent")
    @classmethod
    def _percent_in_range(cls, value):
        if not 0 <= value <= 100:
            raise ValueError("discountPercent must be between 0 and 100")
        return value


class SearchArgs(CommandArgs):
    query: StrictStr = Field(..., min_length=1)


class NegotiateArgs(CommandArgs):
    request: StrictStr = Field(..., min_length=1)
    # An id, or a loose name reference resolved against product names
    productId: Optional[Union[ProductId, StrictStr]] = None


class NoArgs(CommandArgs):
    pass


ARGUMENT_MODELS: dict[CommandName, type[CommandArgs]] = {
    CommandName.ADD_TO_CART: ProductArgs,
    CommandName.REMOVE_FROM_CART: ProductArgs,
    CommandName.SORT_PRODUCTS: SortArgs,
    CommandName.FILTER_CATEGORY: CategoryArgs,
    CommandName.NAVIGATE_TO_PRODUCT: ProductArgs,
    CommandName.APPLY_COUPON: CouponArgs,
    CommandName.SEARCH_PRODUCTS: SearchArgs,
    CommandName.NEGOTIATE_DISCOUNT: NegotiateArgs,
    CommandName.RECOMMEND_PRODUCTS: NoArgs,
}


class UnknownCommandError(Exception):
    pass


@dataclass(frozen=True)
class Command:
    name: CommandName
    args: CommandArgs


class ExecutedFunction(BaseModel):
    """A function call the assistant made, linked to the call before it."""

    name: str
    params: dict[str, Any] = Field(default_factory=dict)
    previousFunction: Optional[ExecutedFunction] = None


def _describe(error: SchemaValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "arguments"
    return f"Invalid {field}: {first['msg']}"


def parse_command(name: str, params: Optional[dict]) -> Command:
    try:
        command_name = CommandName(name)
    except ValueError:
        raise UnknownCommandError(name) from None
    if params is not None and not isinstance(params, dict):
        raise ValidationError("Function arguments must be an object")
    try:
        args = ARGUMENT_MODELS[command_name].model_validate(params or {})
    except SchemaValidationError as e:
        raise ValidationError(_describe(e)) from e
    return Command(command_name, args)


def flatten_chain(executed: Optional[ExecutedFunction], max_depth: int = MAX_CHAIN_DEPTH) -> list[ExecutedFunction]:
    """Return the calls of a chain oldest-first."""
    steps = []
    node = executed
    while node is not None:
        if len(steps) >= max_depth:
            raise ValidationError(f"Function chain is deeper than {max_depth} calls")
        steps.append(node)
        node = node.previousFunction
    steps.reverse()
    return steps


def link_chain(calls: list[tuple[str, dict]]) -> Optional[ExecutedFunction]:
    """Build a previousFunction chain from (name, params) pairs given oldest-first."""
    chain = None
    for name, params in calls:
        chain = ExecutedFunction(name=name, params=params, previousFunction=chain)
    return chain


_DISPATCH: dict[CommandName, Callable[[Any, Any], dict]] = {
    CommandName.ADD_TO_CART: lambda store, a: store.add_to_cart(a.productId),
    CommandName.REMOVE_FROM_CART: lambda store, a: store.remove_from_cart(a.productId),
    CommandName.SORT_PRODUCTS: lambda store, a: store.sort_products(a.order),
    CommandName.FILTER_CATEGORY: lambda store, a: store.filter_category(a.category),
    CommandName.NAVIGATE_TO_PRODUCT: lambda store, a: store.navigate_to_product(a.productId),
    CommandName.APPLY_COUPON: lambda store, a: store.apply_coupon(a.code, a.discountPercent),
    CommandName.SEARCH_PRODUCTS: lambda store, a: store.search_products(a.query),
    CommandName.NEGOTIATE_DISCOUNT: lambda store, a: store.negotiate_discount(a.request, a.productId),
    CommandName.RECOMMEND_PRODUCTS: lambda store, a: store.recommend_products(),
}


class CommandExecutor:
    """Applies assistant commands to a StoreStateMachine."""

    def __init__(self, store):
        self.store = store

    def execute(self, name: str, params: Optional[dict] = None) -> dict:
        try:
            command = parse_command(name, params)
        except UnknownCommandError:
            logger.warning(f"Unknown function '{name}' ignored")
            return {"success": False, "skipped": True, "error": f"Unknown function: {name}"}
        except ValidationError as e:
            logger.info(f"Rejected {name} call: {e}")
            return {"success": False, "error": str(e)}

        logger.info(f"Executing {command.name.value} with {command.args.model_dump()}")
        return _DISPATCH[command.name](self.store, command.args)

    def execute_chain(self, executed: Optional[ExecutedFunction]) -> list[dict]:
        try:
            steps = flatten_chain(executed)
        except ValidationError as e:
            logger.warning(f"Refusing function chain: {e}")
            return [{"success": False, "error": str(e)}]
        return [self.execute(step.name, step.params) for step in steps]
