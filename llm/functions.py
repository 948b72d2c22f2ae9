"""Function menu offered to the chat model, in OpenAI tool format."""

from store.commands import CommandName

_PRODUCT_ID = {
    "type": "integer",
    "description": "The unique ID of the product",
}

STORE_FUNCTIONS = [
    {
        "name": CommandName.ADD_TO_CART.value,
        "description": "Add a product to the shopping cart by product ID. Use this when the user wants to buy or add an item to their cart.",
        "parameters": {
            "type": "object",
            "properties": {"productId": _PRODUCT_ID},
            "required": ["productId"],
        },
    },
    {
        "name": CommandName.REMOVE_FROM_CART.value,
        "description": "Remove a product from the shopping cart by product ID.",
        "parameters": {
            "type": "object",
            "properties": {"productId": _PRODUCT_ID},
            "required": ["productId"],
        },
    },
    {
        "name": CommandName.SORT_PRODUCTS.value,
        "description": "Sort visible products by price. Use this when the user asks for cheaper or more expensive options.",
        "parameters": {
            "type": "object",
            "properties": {
                "order": {
                    "type": "string",
                    "enum": ["asc", "desc"],
                    "description": '"asc" for cheapest first, "desc" for most expensive first',
                },
            },
            "required": ["order"],
        },
    },
    {
        "name": CommandName.FILTER_CATEGORY.value,
        "description": 'Filter products by category such as "clothing", "bags", "footwear" or "accessories".',
        "parameters": {
            "type": "object",
            "properties": {
                "category": {"type": "string", "description": "The category name to filter by"},
            },
            "required": ["category"],
        },
    },
    {
        "name": CommandName.NAVIGATE_TO_PRODUCT.value,
        "description": "Open the detail page of a product. Use this when the user wants details about a specific product.",
        "parameters": {
            "type": "object",
            "properties": {"productId": _PRODUCT_ID},
            "required": ["productId"],
        },
    },
    {
        "name": CommandName.APPLY_COUPON.value,
        "description": "Apply a coupon code the user already has. Do not use this for negotiated discounts.",
        "parameters": {
            "type": "object",
            "properties": {
                "code": {"type": "string", "description": 'The coupon code, e.g. "SUMMER-15"'},
                "discountPercent": {
                    "type": "number",
                    "description": "The discount percentage (0-100)",
                    "minimum": 0,
                    "maximum": 100,
                },
            },
            "required": ["code", "discountPercent"],
        },
    },
    {
        "name": CommandName.SEARCH_PRODUCTS.value,
        "description": "Search products across names, descriptions, categories and colors. Use this for specific products, styles, occasions or features, and to find product IDs.",
        "parameters": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": 'What the user is looking for, e.g. "summer wedding outfit", "leather bag", "blue shirt"',
                },
            },
            "required": ["query"],
        },
    },
    {
        "name": CommandName.NEGOTIATE_DISCOUNT.value,
        "description": (
            "Negotiate a discount (Haggle Mode). Use this when the user asks for a discount or lower price, "
            "or mentions a reason like a birthday, buying several items or being a student. "
            "Good reasons get 15-25%, neutral reasons 5-10%, lowball offers are refused and rude requests "
            "are refused with a price increase. The outcome is applied to the cart automatically."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "request": {
                    "type": "string",
                    "description": "The customer's discount request in their own words",
                },
                "productId": {
                    "type": "integer",
                    "description": "Optional product ID. Defaults to the first cart item or the product being viewed.",
                },
            },
            "required": ["request"],
        },
    },
]


def get_store_tools() -> list[dict]:
    return [{"type": "function", "function": spec} for spec in STORE_FUNCTIONS]
