import json
import logging
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError as SchemaValidationError

from catalog.models import Product

logger = logging.getLogger(__name__)


def build_catalog(records: Iterable[dict]) -> tuple[Product, ...]:
    """
    Validate raw product records into an immutable catalog.

    Invalid rows and duplicate ids are skipped with a warning; the first
    occurrence of an id wins.
    """
    products = []
    seen_ids = set()
    for index, record in enumerate(records):
        try:
            product = Product.model_validate(record)
        except SchemaValidationError as e:
            logger.warning(f"Skipping invalid catalog row {index}: {e.errors()[0]['msg']}")
            continue
        if product.id in seen_ids:
            logger.warning(f"Skipping duplicate product id {product.id} at row {index}")
            continue
        seen_ids.add(product.id)
        products.append(product)
    return tuple(products)


def load_catalog(path: Path) -> tuple[Product, ...]:
    """Load the static catalog JSON file (a list of product objects)."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("products", [])
    catalog = build_catalog(data)
    logger.info(f"Loaded {len(catalog)} products from {path}")
    return catalog
