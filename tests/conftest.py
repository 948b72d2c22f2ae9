"""Shared fixtures: a small catalog, deterministic random sources and stores."""

import random

import pytest

from catalog.loader import build_catalog
from store.persistence import InMemoryKeyValueStore
from store.state import StoreStateMachine

CATALOG_ROWS = [
    {"id": 1, "name": "Blue Jacket", "description": "Warm quilted jacket for autumn walks.",
     "category": "clothing", "price": 100, "bottom_price": 80, "rating": 4.5, "colors": ["blue", "navy"]},
    {"id": 2, "name": "Leather Wallet", "description": "Slim bifold wallet.",
     "category": "accessories", "price": 40, "bottom_price": 30, "rating": 4.2, "colors": ["brown"]},
    {"id": 3, "name": "Running Shoes", "description": "Lightweight trainers for road running.",
     "category": "footwear", "price": 120, "bottom_price": 100, "rating": 4.7, "colors": ["black", "white"]},
    {"id": 4, "name": "Wool Beanie", "description": "Ribbed knit hat.",
     "category": "accessories", "price": 20, "bottom_price": 20, "rating": 4.0, "colors": ["grey"]},
    {"id": 5, "name": "Silk Scarf", "description": "Printed silk scarf.",
     "category": "accessories", "price": 60, "bottom_price": 45, "rating": 3.9, "colors": ["red"]},
    {"id": 6, "name": "Linen Shirt", "description": "Breathable summer shirt.",
     "category": "clothing", "price": 55, "bottom_price": 44, "rating": 4.1, "colors": ["white"]},
]


class FixedRandom(random.Random):
    """Always draws the low or high end of a randint range."""

    def __init__(self, pick: str = "high"):
        super().__init__(0)
        self.pick = pick

    def randint(self, a, b):
        return b if self.pick == "high" else a


@pytest.fixture
def products():
    return build_catalog(CATALOG_ROWS)


@pytest.fixture
def jacket(products):
    return products[0]


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def storage():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(products, storage, rng):
    return StoreStateMachine(products, storage=storage, rng=rng)


@pytest.fixture
def high_rng():
    return FixedRandom("high")


@pytest.fixture
def low_rng():
    return FixedRandom("low")
