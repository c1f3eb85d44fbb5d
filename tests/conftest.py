"""Pytest configuration and fixtures"""
import os
import pytest

# Set test environment variables
os.environ.setdefault("CART_STORAGE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from storefront.cart import CartStorage, CartStore, reset_cart_store
from storefront.config import CartConfig
from storefront.db import MemoryKeyValueStore


@pytest.fixture(autouse=True)
def _reset_singleton():
    reset_cart_store()
    yield
    reset_cart_store()


@pytest.fixture
def config():
    """Default cart configuration"""
    return CartConfig(storage_backend="memory")


@pytest.fixture
def sample_product():
    """Plain product without variants"""
    return {
        "id": "A",
        "name": "Engraved Memory Box",
        "slug": "engraved-memory-box",
        "price": 10,
        "images": ["/products/memory-box.jpg"],
        "productType": "physical",
    }


@pytest.fixture
def variant_product():
    """Product with two variant axes"""
    return {
        "id": "B",
        "name": "Custom Portrait",
        "slug": "custom-portrait",
        "price": 50,
        "images": [],
        "productType": "physical",
        "compareAtPrice": 65,
        "variants": [
            {
                "id": "size",
                "name": "Size",
                "options": [
                    {"id": "sm", "label": "Small", "inStock": True},
                    {"id": "lg", "label": "Large", "priceModifier": 5, "inStock": True},
                ],
            },
            {
                "id": "frame",
                "name": "Frame",
                "options": [
                    {"id": "none", "label": "No Frame", "inStock": True},
                    {"id": "oak", "label": "Oak", "priceModifier": 12.5, "inStock": True},
                ],
            },
        ],
    }


@pytest.fixture
def digital_product():
    """Digital download"""
    return {
        "id": "D",
        "name": "Printable Planner",
        "slug": "printable-planner",
        "price": 19.99,
        "images": ["/products/planner.png"],
        "productType": "digital",
    }


@pytest.fixture
def backend():
    """In-memory key-value backend"""
    return MemoryKeyValueStore()


@pytest.fixture
def storage(backend, config):
    """Cart storage over the in-memory backend"""
    return CartStorage(backend, key=config.storage_key, config=config)


@pytest.fixture
def store(storage, config):
    """Hydrated cart store with an empty backend"""
    cart_store = CartStore(storage, config)
    cart_store.hydrate()
    return cart_store


def assert_cart_invariants(cart):
    """Aggregates match the items and identity keys are unique."""
    assert cart.item_count == sum(item.quantity for item in cart.items)
    assert cart.subtotal == sum(item.total_price for item in cart.items)
    keys = [item.identity_key for item in cart.items]
    assert len(keys) == len(set(keys))
    for item in cart.items:
        assert item.total_price == item.unit_price * item.quantity


@pytest.fixture
def check_invariants():
    """Invariant checker usable from any test"""
    return assert_cart_invariants
