"""
Storefront Cart Module

This package contains the shopping cart core:
- cart: line items, identity keys, pricing, the cart store and its persistence
- catalog: product structures consumed at add-to-cart time
- db: key-value backends (memory, file, Upstash Redis)
- services.money: Decimal helpers for monetary values

Note: Imports are lazy so that importing the package does not touch
storage backends or read configuration.
"""

__all__ = [
    "get_cart_store",
    "get_key_value_store",
]


def __getattr__(name):
    """Lazy attribute access."""
    if name == "get_cart_store":
        from storefront.cart.service import get_cart_store
        return get_cart_store
    if name == "get_key_value_store":
        from storefront.db import get_key_value_store
        return get_key_value_store
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
