"""Cart package: models, pricing, storage, and the cart store."""
from .identity import identity_key
from .models import VariantChoice, LineItem, CartState
from .pricing import CartTotals, unit_price, line_total, recompute_aggregates
from .storage import CartStorage
from .service import (
    CartEvent,
    CartEventType,
    CartStore,
    HydrationState,
    get_cart_store,
    reset_cart_store,
)

__all__ = [
    "identity_key",
    "VariantChoice",
    "LineItem",
    "CartState",
    "CartTotals",
    "unit_price",
    "line_total",
    "recompute_aggregates",
    "CartStorage",
    "CartEvent",
    "CartEventType",
    "CartStore",
    "HydrationState",
    "get_cart_store",
    "reset_cart_store",
]
