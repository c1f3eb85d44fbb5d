"""Display helpers for cart consumers (item list, summary, badge, toasts).

Everything here reads aggregates off CartState; nothing recomputes them.
"""
from typing import Optional

from storefront.config import CartConfig
from storefront.services.money import format_money

from .models import CartState, LineItem
from .service import CartEvent, CartEventType

VARIANT_SEPARATOR = " / "
BADGE_LIMIT = 99

SHIPPING_MESSAGE = "Calculated at checkout"
TAX_MESSAGE = "Calculated at checkout"
CHECKOUT_DISABLED_MESSAGE = "Checkout coming soon"

PRODUCT_TYPE_BADGES = {
    "digital": "Digital Download",
    "physical": "Physical Item",
}

NOTIFICATIONS = {
    CartEventType.ITEM_ADDED: ("Added to cart", "{product} has been added to your cart."),
    CartEventType.ITEM_REMOVED: ("Removed from cart", "{product} has been removed from your cart."),
    CartEventType.ITEM_UPDATED: ("Cart updated", "Quantity updated for {product}."),
    CartEventType.CART_CLEARED: ("Cart cleared", "All items have been removed from your cart."),
}


def format_price(value, config: Optional[CartConfig] = None) -> str:
    currency = config.currency if config else "USD"
    return format_money(value, currency)


def variant_label(item: LineItem) -> str:
    """Selected option values, e.g. "Large / Walnut"."""
    return VARIANT_SEPARATOR.join(v.value for v in item.selected_variants if v.value)


def item_count_label(count: int) -> str:
    return f"{count} {'item' if count == 1 else 'items'}"


def badge_label(cart: CartState, is_hydrated: bool = True) -> Optional[str]:
    """Cart icon badge text; None hides the badge."""
    if not is_hydrated or cart.item_count <= 0:
        return None
    if cart.item_count > BADGE_LIMIT:
        return f"{BADGE_LIMIT}+"
    return str(cart.item_count)


def product_url(slug: str) -> str:
    return f"/shop/{slug}"


def line_item_view(item: LineItem, config: Optional[CartConfig] = None) -> dict:
    """One row of the cart item list."""
    config = config or CartConfig()
    return {
        "key": item.identity_key,
        "product_id": item.product_id,
        "product_name": item.product_name,
        "product_url": product_url(item.product_slug),
        "product_image": item.product_image or config.placeholder_image,
        "product_type_badge": PRODUCT_TYPE_BADGES.get(item.product_type, ""),
        "variant_label": variant_label(item),
        "quantity": item.quantity,
        "unit_price": format_price(item.unit_price, config),
        "total_price": format_price(item.total_price, config),
        "can_decrement": item.quantity > config.min_quantity_per_item,
        "can_increment": item.quantity < config.max_quantity_per_item,
    }


def cart_summary(cart: CartState, config: Optional[CartConfig] = None) -> dict:
    """Order summary panel. Shipping and tax are left to checkout."""
    config = config or CartConfig()
    return {
        "is_empty": cart.is_empty,
        "item_count": cart.item_count,
        "item_count_label": item_count_label(cart.item_count),
        "items": [line_item_view(item, config) for item in cart.items],
        "subtotal": format_price(cart.subtotal, config),
        "shipping": SHIPPING_MESSAGE,
        "tax": TAX_MESSAGE,
        "total": format_price(cart.subtotal, config),
        "checkout_enabled": False,
        "checkout_message": CHECKOUT_DISABLED_MESSAGE,
    }


def notification_for(event: CartEvent) -> Optional[dict]:
    """Toast title/description for a cart event, None for silent events."""
    template = NOTIFICATIONS.get(event.type)
    if template is None:
        return None
    title, description = template
    return {
        "title": title,
        "description": description.format(product=event.product_name or "Item"),
    }
