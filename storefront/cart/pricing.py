"""Price calculation for line items and cart totals.

No rounding happens here; amounts are exact Decimals and rounding is a
display concern (see storefront.services.money.format_money).
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from storefront.catalog import ProductVariant
from storefront.services.money import to_decimal, add, multiply

from .models import LineItem


@dataclass(frozen=True)
class CartTotals:
    """Aggregates derived from a list of line items."""
    item_count: int
    subtotal: Decimal


def unit_price(
    base_price,
    selected_variants: Optional[Iterable] = None,
    variant_catalog: Optional[Sequence[ProductVariant]] = None,
) -> Decimal:
    """
    Base price plus the price modifier of every selected option.

    A choice whose variant or option is not in the catalog, or whose
    option has no modifier, contributes zero.
    """
    if not selected_variants or not variant_catalog:
        return to_decimal(base_price)

    variants_by_id = {variant.id: variant for variant in variant_catalog}
    modifiers = []
    for choice in selected_variants:
        variant = variants_by_id.get(choice.variant_id)
        option = variant.find_option(choice.option_id) if variant else None
        if option is not None and option.price_modifier:
            modifiers.append(option.price_modifier)

    return price_with_modifiers(base_price, modifiers)


def price_with_modifiers(base_price, modifiers: Iterable) -> Decimal:
    """Base price plus a plain list of modifier amounts."""
    price = to_decimal(base_price)
    for modifier in modifiers:
        price = add(price, modifier)
    return price


def line_total(price, quantity: int) -> Decimal:
    return multiply(price, quantity)


def stored_unit_price(item: LineItem) -> Decimal:
    """Unit price implied by an item's stored total, independent of the catalog."""
    return item.unit_price


def recompute_aggregates(items: Iterable[LineItem]) -> CartTotals:
    """Fold items into item count and subtotal. Always a full recompute."""
    item_count = 0
    subtotal = Decimal("0")
    for item in items:
        item_count += item.quantity
        subtotal += item.total_price
    return CartTotals(item_count=item_count, subtotal=subtotal)
