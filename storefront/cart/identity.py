"""Identity keys for cart line items.

Two line items are the same purchasable configuration when they share an
identity key. Choices are sorted by variant id before joining, so the
order in which the shopper picked options does not matter.

Ids are joined without escaping. A product id that itself contains
"__" (or variant/option ids containing ":" or "|") can produce the same
key as a different configuration, e.g. identity_key("p__size:lg") ==
identity_key("p", [size=lg]). Catalog ids are slugs, so this is a known
limitation rather than a handled case.
"""
from typing import Iterable, Optional

KEY_SEPARATOR = "__"
CHOICE_SEPARATOR = "|"


def identity_key(product_id: str, selected_variants: Optional[Iterable] = None) -> str:
    """
    Canonical key for a product plus its selected variant choices.

    Args:
        product_id: Catalog product id
        selected_variants: VariantChoice objects (anything with variant_id
            and option_id attributes), or None

    Returns:
        product_id verbatim when nothing is selected, otherwise
        "{product_id}__{variant}:{option}|{variant}:{option}..."
    """
    choices = list(selected_variants or [])
    if not choices:
        return product_id

    variant_key = CHOICE_SEPARATOR.join(
        f"{choice.variant_id}:{choice.option_id}"
        for choice in sorted(choices, key=lambda c: c.variant_id)
    )
    return f"{product_id}{KEY_SEPARATOR}{variant_key}"
