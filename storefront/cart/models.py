"""Cart models with Decimal-based pricing.

Serialized field names are camelCase so a cart written by the storefront
front end stays readable here and vice versa.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Literal

from storefront.services.money import to_decimal, to_float, divide

from .identity import identity_key as _identity_key

ProductType = Literal["physical", "digital"]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class VariantChoice:
    """One selected option for one variant axis (e.g. Size -> Small)."""
    variant_id: str
    option_id: str
    name: str = ""
    value: str = ""

    def to_dict(self) -> dict:
        return {
            "variantId": self.variant_id,
            "optionId": self.option_id,
            "name": self.name,
            "value": self.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "VariantChoice":
        return cls(
            variant_id=str(data["variantId"]),
            option_id=str(data["optionId"]),
            name=data.get("name", ""),
            value=data.get("value", ""),
        )


@dataclass
class LineItem:
    """One distinct purchasable configuration in the cart."""
    product_id: str
    product_name: str
    product_slug: str
    product_image: str
    product_type: ProductType
    base_price: Decimal
    selected_variants: List[VariantChoice]
    quantity: int
    total_price: Decimal

    def __post_init__(self):
        self.base_price = to_decimal(self.base_price)
        self.total_price = to_decimal(self.total_price)
        self.selected_variants = list(self.selected_variants or [])

    @property
    def unit_price(self) -> Decimal:
        """Unit price as stored on the item (total / quantity)."""
        return divide(self.total_price, self.quantity)

    @property
    def identity_key(self) -> str:
        return _identity_key(self.product_id, self.selected_variants)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "productSlug": self.product_slug,
            "productImage": self.product_image,
            "productType": self.product_type,
            "basePrice": to_float(self.base_price),
            "selectedVariants": [v.to_dict() for v in self.selected_variants],
            "quantity": self.quantity,
            "totalPrice": to_float(self.total_price),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """Create from dictionary. Missing selectedVariants means none."""
        variants = data.get("selectedVariants") or []
        return cls(
            product_id=str(data["productId"]),
            product_name=data.get("productName", ""),
            product_slug=data.get("productSlug", ""),
            product_image=data.get("productImage", ""),
            product_type=data.get("productType", "physical"),
            base_price=to_decimal(data.get("basePrice")),
            selected_variants=[VariantChoice.from_dict(v) for v in variants],
            quantity=int(data["quantity"]),
            total_price=to_decimal(data["totalPrice"]),
        )


@dataclass
class CartState:
    """Snapshot of the whole cart. Replaced, not edited, on every mutation."""
    items: List[LineItem] = field(default_factory=list)
    item_count: int = 0
    subtotal: Decimal = Decimal("0")
    last_updated: str = ""

    def __post_init__(self):
        if not self.last_updated:
            self.last_updated = utc_now_iso()
        self.subtotal = to_decimal(self.subtotal)

    @classmethod
    def empty(cls) -> "CartState":
        return cls(items=[], item_count=0, subtotal=Decimal("0"), last_updated=utc_now_iso())

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, key: str) -> Optional[LineItem]:
        """Line item with the given identity key, if any."""
        return next((item for item in self.items if item.identity_key == key), None)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "items": [item.to_dict() for item in self.items],
            "itemCount": self.item_count,
            "subtotal": to_float(self.subtotal),
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartState":
        """
        Create from dictionary.

        Aggregates are recomputed from the items rather than trusted, so a
        hand-edited or stale payload cannot break the count/subtotal
        invariants.
        """
        from .pricing import recompute_aggregates

        items = [LineItem.from_dict(item) for item in data["items"]]
        totals = recompute_aggregates(items)
        return cls(
            items=items,
            item_count=totals.item_count,
            subtotal=totals.subtotal,
            last_updated=data.get("lastUpdated") or utc_now_iso(),
        )
