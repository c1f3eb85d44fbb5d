"""Catalog Models - product structures read by the cart at add time.

The catalog itself lives elsewhere; these models only describe the shape
the cart snapshots from. Both camelCase (storefront JSON) and snake_case
field names are accepted.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from storefront.services.money import to_decimal as _to_decimal


class ProductVariantOption(BaseModel):
    """A single option of a variant axis, e.g. "Small" for Size."""
    id: str
    label: str
    value: Optional[str] = None
    price_modifier: Optional[Decimal] = Field(default=None, alias="priceModifier")
    in_stock: bool = Field(default=True, alias="inStock")

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("price_modifier", mode="before")
    @classmethod
    def convert_modifier_to_decimal(cls, v):
        if v is None:
            return None
        return _to_decimal(v)


class ProductVariant(BaseModel):
    """A variant axis, e.g. Size or Color."""
    id: str
    name: str
    options: list[ProductVariantOption] = []

    class Config:
        extra = "ignore"
        populate_by_name = True

    def find_option(self, option_id: str) -> Optional[ProductVariantOption]:
        return next((o for o in self.options if o.id == option_id), None)


class Product(BaseModel):
    """Product as supplied by the catalog."""
    id: str
    name: str
    slug: str
    price: Decimal
    images: list[str] = []
    product_type: Literal["physical", "digital"] = Field(default="physical", alias="productType")
    compare_at_price: Optional[Decimal] = Field(default=None, alias="compareAtPrice")
    variants: list[ProductVariant] = []

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("compare_at_price", mode="before")
    @classmethod
    def convert_compare_at_to_decimal(cls, v):
        if v is None:
            return None
        return _to_decimal(v)

    @field_validator("variants", mode="before")
    @classmethod
    def none_variants_to_empty(cls, v):
        return v or []

    def primary_image(self, placeholder: str) -> str:
        """First image, or the placeholder when the product has none."""
        if self.images and self.images[0]:
            return self.images[0]
        return placeholder

    def find_variant(self, variant_id: str) -> Optional[ProductVariant]:
        return next((v for v in self.variants if v.id == variant_id), None)

    def find_option(self, variant_id: str, option_id: str) -> Optional[ProductVariantOption]:
        variant = self.find_variant(variant_id)
        if variant is None:
            return None
        return variant.find_option(option_id)

    @property
    def discount_percent(self) -> int:
        """Whole-percent saving against compare-at price, 0 when not on sale."""
        if not self.compare_at_price or self.compare_at_price <= self.price:
            return 0
        saving = (Decimal("1") - self.price / self.compare_at_price) * 100
        return int(saving.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
