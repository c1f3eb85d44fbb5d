"""
Tests for cart models, identity keys and pricing
"""

from decimal import Decimal

from storefront.cart import (
    CartState,
    LineItem,
    VariantChoice,
    identity_key,
    line_total,
    recompute_aggregates,
    unit_price,
)
from storefront.cart.pricing import price_with_modifiers, stored_unit_price
from storefront.catalog import Product


def make_item(product_id="prod-1", quantity=1, total="10", variants=None):
    """Line item with fixed snapshot fields"""
    return LineItem(
        product_id=product_id,
        product_name="Test",
        product_slug="test",
        product_image="/test.jpg",
        product_type="physical",
        base_price=Decimal("10"),
        selected_variants=variants or [],
        quantity=quantity,
        total_price=Decimal(total),
    )


class TestIdentityKey:
    """Tests for identity_key."""

    def test_no_variants_is_product_id(self):
        """Test a product without variants is keyed by its id"""
        assert identity_key("prod-1") == "prod-1"
        assert identity_key("prod-1", []) == "prod-1"

    def test_variants_sorted_by_variant_id(self):
        """Test choices are sorted by variant id before joining"""
        size = VariantChoice("size", "lg", "Size", "Large")
        color = VariantChoice("color", "red", "Color", "Red")

        assert identity_key("p", [size, color]) == "p__color:red|size:lg"
        assert identity_key("p", [size, color]) == identity_key("p", [color, size])

    def test_different_option_gives_different_key(self):
        """Test a different option gives a different key"""
        small = [VariantChoice("size", "sm")]
        large = [VariantChoice("size", "lg")]

        assert identity_key("p", small) != identity_key("p", large)
        assert identity_key("p", small) != identity_key("p")

    def test_display_fields_do_not_affect_key(self):
        """Test display name and value are not part of the key"""
        a = [VariantChoice("size", "lg", "Size", "Large")]
        b = [VariantChoice("size", "lg")]

        assert identity_key("p", a) == identity_key("p", b)

    def test_separator_in_product_id_can_collide(self):
        """Test a product id containing the key separator can match a variant key"""
        # Known limitation: ids are joined without escaping
        choices = [VariantChoice("size", "lg")]

        assert identity_key("p__size:lg") == identity_key("p", choices)


class TestPricing:
    """Tests for unit price and aggregate calculation."""

    def test_unit_price_adds_modifiers(self, variant_product):
        """Test unit price adds every selected modifier"""
        product = Product.model_validate(variant_product)
        choices = [VariantChoice("size", "lg"), VariantChoice("frame", "oak")]

        assert unit_price(product.price, choices, product.variants) == Decimal("67.5")

    def test_missing_option_contributes_zero(self, variant_product):
        """Test unknown variants and options add nothing"""
        product = Product.model_validate(variant_product)
        choices = [VariantChoice("size", "xxl"), VariantChoice("engraving", "yes")]

        assert unit_price(product.price, choices, product.variants) == Decimal("50")

    def test_option_without_modifier_contributes_zero(self, variant_product):
        """Test an option without a modifier adds nothing"""
        product = Product.model_validate(variant_product)

        assert unit_price(product.price, [VariantChoice("size", "sm")], product.variants) == 50

    def test_no_catalog(self):
        """Test unit price without a variant catalog is the base price"""
        assert unit_price(10, [VariantChoice("size", "lg")], None) == 10
        assert unit_price("19.99") == Decimal("19.99")

    def test_fractional_result_not_rounded(self):
        """Test line totals are not rounded"""
        assert line_total(Decimal("0.333"), 3) == Decimal("0.999")

    def test_price_with_modifiers(self):
        """Test base price plus a plain list of modifiers"""
        assert price_with_modifiers(50, [5, 12.5]) == Decimal("67.5")
        assert price_with_modifiers(50, []) == 50

    def test_stored_unit_price(self):
        """Test the unit price implied by a stored total"""
        item = make_item(quantity=4, total="30")
        assert stored_unit_price(item) == Decimal("7.5")

    def test_recompute_aggregates(self):
        """Test item count and subtotal fold over the items"""
        items = [make_item("a", 2, "20"), make_item("b", 1, "5.5")]
        totals = recompute_aggregates(items)

        assert totals.item_count == 3
        assert totals.subtotal == Decimal("25.5")

    def test_recompute_aggregates_empty(self):
        """Test aggregates of an empty list"""
        totals = recompute_aggregates([])

        assert totals.item_count == 0
        assert totals.subtotal == 0


class TestLineItem:
    """Tests for LineItem dataclass."""

    def test_numeric_fields_normalized(self):
        """Test numeric fields are converted to Decimal"""
        item = LineItem(
            product_id="prod-1",
            product_name="Test",
            product_slug="test",
            product_image="",
            product_type="digital",
            base_price=19.99,
            selected_variants=None,
            quantity=2,
            total_price=39.98,
        )

        assert item.base_price == Decimal("19.99")
        assert item.total_price == Decimal("39.98")
        assert item.selected_variants == []
        assert item.unit_price == Decimal("19.99")

    def test_to_dict_uses_camel_case(self):
        """Test to_dict writes camelCase keys"""
        item = make_item(variants=[VariantChoice("size", "lg", "Size", "Large")])
        data = item.to_dict()

        assert data["productId"] == "prod-1"
        assert data["totalPrice"] == 10.0
        assert data["selectedVariants"] == [
            {"variantId": "size", "optionId": "lg", "name": "Size", "value": "Large"}
        ]

    def test_from_dict_tolerates_missing_variants(self):
        """Test a stored item without selectedVariants has none"""
        data = {
            "productId": "prod-1",
            "productName": "Test",
            "productSlug": "test",
            "productImage": "/x.jpg",
            "productType": "physical",
            "basePrice": 10,
            "quantity": 2,
            "totalPrice": 20,
        }

        item = LineItem.from_dict(data)
        assert item.selected_variants == []
        assert item.identity_key == "prod-1"
        assert item.total_price == 20


class TestCartState:
    """Tests for CartState dataclass."""

    def test_empty_cart(self):
        """Test CartState.empty"""
        cart = CartState.empty()

        assert cart.items == []
        assert cart.item_count == 0
        assert cart.subtotal == 0
        assert cart.last_updated != ""
        assert cart.is_empty

    def test_find_by_identity_key(self):
        """Test find matches on the full identity key"""
        variants = [VariantChoice("size", "lg")]
        cart = CartState(items=[make_item("a"), make_item("b", variants=variants)])

        assert cart.find("a").product_id == "a"
        assert cart.find("b__size:lg").product_id == "b"
        assert cart.find("b") is None

    def test_serialization(self):
        """Test a cart survives to_dict and from_dict"""
        items = [make_item("a", 2, "20"), make_item("b", 1, "5.5", [VariantChoice("size", "lg", "Size", "Large")])]
        totals = recompute_aggregates(items)
        cart = CartState(items=items, item_count=totals.item_count, subtotal=totals.subtotal)

        data = cart.to_dict()
        assert data["itemCount"] == 3
        assert data["subtotal"] == 25.5
        assert data["lastUpdated"] == cart.last_updated

        restored = CartState.from_dict(data)
        assert restored == cart

    def test_from_dict_recomputes_aggregates(self):
        """Test stored aggregates are recomputed, not trusted"""
        data = CartState(items=[make_item("a", 2, "20")], item_count=2, subtotal=Decimal("20")).to_dict()
        data["itemCount"] = 999
        data["subtotal"] = -1

        restored = CartState.from_dict(data)
        assert restored.item_count == 2
        assert restored.subtotal == 20
