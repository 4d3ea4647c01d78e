"""Cart model: merge by identity, quantity floor, promotion invalidation."""

from decimal import Decimal

import pytest

from restopos.pos.cart import Cart, LineItem, make_key
from restopos.pos.catalog import line_item_for
from restopos.pos.errors import UnknownProductError
from restopos.pos.promotion import rule_from_payload

TEA = LineItem("101", "Tea", Decimal("10"))
HALF = LineItem("301", "Veg Biryani", Decimal("80"), variant_id="1", variant_name="Half")
FULL = LineItem("301", "Veg Biryani", Decimal("140"), variant_id="2", variant_name="Full")

TEN_PERCENT = rule_from_payload({
    "code": "ten", "type": "PERCENT",
    "trigger": {"kind": "ANY"}, "reward": {"percent": 10},
})


class TestKeys:
    def test_base_variant_key(self):
        assert make_key("101") == "101:base"
        assert TEA.key == "101:base"

    def test_variant_key(self):
        assert HALF.key == "301:1"

    def test_quantity_clamped_to_one(self):
        assert LineItem("101", "Tea", Decimal("10"), quantity=0).quantity == 1
        assert LineItem("101", "Tea", Decimal("10"), quantity=-3).quantity == 1

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            LineItem("101", "Tea", Decimal("-1"))

    def test_from_payload(self):
        it = LineItem.from_payload({"code": 101, "name": "Tea", "price": 10, "qty": 2, "variantId": None})
        assert it.key == "101:base"
        assert it.quantity == 2
        assert it.unit_price == Decimal("10")

    @pytest.mark.parametrize("bad", [5, "101", None, ["101"]])
    def test_from_payload_requires_object(self, bad):
        with pytest.raises(ValueError):
            LineItem.from_payload(bad)

    @pytest.mark.parametrize("qty", [0, -1, "two"])
    def test_from_payload_rejects_bad_quantity(self, qty):
        with pytest.raises(ValueError):
            LineItem.from_payload({"code": "101", "price": 10, "qty": qty})


class TestAdd:
    def test_same_identity_merges(self):
        cart = Cart()
        cart.add(TEA, 2)
        cart.add(TEA, 3)
        assert len(cart) == 1
        assert cart.get("101:base").quantity == 5

    def test_variants_are_separate_lines(self):
        cart = Cart()
        cart.add(HALF)
        cart.add(FULL)
        cart.add(HALF)
        assert [it.key for it in cart] == ["301:1", "301:2"]
        assert cart.get("301:1").quantity == 2

    def test_insertion_order_kept(self):
        cart = Cart([FULL, TEA, HALF])
        assert [it.key for it in cart] == ["301:2", "101:base", "301:1"]

    def test_price_fixed_at_add_time(self):
        cart = Cart()
        cart.add(TEA)
        cart.add(LineItem("101", "Tea", Decimal("12")))
        assert cart.get("101:base").unit_price == Decimal("10")
        assert cart.get("101:base").quantity == 2

    def test_subtotal(self):
        cart = Cart()
        cart.add(TEA, 3)
        cart.add(HALF, 1)
        assert cart.subtotal() == Decimal("110")


class TestQuantity:
    def test_increment(self):
        cart = Cart([TEA])
        cart.increment("101:base")
        assert cart.get("101:base").quantity == 2

    def test_decrement_floors_at_one(self):
        cart = Cart([TEA])
        for _ in range(3):
            cart.decrement("101:base")
        assert cart.get("101:base").quantity == 1
        assert len(cart) == 1

    def test_remove(self):
        cart = Cart()
        cart.add(TEA, 5)
        cart.remove("101:base")
        assert cart.is_empty

    def test_unknown_key_is_noop(self):
        cart = Cart([TEA])
        assert cart.increment("999:base") is None
        assert cart.decrement("999:base") is None
        assert cart.remove("999:base") is None
        assert cart.fingerprint() == Cart([TEA]).fingerprint()

    def test_clear(self):
        cart = Cart([TEA, HALF])
        cart.clear()
        assert cart.is_empty


class TestPromotionInvalidation:
    @pytest.mark.parametrize("mutate", [
        lambda c: c.add(TEA),
        lambda c: c.increment("101:base"),
        lambda c: c.decrement("101:base"),
        lambda c: c.remove("101:base"),
        lambda c: c.clear(),
    ])
    def test_mutation_drops_applied_promotion(self, mutate):
        cart = Cart()
        cart.add(TEA, 3)
        result = cart.apply_promotion("TEN", [TEN_PERCENT])
        assert result.valid
        assert cart.promotion is result
        mutate(cart)
        assert cart.promotion is None

    def test_invalid_code_leaves_no_promotion(self):
        cart = Cart([TEA])
        cart.apply_promotion("TEN", [TEN_PERCENT])
        cart.apply_promotion("NOPE", [TEN_PERCENT])
        assert cart.promotion is None

    def test_decrement_at_one_keeps_promotion(self):
        cart = Cart([TEA])
        result = cart.apply_promotion("TEN", [TEN_PERCENT])
        before = cart.fingerprint()
        assert cart.decrement("101:base").quantity == 1
        assert cart.fingerprint() == before
        assert cart.promotion is result

    def test_unknown_key_keeps_promotion(self):
        cart = Cart([TEA])
        cart.apply_promotion("TEN", [TEN_PERCENT])
        cart.increment("999:base")
        assert cart.promotion is not None


class TestCatalogPricing:
    def test_base_product(self, catalog):
        it = line_item_for(catalog, "101", qty=2)
        assert (it.product_name, it.unit_price, it.quantity) == ("Tea", Decimal("10"), 2)

    def test_variant_price_and_name(self, catalog):
        it = line_item_for(catalog, "301", "2")
        assert it.unit_price == Decimal("140")
        assert it.variant_name == "Full"
        assert it.key == "301:2"

    def test_first_variant_is_default(self, catalog):
        assert line_item_for(catalog, "301").variant_name == "Half"

    def test_unknown_product(self, catalog):
        with pytest.raises(UnknownProductError):
            line_item_for(catalog, "999")

    def test_unknown_variant(self, catalog):
        with pytest.raises(UnknownProductError):
            line_item_for(catalog, "301", "42")
