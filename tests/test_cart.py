from decimal import Decimal

import pytest

from storefront.models.cart import Cart, CartItem

from factories import make_product


@pytest.fixture
def cart():
    return Cart()


class TestAddItem:
    def test_new_line(self, cart):
        assert cart.add_item(make_product("p1", 500), 2, "M", "Red") is True
        assert len(cart.items) == 1
        assert cart.subtotal() == Decimal("1000")

    def test_same_product_and_variant_merges(self, cart):
        product = make_product("p1", 500)
        cart.add_item(product, 1, "M", "Red")
        cart.add_item(product, 2, "M", "Red")

        assert len(cart.items) == 1
        assert cart.get_item("p1", "M", "Red").quantity == 3

    def test_different_size_is_a_separate_line(self, cart):
        product = make_product("p1", 500)
        cart.add_item(product, 1, "M", "Red")
        cart.add_item(product, 1, "L", "Red")

        assert len(cart.items) == 2
        assert cart.item_count() == 2

    @pytest.mark.parametrize("quantity", [0, -1, True, 1.5, "2", None])
    def test_invalid_quantity_is_rejected(self, cart, quantity):
        assert cart.add_item(make_product(), quantity) is False
        assert cart.is_empty


class TestUpdateAndRemove:
    def test_update_sets_quantity(self, cart):
        cart.add_item(make_product("p1", 250), 1, "S", "")
        assert cart.update_quantity("p1", "S", "", 4) is True
        assert cart.subtotal() == Decimal("1000")

    def test_update_to_zero_is_rejected(self, cart):
        cart.add_item(make_product("p1", 250), 2)
        assert cart.update_quantity("p1", "", "", 0) is False
        assert cart.get_item("p1").quantity == 2

    def test_update_unknown_line(self, cart):
        cart.add_item(make_product("p1", 250), 2, "M", "")
        assert cart.update_quantity("p1", "L", "", 3) is False

    def test_remove_matching_line_only(self, cart):
        product = make_product("p1", 100)
        cart.add_item(product, 1, "M", "")
        cart.add_item(product, 1, "L", "")

        assert cart.remove_item("p1", "M", "") is True
        assert [item.size for item in cart.items] == ["L"]

    def test_remove_missing_line(self, cart):
        assert cart.remove_item("nope") is False

    def test_clear(self, cart):
        cart.add_item(make_product(), 3)
        cart.clear()
        assert cart.is_empty
        assert cart.subtotal() == Decimal("0")


class TestSubtotal:
    def test_empty_cart(self, cart):
        assert cart.subtotal() == Decimal("0")
        assert cart.item_count() == 0

    def test_unpriced_lines_are_skipped(self, cart):
        cart.add_item(make_product("p1", 300), 2)
        cart.add_item(make_product("p2", "free"), 5)
        cart.add_item(make_product("p3", None), 1)

        assert cart.subtotal() == Decimal("600")
        assert cart.item_count() == 8

    def test_fractional_prices(self, cart):
        cart.add_item(make_product("p1", 99.5), 3)
        assert cart.subtotal() == Decimal("298.5")


class TestSnapshot:
    def test_restores_lines(self, cart):
        cart.add_item(make_product("p1", 500), 2, "M", "Red")
        cart.add_item(make_product("p2", 120), 1)

        restored = Cart.from_snapshot(cart.snapshot())

        assert [item.key for item in restored.items] == [item.key for item in cart.items]
        assert restored.subtotal() == cart.subtotal()

    def test_duplicate_lines_are_merged(self):
        line = {"product": {"_id": "p1", "name": "Tee", "price": 100}, "quantity": 1, "size": "M", "color": ""}
        restored = Cart.from_snapshot([line, dict(line, quantity=2)])

        assert len(restored.items) == 1
        assert restored.items[0].quantity == 3

    def test_malformed_entries(self):
        restored = Cart.from_snapshot([
            "garbage",
            {"product": None, "quantity": 2},
            {"product": {"_id": "p2", "name": "Cap", "price": 80}, "quantity": -4},
        ])

        assert len(restored.items) == 2
        assert restored.get_item("p2").quantity == 1
        assert restored.subtotal() == Decimal("80")


def test_cart_item_line_total():
    item = CartItem(product=make_product("p1", 45), quantity=3)
    assert item.line_total == Decimal("135")
    assert item.to_dict()["line_total"] == "135"
