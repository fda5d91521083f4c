"""Application tests for the cart view and its validation flags."""

from decimal import Decimal

from protean import current_domain

from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart
from storefront.cart.summary import summarize
from storefront.catalogue.management import UpdateProduct
from storefront.catalogue.stock import OUT_OF_STOCK, UNAVAILABLE


def _add(product_id, quantity, user_id="user-001"):
    current_domain.process(AddToCart(user_id=user_id, product_id=product_id, quantity=quantity), asynchronous=False)


def _summary(user_id="user-001"):
    return summarize(current_domain.repository_for(Cart).find_for_user(user_id))


def _update(product_id, **changes):
    current_domain.process(UpdateProduct(product_id=product_id, **changes), asynchronous=False)


class TestCartSummary:
    def test_totals_over_valid_lines(self, make_product):
        saddle = make_product(price=10.0, stock_quantity=5, sku="SAD-001")
        halter = make_product(name="Halter", price=2.5, stock_quantity=5, sku="HAL-001")
        _add(saddle, 2)
        _add(halter, 3)

        summary = _summary()

        assert summary.total_item_count == 5
        assert summary.unique_item_count == 2
        assert summary.total_amount == Decimal("27.50")
        assert not summary.has_invalid_items

    def test_line_carries_live_product_data(self, make_product):
        saddle = make_product(price=10.0)
        _add(saddle, 2)
        _update(saddle, price=12.0)

        line = _summary().lines[0]
        assert line.unit_price == Decimal("12.00")
        assert line.line_total == Decimal("24.00")
        assert line.product_name == "Trail Saddle"

    def test_inactive_product_flagged(self, make_product):
        saddle = make_product()
        _add(saddle, 1)
        _update(saddle, is_active=False)

        line = _summary().lines[0]
        assert not line.is_valid
        assert line.validation_message == UNAVAILABLE
        assert not line.product_active

    def test_out_of_stock_flagged_and_excluded_from_total(self, make_product):
        saddle = make_product(price=10.0, sku="SAD-001")
        halter = make_product(name="Halter", price=2.5, sku="HAL-001")
        _add(saddle, 1)
        _add(halter, 2)
        _update(saddle, stock_quantity=0)

        summary = _summary()
        assert summary.has_invalid_items
        assert [line.validation_message for line in summary.invalid_lines] == [OUT_OF_STOCK]
        assert summary.total_amount == Decimal("5.00")

    def test_quantity_over_stock_flagged(self, make_product):
        saddle = make_product(stock_quantity=5)
        _add(saddle, 4)
        _update(saddle, stock_quantity=2)

        line = _summary().lines[0]
        assert not line.quantity_available
        assert line.validation_message == "Requested quantity (4) exceeds available stock (2)"
        assert line.available_stock == 2

    def test_summary_does_not_change_cart(self, make_product):
        saddle = make_product()
        _add(saddle, 4)
        _update(saddle, stock_quantity=0)

        _summary()

        assert current_domain.repository_for(Cart).find_for_user("user-001").quantity_of(saddle) == 4
