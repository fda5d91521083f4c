"""Tests for Order placement, snapshots, totals and derived fields."""

import json

import pytest
from protean.exceptions import ValidationError

from storefront.order.events import OrderPlaced
from storefront.order.order import DEFAULT_PAYMENT_METHOD, Order, OrderStatus, OrderTotals

SHIPPING = {
    "name": "Jane Rider",
    "address_line1": "1 Stable Lane",
    "address_line2": "Barn 4",
    "city": "Lexington",
    "state": "KY",
    "postal_code": "40507",
    "country": "US",
}


def _line(**overrides):
    line = {
        "product_id": "prod-001",
        "product_name": "Trail Saddle",
        "sku": "SAD-001",
        "brand": "Circle Y",
        "model": "Flex2",
        "unit_price": 10.0,
        "quantity": 2,
    }
    line.update(overrides)
    return line


def _place(lines=None, **kwargs):
    return Order.place(
        user_id="user-001",
        lines=lines or [_line()],
        shipping_address=SHIPPING,
        **kwargs,
    )


class TestOrderPlacement:
    def test_place_starts_pending(self):
        order = _place()
        assert order.status == OrderStatus.PENDING.value

    def test_place_defaults_payment_method(self):
        order = _place()
        assert order.payment_method == DEFAULT_PAYMENT_METHOD

    def test_place_snapshots_line_fields(self):
        order = _place()
        item = order.items[0]

        assert item.product_name == "Trail Saddle"
        assert item.sku == "SAD-001"
        assert item.brand == "Circle Y"
        assert item.model == "Flex2"
        assert item.unit_price == 10.0
        assert item.total_price == 20.0

    def test_place_computes_totals(self):
        order = _place(
            lines=[_line(), _line(product_id="prod-002", unit_price=5.25, quantity=3)],
            shipping_amount=4.99,
            tax_amount=1.5,
        )

        assert order.totals.subtotal_amount == 35.75
        assert order.totals.shipping_amount == 4.99
        assert order.totals.tax_amount == 1.5
        assert order.totals.total_amount == 42.24

    def test_place_sums_without_float_noise(self):
        order = _place(lines=[_line(unit_price=0.1, quantity=3)], shipping_amount=0.2)
        assert order.totals.subtotal_amount == 0.3
        assert order.totals.total_amount == 0.5

    def test_place_requires_lines(self):
        with pytest.raises(ValidationError) as exc_info:
            Order.place(user_id="user-001", lines=[], shipping_address=SHIPPING)
        assert "items" in exc_info.value.messages

    def test_place_rejects_sub_cent_shipping(self):
        with pytest.raises(ValidationError) as exc_info:
            _place(shipping_amount=1.005)
        assert "shipping_amount" in exc_info.value.messages

    def test_place_keeps_payment_ids(self):
        order = _place(paypal_payment_id="PAY-1", paypal_payer_id="PAYER-1", paypal_order_id="PP-ORD-1")
        assert order.paypal_payment_id == "PAY-1"
        assert order.paypal_payer_id == "PAYER-1"
        assert order.paypal_order_id == "PP-ORD-1"

    def test_place_raises_order_placed(self):
        order = _place()
        event = order._events[0]

        assert isinstance(event, OrderPlaced)
        assert event.total_amount == 20.0
        assert json.loads(event.items)[0]["product_id"] == "prod-001"


class TestDerivedFields:
    def test_total_item_count(self):
        order = _place(lines=[_line(quantity=2), _line(product_id="prod-002", quantity=3)])
        assert order.total_item_count == 5

    def test_full_shipping_address(self):
        order = _place()
        assert order.full_shipping_address == "1 Stable Lane, Barn 4, Lexington, KY 40507, US"

    def test_full_shipping_address_skips_blank_parts(self):
        address = dict(SHIPPING, address_line2=None, state=None)
        order = Order.place(user_id="user-001", lines=[_line()], shipping_address=address)
        assert order.full_shipping_address == "1 Stable Lane, Lexington, 40507, US"


class TestOrderTotals:
    def test_compute_sums_components(self):
        totals = OrderTotals.compute(10, 2.5, 0.75)
        assert totals.total_amount == 13.25

    def test_total_must_equal_sum(self):
        with pytest.raises(ValidationError) as exc_info:
            OrderTotals(subtotal_amount=10.0, shipping_amount=1.0, tax_amount=0.0, total_amount=12.0)
        assert "total_amount" in exc_info.value.messages

    def test_amounts_limited_to_cents(self):
        with pytest.raises(ValidationError):
            OrderTotals(subtotal_amount=10.001, shipping_amount=0.0, tax_amount=0.0, total_amount=10.001)

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            OrderTotals.compute(10, -1, 0)
