"""Shared BDD fixtures and step definitions for the storefront."""

import json
from decimal import Decimal

import pytest
from protean.exceptions import InvalidOperationError, ValidationError
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then, when

from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart
from storefront.catalogue.management import AddProduct, UpdateProduct
from storefront.catalogue.product import Product
from storefront.order.creation import PlaceOrderFromCart
from storefront.order.order import Order

CUSTOMER_ID = "user-bdd-001"

SHIPPING_ADDRESS = {
    "name": "Jane Rider",
    "address_line1": "1 Stable Lane",
    "city": "Lexington",
    "state": "KY",
    "postal_code": "40507",
    "country": "US",
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured refusals."""
    return {"exc": None}


@pytest.fixture()
def products():
    """Product ids keyed by the name a scenario gave them."""
    return {}


@pytest.fixture()
def placed():
    """Id of the order the scenario placed."""
    return {"order_id": None}


def _checkout(placed, error, payment_id=None):
    command = PlaceOrderFromCart(
        user_id=CUSTOMER_ID,
        shipping_address=json.dumps(SHIPPING_ADDRESS),
        paypal_payment_id=payment_id,
    )
    try:
        placed["order_id"] = current_domain.process(command, asynchronous=False)
    except (ValidationError, InvalidOperationError) as exc:
        error["exc"] = exc


def _cart():
    return current_domain.repository_for(Cart).find_for_user(CUSTOMER_ID)


def _order(placed):
    return current_domain.repository_for(Order).get(placed["order_id"])


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price} with {stock:d} in stock'))
def product_in_catalogue(products, name, price, stock):
    products[name] = current_domain.process(
        AddProduct(name=name, price=float(price), stock_quantity=stock),
        asynchronous=False,
    )


@given(parsers.cfparse('the customer has {quantity:d} of "{name}" in the cart'))
def customer_has_in_cart(products, quantity, name):
    current_domain.process(
        AddToCart(user_id=CUSTOMER_ID, product_id=products[name], quantity=quantity),
        asynchronous=False,
    )


@given(parsers.cfparse('the customer checks out with PayPal payment "{payment_id}"'))
def customer_checked_out_with_payment(placed, error, payment_id):
    _checkout(placed, error, payment_id)
    assert error["exc"] is None


# ---------------------------------------------------------------------------
# Shared When steps
# ---------------------------------------------------------------------------
@when("the customer checks out")
def customer_checks_out(placed, error):
    _checkout(placed, error)


@when(parsers.cfparse('"{name}" stock drops to {stock:d}'))
def stock_drops(products, name, stock):
    current_domain.process(UpdateProduct(product_id=products[name], stock_quantity=stock), asynchronous=False)


@when(parsers.cfparse('"{name}" sells out'))
def product_sells_out(products, name):
    current_domain.process(UpdateProduct(product_id=products[name], stock_quantity=0), asynchronous=False)


# ---------------------------------------------------------------------------
# Shared Then steps
# ---------------------------------------------------------------------------
@then(parsers.re(r"the cart has (?P<count>\d+) lines?"), converters={"count": int})
def cart_has_lines(count):
    cart = _cart()
    assert (cart.unique_item_count if cart else 0) == count


@then(parsers.cfparse('the cart holds {quantity:d} of "{name}"'))
def cart_holds(products, quantity, name):
    assert _cart().quantity_of(products[name]) == quantity


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def product_stock_is(products, name, stock):
    assert current_domain.repository_for(Product).get(products[name]).stock_quantity == stock


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(placed, status):
    assert _order(placed).status == status


@then(parsers.cfparse("the order total is {amount}"))
def order_total_is(placed, amount):
    total = Decimal(str(_order(placed).totals.total_amount)).quantize(Decimal("0.01"))
    assert total == Decimal(amount)
