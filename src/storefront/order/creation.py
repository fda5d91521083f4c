"""Order placement: commands and handler.

Both entry points price lines from the catalogue, run every line through the
stock guard before anything is written, then place the order, take the stock
and empty the user's cart in one unit of work.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.catalogue.stock import ensure_checkout_line, find_product, get_product
from storefront.domain import storefront
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    """Place an order for an explicit list of products."""

    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity}
    shipping_address = Text(required=True)  # JSON: ShippingAddress fields
    shipping_amount = Float(default=0.0, min_value=0.0)
    tax_amount = Float(default=0.0, min_value=0.0)
    paypal_payment_id = String(max_length=255)
    paypal_payer_id = String(max_length=255)
    paypal_order_id = String(max_length=255)


@storefront.command(part_of="Order")
class PlaceOrderFromCart:
    """Check out the user's cart."""

    user_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: ShippingAddress fields
    paypal_payment_id = String(max_length=255)
    paypal_payer_id = String(max_length=255)
    paypal_order_id = String(max_length=255)


def _load_json(value):
    return json.loads(value) if isinstance(value, str) else value


def _priced_lines(requested, from_cart=False):
    """Check every requested (product_id, quantity) and snapshot its product.

    An unknown product is not found for an explicit item list. A cart line
    whose product has left the catalogue is an invalid line instead.

    Returns the line snapshots and the products to debit, in request order.
    Nothing is written here, so a failing line leaves all stock untouched.
    """
    lines = []
    products = []
    for product_id, quantity in requested:
        product = find_product(product_id) if from_cart else get_product(product_id)
        if product is None:
            raise ValidationError({"items": [f"Invalid product in cart: {product_id}"]})
        ensure_checkout_line(product, quantity)
        lines.append(
            {
                "product_id": str(product.id),
                "product_name": product.name,
                "sku": product.sku,
                "brand": product.brand,
                "model": product.model,
                "unit_price": product.price,
                "quantity": quantity,
            }
        )
        products.append((product, quantity))
    return lines, products


def _ensure_payment_id_unused(payment_id):
    if payment_id and current_domain.repository_for(Order).find_by_payment_id(payment_id) is not None:
        raise ValidationError({"paypal_payment_id": ["Payment id is already attached to another order"]})


def _merge_requested(items):
    """Fold repeated products in an explicit item list into one quantity each."""
    merged = {}
    for item in items:
        quantity = int(item.get("quantity") or 0)
        if quantity < 1:
            raise ValidationError({"items": ["Quantity must be at least 1"]})
        product_id = str(item["product_id"])
        merged[product_id] = merged.get(product_id, 0) + quantity
    return list(merged.items())


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = _load_json(command.items) or []
        if not items:
            raise ValidationError({"items": ["Order items are required"]})

        return self._place(
            user_id=command.user_id,
            requested=_merge_requested(items),
            shipping_address=_load_json(command.shipping_address),
            shipping_amount=command.shipping_amount or 0.0,
            tax_amount=command.tax_amount or 0.0,
            command=command,
        )

    @handle(PlaceOrderFromCart)
    def place_order_from_cart(self, command):
        cart = current_domain.repository_for(Cart).find_for_user(command.user_id)
        if cart is None:
            raise ObjectNotFoundError({"cart": ["Cart not found"]})
        if cart.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})

        return self._place(
            user_id=command.user_id,
            requested=[(str(item.product_id), item.quantity) for item in cart.items],
            from_cart=True,
            shipping_address=_load_json(command.shipping_address),
            shipping_amount=0.0,
            tax_amount=0.0,
            command=command,
        )

    def _place(self, user_id, requested, shipping_address, shipping_amount, tax_amount, command, from_cart=False):
        _ensure_payment_id_unused(command.paypal_payment_id)
        lines, products = _priced_lines(requested, from_cart=from_cart)

        order = Order.place(
            user_id=user_id,
            lines=lines,
            shipping_address=shipping_address,
            shipping_amount=shipping_amount,
            tax_amount=tax_amount,
            paypal_payment_id=command.paypal_payment_id,
            paypal_payer_id=command.paypal_payer_id,
            paypal_order_id=command.paypal_order_id,
        )
        current_domain.repository_for(Order).add(order)

        product_repo = current_domain.repository_for(Product)
        for product, quantity in products:
            product.deduct_stock(quantity)
            product_repo.add(product)

        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.find_for_user(user_id)
        if cart is not None and not cart.is_empty:
            cart.clear()
            cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            user_id=str(user_id),
            line_count=len(lines),
            total_amount=order.totals.total_amount,
        )
        return str(order.id)
