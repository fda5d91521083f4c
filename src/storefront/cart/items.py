"""Cart line management: commands and handler.

Every command names the acting user explicitly; the HTTP layer resolves it
from the authenticated session.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.stock import ensure_can_add, ensure_quantity_available, get_product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class UpdateCartItemQuantity:
    """Set a line's quantity. A quantity of zero or less removes the line."""

    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        product = get_product(command.product_id)

        cart = repo.find_for_user(command.user_id) or Cart.create(command.user_id)
        ensure_can_add(product, command.quantity, cart.quantity_of(command.product_id))

        cart.add_item(product_id=command.product_id, quantity=command.quantity)
        repo.add(cart)

        logger.info(
            "Item added to cart",
            cart_id=str(cart.id),
            user_id=str(command.user_id),
            product_id=str(command.product_id),
            quantity=command.quantity,
        )
        return str(cart.id)

    @handle(UpdateCartItemQuantity)
    def update_cart_item_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.find_for_user(command.user_id)
        if cart is None:
            raise ObjectNotFoundError({"cart": ["Cart not found"]})
        if cart.item_for(command.product_id) is None:
            raise ObjectNotFoundError({"product_id": [f"Product not found in cart: {command.product_id}"]})

        if command.quantity > 0:
            ensure_quantity_available(get_product(command.product_id), command.quantity)

        cart.update_item_quantity(command.product_id, command.quantity)
        repo.add(cart)

        logger.info(
            "Cart item quantity updated",
            cart_id=str(cart.id),
            product_id=str(command.product_id),
            quantity=command.quantity,
        )
        return str(cart.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.find_for_user(command.user_id)
        if cart is None:
            return None

        if cart.remove_item(command.product_id):
            repo.add(cart)
            logger.info("Item removed from cart", cart_id=str(cart.id), product_id=str(command.product_id))
        return str(cart.id)
