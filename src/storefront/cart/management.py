"""Cart lifecycle: opening a user's cart and clearing it."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class OpenCart:
    """Return the user's cart id, creating an empty cart when there is none."""

    user_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class CartLifecycleHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.find_for_user(command.user_id)
        if cart is None:
            cart = Cart.create(command.user_id)
            repo.add(cart)
            logger.info("Cart created", cart_id=str(cart.id), user_id=str(command.user_id))
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.find_for_user(command.user_id) or Cart.create(command.user_id)
        cart.clear()
        repo.add(cart)
        logger.info("Cart cleared", cart_id=str(cart.id), user_id=str(command.user_id))
        return str(cart.id)
