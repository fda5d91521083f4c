"""Stock guard: inline checks of a requested quantity against live stock.

These run inside the unit of work of the calling command handler. They read
the product, decide, and leave any write to the caller, so two concurrent
requests for the last unit are serialized only as far as the storage layer's
isolation level allows.
"""

import structlog
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product

logger = structlog.get_logger(__name__)

OUT_OF_STOCK = "Product is out of stock"
UNAVAILABLE = "Product is no longer available"
NOT_FOUND = "Product not found"


def get_product(product_id) -> Product:
    """Load a product or fail with a not-found error naming the id."""
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError as exc:
        raise ObjectNotFoundError({"product_id": [f"{NOT_FOUND}: {product_id}"]}) from exc


def find_product(product_id) -> Product | None:
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        return None


def ensure_can_add(product: Product, requested: int, already_in_cart: int = 0) -> None:
    """Guard for adding ``requested`` units on top of ``already_in_cart``."""
    if not product.is_active:
        raise InvalidOperationError(UNAVAILABLE)
    if not product.is_in_stock:
        raise InvalidOperationError(OUT_OF_STOCK)

    available = product.stock_quantity
    if requested > available:
        raise ValidationError({"quantity": [f"Requested quantity exceeds available stock: {available}"]})
    if requested + already_in_cart > available:
        raise ValidationError({"quantity": [f"Total quantity exceeds available stock: {available}"]})


def ensure_quantity_available(product: Product, quantity: int) -> None:
    if quantity > (product.stock_quantity or 0):
        raise ValidationError({"quantity": [f"Requested quantity exceeds available stock: {product.stock_quantity}"]})


def line_issue(product: Product | None, quantity: int) -> str | None:
    """Human-readable reason a held quantity can no longer be bought, or None."""
    if product is None:
        return NOT_FOUND
    if not product.is_active:
        return UNAVAILABLE
    if not product.is_in_stock:
        return OUT_OF_STOCK
    if quantity > product.stock_quantity:
        return f"Requested quantity ({quantity}) exceeds available stock ({product.stock_quantity})"
    return None


def ensure_checkout_line(product: Product, quantity: int) -> None:
    """Guard applied to every line when an order is placed."""
    if not product.is_active:
        raise ValidationError({"items": [f"{UNAVAILABLE}: {product.name}"]})
    if not product.is_in_stock:
        raise ValidationError({"items": [f"{OUT_OF_STOCK}: {product.name}"]})
    if quantity > product.stock_quantity:
        raise ValidationError({"items": [f"Requested quantity exceeds available stock for product: {product.name}"]})


def release(lines) -> None:
    """Return the quantities of ``lines`` (anything with product_id and quantity) to stock.

    Lines whose product has since been removed from the catalogue are skipped.
    """
    repo = current_domain.repository_for(Product)
    for line in lines:
        product = find_product(line.product_id)
        if product is None:
            logger.warning("Cannot restock missing product", product_id=str(line.product_id))
            continue
        product.restore_stock(line.quantity)
        repo.add(product)
