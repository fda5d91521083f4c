"""Cart aggregate: the lines a single user intends to buy.

A cart belongs to exactly one user and holds at most one line per product.
It knows nothing about stock; handlers consult the stock guard before asking
the cart to change. Item counts are derived from the lines on every access.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from storefront.cart.events import (
    CartCleared,
    CartCreated,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from storefront.domain import storefront

MAX_LINE_QUANTITY = 999


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1, max_value=MAX_LINE_QUANTITY)
    created_at = DateTime()
    updated_at = DateTime()


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(item.product_id) for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        cart = cls(user_id=user_id, created_at=now, updated_at=now)
        cart.raise_(CartCreated(cart_id=str(cart.id), user_id=str(user_id), created_at=now))
        return cart

    # -------------------------------------------------------------------
    # Derived counts
    # -------------------------------------------------------------------
    @property
    def total_item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def unique_item_count(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def item_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def quantity_of(self, product_id) -> int:
        item = self.item_for(product_id)
        return item.quantity if item else 0

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity):
        """Add ``quantity`` units of a product, merging into an existing line."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        existing = self.item_for(product_id)
        if existing:
            existing.quantity += quantity
            existing.updated_at = now
            new_quantity = existing.quantity
        else:
            self.add_items(
                CartItem(
                    product_id=product_id,
                    quantity=quantity,
                    created_at=now,
                    updated_at=now,
                )
            )
            new_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity_added=quantity,
                new_quantity=new_quantity,
            )
        )

    def update_item_quantity(self, product_id, quantity):
        """Set the held quantity of a line; zero or less removes the line.

        Returns False when the product has no line in this cart.
        """
        item = self.item_for(product_id)
        if item is None:
            return False

        if quantity <= 0:
            self.remove_item(product_id)
            return True

        previous_quantity = item.quantity
        now = datetime.now(UTC)
        item.quantity = quantity
        item.updated_at = now
        self.updated_at = now

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )
        return True

    def remove_item(self, product_id):
        """Remove the line for a product. Removing an absent product is a no-op."""
        item = self.item_for(product_id)
        if item is None:
            return False

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity=item.quantity,
            )
        )
        return True

    def clear(self):
        lines = list(self.items)
        for item in lines:
            self.remove_items(item)

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                lines_removed=len(lines),
                cleared_at=now,
            )
        )

    def is_older_than(self, cutoff) -> bool:
        """Whether the last change to this cart happened before ``cutoff``."""
        last_change = self.updated_at or self.created_at
        if last_change is None:
            return False
        return _as_utc(last_change) < _as_utc(cutoff)


def _as_utc(moment):
    # Relational providers hand back naive datetimes stored in UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)
