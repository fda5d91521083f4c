"""Order aggregate: the financial record created at checkout.

State Machine:
    PENDING -> PAID -> PROCESSING -> SHIPPED -> DELIVERED
    PENDING/PAID -> CANCELLED
    PAID/PROCESSING/SHIPPED/DELIVERED -> REFUNDED

CANCELLED and REFUNDED are terminal. Each transition is a method that checks
the table before touching any field, so a rejected transition leaves the order
exactly as it was. Line items and the shipping address are snapshots taken at
checkout and never follow later product or profile edits.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.order.events import (
    FulfillmentDetailsUpdated,
    OrderCancelled,
    OrderDelivered,
    OrderPaid,
    OrderPlaced,
    OrderProcessingStarted,
    OrderRefunded,
    OrderShipped,
)
from storefront.shared.money import (
    has_at_most_two_decimals,
    line_total,
    to_amount,
    to_decimal,
    total_of,
)


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"

    @property
    def is_paid(self) -> bool:
        return self in _PAID_STATES

    @property
    def is_shippable(self) -> bool:
        return self in _SHIPPABLE_STATES

    @property
    def is_completed(self) -> bool:
        return self is OrderStatus.DELIVERED

    @property
    def is_cancellable(self) -> bool:
        return self in _CANCELLABLE_STATES


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.PROCESSING, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.REFUNDED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.REFUNDED},
    OrderStatus.DELIVERED: {OrderStatus.REFUNDED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.REFUNDED: set(),  # Terminal
}

_PAID_STATES = {
    OrderStatus.PAID,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
}

_SHIPPABLE_STATES = {OrderStatus.PAID, OrderStatus.PROCESSING}

_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.PAID}

DEFAULT_PAYMENT_METHOD = "PAYPAL"


def parse_status(value) -> OrderStatus:
    """Resolve a user-supplied status name, case-insensitively."""
    try:
        return OrderStatus(str(value).strip().upper())
    except ValueError as exc:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError({"status": [f"Unknown order status '{value}'. Expected one of: {allowed}"]}) from exc


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, as entered at checkout.

    Independent of the user's profile: editing a saved address later never
    rewrites the address of an order already placed.
    """

    name = String(required=True, max_length=200)
    address_line1 = String(required=True, max_length=255)
    address_line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(max_length=30)

    def one_line(self) -> str:
        parts = [
            self.address_line1,
            self.address_line2,
            self.city,
            " ".join(p for p in (self.state, self.postal_code) if p),
            self.country,
        ]
        return ", ".join(p for p in parts if p)


@storefront.value_object(part_of="Order")
class OrderTotals:
    """Subtotal, shipping, tax and their sum, all in cents precision."""

    subtotal_amount = Float(required=True, min_value=0.0)
    shipping_amount = Float(default=0.0, min_value=0.0)
    tax_amount = Float(default=0.0, min_value=0.0)
    total_amount = Float(required=True, min_value=0.0)

    @invariant.post
    def amounts_have_cent_precision(self):
        for name in ("subtotal_amount", "shipping_amount", "tax_amount", "total_amount"):
            if not has_at_most_two_decimals(getattr(self, name)):
                raise ValidationError({name: ["Amounts must have at most 2 decimal places"]})

    @invariant.post
    def total_is_sum_of_components(self):
        expected = total_of([self.subtotal_amount, self.shipping_amount, self.tax_amount])
        if to_decimal(self.total_amount) != expected:
            raise ValidationError({"total_amount": ["Total must equal subtotal plus shipping plus tax"]})

    @classmethod
    def compute(cls, subtotal, shipping=0, tax=0):
        for name, value in (("shipping_amount", shipping), ("tax_amount", tax)):
            if not has_at_most_two_decimals(value):
                raise ValidationError({name: ["Amounts must have at most 2 decimal places"]})
        total = total_of([subtotal, shipping or 0, tax or 0])
        return cls(
            subtotal_amount=to_amount(subtotal),
            shipping_amount=to_amount(shipping),
            tax_amount=to_amount(tax),
            total_amount=to_amount(total),
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased line, frozen at checkout.

    Keeps the product id for analytics, plus its own copy of the display
    fields and price so the line reads the same after the product is renamed,
    repriced or removed.
    """

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=200)
    sku = String(max_length=50)
    brand = String(max_length=100)
    model = String(max_length=100)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1, max_value=999)
    total_price = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    totals = ValueObject(OrderTotals)
    payment_method = String(max_length=20, default=DEFAULT_PAYMENT_METHOD)
    paypal_payment_id = String(max_length=255)
    paypal_payer_id = String(max_length=255)
    paypal_order_id = String(max_length=255)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    notes = Text()
    created_at = DateTime()
    updated_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()

    @invariant.post
    def shipped_orders_carry_shipped_at(self):
        if self.status in (OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value) and self.shipped_at is None:
            raise ValidationError({"shipped_at": ["Shipped orders must record when they shipped"]})

    @invariant.post
    def delivered_orders_carry_delivered_at(self):
        if self.status == OrderStatus.DELIVERED.value and self.delivered_at is None:
            raise ValidationError({"delivered_at": ["Delivered orders must record when they were delivered"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        lines,
        shipping_address,
        shipping_amount=0,
        tax_amount=0,
        paypal_payment_id=None,
        paypal_payer_id=None,
        paypal_order_id=None,
    ):
        """Create a PENDING order from priced line snapshots.

        Args:
            user_id: The owner of the order.
            lines: List of dicts with product_id, product_name, sku, brand,
                   model, unit_price and quantity, as read from the catalogue.
            shipping_address: Dict with the ShippingAddress fields.
            shipping_amount: Shipping charge added to the subtotal.
            tax_amount: Tax added to the subtotal.
        """
        if not lines:
            raise ValidationError({"items": ["An order must contain at least one item"]})

        items = [
            OrderItem(
                product_id=line["product_id"],
                product_name=line["product_name"],
                sku=line.get("sku"),
                brand=line.get("brand"),
                model=line.get("model"),
                unit_price=to_amount(line["unit_price"]),
                quantity=line["quantity"],
                total_price=to_amount(line_total(line["unit_price"], line["quantity"])),
            )
            for line in lines
        ]
        subtotal = total_of(line_total(line["unit_price"], line["quantity"]) for line in lines)
        totals = OrderTotals.compute(subtotal, shipping_amount or 0, tax_amount or 0)

        now = datetime.now(UTC)
        order = cls(
            user_id=user_id,
            status=OrderStatus.PENDING.value,
            items=items,
            shipping_address=ShippingAddress(**shipping_address),
            totals=totals,
            payment_method=DEFAULT_PAYMENT_METHOD,
            paypal_payment_id=paypal_payment_id,
            paypal_payer_id=paypal_payer_id,
            paypal_order_id=paypal_order_id,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                items=json.dumps(
                    [
                        {
                            "product_id": str(item.product_id),
                            "product_name": item.product_name,
                            "quantity": item.quantity,
                            "unit_price": item.unit_price,
                        }
                        for item in items
                    ]
                ),
                subtotal_amount=totals.subtotal_amount,
                shipping_amount=totals.shipping_amount,
                tax_amount=totals.tax_amount,
                total_amount=totals.total_amount,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived predicates (never stored)
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def is_paid(self) -> bool:
        return self.current_status.is_paid

    @property
    def is_shippable(self) -> bool:
        return self.current_status.is_shippable

    @property
    def is_completed(self) -> bool:
        return self.current_status.is_completed

    @property
    def is_cancellable(self) -> bool:
        return self.current_status.is_cancellable

    @property
    def total_item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def full_shipping_address(self) -> str:
        return self.shipping_address.one_line() if self.shipping_address else ""

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in _VALID_TRANSITIONS[self.current_status]

    def _assert_can_transition(self, target: OrderStatus):
        if not self.can_transition_to(target):
            raise InvalidOperationError(
                f"Cannot transition order from {self.current_status.value} to {target.value}"
            )

    def _stamp_shipped(self, moment):
        if self.shipped_at is None:
            self.shipped_at = moment

    def _stamp_delivered(self, moment):
        if self.delivered_at is None:
            self.delivered_at = moment

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_payment(self, payment_id, payer_id=None, provider_order_id=None):
        """Attach provider correlation ids and move PENDING -> PAID."""
        self._assert_can_transition(OrderStatus.PAID)

        now = datetime.now(UTC)
        self.paypal_payment_id = payment_id
        if payer_id:
            self.paypal_payer_id = payer_id
        if provider_order_id:
            self.paypal_order_id = provider_order_id
        self.status = OrderStatus.PAID.value
        self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                paypal_payment_id=self.paypal_payment_id,
                paypal_payer_id=self.paypal_payer_id,
                paypal_order_id=self.paypal_order_id,
                paid_at=now,
            )
        )

    def mark_paid(self):
        """PENDING -> PAID using the correlation ids already on the order."""
        self.record_payment(self.paypal_payment_id)

    # -------------------------------------------------------------------
    # Fulfillment
    # -------------------------------------------------------------------
    def mark_processing(self):
        self._assert_can_transition(OrderStatus.PROCESSING)

        now = datetime.now(UTC)
        self.status = OrderStatus.PROCESSING.value
        self.updated_at = now

        self.raise_(OrderProcessingStarted(order_id=str(self.id), started_at=now))

    def ship(self, tracking_number=None, carrier=None):
        """PROCESSING -> SHIPPED. ``shipped_at`` is written once and kept."""
        self._assert_can_transition(OrderStatus.SHIPPED)

        tracking = tracking_number or self.tracking_number
        if not tracking:
            raise ValidationError({"tracking_number": ["A tracking number is required to ship an order"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.SHIPPED.value
            self.tracking_number = tracking
            if carrier:
                self.carrier = carrier
            self._stamp_shipped(now)
            self.updated_at = now

        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                tracking_number=self.tracking_number,
                carrier=self.carrier,
                shipped_at=self.shipped_at,
            )
        )

    def deliver(self):
        """SHIPPED -> DELIVERED. ``delivered_at`` is written once and kept."""
        self._assert_can_transition(OrderStatus.DELIVERED)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.DELIVERED.value
            self._stamp_delivered(now)
            self.updated_at = now

        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=self.delivered_at))

    def update_fulfillment_details(self, tracking_number=None, carrier=None, notes=None):
        """Edit tracking number, carrier or notes without changing status."""
        changes = {
            "tracking_number": tracking_number,
            "carrier": carrier,
            "notes": notes,
        }
        changes = {k: v for k, v in changes.items() if v is not None and v != getattr(self, k)}
        if not changes:
            return

        for field_name, value in changes.items():
            setattr(self, field_name, value)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            FulfillmentDetailsUpdated(
                order_id=str(self.id),
                tracking_number=self.tracking_number,
                carrier=self.carrier,
                notes=self.notes,
            )
        )

    # -------------------------------------------------------------------
    # Cancellation & Refund
    # -------------------------------------------------------------------
    def cancel(self, reason=None):
        current = self.current_status
        if not current.is_cancellable:
            raise InvalidOperationError(
                f"Order cannot be cancelled in {current.value} status. "
                f"Cancellation is only allowed from: {', '.join(sorted(s.value for s in _CANCELLABLE_STATES))}"
            )

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=current.value,
                reason=reason,
                cancelled_at=now,
            )
        )

    def refund(self):
        current = self.current_status
        self._assert_can_transition(OrderStatus.REFUNDED)

        now = datetime.now(UTC)
        self.status = OrderStatus.REFUNDED.value
        self.updated_at = now

        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                previous_status=current.value,
                refund_amount=self.totals.total_amount,
                refunded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Dispatch by target status (admin updates, provider webhooks)
    # -------------------------------------------------------------------
    def transition_to(self, target: OrderStatus, tracking_number=None, carrier=None, reason=None):
        if target is OrderStatus.PAID:
            self.mark_paid()
        elif target is OrderStatus.PROCESSING:
            self.mark_processing()
        elif target is OrderStatus.SHIPPED:
            self.ship(tracking_number=tracking_number, carrier=carrier)
        elif target is OrderStatus.DELIVERED:
            self.deliver()
        elif target is OrderStatus.CANCELLED:
            self.cancel(reason=reason)
        elif target is OrderStatus.REFUNDED:
            self.refund()
        else:
            self._assert_can_transition(target)
