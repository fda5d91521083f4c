"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """An order was placed at checkout and awaits payment."""

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line snapshots
    subtotal_amount = Float(required=True)
    shipping_amount = Float(required=True)
    tax_amount = Float(required=True)
    total_amount = Float(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    """The payment provider confirmed payment for the order."""

    order_id = Identifier(required=True)
    paypal_payment_id = String(max_length=255)
    paypal_payer_id = String(max_length=255)
    paypal_order_id = String(max_length=255)
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderProcessingStarted:
    order_id = Identifier(required=True)
    started_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderShipped:
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=255)
    carrier = String(max_length=100)
    shipped_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    order_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String(max_length=500)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderRefunded:
    order_id = Identifier(required=True)
    previous_status = String(required=True)
    refund_amount = Float(required=True)
    refunded_at = DateTime(required=True)


@storefront.event(part_of="Order")
class FulfillmentDetailsUpdated:
    """Tracking number, carrier or notes were edited by an administrator."""

    order_id = Identifier(required=True)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    notes = Text()
