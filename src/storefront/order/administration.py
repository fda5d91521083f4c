"""Administrative order updates: move status and edit fulfillment details.

A requested status equal to the current one is not a transition; only the
tracking number, carrier and notes are applied. Any other status goes through
the state machine like every other caller.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.stock import release
from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus, parse_status

logger = structlog.get_logger(__name__)

_RELEASING_STATES = {OrderStatus.CANCELLED, OrderStatus.REFUNDED}
_MAX_REASON_LENGTH = 500


@storefront.command(part_of="Order")
class UpdateOrder:
    order_id = Identifier(required=True)
    status = String(max_length=20)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    notes = Text()


@storefront.command_handler(part_of=Order)
class UpdateOrderHandler:
    @handle(UpdateOrder)
    def update_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.current_status
        target = parse_status(command.status) if command.status else previous

        if target is not previous:
            order.transition_to(
                target,
                tracking_number=command.tracking_number,
                carrier=command.carrier,
                reason=command.notes[:_MAX_REASON_LENGTH] if command.notes else None,
            )
            if target in _RELEASING_STATES:
                release(order.items)

        order.update_fulfillment_details(
            tracking_number=command.tracking_number,
            carrier=command.carrier,
            notes=command.notes,
        )
        repo.add(order)

        logger.info(
            "Order updated by administrator",
            order_id=str(order.id),
            previous_status=previous.value,
            status=order.status,
        )
