"""Payment completion: record PayPal's ids on the order and mark it paid."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CompletePayment:
    order_id = Identifier(required=True)
    payment_id = String(required=True, max_length=255)
    payer_id = String(max_length=255)
    provider_order_id = String(max_length=255)


@storefront.command_handler(part_of=Order)
class CompletePaymentHandler:
    @handle(CompletePayment)
    def complete_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        holder = repo.find_by_payment_id(command.payment_id)
        if holder is not None and str(holder.id) != str(order.id):
            logger.warning(
                "Payment id reuse rejected",
                order_id=str(order.id),
                payment_id=command.payment_id,
                held_by=str(holder.id),
            )
            raise ValidationError({"payment_id": ["Payment id is already attached to another order"]})

        order.record_payment(
            payment_id=command.payment_id,
            payer_id=command.payer_id,
            provider_order_id=command.provider_order_id,
        )
        repo.add(order)
        logger.info("Payment completed", order_id=str(order.id), payment_id=command.payment_id)
