"""Provider webhook: translate PayPal's status vocabulary into order transitions.

The provider's status string is mapped onto :class:`OrderStatus` and the
matching transition is applied. Unknown statuses, and known ones whose
transition the state machine does not allow from the order's current
status, are rejected without touching the order.
"""

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ObjectNotFoundError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.stock import release
from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)

PROVIDER_STATUS_MAP = {
    "completed": OrderStatus.PAID,
    "cancelled": OrderStatus.CANCELLED,
    "canceled": OrderStatus.CANCELLED,
    "voided": OrderStatus.CANCELLED,
    "refunded": OrderStatus.REFUNDED,
    "reversed": OrderStatus.REFUNDED,
}


def map_provider_status(provider_status) -> OrderStatus:
    status = PROVIDER_STATUS_MAP.get(str(provider_status or "").strip().lower())
    if status is None:
        raise InvalidOperationError(f"Unsupported payment status: {provider_status}")
    return status


@storefront.command(part_of="Order")
class ProcessPaymentWebhook:
    payment_id = String(required=True, max_length=255)
    provider_status = Text(required=True)


@storefront.command_handler(part_of=Order)
class PaymentWebhookHandler:
    @handle(ProcessPaymentWebhook)
    def process_payment_webhook(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find_by_payment_id(command.payment_id)
        if order is None:
            raise ObjectNotFoundError({"payment_id": [f"No order for payment id {command.payment_id}"]})

        target = map_provider_status(command.provider_status)
        previous = order.current_status
        order.transition_to(target, reason=f"Payment {command.provider_status.lower()} by provider")
        if target in (OrderStatus.CANCELLED, OrderStatus.REFUNDED):
            release(order.items)
        repo.add(order)

        logger.info(
            "Payment webhook applied",
            order_id=str(order.id),
            payment_id=command.payment_id,
            provider_status=command.provider_status,
            previous_status=previous.value,
            status=order.status,
        )
        return order.status
