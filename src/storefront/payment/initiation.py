"""Payment initiation: describe an order to the provider's checkout flow.

Read-only. The order is looked up and priced, never changed.
"""

import structlog
from protean.utils.globals import current_domain

from storefront.order.order import Order
from storefront.payment.gateway import get_gateway
from storefront.payment.gateway.port import PaymentDescriptor
from storefront.shared.money import to_decimal
from storefront.utils import settings

logger = structlog.get_logger(__name__)


def initiate_payment(order_id) -> PaymentDescriptor:
    order = current_domain.repository_for(Order).get(order_id)
    descriptor = get_gateway().describe_checkout(
        order_id=str(order.id),
        amount=to_decimal(order.totals.total_amount),
        currency=settings.STORE_CURRENCY,
    )
    logger.info("Payment initiated", order_id=str(order.id), amount=str(descriptor.amount))
    return descriptor
